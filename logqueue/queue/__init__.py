"""Queue infrastructure for RabbitMQ communication."""

from logqueue.queue.connection import LogClient
from logqueue.queue.provisioner import declare_queue
from logqueue.queue.publisher import publish
from logqueue.queue.consumer import AckOutcome, AckToken, consume

__all__ = [
    "LogClient",
    "declare_queue",
    "publish",
    "AckOutcome",
    "AckToken",
    "consume",
]
