"""Queue declaration."""

import pika
from pika.adapters.blocking_connection import BlockingChannel
from logqueue.errors import QueueDeclarationError
from logqueue.logger import setup_logger

logger = setup_logger(__name__)


def declare_queue(channel: BlockingChannel, queue_name: str) -> None:
    """
    Declare a durable, shared, non-auto-deleted queue.

    Declaring an existing queue with the same parameters is a no-op on the
    broker. A conflicting declaration closes the channel broker-side.

    Args:
        channel: Open channel
        queue_name: Name of the queue

    Raises:
        QueueDeclarationError: If the broker refuses the declaration
    """
    try:
        channel.queue_declare(
            queue=queue_name,
            durable=True,
            exclusive=False,
            auto_delete=False,
        )
    except pika.exceptions.AMQPError as e:
        logger.error(f"Failed to declare queue {queue_name}: {str(e)}")
        raise QueueDeclarationError(
            f"failed to declare queue {queue_name}: {e!r}"
        ) from e

    logger.debug(f"Declared queue: {queue_name}")
