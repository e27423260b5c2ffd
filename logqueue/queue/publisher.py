"""Log record publisher for RabbitMQ."""

from datetime import datetime, timezone
import pika
from pika.adapters.blocking_connection import BlockingChannel
from pydantic_core import PydanticSerializationError
from logqueue.errors import PublishError, SerializationError
from logqueue.models.records import LogRecord
from logqueue.models.topics import Topic
from logqueue.queue.connection import LogClient
from logqueue.logger import setup_logger

logger = setup_logger(__name__)

CONTENT_TYPE = "application/json"


def _basic_publish(channel: BlockingChannel, queue_name: str, body: bytes) -> None:
    channel.basic_publish(
        exchange="",
        routing_key=queue_name,
        body=body,
        properties=pika.BasicProperties(
            delivery_mode=2,  # Make message persistent
            content_type=CONTENT_TYPE,
        ),
        mandatory=False,
    )


def publish(client: LogClient, topic: Topic, record: LogRecord) -> LogRecord:
    """
    Stamp a record with the current time and publish it to the topic queue.

    Args:
        client: Connected log client
        topic: Topic to publish to
        record: Record of the topic's record type

    Returns:
        The record as published, with its timestamp set

    Raises:
        TypeError: If the record does not belong to the topic
        NotInitializedError: If the client is not connected
        SerializationError: If the record cannot be encoded
        PublishError: If the broker publish fails
    """
    if not isinstance(record, topic.record_type):
        raise TypeError(
            f"{topic.queue_name} expects {topic.record_type.__name__}, "
            f"got {type(record).__name__}"
        )

    channel = client.require_channel()
    client.ensure_queue(topic)

    stamped = record.stamped(datetime.now(timezone.utc))
    try:
        body = stamped.to_json()
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise SerializationError(
            f"failed to marshal {type(record).__name__}: {str(e)}"
        ) from e

    try:
        client.call(_basic_publish, channel, topic.queue_name, body)
    except (pika.exceptions.AMQPError, TimeoutError) as e:
        logger.error(f"Failed to publish to queue {topic.queue_name}: {str(e)}")
        raise PublishError(
            f"failed to publish message to {topic.queue_name}: {e!r}"
        ) from e

    logger.debug(f"Published {type(record).__name__} to queue {topic.queue_name}")
    return stamped
