"""Log record consumer for RabbitMQ."""

import struct
import threading
from enum import Enum
from functools import partial
from typing import Callable, Optional
import pika
from pika.adapters.blocking_connection import BlockingChannel
from pydantic import ValidationError
from logqueue.errors import (
    AcknowledgementError,
    NotInitializedError,
    QoSConfigurationError,
    SubscriptionError,
)
from logqueue.models.records import LogRecord
from logqueue.models.topics import ConsumeOptions, DecodeFailurePolicy, Topic
from logqueue.queue.connection import LogClient
from logqueue.logger import setup_logger

logger = setup_logger(__name__)


class AckOutcome(str, Enum):
    """How a delivery was settled through its token."""

    ACKED = "acked"
    REQUEUED = "requeued"


class AckToken:
    """
    Acknowledgment for exactly one delivery.

    ``token(True)`` acknowledges the message and removes it from the queue.
    ``token(False)`` negatively acknowledges it and the broker requeues it.
    A second call raises AcknowledgementError without contacting the broker.
    A token never called leaves the message unacknowledged until the
    consumer disconnects.
    """

    def __init__(
        self,
        client: LogClient,
        channel: BlockingChannel,
        delivery_tag: int,
        queue_name: str,
    ):
        self._client = client
        self._channel = channel
        self.delivery_tag = delivery_tag
        self.queue_name = queue_name
        self._outcome: Optional[AckOutcome] = None
        self._lock = threading.Lock()

    @property
    def outcome(self) -> Optional[AckOutcome]:
        return self._outcome

    @property
    def used(self) -> bool:
        return self._outcome is not None

    @property
    def _verb(self) -> str:
        return "acknowledge" if self._outcome is AckOutcome.ACKED else "nack"

    def __call__(self, accept: bool) -> None:
        with self._lock:
            if self._outcome is not None:
                raise AcknowledgementError(
                    f"Delivery {self.delivery_tag} on {self.queue_name} "
                    f"was already {self._outcome.value}"
                )
            self._outcome = AckOutcome.ACKED if accept else AckOutcome.REQUEUED

        try:
            self._client.dispatch(self._settle)
        except (pika.exceptions.AMQPError, NotInitializedError) as e:
            logger.error(
                f"Failed to {self._verb} message {self.delivery_tag} "
                f"on {self.queue_name}: {str(e)}"
            )

    def _settle(self) -> None:
        try:
            if self._outcome is AckOutcome.ACKED:
                self._channel.basic_ack(delivery_tag=self.delivery_tag, multiple=False)
            else:
                self._channel.basic_nack(
                    delivery_tag=self.delivery_tag, multiple=False, requeue=True
                )
        except pika.exceptions.AMQPError as e:
            logger.error(
                f"Failed to {self._verb} message {self.delivery_tag} on {self.queue_name}: {str(e)}"
            )
            return

        logger.debug(
            f"Message {self.delivery_tag} on {self.queue_name} {self._outcome.value}"
        )


Handler = Callable[[LogRecord, AckToken], None]


def _on_message(
    client: LogClient,
    topic: Topic,
    handler: Handler,
    decode_failure_policy: DecodeFailurePolicy,
    channel: BlockingChannel,
    method: pika.spec.Basic.Deliver,
    properties: pika.spec.BasicProperties,
    body: bytes,
):
    """
    Decode one delivery and hand it to the caller's handler.

    Args:
        client: Client owning the channel
        topic: Topic being consumed
        handler: Caller handler (record, ack) -> None
        decode_failure_policy: What to do with undecodable bodies
        channel: RabbitMQ channel
        method: Delivery method
        properties: Message properties
        body: Message body
    """
    try:
        record = topic.record_type.from_json(body)
    except ValidationError as e:
        logger.error(
            f"Error unmarshaling message {method.delivery_tag} "
            f"from queue {topic.queue_name}: {str(e)}"
        )
        if decode_failure_policy is DecodeFailurePolicy.REJECT:
            try:
                channel.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
            except pika.exceptions.AMQPError as nack_error:
                logger.error(f"Failed to reject message: {str(nack_error)}")
        return

    logger.debug(
        f"Received {type(record).__name__} {method.delivery_tag} "
        f"from queue {topic.queue_name} (redelivered: {method.redelivered})"
    )

    ack = AckToken(client, channel, method.delivery_tag, topic.queue_name)
    try:
        handler(record, ack)
    except Exception:
        logger.exception(
            f"Handler failed on message {method.delivery_tag} from queue {topic.queue_name}"
        )
        # Requeue unless the handler already settled it
        if not ack.used:
            ack(False)


def consume(
    client: LogClient,
    topic: Topic,
    handler: Handler,
    options: Optional[ConsumeOptions] = None,
) -> str:
    """
    Subscribe to a topic queue and deliver decoded records to ``handler``.

    Returns once the subscription is registered. Messages are delivered on
    the client's consumer thread until the client is closed.

    Args:
        client: Connected log client
        topic: Topic to consume
        handler: Called as handler(record, ack) for every decoded message
        options: Consumer name, prefetch limit and decode failure policy

    Returns:
        The consumer tag

    Raises:
        NotInitializedError: If the client is not connected
        QueueDeclarationError: If the topic queue cannot be declared
        QoSConfigurationError: If the prefetch limit cannot be applied
        SubscriptionError: If the consumer cannot be registered
    """
    options = options or ConsumeOptions()
    consumer_name = options.resolve_consumer_name(topic)

    channel = client.require_channel()
    client.ensure_queue(topic)

    # Prefetch must be in place before basic_consume
    try:
        client.call(channel.basic_qos, prefetch_count=options.prefetch_count)
    except (pika.exceptions.AMQPError, TimeoutError, ValueError, struct.error) as e:
        logger.error(f"Failed to set QoS on queue {topic.queue_name}: {str(e)}")
        raise QoSConfigurationError(f"failed to set QoS: {e!r}") from e

    on_message = partial(
        _on_message, client, topic, handler, options.decode_failure_policy
    )
    try:
        client.call(
            channel.basic_consume,
            queue=topic.queue_name,
            on_message_callback=on_message,
            auto_ack=False,
            exclusive=False,
            consumer_tag=consumer_name,
        )
    except (pika.exceptions.AMQPError, TimeoutError, ValueError) as e:
        logger.error(
            f"Failed to register consumer {consumer_name} on queue {topic.queue_name}: {str(e)}"
        )
        raise SubscriptionError(
            f"failed to register consumer {consumer_name}: {e!r}"
        ) from e

    client.start_consumer_thread()

    logger.info(
        f"Consumer {consumer_name} is waiting for messages on queue {topic.queue_name} "
        f"(prefetch: {options.prefetch_count})"
    )
    return consumer_name
