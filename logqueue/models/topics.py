"""Queue topics and consumer options."""

from enum import Enum
from typing import Optional, Type
from pydantic import BaseModel, ConfigDict, Field
from logqueue.models.records import LogRecord, AuditRecord, ActivityRecord

DEFAULT_PREFETCH_COUNT = 50
# Basic.Qos prefetch-count is an AMQP short
MAX_PREFETCH_COUNT = 65535


class Topic(BaseModel):
    """A log queue: its name, record type and default consumer name."""

    model_config = ConfigDict(frozen=True)

    queue_name: str = Field(..., description="Queue name, also the routing key")
    record_type: Type[LogRecord] = Field(..., description="Record carried by the queue")
    default_consumer_name: str = Field(..., description="Consumer tag used when unset")


AUDIT_TOPIC = Topic(
    queue_name="audit_logs",
    record_type=AuditRecord,
    default_consumer_name="default_audit_consumer",
)

ACTIVITY_TOPIC = Topic(
    queue_name="activity_logs",
    record_type=ActivityRecord,
    default_consumer_name="default_activity_consumer",
)


class DecodeFailurePolicy(str, Enum):
    """What the consumer does with a message it cannot decode."""

    LEAVE_PENDING = "leave_pending"  # Neither ack nor nack; redelivered after disconnect
    REJECT = "reject"  # Nack without requeue; dropped or dead-lettered by the broker


class ConsumeOptions(BaseModel):
    """Options for a consume call."""

    consumer_name: Optional[str] = Field(
        None, description="Consumer tag (defaults to the topic's consumer name)"
    )
    prefetch_count: int = Field(
        DEFAULT_PREFETCH_COUNT,
        ge=0,
        le=MAX_PREFETCH_COUNT,
        description="Maximum unacknowledged messages delivered at once (0 = unlimited)",
    )
    decode_failure_policy: DecodeFailurePolicy = Field(
        DecodeFailurePolicy.LEAVE_PENDING,
        description="Handling of messages whose body cannot be decoded",
    )

    def resolve_consumer_name(self, topic: Topic) -> str:
        """Consumer tag to subscribe with on ``topic``."""
        return self.consumer_name or topic.default_consumer_name
