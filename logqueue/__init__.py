"""Publish and consume audit and activity logs over RabbitMQ."""

from logqueue.errors import (
    LogQueueError,
    ConfigurationError,
    BrokerConnectionError,
    ChannelError,
    QueueDeclarationError,
    NotInitializedError,
    AlreadyInitializedError,
    SerializationError,
    PublishError,
    SubscriptionError,
    QoSConfigurationError,
    AcknowledgementError,
)
from logqueue.models import (
    AuditRecord,
    ActivityRecord,
    AUDIT_TOPIC,
    ACTIVITY_TOPIC,
    ConsumeOptions,
    DecodeFailurePolicy,
)
from logqueue.queue import LogClient, AckToken, AckOutcome
from logqueue.logs import (
    init_audit_client,
    init_activity_client,
    publish_audit_log,
    publish_activity_log,
    consume_audit_logs,
    consume_activity_logs,
    close,
)

__all__ = [
    "LogQueueError",
    "ConfigurationError",
    "BrokerConnectionError",
    "ChannelError",
    "QueueDeclarationError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "SerializationError",
    "PublishError",
    "SubscriptionError",
    "QoSConfigurationError",
    "AcknowledgementError",
    "AuditRecord",
    "ActivityRecord",
    "AUDIT_TOPIC",
    "ACTIVITY_TOPIC",
    "ConsumeOptions",
    "DecodeFailurePolicy",
    "LogClient",
    "AckToken",
    "AckOutcome",
    "init_audit_client",
    "init_activity_client",
    "publish_audit_log",
    "publish_activity_log",
    "consume_audit_logs",
    "consume_activity_logs",
    "close",
]
