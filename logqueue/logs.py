"""Audit and activity log operations."""

from typing import Callable, Optional
from logqueue.config import Settings
from logqueue.models.records import ActivityRecord, AuditRecord
from logqueue.models.topics import ACTIVITY_TOPIC, AUDIT_TOPIC, ConsumeOptions
from logqueue.queue.connection import LogClient
from logqueue.queue.consumer import AckToken, consume
from logqueue.queue.publisher import publish

AuditHandler = Callable[[AuditRecord, AckToken], None]
ActivityHandler = Callable[[ActivityRecord, AckToken], None]


def init_audit_client(settings: Optional[Settings] = None) -> LogClient:
    """Connect to RabbitMQ and declare the audit log queue."""
    return LogClient(AUDIT_TOPIC, settings=settings).connect()


def init_activity_client(settings: Optional[Settings] = None) -> LogClient:
    """Connect to RabbitMQ and declare the activity log queue."""
    return LogClient(ACTIVITY_TOPIC, settings=settings).connect()


def publish_audit_log(client: LogClient, record: AuditRecord) -> AuditRecord:
    """Publish an audit record; its timestamp is set to the publish time."""
    return publish(client, AUDIT_TOPIC, record)


def publish_activity_log(client: LogClient, record: ActivityRecord) -> ActivityRecord:
    """Publish an activity record; its timestamp is set to the publish time."""
    return publish(client, ACTIVITY_TOPIC, record)


def consume_audit_logs(
    client: LogClient,
    handler: AuditHandler,
    options: Optional[ConsumeOptions] = None,
) -> str:
    """Start delivering audit records to ``handler``; returns the consumer tag."""
    return consume(client, AUDIT_TOPIC, handler, options)


def consume_activity_logs(
    client: LogClient,
    handler: ActivityHandler,
    options: Optional[ConsumeOptions] = None,
) -> str:
    """Start delivering activity records to ``handler``; returns the consumer tag."""
    return consume(client, ACTIVITY_TOPIC, handler, options)


def close(client: LogClient) -> None:
    """Stop consuming and close the client's channel and connection."""
    client.close()
