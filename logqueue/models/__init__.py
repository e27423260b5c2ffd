# Log record models

from logqueue.models.records import (
    LogRecord,
    AuditRecord,
    ActivityRecord,
)
from logqueue.models.topics import (
    Topic,
    AUDIT_TOPIC,
    ACTIVITY_TOPIC,
    DEFAULT_PREFETCH_COUNT,
    MAX_PREFETCH_COUNT,
    DecodeFailurePolicy,
    ConsumeOptions,
)

__all__ = [
    "LogRecord",
    "AuditRecord",
    "ActivityRecord",
    "Topic",
    "AUDIT_TOPIC",
    "ACTIVITY_TOPIC",
    "DEFAULT_PREFETCH_COUNT",
    "MAX_PREFETCH_COUNT",
    "DecodeFailurePolicy",
    "ConsumeOptions",
]
