"""
Exceptions raised by the log queue client.

Setup failures wrap the underlying pika error as ``__cause__``.
"""


class LogQueueError(Exception):
    """Base exception for all log queue errors."""
    pass


class ConfigurationError(LogQueueError):
    """Raised when the broker URL is missing or malformed."""
    pass


class BrokerConnectionError(LogQueueError):
    """Raised when the connection to the broker cannot be opened."""
    pass


class ChannelError(LogQueueError):
    """Raised when a channel cannot be opened on the connection."""
    pass


class QueueDeclarationError(LogQueueError):
    """Raised when a queue cannot be declared, e.g. conflicting parameters."""
    pass


class NotInitializedError(LogQueueError):
    """Raised when publishing or consuming on a client that is not connected."""
    pass


class AlreadyInitializedError(LogQueueError):
    """Raised when connecting a client that already holds a live connection."""
    pass


class SerializationError(LogQueueError):
    """Raised when a record cannot be encoded to JSON."""
    pass


class PublishError(LogQueueError):
    """Raised when the broker rejects or fails a publish."""
    pass


class SubscriptionError(LogQueueError):
    """Raised when a consumer cannot be registered on a queue."""
    pass


class QoSConfigurationError(LogQueueError):
    """Raised when the prefetch limit cannot be applied."""
    pass


class AcknowledgementError(LogQueueError):
    """Raised when an acknowledgment token is used more than once."""
    pass
