"""RabbitMQ connection manager for log queues."""

import threading
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional, Set
import pika
from pika.adapters.blocking_connection import BlockingChannel, BlockingConnection
from logqueue.config import Settings, load_env_file
from logqueue.errors import (
    AlreadyInitializedError,
    BrokerConnectionError,
    ChannelError,
    ConfigurationError,
    NotInitializedError,
    QueueDeclarationError,
)
from logqueue.models.topics import Topic
from logqueue.queue.provisioner import declare_queue
from logqueue.logger import setup_logger

logger = setup_logger(__name__)


def _close_quietly(resource: Any, what: str) -> None:
    """Close a channel or connection, logging instead of raising."""
    try:
        if resource.is_open:
            resource.close()
    except Exception as e:
        logger.warning(f"Error closing {what}: {str(e)}")


class LogClient:
    """
    Owns one connection and one channel to RabbitMQ.

    The client is created for a topic, whose queue is declared on connect.
    Other topics' queues are declared the first time they are used.

    pika connections are not thread-safe. Once a consumer loop runs on its
    own thread, every other channel operation is handed to that thread.
    """

    def __init__(self, topic: Topic, settings: Optional[Settings] = None):
        """
        Initialize log client.

        Args:
            topic: Topic whose queue is declared on connect
            settings: Settings to use (loads .env and the environment if None)
        """
        self.topic = topic
        self.settings = settings

        self.connection: Optional[BlockingConnection] = None
        self.channel: Optional[BlockingChannel] = None

        self._declared_queues: Set[str] = set()
        self._consumer_thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def _load_settings(self) -> Settings:
        if self.settings is None:
            if not load_env_file():
                logger.warning(
                    "Could not load .env file, using environment variables from the host"
                )
            self.settings = Settings()
        return self.settings

    def _connection_parameters(self) -> pika.URLParameters:
        url = self._load_settings().rabbitmq_url
        if not url or not url.strip():
            raise ConfigurationError(
                "RABBITMQ_URL must be set in the environment variables or .env file"
            )
        try:
            return pika.URLParameters(url.strip())
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid RABBITMQ_URL: {str(e)}") from e

    def connect(self) -> "LogClient":
        """
        Connect to RabbitMQ, open a channel and declare the topic queue.

        Returns:
            This client

        Raises:
            AlreadyInitializedError: If the client is already connected
            ConfigurationError: If RABBITMQ_URL is missing or invalid
            BrokerConnectionError: If the connection cannot be opened
            ChannelError: If the channel cannot be opened
            QueueDeclarationError: If the queue cannot be declared
        """
        with self._lock:
            if self.connection is not None:
                raise AlreadyInitializedError(
                    f"Log client for {self.topic.queue_name} is already connected"
                )

            parameters = self._connection_parameters()

            try:
                connection = pika.BlockingConnection(parameters)
            except pika.exceptions.AMQPError as e:
                logger.error(f"Failed to connect to RabbitMQ: {str(e)}")
                raise BrokerConnectionError(
                    f"failed to connect to RabbitMQ: {e!r}"
                ) from e

            try:
                channel = connection.channel()
            except pika.exceptions.AMQPError as e:
                logger.error(f"Failed to open a channel: {str(e)}")
                _close_quietly(connection, "connection")
                raise ChannelError(f"failed to open a channel: {e!r}") from e

            try:
                declare_queue(channel, self.topic.queue_name)
            except QueueDeclarationError:
                _close_quietly(channel, "channel")
                _close_quietly(connection, "connection")
                raise

            self.connection = connection
            self.channel = channel
            self._declared_queues = {self.topic.queue_name}

        logger.info(
            f"Connected to RabbitMQ at {parameters.host}:{parameters.port}"
            f"{parameters.virtual_host} for queue {self.topic.queue_name}"
        )
        return self

    def require_channel(self) -> BlockingChannel:
        """
        Return the open channel.

        Raises:
            NotInitializedError: If connect() has not succeeded or close() was called
        """
        channel = self.channel
        if channel is None:
            raise NotInitializedError(
                "Log client is not connected; initialize it before publishing or consuming"
            )
        return channel

    def ensure_queue(self, topic: Topic) -> None:
        """
        Declare the queue of ``topic`` unless this client already did.

        Raises:
            NotInitializedError: If the client is not connected
            QueueDeclarationError: If the queue cannot be declared
        """
        if topic.queue_name in self._declared_queues:
            return
        channel = self.require_channel()
        try:
            self.call(declare_queue, channel, topic.queue_name)
        except (pika.exceptions.AMQPError, TimeoutError) as e:
            raise QueueDeclarationError(
                f"failed to declare queue {topic.queue_name}: {e!r}"
            ) from e
        self._declared_queues.add(topic.queue_name)

    def _runs_inline(self) -> bool:
        thread = self._consumer_thread
        return (
            thread is None
            or not thread.is_alive()
            or thread is threading.current_thread()
        )

    def call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """
        Run a channel operation on the thread that owns the connection.

        Runs inline when no consumer loop is active or when already on the
        loop thread. Otherwise blocks until the loop has run it.

        Raises:
            TimeoutError: If the loop did not run it within io_call_timeout
            pika.exceptions.AMQPError: If the connection is closed
        """
        if self._runs_inline():
            return fn(*args, **kwargs)

        connection = self.connection
        if connection is None:
            raise NotInitializedError("Log client is not connected")

        future: Future = Future()

        def invoke():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as e:
                future.set_exception(e)

        connection.add_callback_threadsafe(invoke)

        timeout = self.settings.io_call_timeout
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            future.cancel()
            raise TimeoutError(
                f"{getattr(fn, '__name__', fn)} did not run within {timeout}s"
            )

    def dispatch(self, fn: Callable[[], None]) -> None:
        """
        Run a channel operation on the connection thread without waiting.

        Raises:
            pika.exceptions.AMQPError: If the connection is closed
        """
        if self._runs_inline():
            fn()
            return

        connection = self.connection
        if connection is None:
            raise NotInitializedError("Log client is not connected")
        connection.add_callback_threadsafe(fn)

    def start_consumer_thread(self) -> None:
        """Start the thread delivering messages, unless it is already running."""
        with self._lock:
            thread = self._consumer_thread
            if thread is not None and thread.is_alive():
                return

            channel = self.require_channel()
            thread = threading.Thread(
                target=self._run_consumer_loop,
                args=(channel,),
                name=f"logqueue-consumer-{self.topic.queue_name}",
                daemon=True,
            )
            self._consumer_thread = thread
            thread.start()

    def _run_consumer_loop(self, channel: BlockingChannel) -> None:
        logger.debug(f"Consumer loop started for queue {self.topic.queue_name}")
        try:
            channel.start_consuming()
        except pika.exceptions.AMQPError as e:
            logger.error(f"Consumer loop stopped on connection error: {str(e)}")
        else:
            logger.info(f"Consumer loop stopped for queue {self.topic.queue_name}")

    def _stop_consumer_thread(
        self,
        thread: threading.Thread,
        connection: BlockingConnection,
        channel: BlockingChannel,
    ) -> None:
        if thread is threading.current_thread():
            try:
                channel.stop_consuming()
            except Exception as e:
                logger.warning(f"Error stopping consumer: {str(e)}")
            return

        try:
            connection.add_callback_threadsafe(channel.stop_consuming)
        except Exception as e:
            logger.warning(f"Error stopping consumer: {str(e)}")

        timeout = self.settings.shutdown_timeout
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning(f"Consumer thread did not stop within {timeout}s")

    @property
    def consuming(self) -> bool:
        """True while the consumer loop thread is running."""
        thread = self._consumer_thread
        return thread is not None and thread.is_alive()

    def is_connected(self) -> bool:
        """
        Check if connection is active.

        Returns:
            True if connected and channel is open
        """
        return (
            self.connection is not None
            and self.connection.is_open
            and self.channel is not None
            and self.channel.is_open
        )

    def close(self) -> None:
        """Stop consuming, then close channel and connection. Never raises."""
        # Teardown runs outside the lock; handlers may still call into the client
        with self._lock:
            connection, channel = self.connection, self.channel
            thread = self._consumer_thread
            if connection is None:
                return

            self.channel = None
            self.connection = None
            self._consumer_thread = None
            self._declared_queues = set()

        if thread is not None and thread.is_alive():
            self._stop_consumer_thread(thread, connection, channel)

        if channel is not None:
            _close_quietly(channel, "channel")
        _close_quietly(connection, "connection")

        logger.debug("RabbitMQ connection closed")

    def __enter__(self):
        """Context manager entry."""
        if self.connection is None:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
