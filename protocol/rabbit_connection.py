import logging

import pika

from .connection import Connection, TransportError
from .response import E_BAD_MESSAGE, E_DPUB_FAILED, E_MPUB_FAILED, E_PUB_FAILED, Response

rabbit_logger = logging.getLogger("RabbitMQ")

DEFAULT_PORT = 5672
DELAY_HEADER = "x-delay"


class RabbitConnection(Connection):
    """Connection to a single RabbitMQ node, publishing through pika.

    Single and deferred publishes go through a channel in confirm mode, so the
    broker answers every message with an ack or a nack. Batches go through a
    transactional channel so either the whole batch is committed or none of it,
    and are published as mandatory so a batch routed nowhere is not an ack.
    Deferred publishes rely on the delayed message exchange plugin, which
    reads the delay from the ``x-delay`` header.
    """

    def __init__(self, host, port=DEFAULT_PORT, exchange="", heartbeat=500):
        self.host = host
        self.port = int(port)
        self.exchange = exchange
        self.heartbeat = heartbeat
        self._connection = None
        self._channel = None
        self._tx_channel = None
        self._returned = []

    @classmethod
    def from_address(cls, address, **kwargs):
        """Build a connection from a ``host[:port]`` string."""
        host, _, port = address.strip().partition(":")
        if not host:
            raise ValueError(f"Invalid node address: '{address}'")
        return cls(host, int(port) if port else DEFAULT_PORT, **kwargs)

    def _connect(self):
        if self._connection is None or self._connection.is_closed:
            self._channel = None
            self._tx_channel = None
            self._connection = pika.BlockingConnection(
                pika.ConnectionParameters(host=self.host, port=self.port, heartbeat=self.heartbeat)
            )
            rabbit_logger.info(f"Connected to RabbitMQ node {self}")
        return self._connection

    @property
    def channel(self):
        """Confirm mode channel, recreated if the broker closed it."""
        connection = self._connect()
        if self._channel is None or self._channel.is_closed:
            self._channel = connection.channel()
            self._channel.confirm_delivery()
            rabbit_logger.debug(f"Confirm channel created on {self}")
        return self._channel

    @property
    def tx_channel(self):
        """Transactional channel used for batches."""
        connection = self._connect()
        if self._tx_channel is None or self._tx_channel.is_closed:
            self._tx_channel = connection.channel()
            self._tx_channel.tx_select()
            self._tx_channel.add_on_return_callback(self._on_returned)
            rabbit_logger.debug(f"Transactional channel created on {self}")
        return self._tx_channel

    def _on_returned(self, _channel, method, _properties, _body):
        self._returned.append(method)

    def publish(self, topic, message):
        return self._publish(topic, message, E_PUB_FAILED)

    def publish_defer(self, topic, message, defer_ms):
        headers = dict(message.headers)
        headers[DELAY_HEADER] = int(defer_ms)
        return self._publish(topic, message, E_DPUB_FAILED, headers=headers)

    def mpublish(self, topic, messages):
        if not messages:
            return Response(E_BAD_MESSAGE, "empty batch")

        self._returned = []
        try:
            channel = self.tx_channel
            for message in messages:
                channel.basic_publish(
                    exchange=self.exchange,
                    routing_key=topic,
                    body=message.body,
                    properties=self._properties(message),
                    mandatory=True,
                )
            channel.tx_commit()
            # basic.return frames arrive before tx.commit-ok, dispatch them now
            self._connection.process_data_events(time_limit=0)
        except pika.exceptions.AMQPChannelError as e:
            # The broker discards uncommitted messages when it closes the channel
            self._tx_channel = None
            rabbit_logger.warning(f"Batch of {len(messages)} messages to '{topic}' rejected by {self}: {e}")
            return Response(E_MPUB_FAILED, _reply_text(e))
        except (pika.exceptions.AMQPConnectionError, OSError) as e:
            self._drop_connection()
            raise TransportError(_reply_text(e)) from e
        except pika.exceptions.AMQPError as e:
            self._rollback()
            rabbit_logger.warning(f"Batch of {len(messages)} messages to '{topic}' could not be sent to {self}: {e!r}")
            return Response(E_MPUB_FAILED, _reply_text(e))

        if self._returned:
            rabbit_logger.warning(f"{len(self._returned)} of {len(messages)} messages to '{topic}' unroutable on {self}")
            return Response(E_MPUB_FAILED, "unroutable")

        rabbit_logger.debug(f"Committed batch of {len(messages)} messages to '{topic}' on {self}")
        return Response.ok()

    def _rollback(self):
        """Discard the messages of a batch that failed before its commit."""
        if self._tx_channel is None:
            return
        try:
            self._tx_channel.tx_rollback()
        except pika.exceptions.AMQPError as e:
            rabbit_logger.warning(f"Rollback failed on {self}, dropping transactional channel: {e!r}")
            self._tx_channel = None

    def _publish(self, topic, message, failure_code, headers=None):
        try:
            self.channel.basic_publish(
                exchange=self.exchange,
                routing_key=topic,
                body=message.body,
                properties=self._properties(message, headers),
                mandatory=True,
            )
        except pika.exceptions.UnroutableError:
            return Response(failure_code, "unroutable")
        except pika.exceptions.NackError:
            return Response(failure_code, "nacked")
        except pika.exceptions.AMQPChannelError as e:
            self._channel = None
            rabbit_logger.warning(f"Publish to '{topic}' rejected by {self}: {e}")
            return Response(failure_code, _reply_text(e))
        except (pika.exceptions.AMQPConnectionError, OSError) as e:
            self._drop_connection()
            raise TransportError(_reply_text(e)) from e
        except pika.exceptions.AMQPError as e:
            # Raised while encoding the frame, e.g. a topic longer than 255 bytes
            rabbit_logger.warning(f"Publish to '{topic}' could not be sent to {self}: {e!r}")
            return Response(failure_code, _reply_text(e))

        rabbit_logger.debug(f"Published message to '{topic}' on {self}")
        return Response.ok()

    def _properties(self, message, headers=None):
        if headers is None:
            headers = message.headers or None
        return pika.BasicProperties(
            content_type=message.content_type,
            headers=headers,
            delivery_mode=2,
        )

    def _drop_connection(self):
        self._connection = None
        self._channel = None
        self._tx_channel = None

    def close(self):
        """Closes the channels and connection gracefully."""
        try:
            for channel in (self._channel, self._tx_channel):
                if channel is not None and channel.is_open:
                    channel.close()
            if self._connection is not None and self._connection.is_open:
                self._connection.close()
                rabbit_logger.info(f"Connection to {self} closed")
        except Exception as e:
            rabbit_logger.error(f"Error closing RabbitMQ resources of {self}: {e}", exc_info=True)
        finally:
            self._drop_connection()

    def __str__(self):
        return f"{self.host}:{self.port}"

    def __repr__(self):
        return f"RabbitConnection({self.host!r}, {self.port}, exchange={self.exchange!r})"


def _reply_text(error):
    text = getattr(error, "reply_text", None)
    return text or str(error) or type(error).__name__
