import json
import logging
import threading
import time

import pika

logger = logging.getLogger(__name__)


class RabbitMQProducer:
    """
    Publishes order events to a topic exchange.

    One producer is shared by every request thread, so connect, publish and
    close are serialized by a lock. The connection is opened lazily on the
    first publish. If a publish fails because the broker dropped the link,
    the connection is re-opened and the message is sent once more.
    """

    def __init__(self, host, exchange_name="events", exchange_type="topic",
                 connect_attempts=3, retry_delay=1.0):
        self.host = host
        self.exchange_name = exchange_name
        self.exchange_type = exchange_type
        self.connect_attempts = connect_attempts
        self.retry_delay = retry_delay
        self.connection = None
        self.channel = None
        self._lock = threading.Lock()

    def connect(self):
        """Connects to RabbitMQ and declares the exchange."""
        with self._lock:
            self._connect()

    def _connect(self):
        for attempt in range(1, self.connect_attempts + 1):
            try:
                parameters = pika.ConnectionParameters(
                    host=self.host,
                    heartbeat=600,
                    blocked_connection_timeout=300,
                )
                self.connection = pika.BlockingConnection(parameters)
                self.channel = self.connection.channel()
                # Durable so the exchange survives broker restarts.
                self.channel.exchange_declare(
                    exchange=self.exchange_name,
                    exchange_type=self.exchange_type,
                    durable=True,
                )
                logger.info("Connected to RabbitMQ exchange %s on %s", self.exchange_name, self.host)
                return
            except pika.exceptions.AMQPConnectionError:
                if attempt == self.connect_attempts:
                    raise
                logger.warning("RabbitMQ not ready (attempt %d), retrying in %ss", attempt, self.retry_delay)
                time.sleep(self.retry_delay)

    def publish(self, routing_key, message):
        """
        Publishes ``message`` as persistent JSON under ``routing_key``.

        Args:
            routing_key (str): e.g. 'order.created', 'order.deleted'.
            message (dict): The event payload.
        """
        body = json.dumps(message)
        with self._lock:
            if not self.connection or self.connection.is_closed:
                self._connect()
            try:
                self._basic_publish(routing_key, body)
            except pika.exceptions.AMQPError as e:
                logger.warning("Publish of '%s' failed (%s), reconnecting", routing_key, e)
                self._discard_connection()
                self._connect()
                self._basic_publish(routing_key, body)
        logger.info("Sent event '%s': %s", routing_key, message)

    def _basic_publish(self, routing_key, body):
        self.channel.basic_publish(
            exchange=self.exchange_name,
            routing_key=routing_key,
            body=body,
            properties=pika.BasicProperties(
                delivery_mode=2,  # Persistent
                content_type="application/json",
            ),
        )

    def _discard_connection(self):
        connection, self.connection, self.channel = self.connection, None, None
        if connection is None or connection.is_closed:
            return
        try:
            connection.close()
        except pika.exceptions.AMQPError as e:
            # The link is already broken; a fresh connection replaces it.
            logger.debug("Ignoring error while closing dead connection: %s", e)

    def close(self):
        """Closes the connection cleanly."""
        with self._lock:
            if self.connection and not self.connection.is_closed:
                self.connection.close()
