"""MQTT client wrapper with connection management and topic handlers."""

import logging
import time
from typing import Callable, Dict, Optional

import paho.mqtt.client as mqtt

from ..models import MQTTConfig


logger = logging.getLogger(__name__)


class MQTTClientError(Exception):
    """Base exception for MQTT client errors."""

    pass


class MQTTClient:
    """
    MQTT client wrapper with connection state management and error handling.

    This wraps paho-mqtt and provides a simpler interface: connect with a
    timeout, an availability Last Will, and per-topic message handlers that
    are called from paho's network thread.
    """

    def __init__(self, config: MQTTConfig, connect_timeout: float = 10.0):
        """
        Initialize MQTT client.

        Args:
            config: MQTT configuration
            connect_timeout: Seconds to wait for the broker to accept the connection
        """
        self.config = config
        self.connect_timeout = connect_timeout
        self._client: Optional[mqtt.Client] = None
        self._connected = False
        self._handlers: Dict[str, Callable[[bytes], None]] = {}
        self._subscriptions: Dict[str, int] = {}

    def connect(self) -> None:
        """
        Connect to MQTT broker.

        Raises:
            MQTTClientError: If connection fails
        """
        try:
            logger.info(
                f"Connecting to MQTT broker at {self.config.broker}:{self.config.port}"
            )

            self._client = mqtt.Client(
                mqtt.CallbackAPIVersion.VERSION2,
                client_id=self.config.client_id,
                clean_session=True,
                protocol=mqtt.MQTTv311,
            )

            self._client.on_connect = self._on_connect
            self._client.on_disconnect = self._on_disconnect
            self._client.on_message = self._on_message

            if self.config.username:
                self._client.username_pw_set(self.config.username, self.config.password)

            # Last Will and Testament (LWT) for availability
            self._client.will_set(
                self.config.get_topic("availability"),
                payload="offline",
                qos=1,
                retain=self.config.retain_availability,
            )

            self._client.connect(
                self.config.broker,
                self.config.port,
                keepalive=60,
            )

            # Start network loop in background thread
            self._client.loop_start()

            start_time = time.time()
            while not self._connected and (time.time() - start_time) < self.connect_timeout:
                time.sleep(0.1)

            if not self._connected:
                raise MQTTClientError("Connection timeout")

            logger.info("Successfully connected to MQTT broker")

        except Exception as e:
            raise MQTTClientError(f"Failed to connect to MQTT broker: {e}") from e

    def disconnect(self) -> None:
        """Disconnect from MQTT broker."""
        if self._client:
            logger.info("Disconnecting from MQTT broker")
            self._client.disconnect()
            self._client.loop_stop()
            self._connected = False

    def is_connected(self) -> bool:
        """Check if client is connected to broker."""
        return self._connected and self._client is not None

    def publish(
        self,
        topic: str,
        payload: str,
        qos: int = 0,
        retain: bool = False,
    ) -> None:
        """
        Publish a message to MQTT broker.

        Args:
            topic: MQTT topic
            payload: Message payload
            qos: Quality of Service level (0, 1, or 2)
            retain: Whether to retain the message

        Raises:
            MQTTClientError: If not connected or publish fails
        """
        if not self.is_connected():
            raise MQTTClientError("Not connected to MQTT broker")

        try:
            result = self._client.publish(topic, payload, qos=qos, retain=retain)

            if result.rc != mqtt.MQTT_ERR_SUCCESS:
                logger.warning(f"Failed to publish to {topic}: {result.rc}")
            else:
                logger.debug(f"Published to {topic} (QoS {qos}, retain={retain})")

        except Exception as e:
            raise MQTTClientError(f"Failed to publish message: {e}") from e

    def subscribe(self, topic: str, handler: Callable[[bytes], None], qos: int = 0) -> None:
        """
        Subscribe to an MQTT topic and route its messages to a handler.

        The subscription is renewed automatically after a reconnect.

        Args:
            topic: MQTT topic to subscribe to
            handler: Called with the raw payload of each message
            qos: Quality of Service level

        Raises:
            MQTTClientError: If not connected or subscribe fails
        """
        if not self.is_connected():
            raise MQTTClientError("Not connected to MQTT broker")

        self._handlers[topic] = handler
        self._subscriptions[topic] = qos

        try:
            result, _ = self._client.subscribe(topic, qos=qos)
        except Exception as e:
            raise MQTTClientError(f"Failed to subscribe: {e}") from e

        if result != mqtt.MQTT_ERR_SUCCESS:
            raise MQTTClientError(f"Failed to subscribe to {topic}: {result}")
        logger.info(f"Subscribed to {topic} (QoS {qos})")

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        """
        Internal callback for connection events.

        Args:
            client: MQTT client instance
            userdata: User data
            flags: Connection flags
            reason_code: Connection result
            properties: MQTT v5 properties (unused)
        """
        if reason_code == 0:
            logger.info("MQTT connection established")
            self._connected = True
            for topic, qos in self._subscriptions.items():
                client.subscribe(topic, qos=qos)
        else:
            logger.error(f"MQTT connection failed with code {reason_code}")
            self._connected = False

    def _on_disconnect(self, client, userdata, flags, reason_code, properties):
        """
        Internal callback for disconnection events.

        Args:
            client: MQTT client instance
            userdata: User data
            flags: Disconnect flags
            reason_code: Disconnect reason
            properties: MQTT v5 properties (unused)
        """
        self._connected = False
        if reason_code == 0:
            logger.info("MQTT disconnected (clean)")
        else:
            logger.warning(f"MQTT disconnected unexpectedly (code {reason_code})")

    def _on_message(self, client, userdata, message):
        """
        Internal callback for incoming messages.

        Args:
            client: MQTT client instance
            userdata: User data
            message: MQTT message
        """
        handler = self._handlers.get(message.topic)
        if handler is None:
            logger.debug(f"Ignoring message on unhandled topic {message.topic}")
            return

        try:
            handler(message.payload)
        except Exception as e:
            logger.error(f"Error in handler for {message.topic}: {e}")

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
        return False
