"""MQTT inbound link: CPM payloads published by a radio gateway."""

import logging

from ..ingest.receiver import ReadingReceiver
from ..models import MQTTConfig
from .client import MQTTClient

logger = logging.getLogger(__name__)


class MQTTSubscriber:
    """Feeds payloads from the input topic to the reading receiver."""

    def __init__(self, mqtt_client: MQTTClient, config: MQTTConfig, receiver: ReadingReceiver):
        self.client = mqtt_client
        self.config = config
        self.receiver = receiver
        self.topic = config.get_topic(config.input_subtopic)

    def start(self) -> None:
        """
        Subscribe to the input topic.

        Raises:
            MQTTClientError: If the subscription fails
        """
        self.client.subscribe(self.topic, self._on_payload, qos=self.config.qos_input)
        logger.info(f"Listening for readings on {self.topic}")

    def _on_payload(self, payload: bytes) -> None:
        # Runs on paho's network thread
        self.receiver.on_data_recv(payload, len(payload))
