"""MQTT presentation sink publishing every snapshot as JSON."""

import json
import logging

from ..models import MQTTConfig, Snapshot
from ..presentation.base import PresentationSink
from .client import MQTTClient

logger = logging.getLogger(__name__)


class MQTTPublisher(PresentationSink):
    """
    Presentation sink that forwards snapshots to a remote display via MQTT.

    Handles publishing of:
    - Snapshot state (one message per processed reading)
    - Availability status
    """

    def __init__(self, mqtt_client: MQTTClient, config: MQTTConfig):
        """
        Initialize MQTT publisher.

        Args:
            mqtt_client: Connected MQTT client
            config: MQTT configuration
        """
        super().__init__()
        self.client = mqtt_client
        self.config = config

        logger.info(f"MQTT Publisher initialized for device: {config.device_id}")

    def publish_availability(self, online: bool = True) -> None:
        """
        Publish availability status.

        Args:
            online: True for online, False for offline
        """
        topic = self.config.get_topic("availability")
        payload = "online" if online else "offline"

        try:
            self.client.publish(
                topic=topic,
                payload=payload,
                qos=1,
                retain=self.config.retain_availability,
            )
            logger.debug(f"Published availability: {payload}")
        except Exception as e:
            logger.error(f"Failed to publish availability: {e}")

    def render(self, snapshot: Snapshot) -> None:
        """
        Publish a snapshot to the state topic.

        Args:
            snapshot: Snapshot computed by the engine
        """
        topic = self.config.get_topic("state")

        try:
            self.client.publish(
                topic=topic,
                payload=json.dumps(snapshot.to_dict()),
                qos=self.config.qos_state,
                retain=False,
            )
            logger.debug(f"Published state: CPM={snapshot.raw_value}")
        except Exception as e:
            logger.error(f"Failed to publish snapshot: {e}")

    def startup(self) -> None:
        """Publish availability (online)."""
        logger.info("Starting MQTT publisher...")
        self.publish_availability(online=True)

    def shutdown(self) -> None:
        """Publish availability (offline)."""
        logger.info("Shutting down MQTT publisher...")
        self.publish_availability(online=False)
