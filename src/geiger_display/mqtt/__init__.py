"""MQTT client, inbound subscription and snapshot publishing."""

from .client import MQTTClient, MQTTClientError
from .publisher import MQTTPublisher
from .subscriber import MQTTSubscriber

__all__ = ["MQTTClient", "MQTTClientError", "MQTTPublisher", "MQTTSubscriber"]
