"""Configuration loader for the geiger display pipeline."""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from .models import DisplayConfig, EngineConfig, LinkConfig, MQTTConfig


logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


class Config:
    """Application configuration manager."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file. If None, uses default locations.
        """
        self.config_path = config_path or self._find_config_file()
        self._data: Dict[str, Any] = {}
        self.load()

    def _find_config_file(self) -> str:
        """
        Find the configuration file in default locations.

        Returns:
            Path to config file

        Raises:
            ConfigError: If no config file is found
        """
        search_paths = [
            "config.yaml",
            "config.yml",
            os.path.expanduser("~/.config/geiger-display/config.yaml"),
            "/etc/geiger-display/config.yaml",
        ]

        for path in search_paths:
            if os.path.isfile(path):
                logger.info(f"Found config file at: {path}")
                return path

        raise ConfigError(
            f"No configuration file found. Searched: {', '.join(search_paths)}"
        )

    def load(self) -> None:
        """
        Load configuration from file.

        Raises:
            ConfigError: If config file cannot be loaded or is invalid
        """
        try:
            logger.info(f"Loading configuration from: {self.config_path}")
            with open(self.config_path, "r") as f:
                self._data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}")
        except Exception as e:
            raise ConfigError(f"Failed to load config: {e}")

        self._validate()

    def _validate(self) -> None:
        """
        Validate the configuration data.

        Raises:
            ConfigError: If configuration is invalid
        """
        if not isinstance(self._data, dict):
            raise ConfigError("Config file must contain a mapping")

        for section in ("link", "engine", "display", "mqtt", "logging"):
            if not isinstance(self._data.get(section, {}), dict):
                raise ConfigError(f"Config section '{section}' must be a mapping")

        # Build every typed section once so bad values fail at load time
        try:
            link_config = self.get_link_config()
            self.get_engine_config()
            display_config = self.get_display_config()
            self.get_mqtt_config()
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

        port = link_config.port
        if link_config.type == "serial" and str(port).startswith("/dev/") and not os.path.exists(port):
            logger.warning(f"Serial port {port} does not exist (yet)")

        if display_config.sink == "mqtt" or link_config.type == "mqtt":
            if "mqtt" not in self._data:
                logger.warning("MQTT in use but no 'mqtt' section, using defaults")

    def get_link_config(self) -> LinkConfig:
        """
        Get inbound link configuration.

        Returns:
            LinkConfig object
        """
        link_data = self._data.get("link", {})
        return LinkConfig(
            type=link_data.get("type", "serial"),
            port=link_data.get("port"),
            baudrate=link_data.get("baudrate", 115200),
            timeout=link_data.get("timeout", 1.0),
        )

    def get_engine_config(self) -> EngineConfig:
        """
        Get aggregation engine configuration.

        Returns:
            EngineConfig object
        """
        engine_data = self._data.get("engine", {})
        return EngineConfig(
            window_size=engine_data.get("window_size", 60),
            queue_capacity=engine_data.get("queue_capacity", 10),
            conversion_factor=engine_data.get("conversion_factor", 0.0057),
            yield_seconds=engine_data.get("yield_seconds", 0.01),
        )

    def get_display_config(self) -> DisplayConfig:
        """
        Get presentation sink configuration.

        Returns:
            DisplayConfig object
        """
        display_data = self._data.get("display", {})
        return DisplayConfig(
            sink=display_data.get("sink", "console"),
            chart_points=display_data.get("chart_points", 100),
            initial_range_max=display_data.get("initial_range_max", 1000),
        )

    def get_mqtt_config(self) -> MQTTConfig:
        """
        Get MQTT configuration.

        Returns:
            MQTTConfig object
        """
        mqtt_data = self._data.get("mqtt", {})
        return MQTTConfig(
            broker=mqtt_data.get("broker", "localhost"),
            port=mqtt_data.get("port", 1883),
            username=mqtt_data.get("username") or None,
            password=mqtt_data.get("password") or None,
            client_id=mqtt_data.get("client_id", "geiger-display"),
            topic_prefix=mqtt_data.get("topic_prefix", "geiger/display"),
            device_id=mqtt_data.get("device_id", "receiver"),
            input_subtopic=mqtt_data.get("input_subtopic", "cpm"),
            qos_input=mqtt_data.get("qos_input", 0),
            qos_state=mqtt_data.get("qos_state", 0),
            retain_availability=mqtt_data.get("retain_availability", True),
        )

    def get_logging_config(self) -> Dict[str, Any]:
        """
        Get logging configuration.

        Returns:
            Dictionary with logging settings
        """
        return self._data.get(
            "logging",
            {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        )

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(path={self.config_path})"
