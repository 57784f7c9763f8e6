"""Domain models for radiation readings, snapshots and configuration."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Reading:
    """A single decoded radiation observation."""

    value: int  # Counts per minute

    def __str__(self) -> str:
        """Human-readable string representation."""
        return f"Reading(cpm={self.value})"


@dataclass(frozen=True)
class Snapshot:
    """Fully computed result of processing one reading."""

    raw_value: int
    average: float
    dosage: float  # µSv/h
    range_max: int
    running_min: int
    running_max: int
    sample_count: int
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """
        Convert the snapshot to a dictionary for JSON serialization.

        Returns:
            Dictionary representation
        """
        return {
            "cpm": self.raw_value,
            "cpm_avg": round(self.average, 2),
            "usv_h": round(self.dosage, 4),
            "range_max": self.range_max,
            "cpm_min": self.running_min,
            "cpm_max": self.running_max,
            "sample_count": self.sample_count,
            "timestamp": self.timestamp.isoformat(),
            "unit": "CPM",
        }

    def __str__(self) -> str:
        """Human-readable string representation."""
        return (
            f"Snapshot("
            f"cpm={self.raw_value}, "
            f"cpm_avg={self.average:.1f}, "
            f"µSv/h={self.dosage:.4f}, "
            f"range_max={self.range_max})"
        )


@dataclass
class LinkConfig:
    """Configuration for the inbound reading link."""

    type: str = "serial"
    port: Optional[str] = None
    baudrate: int = 115200
    timeout: float = 1.0

    def __post_init__(self):
        """Validate the configuration."""
        if self.type not in ("serial", "mqtt"):
            raise ValueError(f"Link type must be 'serial' or 'mqtt', got {self.type!r}")
        if self.type == "serial" and not self.port:
            raise ValueError("Serial link requires a port")
        if self.baudrate <= 0:
            raise ValueError(f"Baudrate must be positive, got {self.baudrate}")
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout}")


@dataclass
class EngineConfig:
    """Configuration for the aggregation engine and its ingest queue."""

    window_size: int = 60
    queue_capacity: int = 10
    conversion_factor: float = 0.0057
    yield_seconds: float = 0.01

    def __post_init__(self):
        """Validate the configuration."""
        if self.window_size <= 0:
            raise ValueError(f"Window size must be positive, got {self.window_size}")
        if self.queue_capacity <= 0:
            raise ValueError(f"Queue capacity must be positive, got {self.queue_capacity}")
        if self.conversion_factor <= 0:
            raise ValueError(
                f"Conversion factor must be positive, got {self.conversion_factor}"
            )
        if self.yield_seconds < 0:
            raise ValueError(f"Yield must be non-negative, got {self.yield_seconds}")


@dataclass
class DisplayConfig:
    """Configuration for the presentation sink."""

    sink: str = "console"
    chart_points: int = 100
    initial_range_max: int = 1000

    def __post_init__(self):
        """Validate the configuration."""
        if self.sink not in ("console", "chart", "mqtt"):
            raise ValueError(
                f"Display sink must be 'console', 'chart' or 'mqtt', got {self.sink!r}"
            )
        if self.chart_points <= 0:
            raise ValueError(f"Chart points must be positive, got {self.chart_points}")


@dataclass
class MQTTConfig:
    """Configuration for MQTT connection, subscription and publishing."""

    broker: str = "localhost"
    port: int = 1883
    username: Optional[str] = None
    password: Optional[str] = None
    client_id: str = "geiger-display"
    topic_prefix: str = "geiger/display"
    device_id: str = "receiver"
    input_subtopic: str = "cpm"
    qos_input: int = 0
    qos_state: int = 0
    retain_availability: bool = True

    def __post_init__(self):
        """Validate the configuration."""
        if self.port <= 0 or self.port > 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {self.port}")
        if self.qos_input not in (0, 1, 2):
            raise ValueError(f"QoS must be 0, 1, or 2, got {self.qos_input}")
        if self.qos_state not in (0, 1, 2):
            raise ValueError(f"QoS must be 0, 1, or 2, got {self.qos_state}")

    def get_topic(self, subtopic: str) -> str:
        """
        Construct a full MQTT topic path.

        Args:
            subtopic: Subtopic (e.g., 'cpm', 'state', 'availability')

        Returns:
            Full topic path
        """
        return f"{self.topic_prefix}/{self.device_id}/{subtopic}"
