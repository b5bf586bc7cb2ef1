"""
Configuration schema for the increase tracker service.

This module defines the configuration structure for a tracked source:
integer widths and starting offset, sampling interval, and optional MQTT
reporting settings.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from increase_tracker.errors import ConstructionError
from increase_tracker.tracker import IncreaseTracker
from increase_tracker.widths import check_value, resolve_width, width_max


@dataclass(frozen=True)
class TrackerConfig:
    """Tracked source configuration (widths and starting offset)."""

    tracker_id: str
    update_width: str = "uint8"
    track_width: str = "uint64"
    initial_offset: int = 0

    def __post_init__(self):
        """Validate tracker configuration."""
        if not self.tracker_id:
            raise ValueError("tracker_id cannot be empty")

        try:
            update_dtype = resolve_width(self.update_width)
            track_dtype = resolve_width(self.track_width)
        except ConstructionError as e:
            raise ValueError(f"Invalid width for tracker '{self.tracker_id}': {e}") from e

        if width_max(track_dtype) <= width_max(update_dtype):
            raise ValueError(
                f"track_width {self.track_width} must be wider than "
                f"update_width {self.update_width}"
            )

        # ValueOutOfRange is a ValueError
        check_value(self.initial_offset, update_dtype)

    def build(self) -> IncreaseTracker:
        """
        Create a tracker from this configuration.

        Returns:
            IncreaseTracker starting at initial_offset
        """
        return IncreaseTracker(
            self.initial_offset,
            track=self.track_width,
            update=self.update_width,
        )


@dataclass(frozen=True)
class SamplerConfig:
    """Sampling configuration."""

    interval: float = 1.0  # seconds

    def __post_init__(self):
        """Validate sampler configuration."""
        if self.interval <= 0:
            raise ValueError(
                f"interval must be > 0, got {self.interval}"
            )


@dataclass(frozen=True)
class MQTTConfig:
    """MQTT broker configuration."""

    broker: str
    port: int = 1883
    username: Optional[str] = None
    password: Optional[str] = None
    qos: int = 0

    report_topic: str = "increase_tracker/reports/{tracker_id}"

    def __post_init__(self):
        """Validate MQTT configuration."""
        if not self.broker:
            raise ValueError("MQTT broker cannot be empty")

        if not 1 <= self.port <= 65535:
            raise ValueError(
                f"MQTT port must be in [1, 65535], got {self.port}"
            )

        if self.qos not in {0, 1, 2}:
            raise ValueError(
                f"MQTT QoS must be 0, 1, or 2, got {self.qos}"
            )


@dataclass(frozen=True)
class AppConfig:
    """
    Main configuration for the tracker service.

    Loaded from YAML and validated at startup.
    Immutable after construction (frozen dataclass).
    """

    tracker: TrackerConfig
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    mqtt: Optional[MQTTConfig] = None

    @property
    def report_topic(self) -> Optional[str]:
        """MQTT report topic with tracker_id filled in (None without MQTT)."""
        if self.mqtt is None:
            return None
        return self.mqtt.report_topic.format(tracker_id=self.tracker.tracker_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """
        Build configuration from a parsed YAML mapping.

        Raises:
            ValueError: If required sections are missing or invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a mapping")

        try:
            tracker = TrackerConfig(**data["tracker"])
        except KeyError:
            raise ValueError("Missing required 'tracker' section")
        except TypeError as e:
            raise ValueError(f"Invalid 'tracker' section: {e}")

        try:
            sampler = SamplerConfig(**(data.get("sampler") or {}))
            mqtt_data = data.get("mqtt")
            mqtt = MQTTConfig(**mqtt_data) if mqtt_data else None
        except TypeError as e:
            raise ValueError(f"Invalid configuration section: {e}")

        return cls(tracker=tracker, sampler=sampler, mqtt=mqtt)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            tracker:
              tracker_id: "packet_counter"
              update_width: "uint8"
              track_width: "uint64"
              initial_offset: 0

            sampler:
              interval: 15.0

            mqtt:
              broker: "localhost"
              port: 1883
              report_topic: "increase_tracker/reports/{tracker_id}"
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        try:
            with open(yaml_path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}")

        return cls.from_dict(data)
