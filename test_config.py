"""
Tests for YAML configuration loading and validation.

Usage:
    pytest test_config.py
"""

from pathlib import Path

import numpy as np
import pytest
import yaml

from increase_tracker.config import AppConfig, MQTTConfig, SamplerConfig, TrackerConfig


CONFIG_YAML = """
tracker:
  tracker_id: "packet_counter"
  update_width: "uint16"
  track_width: "uint64"
  initial_offset: 65000

sampler:
  interval: 15.0

mqtt:
  broker: "broker.local"
  port: 1884
  qos: 1
  report_topic: "site/{tracker_id}/total"
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "tracker.yaml"
    path.write_text(text)
    return path


def test_from_yaml_loads_all_sections(tmp_path):
    config = AppConfig.from_yaml(_write(tmp_path, CONFIG_YAML))

    assert config.tracker.tracker_id == "packet_counter"
    assert config.tracker.initial_offset == 65000
    assert config.sampler.interval == 15.0
    assert config.mqtt.broker == "broker.local"
    assert config.mqtt.port == 1884
    assert config.report_topic == "site/packet_counter/total"


def test_minimal_config_uses_defaults(tmp_path):
    path = _write(tmp_path, yaml.safe_dump({"tracker": {"tracker_id": "t1"}}))

    config = AppConfig.from_yaml(path)

    assert config.tracker.update_width == "uint8"
    assert config.tracker.track_width == "uint64"
    assert config.sampler.interval == 1.0
    assert config.mqtt is None
    assert config.report_topic is None


def test_build_creates_configured_tracker(tmp_path):
    config = AppConfig.from_yaml(_write(tmp_path, CONFIG_YAML))

    tracker = config.tracker.build()

    assert tracker.offset == 65000
    assert tracker.update_dtype == np.dtype(np.uint16)
    assert tracker.track_dtype == np.dtype(np.uint64)
    assert tracker.update(10) == (65535 - 65000) + 10


def test_shipped_example_config_is_valid():
    path = Path(__file__).parent / "config" / "increase_tracker.yaml"

    config = AppConfig.from_yaml(path)

    assert config.report_topic == "increase_tracker/reports/packet_counter"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"tracker_id": ""},
        {"tracker_id": "t", "update_width": "int8"},
        {"tracker_id": "t", "track_width": "float64"},
        {"tracker_id": "t", "update_width": "uint32", "track_width": "uint16"},
        {"tracker_id": "t", "update_width": "uint64", "track_width": "uint64"},
        {"tracker_id": "t", "initial_offset": 256},
    ],
)
def test_invalid_tracker_config(kwargs):
    with pytest.raises(ValueError):
        TrackerConfig(**kwargs)


def test_invalid_sampler_and_mqtt_config():
    with pytest.raises(ValueError):
        SamplerConfig(interval=0)
    with pytest.raises(ValueError):
        MQTTConfig(broker="localhost", port=70000)
    with pytest.raises(ValueError):
        MQTTConfig(broker="localhost", qos=3)
    with pytest.raises(ValueError):
        MQTTConfig(broker="")


def test_missing_or_malformed_sections():
    with pytest.raises(ValueError, match="tracker"):
        AppConfig.from_dict({"sampler": {"interval": 1}})
    with pytest.raises(ValueError):
        AppConfig.from_dict({"tracker": {"tracker_id": "t", "unknown": 1}})
    with pytest.raises(ValueError):
        AppConfig.from_dict(None)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.from_yaml(tmp_path / "missing.yaml")


def test_invalid_yaml(tmp_path):
    with pytest.raises(ValueError):
        AppConfig.from_yaml(_write(tmp_path, "tracker: [unclosed"))
