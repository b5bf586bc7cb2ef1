"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

Typed event names for structured logging, named <component>.<category>.<action>.

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, metadata.tracker_id, metadata.increased
    | filter event = "tracker.updated"
    | stats max(metadata.increased) by bin(5m)
"""

from enum import Enum


class LogEvent(str, Enum):
    """Typed log event names for structured logging."""

    # ========== Tracker Events ==========
    TRACKER_CREATED = "tracker.created"
    """Tracker built from configuration."""

    TRACKER_UPDATED = "tracker.updated"
    """Sample applied to the tracker total."""

    TRACKER_OVERFLOWED = "tracker.overflowed"
    """Total would exceed the track width; tracker is no longer usable."""

    SAMPLE_DISCARDED = "tracker.sample.discarded"
    """Sampled value did not fit the update width."""

    # ========== MQTT Events ==========
    MQTT_CONNECTED = "mqtt.connected"
    """MQTT broker connection established."""

    MQTT_DISCONNECTED = "mqtt.disconnected"
    """MQTT broker connection lost."""

    MQTT_PUBLISH_FAILED = "mqtt.publish.failed"
    """Report could not be handed to the broker."""

    # ========== Report Events ==========
    REPORT_PUBLISHED = "report.published"
    """Tracker report message published."""

    # ========== Error Events ==========
    MQTT_CONNECTION_ERROR = "error.mqtt_connection"
    """Failed to connect to MQTT broker."""

    MQTT_PUBLISH_ERROR = "error.mqtt_publish"
    """Error during message publication."""
