"""
Increase Tracker MQTT Reporting
===============================

Bounded Context: Reporting tracker totals to downstream consumers

Architecture:
- schemas/: Immutable report messages (TrackerReport, TrackerReportMessage)
- publishers/: MQTT producer (TrackerReportPublisher)
- logging/: Structured JSON logging for observability

Example:
    >>> from increase_mqtt import TrackerReportPublisher, create_logger
    >>> from increase_mqtt.schemas import TrackerReport
    >>>
    >>> logger = create_logger("reporter")
    >>> publisher = TrackerReportPublisher(
    ...     broker_host="localhost",
    ...     topic="increase_tracker/reports/packets",
    ...     logger=logger
    ... )
    >>> publisher.connect()
    >>> publisher.publish_reports([TrackerReport.from_tracker("packets", tracker)])
"""

__version__ = "1.0.0"

from .schemas import (
    Timestamp,
    TrackerReport,
    TrackerReportMessage,
)

from .publishers import (
    TrackerReportPublisher,
)

from .logging import (
    LogEvent,
    StructuredLogger,
    create_logger,
)

__all__ = [
    '__version__',
    # Schemas
    'Timestamp',
    'TrackerReport',
    'TrackerReportMessage',
    # Publishers
    'TrackerReportPublisher',
    # Logging
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
