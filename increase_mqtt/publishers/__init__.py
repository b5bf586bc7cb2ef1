"""
MQTT Publishers
==============

Bounded Context: Message Production

Public API
----------
    TrackerReportPublisher: Tracker report publisher
"""

from .report import TrackerReportPublisher

__all__ = [
    'TrackerReportPublisher',
]
