"""
Message Schemas
===============

Immutable, JSON-serializable message types for tracker reports.
"""

from .common import Timestamp
from .report import TrackerReport, TrackerReportMessage

__all__ = [
    'Timestamp',
    'TrackerReport',
    'TrackerReportMessage',
]
