"""
Tracker Report Message Schema
=============================

Bounded Context: Tracker Report Data Structures

Design:
- TrackerReport: One tracker's state (mirrors increase_tracker.TrackerSnapshot)
- TrackerReportMessage: Envelope with schema version, timestamp and sequence

Message Flow:
    PeriodicSampler → TrackerSnapshot → TrackerReport → TrackerReportPublisher → MQTT
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any

from increase_tracker.tracker import IncreaseTracker, TrackerSnapshot, TrackerState
from .common import Timestamp


@dataclass(frozen=True)
class TrackerReport:
    """
    Serializable tracker state.

    Attributes:
        tracker_id: User-defined tracker identifier
        offset: Last sampled source value
        increased: Accumulated total
        state: Tracker state ("valid" or "overflowed")
        update_width: Name of the narrow source width (e.g. "uint8")
        track_width: Name of the total width (e.g. "uint64")

    Invariants:
        - offset >= 0, increased >= 0
    """
    tracker_id: str
    offset: int
    increased: int
    state: TrackerState = TrackerState.VALID
    update_width: str = "uint8"
    track_width: str = "uint64"

    def __post_init__(self):
        """Validate invariants."""
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0, got {self.offset}")
        if self.increased < 0:
            raise ValueError(f"increased must be >= 0, got {self.increased}")

    @classmethod
    def from_tracker(cls, tracker_id: str, tracker: IncreaseTracker) -> 'TrackerReport':
        """Build a report from a consistent snapshot of tracker."""
        return cls.from_snapshot(
            tracker_id,
            tracker.snapshot(),
            update_width=tracker.update_dtype.name,
            track_width=tracker.track_dtype.name,
        )

    @classmethod
    def from_snapshot(
        cls,
        tracker_id: str,
        snapshot: TrackerSnapshot,
        update_width: str = "uint8",
        track_width: str = "uint64",
    ) -> 'TrackerReport':
        return cls(
            tracker_id=tracker_id,
            offset=snapshot.offset,
            increased=snapshot.increased,
            state=snapshot.state,
            update_width=update_width,
            track_width=track_width,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            'tracker_id': self.tracker_id,
            'offset': self.offset,
            'increased': self.increased,
            'state': self.state.value,
            'update_width': self.update_width,
            'track_width': self.track_width,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrackerReport':
        """Deserialize from dict.

        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            return cls(
                tracker_id=str(data['tracker_id']),
                offset=int(data['offset']),
                increased=int(data['increased']),
                state=TrackerState(data.get('state', TrackerState.VALID.value)),
                update_width=str(data.get('update_width', 'uint8')),
                track_width=str(data.get('track_width', 'uint64')),
            )
        except KeyError as e:
            raise ValueError(f"Missing required TrackerReport field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid TrackerReport data: {e}")


@dataclass(frozen=True)
class TrackerReportMessage:
    """
    Complete report message for MQTT publication.

    Attributes:
        schema_version: Message schema version (for evolution)
        timestamp: ISO 8601 timestamp of message creation
        sequence: Monotonic message counter of the publishing service
        reports: One report per tracker

    Example:
        >>> msg = TrackerReportMessage(
        ...     schema_version="1.0",
        ...     timestamp=Timestamp.now(),
        ...     sequence=42,
        ...     reports=[TrackerReport.from_tracker("packets", tracker)]
        ... )
    """
    schema_version: str
    timestamp: Timestamp
    sequence: int
    reports: List[TrackerReport] = field(default_factory=list)

    def __post_init__(self):
        """Validate invariants."""
        if self.sequence < 0:
            raise ValueError(f"Sequence must be >= 0, got {self.sequence}")

    @property
    def report_count(self) -> int:
        return len(self.reports)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            'schema_version': self.schema_version,
            'timestamp': self.timestamp.to_dict(),
            'sequence': self.sequence,
            'reports': [report.to_dict() for report in self.reports]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TrackerReportMessage':
        """Deserialize from dict.

        Raises:
            ValueError: If required fields missing or invalid
        """
        try:
            return cls(
                schema_version=str(data['schema_version']),
                timestamp=Timestamp(value=str(data['timestamp'])),
                sequence=int(data['sequence']),
                reports=[TrackerReport.from_dict(r) for r in data.get('reports', [])]
            )
        except KeyError as e:
            raise ValueError(f"Missing required TrackerReportMessage field: {e}")
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid TrackerReportMessage data: {e}")
