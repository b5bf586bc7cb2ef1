"""
Increase Tracker Module
=======================

Stateful accumulator for a narrow, wrapping source value.

A source stored in a small unsigned type (e.g. an 8-bit hardware counter)
rolls over at its maximum. The tracker remembers the last sampled value
(offset) and accumulates every observed increase into a wider unsigned type
(increased), so the total keeps counting after the source wraps.

Design:
- Mutable state (offset, increased) guarded by one lock as a single unit
- Immutable snapshots (TrackerSnapshot) for readers
- Widths validated once, at construction
- Never logs; every failure is raised to the caller

Usage:
    tracker = IncreaseTracker(source.current_count, track=np.uint64, update=np.uint8)

    # Every tick
    tracker.update(source.current_count)

    # Reporting
    print(tracker.increased)
"""

import threading
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Protocol

import numpy as np

from increase_tracker.errors import TotalOutOfBounds, TrackWidthTooSmall
from increase_tracker.widths import WidthLike, check_value, resolve_width, width_max


class TrackerState(str, Enum):
    """Tracker lifecycle state."""
    VALID = "valid"
    OVERFLOWED = "overflowed"  # terminal


@dataclass(frozen=True)
class TrackerSnapshot:
    """
    Immutable view of a tracker, read in one critical section.

    Attributes:
        offset: Last sampled source value
        increased: Accumulated total since tracking began
        state: VALID, or OVERFLOWED after the first TotalOutOfBounds
        update_count: Updates applied to the total
        overflow_count: Updates rejected with TotalOutOfBounds
    """
    offset: int
    increased: int
    state: TrackerState
    update_count: int = 0
    overflow_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        data = asdict(self)
        data['state'] = self.state.value
        return data


class IncreaseTrackable(Protocol):
    """Surface shared by trackers, used by samplers and reporters."""

    @property
    def increased(self) -> int: ...

    @property
    def offset(self) -> int: ...

    def update(self, value: int) -> int: ...

    def sample(self, value: int) -> TrackerSnapshot: ...

    def snapshot(self) -> TrackerSnapshot: ...


class IncreaseTracker:
    """
    Tracks the total increase of a wrapping source value.

    The update width is the width of the source; the track width is the width
    the total is kept in and must be strictly wider.

    Wraparound:
        If the sampled value is below the offset the source is assumed to
        have wrapped exactly once, and the delta is (max(update) - offset) +
        value. Several wraps between two samples are under-counted, so sample
        more often than the source wraps.

    Thread Safety:
        update() and every read accessor take the same lock.

    Example:
        >>> tracker = IncreaseTracker(0, track=np.uint16, update=np.uint8)
        >>> tracker.update(10)
        10
        >>> tracker.update(5)
        260
        >>> tracker.offset
        5
    """

    def __init__(
        self,
        offset: int = 0,
        *,
        track: WidthLike = np.uint64,
        update: WidthLike = np.uint8,
    ):
        """
        Initialize tracker.

        Args:
            offset: Starting source value (default: 0)
            track: Width of the accumulated total (default: uint64)
            update: Width of the sampled source value (default: uint8)

        Raises:
            UnsupportedWidth: If a width is not an unsigned integer type
            TrackWidthTooSmall: If track is not strictly wider than update
            ValueOutOfRange: If offset does not fit the update width
        """
        self.track_dtype = resolve_width(track)
        self.update_dtype = resolve_width(update)
        self.track_max = width_max(self.track_dtype)
        self.update_max = width_max(self.update_dtype)

        if self.track_max <= self.update_max:
            raise TrackWidthTooSmall(
                self.track_dtype.name, self.track_max,
                self.update_dtype.name, self.update_max,
            )

        self._offset = check_value(offset, self.update_dtype)
        self._increased = 0
        self._state = TrackerState.VALID
        self._update_count = 0
        self._overflow_count = 0
        self._lock = threading.Lock()

    @property
    def increased(self) -> int:
        """Amount the source has increased since the initial offset."""
        with self._lock:
            return self._increased

    @property
    def offset(self) -> int:
        """Last sampled source value."""
        with self._lock:
            return self._offset

    @property
    def state(self) -> TrackerState:
        with self._lock:
            return self._state

    @property
    def overflowed(self) -> bool:
        return self.state is TrackerState.OVERFLOWED

    def snapshot(self) -> TrackerSnapshot:
        """
        Get immutable snapshot of the tracker.

        Returns:
            TrackerSnapshot with offset and total from the same instant
        """
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> TrackerSnapshot:
        return TrackerSnapshot(
            offset=self._offset,
            increased=self._increased,
            state=self._state,
            update_count=self._update_count,
            overflow_count=self._overflow_count,
        )

    def delta(self, value: int) -> int:
        """
        Increase between the current offset and a sampled value.

        Does not modify the tracker.

        Raises:
            ValueOutOfRange: If value does not fit the update width
        """
        value = check_value(value, self.update_dtype)
        with self._lock:
            return self._delta(self._offset, value)

    def update(self, value: int) -> int:
        """
        Apply a newly sampled source value.

        The offset always moves to value, even when the total cannot be
        updated, so the next wraparound is detected from the latest sample.

        Args:
            value: Current source value

        Returns:
            The new total

        Raises:
            ValueOutOfRange: If value does not fit the update width
                (tracker left untouched)
            TotalOutOfBounds: If the total would exceed the track width
                (total left at its last valid value)
        """
        value = check_value(value, self.update_dtype)

        with self._lock:
            return self._apply(value)

    def sample(self, value: int) -> TrackerSnapshot:
        """
        Apply a sampled value like update(), returning the snapshot taken
        in the same critical section.

        Raises:
            ValueOutOfRange, TotalOutOfBounds: As update()
        """
        value = check_value(value, self.update_dtype)

        with self._lock:
            self._apply(value)
            return self._snapshot()

    def _apply(self, value: int) -> int:
        # caller holds self._lock
        delta = self._delta(self._offset, value)
        self._offset = value

        # max(track) - increased never underflows, so the check is exact
        if delta > self.track_max - self._increased:
            self._state = TrackerState.OVERFLOWED
            self._overflow_count += 1
            raise TotalOutOfBounds(self._increased, delta, self.track_max)

        self._increased += delta
        self._update_count += 1
        return self._increased

    def _delta(self, offset: int, value: int) -> int:
        if offset > value:
            # rolled over once
            return (self.update_max - offset) + value
        return value - offset

    def __repr__(self) -> str:
        """Human-readable representation."""
        snap = self.snapshot()
        return (
            f"IncreaseTracker(track={self.track_dtype.name}, "
            f"update={self.update_dtype.name}, offset={snap.offset}, "
            f"increased={snap.increased}, state={snap.state.value})"
        )
