"""
Tracker Errors
==============

Error taxonomy for the increase tracker.

    IncreaseTrackerError
    ├── ConstructionError      # detected eagerly, at construction
    │   ├── TrackWidthTooSmall
    │   └── UnsupportedWidth
    ├── UpdateError            # detected per update, before the total changes
    │   └── TotalOutOfBounds
    └── ValueOutOfRange        # sampled value does not fit the update width
"""

from typing import Any


class IncreaseTrackerError(Exception):
    """Base class for all tracker errors."""
    pass


class ConstructionError(IncreaseTrackerError):
    """Raised when a tracker cannot be built with the requested widths."""
    pass


class TrackWidthTooSmall(ConstructionError):
    """Raised when max(track) is not strictly greater than max(update)."""

    def __init__(self, track_name: str, track_max: int, update_name: str, update_max: int):
        self.track_max = track_max
        self.update_max = update_max
        super().__init__(
            f"Track width {track_name} (max {track_max}) must be wider than "
            f"update width {update_name} (max {update_max})"
        )


class UnsupportedWidth(ConstructionError, TypeError):
    """Raised for widths that are not unsigned fixed-width integers."""
    pass


class UpdateError(IncreaseTrackerError):
    """Raised when an update cannot be applied to the total."""
    pass


class TotalOutOfBounds(UpdateError):
    """
    Raised when adding the next delta would exceed the track width.

    The total is left at its last valid value; the offset has already
    advanced to the sampled value.
    """

    def __init__(self, increased: int, delta: int, track_max: int):
        self.increased = increased
        self.delta = delta
        self.track_max = track_max
        super().__init__(
            f"Total {increased} + delta {delta} exceeds track maximum {track_max}"
        )


class ValueOutOfRange(IncreaseTrackerError, ValueError):
    """Raised when a value is not an integer in [0, max(update)]."""

    def __init__(self, value: Any, maximum: int):
        self.value = value
        self.maximum = maximum
        super().__init__(f"Value must be an integer in [0, {maximum}], got {value!r}")
