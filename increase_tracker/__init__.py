"""
Increase Tracker
================

Bounded Context: Accumulating the increase of a wrapping counter.

A source value kept in a narrow unsigned integer (e.g. an 8-bit hardware
counter) rolls over at its maximum. IncreaseTracker follows it sample by
sample and keeps the total increase in a wider unsigned integer.

Architecture:

    increase_tracker/
    ├── widths.py      # Unsigned width resolution (numpy dtypes)
    ├── errors.py      # Error taxonomy
    ├── tracker.py     # IncreaseTracker, TrackerSnapshot (stateful, locked)
    ├── sampler.py     # PeriodicSampler (background polling)
    └── config.py      # YAML configuration

Usage:

    import numpy as np
    from increase_tracker import IncreaseTracker, PeriodicSampler

    tracker = IncreaseTracker(source.current_count, track=np.uint64, update=np.uint8)

    # Poll every 15 seconds
    sampler = PeriodicSampler(tracker, lambda: source.current_count, interval=15)
    sampler.start()

    # Later
    print(tracker.increased)
"""

from increase_tracker.errors import (
    IncreaseTrackerError,
    ConstructionError,
    TrackWidthTooSmall,
    UnsupportedWidth,
    UpdateError,
    TotalOutOfBounds,
    ValueOutOfRange,
)
from increase_tracker.tracker import (
    IncreaseTrackable,
    IncreaseTracker,
    TrackerSnapshot,
    TrackerState,
)
from increase_tracker.sampler import PeriodicSampler

__all__ = [
    # Errors
    "IncreaseTrackerError",
    "ConstructionError",
    "TrackWidthTooSmall",
    "UnsupportedWidth",
    "UpdateError",
    "TotalOutOfBounds",
    "ValueOutOfRange",
    # Tracker
    "IncreaseTrackable",
    "IncreaseTracker",
    "TrackerSnapshot",
    "TrackerState",
    # Sampling
    "PeriodicSampler",
]

__version__ = "1.0.0"
