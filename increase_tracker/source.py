"""
Simulated wrapping source.

A narrow hardware-style counter for demos and tests: every read advances it
by a random step and it rolls over past the maximum of its width.
"""

import threading
from typing import Optional

import numpy as np

from increase_tracker.widths import WidthLike, check_value, resolve_width, width_max


class SimulatedCounter:
    """
    Counter stored in a fixed-width unsigned integer that wraps on overflow.

    Usage:
        source = SimulatedCounter(width=np.uint8, max_step=40, seed=7)
        value = source.read()
    """

    def __init__(
        self,
        width: WidthLike = np.uint8,
        start: int = 0,
        max_step: int = 1,
        seed: Optional[int] = None,
    ):
        self.dtype = resolve_width(width)
        self.modulus = width_max(self.dtype) + 1
        if max_step < 1:
            raise ValueError(f"max_step must be >= 1, got {max_step}")

        self.max_step = max_step
        self._value = check_value(start, self.dtype)
        self._advanced = 0
        self._rng = np.random.default_rng(seed)
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    @property
    def advanced(self) -> int:
        """True number of increments since creation (ignores wraparound)."""
        with self._lock:
            return self._advanced

    def advance(self, step: int) -> int:
        """Advance by step, wrapping at the width; returns the new value."""
        if step < 0:
            raise ValueError(f"step must be >= 0, got {step}")
        with self._lock:
            self._value = (self._value + step) % self.modulus
            self._advanced += step
            return self._value

    def read(self) -> int:
        """Advance by a random step in [1, max_step] and return the value."""
        step = int(self._rng.integers(1, self.max_step, endpoint=True))
        return self.advance(step)

    def __repr__(self) -> str:
        return f"SimulatedCounter(width={self.dtype.name}, value={self.value})"
