"""
Periodic Sampler - polls a wrapping source and feeds a tracker.

Threading Model:
- Sampler Thread (ours, daemon): calls source() then tracker.sample()
  every `interval` seconds until stopped
- Callbacks (on_update, on_discard, on_overflow) run in the sampler thread,
  keep them fast

An overflowed tracker cannot be trusted any more, so the loop stops at the
first TotalOutOfBounds and refuses to start again. Source failures and
out-of-range samples are logged and the next tick is attempted.
"""

import logging
import threading
from typing import Callable, Optional

from increase_tracker.errors import TotalOutOfBounds, ValueOutOfRange
from increase_tracker.tracker import IncreaseTrackable, TrackerSnapshot, TrackerState

logger = logging.getLogger(__name__)


class PeriodicSampler:
    """
    Samples a source on a fixed interval and applies it to a tracker.

    Example:
        tracker = IncreaseTracker(source.read(), track=np.uint64, update=np.uint8)
        sampler = PeriodicSampler(tracker, source.read, interval=15.0)
        sampler.start()
        ...
        sampler.stop()
        print(tracker.increased)
    """

    def __init__(
        self,
        tracker: IncreaseTrackable,
        source: Callable[[], int],
        interval: float,
        on_update: Optional[Callable[[TrackerSnapshot], None]] = None,
        on_overflow: Optional[Callable[[TotalOutOfBounds], None]] = None,
        on_discard: Optional[Callable[[ValueOutOfRange], None]] = None,
    ):
        """
        Initialize sampler.

        Args:
            tracker: Tracker to feed
            source: Callable returning the current narrow source value
            interval: Seconds between samples (> 0)
            on_update: Called with the snapshot of each successful update
            on_overflow: Called once when the tracker overflows
            on_discard: Called when the loop drops an out-of-range sample
        """
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")

        self.tracker = tracker
        self.source = source
        self.interval = interval
        self.on_update = on_update
        self.on_overflow = on_overflow
        self.on_discard = on_discard

        self.stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._sample_count = 0
        self._error_count = 0
        self._stats_lock = threading.Lock()

    def sample_once(self) -> int:
        """
        Read the source once and update the tracker.

        Returns:
            New tracker total

        Raises:
            TotalOutOfBounds: If the tracker overflowed (sampler is stopped)
            ValueOutOfRange: If the source returned a value outside the width
        """
        value = self.source()

        try:
            snapshot = self.tracker.sample(value)
        except TotalOutOfBounds as e:
            logger.error(f"Tracker overflowed, stopping sampler: {e}")
            self.stop_event.set()
            if self.on_overflow:
                self.on_overflow(e)
            raise

        with self._stats_lock:
            self._sample_count += 1

        if self.on_update:
            self.on_update(snapshot)
        return snapshot.increased

    def start(self) -> bool:
        """
        Start sampling in a background thread (non-blocking).

        Returns:
            False if already running or the tracker has overflowed
        """
        if self.is_running():
            logger.warning("Sampler already running")
            return False

        if self.tracker.snapshot().state is TrackerState.OVERFLOWED:
            logger.warning("Tracker has overflowed, sampler not started")
            self.stop_event.set()
            return False

        self.stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="increase-tracker-sampler",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"Sampler started (interval={self.interval}s)")
        return True

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the loop to stop and wait for the thread to exit."""
        self.stop_event.set()
        thread = self._thread
        if thread and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        logger.info("Sampler stopped")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the sampler stops.

        Returns:
            True if the sampler stopped within timeout
        """
        return self.stop_event.wait(timeout=timeout)

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def get_stats(self) -> dict:
        """
        Get sampler statistics.

        Returns:
            Dictionary with sample/error counts and running status
        """
        with self._stats_lock:
            return {
                'sample_count': self._sample_count,
                'error_count': self._error_count,
                'running': self.is_running(),
                'interval': self.interval,
            }

    def _run(self) -> None:
        logger.info("Sampler loop started")

        while not self.stop_event.wait(timeout=self.interval):
            try:
                self.sample_once()
            except TotalOutOfBounds:
                break
            except ValueOutOfRange as e:
                self._discard(e)
            except Exception as e:
                self._count_error()
                logger.error(f"Error sampling source: {e}", exc_info=True)

        logger.info("Sampler loop stopped")

    def _discard(self, error: ValueOutOfRange) -> None:
        self._count_error()
        logger.warning(f"Discarded sample: {error}")
        if not self.on_discard:
            return
        try:
            self.on_discard(error)
        except Exception as e:
            logger.error(f"Error in discard callback: {e}", exc_info=True)

    def _count_error(self) -> None:
        with self._stats_lock:
            self._error_count += 1
