"""
Tests for PeriodicSampler and SimulatedCounter.

Usage:
    pytest test_sampler.py
"""

import itertools
import threading

import numpy as np
import pytest

from increase_tracker import IncreaseTracker, PeriodicSampler, TotalOutOfBounds, ValueOutOfRange
from increase_tracker.source import SimulatedCounter


def _full_u16_tracker() -> IncreaseTracker:
    tracker = IncreaseTracker(track=np.uint16, update=np.uint8)
    for _ in range(257):
        tracker.update(255)
        tracker.update(0)
    return tracker


def test_sample_once_feeds_tracker_and_callback():
    tracker = IncreaseTracker(0, track=np.uint16, update=np.uint8)
    values = iter([10, 5])
    snapshots = []
    sampler = PeriodicSampler(tracker, lambda: next(values), interval=1.0, on_update=snapshots.append)

    assert sampler.sample_once() == 10
    assert sampler.sample_once() == 260
    assert [s.increased for s in snapshots] == [10, 260]
    assert snapshots[-1].offset == 5
    assert sampler.get_stats()['sample_count'] == 2


def test_interval_must_be_positive():
    tracker = IncreaseTracker()
    with pytest.raises(ValueError):
        PeriodicSampler(tracker, lambda: 0, interval=0)


def test_sample_once_propagates_out_of_range_values():
    tracker = IncreaseTracker(track=np.uint16, update=np.uint8)
    sampler = PeriodicSampler(tracker, lambda: 300, interval=1.0)

    with pytest.raises(ValueOutOfRange):
        sampler.sample_once()
    assert tracker.offset == 0


def test_overflow_stops_sampler_and_notifies():
    tracker = _full_u16_tracker()
    overflows = []
    sampler = PeriodicSampler(tracker, lambda: 1, interval=1.0, on_overflow=overflows.append)

    with pytest.raises(TotalOutOfBounds):
        sampler.sample_once()

    assert len(overflows) == 1
    assert overflows[0].increased == 65535
    assert sampler.stop_event.is_set()
    assert tracker.offset == 1


def test_background_loop_samples_until_stopped():
    tracker = IncreaseTracker(0, track=np.uint64, update=np.uint8)
    counter = itertools.count(1)
    reached = threading.Event()

    def on_update(snapshot):
        if snapshot.update_count >= 5:
            reached.set()

    sampler = PeriodicSampler(tracker, lambda: next(counter) % 256, interval=0.01, on_update=on_update)
    sampler.start()
    try:
        assert reached.wait(timeout=5.0)
        assert sampler.is_running()
    finally:
        sampler.stop(timeout=5.0)

    assert not sampler.is_running()
    assert tracker.increased >= 5


def test_background_loop_exits_on_overflow():
    tracker = _full_u16_tracker()
    sampler = PeriodicSampler(tracker, lambda: 1, interval=0.01)

    sampler.start()
    assert sampler.wait(timeout=5.0)
    sampler.stop(timeout=5.0)

    assert not sampler.is_running()
    assert tracker.overflowed
    assert tracker.increased == 65535


def test_background_loop_survives_source_errors():
    tracker = IncreaseTracker(0, track=np.uint64, update=np.uint8)
    reads = itertools.count()
    reached = threading.Event()

    def source():
        n = next(reads)
        if n == 0:
            raise RuntimeError("sensor unavailable")
        if n == 1:
            return 999
        return n

    def on_update(snapshot):
        if snapshot.update_count >= 2:
            reached.set()

    sampler = PeriodicSampler(tracker, source, interval=0.01, on_update=on_update)
    sampler.start()
    try:
        assert reached.wait(timeout=5.0)
    finally:
        sampler.stop(timeout=5.0)

    assert sampler.get_stats()['error_count'] == 2


def test_start_twice_is_a_no_op():
    tracker = IncreaseTracker()
    sampler = PeriodicSampler(tracker, lambda: 0, interval=0.05)

    sampler.start()
    thread = sampler._thread
    try:
        sampler.start()
        assert sampler._thread is thread
    finally:
        sampler.stop(timeout=5.0)


# ─────────────────────────────────────────────────────────────────────────────
# SimulatedCounter
# ─────────────────────────────────────────────────────────────────────────────

def test_simulated_counter_wraps_at_width():
    source = SimulatedCounter(width=np.uint8, start=250)

    assert source.advance(5) == 255
    assert source.advance(1) == 0
    assert source.advance(300) == 44
    assert source.advanced == 306


def test_simulated_counter_reads_stay_in_width():
    source = SimulatedCounter(width="uint16", max_step=5000, seed=11)

    values = [source.read() for _ in range(200)]

    assert all(0 <= v <= 65535 for v in values)
    assert source.advanced >= 200


def test_simulated_counter_validation():
    with pytest.raises(ValueError):
        SimulatedCounter(max_step=0)
    with pytest.raises(ValueOutOfRange):
        SimulatedCounter(width=np.uint8, start=256)
    with pytest.raises(ValueError):
        SimulatedCounter().advance(-1)


def test_start_refuses_overflowed_tracker():
    tracker = _full_u16_tracker()
    sampler = PeriodicSampler(tracker, lambda: 1, interval=0.01)

    with pytest.raises(TotalOutOfBounds):
        sampler.sample_once()

    assert sampler.start() is False
    assert not sampler.is_running()
    assert sampler.wait(timeout=0)
    assert sampler.get_stats()['sample_count'] == 0
    assert tracker.offset == 1


def test_start_refuses_tracker_that_overflowed_elsewhere():
    tracker = _full_u16_tracker()
    with pytest.raises(TotalOutOfBounds):
        tracker.update(7)

    sampler = PeriodicSampler(tracker, lambda: 9, interval=0.01)

    assert sampler.start() is False
    assert not sampler.is_running()
    assert tracker.offset == 7


def test_update_callback_gets_snapshot_of_that_update():
    tracker = IncreaseTracker(0, track=np.uint16, update=np.uint8)
    snapshots = []
    sampler = PeriodicSampler(tracker, lambda: 40, interval=1.0, on_update=snapshots.append)

    total = sampler.sample_once()

    assert snapshots[0].increased == total == 40
    assert snapshots[0].offset == 40
    assert snapshots[0].update_count == 1


def test_background_loop_reports_discarded_samples():
    tracker = IncreaseTracker(0, track=np.uint64, update=np.uint8)
    discarded = []
    reached = threading.Event()

    def on_discard(error):
        discarded.append(error)
        reached.set()

    sampler = PeriodicSampler(tracker, lambda: 1000, interval=0.01, on_discard=on_discard)
    sampler.start()
    try:
        assert reached.wait(timeout=5.0)
    finally:
        sampler.stop(timeout=5.0)

    assert discarded[0].value == 1000
    assert discarded[0].maximum == 255
    assert tracker.increased == 0
    assert tracker.offset == 0
