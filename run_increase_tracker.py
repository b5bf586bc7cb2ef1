#!/usr/bin/env python3
"""
Increase Tracker Service - Entry Point
======================================

This script starts a tracker service, which:
- Polls a (simulated) narrow wrapping counter on a fixed interval
- Accumulates the total increase in a wider integer
- Publishes a tracker report to MQTT after each sample (optional)

Usage:
    python run_increase_tracker.py --config config/increase_tracker.yaml

Lifecycle:
    1. Load configuration from YAML
    2. Setup logging (console + file)
    3. Create tracker, source and publisher
    4. Start sampler (non-blocking)
    5. Wait for stop signal (Ctrl+C, SIGTERM), overflow, or --duration
    6. Graceful shutdown
"""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from increase_tracker import (
    IncreaseTracker,
    PeriodicSampler,
    TotalOutOfBounds,
    TrackerSnapshot,
    ValueOutOfRange,
)
from increase_tracker.config import AppConfig
from increase_tracker.source import SimulatedCounter
from increase_mqtt import LogEvent, TrackerReport, TrackerReportPublisher, create_logger


# ─────────────────────────────────────────────────────────────────────────────
# Logging Setup
# ─────────────────────────────────────────────────────────────────────────────

def setup_logging(log_file: Optional[Path] = None) -> logging.Logger:
    """
    Setup logging for the tracker service.

    Args:
        log_file: Optional path to log file

    Returns:
        Logger instance for the service
    """
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            *(
                [logging.FileHandler(log_file)]
                if log_file
                else []
            )
        ]
    )

    return logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Main Service
# ─────────────────────────────────────────────────────────────────────────────

class TrackerApp:
    """
    Application wrapper for the tracker service.

    Handles:
    - Configuration loading
    - Component initialization (tracker, source, sampler, publisher)
    - Signal handling (SIGTERM, SIGINT)
    - Graceful shutdown
    """

    def __init__(self, config_path: Path, log_file: Optional[Path] = None, max_step: int = 40):
        self.config_path = config_path
        self.log_file = log_file
        self.max_step = max_step
        self.logger = setup_logging(log_file)
        self.events = create_logger(component="tracker_service")

        # Components (initialized in setup())
        self.config: Optional[AppConfig] = None
        self.tracker: Optional[IncreaseTracker] = None
        self.source: Optional[SimulatedCounter] = None
        self.sampler: Optional[PeriodicSampler] = None
        self.publisher: Optional[TrackerReportPublisher] = None

        self._shutdown_requested = False

    def setup(self):
        """
        Setup all components.

        Steps:
        1. Load configuration from YAML
        2. Create tracker and simulated source
        3. Create report publisher (if MQTT configured)
        4. Create sampler
        """
        self.logger.info("=" * 80)
        self.logger.info("🚀 Increase Tracker - Starting")
        self.logger.info("=" * 80)

        # 1. Load configuration
        self.logger.info(f"📄 Loading configuration: {self.config_path}")
        self.config = AppConfig.from_yaml(self.config_path)
        tracker_cfg = self.config.tracker

        # 2. Tracker + source
        self.tracker = tracker_cfg.build()
        self.source = SimulatedCounter(
            width=tracker_cfg.update_width,
            start=tracker_cfg.initial_offset,
            max_step=self.max_step,
        )
        self.events.info(
            event=LogEvent.TRACKER_CREATED,
            message="Tracker created",
            metadata={
                'tracker_id': tracker_cfg.tracker_id,
                'update_width': tracker_cfg.update_width,
                'track_width': tracker_cfg.track_width,
                'initial_offset': tracker_cfg.initial_offset,
            }
        )

        # 3. Publisher
        if self.config.mqtt:
            mqtt_cfg = self.config.mqtt
            self.publisher = TrackerReportPublisher(
                broker_host=mqtt_cfg.broker,
                broker_port=mqtt_cfg.port,
                topic=self.config.report_topic,
                logger=create_logger(component="mqtt_publisher"),
                client_id=f"increase_tracker_{tracker_cfg.tracker_id}",
                username=mqtt_cfg.username,
                password=mqtt_cfg.password,
                qos=mqtt_cfg.qos,
            )
            self.logger.info(f"  - Report topic: {self.config.report_topic}")
            if not self.publisher.connect():
                self.logger.warning("⚠️  MQTT broker unavailable, reports will be dropped")

        # 4. Sampler
        self.sampler = PeriodicSampler(
            tracker=self.tracker,
            source=self.source.read,
            interval=self.config.sampler.interval,
            on_update=self._on_update,
            on_overflow=self._on_overflow,
            on_discard=self._on_discard,
        )
        self.logger.info("✅ Setup complete")

    def _on_update(self, snapshot: TrackerSnapshot) -> None:
        tracker_cfg = self.config.tracker
        self.events.info(
            event=LogEvent.TRACKER_UPDATED,
            message="Applied sample",
            metadata={'tracker_id': tracker_cfg.tracker_id, **snapshot.to_dict()}
        )
        if self.publisher:
            self.publisher.publish_reports([
                TrackerReport.from_snapshot(
                    tracker_cfg.tracker_id,
                    snapshot,
                    update_width=tracker_cfg.update_width,
                    track_width=tracker_cfg.track_width,
                )
            ])

    def _on_discard(self, error: ValueOutOfRange) -> None:
        self.events.warning(
            event=LogEvent.SAMPLE_DISCARDED,
            message="Sample does not fit the update width",
            metadata={
                'tracker_id': self.config.tracker.tracker_id,
                'value': error.value,
                'maximum': error.maximum,
            }
        )

    def _on_overflow(self, error: TotalOutOfBounds) -> None:
        self.events.error(
            event=LogEvent.TRACKER_OVERFLOWED,
            message="Tracker total out of bounds, recreate with a wider track width",
            exc_info=error,
            metadata={
                'tracker_id': self.config.tracker.tracker_id,
                'increased': error.increased,
                'delta': error.delta,
                'track_max': error.track_max,
            }
        )

    def run(self, duration: Optional[float] = None):
        """
        Run the tracker service.

        Blocks until shutdown is requested, the tracker overflows, or
        duration seconds have elapsed.
        """
        if not self.sampler:
            raise RuntimeError("Service not initialized. Call setup() first.")

        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        try:
            self.sampler.start()
            self.logger.info("Press Ctrl+C to stop")
            self.sampler.wait(timeout=duration)
        except Exception as e:
            self.logger.error(f"❌ Service error: {e}", exc_info=True)
            self.shutdown()
            sys.exit(1)

        self.shutdown()

    def shutdown(self):
        """Stop sampler, disconnect publisher, log final totals."""
        if self._shutdown_requested:
            return
        self._shutdown_requested = True

        self.logger.info("🛑 Shutting down tracker service")

        if self.sampler:
            self.sampler.stop(timeout=5.0)

        if self.publisher:
            self.publisher.disconnect()

        if self.tracker:
            snapshot = self.tracker.snapshot()
            self.logger.info(
                f"📊 Final: increased={snapshot.increased} offset={snapshot.offset} "
                f"state={snapshot.state.value} (source advanced {self.source.advanced})"
            )

        self.logger.info("✅ Shutdown complete")

    def _signal_handler(self, signum, frame):
        signal_name = signal.Signals(signum).name
        self.logger.info(f"⚠️  Received signal {signal_name} ({signum})")
        self.shutdown()
        sys.exit(0)


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────

def parse_args():
    parser = argparse.ArgumentParser(
        description="Increase Tracker - accumulate a wrapping counter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with config
  python run_increase_tracker.py --config config/increase_tracker.yaml

  # Run for 30 seconds, logging to file
  python run_increase_tracker.py --config config/increase_tracker.yaml --duration 30 --log-file logs/tracker.log
        """
    )
    parser.add_argument("--config", type=Path, required=True, help="Path to YAML configuration")
    parser.add_argument("--log-file", type=Path, default=None, help="Optional log file")
    parser.add_argument("--duration", type=float, default=None, help="Stop after N seconds")
    parser.add_argument("--max-step", type=int, default=40, help="Largest simulated increment per read")
    return parser.parse_args()


def main():
    args = parse_args()

    app = TrackerApp(config_path=args.config, log_file=args.log_file, max_step=args.max_step)
    try:
        app.setup()
    except (FileNotFoundError, ValueError) as e:
        app.logger.error(f"❌ Invalid configuration: {e}")
        sys.exit(2)

    app.run(duration=args.duration)


if __name__ == "__main__":
    main()
