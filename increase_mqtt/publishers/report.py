"""
Tracker Report Publisher
========================

Bounded Context: Tracker Report Production

Message Flow:
    TrackerSnapshot → TrackerReport → TrackerReportMessage → TrackerReportPublisher → MQTT Broker

Reports are published retained, so a consumer that subscribes late still
gets the last known totals. Every message carries a sequence number; the
publisher counts delivered reports per tracker.

Example:
    >>> publisher = TrackerReportPublisher(
    ...     broker_host="localhost",
    ...     topic="increase_tracker/reports/packets",
    ...     logger=create_logger("reporter")
    ... )
    >>> if publisher.connect():
    ...     publisher.publish_reports([TrackerReport.from_tracker("packets", tracker)])
"""

import itertools
import json
import threading
from collections import Counter
from typing import Dict, Any, List, Optional

import paho.mqtt.client as mqtt

from ..schemas import Timestamp, TrackerReport, TrackerReportMessage
from ..logging import StructuredLogger, LogEvent


class TrackerReportPublisher:
    """
    Publishes tracker report messages to one MQTT topic.

    Threading:
        paho-mqtt runs its network loop in a background thread (loop_start);
        publish_report() may be called from any thread, e.g. sampler callbacks.
    """

    schema_version = "1.0"

    def __init__(
        self,
        broker_host: str,
        topic: str,
        logger: StructuredLogger,
        broker_port: int = 1883,
        client_id: str = "increase_tracker_report_publisher",
        username: Optional[str] = None,
        password: Optional[str] = None,
        qos: int = 0
    ):
        """
        Initialize report publisher.

        Args:
            broker_host: MQTT broker hostname
            topic: Topic reports are published to
            logger: Structured logger for observability
            broker_port: MQTT broker port (default: 1883)
            client_id: MQTT client ID
            username: MQTT auth username (optional)
            password: MQTT auth password (optional)
            qos: Quality of Service (default: 0)
        """
        self.broker = f"{broker_host}:{broker_port}"
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.topic = topic
        self.logger = logger
        self.qos = qos

        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        if username and password:
            self.client.username_pw_set(username, password)
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        self._connected = threading.Event()
        self._sequence = itertools.count()
        self._last_sequence: Optional[int] = None
        self._published_by_tracker: Counter = Counter()
        self._lock = threading.Lock()

    # ── connection ───────────────────────────────────────────────────────────

    def _on_connect(self, client, userdata, flags, reason_code, properties) -> None:
        if reason_code.is_failure:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message=f"Broker refused connection ({reason_code})",
                metadata={'broker': self.broker}
            )
            return

        self._connected.set()
        self.logger.info(
            event=LogEvent.MQTT_CONNECTED,
            message="Connected to MQTT broker",
            metadata={'broker': self.broker, 'topic': self.topic}
        )

    def _on_disconnect(self, client, userdata, flags, reason_code, properties) -> None:
        self._connected.clear()
        self.logger.warning(
            event=LogEvent.MQTT_DISCONNECTED,
            message="Disconnected from MQTT broker",
            metadata={'broker': self.broker, 'reason_code': str(reason_code)}
        )

    def connect(self, timeout: float = 10.0) -> bool:
        """
        Connect and start the network loop.

        Returns:
            True if connected within timeout
        """
        try:
            self.client.connect(self.broker_host, self.broker_port)
            self.client.loop_start()
        except OSError as e:
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Failed to connect to broker",
                metadata={'broker': self.broker},
                exc_info=e
            )
            return False

        if not self._connected.wait(timeout=timeout):
            self.logger.error(
                event=LogEvent.MQTT_CONNECTION_ERROR,
                message="Connection timeout",
                metadata={'broker': self.broker, 'timeout': timeout}
            )
            return False
        return True

    def disconnect(self) -> None:
        """Stop the network loop and disconnect."""
        self.client.loop_stop()
        self.client.disconnect()
        self._connected.clear()

    def is_connected(self) -> bool:
        return self._connected.is_set()

    # ── reports ──────────────────────────────────────────────────────────────

    def build_message(self, reports: List[TrackerReport]) -> TrackerReportMessage:
        """Wrap reports in a message carrying the next sequence number."""
        with self._lock:
            sequence = next(self._sequence)
        return TrackerReportMessage(
            schema_version=self.schema_version,
            timestamp=Timestamp.now(),
            sequence=sequence,
            reports=list(reports),
        )

    def publish_report(self, report_msg: TrackerReportMessage) -> bool:
        """
        Publish a report message (retained).

        Returns:
            True if handed to the broker, False otherwise
        """
        tracker_ids = [r.tracker_id for r in report_msg.reports]
        context = {'sequence': report_msg.sequence, 'tracker_ids': tracker_ids, 'topic': self.topic}

        if not self._connected.is_set():
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message="Cannot publish report: not connected to broker",
                metadata=context
            )
            return False

        try:
            result = self.client.publish(
                topic=self.topic,
                payload=json.dumps(report_msg.to_dict()),
                qos=self.qos,
                retain=True
            )
        except (ValueError, RuntimeError) as e:
            self.logger.error(
                event=LogEvent.MQTT_PUBLISH_ERROR,
                message="Error publishing report",
                metadata=context,
                exc_info=e
            )
            return False

        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            self.logger.warning(
                event=LogEvent.MQTT_PUBLISH_FAILED,
                message=f"Publish failed (rc={result.rc})",
                metadata=context
            )
            return False

        with self._lock:
            self._published_by_tracker.update(tracker_ids)
            self._last_sequence = report_msg.sequence

        self.logger.info(
            event=LogEvent.REPORT_PUBLISHED,
            message=f"Published {report_msg.report_count} tracker reports",
            metadata={
                **context,
                'totals': {r.tracker_id: r.increased for r in report_msg.reports},
                'states': {r.tracker_id: r.state.value for r in report_msg.reports},
            }
        )
        return True

    def publish_reports(self, reports: List[TrackerReport]) -> bool:
        """Build a message from reports and publish it."""
        return self.publish_report(self.build_message(reports))

    def get_stats(self) -> Dict[str, Any]:
        """
        Get publisher statistics.

        Returns:
            Reports delivered per tracker, last delivered sequence, connection
        """
        with self._lock:
            return {
                'reports_by_tracker': dict(self._published_by_tracker),
                'last_sequence': self._last_sequence,
                'connected': self._connected.is_set(),
                'topic': self.topic,
                'broker': self.broker,
            }
