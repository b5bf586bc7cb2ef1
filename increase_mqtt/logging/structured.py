"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

One JSON object per record, on top of Python's logging module:

    {"timestamp": "2025-10-24T15:30:45.123456+00:00", "level": "INFO",
     "component": "tracker_service", "event": "tracker.updated",
     "message": "Applied sample",
     "metadata": {"tracker_id": "packets", "increased": 260}}
"""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from .events import LogEvent


class StructuredLogger:
    """
    JSON logger bound to one component.

    Records go to the logger named increase_mqtt.<component>, which gets a
    pass-through JSON handler the first time it is used.

    Thread Safety:
        Thread-safe via Python's logging module.
    """

    def __init__(self, component: str, level: int = logging.INFO):
        self.component = component
        self.logger = logging.getLogger(f"increase_mqtt.{component}")
        self.logger.setLevel(level)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def _emit(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]],
        exc_info: Optional[BaseException] = None
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        entry: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': logging.getLevelName(level),
            'component': self.component,
            'event': event.value,
            'message': message,
        }
        if metadata:
            entry['metadata'] = metadata
        if exc_info is not None:
            entry['exception'] = {'type': type(exc_info).__name__, 'message': str(exc_info)}

        self.logger.log(level, json.dumps(entry, default=str))

    def info(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.INFO, event, message, metadata)

    def warning(self, event: LogEvent, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._emit(logging.WARNING, event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log ERROR level message; exc_info is summarized under "exception".

        Example:
            >>> try:
            ...     tracker.update(value)
            ... except TotalOutOfBounds as e:
            ...     logger.error(LogEvent.TRACKER_OVERFLOWED, "Tracker overflowed",
            ...                  metadata={'tracker_id': 'packets'}, exc_info=e)
        """
        self._emit(logging.ERROR, event, message, metadata, exc_info)


class JSONFormatter(logging.Formatter):
    """Passes through the JSON string already built by StructuredLogger."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


def create_logger(component: str, level: int = logging.INFO) -> StructuredLogger:
    """Create a StructuredLogger for component."""
    return StructuredLogger(component=component, level=level)
