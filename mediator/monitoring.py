"""
Monitoring Shim

Sessions, events and errors emitted by the mediation core. ``SafeMonitor``
wraps any ``MonitoringSink`` so that a failing sink is logged and ignored;
monitoring never aborts the operation being monitored.
"""

import logging
import threading
import time
import uuid
from abc import ABC, abstractmethod
from collections import deque
from contextlib import contextmanager
from typing import Any, Deque, Dict, Iterator, Optional


logger = logging.getLogger(__name__)


class MonitoringSink(ABC):
    """Destination for monitoring data."""

    @abstractmethod
    def create_session(self, tags: Dict[str, Any]) -> str:
        pass

    @abstractmethod
    def log(self, session_id: str, payload: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def end(self, session_id: str) -> None:
        pass

    @abstractmethod
    def log_event(self, event: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    def log_error(self, error: BaseException, context: Dict[str, Any]) -> None:
        pass


class LoggingMonitoringSink(MonitoringSink):
    """Sink writing to the ``mediator.monitoring`` logger.

    Keeps a bounded in-memory history of sessions, events and errors for
    inspection by the API and tests.
    """

    def __init__(self, history_size: int = 500):
        self._logger = logging.getLogger("mediator.monitoring")
        self._lock = threading.Lock()
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.events: Deque[Dict[str, Any]] = deque(maxlen=history_size)
        self.errors: Deque[Dict[str, Any]] = deque(maxlen=history_size)

    def create_session(self, tags: Dict[str, Any]) -> str:
        session_id = uuid.uuid4().hex
        with self._lock:
            self.sessions[session_id] = {
                "tags": dict(tags),
                "started_at": time.time(),
                "entries": [],
                "ended_at": None,
            }
        self._logger.debug(f"Session {session_id[:8]} started: {tags}")
        return session_id

    def log(self, session_id: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            session = self.sessions.get(session_id)
            if session is not None:
                session["entries"].append(dict(payload))
        self._logger.debug(f"Session {session_id[:8]}: {payload}")

    def end(self, session_id: str) -> None:
        with self._lock:
            session = self.sessions.get(session_id)
            if session is None:
                return
            session["ended_at"] = time.time()
            duration = session["ended_at"] - session["started_at"]
        self._logger.debug(f"Session {session_id[:8]} ended after {duration * 1000:.0f}ms")

    def log_event(self, event: Dict[str, Any]) -> None:
        record = dict(event)
        record.setdefault("timestamp", time.time())
        with self._lock:
            self.events.append(record)
        self._logger.info(f"Event {record.get('type', 'unknown')}: {record}")

    def log_error(self, error: BaseException, context: Dict[str, Any]) -> None:
        record = {
            "error": str(error),
            "error_type": type(error).__name__,
            "context": dict(context),
            "timestamp": time.time(),
        }
        with self._lock:
            self.errors.append(record)
        self._logger.error(f"{type(error).__name__}: {error} (context: {context})")


class SafeMonitor:
    """Best-effort wrapper around a sink.

    Every call catches sink failures, logs a warning and carries on.
    """

    def __init__(self, sink: Optional[MonitoringSink] = None):
        self.sink = sink or LoggingMonitoringSink()

    def create_session(self, tags: Dict[str, Any]) -> Optional[str]:
        try:
            return self.sink.create_session(tags)
        except Exception as e:
            logger.warning(f"Monitoring create_session failed: {e}")
            return None

    def log(self, session_id: Optional[str], payload: Dict[str, Any]) -> None:
        if session_id is None:
            return
        try:
            self.sink.log(session_id, payload)
        except Exception as e:
            logger.warning(f"Monitoring log failed: {e}")

    def end(self, session_id: Optional[str]) -> None:
        if session_id is None:
            return
        try:
            self.sink.end(session_id)
        except Exception as e:
            logger.warning(f"Monitoring end failed: {e}")

    def log_event(self, event_type: str, **fields: Any) -> None:
        try:
            self.sink.log_event({"type": event_type, **fields})
        except Exception as e:
            logger.warning(f"Monitoring log_event failed: {e}")

    def log_error(self, error: BaseException, **context: Any) -> None:
        try:
            self.sink.log_error(error, context)
        except Exception as e:
            logger.warning(f"Monitoring log_error failed: {e}")

    @contextmanager
    def session(self, **tags: Any) -> Iterator["MonitoringSession"]:
        """Session context manager that always ends the session.

        Usage:
            with monitor.session(operation="translate") as session:
                session.log(step="cache_lookup", hit=False)
        """
        session_id = self.create_session(tags)
        try:
            yield MonitoringSession(self, session_id)
        finally:
            self.end(session_id)


class MonitoringSession:
    """Handle for logging into an open session."""

    def __init__(self, monitor: SafeMonitor, session_id: Optional[str]):
        self.monitor = monitor
        self.session_id = session_id

    def log(self, **payload: Any) -> None:
        self.monitor.log(self.session_id, payload)
