"""
Telemetry port for the overlay services.

Every service logs through an OverlayTelemetry instance handed to its
constructor. It forwards to a stdlib logger and keeps a small ring buffer
of structured entries so a debug endpoint or a test can inspect what
happened during a session.
"""

import json
import logging
import time
import uuid
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from orders_overlay import config

LEVELS = ("error", "warning", "info", "debug")

_LOGGING_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


@dataclass
class LogEntry:
    """One structured log record."""
    level: str
    service: str
    message: str
    session_id: str
    timestamp: str
    error: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class OverlayTelemetry:
    """
    Logger plus bounded in-memory log buffer.

    Args:
        logger: Logger to forward to (default: this module's logger)
        max_buffer_size: Entries kept before the oldest is dropped
        session_id: Identifier stamped on every entry (generated if omitted)
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        max_buffer_size: int = None,
        session_id: Optional[str] = None,
    ):
        self.logger = logger or logging.getLogger(__name__)
        size = max_buffer_size if max_buffer_size is not None else config.LOG_BUFFER_SIZE
        self._buffer: deque = deque(maxlen=max(1, size))
        self.session_id = session_id or _new_session_id()
        self._started = time.monotonic()

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def log_error(self, service: str, message: str, error: BaseException = None, **data) -> None:
        self._record("error", service, message, error, data)

    def log_warning(self, service: str, message: str, error: BaseException = None, **data) -> None:
        self._record("warning", service, message, error, data)

    def log_info(self, service: str, message: str, **data) -> None:
        self._record("info", service, message, None, data)

    def log_debug(self, service: str, message: str, **data) -> None:
        self._record("debug", service, message, None, data)

    def log_performance(
        self,
        service: str,
        operation: str,
        duration_ms: float,
        threshold_ms: float = None,
        **data,
    ) -> None:
        """
        Record how long an operation took.

        Durations above threshold_ms are logged as warnings, everything
        else at debug level.
        """
        if threshold_ms is None:
            threshold_ms = config.SLOW_GENERATION_MS
        data = dict(data, operation=operation, duration_ms=round(duration_ms, 2))
        if duration_ms > threshold_ms:
            self._record(
                "warning",
                service,
                f"{operation} took {duration_ms:.2f}ms (threshold {threshold_ms}ms)",
                None,
                data,
            )
        else:
            self._record("debug", service, f"{operation} took {duration_ms:.2f}ms", None, data)

    def _record(
        self,
        level: str,
        service: str,
        message: str,
        error: Optional[BaseException],
        data: Dict[str, Any],
    ) -> None:
        entry = LogEntry(
            level=level,
            service=service,
            message=message,
            session_id=self.session_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
            error=f"{type(error).__name__}: {error}" if error is not None else None,
            data=data,
        )
        self._buffer.append(entry)

        text = f"[{service}] {message}"
        if entry.error:
            text = f"{text} ({entry.error})"
        # Tracebacks only for real errors, warnings stay one line
        exc_info = error if level == "error" and error is not None else None
        try:
            self.logger.log(_LOGGING_LEVELS[level], text, exc_info=exc_info)
        except Exception:
            # Logging never raises into the caller
            pass

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def get_session_logs(self) -> List[LogEntry]:
        return list(self._buffer)

    def get_service_logs(self, service: str) -> List[LogEntry]:
        return [entry for entry in self._buffer if entry.service == service]

    def get_logs_by_level(self, level: str) -> List[LogEntry]:
        return [entry for entry in self._buffer if entry.level == level]

    def export_logs(self) -> str:
        """Serialize the buffer (plus session info) as JSON."""
        return json.dumps(
            {
                "session_id": self.session_id,
                "exported_at": datetime.now(timezone.utc).isoformat(),
                "logs": [entry.to_dict() for entry in self._buffer],
            },
            indent=2,
            default=str,
        )

    def clear_logs(self) -> None:
        self._buffer.clear()

    def get_session_stats(self) -> Dict[str, Any]:
        counts = {level: 0 for level in LEVELS}
        services = set()
        for entry in self._buffer:
            counts[entry.level] = counts.get(entry.level, 0) + 1
            services.add(entry.service)
        return {
            "session_id": self.session_id,
            "session_duration_s": round(time.monotonic() - self._started, 3),
            "total_logs": len(self._buffer),
            "error_count": counts["error"],
            "warning_count": counts["warning"],
            "info_count": counts["info"],
            "debug_count": counts["debug"],
            "services": sorted(services),
        }
