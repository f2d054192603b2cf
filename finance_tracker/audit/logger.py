"""
Audit Logger

DESIGN DECISION: Every state change in the system is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. A history of rejected operations and external failures

The audit logger:
- Is synchronous, like the mutations it records
- Gracefully handles failures (doesn't crash the app if logging fails)
- Keeps recent events in memory so callers can inspect them
"""

import logging
from collections import deque
from typing import Optional

import structlog

from finance_tracker.models.audit import AuditEvent, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the standard library at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))
    logging.getLogger("finance_tracker").setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log and keeps the most recent
    ones in an in-memory ring buffer.
    """

    def __init__(self, history_size: int = 500):
        self._logger = structlog.get_logger("finance_tracker.audit")
        self._history: deque[AuditEvent] = deque(maxlen=history_size)

    @property
    def history(self) -> list[AuditEvent]:
        """Recent events, oldest first."""
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """
        Log an audit event.

        Never raises: a broken log handler must not undo a mutation
        that has already been applied.
        """
        self._history.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            logging.getLogger(__name__).exception("Failed to write audit event")

    def events_of_type(self, event_type) -> list[AuditEvent]:
        return [event for event in self._history if event.event_type == event_type]

    def last(self) -> Optional[AuditEvent]:
        return self._history[-1] if self._history else None
