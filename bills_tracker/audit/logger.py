"""
Audit Logger

DESIGN DECISION: Every change to the expense collection is logged.
This provides:
1. Traceability of adds, edits, deletes and payment toggles
2. Debugging capability when loads drop records or saves fail
3. A recent-activity list the settings page can show

The audit logger:
- Writes structured events through structlog
- Keeps the most recent events in memory (nothing is persisted)
"""

import logging
from collections import deque
from typing import Optional

import structlog

from bills_tracker.models.audit import AuditEvent, AuditSeverity


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structlog and the stdlib root logger.

    Call once at startup; module loggers created before this
    pick the configuration up on first use.
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs every event to the structured local log and remembers
    the last `max_recent` events.
    """

    def __init__(self, max_recent: int = 100):
        self._logger = structlog.get_logger("bills_tracker.audit")
        self._recent: deque[AuditEvent] = deque(maxlen=max_recent)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level matching its severity."""
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._recent.append(event)

    def recent_events(self, limit: Optional[int] = None) -> list[AuditEvent]:
        """
        Most recent events, newest first.

        Args:
            limit: Maximum number of events to return (all kept if None)
        """
        events = list(reversed(self._recent))
        return events if limit is None else events[:limit]
