"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged, and so is every
failure the ledger recovers from. A failed load silently degrades to an
empty ledger for the user, so the log is the only place it shows up.

The audit logger:
- Writes structured JSON lines through structlog
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_ledger.config import get_settings
from expense_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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


def configure_logging(level: Optional[str] = None) -> None:
    """
    Route structlog output to stderr at the configured level.

    Safe to call more than once; only the level is updated after the
    first call. DEBUG_MODE=true forces DEBUG.
    """
    app_settings = get_settings().app
    if level is None:
        level = "DEBUG" if app_settings.debug_mode else app_settings.log_level
    logging.basicConfig(format="%(message)s", level=level)
    logging.getLogger("expense_ledger").setLevel(level)


class AuditLogger:
    """
    Central audit logging service.

    One instance is shared by the ledger store and the flows.
    """

    def __init__(self, logger_name: str = "expense_ledger.audit"):
        self._logger = structlog.get_logger(logger_name).bind(
            environment=get_settings().app.app_environment,
        )

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written, False if logging failed.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Never let logging break a ledger operation
            return False

        return True

    def log_ledger_loaded(
        self,
        record_count: int,
        storage_key: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful ledger load."""
        self.log(AuditEventBuilder.ledger_loaded(
            record_count=record_count,
            storage_key=storage_key,
            correlation_id=correlation_id,
        ))

    def log_ledger_load_failed(
        self,
        storage_key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a load that fell back to an empty ledger."""
        self.log(AuditEventBuilder.ledger_load_failed(
            storage_key=storage_key,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_expense_rejected(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a candidate that failed validation."""
        self.log(AuditEventBuilder.expense_rejected(
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_expense_saved(
        self,
        name: str,
        category: str,
        amount: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an expense appended and persisted."""
        self.log(AuditEventBuilder.expense_saved(
            name=name,
            category=category,
            amount=amount,
            record_count=record_count,
            correlation_id=correlation_id,
        ))

    def log_save_failed(
        self,
        storage_key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a write failure."""
        self.log(AuditEventBuilder.save_failed(
            storage_key=storage_key,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_dashboard_built(
        self,
        record_count: int,
        category_count: int,
        day_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.dashboard_built(
            record_count=record_count,
            category_count=category_count,
            day_count=day_count,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an unexpected error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., one create attempt).
    """
    return uuid4()
