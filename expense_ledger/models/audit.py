"""
Audit Models for Expense Ledger

Every change to the ledger, and every time the ledger could not be read
or written, produces an audit event. Events go to the structured log.

DESIGN DECISION: Audit events describe what happened, never what to do.
Recovery (empty-ledger fallback, retry prompts) stays in the callers.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Loading
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_LOAD_FAILED = "ledger_load_failed"

    # Creating
    EXPENSE_REJECTED = "expense_rejected"
    EXPENSE_SAVED = "expense_saved"
    SAVE_FAILED = "save_failed"

    # Viewing
    DASHBOARD_BUILT = "dashboard_built"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one create attempt)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.ledger_loaded(record_count=3, storage_key="expenses")
        event = AuditEventBuilder.expense_saved("Lunch", "Food", "12.50", 4, correlation_id)
    """

    @staticmethod
    def ledger_loaded(
        record_count: int,
        storage_key: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            correlation_id=correlation_id,
            description=f"Ledger loaded with {record_count} records",
            details={
                "record_count": record_count,
                "storage_key": storage_key,
            },
        )

    @staticmethod
    def ledger_load_failed(
        storage_key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Ledger could not be read; continuing with an empty ledger",
            details={
                "storage_key": storage_key,
            },
            error_message=error_message,
        )

    @staticmethod
    def expense_rejected(
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REJECTED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Expense rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_saved(
        name: str,
        category: str,
        amount: str,
        record_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_SAVED,
            correlation_id=correlation_id,
            description=f"Expense saved: {name} ({category}) - {amount}",
            details={
                "name": name,
                "category": category,
                "amount": amount,
                "record_count": record_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        storage_key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description="Expense could not be saved; ledger left unchanged",
            details={
                "storage_key": storage_key,
            },
            error_message=error_message,
        )

    @staticmethod
    def dashboard_built(
        record_count: int,
        category_count: int,
        day_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DASHBOARD_BUILT,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Dashboard built from {record_count} records",
            details={
                "record_count": record_count,
                "category_count": category_count,
                "day_count": day_count,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
