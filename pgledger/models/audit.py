"""
Audit Models for PG Ledger

Every change to the ledger is logged for audit purposes.
This provides:
1. A trail of who was in charge and what was entered
2. Debugging information when a save fails
3. A way to reconstruct a week after a dispute

DESIGN DECISION: Audit logs are append-only. A full ledger reset does NOT
clear them; the reset itself becomes an event.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


MAX_TEXT_LENGTH = 500
ELLIPSIS = "..."


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clip_text(text: str, limit: int = MAX_TEXT_LENGTH) -> str:
    """Shorten text to at most ``limit`` characters, marking the cut."""
    if len(text) <= limit:
        return text
    return text[:limit - len(ELLIPSIS)] + ELLIPSIS


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each ledger operation has its own event type.
    """
    # Navigation
    WEEK_ADVANCED = "week_advanced"
    WEEK_RETREATED = "week_retreated"
    NAVIGATION_BLOCKED = "navigation_blocked"

    # Week edits
    IN_CHARGE_SET = "in_charge_set"
    PAYMENT_ADDED = "payment_added"
    PAYMENT_REMOVED = "payment_removed"
    EXPENSE_SET = "expense_set"
    MARKET_ITEM_ADDED = "market_item_added"
    MARKET_ITEM_REMOVED = "market_item_removed"
    WEEK_FINALIZED = "week_finalized"
    MUTATION_REJECTED = "mutation_rejected"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_CREATED = "ledger_created"
    LEDGER_SAVED = "ledger_saved"
    LEDGER_RESET = "ledger_reset"
    SAVE_FAILED = "save_failed"
    LOAD_FAILED = "load_failed"
    CLEAR_FAILED = "clear_failed"

    # Reports
    REPORT_GENERATED = "report_generated"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every ledger action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
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

    # Context
    week_number: Optional[int] = Field(
        default=None,
        ge=1,
        description="Week the event relates to, if any"
    )
    month_number: Optional[int] = Field(
        default=None,
        ge=1,
        description="Month the week belongs to"
    )

    # Correlation - all events of one tracker session share this
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=MAX_TEXT_LENGTH,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = Field(
        default=None,
        max_length=MAX_TEXT_LENGTH,
    )

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    @field_validator('description', 'error_message', mode='before')
    @classmethod
    def clip_user_text(cls, v: Any) -> Any:
        """Descriptions embed user input, which has no length limit."""
        if isinstance(v, str):
            return clip_text(v)
        return v

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "week_number": self.week_number,
            "month_number": self.month_number,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """One line of the JSON-lines audit file."""
        return self.model_dump_json()


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.week_moved(True, week, month, cid)
        event = AuditEventBuilder.mutation_rejected(week, month, "add_payment", code, msg, cid)
    """

    @staticmethod
    def week_moved(
        forward: bool,
        week_number: int,
        month_number: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.WEEK_ADVANCED if forward
                else AuditEventType.WEEK_RETREATED
            ),
            week_number=week_number,
            month_number=month_number,
            correlation_id=correlation_id,
            description=f"Moved to week {week_number}, month {month_number}",
            is_user_action=True,
        )

    @staticmethod
    def navigation_blocked(
        week_number: int,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NAVIGATION_BLOCKED,
            severity=AuditSeverity.WARNING,
            week_number=week_number,
            correlation_id=correlation_id,
            description=message,
            is_user_action=True,
        )

    @staticmethod
    def week_edited(
        event_type: AuditEventType,
        week_number: int,
        month_number: int,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            week_number=week_number,
            month_number=month_number,
            correlation_id=correlation_id,
            description=description,
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def mutation_rejected(
        week_number: int,
        month_number: int,
        operation: str,
        error_code: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_REJECTED,
            severity=AuditSeverity.WARNING,
            week_number=week_number,
            month_number=month_number,
            correlation_id=correlation_id,
            description=f"Rejected {operation}: {error_message}",
            details={"operation": operation},
            error_code=error_code,
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def ledger_saved(
        week_number: int,
        weeks_stored: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            severity=AuditSeverity.DEBUG,
            week_number=week_number,
            correlation_id=correlation_id,
            description=f"Ledger saved with {weeks_stored} weeks",
            details={"weeks_stored": weeks_stored},
        )

    @staticmethod
    def ledger_loaded(
        week_number: int,
        weeks_stored: int,
        created: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.LEDGER_CREATED if created
                else AuditEventType.LEDGER_LOADED
            ),
            week_number=week_number,
            correlation_id=correlation_id,
            description=(
                "Started a new ledger" if created
                else f"Ledger loaded at week {week_number} ({weeks_stored} weeks)"
            ),
            details={"weeks_stored": weeks_stored},
        )

    @staticmethod
    def ledger_reset(correlation_id: Optional[UUID] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_RESET,
            severity=AuditSeverity.WARNING,
            week_number=1,
            month_number=1,
            correlation_id=correlation_id,
            description="All tracker data reset to week 1, month 1",
            is_user_action=True,
        )

    @staticmethod
    def storage_failed(
        saving: bool,
        error_message: str,
        week_number: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.SAVE_FAILED if saving
                else AuditEventType.LOAD_FAILED
            ),
            severity=AuditSeverity.ERROR,
            week_number=week_number,
            correlation_id=correlation_id,
            description="Could not save the ledger" if saving else "Could not load the ledger",
            error_code="persistence_error",
            error_message=error_message,
        )

    @staticmethod
    def clear_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        """Saved data survived a reset because the store could not be cleared."""
        return AuditEvent(
            event_type=AuditEventType.CLEAR_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description="Could not clear the saved ledger during reset",
            error_code="persistence_error",
            error_message=error_message,
        )

    @staticmethod
    def report_generated(
        week_number: int,
        month_number: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_GENERATED,
            week_number=week_number,
            month_number=month_number,
            correlation_id=correlation_id,
            description=f"Report generated for week {week_number}",
            is_user_action=True,
        )


def audit_event_from_json_line(line: str) -> AuditEvent:
    """Parse one line written by AuditEvent.to_json_line."""
    return AuditEvent.model_validate_json(line)
