"""
Data Models Package

This package contains all Pydantic models used in PG Ledger.
Everything persisted or logged must conform to these schemas.
"""

from pgledger.models.ledger import (
    WEEKS_PER_MONTH,
    LedgerDocument,
    MonthlyTotals,
    Payment,
    WeekRecord,
    month_for_week,
    parse_week_key,
    week_key,
)
from pgledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    audit_event_from_json_line,
)

__all__ = [
    # Ledger models
    "WEEKS_PER_MONTH",
    "LedgerDocument",
    "MonthlyTotals",
    "Payment",
    "WeekRecord",
    "month_for_week",
    "parse_week_key",
    "week_key",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    "audit_event_from_json_line",
]
