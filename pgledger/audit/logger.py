"""
Audit Logger

DESIGN DECISION: Every ledger action is logged.
This provides:
1. A history the household can check after a dispute
2. Debugging capability when a save fails
3. Correlation of everything done in one session

The audit logger:
- Always writes a structured local log line
- Gracefully handles storage failures (never breaks a ledger action)
- Stamps every event with the session's correlation ID
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from pgledger.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from pgledger.services.storage import AuditStorageInterface


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
    """Route structlog output through the stdlib root logger at ``level``."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
        correlation_id: Optional[UUID] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
            correlation_id: Stamped on events that do not carry their own.
        """
        self._storage = storage
        self._correlation_id = correlation_id or create_correlation_id()
        self._logger = structlog.get_logger("pgledger.audit")

    @property
    def correlation_id(self) -> UUID:
        return self._correlation_id

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        if event.correlation_id is None:
            event.correlation_id = self._correlation_id

        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_week_moved(self, forward: bool, week_number: int, month_number: int) -> None:
        """Log navigation to another week."""
        self.log(AuditEventBuilder.week_moved(forward, week_number, month_number))

    def log_navigation_blocked(self, week_number: int, message: str) -> None:
        self.log(AuditEventBuilder.navigation_blocked(week_number, message))

    def log_week_edited(
        self,
        event_type: AuditEventType,
        week_number: int,
        month_number: int,
        description: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log a change to the current week."""
        self.log(AuditEventBuilder.week_edited(
            event_type=event_type,
            week_number=week_number,
            month_number=month_number,
            description=description,
            details=details,
        ))

    def log_mutation_rejected(
        self,
        week_number: int,
        month_number: int,
        operation: str,
        error_code: str,
        error_message: str,
    ) -> None:
        """Log a ledger operation refused by validation or the finalize latch."""
        self.log(AuditEventBuilder.mutation_rejected(
            week_number=week_number,
            month_number=month_number,
            operation=operation,
            error_code=error_code,
            error_message=error_message,
        ))

    def log_ledger_loaded(self, week_number: int, weeks_stored: int, created: bool) -> None:
        self.log(AuditEventBuilder.ledger_loaded(week_number, weeks_stored, created))

    def log_ledger_saved(self, week_number: int, weeks_stored: int) -> None:
        self.log(AuditEventBuilder.ledger_saved(week_number, weeks_stored))

    def log_ledger_reset(self) -> None:
        self.log(AuditEventBuilder.ledger_reset())

    def log_storage_failed(
        self,
        saving: bool,
        error_message: str,
        week_number: Optional[int] = None,
    ) -> None:
        """Log a failed ledger save or load."""
        self.log(AuditEventBuilder.storage_failed(
            saving=saving,
            error_message=error_message,
            week_number=week_number,
        ))

    def log_clear_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.clear_failed(error_message))

    def log_report_generated(self, week_number: int, month_number: int) -> None:
        self.log(AuditEventBuilder.report_generated(week_number, month_number))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a tracker session.
    """
    return uuid4()
