"""
Main Orchestrator for PG Ledger

This module ties the ledger to storage and the audit log, and defines
what happens for every user action:
1. Run the ledger operation (it validates before it mutates)
2. Persist the whole ledger
3. Audit the outcome
4. Hand the UI a plain result it can show

DESIGN DECISION: A failed save does NOT undo the change. Losing what the
user just typed because the disk hiccuped is worse than a short window
where memory is ahead of storage; the result carries a warning instead.

Confirmation before destructive actions is the UI's job. By the time a
removal or reset reaches this module, the user has already said yes.
"""

from decimal import Decimal
from typing import Any, Callable, Optional

import structlog
from pydantic import BaseModel

from pgledger.audit import AuditLogger, configure_logging
from pgledger.config import AppSettings, get_settings
from pgledger.ledger import (
    AtBoundaryError,
    Ledger,
    LedgerError,
    PersistenceError,
    format_amount,
)
from pgledger.models.audit import AuditEventType
from pgledger.models.ledger import MonthlyTotals, WeekRecord
from pgledger.reports import WeeklyReport, build_report, render_html_report
from pgledger.services.storage import (
    JsonFileLedgerStorage,
    JsonLinesAuditStorage,
    LedgerStorageInterface,
    NotFoundError,
)

logger = structlog.get_logger(__name__)


class OperationResult(BaseModel):
    """What the UI gets back from every tracker action."""

    success: bool
    message: str
    error_code: Optional[str] = None
    warning: Optional[str] = None


class TrackerFlow:
    """
    Orchestrates every action on the household ledger.

    Holds the single Ledger instance for the session. The UI gets at it
    through this object, never through module globals.
    """

    def __init__(
        self,
        storage: Optional[LedgerStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        ledger: Optional[Ledger] = None,
        currency_symbol: str = "₹",
        household_name: str = "PG",
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._ledger = ledger or Ledger()
        self._currency_symbol = currency_symbol
        self._household_name = household_name

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def currency_symbol(self) -> str:
        return self._currency_symbol

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def current_week(self) -> int:
        return self._ledger.current_week

    @property
    def current_month(self) -> int:
        return self._ledger.current_month

    @property
    def current_record(self) -> WeekRecord:
        return self._ledger.current_record

    # -------------------------------------------------------------------------
    # Startup and persistence
    # -------------------------------------------------------------------------

    def start(self) -> OperationResult:
        """
        Load the saved ledger, or start a new one if nothing is saved.

        Unreadable saved data is NOT overwritten here: the session starts
        empty and the warning tells the user. The file is only replaced
        once they make a change.
        """
        if self._storage is None:
            self._audit_logger.log_ledger_loaded(self.current_week, len(self._ledger.weeks), created=True)
            return OperationResult(success=True, message="Started a new ledger (not saved).")

        try:
            self._ledger = self._storage.load()
        except NotFoundError:
            self._ledger = Ledger()
            self._audit_logger.log_ledger_loaded(1, 1, created=True)
            warning = self._persist()
            return OperationResult(success=True, message="Started a new ledger.", warning=warning)
        except PersistenceError as e:
            self._ledger = Ledger()
            self._audit_logger.log_storage_failed(saving=False, error_message=str(e))
            logger.error("ledger_load_failed", error=str(e))
            return OperationResult(
                success=True,
                message="Started a new ledger.",
                error_code=e.code,
                warning=f"Saved data could not be loaded and was left untouched: {e}",
            )

        self._audit_logger.log_ledger_loaded(
            self.current_week, len(self._ledger.weeks), created=False
        )
        return OperationResult(
            success=True,
            message=f"Loaded week {self.current_week}, month {self.current_month}.",
        )

    def _persist(self) -> Optional[str]:
        """Save the whole ledger. Returns a warning instead of raising."""
        if self._storage is None:
            return None
        try:
            self._storage.save(self._ledger)
        except PersistenceError as e:
            self._audit_logger.log_storage_failed(
                saving=True,
                error_message=str(e),
                week_number=self.current_week,
            )
            logger.warning("ledger_save_failed", error=str(e), current_week=self.current_week)
            return f"Your change is kept for now but could not be saved: {e}"

        self._audit_logger.log_ledger_saved(self.current_week, len(self._ledger.weeks))
        return None

    def _run(
        self,
        operation: str,
        action: Callable[[], Any],
        describe: Callable[[Any], tuple[AuditEventType, str, dict]],
    ) -> OperationResult:
        """
        Run one mutating ledger action end to end.

        ``describe`` turns the action's return value into the audit event
        type, the user message, and the audit details.
        """
        week_number = self.current_week
        month_number = self.current_month
        try:
            value = action()
        except LedgerError as e:
            self._audit_logger.log_mutation_rejected(
                week_number=week_number,
                month_number=month_number,
                operation=operation,
                error_code=e.code,
                error_message=str(e),
            )
            return OperationResult(success=False, message=str(e), error_code=e.code)

        event_type, message, details = describe(value)
        self._audit_logger.log_week_edited(
            event_type=event_type,
            week_number=week_number,
            month_number=month_number,
            description=message,
            details=details,
        )
        warning = self._persist()
        return OperationResult(success=True, message=message, warning=warning)

    def _money(self, amount: Decimal) -> str:
        return format_amount(amount, self._currency_symbol)

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def advance_week(self) -> OperationResult:
        week_number = self._ledger.advance_week()
        self._audit_logger.log_week_moved(True, week_number, self.current_month)
        warning = self._persist()
        return OperationResult(
            success=True,
            message=f"Week {week_number}, month {self.current_month}.",
            warning=warning,
        )

    def retreat_week(self) -> OperationResult:
        try:
            week_number = self._ledger.retreat_week()
        except AtBoundaryError as e:
            self._audit_logger.log_navigation_blocked(self.current_week, str(e))
            return OperationResult(success=False, message=str(e), error_code=e.code)

        self._audit_logger.log_week_moved(False, week_number, self.current_month)
        warning = self._persist()
        return OperationResult(
            success=True,
            message=f"Week {week_number}, month {self.current_month}.",
            warning=warning,
        )

    # -------------------------------------------------------------------------
    # Current-week edits
    # -------------------------------------------------------------------------

    def set_in_charge(self, name: Any) -> OperationResult:
        return self._run(
            "set_in_charge",
            lambda: self._ledger.set_in_charge(name),
            lambda in_charge: (
                AuditEventType.IN_CHARGE_SET,
                f"{in_charge} is in charge of week {self.current_week}.",
                {"in_charge": in_charge},
            ),
        )

    def add_payment(self, payer: Any, amount: Any) -> OperationResult:
        return self._run(
            "add_payment",
            lambda: self._ledger.add_payment(payer, amount),
            lambda payment: (
                AuditEventType.PAYMENT_ADDED,
                f"Payment added: {payment.payer} - {self._money(payment.amount)}",
                {"payer": payment.payer, "amount": str(payment.amount)},
            ),
        )

    def remove_payment(self, index: Any) -> OperationResult:
        return self._run(
            "remove_payment",
            lambda: self._ledger.remove_payment(index),
            lambda payment: (
                AuditEventType.PAYMENT_REMOVED,
                f"Payment removed: {payment.payer} - {self._money(payment.amount)}",
                {"index": index, "payer": payment.payer, "amount": str(payment.amount)},
            ),
        )

    def set_expense(self, amount: Any) -> OperationResult:
        return self._run(
            "set_expense",
            lambda: self._ledger.set_expense(amount),
            lambda expense: (
                AuditEventType.EXPENSE_SET,
                f"Weekly expense set to {self._money(expense)}",
                {"expense": str(expense)},
            ),
        )

    def add_market_item(self, text: Any) -> OperationResult:
        return self._run(
            "add_market_item",
            lambda: self._ledger.add_market_item(text),
            lambda item: (
                AuditEventType.MARKET_ITEM_ADDED,
                f"Added \"{item}\" to the market list.",
                {"item": item},
            ),
        )

    def remove_market_item(self, index: Any) -> OperationResult:
        return self._run(
            "remove_market_item",
            lambda: self._ledger.remove_market_item(index),
            lambda item: (
                AuditEventType.MARKET_ITEM_REMOVED,
                f"Removed \"{item}\" from the market list.",
                {"index": index, "item": item},
            ),
        )

    def finalize(self) -> OperationResult:
        return self._run(
            "finalize",
            self._ledger.finalize,
            lambda _: (
                AuditEventType.WEEK_FINALIZED,
                "Week entries finalized successfully!",
                {},
            ),
        )

    def reset_all(self) -> OperationResult:
        """
        Clear saved data and start again at week 1, month 1.

        The in-memory reset happens even if the store cannot be cleared.
        """
        warning = None
        if self._storage is not None:
            try:
                self._storage.clear()
            except PersistenceError as e:
                self._audit_logger.log_clear_failed(str(e))
                logger.warning("ledger_clear_failed", error=str(e))
                warning = f"Saved data could not be cleared: {e}"

        self._ledger.reset()
        self._audit_logger.log_ledger_reset()
        warning = self._persist() or warning
        return OperationResult(
            success=True,
            message="All tracker data has been completely reset!",
            warning=warning,
        )

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    def weekly_total_paid(self, week_number: Optional[int] = None) -> Decimal:
        return self._ledger.weekly_total_paid(week_number)

    def monthly_totals(self, month: Optional[int] = None) -> MonthlyTotals:
        return self._ledger.monthly_totals(month)

    def build_report(self, week_number: Optional[int] = None) -> WeeklyReport:
        report = build_report(self._ledger, week_number)
        self._audit_logger.log_report_generated(report.week_number, report.month_number)
        return report

    def render_report(self, week_number: Optional[int] = None, auto_print: bool = True) -> str:
        """Printable HTML for a week (current by default)."""
        return render_html_report(
            self.build_report(week_number),
            currency_symbol=self._currency_symbol,
            household_name=self._household_name,
            auto_print=auto_print,
        )


def create_app_components(use_storage: bool = True) -> TrackerFlow:
    """
    Factory function to create the tracker for the app.

    Args:
        use_storage: Whether to use the JSON files from settings.
                    Set to False for a throwaway in-memory session.

    Returns:
        A started TrackerFlow
    """
    settings = get_settings()
    app_settings = settings.app
    configure_logging(log_level_for(app_settings))

    storage = None
    audit_logger = AuditLogger()

    if use_storage:
        storage_settings = settings.storage
        storage = JsonFileLedgerStorage(storage_settings.ledger_path)
        audit_logger = AuditLogger(JsonLinesAuditStorage(storage_settings.audit_path))

    flow = TrackerFlow(
        storage=storage,
        audit_logger=audit_logger,
        currency_symbol=app_settings.currency_symbol,
        household_name=app_settings.household_name,
    )
    result = flow.start()
    logger.info(
        "tracker_started",
        environment=app_settings.app_environment,
        debug_mode=app_settings.debug_mode,
        current_week=flow.current_week,
    )
    if result.warning:
        logger.warning("tracker_started_with_warning", warning=result.warning)
    return flow


def log_level_for(app_settings: AppSettings) -> str:
    """debug_mode forces DEBUG; otherwise the configured level applies."""
    return "DEBUG" if app_settings.debug_mode else app_settings.log_level
