"""
Week/Month Ledger

The state machine behind the tracker:
- a WeekStore of weekly records
- a cursor on the current week
- the current month, DERIVED from the current week on every read

DESIGN DECISION: current_month is never stored. Keeping a second counter
in step with the week (as the browser version did) drifted on backward
navigation; integer division cannot.

Operations validate first and mutate last, so a raised error always
means nothing changed. Persistence is not done here; see
pgledger.orchestrator.
"""

from decimal import Decimal
from typing import Any, Optional

from pgledger.ledger.aggregator import monthly_totals, weekly_total_paid
from pgledger.ledger.errors import (
    AtBoundaryError,
    IndexOutOfRangeError,
    WeekFinalizedError,
)
from pgledger.ledger.store import WeekStore
from pgledger.ledger.validation import parse_amount, require_index, require_text
from pgledger.models.ledger import (
    LedgerDocument,
    MonthlyTotals,
    Payment,
    WeekRecord,
    month_for_week,
    parse_week_key,
    week_key,
)


class Ledger:
    """
    Weekly records plus the current-week cursor.

    One instance is created at startup and handed to whoever needs it.
    """

    def __init__(
        self,
        weeks: Optional[WeekStore] = None,
        current_week: int = 1,
    ):
        self._weeks = weeks if weeks is not None else WeekStore()
        self._current_week = 1
        self._move_to(current_week)

    # -------------------------------------------------------------------------
    # Cursor
    # -------------------------------------------------------------------------

    @property
    def weeks(self) -> WeekStore:
        return self._weeks

    @property
    def current_week(self) -> int:
        return self._current_week

    @property
    def current_month(self) -> int:
        return month_for_week(self._current_week)

    @property
    def current_record(self) -> WeekRecord:
        return self._weeks.get_or_create(self._current_week)

    def record(self, week_number: int) -> Optional[WeekRecord]:
        """Read access to any week; None if it was never visited."""
        return self._weeks.get(week_number)

    def _move_to(self, week_number: int) -> None:
        # get_or_create validates the number before the cursor moves
        self._weeks.get_or_create(week_number)
        self._current_week = week_number

    def advance_week(self) -> int:
        """Move to the next week, creating it if needed. Returns the new week."""
        self._move_to(self._current_week + 1)
        return self._current_week

    def retreat_week(self) -> int:
        """
        Move to the previous week.

        Raises:
            AtBoundaryError: already at week 1
        """
        if self._current_week <= 1:
            raise AtBoundaryError()
        self._move_to(self._current_week - 1)
        return self._current_week

    # -------------------------------------------------------------------------
    # Current-week edits
    # -------------------------------------------------------------------------

    def _editable_record(self) -> WeekRecord:
        record = self.current_record
        if record.finalized:
            raise WeekFinalizedError(self._current_week)
        return record

    def set_in_charge(self, name: Any) -> str:
        record = self._editable_record()
        in_charge = require_text(name, "in-charge name")
        record.in_charge = in_charge
        return in_charge

    def add_payment(self, payer: Any, amount: Any) -> Payment:
        record = self._editable_record()
        payment = Payment(
            payer=require_text(payer, "payer's name"),
            amount=parse_amount(amount, "payment amount"),
        )
        record.payments.append(payment)
        return payment

    def remove_payment(self, index: Any) -> Payment:
        """
        Remove one payment by position.

        Confirmation belongs to the caller; this removes unconditionally.
        """
        record = self._editable_record()
        index = require_index(index)
        if not 0 <= index < len(record.payments):
            raise IndexOutOfRangeError(index, len(record.payments), "payment")
        return record.payments.pop(index)

    def set_expense(self, amount: Any) -> Decimal:
        record = self._editable_record()
        expense = parse_amount(amount, "weekly expense", allow_zero=True)
        record.expense = expense
        return expense

    def add_market_item(self, text: Any) -> str:
        record = self._editable_record()
        item = require_text(text, "item")
        record.market_items.append(item)
        return item

    def remove_market_item(self, index: Any) -> str:
        record = self._editable_record()
        index = require_index(index)
        if not 0 <= index < len(record.market_items):
            raise IndexOutOfRangeError(index, len(record.market_items), "item")
        return record.market_items.pop(index)

    def finalize(self) -> None:
        """Close the current week. There is no way back short of reset()."""
        self.current_record.finalized = True

    def reset(self) -> None:
        """Discard every week and start again at week 1, month 1."""
        self._weeks = WeekStore()
        self._current_week = 1
        self._weeks.get_or_create(1)

    # -------------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------------

    def weekly_total_paid(self, week_number: Optional[int] = None) -> Decimal:
        if week_number is None:
            week_number = self._current_week
        return weekly_total_paid(self._weeks, week_number)

    def monthly_totals(self, month: Optional[int] = None) -> MonthlyTotals:
        if month is None:
            month = self.current_month
        return monthly_totals(self._weeks, month)

    # -------------------------------------------------------------------------
    # Persisted form
    # -------------------------------------------------------------------------

    def to_document(self) -> LedgerDocument:
        return LedgerDocument(
            current_week=self._current_week,
            current_month=self.current_month,
            weeks={
                week_key(week_number): record.model_copy(deep=True)
                for week_number, record in self._weeks.items()
            },
        )

    @classmethod
    def from_document(cls, document: LedgerDocument) -> "Ledger":
        """
        Rebuild a ledger from its persisted form.

        The stored currentMonth is ignored; the current week's record is
        created if the document does not have it.
        """
        records = {
            parse_week_key(key): record.model_copy(deep=True)
            for key, record in document.weeks.items()
        }
        return cls(weeks=WeekStore(records), current_week=document.current_week)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ledger):
            return NotImplemented
        return (
            self._current_week == other._current_week
            and self._weeks == other._weeks
        )

    def __repr__(self) -> str:
        return (
            f"Ledger(current_week={self._current_week}, "
            f"current_month={self.current_month}, weeks={len(self._weeks)})"
        )
