"""
Core Data Models for PG Ledger

These models define the schemas for weekly records and their persisted
form. They are designed to:
1. Enforce type safety at runtime
2. Read and write the same JSON layout the browser tracker used
3. Default fields that older saved data does not have
4. Keep amounts as Decimal end to end

DESIGN DECISION: Field names are Pythonic, aliases carry the persisted
(camelCase) names. populate_by_name lets code use either.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Fixed grouping: four weeks make one ledger month.
WEEKS_PER_MONTH = 4

WEEK_KEY_PREFIX = "week"


def week_key(week_number: int) -> str:
    """Persisted key for a week, e.g. 3 -> "week3"."""
    return f"{WEEK_KEY_PREFIX}{week_number}"


def parse_week_key(key: str) -> int:
    """
    Inverse of week_key. Raises ValueError for anything else.

    Only the exact form week_key writes is accepted, so "week01" and
    "week 1" cannot both claim week 1.
    """
    if not key.startswith(WEEK_KEY_PREFIX):
        raise ValueError(f"Not a week key: {key!r}")
    number = int(key[len(WEEK_KEY_PREFIX):])
    if number < 1:
        raise ValueError(f"Week numbers start at 1: {key!r}")
    if key != week_key(number):
        raise ValueError(f"Week key is not in canonical form: {key!r}")
    return number


def month_for_week(week_number: int) -> int:
    """The month a week belongs to (weeks 1-4 -> 1, 5-8 -> 2, ...)."""
    return (week_number - 1) // WEEKS_PER_MONTH + 1


def _float_safe_decimal(v: Any) -> Any:
    if isinstance(v, bool):
        raise ValueError("Amount must be a number")
    if isinstance(v, float):
        # Legacy data stored JS numbers
        return Decimal(repr(v))
    return v


# =============================================================================
# WEEK RECORD
# =============================================================================

class Payment(BaseModel):
    """One contribution collected by the in-charge."""
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    payer: str = Field(
        ...,
        min_length=1,
        alias="name",
        description="Who paid"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount paid"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        return _float_safe_decimal(v)


class WeekRecord(BaseModel):
    """
    Everything recorded for one week.

    CRITICAL: finalized is a one-way latch. The ledger refuses every
    mutation on a finalized record; only a full reset clears it.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    in_charge: str = Field(
        default="",
        alias="inCharge",
        description="Person responsible for the week, empty until set"
    )
    payments: list[Payment] = Field(
        default_factory=list,
        alias="weeklyPayments",
        description="Payments in the order they were entered"
    )
    expense: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        allow_inf_nan=False,
        alias="weeklyExpense",
        description="Total spent during the week"
    )
    market_items: list[str] = Field(
        default_factory=list,
        alias="bazaarItems",
        description="Shared shopping list entries"
    )
    finalized: bool = Field(
        default=False,
        description="Books closed for this week"
    )

    @field_validator('in_charge', mode='before')
    @classmethod
    def default_missing_in_charge(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('payments', 'market_items', mode='before')
    @classmethod
    def default_missing_lists(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator('expense', mode='before')
    @classmethod
    def coerce_expense(cls, v: Any) -> Any:
        if v is None:
            return Decimal("0")
        return _float_safe_decimal(v)

    @field_validator('finalized', mode='before')
    @classmethod
    def default_missing_finalized(cls, v: Any) -> Any:
        return False if v is None else v

    @property
    def total_paid(self) -> Decimal:
        """Sum of payment amounts at full precision."""
        return sum((p.amount for p in self.payments), Decimal("0"))

    @property
    def status_label(self) -> str:
        return "Finalized" if self.finalized else "In Progress"


# =============================================================================
# AGGREGATES
# =============================================================================

class MonthlyTotals(BaseModel):
    """Totals over the weeks of one ledger month."""

    month: int = Field(..., ge=1)
    start_week: int = Field(..., ge=1)
    end_week: int = Field(..., ge=1)
    total_paid: Decimal = Field(default=Decimal("0"))
    total_expense: Decimal = Field(default=Decimal("0"))
    weeks_recorded: int = Field(
        default=0,
        ge=0,
        description="How many weeks of the month exist so far"
    )

    @property
    def balance(self) -> Decimal:
        """Collected minus spent. Negative means the month is short."""
        return self.total_paid - self.total_expense


# =============================================================================
# PERSISTED FORM
# =============================================================================

class LedgerDocument(BaseModel):
    """
    The ledger exactly as it is written to storage.

    currentMonth is written for compatibility with older readers but
    is never trusted on load; the month is always derived from the week.
    """
    model_config = ConfigDict(populate_by_name=True)

    current_week: int = Field(
        default=1,
        ge=1,
        alias="currentWeek"
    )
    current_month: Optional[int] = Field(
        default=None,
        alias="currentMonth"
    )
    weeks: dict[str, WeekRecord] = Field(default_factory=dict)

    @field_validator('weeks')
    @classmethod
    def validate_week_keys(cls, v: dict[str, WeekRecord]) -> dict[str, WeekRecord]:
        for key in v:
            parse_week_key(key)
        return v

    def to_storage_dict(self) -> dict:
        """JSON-ready dict using the persisted field names."""
        return self.model_dump(mode="json", by_alias=True)
