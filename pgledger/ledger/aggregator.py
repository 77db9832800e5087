"""
Aggregation

Pure functions over a WeekStore. Nothing here mutates state or creates
weeks: a week that has not been visited yet simply contributes zero.

Sums are kept at full Decimal precision. Rounding happens only in
format_amount, at presentation time.
"""

from decimal import ROUND_HALF_UP, Decimal

from pgledger.ledger.errors import InvalidInputError
from pgledger.ledger.store import WeekStore
from pgledger.models.ledger import WEEKS_PER_MONTH, MonthlyTotals

ZERO = Decimal("0")
CENTS = Decimal("0.01")


def weekly_total_paid(weeks: WeekStore, week_number: int) -> Decimal:
    """Sum of payments recorded for a week; 0 if the week has none."""
    record = weeks.get(week_number)
    if record is None:
        return ZERO
    return record.total_paid


def monthly_range(month: int) -> tuple[int, int]:
    """First and last week numbers of a month (inclusive)."""
    if isinstance(month, bool) or not isinstance(month, int) or month < 1:
        raise InvalidInputError(f"Months start at 1, got {month!r}", field="month")
    return (month - 1) * WEEKS_PER_MONTH + 1, month * WEEKS_PER_MONTH


def monthly_totals(weeks: WeekStore, month: int) -> MonthlyTotals:
    """
    Total paid and total expense across the weeks of a month.

    The end of the range may lie beyond the current week; those weeks
    do not exist yet and add nothing.
    """
    start_week, end_week = monthly_range(month)
    total_paid = ZERO
    total_expense = ZERO
    weeks_recorded = 0

    for week_number in range(start_week, end_week + 1):
        record = weeks.get(week_number)
        if record is None:
            continue
        weeks_recorded += 1
        total_paid += record.total_paid
        total_expense += record.expense

    return MonthlyTotals(
        month=month,
        start_week=start_week,
        end_week=end_week,
        total_paid=total_paid,
        total_expense=total_expense,
        weeks_recorded=weeks_recorded,
    )


def format_amount(amount: Decimal, currency_symbol: str = "") -> str:
    """Round half-up to two places for display, e.g. 99.985 -> "99.99"."""
    rounded = Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
    return f"{currency_symbol}{rounded:.2f}"
