"""Week/month ledger package."""

from pgledger.ledger.errors import (
    AtBoundaryError,
    IndexOutOfRangeError,
    InvalidInputError,
    LedgerError,
    PersistenceError,
    WeekFinalizedError,
)
from pgledger.ledger.store import WeekStore
from pgledger.ledger.aggregator import (
    format_amount,
    monthly_range,
    monthly_totals,
    weekly_total_paid,
)
from pgledger.ledger.core import Ledger

__all__ = [
    "AtBoundaryError",
    "IndexOutOfRangeError",
    "InvalidInputError",
    "Ledger",
    "LedgerError",
    "PersistenceError",
    "WeekFinalizedError",
    "WeekStore",
    "format_amount",
    "monthly_range",
    "monthly_totals",
    "weekly_total_paid",
]
