"""
Ledger Exceptions

Every failure a user can trigger maps to one of these. They are all
recoverable: fix the input, navigate elsewhere, or retry the save.
Each carries a stable ``code`` so the UI and the audit log can tell them
apart without string matching.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for ledger operations."""

    code = "ledger_error"


class InvalidInputError(LedgerError):
    """Blank required text, or a non-numeric or out-of-range amount."""

    code = "invalid_input"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class IndexOutOfRangeError(LedgerError):
    """Removal target no longer exists."""

    code = "index_out_of_range"

    def __init__(self, index: int, length: int, what: str = "entry"):
        super().__init__(
            f"No {what} at position {index} (this week has {length})"
        )
        self.index = index
        self.length = length


class WeekFinalizedError(LedgerError):
    """Mutation attempted on a closed week."""

    code = "week_finalized"

    def __init__(self, week_number: int):
        super().__init__(
            f"Week {week_number} is finalized. No more changes can be made."
        )
        self.week_number = week_number


class AtBoundaryError(LedgerError):
    """Attempt to move before week 1."""

    code = "at_boundary"

    def __init__(self, message: str = "You are already at Week 1."):
        super().__init__(message)


class PersistenceError(LedgerError):
    """Durable store read or write failure."""

    code = "persistence_error"
