"""
Input Validation

All checks run before the ledger is touched, so a rejected call never
leaves a half-applied change behind.

Validation NEVER silently fixes values beyond trimming whitespace.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from pgledger.ledger.errors import InvalidInputError


def require_text(value: Any, field: str) -> str:
    """Return ``value`` trimmed, or raise if it is not a non-blank string."""
    if not isinstance(value, str):
        raise InvalidInputError(f"Please enter the {field}.", field=field)
    text = value.strip()
    if not text:
        raise InvalidInputError(f"Please enter the {field}.", field=field)
    return text


def to_decimal(value: Any) -> Decimal:
    """
    Convert user input to Decimal without picking up binary float noise.

    Floats go through their shortest repr, so 33.33 becomes
    Decimal("33.33") rather than Decimal(33.33).

    Raises:
        InvalidInputError: for bools, unsupported types and unparseable text
    """
    if isinstance(value, bool):
        raise InvalidInputError("Amount must be a number.", field="amount")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            raise InvalidInputError(
                f"'{value}' is not a valid amount.", field="amount"
            )
    raise InvalidInputError("Amount must be a number.", field="amount")


def parse_amount(value: Any, field: str = "amount", allow_zero: bool = False) -> Decimal:
    """
    Parse and range-check an amount.

    Args:
        value: Decimal, int, float or numeric string
        field: Name used in the error message
        allow_zero: Accept 0 (expenses) or require > 0 (payments)
    """
    amount = to_decimal(value)
    if not amount.is_finite():
        raise InvalidInputError(f"Please enter a valid {field}.", field=field)
    if allow_zero:
        if amount < 0:
            raise InvalidInputError(
                f"Please enter a valid non-negative number for the {field}.",
                field=field,
            )
    elif amount <= 0:
        raise InvalidInputError(
            f"Please enter a valid positive {field}.",
            field=field,
        )
    return amount


def require_index(index: Any) -> int:
    """Reject non-integer positions; range is checked by the caller."""
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidInputError("Position must be a whole number.", field="index")
    return index
