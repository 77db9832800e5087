"""
PG Ledger - Source Package

A weekly expense tracker for shared living arrangements (PG / boarding
houses) where a rotating in-charge collects payments and buys groceries.

DESIGN PRINCIPLES:
1. Weeks are the unit of record, months are derived
2. Reject bad input before touching state
3. Finalized weeks are closed books
4. Every action is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "PG Ledger Team"
