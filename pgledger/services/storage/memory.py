"""
In-Memory Storage

Keeps the ledger as serialized JSON text, so tests exercise the same
encode/decode path as the file backend without touching disk.
"""

from typing import Optional
from uuid import UUID

from pgledger.ledger import Ledger
from pgledger.models.audit import AuditEvent
from pgledger.services.storage.interface import (
    AuditStorageInterface,
    LedgerStorageInterface,
    NotFoundError,
)
from pgledger.services.storage.json_file import ledger_from_json, ledger_to_json


class InMemoryLedgerStorage(LedgerStorageInterface):
    """Ledger storage that lives as long as the object does."""

    def __init__(self, initial_text: Optional[str] = None):
        self._text = initial_text
        self.save_count = 0

    @property
    def raw(self) -> Optional[str]:
        """The stored JSON text, or None when empty."""
        return self._text

    def load(self) -> Ledger:
        if self._text is None:
            raise NotFoundError("No saved ledger in memory")
        return ledger_from_json(self._text)

    def save(self, ledger: Ledger) -> bool:
        self._text = ledger_to_json(ledger)
        self.save_count += 1
        return True

    def clear(self) -> None:
        self._text = None


class InMemoryAuditStorage(AuditStorageInterface):
    """Audit storage backed by a list."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self.events if e.correlation_id == correlation_id]

    def get_events_by_week(self, week_number: int) -> list[AuditEvent]:
        return [e for e in self.events if e.week_number == week_number]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
