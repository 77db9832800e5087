"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the ledger on a local JSON file today
2. Use in-memory storage for testing
3. Swap in another backend without touching the ledger

The ledger is always saved and loaded WHOLE. It is small (a few weeks of
short lists), and whole-document writes keep it consistent.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from pgledger.ledger import Ledger, PersistenceError
from pgledger.models.audit import AuditEvent


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> Ledger:
        """
        Load the saved ledger.

        Returns:
            The ledger as last saved

        Raises:
            NotFoundError: Nothing has been saved yet
            CorruptDataError: Saved data cannot be understood
            StorageError: The store could not be read
        """
        pass

    @abstractmethod
    def save(self, ledger: Ledger) -> bool:
        """
        Replace the saved ledger.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """
        Forget the saved ledger. A following load() raises NotFoundError.

        Raises:
            StorageError: If the store could not be cleared
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event. Returns True if logged successfully."""
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """All events of one session, in chronological order."""
        pass

    @abstractmethod
    def get_events_by_week(self, week_number: int) -> list[AuditEvent]:
        """All events about one week, in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """The most recent events, newest first."""
        pass


class StorageError(PersistenceError):
    """Base exception for storage operations."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class NotFoundError(StorageError):
    """Nothing stored yet."""
    pass


class CorruptDataError(StorageError):
    """Stored data exists but is not a valid ledger."""
    pass
