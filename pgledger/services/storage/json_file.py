"""
Local JSON File Storage

DESIGN DECISION: The ledger lives in a single JSON file, the local
equivalent of the browser's localStorage entry. The layout is the same
one the browser tracker wrote, so old exports load unchanged.

TRADEOFFS:
- One writer at a time (fine: one household, one session)
- Whole-file rewrite on every save (fine: the file is tiny)

Writes go to a temporary file that is then renamed over the old one, so
a crash mid-write leaves the previous save intact.

The audit log is a separate append-only JSON-lines file.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from pgledger.config import get_settings
from pgledger.ledger import Ledger
from pgledger.models.audit import AuditEvent, audit_event_from_json_line
from pgledger.models.ledger import LedgerDocument, month_for_week
from pgledger.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)

logger = structlog.get_logger(__name__)


def ledger_to_json(ledger: Ledger) -> str:
    """Serialize a ledger to its persisted JSON text."""
    return json.dumps(
        ledger.to_document().to_storage_dict(),
        indent=2,
        ensure_ascii=False,
    )


def ledger_from_json(text: str) -> Ledger:
    """
    Parse persisted JSON text back into a ledger.

    Older saves may lack newer week fields; the models default them.

    Raises:
        CorruptDataError: not JSON, or not a ledger
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptDataError(f"Saved ledger is not valid JSON: {e}", cause=e)

    if not isinstance(data, dict):
        raise CorruptDataError("Saved ledger is not a JSON object")

    try:
        document = LedgerDocument.model_validate(data)
    except ValidationError as e:
        raise CorruptDataError(f"Saved ledger failed validation: {e}", cause=e)

    derived_month = month_for_week(document.current_week)
    if document.current_month is not None and document.current_month != derived_month:
        logger.warning(
            "stored_month_mismatch",
            current_week=document.current_week,
            stored_month=document.current_month,
            derived_month=derived_month,
        )

    return Ledger.from_document(document)


def _atomic_write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class JsonFileLedgerStorage(LedgerStorageInterface):
    """
    Ledger stored as one JSON document on local disk.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path is not None else get_settings().storage.ledger_path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Ledger:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise NotFoundError(f"No saved ledger at {self._path}", cause=e)
        except OSError as e:
            raise StorageError(f"Could not read {self._path}: {e}", cause=e)

        ledger = ledger_from_json(text)
        logger.debug(
            "ledger_file_loaded",
            path=str(self._path),
            current_week=ledger.current_week,
            weeks=len(ledger.weeks),
        )
        return ledger

    def save(self, ledger: Ledger) -> bool:
        text = ledger_to_json(ledger)
        try:
            _atomic_write(self._path, text)
        except OSError as e:
            raise StorageError(f"Could not write {self._path}: {e}", cause=e)

        logger.debug(
            "ledger_file_saved",
            path=str(self._path),
            current_week=ledger.current_week,
            weeks=len(ledger.weeks),
        )
        return True

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not remove {self._path}: {e}", cause=e)
        logger.info("ledger_file_cleared", path=str(self._path))


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit log, one JSON event per line.

    Unreadable lines are skipped on read so one bad write does not hide
    the rest of the history.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path is not None else get_settings().storage.audit_path

    @property
    def path(self) -> Path:
        return self._path

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(event.to_json_line() + "\n")
        except OSError as e:
            raise StorageError(f"Could not append to {self._path}: {e}", cause=e)
        return True

    def _read_all(self) -> list[AuditEvent]:
        try:
            lines = self._path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Could not read {self._path}: {e}", cause=e)

        events = []
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                events.append(audit_event_from_json_line(line))
            except ValidationError as e:
                logger.warning(
                    "audit_line_skipped",
                    path=str(self._path),
                    line_number=line_number,
                    error=str(e),
                )
        return events

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        return [e for e in self._read_all() if e.correlation_id == correlation_id]

    def get_events_by_week(self, week_number: int) -> list[AuditEvent]:
        return [e for e in self._read_all() if e.week_number == week_number]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = self._read_all()
        events.reverse()
        return events[:limit]
