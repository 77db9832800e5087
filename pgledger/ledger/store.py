"""
Week Store

Maps week numbers to WeekRecords. Records are created the first time a
week is visited and are never deleted individually.
"""

from typing import Iterator, Optional

from pgledger.ledger.errors import InvalidInputError
from pgledger.models.ledger import WeekRecord


class WeekStore:
    """Week number -> WeekRecord, with creation on demand."""

    def __init__(self, records: Optional[dict[int, WeekRecord]] = None):
        self._records: dict[int, WeekRecord] = {}
        for week_number, record in (records or {}).items():
            self._check_week_number(week_number)
            self._records[week_number] = record

    @staticmethod
    def _check_week_number(week_number: int) -> None:
        if isinstance(week_number, bool) or not isinstance(week_number, int) or week_number < 1:
            raise InvalidInputError(
                f"Week numbers start at 1, got {week_number!r}",
                field="week_number",
            )

    def get_or_create(self, week_number: int) -> WeekRecord:
        """Return the record for a week, creating an empty one if needed."""
        self._check_week_number(week_number)
        record = self._records.get(week_number)
        if record is None:
            record = WeekRecord()
            self._records[week_number] = record
        return record

    def get(self, week_number: int) -> Optional[WeekRecord]:
        return self._records.get(week_number)

    def items(self) -> Iterator[tuple[int, WeekRecord]]:
        for week_number in sorted(self._records):
            yield week_number, self._records[week_number]

    def __contains__(self, week_number: object) -> bool:
        return week_number in self._records

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeekStore):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"WeekStore(weeks={sorted(self._records)})"
