"""In-memory ordered collection of finance records."""

from __future__ import annotations

from typing import Iterable, Iterator, List

from .models import FinanceRecord


class RecordStore:
    """Keeps finance records in insertion order.

    There is no update or delete API: records are appended one by one or the
    whole collection is swapped out after a successful load.
    """

    def __init__(self, records: Iterable[FinanceRecord] = ()) -> None:
        self._records: List[FinanceRecord] = list(records)

    def append(self, record: FinanceRecord) -> FinanceRecord:
        self._records.append(record)
        return record

    def snapshot(self) -> List[FinanceRecord]:
        return list(self._records)

    def replace_all(self, records: Iterable[FinanceRecord]) -> None:
        self._records = list(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FinanceRecord]:
        return iter(self.snapshot())
