"""Line-oriented text persistence for finance records."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from .exceptions import (
    InvalidKindError,
    MalformedRecordLineError,
    PersistenceError,
    RecordFileNotFoundError,
    ValidationError,
)
from .models import DATE_FORMATS, FinanceRecord, RecordKind, default_category, format_date
from .validators import ensure_category_matches_kind, validate_enum

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

FIELDS_WITH_CATEGORY = ("kind", "amount", "description", "date", "category")
FIELDS_WITHOUT_CATEGORY = ("kind", "amount", "description", "date")


@dataclass(frozen=True)
class LoadResult:
    records: List[FinanceRecord]
    skipped: int = 0


class RecordCodec:
    """Reads and writes finance records as comma separated lines.

    One codec instance uses a single date pattern for both directions. Fields
    holding a comma or a quote are quoted on write, so they read back intact.
    """

    def __init__(
        self,
        *,
        date_format: str = "iso",
        include_category: bool = True,
        header: bool = True,
        strict: bool = True,
    ) -> None:
        try:
            self._date_pattern = DATE_FORMATS[date_format]
        except KeyError as exc:
            raise ValidationError(
                f"date_format must be one of: {', '.join(sorted(DATE_FORMATS))}"
            ) from exc
        self._date_format = date_format
        self._fields: Sequence[str] = (
            FIELDS_WITH_CATEGORY if include_category else FIELDS_WITHOUT_CATEGORY
        )
        self._header = header
        self._strict = strict

    @property
    def date_format(self) -> str:
        return self._date_format

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def fields(self) -> Sequence[str]:
        return self._fields

    # Encoding -------------------------------------------------------------
    def encode(self, record: FinanceRecord) -> List[str]:
        row = [
            record.kind.value,
            str(record.amount),
            record.description,
            format_date(record.date, self._date_pattern),
        ]
        if len(self._fields) == len(FIELDS_WITH_CATEGORY):
            row.append(record.category.value)
        return row

    def save(self, path: PathLike, records: Iterable[FinanceRecord]) -> int:
        """Write ``records`` to ``path`` and return how many were written.

        An empty collection writes nothing and returns 0.
        """
        rows = [self.encode(record) for record in records]
        target = Path(path)
        if not rows:
            logger.warning("No finance records to save; %s left untouched", target)
            return 0

        self._write(target, rows)
        logger.info("Saved %d finance records to %s", len(rows), target)
        return len(rows)

    def clear(self, path: PathLike) -> None:
        """Replace ``path`` with a ledger holding no records."""
        target = Path(path)
        self._write(target, [])
        logger.info("Cleared finance records in %s", target)

    def _write(self, target: Path, rows: List[List[str]]) -> None:
        temp_path = target.with_suffix(target.suffix + ".tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8", newline="") as handle:
                writer = csv.writer(handle, lineterminator="\n")
                if self._header:
                    writer.writerow(self._fields)
                writer.writerows(rows)
                handle.flush()
            # Use replace for atomic move on POSIX; ensures crash-safe persistence.
            temp_path.replace(target)
        except (OSError, UnicodeError) as exc:
            if temp_path.exists():
                temp_path.unlink()
            raise PersistenceError(f"Unable to write finance records to {target}") from exc

    # Decoding -------------------------------------------------------------
    def decode(self, row: Sequence[str], line_number: int) -> FinanceRecord:
        if len(row) != len(self._fields):
            raise MalformedRecordLineError(
                line_number, f"expected {len(self._fields)} fields, found {len(row)}"
            )
        values = dict(zip(self._fields, row))
        try:
            record_date = datetime.strptime(values["date"].strip(), self._date_pattern).date()
        except ValueError as exc:
            raise MalformedRecordLineError(
                line_number, f"date {values['date']!r} does not match {self._date_pattern}"
            ) from exc
        try:
            kind = validate_enum(values["kind"], "kind", RecordKind, InvalidKindError)
            # the category-less layout files every record under its kind's OTHER bucket
            category = values["category"] if "category" in values else default_category(kind)
            record = FinanceRecord(
                kind,
                values["amount"],
                values["description"],
                record_date,
                category,
            )
            ensure_category_matches_kind(record.kind, record.category)
            return record
        except ValidationError as exc:
            raise MalformedRecordLineError(line_number, str(exc)) from exc

    def load(self, path: PathLike) -> LoadResult:
        target = Path(path)
        if not target.exists():
            logger.error("Finance record file not found: %s", target)
            raise RecordFileNotFoundError(f"File not found: {target}")

        records: List[FinanceRecord] = []
        skipped = 0
        try:
            with target.open("r", encoding="utf-8", newline="") as handle:
                reader = csv.reader(handle)
                expect_header = self._header
                for row in reader:
                    line_number = reader.line_num
                    if not row or all(not cell.strip() for cell in row):
                        continue
                    if expect_header:
                        expect_header = False
                        if [cell.strip().lower() for cell in row] != list(self._fields):
                            raise MalformedRecordLineError(line_number, "missing or unexpected header row")
                        continue
                    try:
                        records.append(self.decode(row, line_number))
                    except MalformedRecordLineError as exc:
                        if self._strict:
                            raise
                        skipped += 1
                        logger.warning("Skipping malformed finance record, %s", exc)
        except csv.Error as exc:
            raise MalformedRecordLineError(reader.line_num, f"unreadable line ({exc})") from exc
        except PersistenceError:
            raise
        except OSError as exc:
            raise PersistenceError(f"Unable to read finance records from {target}") from exc

        logger.info("Loaded %d finance records from %s (%d skipped)", len(records), target, skipped)
        return LoadResult(records=records, skipped=skipped)

