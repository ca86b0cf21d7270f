"""Framework-agnostic business services for the show-business record keeping tools."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .balance import BalanceSummary, summarize
from .exceptions import (
    DuplicateRecordError,
    InvalidCategoryError,
    InvalidKindError,
    RecordNotFoundError,
    ValidationError,
)
from .models import (
    Casting,
    Category,
    Contract,
    Event,
    FinanceRecord,
    Participant,
    RecordKind,
    default_category,
)
from .storage import LoadResult, RecordCodec
from .store import RecordStore
from .validators import (
    ensure_category_matches_kind,
    parse_count,
    parse_date,
    validate_enum,
    validate_required_str,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

CONTRACT_EDITABLE_FIELDS = {"artist_name", "start_date", "end_date", "terms"}


class LedgerService:
    """Computes balances over the records held by a store."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def balance(self, start: object, end: object) -> Decimal:
        """Income minus expense for records dated within ``[start, end]``."""
        return self.totals(start, end).balance

    def totals(self, start: object, end: object) -> BalanceSummary:
        summary = summarize(self._store.snapshot(), start, end)
        logger.info(
            "Balance for %s..%s: income %s, expense %s, balance %s",
            summary.start,
            summary.end,
            summary.income,
            summary.expense,
            summary.balance,
        )
        return summary


class FinanceService:
    """Manages finance records and mediates persistence."""

    def __init__(
        self,
        store: Optional[RecordStore] = None,
        codec: Optional[RecordCodec] = None,
        data_file: Optional[PathLike] = None,
    ) -> None:
        self._store = store if store is not None else RecordStore()
        self._codec = codec or RecordCodec()
        self._data_file = Path(data_file) if data_file is not None else None
        self._ledger = LedgerService(self._store)

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def data_file(self) -> Optional[Path]:
        return self._data_file

    # Public API -----------------------------------------------------------
    def add_record(
        self,
        kind: object,
        amount: object,
        description: object,
        record_date: object,
        category: object = None,
    ) -> FinanceRecord:
        """Build a record, check its category fits the kind and append it.

        A missing category files the record under the kind's OTHER bucket.
        """
        if category is None:
            category = default_category(validate_enum(kind, "kind", RecordKind, InvalidKindError))
        record = FinanceRecord(kind, amount, description, record_date, category)
        ensure_category_matches_kind(record.kind, record.category)

        self._store.append(record)
        logger.info("New finance record added: %r", record)
        return record

    def get(self, record_id: str) -> FinanceRecord:
        for record in self._store:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(f"Finance record {record_id} not found")

    def update_amount(self, record_id: str, amount: object) -> FinanceRecord:
        record = self.get(record_id)
        record.amount = amount
        logger.info("Amount of finance record %s changed to %s", record_id, record.amount)
        return record

    def list(self, **filters: object) -> List[FinanceRecord]:
        """Records in insertion order, optionally narrowed by kind, category and dates."""
        kind = (
            validate_enum(filters["kind"], "kind", RecordKind, InvalidKindError)
            if filters.get("kind") is not None
            else None
        )
        category = (
            validate_enum(filters["category"], "category", Category, InvalidCategoryError)
            if filters.get("category") is not None
            else None
        )
        start = parse_date(filters["start"], "start") if filters.get("start") is not None else None
        end = parse_date(filters["end"], "end") if filters.get("end") is not None else None

        def matches(record: FinanceRecord) -> bool:
            if kind and record.kind is not kind:
                return False
            if category and record.category is not category:
                return False
            if start and record.date < start:
                return False
            if end and record.date > end:
                return False
            return True

        return [record for record in self._store if matches(record)]

    def balance(self, start: object, end: object) -> Decimal:
        return self._ledger.balance(start, end)

    def totals(self, start: object, end: object) -> BalanceSummary:
        return self._ledger.totals(start, end)

    def save(self, path: Optional[PathLike] = None) -> int:
        """Write the ledger to ``path`` (or the data file); 0 means nothing was saved."""
        return self._codec.save(self._target(path), self._store.snapshot())

    def load(self, path: Optional[PathLike] = None) -> LoadResult:
        """Replace the ledger with the contents of ``path`` (or the data file).

        The store is only touched once the whole file has been read.
        """
        result = self._codec.load(self._target(path))
        self._store.replace_all(result.records)
        return result

    def import_file(self, path: PathLike) -> LoadResult:
        """Load ``path`` into the ledger and persist it to the data file.

        An import without records clears the data file, so the next start
        does not bring the old ledger back.
        """
        result = self.load(path)
        target = self._target(None)
        if result.records:
            self._codec.save(target, result.records)
        else:
            self._codec.clear(target)
        return result

    def hydrate(self) -> int:
        """Load the data file if it exists; a missing file means an empty ledger."""
        if self._data_file is None or not self._data_file.exists():
            logger.info("No previous finance records found")
            return 0
        return len(self.load().records)

    # Internal helpers -----------------------------------------------------
    def _target(self, path: Optional[PathLike]) -> Path:
        if path is not None:
            return Path(path)
        if self._data_file is None:
            raise ValidationError("no file path given and no data file configured")
        return self._data_file


class CastingService:
    """Registers castings and the participants taking part in them."""

    def __init__(self) -> None:
        self._castings: Dict[str, Casting] = {}

    def register(self, payload: Dict[str, object]) -> Casting:
        casting = Casting(
            name=payload.get("name"),
            description=payload.get("description"),
            location=payload.get("location"),
            casting_date=payload.get("casting_date"),
        )
        self._castings[casting.id] = casting
        logger.info("Casting was added: %s", casting.id)
        return casting

    def get(self, casting_id: str) -> Casting:
        try:
            return self._castings[casting_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Casting {casting_id} not found") from exc

    def list(self) -> List[Casting]:
        return sorted(self._castings.values(), key=lambda casting: casting.casting_date)

    def register_participant(self, casting_id: str, payload: Dict[str, object]) -> Participant:
        casting = self.get(casting_id)
        participant = Participant(
            name=payload.get("name"),
            status=payload.get("status") or "NEW",
        )
        return casting.register_participant(participant)

    def update_participant_status(
        self, casting_id: str, participant_id: str, status: object
    ) -> Participant:
        return self.get(casting_id).update_participant_status(participant_id, status)


class ContractService:
    """Keeps artist contracts and reports the ones running out soon."""

    def __init__(self) -> None:
        self._contracts: List[Contract] = []

    def add(self, payload: Dict[str, object]) -> Contract:
        contract = Contract(
            artist_name=payload.get("artist_name"),
            start_date=payload.get("start_date"),
            end_date=payload.get("end_date"),
            terms=payload.get("terms"),
        )
        self._contracts.append(contract)
        logger.info("Contract added: %s", contract.id)
        return contract

    def get(self, contract_id: str) -> Contract:
        for contract in self._contracts:
            if contract.id == contract_id:
                return contract
        raise RecordNotFoundError(f"Contract {contract_id} not found")

    def list(self) -> List[Contract]:
        return list(self._contracts)

    def update(self, contract_id: str, changes: Dict[str, object]) -> Contract:
        """Apply ``changes`` by rebuilding the contract, so every rule is checked again."""
        unsupported = set(changes) - CONTRACT_EDITABLE_FIELDS
        if unsupported:
            raise ValidationError(
                f"contract fields cannot be changed: {', '.join(sorted(unsupported))}"
            )
        current = self.get(contract_id)
        updated = replace(current, **changes)
        self._contracts[self._contracts.index(current)] = updated
        logger.info("Contract updated: %s", contract_id)
        return updated

    def expiring(self, within_days: object = 30, today: Optional[date] = None) -> List[Contract]:
        """Contracts whose end date falls in the next ``within_days`` days, today included."""
        days = parse_count(within_days, "within_days", minimum=1)
        today = today or date.today()
        last_day = today + timedelta(days=days - 1)
        expiring = [
            contract for contract in self._contracts if today <= contract.end_date <= last_day
        ]
        if expiring:
            logger.info("%d contracts expire within %d days", len(expiring), days)
        return expiring


class EventService:
    """Manages events, their ticket sales and artist rosters."""

    def __init__(self) -> None:
        self._events: Dict[str, Event] = {}

    def add(self, event: Union[Event, Dict[str, object]]) -> Event:
        if isinstance(event, dict):
            event = Event(
                name=event.get("name"),
                event_type=event.get("event_type"),
                date=event.get("date"),
                location=event.get("location"),
                total_tickets=event.get("total_tickets"),
                ticket_price=event.get("ticket_price"),
                sold_tickets=event.get("sold_tickets") or 0,
                artists=set(_artist_names(event.get("artists"))),
            )
        if event.id in self._events:
            raise DuplicateRecordError(f"Event {event.id} already exists")
        self._events[event.id] = event
        logger.info("Event %s with id %s added", event.name, event.id)
        return event

    def get(self, event_id: str) -> Event:
        try:
            return self._events[event_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Event {event_id} not found") from exc

    def remove(self, event_id: str) -> None:
        self.get(event_id)
        del self._events[event_id]
        logger.info("Event with id %s removed", event_id)

    def list(self) -> List[Event]:
        return sorted(self._events.values(), key=lambda event: event.date)


def _artist_names(raw: object) -> Iterable[str]:
    if raw is None:
        return []
    if isinstance(raw, str) or not isinstance(raw, (list, tuple, set)):
        raise ValidationError("artists must be a list of names")
    return [validate_required_str(name, "artist", 100) for name in raw]
