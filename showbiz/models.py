"""Data models for the show-business record keeping domain."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Set
from uuid import uuid4

from .exceptions import (
    InvalidCategoryError,
    InvalidKindError,
    RecordNotFoundError,
    ValidationError,
)
from .validators import (
    ISO_DATE_FORMAT,
    parse_amount,
    parse_count,
    parse_date,
    parse_non_negative,
    validate_description,
    validate_enum,
    validate_past_date,
    validate_required_str,
)

__all__ = [
    "DATE_FORMATS",
    "Casting",
    "Category",
    "CategoryParse",
    "Contract",
    "Event",
    "EventType",
    "FinanceRecord",
    "Participant",
    "ParticipantStatus",
    "RecordKind",
    "categories_for",
    "default_category",
    "format_date",
    "generate_id",
    "parse_category",
]

logger = logging.getLogger(__name__)

DATE_FORMATS = {
    "iso": ISO_DATE_FORMAT,
    "dotted": "%d.%m.%Y",
}


def format_date(value: date, pattern: str) -> str:
    """Render ``value`` with ``pattern``, always writing a four digit year."""
    # strftime leaves years before 1000 unpadded while strptime needs four digits
    return value.strftime(pattern.replace("%Y", f"{value.year:04d}"))


def generate_id() -> str:
    return str(uuid4())


class RecordKind(Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Category(Enum):
    INCOME_TICKET_SALES = "INCOME_TICKET_SALES"
    INCOME_SPONSORSHIPS = "INCOME_SPONSORSHIPS"
    INCOME_CONTRACT_FEES = "INCOME_CONTRACT_FEES"
    INCOME_MERCHANDISE = "INCOME_MERCHANDISE"
    INCOME_STREAMING = "INCOME_STREAMING"
    INCOME_SALARY = "INCOME_SALARY"
    INCOME_BUSINESS = "INCOME_BUSINESS"
    INCOME_OTHER = "INCOME_OTHER"
    EXPENSE_ARTIST_FEES = "EXPENSE_ARTIST_FEES"
    EXPENSE_VENUE_RENTAL = "EXPENSE_VENUE_RENTAL"
    EXPENSE_MARKETING = "EXPENSE_MARKETING"
    EXPENSE_STAFF = "EXPENSE_STAFF"
    EXPENSE_TECHNICAL = "EXPENSE_TECHNICAL"
    EXPENSE_LOGISTICS = "EXPENSE_LOGISTICS"
    EXPENSE_FOOD = "EXPENSE_FOOD"
    EXPENSE_RENT = "EXPENSE_RENT"
    EXPENSE_SPORT = "EXPENSE_SPORT"
    EXPENSE_OTHER = "EXPENSE_OTHER"

    @property
    def kind(self) -> RecordKind:
        """The record kind named by the category prefix."""
        return RecordKind.INCOME if self.name.startswith("INCOME_") else RecordKind.EXPENSE


def categories_for(kind: RecordKind) -> List[Category]:
    return [category for category in Category if category.kind is kind]


def default_category(kind: RecordKind) -> Category:
    return Category.INCOME_OTHER if kind is RecordKind.INCOME else Category.EXPENSE_OTHER


@dataclass(frozen=True)
class CategoryParse:
    """Outcome of parsing a category name: either ``value`` or ``error`` is set."""

    value: Optional[Category] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None

    def or_default(self, kind: RecordKind) -> Category:
        return self.value if self.value is not None else default_category(kind)


def parse_category(raw: object) -> CategoryParse:
    """Parse a category name without falling back to a default bucket."""
    try:
        return CategoryParse(value=validate_enum(raw, "category", Category, InvalidCategoryError))
    except InvalidCategoryError as exc:
        return CategoryParse(error=str(exc))


class FinanceRecord:
    """A single income or expense entry.

    Every field except ``amount`` is read-only once the record exists; the
    amount can be changed but stays strictly positive.
    """

    __slots__ = ("_id", "_kind", "_amount", "_description", "_date", "_category")

    def __init__(
        self,
        kind: object,
        amount: object,
        description: object,
        record_date: object,
        category: object,
        *,
        record_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> None:
        try:
            checked_kind = validate_enum(kind, "kind", RecordKind, InvalidKindError)
            checked_amount = parse_amount(amount)
            checked_description = validate_description(description)
            checked_date = validate_past_date(record_date, "date", today)
            checked_category = validate_enum(category, "category", Category, InvalidCategoryError)
        except ValidationError as exc:
            logger.error("Rejected finance record: %s", exc)
            raise

        self._id = record_id or generate_id()
        self._kind = checked_kind
        self._amount = checked_amount
        self._description = checked_description
        self._date = checked_date
        self._category = checked_category

    @property
    def id(self) -> str:
        return self._id

    @property
    def kind(self) -> RecordKind:
        return self._kind

    @property
    def amount(self) -> Decimal:
        return self._amount

    @amount.setter
    def amount(self, value: object) -> None:
        self._amount = parse_amount(value)

    @property
    def description(self) -> str:
        return self._description

    @property
    def date(self) -> date:
        return self._date

    @property
    def category(self) -> Category:
        return self._category

    def same_content(self, other: "FinanceRecord") -> bool:
        """Compare every field except the identifier."""
        return (
            self.kind is other.kind
            and self.amount == other.amount
            and self.description == other.description
            and self.date == other.date
            and self.category is other.category
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the record to JSON-friendly natives."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "amount": str(self.amount),
            "description": self.description,
            "date": self.date.isoformat(),
            "category": self.category.value,
        }

    def __repr__(self) -> str:
        return (
            f"FinanceRecord(id={self.id!r}, kind={self.kind.name}, amount={self.amount}, "
            f"description={self.description!r}, date={self.date.isoformat()}, "
            f"category={self.category.name})"
        )


class ParticipantStatus(Enum):
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass
class Participant:
    name: str
    status: ParticipantStatus = ParticipantStatus.NEW
    id: str = field(default_factory=generate_id)

    def __post_init__(self) -> None:
        self.name = validate_required_str(self.name, "name", 100)
        self.status = validate_enum(self.status, "status", ParticipantStatus)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "status": self.status.value}


@dataclass
class Casting:
    name: str
    description: str
    location: str
    casting_date: date
    id: str = field(default_factory=generate_id)
    participants: Dict[str, Participant] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.name = validate_required_str(self.name, "name", 100)
        self.description = validate_required_str(self.description, "description", 500)
        self.location = validate_required_str(self.location, "location", 200)
        if self.casting_date is None:
            raise ValidationError("casting_date cannot be empty")
        self.casting_date = parse_date(self.casting_date, "casting_date")

    def register_participant(self, participant: Participant) -> Participant:
        if participant is None:
            raise ValidationError("participant cannot be empty")
        self.participants[participant.id] = participant
        logger.info("Participant %s registered for casting %s", participant.id, self.id)
        return participant

    def update_participant_status(self, participant_id: str, status: object) -> Participant:
        if status is None:
            raise ValidationError("status cannot be empty")
        new_status = validate_enum(status, "status", ParticipantStatus)
        try:
            participant = self.participants[participant_id]
        except KeyError as exc:
            raise RecordNotFoundError(
                f"Participant {participant_id} is not registered for casting {self.id}"
            ) from exc
        participant.status = new_status
        logger.info("Participant %s status updated to %s", participant_id, new_status.name)
        return participant

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "casting_date": self.casting_date.isoformat(),
            "participants": [participant.to_dict() for participant in self.participants.values()],
        }


@dataclass(frozen=True)
class Contract:
    artist_name: str
    start_date: date
    end_date: date
    terms: str
    id: str = field(default_factory=generate_id)

    def __post_init__(self) -> None:
        # frozen: normalised values are written through object.__setattr__
        object.__setattr__(self, "artist_name", validate_required_str(self.artist_name, "artist_name", 100))
        if self.start_date is None or self.end_date is None:
            raise ValidationError("contract dates cannot be empty")
        start = parse_date(self.start_date, "start_date")
        end = parse_date(self.end_date, "end_date")
        if start > end:
            raise ValidationError("start_date cannot be after end_date")
        object.__setattr__(self, "start_date", start)
        object.__setattr__(self, "end_date", end)
        object.__setattr__(self, "terms", validate_required_str(self.terms, "terms", 2000))

    def is_active(self, today: Optional[date] = None) -> bool:
        today = today or date.today()
        return self.start_date <= today <= self.end_date

    def days_until_expiration(self, today: Optional[date] = None) -> int:
        """Days left until ``end_date``, counted from the start if it lies ahead."""
        today = today or date.today()
        reference = max(today, self.start_date)
        return (self.end_date - reference).days

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "artist_name": self.artist_name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "terms": self.terms,
        }


class EventType(Enum):
    CONCERT = "CONCERT"
    SPORTS = "SPORTS"
    THEATER = "THEATER"
    CONFERENCE = "CONFERENCE"
    EXHIBITION = "EXHIBITION"
    FESTIVAL = "FESTIVAL"
    WORKSHOP = "WORKSHOP"
    MOVIE_PREMIERE = "MOVIE_PREMIERE"
    CHARITY = "CHARITY"
    ESPORTS = "ESPORTS"
    LECTURE = "LECTURE"
    MEETUP = "MEETUP"
    OPEN_AIR = "OPEN_AIR"
    CARNIVAL = "CARNIVAL"
    BUSINESS_FORUM = "BUSINESS_FORUM"


@dataclass
class Event:
    name: str
    event_type: EventType
    date: date
    location: str
    total_tickets: int
    ticket_price: Decimal
    sold_tickets: int = 0
    artists: Set[str] = field(default_factory=set)
    id: str = field(default_factory=generate_id)

    def __post_init__(self) -> None:
        self.name = validate_required_str(self.name, "name", 200)
        self.event_type = validate_enum(self.event_type, "event_type", EventType)
        if self.date is None:
            raise ValidationError("date cannot be empty")
        self.date = parse_date(self.date, "date")
        self.location = validate_required_str(self.location, "location", 200)
        self.total_tickets = parse_count(self.total_tickets, "total_tickets", minimum=1)
        self.sold_tickets = parse_count(self.sold_tickets, "sold_tickets")
        if self.sold_tickets > self.total_tickets:
            raise ValidationError("sold_tickets cannot exceed total_tickets")
        self.ticket_price = parse_non_negative(self.ticket_price, "ticket_price")
        self.artists = {validate_required_str(name, "artist", 100) for name in self.artists}

    @property
    def tickets_remaining(self) -> int:
        return self.total_tickets - self.sold_tickets

    def sell_tickets(self, count: object) -> int:
        """Sell ``count`` tickets and return how many are left."""
        amount = parse_count(count, "count", minimum=1)
        if amount > self.tickets_remaining:
            raise ValidationError(f"Not enough tickets. Only {self.tickets_remaining} available.")
        self.sold_tickets += amount
        logger.info("%d tickets sold for event %s, %d remaining", amount, self.id, self.tickets_remaining)
        return self.tickets_remaining

    def add_artist(self, artist_name: object) -> str:
        name = validate_required_str(artist_name, "artist", 100)
        if name in self.artists:
            raise ValidationError(f"Artist {name} is already added to the event")
        self.artists.add(name)
        return name

    def remove_artist(self, artist_name: str) -> None:
        try:
            self.artists.remove(artist_name)
        except KeyError as exc:
            raise RecordNotFoundError(f"Artist {artist_name} not found in the event") from exc

    def calculate_profit(self, expenses: object = 0) -> Decimal:
        """Ticket revenue minus ``expenses``; negative values are a loss."""
        costs = parse_non_negative(expenses, "expenses")
        profit = self.sold_tickets * self.ticket_price - costs
        if profit > 0:
            logger.info("Event %s made a profit of %s", self.name, profit)
        elif profit == 0:
            logger.info("Event %s broke even", self.name)
        else:
            logger.info("Event %s incurred a loss of %s", self.name, -profit)
        return profit

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "event_type": self.event_type.value,
            "date": self.date.isoformat(),
            "location": self.location,
            "total_tickets": self.total_tickets,
            "sold_tickets": self.sold_tickets,
            "tickets_remaining": self.tickets_remaining,
            "ticket_price": f"{self.ticket_price:.2f}",
            "artists": sorted(self.artists),
        }
