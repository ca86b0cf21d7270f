"""Core business logic package for the show-business record keeping tools."""

from .balance import BalanceSummary, compute_balance
from .config import Settings
from .exceptions import (
    DuplicateRecordError,
    InvalidAmountError,
    InvalidCategoryError,
    InvalidDateError,
    InvalidDescriptionError,
    InvalidKindError,
    InvalidRangeError,
    MalformedRecordLineError,
    PersistenceError,
    RecordFileNotFoundError,
    RecordNotFoundError,
    ValidationError,
)
from .models import (
    Casting,
    Category,
    Contract,
    Event,
    EventType,
    FinanceRecord,
    Participant,
    ParticipantStatus,
    RecordKind,
)
from .services import CastingService, ContractService, EventService, FinanceService, LedgerService
from .storage import LoadResult, RecordCodec
from .store import RecordStore

__all__ = [
    "BalanceSummary",
    "Casting",
    "CastingService",
    "Category",
    "Contract",
    "ContractService",
    "DuplicateRecordError",
    "Event",
    "EventService",
    "EventType",
    "FinanceRecord",
    "FinanceService",
    "InvalidAmountError",
    "InvalidCategoryError",
    "InvalidDateError",
    "InvalidDescriptionError",
    "InvalidKindError",
    "InvalidRangeError",
    "LedgerService",
    "LoadResult",
    "MalformedRecordLineError",
    "Participant",
    "ParticipantStatus",
    "PersistenceError",
    "RecordCodec",
    "RecordFileNotFoundError",
    "RecordKind",
    "RecordNotFoundError",
    "RecordStore",
    "Settings",
    "ValidationError",
    "compute_balance",
]
