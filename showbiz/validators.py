"""Validation helpers shared across the record keeping services."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Type, TypeVar

from .exceptions import (
    InvalidAmountError,
    InvalidCategoryError,
    InvalidDateError,
    InvalidDescriptionError,
    InvalidRangeError,
    ValidationError,
)

E = TypeVar("E", bound=Enum)

ISO_DATE_FORMAT = "%Y-%m-%d"


def parse_amount(raw: object, field: str = "amount") -> Decimal:
    """Convert raw input to a positive, finite Decimal without rounding it."""
    if raw is None or isinstance(raw, bool):
        raise InvalidAmountError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidAmountError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise InvalidAmountError(f"{field} must be a finite number")
    if amount <= 0:
        raise InvalidAmountError(f"{field} must be greater than 0")
    return amount


def parse_non_negative(raw: object, field: str) -> Decimal:
    if raw is None or isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"{field} must be a numeric value") from exc
    if not value.is_finite() or value < 0:
        raise ValidationError(f"{field} cannot be less than zero")
    return value


def parse_count(raw: object, field: str, *, minimum: int = 0) -> int:
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a whole number")
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field} must be a whole number") from exc
    if value < minimum:
        raise ValidationError(f"{field} must be at least {minimum}")
    return value


def validate_required_str(value: object, field: str, max_length: int = 200) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_description(value: object) -> str:
    """Return the description unchanged once it is known to hold visible text."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidDescriptionError("description cannot be empty")
    return value


def parse_date(value: object, field: str, pattern: str = ISO_DATE_FORMAT) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), pattern).date()
        except ValueError as exc:
            raise InvalidDateError(f"{field} must be a date in {pattern} format") from exc
    raise InvalidDateError(f"{field} must be a date")


def validate_past_date(value: object, field: str = "date", today: Optional[date] = None) -> date:
    if value is None:
        raise InvalidDateError(f"{field} cannot be empty")
    parsed = parse_date(value, field)
    if parsed > (today or date.today()):
        raise InvalidDateError(f"{field} cannot be in the future")
    return parsed


def validate_date_range(start: object, end: object) -> Tuple[date, date]:
    start_date = parse_date(start, "start")
    end_date = parse_date(end, "end")
    if start_date > end_date:
        raise InvalidRangeError("start date cannot be after end date")
    return start_date, end_date


def validate_enum(
    value: object,
    field: str,
    enum_type: Type[E],
    error: Type[ValidationError] = ValidationError,
) -> E:
    if isinstance(value, enum_type):
        return value
    if value is None:
        raise error(f"{field} cannot be empty")
    if not isinstance(value, str):
        raise error(f"{field} must be a string")
    canonical = value.strip().upper()
    try:
        return enum_type[canonical]
    except KeyError as exc:
        allowed = ", ".join(member.name for member in enum_type)
        raise error(f"{field} must be one of: {allowed}") from exc


def ensure_category_matches_kind(kind, category) -> None:
    """Reject a category whose prefix names the other record kind."""
    if category.kind is not kind:
        raise InvalidCategoryError(
            f"category {category.name} cannot be used for {kind.name} records"
        )


def validate_relative_path(raw: object, root: Path, field: str) -> Optional[Path]:
    """Resolve ``raw`` against ``root`` and refuse anything that escapes it."""
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValidationError(f"{field} must be a string path")
    candidate = Path(raw.strip())
    if not candidate.parts:
        raise ValidationError(f"{field} cannot be empty")
    if candidate.is_absolute():
        raise ValidationError(f"{field} must be a relative path")
    try:
        resolved = (root / candidate).resolve()
    except OSError as exc:
        raise ValidationError(f"{field} points to an invalid path") from exc
    if root.resolve() not in resolved.parents:
        raise ValidationError(f"{field} must be located within {root}")
    return root / candidate
