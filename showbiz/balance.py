"""Date-range balance calculation over finance records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from .models import FinanceRecord, RecordKind
from .validators import validate_date_range

__all__ = ["BalanceSummary", "compute_balance", "summarize"]


@dataclass(frozen=True)
class BalanceSummary:
    start: date
    end: date
    income: Decimal
    expense: Decimal

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "income": str(self.income),
            "expense": str(self.expense),
            "balance": str(self.balance),
        }


def _subtotal(records: Iterable[FinanceRecord], kind: RecordKind, start: date, end: date) -> Decimal:
    return sum(
        (record.amount for record in records if record.kind is kind and start <= record.date <= end),
        start=Decimal("0"),
    )


def summarize(records: Iterable[FinanceRecord], start: object, end: object) -> BalanceSummary:
    """Sum income and expense separately over the inclusive ``[start, end]`` range."""
    start_date, end_date = validate_date_range(start, end)
    materialized = list(records)
    return BalanceSummary(
        start=start_date,
        end=end_date,
        income=_subtotal(materialized, RecordKind.INCOME, start_date, end_date),
        expense=_subtotal(materialized, RecordKind.EXPENSE, start_date, end_date),
    )


def compute_balance(records: Iterable[FinanceRecord], start: object, end: object) -> Decimal:
    return summarize(records, start, end).balance
