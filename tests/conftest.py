from datetime import date, timedelta

import pytest

from showbiz.logging_config import reset_logging
from showbiz.models import Category, FinanceRecord, RecordKind


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    for name in (
        "SHOWBIZ_DATA_FILE",
        "SHOWBIZ_DATE_FORMAT",
        "SHOWBIZ_CSV_HEADER",
        "SHOWBIZ_STRICT_LOAD",
        "SHOWBIZ_LOG_LEVEL",
        "SHOWBIZ_ENV",
        "SHOWBIZ_ALLOWED_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    reset_logging()


@pytest.fixture
def today():
    return date.today()


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def make_record(today):
    def _make(
        kind=RecordKind.INCOME,
        amount="100",
        description="Ticket sales",
        record_date=None,
        category=None,
    ):
        if category is None:
            category = (
                Category.INCOME_TICKET_SALES if kind is RecordKind.INCOME else Category.EXPENSE_VENUE_RENTAL
            )
        return FinanceRecord(kind, amount, description, record_date or today, category)

    return _make
