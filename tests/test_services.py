from datetime import date, timedelta
from decimal import Decimal

import pytest

from showbiz.exceptions import (
    InvalidAmountError,
    InvalidCategoryError,
    InvalidDateError,
    MalformedRecordLineError,
    RecordFileNotFoundError,
    RecordNotFoundError,
    ValidationError,
)
from showbiz.models import Category, RecordKind
from showbiz.services import FinanceService
from showbiz.storage import RecordCodec


@pytest.fixture
def service(tmp_path):
    return FinanceService(data_file=tmp_path / "data" / "ledger.csv")


def test_add_record_appends_to_store(service, today):
    record = service.add_record("INCOME", "1500", "Concert fee", today, "INCOME_CONTRACT_FEES")

    assert service.store.snapshot() == [record]
    assert record.category is Category.INCOME_CONTRACT_FEES


def test_missing_category_uses_the_other_bucket(service, today):
    income = service.add_record(RecordKind.INCOME, 10, "Tips", today)
    expense = service.add_record(RecordKind.EXPENSE, 10, "Snacks", today)

    assert income.category is Category.INCOME_OTHER
    assert expense.category is Category.EXPENSE_OTHER


def test_category_must_fit_the_kind(service, today):
    with pytest.raises(InvalidCategoryError):
        service.add_record(RecordKind.INCOME, 10, "Mixed up", today, Category.EXPENSE_STAFF)
    with pytest.raises(InvalidCategoryError):
        service.add_record(RecordKind.INCOME, 10, "Unknown", today, "INCOME_LOTTERY")

    assert len(service.store) == 0


@pytest.mark.parametrize(
    "amount, description, offset, error",
    [
        (0, "Fee", 0, InvalidAmountError),
        (-3, "Fee", 0, InvalidAmountError),
        (5, "  ", 0, ValidationError),
        (5, "Fee", 1, InvalidDateError),
    ],
)
def test_invalid_records_never_reach_the_store(service, today, amount, description, offset, error):
    with pytest.raises(error):
        service.add_record(RecordKind.EXPENSE, amount, description, today + timedelta(days=offset))

    assert service.store.snapshot() == []


def test_list_filters(service, today, yesterday):
    tickets = service.add_record(RecordKind.INCOME, 100, "Tickets", today, Category.INCOME_TICKET_SALES)
    rent = service.add_record(RecordKind.EXPENSE, 50, "Rent", yesterday, Category.EXPENSE_RENT)
    staff = service.add_record(RecordKind.EXPENSE, 20, "Crew", today, Category.EXPENSE_STAFF)

    assert service.list() == [tickets, rent, staff]
    assert service.list(kind="expense") == [rent, staff]
    assert service.list(category=Category.EXPENSE_RENT) == [rent]
    assert service.list(start=today) == [tickets, staff]
    assert service.list(end=yesterday.isoformat()) == [rent]


def test_update_amount(service, today):
    record = service.add_record(RecordKind.INCOME, 100, "Tickets", today)

    assert service.update_amount(record.id, "120.5").amount == Decimal("120.5")
    with pytest.raises(InvalidAmountError):
        service.update_amount(record.id, "-1")
    with pytest.raises(RecordNotFoundError):
        service.update_amount("missing", 1)


def test_balance_and_totals(service, today, yesterday):
    service.add_record(RecordKind.INCOME, 1000, "Tickets", today)
    service.add_record(RecordKind.EXPENSE, 300, "Stage", today)
    service.add_record(RecordKind.EXPENSE, 200, "Posters", yesterday)

    assert service.balance(yesterday, today) == Decimal("500")
    totals = service.totals(today, today)
    assert (totals.income, totals.expense, totals.balance) == (Decimal("1000"), Decimal("300"), Decimal("700"))


def test_save_and_load_through_the_data_file(service, today):
    service.add_record(RecordKind.INCOME, 1000, "Tickets", today)
    service.add_record(RecordKind.EXPENSE, 300, "Stage, lights", today)

    assert service.save() == 2
    assert service.data_file.exists()

    fresh = FinanceService(data_file=service.data_file)
    assert fresh.hydrate() == 2
    assert [r.description for r in fresh.store] == ["Tickets", "Stage, lights"]


def test_empty_ledger_is_not_saved(service):
    assert service.save() == 0
    assert not service.data_file.exists()


def test_failed_load_keeps_current_records(service, today, tmp_path):
    record = service.add_record(RecordKind.INCOME, 10, "Kept", today)

    with pytest.raises(RecordFileNotFoundError):
        service.load(tmp_path / "missing.csv")
    assert service.store.snapshot() == [record]

    broken = tmp_path / "broken.csv"
    broken.write_text(
        "kind,amount,description,date,category\n"
        "INCOME,5,Fine,2024-01-01,INCOME_OTHER\n"
        "INCOME,zero,Bad,2024-01-01,INCOME_OTHER\n",
        encoding="utf-8",
    )
    with pytest.raises(MalformedRecordLineError):
        service.load(broken)
    assert service.store.snapshot() == [record]


def test_load_replaces_records(service, today, tmp_path):
    service.add_record(RecordKind.INCOME, 10, "Old", today)
    other = tmp_path / "other.csv"
    other.write_text(
        "kind,amount,description,date,category\nEXPENSE,7,New,2024-03-01,EXPENSE_FOOD\n",
        encoding="utf-8",
    )

    result = service.load(other)

    assert result.skipped == 0
    assert [r.description for r in service.store] == ["New"]


def test_lenient_codec_reports_skipped_lines(tmp_path):
    path = tmp_path / "ledger.csv"
    path.write_text(
        "kind,amount,description,date,category\n"
        "EXPENSE,7,Food,2024-03-01,EXPENSE_FOOD\n"
        "EXPENSE,7,Food,2024-03-01\n",
        encoding="utf-8",
    )
    service = FinanceService(codec=RecordCodec(strict=False), data_file=path)

    result = service.load()

    assert (len(result.records), result.skipped) == (1, 1)


def test_hydrate_without_file_starts_empty(service):
    assert service.hydrate() == 0
    assert len(service.store) == 0


def test_save_needs_a_target():
    with pytest.raises(ValidationError):
        FinanceService().save()


def test_get_unknown_record(service):
    with pytest.raises(RecordNotFoundError):
        service.get("nope")


def test_records_with_fixed_dates(service):
    record = service.add_record(RecordKind.INCOME, 1, "Archive", date(2020, 5, 17))

    assert record.date == date(2020, 5, 17)


def test_field_errors_come_before_category_pairing(service, today):
    with pytest.raises(InvalidAmountError):
        service.add_record(RecordKind.INCOME, 0, "x", today, Category.EXPENSE_RENT)
    with pytest.raises(InvalidDateError):
        service.add_record(RecordKind.INCOME, 5, "x", today + timedelta(days=1), Category.EXPENSE_RENT)
    with pytest.raises(InvalidCategoryError):
        service.add_record(RecordKind.INCOME, 5, "x", today, Category.EXPENSE_RENT)


def test_import_persists_to_the_data_file(service, today, tmp_path):
    source = tmp_path / "source.csv"
    source.write_text(
        "kind,amount,description,date,category\nEXPENSE,7,New,2024-03-01,EXPENSE_FOOD\n",
        encoding="utf-8",
    )

    service.import_file(source)

    fresh = FinanceService(data_file=service.data_file)
    assert fresh.hydrate() == 1


def test_empty_import_clears_the_data_file(service, today, tmp_path):
    service.add_record(RecordKind.INCOME, 10, "Old", today)
    service.save()
    empty = tmp_path / "empty.csv"
    empty.write_text("kind,amount,description,date,category\n", encoding="utf-8")

    result = service.import_file(empty)

    assert result.records == []
    assert len(service.store) == 0
    assert FinanceService(data_file=service.data_file).hydrate() == 0
