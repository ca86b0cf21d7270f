"""Console interface for the finance ledger."""

from __future__ import annotations

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from showbiz.config import Settings
from showbiz.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from showbiz.logging_config import configure_logging
from showbiz.models import (
    DATE_FORMATS,
    FinanceRecord,
    RecordKind,
    categories_for,
    format_date,
    parse_category,
)
from showbiz.services import FinanceService
from showbiz.validators import parse_date

logger = logging.getLogger("showbiz.cli")


def _parse_kind(value: str) -> RecordKind:
    try:
        return RecordKind[value.strip().upper()]
    except KeyError as exc:
        raise argparse.ArgumentTypeError("Invalid record type. Use INCOME or EXPENSE.") from exc


def _parse_amount(value: str) -> str:
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc
    if not amount.is_finite() or amount <= 0:
        raise argparse.ArgumentTypeError("Amount must be greater than 0")
    return value


def _load_service(settings: Settings) -> FinanceService:
    service = FinanceService(codec=settings.codec(), data_file=settings.data_file)
    service.hydrate()
    return service


def _format_record(record: FinanceRecord, date_pattern: str) -> str:
    return (
        f"[{record.id}] {format_date(record.date, date_pattern)} {record.kind.value} {record.amount}\n"
        f"  Category: {record.category.value}\n"
        f"  Description: {record.description}\n"
    )


def handle_finance(args: argparse.Namespace, service: FinanceService, settings: Settings) -> None:
    date_pattern = DATE_FORMATS[settings.date_format]

    if args.command == "add":
        category = None
        if args.category is not None:
            parsed = parse_category(args.category)
            if not parsed.ok:
                logger.warning("%s; falling back to the default category", parsed.error)
                print(f"Unknown category '{args.category}', using the default for {args.kind.value}.")
            category = parsed.or_default(args.kind)
        record = service.add_record(
            args.kind,
            args.amount,
            args.description,
            parse_date(args.date, "date", date_pattern),
            category,
        )
        service.save()
        print("Record added:\n" + _format_record(record, date_pattern))
    elif args.command == "list":
        filters = {
            "kind": args.kind,
            "category": args.category,
            "start": parse_date(args.start, "start", date_pattern) if args.start else None,
            "end": parse_date(args.end, "end", date_pattern) if args.end else None,
        }
        records = service.list(**{k: v for k, v in filters.items() if v is not None})
        if not records:
            print("No records found.")
            return
        print(f"Found {len(records)} records:")
        for record in records:
            print(_format_record(record, date_pattern))
    elif args.command == "balance":
        summary = service.totals(
            parse_date(args.start, "start", date_pattern),
            parse_date(args.end, "end", date_pattern),
        )
        print(f"Income: {summary.income}")
        print(f"Expense: {summary.expense}")
        print(f"Net balance: {summary.balance}")
    elif args.command == "export":
        written = service.save(args.path)
        if written:
            print(f"Saved {written} records to {args.path}.")
        else:
            print("No records to save.")
    elif args.command == "import":
        result = service.import_file(args.path)
        message = f"Loaded {len(result.records)} records from {args.path}."
        if result.skipped:
            message += f" Skipped {result.skipped} malformed lines."
        print(message)
    elif args.command == "categories":
        kinds = [args.kind] if args.kind else list(RecordKind)
        for kind in kinds:
            print(f"{kind.value}:")
            for category in categories_for(kind):
                print(f"  {category.value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show business finance ledger")
    parser.add_argument(
        "--data-file",
        type=Path,
        help="CSV file holding the ledger (default: $SHOWBIZ_DATA_FILE or data/finance_records.csv)",
    )
    parser.add_argument(
        "--date-format",
        choices=sorted(DATE_FORMATS),
        help="Date pattern for input, output and the ledger file (default: iso)",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Skip malformed lines when loading instead of aborting",
    )
    parser.add_argument("--log-level", help="Logging level (default: INFO)")

    subparsers = parser.add_subparsers(dest="entity", required=True)

    finance_parser = subparsers.add_parser("finance", help="Manage finance records")
    finance_sub = finance_parser.add_subparsers(dest="command", required=True)

    finance_add = finance_sub.add_parser("add", help="Add a new income or expense")
    finance_add.add_argument("kind", type=_parse_kind)
    finance_add.add_argument("amount", type=_parse_amount)
    finance_add.add_argument("description")
    finance_add.add_argument("date")
    finance_add.add_argument("--category")

    finance_list = finance_sub.add_parser("list", help="List finance records")
    finance_list.add_argument("--kind", type=_parse_kind)
    finance_list.add_argument("--category")
    finance_list.add_argument("--start")
    finance_list.add_argument("--end")

    finance_balance = finance_sub.add_parser("balance", help="Compute the balance for a period")
    finance_balance.add_argument("start")
    finance_balance.add_argument("end")

    finance_export = finance_sub.add_parser("export", help="Save the ledger to another file")
    finance_export.add_argument("path", type=Path)

    finance_import = finance_sub.add_parser("import", help="Replace the ledger with a file's records")
    finance_import.add_argument("path", type=Path)

    finance_categories = finance_sub.add_parser("categories", help="List categories")
    finance_categories.add_argument("--kind", type=_parse_kind)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env().with_overrides(
            data_file=args.data_file,
            date_format=args.date_format,
            strict_load=False if args.lenient else None,
            log_level=args.log_level,
        )
        configure_logging(settings.log_level)
        service = _load_service(settings)
        if args.entity == "finance":
            handle_finance(args, service, settings)
        else:  # pragma: no cover - argparse should prevent this
            parser.error(f"Unknown entity: {args.entity}")
            return 2
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
