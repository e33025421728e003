"""Console interface for the expense tracker."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from tracker_core.exceptions import (
    ExportError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from tracker_core.models import ALL_CATEGORIES, BudgetStatus, Category, Expense, SortMode
from tracker_core.services import TrackerService, create_tracker

DEFAULT_DATA_DIR = "data"


def _format_expense(expense: Expense) -> str:
    date_text = expense.date.astimezone().strftime("%Y-%m-%d %H:%M") if expense.date else "-"
    return (
        f"[{expense.id}] {date_text} ${expense.amount:.2f}\n"
        f"  {expense.display_name} | Category: {expense.category.value}\n"
    )


def _format_budget(status: BudgetStatus) -> str:
    flag = "  OVER BUDGET" if status.over_budget else ""
    return (
        f"Monthly budget: ${status.budget:.2f}\n"
        f"Spent: ${status.spent:.2f} ({status.progress:.0%}){flag}\n"
    )


def handle_add(args: argparse.Namespace, tracker: TrackerService) -> None:
    expense = tracker.add_expense(args.name, args.amount, args.category, args.date)
    print("Expense added:\n" + _format_expense(expense))


def handle_list(args: argparse.Namespace, tracker: TrackerService) -> None:
    expenses = tracker.list_view(args.category, args.sort)
    if not expenses:
        print("No expenses found.")
        return
    print(f"Found {len(expenses)} expenses (total spent ${tracker.total_spent():.2f}):")
    for expense in expenses:
        print(_format_expense(expense))


def handle_delete(args: argparse.Namespace, tracker: TrackerService) -> None:
    tracker.delete_expense(args.id)
    print(f"Expense {args.id} deleted.")


def handle_total(args: argparse.Namespace, tracker: TrackerService) -> None:
    print(f"Total spent: ${tracker.total_spent():.2f}")


def handle_budget(args: argparse.Namespace, tracker: TrackerService) -> None:
    if args.set is not None:
        tracker.set_budget(args.set)
    print(_format_budget(tracker.budget_status()), end="")


def handle_export(args: argparse.Namespace, tracker: TrackerService) -> None:
    path = tracker.export_csv(args.filename)
    print(f"Exported expenses to {path}")


HANDLERS = {
    "add": handle_add,
    "list": handle_list,
    "delete": handle_delete,
    "total": handle_total,
    "budget": handle_budget,
    "export": handle_export,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expense Tracker CLI")
    parser.add_argument(
        "--data-dir",
        default=os.getenv("EXPENSE_TRACKER_DATA_DIR", DEFAULT_DATA_DIR),
        type=Path,
        help="Directory to store JSON data (default: ./data)",
    )
    parser.add_argument(
        "--export-dir",
        type=Path,
        help="Directory for exported files (default: <data-dir>/exports)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at INFO level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Add a new expense")
    add_parser.add_argument("amount")
    add_parser.add_argument("--name")
    add_parser.add_argument("--category", choices=Category.labels())
    add_parser.add_argument("--date", help="YYYY-MM-DD or full ISO 8601 datetime (default: now)")

    list_parser = subparsers.add_parser("list", help="List expenses")
    list_parser.add_argument(
        "--category", choices=[ALL_CATEGORIES, *Category.labels()], default=ALL_CATEGORIES
    )
    list_parser.add_argument(
        "--sort", choices=SortMode.labels(), default=SortMode.NEWEST_FIRST.value
    )

    delete_parser = subparsers.add_parser("delete", help="Delete an expense")
    delete_parser.add_argument("id")

    subparsers.add_parser("total", help="Show total spent")

    budget_parser = subparsers.add_parser("budget", help="Show or set the monthly budget")
    budget_parser.add_argument("--set", metavar="AMOUNT")

    export_parser = subparsers.add_parser("export", help="Export every expense as CSV")
    export_parser.add_argument("--filename")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        tracker = create_tracker(args.data_dir, args.export_dir)
        HANDLERS[args.command](args, tracker)
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except ExportError as exc:
        print(f"Export failed: {exc}", file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
