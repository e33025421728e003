"""Framework-agnostic business services for the expense tracker."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Protocol
from uuid import uuid4

from .budget import BudgetSettings, Number, evaluate_budget
from .events import BUDGET_CHANGED, EXPENSE_ADDED, EXPENSE_DELETED, EventBus
from .exceptions import RecordNotFoundError
from .export import EXPORT_FILENAME, FileExportSink, format_csv
from .models import BudgetStatus, Category, Expense, SortMode
from .query import list_view, sort_expenses, total_spent
from .storage import JSONExpenseStore, JSONStorage
from .validators import (
    NAME_MAX_LENGTH,
    parse_amount,
    parse_category,
    parse_category_filter,
    parse_sort_mode,
    validate_date,
    validate_optional_str,
)

logger = logging.getLogger(__name__)


class ExpenseStore(Protocol):
    def insert(self, expense: Expense) -> None: ...

    def delete(self, expense_id: str) -> Expense: ...

    def fetch_all(self) -> List[Expense]: ...


class ExpenseService:
    """Manages expense records and mediates persistence."""

    def __init__(self, store: ExpenseStore, events: Optional[EventBus] = None) -> None:
        self._store = store
        self._events = events or EventBus()

    @property
    def events(self) -> EventBus:
        return self._events

    # Public API -----------------------------------------------------------
    def add(self, payload: Dict[str, object]) -> Expense:
        expense = Expense(**self._validate_payload(payload))
        self._store.insert(expense)
        logger.info("Added expense %s (%s %s)", expense.id, expense.category.value, expense.amount)
        self._events.publish(EXPENSE_ADDED, {"id": expense.id, "amount": str(expense.amount)})
        return expense

    def delete(self, expense_id: str) -> Expense:
        removed = self._store.delete(expense_id)
        logger.info("Deleted expense %s", expense_id)
        self._events.publish(EXPENSE_DELETED, {"id": expense_id, "amount": str(removed.amount)})
        return removed

    def get(self, expense_id: str) -> Expense:
        """Return an expense or raise if it does not exist."""
        for expense in self._store.fetch_all():
            if expense.id == expense_id:
                return expense
        raise RecordNotFoundError(f"Expense {expense_id} not found")

    def list(
        self,
        category: Optional[Category] = None,
        sort: SortMode = SortMode.NEWEST_FIRST,
    ) -> List[Expense]:
        return list_view(self._store.fetch_all(), category, sort)

    def all(self) -> List[Expense]:
        """Every stored record in store order."""
        return self._store.fetch_all()

    def total(self) -> Decimal:
        """Sum of every stored amount, folded from a fresh scan on each call."""
        return total_spent(self._store.fetch_all())

    # Internal helpers -----------------------------------------------------
    def _validate_payload(self, payload: Dict[str, object]) -> Dict[str, object]:
        return {
            "id": str(uuid4()),
            "amount": parse_amount(payload.get("amount"), "amount"),
            "category": parse_category(payload.get("category")),
            "name": validate_optional_str(payload.get("name"), "name", NAME_MAX_LENGTH),
            "date": _whole_seconds(validate_date(payload.get("date"), "date")),
        }


def _whole_seconds(value: Optional[datetime]) -> datetime:
    # Stored timestamps have second precision.
    return (value or datetime.now(timezone.utc)).replace(microsecond=0)


class TrackerService:
    """The operations offered to every presentation layer."""

    def __init__(
        self,
        expenses: ExpenseService,
        budget: BudgetSettings,
        sink: FileExportSink,
    ) -> None:
        self._expenses = expenses
        self._budget = budget
        self._sink = sink

    @property
    def expenses(self) -> ExpenseService:
        return self._expenses

    @property
    def events(self) -> EventBus:
        return self._expenses.events

    def list_view(self, category_filter: object = None, sort: object = None) -> List[Expense]:
        """Filtered and ordered records; filter and sort accept enum members or labels."""
        return self._expenses.list(parse_category_filter(category_filter), parse_sort_mode(sort))

    def total_spent(self) -> Decimal:
        return self._expenses.total()

    def budget_status(self) -> BudgetStatus:
        # Always measured against every record, whatever the active filter.
        return evaluate_budget(self._expenses.total(), self._budget.get())

    def get_budget(self) -> Decimal:
        return self._budget.get()

    def set_budget(self, value: Number) -> Decimal:
        budget = self._budget.set(value)
        self.events.publish(BUDGET_CHANGED, {"budget": str(budget)})
        return budget

    def add_expense(
        self,
        name: Optional[str],
        amount: object,
        category: object = None,
        date: object = None,
    ) -> Expense:
        return self._expenses.add(
            {"name": name, "amount": amount, "category": category, "date": date}
        )

    def delete_expense(self, expense_id: str) -> Expense:
        return self._expenses.delete(expense_id)

    def csv_text(self) -> str:
        return format_csv(sort_expenses(self._expenses.all(), SortMode.NEWEST_FIRST))

    def export_csv(self, filename: Optional[str] = None) -> Path:
        return self._sink.write(filename or EXPORT_FILENAME, self.csv_text())


def create_tracker(data_dir: Path, export_dir: Optional[Path] = None) -> TrackerService:
    """Wire the JSON-backed services rooted at ``data_dir``."""
    storage = JSONStorage(Path(data_dir))
    expenses = ExpenseService(JSONExpenseStore(storage))
    sink = FileExportSink(Path(export_dir) if export_dir else storage.base_path / "exports")
    return TrackerService(expenses, BudgetSettings(storage), sink)
