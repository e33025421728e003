"""Core business logic package for the expense tracker."""

from .budget import BudgetSettings, evaluate_budget
from .events import EventBus
from .exceptions import ExportError, PersistenceError, RecordNotFoundError, ValidationError
from .export import FileExportSink, format_csv
from .models import ALL_CATEGORIES, BudgetStatus, Category, Expense, SortMode
from .query import filter_expenses, list_view, sort_expenses, total_spent
from .services import ExpenseService, TrackerService, create_tracker
from .storage import JSONExpenseStore, JSONStorage

__all__ = [
    "ALL_CATEGORIES",
    "BudgetSettings",
    "BudgetStatus",
    "Category",
    "EventBus",
    "Expense",
    "ExpenseService",
    "ExportError",
    "FileExportSink",
    "JSONExpenseStore",
    "JSONStorage",
    "PersistenceError",
    "RecordNotFoundError",
    "SortMode",
    "TrackerService",
    "ValidationError",
    "create_tracker",
    "evaluate_budget",
    "filter_expenses",
    "format_csv",
    "list_view",
    "sort_expenses",
    "total_spent",
]
