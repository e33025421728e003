"""Shared fixtures for the expense tracker tests."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from tracker_core.models import Category, Expense
from tracker_core.services import create_tracker


def make_expense(
    expense_id: str,
    amount: str,
    category: Category = Category.FOOD,
    name: str = None,
    date: datetime = None,
) -> Expense:
    return Expense(id=expense_id, amount=Decimal(amount), category=category, name=name, date=date)


def utc(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


@pytest.fixture
def tracker(tmp_path):
    return create_tracker(tmp_path / "data", tmp_path / "exports")


@pytest.fixture
def sample_expenses():
    return [
        make_expense("a", "12.50", Category.FOOD, "Lunch", utc(2024, 1, 3)),
        make_expense("b", "7.25", Category.TRANSPORT, "Bus", utc(2024, 1, 1)),
        make_expense("c", "40.00", Category.ENTERTAINMENT, "Cinema", utc(2024, 1, 5)),
        make_expense("d", "3.10", Category.FOOD, "Coffee", utc(2024, 1, 2)),
        make_expense("e", "99.99", Category.OTHER, "Gift", utc(2024, 1, 4)),
    ]
