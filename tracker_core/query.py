"""Filtering, ordering and aggregation over expense collections.

Every function here is pure: inputs are never mutated and no I/O happens.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional

from .models import Category, Expense, SortMode


def filter_expenses(records: Iterable[Expense], category: Optional[Category]) -> List[Expense]:
    """Keep records of ``category``; ``None`` keeps everything."""
    if category is None:
        return list(records)
    return [expense for expense in records if expense.category is category]


def sort_expenses(
    records: Iterable[Expense],
    mode: SortMode,
    now: Optional[datetime] = None,
) -> List[Expense]:
    """Order records by ``mode``.

    Records without a date sort as if dated ``now`` (evaluation time), which
    usually lands them near the top of Newest First. Order among equal keys is
    not guaranteed.
    """
    reference = now or datetime.now(timezone.utc)

    def by_date(expense: Expense) -> datetime:
        return expense.date if expense.date is not None else reference

    def by_amount(expense: Expense) -> Decimal:
        return expense.amount

    if mode is SortMode.NEWEST_FIRST:
        return sorted(records, key=by_date, reverse=True)
    if mode is SortMode.OLDEST_FIRST:
        return sorted(records, key=by_date)
    if mode is SortMode.HIGHEST_AMOUNT:
        return sorted(records, key=by_amount, reverse=True)
    if mode is SortMode.LOWEST_AMOUNT:
        return sorted(records, key=by_amount)
    raise ValueError(f"Unsupported sort mode: {mode!r}")


def list_view(
    records: Iterable[Expense],
    category: Optional[Category] = None,
    mode: SortMode = SortMode.NEWEST_FIRST,
    now: Optional[datetime] = None,
) -> List[Expense]:
    return sort_expenses(filter_expenses(records, category), mode, now=now)


def total_spent(records: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in records), start=Decimal("0"))
