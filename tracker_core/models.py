"""Data models for the expense tracker domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

__all__ = [
    "ALL_CATEGORIES",
    "BudgetStatus",
    "Category",
    "Expense",
    "SortMode",
    "isoformat_utc",
    "parse_datetime",
]

# View-only filter label meaning "no category filter".
ALL_CATEGORIES = "All"


def isoformat_utc(dt: datetime) -> str:
    """Return an ISO 8601 string with trailing Z for UTC-aware datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec="seconds")
    return iso.replace("+00:00", "Z")


def parse_datetime(value: str) -> datetime:
    """Parse ISO 8601 datetime strings with optional trailing Z into UTC-aware datetime."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        # Naive values (including bare dates) are taken as UTC.
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class Category(str, Enum):
    """Closed set of expense categories; the first member is the creation default."""

    FOOD = "Food"
    TRANSPORT = "Transport"
    ENTERTAINMENT = "Entertainment"
    OTHER = "Other"

    @classmethod
    def default(cls) -> "Category":
        return next(iter(cls))

    @classmethod
    def labels(cls) -> List[str]:
        return [member.value for member in cls]


class SortMode(str, Enum):
    NEWEST_FIRST = "Newest First"
    OLDEST_FIRST = "Oldest First"
    HIGHEST_AMOUNT = "Highest Amount"
    LOWEST_AMOUNT = "Lowest Amount"

    @classmethod
    def labels(cls) -> List[str]:
        return [member.value for member in cls]


@dataclass(frozen=True)
class Expense:
    id: str
    amount: Decimal
    category: Category = Category.FOOD
    name: Optional[str] = None
    date: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.name or "Unknown Expense"

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        return {
            "id": self.id,
            "name": self.name,
            "amount": str(self.amount),
            "category": self.category.value,
            "date": isoformat_utc(self.date) if self.date is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        """Hydrate an Expense from JSON-native data.

        Records written by older versions may lack ``category`` or ``date``;
        a missing category reads back as ``Other`` and a missing date stays
        ``None``.
        """
        raw_category = data.get("category")
        raw_date = data.get("date")
        return cls(
            id=data["id"],
            amount=Decimal(str(data["amount"])),
            category=Category(raw_category) if raw_category else Category.OTHER,
            name=data.get("name"),
            date=parse_datetime(raw_date) if raw_date else None,
        )


@dataclass(frozen=True)
class BudgetStatus:
    """Spend measured against the monthly budget."""

    spent: Decimal
    budget: Decimal
    progress: float
    over_budget: bool

    @property
    def remaining(self) -> Decimal:
        return self.budget - self.spent

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spent": f"{self.spent:.2f}",
            "budget": f"{self.budget:.2f}",
            "remaining": f"{self.remaining:.2f}",
            "progress": self.progress,
            "over_budget": self.over_budget,
        }
