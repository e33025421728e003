"""Validation helpers shared across expense tracker services."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from .exceptions import ValidationError
from .models import ALL_CATEGORIES, Category, SortMode

NAME_MAX_LENGTH = 100


def parse_amount(raw: object, field: str) -> Decimal:
    """Convert raw input to a finite, non-negative Decimal."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError(f"{field} is required")
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} must not be negative")
    return amount


def validate_optional_str(value: object, field: str, max_length: int) -> Optional[str]:
    """Return a trimmed string, or None for absent/blank input."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        return None
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def parse_category(value: object, field: str = "category") -> Category:
    """Resolve a category label; absent input falls back to the first category."""
    if value is None or value == "":
        return Category.default()
    if isinstance(value, Category):
        return value
    if isinstance(value, str):
        try:
            return Category(value)
        except ValueError:
            pass
    raise ValidationError(f"{field} must be one of: {', '.join(Category.labels())}")


def parse_category_filter(value: object) -> Optional[Category]:
    """Resolve a filter label; ``None`` means every category."""
    if value is None or value == ALL_CATEGORIES:
        return None
    if value == "":
        raise ValidationError("category filter cannot be empty")
    options = [ALL_CATEGORIES, *Category.labels()]
    if isinstance(value, Category):
        return value
    if isinstance(value, str):
        try:
            return Category(value)
        except ValueError:
            pass
    raise ValidationError(f"category filter must be one of: {', '.join(options)}")


def parse_sort_mode(value: object) -> SortMode:
    if value is None:
        return SortMode.NEWEST_FIRST
    if isinstance(value, SortMode):
        return value
    if isinstance(value, str):
        try:
            return SortMode(value)
        except ValueError:
            pass
    raise ValidationError(f"sort must be one of: {', '.join(SortMode.labels())}")


def validate_date(value: object, field: str) -> Optional[datetime]:
    """Accept a datetime, a date, or an ISO 8601 string; None passes through.

    Values without an offset, including bare dates, are read as local time.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError(f"{field} must be an ISO 8601 date or datetime") from exc
    else:
        raise ValidationError(f"{field} must be a datetime or ISO 8601 string")
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(timezone.utc)


def parse_budget(raw: object) -> Decimal:
    """Validate a monthly budget value; zero is allowed, negatives are not."""
    return parse_amount(raw, "budget")
