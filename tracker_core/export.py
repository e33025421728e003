"""CSV export of expense records."""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Optional

from .exceptions import ExportError
from .models import Expense
from .storage import atomic_write_text

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "Expenses.csv"
CSV_HEADER = "Name,Amount,Category,Date"


def format_amount(amount: Decimal) -> str:
    """Render an amount as a plain decimal with at least one fraction digit."""
    text = format(amount.normalize(), "f")
    if "." not in text:
        text += ".0"
    return text


def format_csv(
    records: Iterable[Expense],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> str:
    """Serialise records, in the given order, to comma-delimited text.

    Fields are written verbatim: a comma inside a name is not quoted.
    Records without a date are stamped with ``now``. Dates are written as
    calendar days in ``tz``, the local time zone when omitted.
    """
    reference = now or datetime.now(timezone.utc)
    lines = [CSV_HEADER]
    for expense in records:
        stamp = expense.date if expense.date is not None else reference
        lines.append(
            ",".join(
                (
                    expense.name or "Unknown",
                    format_amount(expense.amount),
                    expense.category.value if expense.category else "Other",
                    stamp.astimezone(tz).strftime("%Y-%m-%d"),
                )
            )
        )
    return "\n".join(lines) + "\n"


class FileExportSink:
    """Writes export documents into a directory, replacing files atomically."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def write(self, filename: str, text: str) -> Path:
        if not filename or Path(filename).name != filename:
            raise ExportError(f"Invalid export file name: {filename!r}")
        path = self._directory / filename
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            atomic_write_text(path, text)
        except OSError as exc:
            logger.error("Export to %s failed: %s", path, exc)
            raise ExportError(f"Unable to write export to {path}") from exc
        logger.info("Exported expenses to %s", path)
        return path
