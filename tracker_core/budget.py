"""Monthly budget persistence and evaluation."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Union

from .exceptions import PersistenceError
from .models import BudgetStatus
from .storage import JSONStorage
from .validators import parse_budget

logger = logging.getLogger(__name__)

DEFAULT_BUDGET = Decimal("500.0")
BUDGET_KEY = "monthlyBudget"

Number = Union[Decimal, int, float, str]


def evaluate_budget(total: Decimal, budget: Decimal) -> BudgetStatus:
    """Compare total spend against ``budget``.

    ``progress`` is clamped to [0.0, 1.0]; ``spent`` keeps the raw figure.
    A non-positive budget is a configuration error and always reads as over
    budget with full progress.
    """
    total = Decimal(total)
    budget = Decimal(budget)
    if budget <= 0:
        return BudgetStatus(spent=total, budget=budget, progress=1.0, over_budget=True)
    ratio = float(total / budget)
    progress = min(max(ratio, 0.0), 1.0)
    return BudgetStatus(spent=total, budget=budget, progress=progress, over_budget=total > budget)


class BudgetSettings:
    """Durable monthly budget stored in the settings document."""

    def __init__(self, storage: JSONStorage, resource: str = "settings.json") -> None:
        self._storage = storage
        self._resource = resource

    def get(self) -> Decimal:
        try:
            document = self._storage.load_document(self._resource)
        except PersistenceError as exc:
            logger.warning("Using default budget, settings unreadable: %s", exc)
            return DEFAULT_BUDGET
        raw = document.get(BUDGET_KEY)
        if raw is None:
            return DEFAULT_BUDGET
        try:
            value = Decimal(str(raw))
        except InvalidOperation:
            logger.warning("Ignoring unparseable %s value %r", BUDGET_KEY, raw)
            return DEFAULT_BUDGET
        if not value.is_finite():
            logger.warning("Ignoring non-finite %s value %r", BUDGET_KEY, raw)
            return DEFAULT_BUDGET
        return value

    def set(self, value: Number) -> Decimal:
        budget = parse_budget(value)
        document = self._storage.load_document(self._resource)
        document[BUDGET_KEY] = str(budget)
        self._storage.save_document(self._resource, document)
        logger.info("Monthly budget set to %s", budget)
        return budget
