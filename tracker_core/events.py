"""Notifications from the record store boundary to presentation layers."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, NamedTuple

logger = logging.getLogger(__name__)

__all__ = ["BUDGET_CHANGED", "EXPENSE_ADDED", "EXPENSE_DELETED", "Event", "EventBus"]

EXPENSE_ADDED = "expense_added"
EXPENSE_DELETED = "expense_deleted"
BUDGET_CHANGED = "budget_changed"


class Event(NamedTuple):
    name: str
    ts: str
    payload: Dict[str, Any]


Handler = Callable[[Event], None]


class EventBus:
    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: Dict[str, Any]) -> Event:
        event = Event(
            name=name,
            ts=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            payload=payload,
        )
        for handler in list(self._subscribers.get(name, [])):
            try:
                handler(event)
            except Exception:
                # Listeners run after the change is stored.
                logger.exception("Handler %r failed for %s", handler, name)
        return event
