"""Persistence utilities for the expense tracker core services."""

from __future__ import annotations

import json
import logging
from decimal import InvalidOperation
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .exceptions import PersistenceError, RecordNotFoundError
from .models import Expense

logger = logging.getLogger(__name__)


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` through a temporary sibling and an atomic rename.

    Either the new content is fully in place or the previous file is left
    untouched; the temporary file never survives a failure.
    """
    temp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        with temp_path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
            handle.flush()
        temp_path.replace(path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


class JSONStorage:
    """Simple file-based JSON storage with crash-safe writes."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to create data directory {self._base_path}") from exc

    def load(self, resource: str) -> List[Dict[str, Any]]:
        payload = self._read(resource, default=[])
        if not isinstance(payload, list):
            raise PersistenceError(f"Expected list payload in {self._base_path / resource}")
        return payload

    def save(self, resource: str, records: Iterable[Dict[str, Any]]) -> None:
        self._write(resource, list(records))

    def load_document(self, resource: str) -> Dict[str, Any]:
        payload = self._read(resource, default={})
        if not isinstance(payload, dict):
            raise PersistenceError(f"Expected object payload in {self._base_path / resource}")
        return payload

    def save_document(self, resource: str, document: Dict[str, Any]) -> None:
        self._write(resource, dict(document))

    @property
    def base_path(self) -> Path:
        return self._base_path

    def _read(self, resource: str, default: Any) -> Any:
        path = self._base_path / resource
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted JSON data in {path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

    def _write(self, resource: str, payload: Any) -> None:
        path = self._base_path / resource
        try:
            atomic_write_text(path, json.dumps(payload, indent=2))
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)
            raise PersistenceError(f"Unable to write to {path}") from exc


class JSONExpenseStore:
    """Record store keeping every expense in a single JSON document.

    Each call performs a full read of the document so that the store never
    serves stale data to the caller.
    """

    def __init__(self, storage: JSONStorage, resource: str = "expenses.json") -> None:
        self._storage = storage
        self._resource = resource

    def insert(self, expense: Expense) -> None:
        records = self._storage.load(self._resource)
        records.append(expense.to_dict())
        self._storage.save(self._resource, records)

    def delete(self, expense_id: str) -> Expense:
        records = self._storage.load(self._resource)
        for index, payload in enumerate(records):
            if payload.get("id") == expense_id:
                removed = records.pop(index)
                self._storage.save(self._resource, records)
                return self._hydrate(removed)
        raise RecordNotFoundError(f"Expense {expense_id} not found")

    def fetch_all(self) -> List[Expense]:
        return [self._hydrate(payload) for payload in self._storage.load(self._resource)]

    def _hydrate(self, payload: Dict[str, Any]) -> Expense:
        try:
            return Expense.from_dict(payload)
        except (KeyError, TypeError, ValueError, InvalidOperation) as exc:
            raise PersistenceError(f"Malformed expense record in {self._resource}") from exc
