"""Tests for JSON persistence and the expense record store."""

import json

import pytest

from conftest import make_expense, utc
from tracker_core.exceptions import PersistenceError, RecordNotFoundError
from tracker_core.models import Category
from tracker_core.storage import JSONExpenseStore, JSONStorage


@pytest.fixture
def store(tmp_path):
    return JSONExpenseStore(JSONStorage(tmp_path))


def test_fetch_all_on_missing_file_is_empty(store):
    assert store.fetch_all() == []


def test_insert_then_fetch(store):
    expense = make_expense("a", "3.5", Category.FOOD, "Coffee", utc(2024, 1, 5))
    store.insert(expense)
    assert store.fetch_all() == [expense]


def test_delete_returns_removed_record(store):
    first = make_expense("a", "1", date=utc(2024, 1, 1))
    second = make_expense("b", "2", date=utc(2024, 1, 2))
    store.insert(first)
    store.insert(second)

    assert store.delete("a") == first
    assert store.fetch_all() == [second]


def test_delete_unknown_id(store):
    with pytest.raises(RecordNotFoundError):
        store.delete("missing")


def test_legacy_record_without_optional_fields(tmp_path):
    (tmp_path / "expenses.json").write_text(
        json.dumps([{"id": "old", "amount": 4}]), encoding="utf-8"
    )
    [expense] = JSONExpenseStore(JSONStorage(tmp_path)).fetch_all()
    assert expense.category is Category.OTHER
    assert expense.date is None
    assert expense.name is None
    assert expense.display_name == "Unknown Expense"


def test_corrupted_json(tmp_path):
    (tmp_path / "expenses.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(PersistenceError):
        JSONExpenseStore(JSONStorage(tmp_path)).fetch_all()


def test_malformed_record(tmp_path):
    (tmp_path / "expenses.json").write_text(
        json.dumps([{"id": "x", "amount": "ten"}]), encoding="utf-8"
    )
    with pytest.raises(PersistenceError):
        JSONExpenseStore(JSONStorage(tmp_path)).fetch_all()


def test_document_round_trip(tmp_path):
    storage = JSONStorage(tmp_path)
    assert storage.load_document("settings.json") == {}
    storage.save_document("settings.json", {"monthlyBudget": "500"})
    assert storage.load_document("settings.json") == {"monthlyBudget": "500"}
    assert not (tmp_path / "settings.json.tmp").exists()


def test_list_payload_expected(tmp_path):
    (tmp_path / "expenses.json").write_text("{}", encoding="utf-8")
    with pytest.raises(PersistenceError):
        JSONStorage(tmp_path).load("expenses.json")
