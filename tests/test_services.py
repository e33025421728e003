"""Tests for the tracker services surface."""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from tracker_core.events import BUDGET_CHANGED, EXPENSE_ADDED, EXPENSE_DELETED
from tracker_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from tracker_core.models import ALL_CATEGORIES, Category, SortMode
from tracker_core.services import create_tracker
from tracker_core.storage import JSONStorage


def _stored(tmp_path):
    path = tmp_path / "data" / "expenses.json"
    return path.read_text(encoding="utf-8") if path.exists() else None


class TestAddExpense:
    def test_defaults(self, tracker):
        before = datetime.now(timezone.utc).replace(microsecond=0)
        expense = tracker.add_expense(None, "12.50")
        assert expense.category is Category.FOOD
        assert expense.name is None
        assert expense.amount == Decimal("12.50")
        assert expense.date >= before

    def test_explicit_fields(self, tracker):
        expense = tracker.add_expense("Taxi", "18", "Transport", "2024-03-01")
        assert expense.category is Category.TRANSPORT
        assert expense.date == datetime(2024, 3, 1).astimezone()
        assert tracker.list_view() == [expense]

    def test_identities_are_unique(self, tracker):
        ids = {tracker.add_expense("x", "1").id for _ in range(5)}
        assert len(ids) == 5

    @pytest.mark.parametrize("amount", ["not-a-number", "", None, "-1", "NaN", "inf"])
    def test_rejects_bad_amount_without_touching_store(self, tracker, tmp_path, amount):
        tracker.add_expense("Coffee", "3.5", "Food")
        before = _stored(tmp_path)
        with pytest.raises(ValidationError):
            tracker.add_expense("Coffee", amount, "Food")
        assert _stored(tmp_path) == before
        assert len(tracker.list_view()) == 1

    def test_zero_amount_is_allowed(self, tracker):
        assert tracker.add_expense("Free sample", "0").amount == 0

    @pytest.mark.parametrize("category", ["food", "Groceries", "All"])
    def test_rejects_unknown_category(self, tracker, category):
        with pytest.raises(ValidationError):
            tracker.add_expense("x", "1", category)

    def test_rejects_bad_date(self, tracker):
        with pytest.raises(ValidationError):
            tracker.add_expense("x", "1", "Food", "yesterday")


class TestListView:
    def test_filter_and_sort_labels(self, tracker):
        tracker.add_expense("Lunch", "12.50", "Food", "2024-01-03")
        tracker.add_expense("Bus", "7.25", "Transport", "2024-01-01")
        tracker.add_expense("Coffee", "3.10", "Food", "2024-01-02")

        food = tracker.list_view("Food", "Lowest Amount")
        assert [e.name for e in food] == ["Coffee", "Lunch"]

        everything = tracker.list_view(ALL_CATEGORIES, SortMode.OLDEST_FIRST)
        assert [e.name for e in everything] == ["Bus", "Coffee", "Lunch"]

    def test_empty_store(self, tracker):
        assert tracker.list_view() == []

    @pytest.mark.parametrize("criteria", [("Snacks", None), (None, "Alphabetical"), ("food", None)])
    def test_unknown_criteria_are_rejected(self, tracker, criteria):
        with pytest.raises(ValidationError):
            tracker.list_view(*criteria)


class TestTotalsAndBudget:
    def test_total_spent(self, tracker):
        assert tracker.total_spent() == 0
        tracker.add_expense("a", "12.50")
        assert tracker.total_spent() == Decimal("12.50")
        tracker.add_expense("b", "7.25", "Transport")
        assert tracker.total_spent() == Decimal("19.75")

    def test_budget_uses_every_record(self, tracker):
        tracker.add_expense("a", "200", "Food")
        tracker.add_expense("b", "50", "Transport")
        tracker.list_view("Transport")
        status = tracker.budget_status()
        assert status.spent == Decimal("250")
        assert status.progress == 0.5
        assert status.over_budget is False

    def test_set_budget(self, tracker):
        tracker.add_expense("a", "600")
        assert tracker.budget_status().over_budget is True
        tracker.set_budget("1200")
        status = tracker.budget_status()
        assert status.over_budget is False
        assert status.progress == 0.5
        assert tracker.get_budget() == Decimal("1200")


class TestDeleteExpense:
    def test_delete_removes_record_and_amount(self, tracker):
        keep = tracker.add_expense("keep", "10")
        drop = tracker.add_expense("drop", "2.75")
        before = tracker.total_spent()

        tracker.delete_expense(drop.id)

        assert drop.id not in {e.id for e in tracker.list_view()}
        assert tracker.total_spent() == before - Decimal("2.75")
        assert tracker.list_view() == [keep]

    def test_delete_unknown(self, tracker):
        with pytest.raises(RecordNotFoundError):
            tracker.delete_expense("missing")

    def test_get_after_delete(self, tracker):
        expense = tracker.add_expense("x", "1")
        assert tracker.expenses.get(expense.id) == expense
        tracker.delete_expense(expense.id)
        with pytest.raises(RecordNotFoundError):
            tracker.expenses.get(expense.id)


class TestTotalsStayFresh:
    def test_failed_write_keeps_last_known_total(self, tracker, monkeypatch):
        tracker.add_expense("a", "5")
        assert tracker.total_spent() == Decimal("5")

        def broken_save(self, resource, records):
            raise PersistenceError("device unavailable")

        monkeypatch.setattr(JSONStorage, "save", broken_save)
        with pytest.raises(PersistenceError):
            tracker.add_expense("b", "7")
        monkeypatch.undo()

        assert tracker.total_spent() == Decimal("5")
        assert len(tracker.list_view()) == 1

    def test_hand_edited_store_is_reflected(self, tracker, tmp_path):
        tracker.add_expense("a", "5")
        assert tracker.total_spent() == Decimal("5")

        path = tmp_path / "data" / "expenses.json"
        records = json.loads(path.read_text(encoding="utf-8"))
        records.append({"id": "external", "amount": "10", "category": "Other"})
        path.write_text(json.dumps(records), encoding="utf-8")

        assert tracker.total_spent() == Decimal("15")
        assert tracker.budget_status().spent == Decimal("15")

    def test_second_session_writes_are_reflected(self, tracker, tmp_path):
        tracker.add_expense("a", "5")
        assert tracker.total_spent() == Decimal("5")

        other = create_tracker(tmp_path / "data", tmp_path / "exports")
        added = other.add_expense("b", "10")
        assert tracker.total_spent() == Decimal("15")

        other.delete_expense(added.id)
        assert tracker.total_spent() == Decimal("5")


class TestEvents:
    def test_mutations_publish_events(self, tracker):
        received = []
        for name in (EXPENSE_ADDED, EXPENSE_DELETED, BUDGET_CHANGED):
            tracker.events.subscribe(name, received.append)

        expense = tracker.add_expense("a", "1")
        tracker.delete_expense(expense.id)
        tracker.set_budget("100")

        assert [event.name for event in received] == [EXPENSE_ADDED, EXPENSE_DELETED, BUDGET_CHANGED]
        assert received[0].payload["id"] == expense.id

    def test_rejected_input_publishes_nothing(self, tracker):
        received = []
        tracker.events.subscribe(EXPENSE_ADDED, received.append)
        with pytest.raises(ValidationError):
            tracker.add_expense("a", "oops")
        assert received == []

    def test_unsubscribe(self, tracker):
        received = []
        tracker.events.subscribe(EXPENSE_ADDED, received.append)
        tracker.events.unsubscribe(EXPENSE_ADDED, received.append)
        tracker.add_expense("a", "1")
        assert received == []

    def test_failing_listener_does_not_undo_the_add(self, tracker):
        def explode(event):
            raise RuntimeError("listener crashed")

        received = []
        tracker.events.subscribe(EXPENSE_ADDED, explode)
        tracker.events.subscribe(EXPENSE_ADDED, received.append)

        expense = tracker.add_expense("a", "4")

        assert tracker.list_view() == [expense]
        assert [event.payload["id"] for event in received] == [expense.id]


class TestExport:
    def test_exports_every_record_regardless_of_filter(self, tracker, tmp_path):
        tracker.add_expense("Coffee", "3.5", "Food", "2024-01-05")
        tracker.add_expense("Bus", "2", "Transport", "2024-01-06")
        tracker.list_view("Food")

        path = tracker.export_csv()

        assert path == tmp_path / "exports" / "Expenses.csv"
        assert path.read_text(encoding="utf-8") == (
            "Name,Amount,Category,Date\n"
            "Bus,2.0,Transport,2024-01-06\n"
            "Coffee,3.5,Food,2024-01-05\n"
        )

    def test_rows_are_newest_first(self, tracker):
        tracker.add_expense("Middle", "2", "Food", "2024-02-10")
        tracker.add_expense("Oldest", "1", "Food", "2024-01-01")
        tracker.add_expense("Newest", "3", "Food", "2024-03-20")

        rows = tracker.export_csv().read_text(encoding="utf-8").splitlines()[1:]

        assert [row.split(",")[0] for row in rows] == ["Newest", "Middle", "Oldest"]
        assert rows[0] == "Newest,3.0,Food,2024-03-20"

    def test_custom_filename(self, tracker, tmp_path):
        path = tracker.export_csv("january.csv")
        assert path.name == "january.csv"
        assert path.read_text(encoding="utf-8") == "Name,Amount,Category,Date\n"
