"""Flask REST API exposing the expense tracker services."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from tracker_core.events import EXPENSE_ADDED, EXPENSE_DELETED, Event
from tracker_core.exceptions import (
    ExportError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from tracker_core.export import EXPORT_FILENAME
from tracker_core.services import create_tracker


def create_app(data_dir: Optional[Path] = None, export_dir: Optional[Path] = None) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("EXPENSE_TRACKER_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("EXPENSE_TRACKER_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    root = Path(data_dir or os.getenv("EXPENSE_TRACKER_DATA_DIR", "data"))
    tracker = create_tracker(root, export_dir)
    app.extensions["expense_tracker"] = tracker

    def _log_mutation(event: Event) -> None:
        app.logger.info("%s: %s", event.name, event.payload.get("id"))

    tracker.events.subscribe(EXPENSE_ADDED, _log_mutation)
    tracker.events.subscribe(EXPENSE_DELETED, _log_mutation)

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(ExportError)
    def handle_export_error(exc: ExportError):
        return _handle_error(exc, 500, "Export error")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    @app.get("/expenses")
    def list_expenses():
        expenses = tracker.list_view(
            request.args.get("category") or None,
            request.args.get("sort") or None,
        )
        return _success({
            "items": [expense.to_dict() for expense in expenses],
            "total": f"{tracker.total_spent():.2f}",
        })

    @app.post("/expenses")
    def create_expense():
        payload = _json_body()
        expense = tracker.add_expense(
            payload.get("name"),
            payload.get("amount"),
            payload.get("category"),
            payload.get("date"),
        )
        return _success(expense.to_dict(), 201)

    @app.get("/expenses/<expense_id>")
    def get_expense(expense_id: str):
        expense = tracker.expenses.get(expense_id)
        return _success(expense.to_dict())

    @app.delete("/expenses/<expense_id>")
    def delete_expense(expense_id: str):
        tracker.delete_expense(expense_id)
        return _success({}, 204)

    @app.get("/budget")
    def budget_status():
        return _success(tracker.budget_status().to_dict())

    @app.put("/budget")
    def set_budget():
        payload = _json_body()
        tracker.set_budget(payload.get("budget"))
        return _success(tracker.budget_status().to_dict())

    @app.get("/export")
    def export_csv():
        path = tracker.export_csv()
        app.logger.info("Export written to %s", path)
        return Response(
            path.read_text(encoding="utf-8"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
        )

    return app
