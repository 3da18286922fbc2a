"""Flask REST API exposing the ledger store."""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from ledger_core.categories import allowed_categories
from ledger_core.exceptions import RecordNotFoundError, ValidationError
from ledger_core.models import EntryKind
from ledger_core.services import LedgerStore


def create_app(store: Optional[LedgerStore] = None) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("LEDGER_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("LEDGER_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    # The store is the whole session state; it lives as long as the app does.
    ledger = store if store is not None else LedgerStore()
    app.extensions["ledger_store"] = ledger

    def _success(payload: Any, status: int = 200):
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

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _money(value) -> str:
        return f"{value:.2f}"

    @app.get("/categories")
    def list_categories():
        return _success({kind.value: list(allowed_categories(kind)) for kind in EntryKind})

    @app.get("/entries")
    def list_entries():
        kind = request.args.get("kind") or "all"
        entries = ledger.filter_entries(kind)
        return _success({
            "items": [entry.to_dict() for entry in entries],
            "balance": _money(ledger.balance),
        })

    @app.post("/entries")
    def create_entry():
        payload = _json_body()
        entry = ledger.record_entry(payload)
        return _success({"entry": entry.to_dict(), "balance": _money(ledger.balance)}, 201)

    @app.get("/entries/<entry_id>")
    def get_entry(entry_id: str):
        entry = ledger.get_entry(entry_id)
        return _success(entry.to_dict())

    @app.delete("/entries/<entry_id>")
    def delete_entry(entry_id: str):
        balance = ledger.delete_entry(entry_id)
        return _success({"balance": _money(balance)})

    @app.get("/balance")
    def balance():
        totals = ledger.totals()
        return _success({
            "balance": _money(ledger.balance),
            "income": _money(totals[EntryKind.INCOME.value]),
            "expense": _money(totals[EntryKind.EXPENSE.value]),
        })

    return app


if __name__ == "__main__":  # pragma: no cover - manual launch helper
    create_app().run(debug=os.getenv("LEDGER_ENV", "prod").lower() in {"dev", "development"})
