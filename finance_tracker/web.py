from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import date
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List
from urllib.parse import parse_qs, unquote, urlparse

from finance_tracker import actions
from finance_tracker.config import load_config
from finance_tracker.core.categories import DEFAULT_CATEGORIES
from finance_tracker.periods import SUNDAY, parse_period, week_start_from_name

logger = logging.getLogger(__name__)

TRANSACTIONS_PREFIX = "/api/transactions/"


class BadRequest(ValueError):
    pass


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise BadRequest(f"Invalid date: {value}") from None


def _parse_int(value: str | None, default: int | None = None) -> int | None:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise BadRequest(f"Expected an integer, got '{value}'") from None


def _parse_month(value: str | None) -> int | None:
    """Month query parameters are zero-based (0 = January)."""
    month = _parse_int(value)
    if month is not None and not 0 <= month <= 11:
        raise BadRequest("month must be between 0 and 11")
    return month


def _parse_year(value: str | None, default: int | None = None) -> int | None:
    year = _parse_int(value, default=default)
    if year is not None and not date.min.year <= year <= date.max.year:
        raise BadRequest(f"year must be between {date.min.year} and {date.max.year}")
    return year


def _json_response(handler: BaseHTTPRequestHandler, payload: Any, status: int = 200) -> None:
    body = json.dumps(payload).encode("utf-8")
    handler.send_response(status)
    handler.send_header("Content-Type", "application/json")
    handler.send_header("Cache-Control", "no-store")
    handler.send_header("Content-Length", str(len(body)))
    handler.end_headers()
    handler.wfile.write(body)


def _get_param(query: dict[str, list[str]], key: str) -> str | None:
    values = query.get(key)
    return values[0] if values else None


class FinanceWebHandler(BaseHTTPRequestHandler):
    db_path = "finance.db"
    categories: Dict[str, List[str]] = DEFAULT_CATEGORIES
    strict_categories: bool = False
    week_start: int = SUNDAY

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        try:
            self._handle_get(parsed.path, parse_qs(parsed.query))
        except BadRequest as exc:
            _json_response(self, {"error": str(exc)}, status=400)

    def do_POST(self) -> None:
        if urlparse(self.path).path != "/api/transactions":
            _json_response(self, {"error": "not found"}, status=404)
            return
        fields = self._read_json()
        if fields is None:
            return
        result = actions.add_transaction(
            self.db_path, fields, self.categories, self.strict_categories
        )
        _json_response(self, result.to_dict(), status=201 if result.success else 400)

    def do_PUT(self) -> None:
        transaction_id = self._transaction_id()
        if transaction_id is None:
            _json_response(self, {"error": "not found"}, status=404)
            return
        fields = self._read_json()
        if fields is None:
            return
        result = actions.update_transaction(
            self.db_path, transaction_id, fields, self.categories, self.strict_categories
        )
        _json_response(self, result.to_dict(), status=200 if result.success else 400)

    def do_DELETE(self) -> None:
        transaction_id = self._transaction_id()
        if transaction_id is None:
            _json_response(self, {"error": "not found"}, status=404)
            return
        result = actions.delete_transaction(self.db_path, transaction_id)
        _json_response(self, result.to_dict(), status=200 if result.success else 400)

    def _handle_get(self, path: str, query: dict[str, list[str]]) -> None:
        if path == "/api/transactions":
            month = _parse_month(_get_param(query, "month"))
            if month is None:
                txs = actions.get_transactions(self.db_path)
            else:
                year = _parse_year(_get_param(query, "year"), default=date.today().year)
                txs = actions.get_transactions_by_month(self.db_path, month, year)
            _json_response(self, [tx.to_dict() for tx in txs])
            return

        if path == "/api/summary":
            _json_response(self, actions.get_summary(self.db_path).to_dict())
            return

        if path in ("/api/summary/window", "/api/stats"):
            try:
                period = parse_period(_get_param(query, "period") or "monthly")
            except ValueError:
                raise BadRequest("period must be weekly, monthly, or annually") from None
            kwargs = {
                "month": _parse_month(_get_param(query, "month")),
                "year": _parse_year(_get_param(query, "year")),
                "reference": _parse_date(_get_param(query, "date")),
                "week_start": self.week_start,
            }
            if path == "/api/stats":
                payload = actions.get_stats(self.db_path, period, **kwargs).to_dict()
            else:
                payload = actions.get_summary_for_window(self.db_path, period, **kwargs).to_dict()
            _json_response(self, payload)
            return

        if path == "/api/calendar":
            today = date.today()
            month = _parse_month(_get_param(query, "month"))
            year = _parse_year(_get_param(query, "year"), default=today.year)
            days = actions.get_calendar_data(
                self.db_path, today.month - 1 if month is None else month, year
            )
            _json_response(self, {key: day.to_dict() for key, day in days.items()})
            return

        if path == "/api/categories":
            _json_response(self, self.categories)
            return

        _json_response(self, {"error": "not found"}, status=404)

    def _transaction_id(self) -> str | None:
        path = urlparse(self.path).path
        if not path.startswith(TRANSACTIONS_PREFIX):
            return None
        transaction_id = unquote(path[len(TRANSACTIONS_PREFIX):]).strip("/")
        return transaction_id or None

    def _read_json(self) -> Dict[str, Any] | None:
        try:
            length = _parse_int(self.headers.get("Content-Length"), default=0) or 0
            if length < 0:
                raise BadRequest("Content-Length must not be negative")
        except BadRequest as exc:
            _json_response(self, {"success": False, "error": str(exc)}, status=400)
            return None
        raw = self.rfile.read(length) if length else b""
        try:
            payload = json.loads(raw.decode("utf-8") or "{}")
        except (UnicodeDecodeError, json.JSONDecodeError):
            _json_response(self, {"success": False, "error": "Invalid JSON body"}, status=400)
            return None
        if not isinstance(payload, dict):
            _json_response(self, {"success": False, "error": "Invalid JSON body"}, status=400)
            return None
        return payload


def make_handler(db_path: str, config: Dict[str, Any]) -> type:
    return type(
        "FinanceWebHandler",
        (FinanceWebHandler,),
        {
            "db_path": db_path,
            "categories": config["categories"],
            "strict_categories": bool(config["strict_categories"]),
            "week_start": week_start_from_name(config["week_start"]),
        },
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Finance tracker JSON API")
    parser.add_argument("--config", dest="config_path", default="config.yaml", help="Path to config.yaml")
    parser.add_argument("--db", dest="db_path", default=None, help="Path to SQLite database")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    args = parser.parse_args()

    config = load_config(args.config_path)
    logging.basicConfig(
        level=os.getenv("FINANCE_TRACKER_LOG_LEVEL", str(config["log_level"])).upper()
    )
    db_path = args.db_path or str(config["db_path"])
    server = ThreadingHTTPServer((args.host, args.port), make_handler(db_path, config))
    print(f"Finance tracker API running at http://{args.host}:{args.port} (db: {db_path})")
    server.serve_forever()


if __name__ == "__main__":
    main()
