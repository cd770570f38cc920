import http.client
import json
import threading
import urllib.error
import urllib.request
from http.server import ThreadingHTTPServer
from urllib.parse import urlparse

import pytest

from finance_tracker import web
from finance_tracker.config import DEFAULT_CONFIG


@pytest.fixture
def api(tmp_path):
    db_path = str(tmp_path / "finance.db")
    server = ThreadingHTTPServer(("127.0.0.1", 0), web.make_handler(db_path, DEFAULT_CONFIG))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address
    try:
        yield f"http://{host}:{port}"
    finally:
        server.shutdown()
        server.server_close()


def _request(url, method="GET", payload=None):
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    req = urllib.request.Request(url, data=data, method=method)
    if data is not None:
        req.add_header("Content-Type", "application/json")
    try:
        with urllib.request.urlopen(req) as resp:
            return resp.status, json.loads(resp.read().decode("utf-8"))
    except urllib.error.HTTPError as exc:
        return exc.code, json.loads(exc.read().decode("utf-8"))


def _seed(base):
    for body in (
        {"type": "income", "amount": 100, "category": "Salary", "date": "2024-03-01"},
        {"type": "expense", "amount": 30, "category": "Food", "date": "2024-03-01"},
        {"type": "expense", "amount": 20, "category": "Food", "date": "2024-03-15"},
    ):
        status, payload = _request(f"{base}/api/transactions", "POST", body)
        assert status == 201, payload
        assert payload["success"] is True


def test_stats_summary_and_calendar(api):
    _seed(api)

    status, stats = _request(f"{api}/api/stats?period=monthly&month=2&year=2024")
    assert status == 200
    assert stats["total_income"] == 100.0
    assert stats["total_expenses"] == 50.0
    assert stats["expenses_by_category"] == [
        {"category": "Food", "amount": 50.0, "percentage": 100.0, "count": 2}
    ]
    assert stats["date_range_label"] == "Mar 1, 2024 - Mar 31, 2024"

    status, summary = _request(f"{api}/api/summary/window?period=weekly&date=2024-03-13")
    assert status == 200
    assert summary == {"total_income": 0.0, "total_expenses": 20.0, "balance": -20.0}

    status, overall = _request(f"{api}/api/summary")
    assert overall["balance"] == 50.0

    status, calendar = _request(f"{api}/api/calendar?month=2&year=2024")
    assert status == 200
    assert list(calendar) == ["2024-03-01", "2024-03-15"]
    assert calendar["2024-03-01"]["balance"] == 70.0
    assert len(calendar["2024-03-01"]["transactions"]) == 2


def test_transaction_crud(api):
    status, created = _request(
        f"{api}/api/transactions",
        "POST",
        {"kind": "expense", "amount": "12.5", "category": "Travel", "occurred_at": "2024-05-02"},
    )
    assert status == 201
    tx_id = created["transaction"]["id"]

    status, updated = _request(
        f"{api}/api/transactions/{tx_id}",
        "PUT",
        {"kind": "expense", "amount": 13, "category": "Travel", "occurred_at": "2024-05-03"},
    )
    assert status == 200
    assert updated["transaction"]["occurred_at"] == "2024-05-03"

    status, listed = _request(f"{api}/api/transactions?month=4&year=2024")
    assert [t["id"] for t in listed] == [tx_id]

    status, deleted = _request(f"{api}/api/transactions/{tx_id}", "DELETE")
    assert status == 200 and deleted == {"success": True}

    status, listed = _request(f"{api}/api/transactions")
    assert listed == []


def test_rejected_write(api):
    status, payload = _request(
        f"{api}/api/transactions",
        "POST",
        {"type": "expense", "amount": 0, "category": "Food", "date": "2024-03-01"},
    )
    assert status == 400
    assert payload == {"success": False, "error": "Invalid amount"}

    status, listed = _request(f"{api}/api/transactions")
    assert listed == []


def test_bad_requests(api):
    status, payload = _request(f"{api}/api/stats?period=hourly")
    assert status == 400
    assert "period" in payload["error"]

    status, _ = _request(f"{api}/api/calendar?month=12")
    assert status == 400

    status, _ = _request(f"{api}/api/calendar?month=march")
    assert status == 400

    for year in ("0", "10000"):
        status, payload = _request(f"{api}/api/stats?period=annually&year={year}")
        assert status == 400
        assert "year" in payload["error"]

    status, _ = _request(f"{api}/api/calendar?month=1&year=0")
    assert status == 400

    status, _ = _request(f"{api}/api/nope")
    assert status == 404

    status, payload = _request(f"{api}/api/transactions/missing", "DELETE")
    assert status == 400
    assert payload["error"] == "Failed to delete transaction"


@pytest.mark.parametrize("method,path", [("POST", "/api/transactions"), ("PUT", "/api/transactions/abc")])
@pytest.mark.parametrize("length", ["abc", "-1"])
def test_bad_content_length(api, method, path, length):
    conn = http.client.HTTPConnection(urlparse(api).netloc, timeout=5)
    try:
        conn.putrequest(method, path)
        conn.putheader("Content-Type", "application/json")
        conn.putheader("Content-Length", length)
        conn.endheaders()
        resp = conn.getresponse()
        payload = json.loads(resp.read().decode("utf-8"))
    finally:
        conn.close()

    assert resp.status == 400
    assert payload["success"] is False
    assert "Content-Length" in payload["error"] or "integer" in payload["error"]

    status, listed = _request(f"{api}/api/transactions")
    assert listed == []


def test_categories_endpoint(api):
    status, payload = _request(f"{api}/api/categories")
    assert status == 200
    assert "Salary" in payload["income"]
    assert "Food & Dining" in payload["expense"]
