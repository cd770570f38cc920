import sqlite3
from datetime import date, datetime, timezone

import pytest

from finance_tracker.core.models import TransactionKind
from finance_tracker.database import (
    StoreError,
    create_transaction,
    delete_transaction,
    fetch_transactions,
    fetch_transactions_between,
    get_transaction,
    update_transaction,
)


def _fields(kind="expense", amount=10.0, category="Food & Dining", day=date(2025, 1, 5), **extra):
    fields = {
        "kind": TransactionKind(kind),
        "amount": amount,
        "category": category,
        "occurred_at": day,
    }
    fields.update(extra)
    return fields


def _seed_transactions(db_path):
    return [
        create_transaction(db_path, _fields("income", 2500.0, "Salary", date(2025, 1, 1))),
        create_transaction(db_path, _fields("expense", 45.5, "Food & Dining", date(2025, 1, 5))),
        create_transaction(db_path, _fields("expense", 60.0, "Transportation", date(2025, 1, 31))),
        create_transaction(db_path, _fields("expense", 15.0, "Entertainment", date(2025, 2, 1))),
    ]


def test_create_assigns_id_and_timestamps(tmp_path):
    db_path = str(tmp_path / "nested" / "finance.db")
    tx = create_transaction(
        db_path, _fields(description="Lunch", image_url="https://img.example/r.png")
    )

    assert tx.id
    assert tx.kind is TransactionKind.EXPENSE
    assert tx.occurred_at == date(2025, 1, 5)
    assert tx.description == "Lunch"
    assert tx.image_url == "https://img.example/r.png"
    assert tx.created_at is not None and tx.created_at.tzinfo is not None
    assert tx.created_at == tx.updated_at
    assert get_transaction(db_path, tx.id) == tx


def test_occurred_at_stored_as_utc_midnight(tmp_path):
    db_path = tmp_path / "finance.db"
    tx = create_transaction(str(db_path), _fields(day=date(2024, 10, 31)))

    conn = sqlite3.connect(db_path)
    stored = conn.execute(
        "SELECT occurred_at FROM transactions WHERE id = ?", (tx.id,)
    ).fetchone()[0]
    conn.close()
    assert stored == "2024-10-31T00:00:00+00:00"


def test_fetch_transactions_newest_first(tmp_path):
    db_path = str(tmp_path / "finance.db")
    _seed_transactions(db_path)

    rows = fetch_transactions(db_path)
    assert [t.occurred_at for t in rows] == [
        date(2025, 2, 1),
        date(2025, 1, 31),
        date(2025, 1, 5),
        date(2025, 1, 1),
    ]


def test_fetch_between_is_inclusive(tmp_path):
    db_path = str(tmp_path / "finance.db")
    _seed_transactions(db_path)

    january = fetch_transactions_between(
        db_path,
        datetime(2025, 1, 1, tzinfo=timezone.utc),
        datetime(2025, 1, 31, 23, 59, 59, 999999, tzinfo=timezone.utc),
    )
    assert sorted(t.category for t in january) == [
        "Food & Dining",
        "Salary",
        "Transportation",
    ]

    # naive bounds are read as UTC
    february = fetch_transactions_between(
        db_path, datetime(2025, 2, 1), datetime(2025, 2, 28, 23, 59, 59)
    )
    assert [t.category for t in february] == ["Entertainment"]


def test_update_replaces_fields(tmp_path):
    db_path = str(tmp_path / "finance.db")
    tx = create_transaction(db_path, _fields(description="old"))

    updated = update_transaction(
        db_path,
        tx.id,
        _fields("income", 99.0, "Gift", date(2025, 3, 3), description=None),
    )
    assert updated.id == tx.id
    assert updated.kind is TransactionKind.INCOME
    assert updated.amount == 99.0
    assert updated.category == "Gift"
    assert updated.occurred_at == date(2025, 3, 3)
    assert updated.description is None
    assert updated.created_at == tx.created_at
    assert updated.updated_at >= tx.updated_at


def test_update_and_delete_unknown_id(tmp_path):
    db_path = str(tmp_path / "finance.db")
    with pytest.raises(StoreError):
        update_transaction(db_path, "missing", _fields())
    with pytest.raises(StoreError):
        delete_transaction(db_path, "missing")


def test_delete_removes_row(tmp_path):
    db_path = str(tmp_path / "finance.db")
    first, *_ = _seed_transactions(db_path)

    delete_transaction(db_path, first.id)
    assert get_transaction(db_path, first.id) is None
    assert len(fetch_transactions(db_path)) == 3


def test_empty_db_queries(tmp_path):
    db_path = str(tmp_path / "empty.db")

    assert fetch_transactions(db_path) == []
    assert fetch_transactions_between(
        db_path,
        datetime(2025, 1, 1, tzinfo=timezone.utc),
        datetime(2025, 12, 31, tzinfo=timezone.utc),
    ) == []
    assert get_transaction(db_path, "nope") is None


def test_unusable_path_raises_store_error(tmp_path):
    with pytest.raises(StoreError):
        fetch_transactions(str(tmp_path))
