import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from finance_tracker.core.models import Transaction, TransactionKind
from finance_tracker.periods import calendar_date, start_of_day_utc

_COLUMNS = (
    "id, kind, amount, category, description, image_url, "
    "occurred_at, created_at, updated_at"
)


class StoreError(RuntimeError):
    """Raised when the transaction store cannot complete an operation."""


def _init_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS transactions (
            id TEXT PRIMARY KEY,
            kind TEXT NOT NULL,
            amount REAL NOT NULL,
            category TEXT NOT NULL,
            description TEXT,
            image_url TEXT,
            occurred_at TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_transactions_occurred_at "
        "ON transactions (occurred_at)"
    )
    conn.commit()


@contextmanager
def _connect(db_path: str) -> Iterator[sqlite3.Connection]:
    try:
        path = Path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(path)
    except (sqlite3.Error, OSError) as exc:
        raise StoreError(f"Could not open database {db_path}: {exc}") from exc
    try:
        _init_db(conn)
        yield conn
    except sqlite3.Error as exc:
        raise StoreError(str(exc)) from exc
    finally:
        conn.close()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _instant(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _row_to_transaction(row) -> Transaction:
    return Transaction(
        id=row[0],
        kind=TransactionKind(row[1]),
        amount=float(row[2]),
        category=row[3],
        description=row[4],
        image_url=row[5],
        occurred_at=calendar_date(row[6]),
        created_at=datetime.fromisoformat(row[7]),
        updated_at=datetime.fromisoformat(row[8]),
    )


def _field_values(fields: Dict[str, object]) -> tuple:
    kind = fields["kind"]
    occurred: date = fields["occurred_at"]  # type: ignore[assignment]
    return (
        kind.value if isinstance(kind, TransactionKind) else str(kind),
        float(fields["amount"]),  # type: ignore[arg-type]
        fields["category"],
        fields.get("description") or None,
        fields.get("image_url") or None,
        _instant(start_of_day_utc(calendar_date(occurred))),
    )


def create_transaction(db_path: str, fields: Dict[str, object]) -> Transaction:
    """Insert a transaction and return it with its id and timestamps.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.
    fields:
        Mapping with ``kind``, ``amount``, ``category``, ``occurred_at`` and
        optional ``description`` and ``image_url``. Values are expected to be
        validated already.
    """
    tx_id = str(uuid.uuid4())
    stamp = _instant(_now())
    with _connect(db_path) as conn:
        conn.execute(
            f"INSERT INTO transactions ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (tx_id, *_field_values(fields), stamp, stamp),
        )
        conn.commit()
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM transactions WHERE id = ?", (tx_id,)
        ).fetchone()
    return _row_to_transaction(row)


def update_transaction(
    db_path: str, transaction_id: str, fields: Dict[str, object]
) -> Transaction:
    """Replace the user-supplied fields of an existing transaction."""

    with _connect(db_path) as conn:
        cursor = conn.execute(
            """
            UPDATE transactions
            SET kind = ?, amount = ?, category = ?, description = ?,
                image_url = ?, occurred_at = ?, updated_at = ?
            WHERE id = ?
            """,
            (*_field_values(fields), _instant(_now()), transaction_id),
        )
        if cursor.rowcount == 0:
            raise StoreError(f"Transaction not found: {transaction_id}")
        conn.commit()
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM transactions WHERE id = ?", (transaction_id,)
        ).fetchone()
    return _row_to_transaction(row)


def delete_transaction(db_path: str, transaction_id: str) -> None:
    with _connect(db_path) as conn:
        cursor = conn.execute(
            "DELETE FROM transactions WHERE id = ?", (transaction_id,)
        )
        if cursor.rowcount == 0:
            raise StoreError(f"Transaction not found: {transaction_id}")
        conn.commit()


def get_transaction(db_path: str, transaction_id: str) -> Optional[Transaction]:
    with _connect(db_path) as conn:
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM transactions WHERE id = ?", (transaction_id,)
        ).fetchone()
    return _row_to_transaction(row) if row else None


def fetch_transactions(db_path: str) -> List[Transaction]:
    """Return every transaction, newest ``occurred_at`` first."""

    with _connect(db_path) as conn:
        rows = conn.execute(
            f"SELECT {_COLUMNS} FROM transactions "
            "ORDER BY occurred_at DESC, created_at DESC"
        ).fetchall()
    return [_row_to_transaction(r) for r in rows]


def fetch_transactions_between(
    db_path: str,
    start_instant: datetime,
    end_instant: datetime,
) -> List[Transaction]:
    """Retrieve transactions whose ``occurred_at`` lies in a range.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.
    start_instant, end_instant:
        Inclusive bounds. Naive values are taken as UTC.
    """
    with _connect(db_path) as conn:
        rows = conn.execute(
            f"""
            SELECT {_COLUMNS} FROM transactions
            WHERE occurred_at >= ? AND occurred_at <= ?
            ORDER BY occurred_at DESC, created_at DESC
            """,
            (_instant(start_instant), _instant(end_instant)),
        ).fetchall()
    return [_row_to_transaction(r) for r in rows]
