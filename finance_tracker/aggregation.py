# finance_tracker/aggregation.py
from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List

from finance_tracker.core.models import (
    CategoryStats,
    DayData,
    DayGroup,
    Transaction,
    TransactionKind,
    TransactionSummary,
)
from finance_tracker.periods import date_key

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def summarize(transactions: Iterable[Transaction]) -> TransactionSummary:
    total_income = 0.0
    total_expenses = 0.0
    for tx in transactions:
        if tx.kind is TransactionKind.INCOME:
            total_income += tx.amount
        else:
            total_expenses += tx.amount
    return TransactionSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
    )


def filter_by_kind(
    transactions: Iterable[Transaction], kind: TransactionKind
) -> List[Transaction]:
    return [tx for tx in transactions if tx.kind is kind]


def group_by_category(
    transactions: Iterable[Transaction], total: float
) -> List[CategoryStats]:
    """Aggregate same-kind transactions by their exact category label.

    Percentages are relative to *total* and are 0 when *total* is not
    positive. Results are ordered by amount, largest first, then by name.
    """
    amounts: Dict[str, float] = defaultdict(float)
    counts: Dict[str, int] = defaultdict(int)
    for tx in transactions:
        amounts[tx.category] += tx.amount
        counts[tx.category] += 1

    stats = [
        CategoryStats(
            category=category,
            amount=amount,
            percentage=(amount / total * 100) if total > 0 else 0.0,
            count=counts[category],
        )
        for category, amount in amounts.items()
    ]
    stats.sort(key=lambda item: (-item.amount, item.category))
    return stats


def bucket_by_day(transactions: Iterable[Transaction]) -> Dict[str, DayData]:
    """Group transactions into per-day totals keyed by ``YYYY-MM-DD``."""
    buckets: Dict[str, DayData] = {}
    for tx in transactions:
        key = date_key(tx.occurred_at)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = DayData(date=key)

        bucket.transactions.append(tx)
        if tx.kind is TransactionKind.INCOME:
            bucket.income += tx.amount
        else:
            bucket.expense += tx.amount
        bucket.balance = bucket.income - bucket.expense

    return {key: buckets[key] for key in sorted(buckets)}


def group_for_listing(transactions: Iterable[Transaction]) -> List[DayGroup]:
    """Group transactions by day, newest day first and newest entry first."""
    grouped: Dict[str, List[Transaction]] = defaultdict(list)
    for tx in transactions:
        grouped[date_key(tx.occurred_at)].append(tx)

    groups = []
    for key in sorted(grouped, reverse=True):
        day_txs = sorted(
            grouped[key], key=lambda t: t.created_at or _EPOCH, reverse=True
        )
        groups.append(DayGroup(date=key, transactions=day_txs))
    return groups


def count_by_kind(transactions: Iterable[Transaction]) -> Dict[str, int]:
    counts = {kind.value: 0 for kind in TransactionKind}
    for tx in transactions:
        counts[tx.kind.value] += 1
    return counts
