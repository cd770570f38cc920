"""Operations offered to the presentation layer.

Reads never raise on store failures: they log the problem and return zero or
empty results so a page can always render. Writes return an
:class:`ActionResult` instead of raising.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Mapping, Optional

from finance_tracker import aggregation, database
from finance_tracker.core.models import (
    DayData,
    StatsData,
    Transaction,
    TransactionKind,
    TransactionSummary,
)
from finance_tracker.database import StoreError
from finance_tracker.periods import SUNDAY, DateWindow, month_window, resolve_window
from finance_tracker.validation import ValidationError, validate_transaction_fields

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    success: bool
    error: Optional[str] = None
    transaction: Optional[Transaction] = None

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"success": self.success}
        if self.error:
            payload["error"] = self.error
        if self.transaction is not None:
            payload["transaction"] = self.transaction.to_dict()
        return payload


def _window_transactions(db_path: str, window: DateWindow) -> List[Transaction]:
    start, end = window.to_instants()
    return database.fetch_transactions_between(db_path, start, end)


# -- writes -----------------------------------------------------------------


def add_transaction(
    db_path: str,
    fields: Mapping[str, object],
    categories: Optional[Dict[str, List[str]]] = None,
    strict_categories: bool = False,
) -> ActionResult:
    try:
        clean = validate_transaction_fields(
            fields, categories=categories, strict_categories=strict_categories
        )
    except ValidationError as exc:
        return ActionResult(success=False, error=str(exc))
    try:
        tx = database.create_transaction(db_path, clean)
    except StoreError:
        logger.exception("Failed to add transaction")
        return ActionResult(success=False, error="Failed to add transaction")
    logger.info("Added %s transaction %s", tx.kind.value, tx.id)
    return ActionResult(success=True, transaction=tx)


def update_transaction(
    db_path: str,
    transaction_id: str,
    fields: Mapping[str, object],
    categories: Optional[Dict[str, List[str]]] = None,
    strict_categories: bool = False,
) -> ActionResult:
    if not transaction_id:
        return ActionResult(success=False, error="Missing required fields")
    try:
        clean = validate_transaction_fields(
            fields, categories=categories, strict_categories=strict_categories
        )
    except ValidationError as exc:
        return ActionResult(success=False, error=str(exc))
    try:
        tx = database.update_transaction(db_path, transaction_id, clean)
    except StoreError:
        logger.exception("Failed to update transaction %s", transaction_id)
        return ActionResult(success=False, error="Failed to update transaction")
    logger.info("Updated transaction %s", tx.id)
    return ActionResult(success=True, transaction=tx)


def delete_transaction(db_path: str, transaction_id: str) -> ActionResult:
    try:
        database.delete_transaction(db_path, transaction_id)
    except StoreError:
        logger.exception("Failed to delete transaction %s", transaction_id)
        return ActionResult(success=False, error="Failed to delete transaction")
    logger.info("Deleted transaction %s", transaction_id)
    return ActionResult(success=True)


# -- reads ------------------------------------------------------------------


def get_transactions(db_path: str) -> List[Transaction]:
    try:
        return database.fetch_transactions(db_path)
    except StoreError:
        logger.exception("Failed to fetch transactions")
        return []


def get_transactions_by_month(db_path: str, month: int, year: int) -> List[Transaction]:
    window = month_window(month, year)
    try:
        return _window_transactions(db_path, window)
    except StoreError:
        logger.exception("Failed to fetch transactions for %s", window.label())
        return []


def get_summary(db_path: str) -> TransactionSummary:
    try:
        transactions = database.fetch_transactions(db_path)
    except StoreError:
        logger.exception("Failed to compute transaction summary")
        return TransactionSummary()
    return aggregation.summarize(transactions)


def get_summary_for_window(
    db_path: str,
    period,
    *,
    month: Optional[int] = None,
    year: Optional[int] = None,
    reference: Optional[date] = None,
    week_start: int = SUNDAY,
) -> TransactionSummary:
    window = resolve_window(
        period, month=month, year=year, reference=reference, week_start=week_start
    )
    try:
        transactions = _window_transactions(db_path, window)
    except StoreError:
        logger.exception("Failed to compute summary for %s", window.label())
        return TransactionSummary()
    return aggregation.summarize(transactions)


def get_stats(
    db_path: str,
    period,
    *,
    month: Optional[int] = None,
    year: Optional[int] = None,
    reference: Optional[date] = None,
    week_start: int = SUNDAY,
) -> StatsData:
    """Totals and per-category breakdowns for one period."""
    window = resolve_window(
        period, month=month, year=year, reference=reference, week_start=week_start
    )
    try:
        transactions = _window_transactions(db_path, window)
    except StoreError:
        logger.exception("Failed to compute stats for %s", window.label())
        return StatsData(date_range_label=window.label())

    summary = aggregation.summarize(transactions)
    incomes = aggregation.filter_by_kind(transactions, TransactionKind.INCOME)
    expenses = aggregation.filter_by_kind(transactions, TransactionKind.EXPENSE)
    return StatsData(
        total_income=summary.total_income,
        total_expenses=summary.total_expenses,
        income_by_category=aggregation.group_by_category(incomes, summary.total_income),
        expenses_by_category=aggregation.group_by_category(
            expenses, summary.total_expenses
        ),
        date_range_label=window.label(),
    )


def get_calendar_data(db_path: str, month: int, year: int) -> Dict[str, DayData]:
    window = month_window(month, year)
    try:
        transactions = _window_transactions(db_path, window)
    except StoreError:
        logger.exception("Failed to build calendar for %s", window.label())
        return {}
    return aggregation.bucket_by_day(transactions)
