# finance_tracker/core/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass
class Transaction:
    id: str
    kind: TransactionKind
    amount: float
    category: str
    occurred_at: date
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "amount": float(self.amount),
            "category": self.category,
            "description": self.description,
            "image_url": self.image_url,
            "occurred_at": self.occurred_at.isoformat(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class TransactionSummary:
    total_income: float = 0.0
    total_expenses: float = 0.0
    balance: float = 0.0

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_income": self.total_income,
            "total_expenses": self.total_expenses,
            "balance": self.balance,
        }


@dataclass
class CategoryStats:
    category: str
    amount: float
    percentage: float
    count: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "category": self.category,
            "amount": self.amount,
            "percentage": self.percentage,
            "count": self.count,
        }


@dataclass
class DayData:
    """Totals for a single calendar day; ``balance`` is kept equal to income - expense."""

    date: str
    income: float = 0.0
    expense: float = 0.0
    balance: float = 0.0
    transactions: List[Transaction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "date": self.date,
            "income": self.income,
            "expense": self.expense,
            "balance": self.balance,
            "transactions": [tx.to_dict() for tx in self.transactions],
        }


@dataclass
class DayGroup:
    date: str
    transactions: List[Transaction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "date": self.date,
            "transactions": [tx.to_dict() for tx in self.transactions],
        }


@dataclass
class StatsData:
    total_income: float = 0.0
    total_expenses: float = 0.0
    income_by_category: List[CategoryStats] = field(default_factory=list)
    expenses_by_category: List[CategoryStats] = field(default_factory=list)
    date_range_label: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_income": self.total_income,
            "total_expenses": self.total_expenses,
            "income_by_category": [s.to_dict() for s in self.income_by_category],
            "expenses_by_category": [s.to_dict() for s in self.expenses_by_category],
            "date_range_label": self.date_range_label,
        }
