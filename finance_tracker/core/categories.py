# finance_tracker/core/categories.py
from typing import Dict, List, Optional

from finance_tracker.core.models import TransactionKind

INCOME_CATEGORIES = [
    "Salary",
    "Business",
    "Investment",
    "Gift",
    "Other Income",
]

EXPENSE_CATEGORIES = [
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Other Expense",
]

DEFAULT_CATEGORIES: Dict[str, List[str]] = {
    TransactionKind.INCOME.value: INCOME_CATEGORIES,
    TransactionKind.EXPENSE.value: EXPENSE_CATEGORIES,
}


def suggested_categories(kind, categories_map: Optional[Dict[str, List[str]]] = None) -> List[str]:
    """Return the suggested category labels for *kind*."""
    cat_map = categories_map or DEFAULT_CATEGORIES
    key = kind.value if isinstance(kind, TransactionKind) else str(kind)
    return list(cat_map.get(key, []))


def is_known_category(kind, category: str, categories_map=None) -> bool:
    # exact match, labels are compared as stored
    return category in suggested_categories(kind, categories_map)
