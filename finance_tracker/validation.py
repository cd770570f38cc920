from __future__ import annotations

import math
from datetime import date
from typing import Dict, List, Mapping, Optional

from finance_tracker.core.categories import is_known_category
from finance_tracker.core.models import TransactionKind
from finance_tracker.periods import calendar_date

REQUIRED_FIELDS = ("kind", "amount", "category", "occurred_at")

# form-style aliases accepted from the CLI and JSON API
_ALIASES = {
    "type": "kind",
    "date": "occurred_at",
    "imageUrl": "image_url",
}


class ValidationError(ValueError):
    """Raised when submitted transaction fields are rejected."""


def _normalize_keys(raw: Mapping[str, object]) -> Dict[str, object]:
    fields: Dict[str, object] = {}
    for key, value in raw.items():
        fields[_ALIASES.get(key, key)] = value
    return fields


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_amount(value) -> float:
    if isinstance(value, bool):
        raise ValidationError("Invalid amount")
    try:
        amount = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError("Invalid amount") from None
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError("Invalid amount")
    return amount


def parse_kind(value) -> TransactionKind:
    try:
        return TransactionKind(str(value).strip().lower())
    except ValueError:
        raise ValidationError("Invalid type") from None


def parse_occurred_at(value) -> date:
    try:
        return calendar_date(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid date") from None


def validate_transaction_fields(
    raw: Mapping[str, object],
    *,
    categories: Optional[Dict[str, List[str]]] = None,
    strict_categories: bool = False,
) -> Dict[str, object]:
    """Check raw transaction input and return normalized store fields.

    Raises :class:`ValidationError` with a user-facing message on the first
    problem found. Nothing is written by this function.
    """
    fields = _normalize_keys(raw)
    if any(_blank(fields.get(name)) for name in REQUIRED_FIELDS):
        raise ValidationError("Missing required fields")

    kind = parse_kind(fields["kind"])
    amount = parse_amount(fields["amount"])
    occurred_at = parse_occurred_at(fields["occurred_at"])
    category = str(fields["category"]).strip()
    if strict_categories and not is_known_category(kind, category, categories):
        raise ValidationError("Invalid category")

    description = fields.get("description")
    image_url = fields.get("image_url")
    return {
        "kind": kind,
        "amount": amount,
        "category": category,
        "occurred_at": occurred_at,
        "description": None if _blank(description) else str(description).strip(),
        "image_url": None if _blank(image_url) else str(image_url).strip(),
    }
