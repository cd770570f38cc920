from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict

import yaml

from finance_tracker.core.categories import EXPENSE_CATEGORIES, INCOME_CATEGORIES

DEFAULT_CONFIG_PATH = Path("config.yaml")

DEFAULT_CONFIG: Dict[str, object] = {
    "db_path": "finance.db",
    "log_level": "WARNING",
    "week_start": "sunday",
    "currency_symbol": "₦",
    "strict_categories": False,
    "categories": {
        "income": list(INCOME_CATEGORIES),
        "expense": list(EXPENSE_CATEGORIES),
    },
}

ENV_OVERRIDES = {
    "FINANCE_TRACKER_DB": "db_path",
    "FINANCE_TRACKER_LOG_LEVEL": "log_level",
}


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def load_config(path: Path | str | None = None) -> Dict[str, object]:
    """Load the YAML config at *path*, falling back to the defaults.

    Environment variables listed in ``ENV_OVERRIDES`` win over file values.
    """
    target = Path(path) if path else DEFAULT_CONFIG_PATH
    data: Dict[str, object] = {}
    if target.exists():
        with target.open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {target} must contain a mapping")
    config = _merge_defaults(data, DEFAULT_CONFIG)
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value
    return config


def save_config(config: Dict[str, object], path: Path | str | None = None) -> None:
    target = Path(path) if path else DEFAULT_CONFIG_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as fp:
        yaml.safe_dump(config, fp, sort_keys=False, allow_unicode=True)
