# finance_tracker/periods.py
from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Tuple

logger = logging.getLogger(__name__)

SUNDAY = calendar.SUNDAY
MONDAY = calendar.MONDAY

_WEEK_START_NAMES = {
    "sunday": SUNDAY,
    "monday": MONDAY,
}


class Period(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ANNUALLY = "annually"


def parse_period(value) -> Period:
    """Return the :class:`Period` for *value*, raising ``ValueError`` if unknown."""
    if isinstance(value, Period):
        return value
    try:
        return Period(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Unsupported period '{value}'.") from None


def week_start_from_name(name: str) -> int:
    try:
        return _WEEK_START_NAMES[str(name).strip().lower()]
    except KeyError:
        raise ValueError(f"Unsupported week start '{name}'.") from None


def calendar_date(value) -> date:
    """Reduce a date, datetime or ISO string to its own calendar date.

    Aware datetimes are not shifted to UTC first: the year, month and day the
    value carries are the date it represents.
    """
    if isinstance(value, datetime):
        return date(value.year, value.month, value.day)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return calendar_date(datetime.fromisoformat(text))
    raise ValueError(f"Unrecognized date value: {value!r}")


def date_key(value) -> str:
    return calendar_date(value).isoformat()


def start_of_day_utc(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def end_of_day_utc(day: date) -> datetime:
    return datetime.combine(
        date(day.year, day.month, day.day), time.max, tzinfo=timezone.utc
    )


def _format_day(day: date) -> str:
    return f"{day:%b} {day.day}, {day.year}"


@dataclass(frozen=True)
class DateWindow:
    """An inclusive range of calendar dates."""

    start: date
    end: date

    def __contains__(self, value) -> bool:
        return self.start <= calendar_date(value) <= self.end

    def to_instants(self) -> Tuple[datetime, datetime]:
        return start_of_day_utc(self.start), end_of_day_utc(self.end)

    def label(self) -> str:
        return f"{_format_day(self.start)} - {_format_day(self.end)}"


def week_window(reference: date, week_start: int = SUNDAY) -> DateWindow:
    reference = calendar_date(reference)
    offset = (reference.weekday() - week_start) % 7
    start = reference - timedelta(days=offset)
    return DateWindow(start, start + timedelta(days=6))


def month_window(month: int, year: int) -> DateWindow:
    """Window for a zero-based *month* index (0 = January)."""
    if not 0 <= month <= 11:
        raise ValueError(f"Month index must be between 0 and 11, got {month}.")
    last_day = calendar.monthrange(year, month + 1)[1]
    return DateWindow(date(year, month + 1, 1), date(year, month + 1, last_day))


def year_window(year: int) -> DateWindow:
    return DateWindow(date(year, 1, 1), date(year, 12, 31))


def resolve_window(
    period,
    *,
    month: int | None = None,
    year: int | None = None,
    reference: date | None = None,
    week_start: int = SUNDAY,
) -> DateWindow:
    """Translate a period descriptor into a concrete :class:`DateWindow`.

    ``month`` and ``year`` default to the current month and year, ``reference``
    to today.
    """
    period = parse_period(period)
    today = date.today()
    if period is Period.WEEKLY:
        window = week_window(reference or today, week_start)
    elif period is Period.MONTHLY:
        window = month_window(
            today.month - 1 if month is None else month,
            today.year if year is None else year,
        )
    else:
        window = year_window(today.year if year is None else year)
    logger.debug("Resolved %s window: %s to %s", period.value, window.start, window.end)
    return window
