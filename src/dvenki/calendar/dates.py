from __future__ import annotations

import calendar
import math
from collections.abc import Mapping
from datetime import date, datetime, timedelta
from typing import Any

from .locale import DEFAULT_LOCALE, CalendarLocale

API_DATE_FORMAT = "%Y-%m-%d"


def parse_entry_date(value: date | datetime | str) -> date:
    """Normalize an ``entry_date`` value to a calendar date.

    Accepts ``date`` and ``datetime`` objects and ISO 8601 date or datetime
    strings. Datetimes keep the wall-clock date they were written with; no
    timezone conversion is applied. Malformed strings raise ``ValueError``.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise TypeError(f"Unsupported entry_date value: {value!r}")

    text = value.strip()
    if len(text) == 10:
        return date.fromisoformat(text)
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    return datetime.fromisoformat(text).date()


def format_date_for_api(value: date) -> str:
    return value.strftime(API_DATE_FORMAT)


def entry_day(entry: Any) -> date:
    """Return the calendar day of an entry-like value.

    An entry-like value is a mapping with an ``"entry_date"`` key or any
    object exposing an ``entry_date`` attribute.
    """
    if isinstance(entry, Mapping):
        raw_value = entry["entry_date"]
    else:
        raw_value = entry.entry_date
    return parse_entry_date(raw_value)


def as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def is_same_day(left: date | datetime | str, right: date | datetime | str) -> bool:
    return parse_entry_date(left) == parse_entry_date(right)


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=days)


def days_in_month(value: date) -> int:
    return calendar.monthrange(value.year, value.month)[1]


def first_day_of_month(value: date) -> date:
    return value.replace(day=1)


def last_day_of_month(value: date) -> date:
    return value.replace(day=days_in_month(value))


def add_months(value: date, months: int) -> date:
    """Shift by whole calendar months, clamping the day to the target month."""
    month_index = value.year * 12 + (value.month - 1) + months
    year, month_zero_based = divmod(month_index, 12)
    month = month_zero_based + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def start_of_week(value: date) -> date:
    return value - timedelta(days=value.weekday())


def end_of_week(value: date) -> date:
    return start_of_week(value) + timedelta(days=6)


def is_weekend(value: date) -> bool:
    return value.weekday() >= 5


def get_week_number(value: date) -> int:
    """Simple week-of-year number counted from January 1st.

    Not an ISO week number: the week containing January 1st is week 1
    regardless of which weekday it falls on, with weeks starting on Sunday.
    """
    start_of_year = date(value.year, 1, 1)
    elapsed_days = (value - start_of_year).days
    # Sunday-based weekday of January 1st (Sunday == 0).
    first_weekday = (start_of_year.weekday() + 1) % 7
    return math.ceil((elapsed_days + first_weekday + 1) / 7)


def format_date_short(value: date) -> str:
    return value.strftime("%d.%m.%Y")


def format_date_for_display(value: date, locale: CalendarLocale = DEFAULT_LOCALE) -> str:
    return f"{value.day:02d} {locale.month_genitive(value.month)} {value.year}"


def format_day_and_month(value: date, locale: CalendarLocale = DEFAULT_LOCALE) -> str:
    return f"{value.day:02d} {locale.month_genitive(value.month)}"


def format_date_relative(
    value: date | datetime | str,
    *,
    today: date,
    locale: CalendarLocale = DEFAULT_LOCALE,
) -> str:
    target = parse_entry_date(value)
    if target == today:
        return locale.today
    if target == today - timedelta(days=1):
        return locale.yesterday
    if start_of_week(today) <= target <= end_of_week(today):
        return locale.weekday(target.weekday())
    if target.year == today.year:
        return format_day_and_month(target, locale)
    return format_date_for_display(target, locale)
