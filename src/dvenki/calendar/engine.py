"""Month grid generation and date bucketing for journal entries.

Every function here is pure: nothing reads the system clock, and the
current day is passed in explicitly as ``today`` by the caller.
"""

from __future__ import annotations

import calendar
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta
from typing import Any, Literal, TypeVar

from ..domain.models import CalendarDay, CalendarMonth, MonthStats
from .dates import (
    add_months,
    as_day,
    days_in_month,
    end_of_week,
    entry_day,
    first_day_of_month,
    format_date_for_display,
    is_weekend,
    start_of_week,
)
from .locale import DEFAULT_LOCALE, CalendarLocale

EntryT = TypeVar("EntryT")

DayStyle = Literal["selected", "today", "has-entry", "current-month", "dimmed"]

_MONDAY_FIRST = calendar.Calendar(firstweekday=0)


def _entry_day_counts(entries: Iterable[Any]) -> Counter[date]:
    return Counter(entry_day(entry) for entry in entries)


def _same_month(left: date, right: date) -> bool:
    return left.year == right.year and left.month == right.month


def get_weekday_names(locale: CalendarLocale = DEFAULT_LOCALE) -> list[str]:
    return list(locale.weekday_abbreviations)


def get_month_names(locale: CalendarLocale = DEFAULT_LOCALE) -> list[str]:
    return list(locale.month_names)


def format_month_label(year: int, month: int, locale: CalendarLocale = DEFAULT_LOCALE) -> str:
    return f"{locale.month(month)} {year}"


def create_calendar_month(
    target: date | datetime,
    entries: Iterable[Any] = (),
    *,
    today: date | None = None,
    locale: CalendarLocale = DEFAULT_LOCALE,
) -> CalendarMonth:
    """Build the Monday-first month grid containing ``target``.

    The grid starts on the Monday on or before the 1st and ends on the Sunday
    on or after the last day, so every week holds exactly 7 days. Days are
    flagged with entries by calendar-day equality of ``entry_date``. When
    ``today`` is None no day is flagged as today.
    """
    reference = as_day(target)
    today_day = as_day(today) if today is not None else None
    entry_counts = _entry_day_counts(entries)

    weeks: list[list[CalendarDay]] = [
        [
            CalendarDay(
                date=current,
                is_current_month=_same_month(current, reference),
                is_today=current == today_day,
                has_entry=entry_counts[current] > 0,
                is_selected=False,
                day_number=current.day,
                weekday=locale.weekday(current.weekday()),
            )
            for current in week
        ]
        for week in _MONDAY_FIRST.monthdatescalendar(reference.year, reference.month)
    ]

    return CalendarMonth(
        year=reference.year,
        month=reference.month,
        month_name=format_month_label(reference.year, reference.month, locale),
        weeks=weeks,
        total_days=days_in_month(reference),
    )


def select_day(month: CalendarMonth, selected: date | None) -> CalendarMonth:
    """Mark ``selected`` in an already built grid and clear any other selection."""
    for day in month.days():
        day.is_selected = selected is not None and day.date == selected
    return month


def get_previous_month(value: date | datetime) -> date:
    return add_months(as_day(value), -1)


def get_next_month(value: date | datetime) -> date:
    return add_months(as_day(value), 1)


def get_current_month(today: date) -> date:
    return first_day_of_month(as_day(today))


def has_entries_on_date(value: date | datetime, entries: Iterable[Any]) -> bool:
    target = as_day(value)
    return any(entry_day(entry) == target for entry in entries)


def get_entries_count_on_date(value: date | datetime, entries: Iterable[Any]) -> int:
    target = as_day(value)
    return sum(1 for entry in entries if entry_day(entry) == target)


def get_entries_on_date(value: date | datetime, entries: Iterable[EntryT]) -> list[EntryT]:
    target = as_day(value)
    return [entry for entry in entries if entry_day(entry) == target]


def get_entries_for_month(value: date | datetime, entries: Iterable[EntryT]) -> list[EntryT]:
    target = as_day(value)
    return [entry for entry in entries if _same_month(entry_day(entry), target)]


def get_entries_for_period(
    start: date | datetime,
    end: date | datetime,
    entries: Iterable[EntryT],
) -> list[EntryT]:
    """Entries dated within ``start``..``end``, both ends included."""
    start_day = as_day(start)
    end_day = as_day(end)
    return [entry for entry in entries if start_day <= entry_day(entry) <= end_day]


def _round_percent(numerator: int, denominator: int) -> int:
    # Half-up rounding of numerator / denominator * 100 in integer arithmetic.
    return (200 * numerator + denominator) // (2 * denominator)


def get_month_stats(month: CalendarMonth, entries: Sequence[Any]) -> MonthStats:
    """Summarize a built month grid.

    ``total_entries`` is anchored at the first displayed day of the grid and
    ``days_with_entries`` counts flagged days across the whole grid,
    including leading and trailing days of the neighbouring months.
    """
    anchor = month.weeks[0][0].date
    total_entries = len(get_entries_for_month(anchor, entries))
    days_with_entries = sum(1 for day in month.days() if day.has_entry)
    return MonthStats(
        total_entries=total_entries,
        days_with_entries=days_with_entries,
        completion_rate=_round_percent(days_with_entries, month.total_days),
        total_days=month.total_days,
    )


def get_week_by_date(value: date | datetime) -> list[date]:
    week_start = start_of_week(as_day(value))
    return [week_start + timedelta(days=offset) for offset in range(7)]


def is_current_week(value: date | datetime, *, today: date) -> bool:
    target = as_day(value)
    return start_of_week(today) <= target <= end_of_week(today)


def get_day_color(day: CalendarDay) -> DayStyle:
    if day.is_selected:
        return "selected"
    if day.is_today:
        return "today"
    if day.has_entry:
        return "has-entry"
    if day.is_current_month:
        return "current-month"
    return "dimmed"


def get_day_tooltip(day: CalendarDay, locale: CalendarLocale = DEFAULT_LOCALE) -> str:
    parts: list[str] = []
    if day.is_today:
        parts.append(locale.today)
    if day.has_entry:
        parts.append(locale.has_entries)
    if is_weekend(day.date):
        parts.append(locale.weekend)
    if not parts:
        parts.append(format_date_for_display(day.date, locale))
    return ", ".join(parts)


def get_day_of_week_name(value: date | datetime, locale: CalendarLocale = DEFAULT_LOCALE) -> str:
    return locale.weekday(as_day(value).weekday())


def get_short_day_of_week_name(value: date | datetime, locale: CalendarLocale = DEFAULT_LOCALE) -> str:
    return locale.weekday_short(as_day(value).weekday())
