"""
test_domain_models.py
---------------------
Unit tests for the journal entry and calendar models.
"""
from datetime import date

import pytest
from pydantic import ValidationError

from dvenki.domain.models import CalendarDay, CalendarMonth, JournalEntry, MonthStats


class TestJournalEntry:
    """Test JournalEntry validation."""

    def test_minimal_entry(self):
        """Only entry_date is required."""
        entry = JournalEntry.model_validate({"entry_date": "2024-03-15"})
        assert entry.entry_date == date(2024, 3, 15)
        assert entry.content == ""
        assert entry.images == []
        assert entry.is_published is False
        assert entry.id is None

    def test_datetime_string_normalized(self):
        """Timestamps are reduced to their date."""
        entry = JournalEntry.model_validate({"entry_date": "2024-03-15T19:30:00+03:00"})
        assert entry.entry_date == date(2024, 3, 15)

    def test_null_images_become_empty(self):
        """The data API sends null for missing image lists."""
        entry = JournalEntry.model_validate({"entry_date": "2024-03-15", "images": None})
        assert entry.images == []

    def test_identifiers_are_strings(self):
        """Numeric identifiers are kept as text and blanks become None."""
        entry = JournalEntry.model_validate({"entry_date": "2024-03-15", "id": 42, "journal_id": "  "})
        assert entry.id == "42"
        assert entry.journal_id is None

    def test_blank_title(self):
        """Blank titles are treated as missing."""
        entry = JournalEntry.model_validate({"entry_date": "2024-03-15", "title": "   "})
        assert entry.title is None

    @pytest.mark.parametrize("mood", [0, 6])
    def test_mood_range(self, mood):
        """Mood is 1..5."""
        with pytest.raises(ValidationError):
            JournalEntry.model_validate({"entry_date": "2024-03-15", "mood": mood})

    def test_invalid_date(self):
        """Malformed dates fail validation."""
        with pytest.raises(ValidationError):
            JournalEntry.model_validate({"entry_date": "15/03/2024"})

    def test_extra_fields_ignored(self):
        """Unknown columns from the data API are dropped."""
        entry = JournalEntry.model_validate({"entry_date": "2024-03-15", "created_at": "2024-03-15T10:00:00Z"})
        assert "created_at" not in entry.model_dump()

    def test_json_dump_uses_iso_date(self):
        """Serialized dates use the API format."""
        entry = JournalEntry.model_validate({"entry_date": "2024-03-05"})
        assert entry.model_dump(mode="json")["entry_date"] == "2024-03-05"


class TestCalendarModels:
    """Test CalendarDay and CalendarMonth invariants."""

    def _day(self, value, **flags):
        return CalendarDay(
            date=value,
            is_current_month=True,
            day_number=value.day,
            weekday="x",
            **flags,
        )

    def test_day_number_must_match(self):
        """day_number mirrors the date."""
        with pytest.raises(ValidationError):
            CalendarDay(date=date(2024, 3, 15), is_current_month=True, day_number=14, weekday="x")

    def test_week_length_enforced(self):
        """Weeks hold exactly seven days."""
        week = [self._day(date(2024, 3, day)) for day in range(4, 10)]
        with pytest.raises(ValidationError):
            CalendarMonth(year=2024, month=3, month_name="Март 2024", weeks=[week], total_days=31)

    def test_days_flattens(self):
        """days() returns the grid in order."""
        week = [self._day(date(2024, 3, day)) for day in range(4, 11)]
        month = CalendarMonth(year=2024, month=3, month_name="Март 2024", weeks=[week, week], total_days=31)
        assert len(month.days()) == 14
        assert month.days()[0].date == date(2024, 3, 4)

    def test_selection_is_mutable(self):
        """Callers set is_selected after generation."""
        day = self._day(date(2024, 3, 4))
        day.is_selected = True
        assert day.is_selected is True

    def test_month_stats_bounds(self):
        """total_days must be a real month length."""
        with pytest.raises(ValidationError):
            MonthStats(total_entries=0, days_with_entries=0, completion_rate=0, total_days=27)
