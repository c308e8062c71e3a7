from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..calendar.dates import parse_entry_date


class JournalEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    journal_id: str | None = None
    user_id: str | None = None
    title: str | None = None
    content: str = ""
    entry_date: date
    mood: int | None = Field(default=None, ge=1, le=5)
    images: list[str] = Field(default_factory=list)
    is_published: bool = False

    @field_validator("id", "journal_id", "user_id", mode="before")
    @classmethod
    def validate_identifier(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        return text or None

    @field_validator("entry_date", mode="before")
    @classmethod
    def validate_entry_date(cls, value: Any) -> date:
        return parse_entry_date(value)

    @field_validator("images", mode="before")
    @classmethod
    def validate_images(cls, value: Any) -> list[str]:
        if value is None:
            return []
        return value


class CalendarDay(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: date
    is_current_month: bool
    is_today: bool = False
    has_entry: bool = False
    is_selected: bool = False
    day_number: int = Field(ge=1, le=31)
    weekday: str

    @model_validator(mode="after")
    def validate_day_number(self) -> CalendarDay:
        if self.day_number != self.date.day:
            raise ValueError("calendar day_number must match the day of its date")
        return self


class CalendarMonth(BaseModel):
    model_config = ConfigDict(extra="ignore")

    year: int
    month: int = Field(ge=1, le=12)
    month_name: str
    weeks: list[list[CalendarDay]] = Field(default_factory=list)
    total_days: int = Field(ge=28, le=31)

    @field_validator("weeks")
    @classmethod
    def validate_weeks(cls, value: list[list[CalendarDay]]) -> list[list[CalendarDay]]:
        for week in value:
            if len(week) != 7:
                raise ValueError("calendar weeks must contain exactly 7 days")
        return value

    def days(self) -> list[CalendarDay]:
        return [day for week in self.weeks for day in week]


class MonthStats(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total_entries: int = Field(ge=0)
    days_with_entries: int = Field(ge=0)
    completion_rate: int = Field(ge=0)
    total_days: int = Field(ge=28, le=31)
