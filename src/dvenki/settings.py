from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .calendar.locale import CalendarLocale, get_locale

PROJECT_ROOT = Path(__file__).resolve().parents[2]


class UiSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = "Dvenki"
    locale: Literal["ru", "en"] = "ru"

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("ui.title must not be empty")
        return text


class RefreshSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    interval_minutes: int = Field(default=10, ge=1, le=60)
    jitter_seconds: int = Field(default=15, ge=0, le=300)


class CalendarSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    day_preview_limit: int = Field(default=5, ge=1, le=50)
    show_stats: bool = True


class EntrySourceSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["json", "json_url"] = "json"
    path: Path | None = None
    url: str | None = None
    name: str | None = None

    @field_validator("path")
    @classmethod
    def validate_path(cls, value: Path | None) -> Path | None:
        if value is None:
            return None
        text = str(value).strip()
        if not text:
            raise ValueError("entries.sources[].path must not be empty")
        return Path(text)

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            raise ValueError("entries.sources[].url must not be empty")

        parsed = urlparse(text)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("entries.sources[].url must be an absolute http(s) URL")
        return text

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        return text or None

    @model_validator(mode="after")
    def validate_source_fields(self) -> EntrySourceSettings:
        if self.type == "json":
            if self.path is None:
                raise ValueError("entries.sources[].path is required when type is 'json'")
            if self.url is not None:
                raise ValueError("entries.sources[].url is not allowed when type is 'json'")
            return self

        if self.type == "json_url":
            if self.url is None:
                raise ValueError("entries.sources[].url is required when type is 'json_url'")
            if self.path is not None:
                raise ValueError("entries.sources[].path is not allowed when type is 'json_url'")
            return self

        raise ValueError(f"Unsupported entries source type: {self.type}")


class EntriesSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sources: list[EntrySourceSettings] = Field(default_factory=list)


class DvenkiYamlSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ui: UiSettings = Field(default_factory=UiSettings)
    refresh: RefreshSettings = Field(default_factory=RefreshSettings)
    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    entries: EntriesSettings = Field(default_factory=EntriesSettings)


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    dvenki_env: Literal["dev", "test", "prod"] = "dev"
    dvenki_timezone: str = "Europe/Moscow"
    dvenki_config_path: Path = Path("config/dvenki.yaml")
    dvenki_db_path: Path = Path("data/dvenki.db")
    dvenki_entries_api_key: str | None = None

    @field_validator("dvenki_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value


class AppSettings(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    env: EnvSettings
    yaml: DvenkiYamlSettings
    project_root: Path
    config_path: Path
    db_path: Path
    timezone: ZoneInfo

    @property
    def locale(self) -> CalendarLocale:
        return get_locale(self.yaml.ui.locale)


def _resolve_project_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


def _load_yaml_settings(path: Path) -> DvenkiYamlSettings:
    if not path.exists():
        raise FileNotFoundError(f"Dvenki config file not found: {path}")

    raw_config = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ValueError("Dvenki config must be a YAML mapping/object at the top level")
    return DvenkiYamlSettings.model_validate(raw_config)


@lru_cache(maxsize=1)
def load_settings() -> AppSettings:
    env = EnvSettings()
    config_path = _resolve_project_path(env.dvenki_config_path)
    db_path = _resolve_project_path(env.dvenki_db_path)
    yaml_settings = _load_yaml_settings(config_path)
    return AppSettings(
        env=env,
        yaml=yaml_settings,
        project_root=PROJECT_ROOT,
        config_path=config_path,
        db_path=db_path,
        timezone=ZoneInfo(env.dvenki_timezone),
    )
