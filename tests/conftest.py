"""
conftest.py
-----------
Shared pytest fixtures for the journal calendar tests.

Provides fixtures for:
- Sample entry records and entry files
- A temporary YAML config plus environment pointing at it
- Loaded application settings backed by a temporary database
"""
import json
from datetime import date

import pytest
import yaml

from dvenki.domain.models import JournalEntry
from dvenki.settings import load_settings


# ----- Entry Fixtures -----

@pytest.fixture
def sample_records():
    """Raw entry records as a hosted data API would return them."""
    return [
        {
            "id": "e-feb",
            "journal_id": "j-1",
            "title": "Конец февраля",
            "content": "Последние холода.",
            "entry_date": "2024-02-27",
            "mood": 2,
        },
        {
            "id": "e-001",
            "journal_id": "j-1",
            "title": "Первый день",
            "content": "Начала вести журнал.",
            "entry_date": "2024-03-01",
            "mood": 4,
        },
        {
            "id": "e-002",
            "journal_id": "j-1",
            "title": "Прогулка",
            "content": "Долгая прогулка.",
            "entry_date": "2024-03-15",
            "mood": 5,
            "images": ["entry-images/e-002/river.jpg"],
        },
        {
            "id": "e-003",
            "journal_id": "j-2",
            "title": "Тренировка",
            "content": "Пробежка 5 км.",
            "entry_date": "2024-03-15T19:30:00+03:00",
            "images": None,
        },
    ]


@pytest.fixture
def sample_entries(sample_records):
    """Sample records validated into JournalEntry models."""
    return [JournalEntry.model_validate(record) for record in sample_records]


@pytest.fixture
def march_entries():
    """Plain mapping entries in March 2024."""
    return [
        {"entry_date": "2024-03-15"},
        {"entry_date": "2024-03-15"},
        {"entry_date": "2024-03-20"},
    ]


@pytest.fixture
def entries_file(tmp_path, sample_records):
    """JSON file holding the sample records."""
    path = tmp_path / "entries.json"
    path.write_text(json.dumps(sample_records, ensure_ascii=False), encoding="utf-8")
    return path


# ----- Settings Fixtures -----

@pytest.fixture
def config_data(entries_file):
    """YAML config mapping with one local JSON source."""
    return {
        "ui": {"title": "Test Journal", "locale": "ru"},
        "refresh": {"interval_minutes": 5, "jitter_seconds": 0},
        "calendar": {"day_preview_limit": 10, "show_stats": True},
        "entries": {
            "sources": [
                {"type": "json", "path": str(entries_file), "name": "Local"},
            ]
        },
    }


@pytest.fixture
def config_file(tmp_path, config_data):
    """Config file written from config_data."""
    path = tmp_path / "dvenki.yaml"
    path.write_text(yaml.safe_dump(config_data, allow_unicode=True), encoding="utf-8")
    return path


@pytest.fixture
def app_env(monkeypatch, tmp_path, config_file):
    """Point the environment at the temporary config and database."""
    monkeypatch.setenv("DVENKI_ENV", "test")
    monkeypatch.setenv("DVENKI_TIMEZONE", "Europe/Moscow")
    monkeypatch.setenv("DVENKI_CONFIG_PATH", str(config_file))
    monkeypatch.setenv("DVENKI_DB_PATH", str(tmp_path / "db" / "dvenki.db"))
    load_settings.cache_clear()
    yield tmp_path
    load_settings.cache_clear()


@pytest.fixture
def app_settings(app_env):
    """Settings loaded from the temporary environment."""
    return load_settings()


@pytest.fixture
def db_path(tmp_path):
    """Path for a throwaway SQLite database."""
    return tmp_path / "store" / "entries.db"


@pytest.fixture
def reference_today():
    """Fixed 'today' used wherever the current day matters."""
    return date(2024, 3, 15)
