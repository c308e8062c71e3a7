from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from .adapters.entries import EntriesAdapterError, JsonFileEntriesAdapter, RemoteJsonEntriesAdapter
from .settings import AppSettings
from .storage.entries import prune_sources, record_source_error, replace_source_entries

LOGGER = logging.getLogger(__name__)

ENTRIES_REFRESH_JOB_ID = "entries_refresh_job"


def _build_entries_adapters(settings: AppSettings) -> list[JsonFileEntriesAdapter | RemoteJsonEntriesAdapter]:
    adapters: list[JsonFileEntriesAdapter | RemoteJsonEntriesAdapter] = []
    for source in settings.yaml.entries.sources:
        if source.type == "json":
            if source.path is None:
                raise ValueError("entries source path was missing for type 'json'")

            source_path = source.path
            if not source_path.is_absolute():
                source_path = (settings.project_root / source_path).resolve()

            adapters.append(JsonFileEntriesAdapter(path=source_path, source_name=source.name))
            continue

        if source.type == "json_url":
            if source.url is None:
                raise ValueError("entries source url was missing for type 'json_url'")
            adapters.append(
                RemoteJsonEntriesAdapter(
                    url=source.url,
                    api_key=settings.env.dvenki_entries_api_key,
                    source_name=source.name,
                )
            )
            continue

        raise ValueError(f"Unsupported entries source type: {source.type}")
    return adapters


def _ttl_seconds(settings: AppSettings) -> int:
    return max(settings.yaml.refresh.interval_minutes * 120, 300)


def run_entries_refresh_job(settings: AppSettings) -> dict[str, int]:
    """Reload every configured source into the local snapshot.

    Returns the number of entries stored per source that refreshed
    successfully. A failing source keeps its previous snapshot.
    """
    refreshed_at = datetime.now(timezone.utc)
    ttl_seconds = _ttl_seconds(settings)
    stored: dict[str, int] = {}

    try:
        adapters = _build_entries_adapters(settings)
    except ValueError:
        LOGGER.exception("Entries refresh job configuration failed")
        return stored

    for adapter in adapters:
        try:
            entries = adapter.get_entries()
        except EntriesAdapterError as exc:
            LOGGER.warning("Entries source '%s' failed: %s", adapter.source_name, exc)
            record_source_error(settings.db_path, adapter.source_name, str(exc), ttl_seconds)
            continue
        except Exception:  # pragma: no cover
            LOGGER.exception("Entries source '%s' failed", adapter.source_name)
            record_source_error(settings.db_path, adapter.source_name, "unexpected error", ttl_seconds)
            continue

        stored[adapter.source_name] = replace_source_entries(
            settings.db_path,
            adapter.source_name,
            entries,
            ttl_seconds,
            fetched_at=refreshed_at,
        )

    prune_sources(settings.db_path, keep=[adapter.source_name for adapter in adapters])
    LOGGER.info(
        "Entries refresh job stored %d entries from %d/%d sources at %s",
        sum(stored.values()),
        len(stored),
        len(adapters),
        refreshed_at,
    )
    return stored


def build_scheduler(settings: AppSettings) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone=settings.timezone)
    scheduler.add_job(
        run_entries_refresh_job,
        "interval",
        kwargs={"settings": settings},
        minutes=settings.yaml.refresh.interval_minutes,
        jitter=settings.yaml.refresh.jitter_seconds,
        id=ENTRIES_REFRESH_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=120,
    )
    return scheduler
