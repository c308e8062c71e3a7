from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Iterable, Sequence

from ..calendar.dates import format_date_for_api
from ..domain.models import JournalEntry
from .db import open_db

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SourceState:
    source: str
    fetched_at: datetime | None
    ttl_seconds: int
    entry_count: int
    error: str | None

    def is_stale(self, now: datetime | None = None) -> bool:
        if self.fetched_at is None:
            return True
        reference = now or datetime.now(timezone.utc)
        return (reference - self.fetched_at).total_seconds() > self.ttl_seconds


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_datetime(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_datetime(value: str | None) -> datetime | None:
    if value is None:
        return None
    return _normalize_datetime(datetime.fromisoformat(value))


def replace_source_entries(
    db_path: Path,
    source: str,
    entries: Iterable[JournalEntry],
    ttl_seconds: int,
    *,
    fetched_at: datetime | None = None,
) -> int:
    """Replace the stored snapshot of one source and clear its error."""
    if ttl_seconds < 0:
        raise ValueError("ttl_seconds must be >= 0")

    record_time = _normalize_datetime(fetched_at) if fetched_at is not None else _utc_now()
    rows = [
        (
            source,
            position,
            entry.id,
            format_date_for_api(entry.entry_date),
            entry.model_dump_json(),
        )
        for position, entry in enumerate(entries)
    ]

    with open_db(db_path) as connection:
        with connection:
            connection.execute("DELETE FROM journal_entries WHERE source = ?", (source,))
            connection.executemany(
                """
                INSERT INTO journal_entries (source, position, entry_id, entry_date, json)
                VALUES (?, ?, ?, ?, ?)
                """,
                rows,
            )
            connection.execute(
                """
                INSERT INTO source_state (source, fetched_at, ttl_seconds, entry_count, error)
                VALUES (?, ?, ?, ?, NULL)
                ON CONFLICT(source) DO UPDATE SET
                    fetched_at=excluded.fetched_at,
                    ttl_seconds=excluded.ttl_seconds,
                    entry_count=excluded.entry_count,
                    error=NULL
                """,
                (source, record_time.isoformat(), ttl_seconds, len(rows)),
            )
    return len(rows)


def record_source_error(db_path: Path, source: str, error: str, ttl_seconds: int) -> None:
    """Remember a failed refresh without touching the last good snapshot."""
    with open_db(db_path) as connection:
        connection.execute(
            """
            INSERT INTO source_state (source, fetched_at, ttl_seconds, entry_count, error)
            VALUES (?, NULL, ?, 0, ?)
            ON CONFLICT(source) DO UPDATE SET error=excluded.error
            """,
            (source, ttl_seconds, error),
        )
        connection.commit()


def load_entries(
    db_path: Path,
    *,
    start: date | None = None,
    end: date | None = None,
    sources: Sequence[str] | None = None,
) -> list[JournalEntry]:
    """Load stored entries ordered by date; ``start`` and ``end`` are inclusive."""
    clauses: list[str] = []
    params: list[str] = []
    if start is not None:
        clauses.append("entry_date >= ?")
        params.append(format_date_for_api(start))
    if end is not None:
        clauses.append("entry_date <= ?")
        params.append(format_date_for_api(end))
    if sources is not None:
        if not sources:
            return []
        placeholders = ", ".join("?" for _ in sources)
        clauses.append(f"source IN ({placeholders})")
        params.extend(sources)

    query = "SELECT json FROM journal_entries"
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    query += " ORDER BY entry_date ASC, source ASC, position ASC"

    with open_db(db_path) as connection:
        rows = connection.execute(query, params).fetchall()

    return [JournalEntry.model_validate(json.loads(row["json"])) for row in rows]


def get_source_states(db_path: Path) -> list[SourceState]:
    with open_db(db_path) as connection:
        rows = connection.execute(
            "SELECT source, fetched_at, ttl_seconds, entry_count, error FROM source_state ORDER BY source ASC"
        ).fetchall()

    return [
        SourceState(
            source=str(row["source"]),
            fetched_at=_parse_datetime(row["fetched_at"]),
            ttl_seconds=int(row["ttl_seconds"]),
            entry_count=int(row["entry_count"]),
            error=row["error"],
        )
        for row in rows
    ]


def prune_sources(db_path: Path, *, keep: Iterable[str]) -> int:
    """Drop snapshots of sources that are no longer configured."""
    keep_set = set(keep)
    deleted = 0

    with open_db(db_path) as connection:
        rows = connection.execute("SELECT source FROM source_state").fetchall()
        for row in rows:
            source = str(row["source"])
            if source in keep_set:
                continue
            connection.execute("DELETE FROM journal_entries WHERE source = ?", (source,))
            connection.execute("DELETE FROM source_state WHERE source = ?", (source,))
            deleted += 1
        connection.commit()

    if deleted:
        LOGGER.info("Pruned %d unconfigured entry sources", deleted)
    return deleted
