from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from pydantic import ValidationError

from ...domain.models import JournalEntry
from .base import EntriesAdapterError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10
USER_AGENT = "dvenki-calendar/0.1"


def _read_json_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise EntriesAdapterError(f"Unable to read entries file: {path}") from exc


def _build_request(url: str, api_key: str | None) -> Request:
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if api_key:
        # Hosted REST data APIs expect the key both as apikey and as a bearer token.
        headers["apikey"] = api_key
        headers["Authorization"] = f"Bearer {api_key}"
    return Request(url, headers=headers)


def _fetch_json_text(url: str, api_key: str | None) -> str:
    request = _build_request(url, api_key)
    try:
        with urlopen(request, timeout=DEFAULT_TIMEOUT_SECONDS) as response:
            payload_bytes = response.read()
    except (HTTPError, URLError, TimeoutError, OSError) as exc:
        raise EntriesAdapterError(f"Unable to fetch entries URL: {url}") from exc

    try:
        return payload_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise EntriesAdapterError(f"Unable to decode entries payload from URL: {url}") from exc


def _extract_records(raw_text: str, *, source_name: str) -> list[Any]:
    try:
        payload = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise EntriesAdapterError(f"Entries payload from '{source_name}' is not valid JSON") from exc

    if isinstance(payload, dict):
        payload = payload.get("entries", payload.get("data"))
    if not isinstance(payload, list):
        raise EntriesAdapterError(
            f"Entries payload from '{source_name}' must be a list or an object with an 'entries' list"
        )
    return payload


def _parse_entries(raw_text: str, *, source_name: str) -> list[JournalEntry]:
    entries: list[JournalEntry] = []
    skipped = 0
    for index, record in enumerate(_extract_records(raw_text, source_name=source_name)):
        if not isinstance(record, dict):
            skipped += 1
            continue
        try:
            entries.append(JournalEntry.model_validate(record))
        except (ValidationError, ValueError, TypeError) as exc:
            skipped += 1
            LOGGER.warning("Skipping entry #%d from '%s': %s", index, source_name, exc)

    if skipped:
        LOGGER.info("Loaded %d entries from '%s' (%d skipped)", len(entries), source_name, skipped)
    entries.sort(key=lambda entry: (entry.entry_date, entry.id or ""))
    return entries


class JsonFileEntriesAdapter:
    def __init__(self, *, path: Path, source_name: str | None = None) -> None:
        self._path = Path(path)
        self._source_name = (source_name or "").strip() or self._path.stem or self._path.name

    @property
    def source_name(self) -> str:
        return self._source_name

    def get_entries(self) -> list[JournalEntry]:
        raw_text = _read_json_text(self._path)
        return _parse_entries(raw_text, source_name=self._source_name)


class RemoteJsonEntriesAdapter:
    def __init__(
        self,
        *,
        url: str,
        api_key: str | None = None,
        source_name: str | None = None,
    ) -> None:
        self._url = url.strip()
        self._api_key = api_key
        parsed = urlparse(self._url)
        default_source_name = parsed.netloc or "Remote entries"
        self._source_name = (source_name or "").strip() or default_source_name

    @property
    def source_name(self) -> str:
        return self._source_name

    def get_entries(self) -> list[JournalEntry]:
        raw_text = _fetch_json_text(self._url, self._api_key)
        return _parse_entries(raw_text, source_name=self._source_name)
