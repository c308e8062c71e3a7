from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .calendar.dates import (
    end_of_week,
    entry_day,
    first_day_of_month,
    format_date_for_api,
    format_date_for_display,
    format_date_relative,
    last_day_of_month,
    parse_entry_date,
    start_of_week,
)
from .calendar.engine import (
    create_calendar_month,
    get_day_color,
    get_day_tooltip,
    get_month_stats,
    get_next_month,
    get_previous_month,
    get_weekday_names,
    select_day,
)
from .domain.models import JournalEntry
from .scheduler import build_scheduler, run_entries_refresh_job
from .settings import AppSettings, load_settings
from .storage.db import initialize_database
from .storage.entries import get_source_states, load_entries

BASE_DIR = Path(__file__).resolve().parent
WEB_DIR = BASE_DIR / "web"
TEMPLATES_DIR = WEB_DIR / "templates"
STATIC_DIR = WEB_DIR / "static"

# Neighbouring months of the grid must stay inside the range of datetime.date.
MIN_YEAR = 2
MAX_YEAR = 9998

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def _today(settings: AppSettings) -> date:
    return datetime.now(settings.timezone).date()


def _parse_query_date(value: str | None, *, field_name: str) -> date | None:
    if value is None or not value.strip():
        return None
    try:
        return parse_entry_date(value)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=f"Invalid ISO date for '{field_name}': {value}") from exc


def _resolve_reference_date(settings: AppSettings, year: int | None, month: int | None) -> date:
    if not year or not month:
        return first_day_of_month(_today(settings))
    return date(year, month, 1)


def _load_grid_entries(settings: AppSettings, reference: date) -> list[JournalEntry]:
    # Covers the month of the first displayed day so the stats anchor sees its entries too.
    grid_start = start_of_week(first_day_of_month(reference))
    grid_end = end_of_week(last_day_of_month(reference))
    return load_entries(settings.db_path, start=first_day_of_month(grid_start), end=grid_end)


def _month_query(value: date) -> str:
    return f"?year={value.year}&month={value.month}"


def _entry_row(entry: JournalEntry, settings: AppSettings, today: date) -> dict[str, Any]:
    return {
        "id": entry.id,
        "title": entry.title or "--",
        "content": entry.content,
        "mood": entry.mood,
        "image_count": len(entry.images),
        "is_published": entry.is_published,
        "date_label": format_date_relative(entry.entry_date, today=today, locale=settings.locale),
    }


def _build_calendar_context(
    settings: AppSettings,
    *,
    reference: date,
    selected: date | None,
) -> dict[str, Any]:
    today = _today(settings)
    locale = settings.locale
    entries = _load_grid_entries(settings, reference)
    month = create_calendar_month(reference, entries, today=today, locale=locale)
    select_day(month, selected)

    entries_by_date: dict[date, list[JournalEntry]] = {}
    for entry in entries:
        entries_by_date.setdefault(entry_day(entry), []).append(entry)

    week_rows: list[list[dict[str, Any]]] = []
    for week in month.weeks:
        row: list[dict[str, Any]] = []
        for day in week:
            iso_date = format_date_for_api(day.date)
            row.append(
                {
                    "day_number": day.day_number,
                    "iso_date": iso_date,
                    "style": get_day_color(day),
                    "tooltip": get_day_tooltip(day, locale),
                    "is_current_month": day.is_current_month,
                    "entry_count": len(entries_by_date.get(day.date, [])),
                    "url": f"{_month_query(reference)}&selected={iso_date}",
                }
            )
        week_rows.append(row)

    selected_rows: list[dict[str, Any]] = []
    if selected is not None:
        selected_entries = load_entries(settings.db_path, start=selected, end=selected)
        limit = settings.yaml.calendar.day_preview_limit
        selected_rows = [_entry_row(entry, settings, today) for entry in selected_entries[:limit]]

    stats = get_month_stats(month, entries)
    previous_month = get_previous_month(reference)
    next_month = get_next_month(reference)

    return {
        "calendar_month_name": month.month_name,
        "calendar_weekday_names": get_weekday_names(locale),
        "calendar_weeks": week_rows,
        "calendar_previous_url": _month_query(previous_month),
        "calendar_next_url": _month_query(next_month),
        "calendar_today_url": _month_query(today),
        "calendar_show_stats": settings.yaml.calendar.show_stats,
        "calendar_stats": stats.model_dump(),
        "calendar_selected_label": format_date_for_display(selected, locale) if selected else None,
        "calendar_selected_entries": selected_rows,
        "calendar_has_sources": bool(settings.yaml.entries.sources),
        "calendar_labels": {
            "entries": locale.stats_entries,
            "days": locale.stats_days,
            "rate": locale.stats_rate,
            "no_sources": locale.no_sources,
        },
    }


@asynccontextmanager
async def lifespan(application: FastAPI):
    settings = load_settings()
    initialize_database(settings.db_path)
    run_entries_refresh_job(settings)
    scheduler = build_scheduler(settings)
    scheduler.start()

    application.state.settings = settings
    application.state.scheduler = scheduler
    application.state.started_at_utc = datetime.now(timezone.utc)

    try:
        yield
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=False)


app = FastAPI(title="Dvenki Journal Calendar", version="0.1.0", lifespan=lifespan)
app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")


@app.get("/", response_class=HTMLResponse)
async def calendar_page(
    request: Request,
    year: int | None = Query(default=None, ge=MIN_YEAR, le=MAX_YEAR),
    month: int | None = Query(default=None, ge=1, le=12),
    selected: str | None = None,
) -> HTMLResponse:
    settings = _get_settings(request)
    reference = _resolve_reference_date(settings, year, month)
    selected_date = _parse_query_date(selected, field_name="selected")
    calendar_context = _build_calendar_context(settings, reference=reference, selected=selected_date)

    return templates.TemplateResponse(
        request,
        "calendar.html",
        {
            "title": settings.yaml.ui.title,
            "locale_code": settings.yaml.ui.locale,
            "environment": settings.env.dvenki_env,
            "timezone_name": settings.env.dvenki_timezone,
            **calendar_context,
        },
    )


@app.get("/partials/calendar", response_class=HTMLResponse)
async def partial_calendar(
    request: Request,
    year: int | None = Query(default=None, ge=MIN_YEAR, le=MAX_YEAR),
    month: int | None = Query(default=None, ge=1, le=12),
    selected: str | None = None,
) -> HTMLResponse:
    settings = _get_settings(request)
    reference = _resolve_reference_date(settings, year, month)
    selected_date = _parse_query_date(selected, field_name="selected")
    calendar_context = _build_calendar_context(settings, reference=reference, selected=selected_date)
    return templates.TemplateResponse(request, "components/tile_calendar.html", calendar_context)


@app.get("/api/calendar", response_class=JSONResponse)
async def calendar_api(
    request: Request,
    year: int | None = Query(default=None, ge=MIN_YEAR, le=MAX_YEAR),
    month: int | None = Query(default=None, ge=1, le=12),
) -> JSONResponse:
    settings = _get_settings(request)
    reference = _resolve_reference_date(settings, year, month)
    entries = _load_grid_entries(settings, reference)
    calendar_month = create_calendar_month(
        reference,
        entries,
        today=_today(settings),
        locale=settings.locale,
    )
    stats = get_month_stats(calendar_month, entries)

    return JSONResponse(
        {
            "month": calendar_month.model_dump(mode="json"),
            "stats": stats.model_dump(mode="json"),
            "weekday_names": get_weekday_names(settings.locale),
            "previous": format_date_for_api(get_previous_month(reference)),
            "next": format_date_for_api(get_next_month(reference)),
        }
    )


@app.get("/api/entries", response_class=JSONResponse)
async def entries_api(
    request: Request,
    date_value: str | None = Query(default=None, alias="date"),
    start: str | None = None,
    end: str | None = None,
) -> JSONResponse:
    settings = _get_settings(request)
    target = _parse_query_date(date_value, field_name="date")
    start_date = _parse_query_date(start, field_name="start")
    end_date = _parse_query_date(end, field_name="end")

    if target is not None:
        start_date = end_date = target
    if start_date is None or end_date is None:
        raise HTTPException(status_code=400, detail="Provide either 'date' or both 'start' and 'end'")
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="'start' must not be after 'end'")

    entries = load_entries(settings.db_path, start=start_date, end=end_date)
    return JSONResponse(
        {
            "start": format_date_for_api(start_date),
            "end": format_date_for_api(end_date),
            "count": len(entries),
            "entries": [entry.model_dump(mode="json") for entry in entries],
        }
    )


@app.get("/health", response_class=JSONResponse)
async def health(request: Request) -> JSONResponse:
    settings = _get_settings(request)
    states = get_source_states(settings.db_path)

    return JSONResponse(
        {
            "status": "ok",
            "service": "dvenki-calendar",
            "environment": settings.env.dvenki_env,
            "timezone": settings.env.dvenki_timezone,
            "locale": settings.yaml.ui.locale,
            "scheduler_running": request.app.state.scheduler.running,
            "sources": [
                {
                    "source": state.source,
                    "fetched_at_utc": state.fetched_at.isoformat() if state.fetched_at else None,
                    "entry_count": state.entry_count,
                    "is_stale": state.is_stale(),
                    "error": state.error,
                }
                for state in states
            ],
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        }
    )
