"""
Dashboard endpoints — KPIs + charts, today's agenda, raw batches, Excel export.
"""
from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse, JSONResponse

from salon_dash.config import MONTHLY_GOAL, REPORTS_FOLDER
from salon_dash.data.schemas import DatasetKind
from salon_dash.data.store import DataStore
from salon_dash.api.dependencies import get_store, parse_now
from salon_dash.analytics.common import sanitize_for_json
from salon_dash.analytics.dashboard import build_dashboard, today_agenda
from salon_dash.reports import daily_report

router = APIRouter(prefix="/api", tags=["dashboard"])


def _safe_json(data: dict) -> JSONResponse:
    """Return a JSONResponse with all NaN/Inf values cleaned."""
    return JSONResponse(content=sanitize_for_json(data))


def _output_path(name: str) -> Path:
    REPORTS_FOLDER.mkdir(parents=True, exist_ok=True)
    return REPORTS_FOLDER / name


def _current(store: DataStore):
    """Serve both batches, refreshing any dataset past its staleness window."""
    appointments = store.get(DatasetKind.APPOINTMENTS).records
    accounts = store.get(DatasetKind.ACCOUNTS).records
    return appointments, accounts


@router.get("/dashboard")
def dashboard(
    store: DataStore = Depends(get_store),
    now: dt.datetime = Depends(parse_now),
):
    """KPI cards, chart series and agenda, with per-dataset load/error state."""
    appointments, accounts = _current(store)
    data = build_dashboard(appointments, accounts, now, monthly_goal=MONTHLY_GOAL)
    data["datasets"] = store.status()
    return _safe_json(data)


@router.get("/appointments/today")
def appointments_today(
    search: Optional[str] = Query(None, description="Filter by client, service or status"),
    store: DataStore = Depends(get_store),
    now: dt.datetime = Depends(parse_now),
):
    appointments, _ = _current(store)
    rows = today_agenda(appointments, now, search)
    return _safe_json({"date": now.date().isoformat(), "count": len(rows), "appointments": rows})


@router.get("/appointments")
def appointments(store: DataStore = Depends(get_store)):
    records, _ = _current(store)
    return _safe_json({"count": len(records), "appointments": [r.to_dict() for r in records]})


@router.get("/accounts")
def accounts(store: DataStore = Depends(get_store)):
    _, records = _current(store)
    return _safe_json({"count": len(records), "accounts": [r.to_dict() for r in records]})


@router.get("/report/excel")
def report_excel(
    store: DataStore = Depends(get_store),
    now: dt.datetime = Depends(parse_now),
):
    """Download the day's report as an Excel workbook (one file per day, overwritten)."""
    appointments, accounts = _current(store)
    out = daily_report.generate_excel(
        appointments, accounts, _output_path(f"Informe_{now:%Y-%m-%d}.xlsx"), now,
        monthly_goal=MONTHLY_GOAL,
    )
    return FileResponse(
        path=str(out),
        filename=out.name,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
