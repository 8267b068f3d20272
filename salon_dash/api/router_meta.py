"""
Meta endpoints: health, per-dataset status, manual refresh.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from salon_dash.data.schemas import DatasetKind
from salon_dash.data.store import DataStore
from salon_dash.api.dependencies import get_store
from salon_dash.api.response_models import HealthResponse, StatusResponse, RefreshResponse

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
def health(store: DataStore = Depends(get_store)):
    appointments, accounts = store.snapshot()
    return HealthResponse(
        status="ok",
        appointments=len(appointments),
        accounts=len(accounts),
        loaded=store.is_loaded,
    )


@router.get("/status", response_model=StatusResponse)
def status(store: DataStore = Depends(get_store)):
    return StatusResponse(**store.status())


@router.post("/refresh", response_model=RefreshResponse)
def refresh(store: DataStore = Depends(get_store)):
    """Re-fetch both datasets now, ignoring the staleness window.

    A fetch already in flight for a dataset is joined rather than repeated.
    """
    states = store.refresh_all()
    failed = [kind.value for kind in DatasetKind if states[kind].error is not None]
    return RefreshResponse(
        status="partial" if failed else "ok",
        datasets=StatusResponse(**store.status()),
    )
