"""
Pydantic response schemas for the API.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    appointments: int
    accounts: int
    loaded: bool


class DatasetError(BaseModel):
    status: int
    message: str


class Diagnostic(BaseModel):
    code: str
    message: str
    row: Optional[int] = None


class DatasetStatus(BaseModel):
    loaded: bool
    loading: bool
    stale: bool
    records: int
    fetched_at: Optional[str] = None
    error: Optional[DatasetError] = None
    diagnostics: list[Diagnostic] = []


class StatusResponse(BaseModel):
    appointments: DatasetStatus
    accounts: DatasetStatus


class RefreshResponse(BaseModel):
    status: str
    datasets: StatusResponse
