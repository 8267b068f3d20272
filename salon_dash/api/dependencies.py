"""
FastAPI dependencies — DataStore singleton, reference-time parsing.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import HTTPException, Query

from salon_dash.data.store import DataStore

# ---------------------------------------------------------------------------
# Global store singleton (set during startup)
# ---------------------------------------------------------------------------
_store: DataStore | None = None


def set_store(store: DataStore | None) -> None:
    global _store
    _store = store


def get_store() -> DataStore:
    if _store is None:
        raise HTTPException(503, "Server not initialized yet")
    return _store


# ---------------------------------------------------------------------------
# Reference time
# ---------------------------------------------------------------------------

def parse_now(
    now: Optional[str] = Query(None, description="Reference time, ISO-8601 (default: server local time)"),
) -> dt.datetime:
    """Resolve the ``now`` query parameter to a naive local datetime.

    An explicit offset is dropped and the wall-clock reading kept as-is.
    """
    if now is None:
        return dt.datetime.now()
    try:
        parsed = dt.datetime.fromisoformat(now)
    except ValueError:
        raise HTTPException(400, f"Invalid now: {now}")
    return parsed.replace(tzinfo=None)
