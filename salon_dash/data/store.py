"""
DataStore — cached appointment and account batches with a refresh policy.

Each dataset is fetched independently, served from cache inside its
staleness window, re-fetched on a polling interval, and replaced atomically.
Concurrent refreshes of the same dataset collapse into one in-flight fetch.
A failed fetch keeps the previous batch and records the error next to it.
"""
from __future__ import annotations

import datetime as dt
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, Optional

from salon_dash.config import APPOINTMENTS_URL, ACCOUNTS_URL, REFRESH_INTERVAL, STALE_AFTER
from salon_dash.data.loader import parse_appointments, parse_monthly_accounts
from salon_dash.data.schemas import (
    Appointment, MonthlyAccount, DatasetKind, IngestResult, ParseDiagnostic,
)
from salon_dash.data.transport import TransportError, fetch_csv


@dataclass(frozen=True)
class DatasetState:
    """Last known batch for one dataset plus the outcome of the latest fetch."""
    kind: DatasetKind
    source: str
    records: tuple = ()
    diagnostics: tuple[ParseDiagnostic, ...] = ()
    fetched_at: Optional[float] = None          # clock() of last successful fetch
    attempted_at: Optional[float] = None        # clock() of last fetch, successful or not
    fetched_at_wall: Optional[dt.datetime] = None
    error: Optional[TransportError] = None

    @property
    def loaded(self) -> bool:
        return self.fetched_at is not None


_PARSERS: dict[DatasetKind, Callable[[str], IngestResult]] = {
    DatasetKind.APPOINTMENTS: parse_appointments,
    DatasetKind.ACCOUNTS: parse_monthly_accounts,
}


class DataStore:
    """In-memory batches with per-dataset staleness, polling and de-duplication."""

    def __init__(
        self,
        appointments_url: str = APPOINTMENTS_URL,
        accounts_url: str = ACCOUNTS_URL,
        *,
        refresh_interval: float = REFRESH_INTERVAL,
        stale_after: float = STALE_AFTER,
        fetcher: Callable[[str], str] = fetch_csv,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.refresh_interval = refresh_interval
        self.stale_after = stale_after
        self._fetcher = fetcher
        self._clock = clock
        self._states: dict[DatasetKind, DatasetState] = {
            DatasetKind.APPOINTMENTS: DatasetState(DatasetKind.APPOINTMENTS, appointments_url),
            DatasetKind.ACCOUNTS: DatasetState(DatasetKind.ACCOUNTS, accounts_url),
        }
        self._lock = threading.Lock()
        self._inflight: dict[DatasetKind, Future] = {}
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> "DataStore":
        """Fetch both datasets once."""
        print("Loading salon data...")
        self.refresh_all()
        for kind, state in self._states.items():
            if state.error is not None:
                print(f"  {kind.value}: unavailable ({state.error})")
            else:
                print(f"  {kind.value}: {len(state.records):,} records")
        return self

    def _fetch(self, kind: DatasetKind) -> DatasetState:
        state = self._states[kind]
        try:
            text = self._fetcher(state.source)
        except TransportError as exc:
            print(f"  Warning: {kind.value} fetch failed — {exc}")
            new_state = replace(state, error=exc, attempted_at=self._clock())
        else:
            batch = _PARSERS[kind](text)
            stamp = self._clock()
            new_state = replace(
                state,
                records=batch.records,
                diagnostics=batch.diagnostics,
                fetched_at=stamp,
                attempted_at=stamp,
                fetched_at_wall=dt.datetime.now(),
                error=None,
            )
        with self._lock:
            self._states[kind] = new_state
        return new_state

    def refresh(self, kind: DatasetKind) -> DatasetState:
        """Fetch *kind* now, joining a fetch that is already in flight."""
        with self._lock:
            future = self._inflight.get(kind)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[kind] = future

        if not owner:
            return future.result()

        try:
            state = self._fetch(kind)
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(state)
        finally:
            with self._lock:
                self._inflight.pop(kind, None)
        return state

    def refresh_all(self) -> dict[DatasetKind, DatasetState]:
        """Manual refresh: both datasets, in parallel, ignoring staleness."""
        with ThreadPoolExecutor(max_workers=len(self._states)) as pool:
            futures = {kind: pool.submit(self.refresh, kind) for kind in self._states}
            return {kind: f.result() for kind, f in futures.items()}

    def get(self, kind: DatasetKind) -> DatasetState:
        """Cached state while fresh, otherwise a refreshed one.

        A failed fetch is not retried here until the staleness window has
        passed since the attempt; polling and manual refresh still retry.
        """
        state = self._states[kind]
        if self._within_window(state.attempted_at):
            return state
        return self.refresh(kind)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _poll(self, kind: DatasetKind) -> None:
        while not self._stop.wait(self.refresh_interval):
            try:
                self.refresh(kind)
            except Exception as exc:
                print(f"  Warning: {kind.value} refresh crashed: {exc}")

    def start_polling(self) -> None:
        """Start one daemon thread per dataset, each on its own interval."""
        if self._threads:
            return
        self._stop.clear()
        for kind in self._states:
            t = threading.Thread(target=self._poll, args=(kind,), name=f"poll-{kind.value}", daemon=True)
            t.start()
            self._threads.append(t)

    def stop_polling(self, timeout: float = 5.0) -> None:
        self._stop.set()
        for t in self._threads:
            t.join(timeout)
        self._threads = []

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def state(self, kind: DatasetKind) -> DatasetState:
        return self._states[kind]

    def _within_window(self, stamp: Optional[float]) -> bool:
        return stamp is not None and self._clock() - stamp < self.stale_after

    def is_fresh(self, kind: DatasetKind) -> bool:
        return self._within_window(self._states[kind].fetched_at)

    def is_loading(self, kind: DatasetKind) -> bool:
        with self._lock:
            return kind in self._inflight

    @property
    def is_loaded(self) -> bool:
        """True once at least one dataset has a batch."""
        return any(s.loaded for s in self._states.values())

    def snapshot(self) -> tuple[tuple[Appointment, ...], tuple[MonthlyAccount, ...]]:
        """Current (appointments, accounts) batches; either may be empty."""
        with self._lock:
            return (
                self._states[DatasetKind.APPOINTMENTS].records,
                self._states[DatasetKind.ACCOUNTS].records,
            )

    def status(self) -> dict[str, dict]:
        """Per-dataset load/error summary for the presentation layer."""
        result = {}
        for kind, s in self._states.items():
            result[kind.value] = {
                "loaded": s.loaded,
                "loading": self.is_loading(kind),
                "stale": not self.is_fresh(kind),
                "records": len(s.records),
                "fetched_at": s.fetched_at_wall.isoformat(timespec="seconds") if s.fetched_at_wall else None,
                "error": {"status": s.error.status, "message": s.error.message} if s.error else None,
                "diagnostics": [d.to_dict() for d in s.diagnostics],
            }
        return result
