"""
Salon Dash — FastAPI app factory with startup data loading and polling.
"""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from salon_dash.data.store import DataStore
from salon_dash.api.dependencies import set_store
from salon_dash.api.router_meta import router as meta_router
from salon_dash.api.router_dashboard import router as dashboard_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load both datasets at startup and keep them fresh in the background."""
    from salon_dash.config import APPOINTMENTS_URL, ACCOUNTS_URL, REFRESH_INTERVAL, STALE_AFTER
    print(f"  SALON_APPOINTMENTS_URL = {APPOINTMENTS_URL or '(not set)'}")
    print(f"  SALON_ACCOUNTS_URL = {ACCOUNTS_URL or '(not set)'}")
    print(f"  Refresh every {REFRESH_INTERVAL:g}s, stale after {STALE_AFTER:g}s")

    store = app.state.store_factory()
    store.load()
    store.start_polling()
    set_store(store)

    appointments, accounts = store.snapshot()
    print(f"\nSalon Dash ready — {len(appointments):,} appointments, {len(accounts):,} daily accounts\n")
    yield

    store.stop_polling()
    set_store(None)


def create_app(store_factory=DataStore) -> FastAPI:
    app = FastAPI(
        title="Salon Dash API",
        description="Appointments and daily revenue dashboard for a barber shop",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store_factory = store_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(dashboard_router)
    return app


app = create_app()
