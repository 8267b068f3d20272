"""Shared sample sheets and fixtures.

Run with:  python -m pytest tests/ -v
"""

from __future__ import annotations

import datetime as dt

import pytest

from salon_dash.data.loader import parse_appointments, parse_monthly_accounts

# -----------------------------------------------------------------------
# Sample data (Friday 14 March 2025)
# -----------------------------------------------------------------------

NOW = dt.datetime(2025, 3, 14, 10, 0)

APPOINTMENTS_CSV = """\
ID,Estatus,Nombre,Servicio,Precio del servicio,Dia,Hora,Numero de celular,Execution ID
a1,Confirmada,Ana López,Corte de pelo,€15,2025-03-14,09:30,600111222,run-1
a2,pendiente,Luis Pérez,Corte y barba,"20,00 €",2025-03-14,14:00-14:45,600333444,run-1
a3,confirmada,Marta Ruiz,Tinte,30,2025-03-14,16:15,600555666,run-1
a4,CANCELADA,Pedro Gil,Afeitado clásico,12,2025-03-14,19:00,600777888,run-1
a5,confirmada,Juan Sanz,Corte,15,2025-03-13,11:00,600999000,run-1
a6,,Eva Mora,Peinado,18,mañana,sin hora,,run-1
"""

ACCOUNTS_CSV = """\
Fecha,Agendas,Total
2025-02-28,40,9999
2025-03-01,10,1000
2025-03-10,22,2500
2025-03-13,8,500
2025-03-14,12,4000
"""


@pytest.fixture
def now() -> dt.datetime:
    return NOW


@pytest.fixture
def appointments():
    return parse_appointments(APPOINTMENTS_CSV).records


@pytest.fixture
def accounts():
    return parse_monthly_accounts(ACCOUNTS_CSV).records


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FakeFetcher:
    """Serves canned CSV text per source and counts calls."""

    def __init__(self, sources: dict) -> None:
        self.sources = dict(sources)
        self.calls: list[str] = []

    def __call__(self, source: str) -> str:
        self.calls.append(source)
        body = self.sources[source]
        if isinstance(body, Exception):
            raise body
        return body


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher({"citas": APPOINTMENTS_CSV, "cuentas": ACCOUNTS_CSV})
