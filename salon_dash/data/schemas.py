"""
Canonical record shapes produced by ingestion.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Generic, TypeVar


class ServiceCategory(str, Enum):
    """Closed set of service categories inferred from free-text descriptions."""
    CUT_AND_BEARD = "Corte+Barba"
    CUT = "Corte"
    SHAVE = "Afeitado"
    DYE = "Tinte"
    OTHER = "Otros"


class DatasetKind(str, Enum):
    APPOINTMENTS = "appointments"
    ACCOUNTS = "accounts"


@dataclass(frozen=True)
class Appointment:
    """One scheduled service, fully normalized."""
    id: str
    status: str
    client_name: str
    service_text: str
    price: float
    date: str                          # YYYY-MM-DD when derivable, else raw text
    time: str                          # HH:MM / H:MM, start of a range
    phone: str
    batch_id: str
    service_category: ServiceCategory

    def to_dict(self) -> dict:
        d = asdict(self)
        d["service_category"] = self.service_category.value
        return d


@dataclass(frozen=True)
class MonthlyAccount:
    """One day's aggregate revenue snapshot."""
    date: str
    scheduled_count: int
    total: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ParseDiagnostic:
    """Non-fatal problem found while reading delimited text."""
    code: str                          # "empty", "bad_line", "quoting"
    message: str
    row: int | None = None             # 0-based data row, None for file-level

    def to_dict(self) -> dict:
        return asdict(self)


R = TypeVar("R")


@dataclass(frozen=True)
class IngestResult(Generic[R]):
    """Ordered batch of records plus the diagnostics collected while parsing."""
    records: tuple[R, ...] = ()
    diagnostics: tuple[ParseDiagnostic, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.records)
