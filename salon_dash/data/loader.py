"""
CSV ingestion: split raw delimited text into rows and map them to records.
"""
from __future__ import annotations

import csv
import io
import warnings

import pandas as pd

from salon_dash.config import APPOINTMENT_ALIASES, ACCOUNT_ALIASES
from salon_dash.data.normalize import (
    as_text,
    normalize_price, normalize_status, normalize_date, normalize_time,
    categorize_service, parse_count,
)
from salon_dash.data.schemas import (
    Appointment, MonthlyAccount, ParseDiagnostic, IngestResult,
)


# ---------------------------------------------------------------------------
# Delimited text → rows
# ---------------------------------------------------------------------------

def _read_csv(text: str, **kwargs) -> pd.DataFrame:
    with warnings.catch_warnings():
        # Extra fields on a bad line are dropped with a ParserWarning
        warnings.simplefilter("ignore", pd.errors.ParserWarning)
        return pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
            **kwargs,
        )


def _quoting_error(text: str) -> str | None:
    """First quoting problem found by a strict csv scan, or None."""
    try:
        for _ in csv.reader(io.StringIO(text), strict=True):
            pass
    except csv.Error as exc:
        return str(exc)
    return None


def read_table(text: str | None) -> tuple[list[dict[str, str]], list[ParseDiagnostic]]:
    """Parse delimited text into row dicts keyed by trimmed, lower-cased header.

    Structural problems never abort the batch: over-long rows are kept
    (extra fields dropped), unbalanced quotes are read again with quoting
    disabled, and every problem is returned as a diagnostic.
    """
    diagnostics: list[ParseDiagnostic] = []
    if not text or not text.strip():
        return [], [ParseDiagnostic("empty", "Source contained no data")]

    def _on_bad_line(fields: list[str]) -> list[str]:
        diagnostics.append(ParseDiagnostic(
            "bad_line",
            f"Row has {len(fields)} fields, more than the header; extra fields dropped",
        ))
        return fields

    # pandas swallows the rest of the file into an unterminated quoted
    # field instead of raising, so quoting is checked up front.
    options = {}
    problem = _quoting_error(text)
    if problem:
        diagnostics.append(ParseDiagnostic("quoting", f"Malformed quoting, read again unquoted: {problem}"))
        options["quoting"] = csv.QUOTE_NONE

    try:
        df = _read_csv(text, on_bad_lines=_on_bad_line, **options)
        if not isinstance(df.index, pd.RangeIndex):
            # First data row was wider than the header and pandas took the
            # surplus as an index; re-read without an implicit index.
            diagnostics.append(ParseDiagnostic(
                "bad_line",
                "Row has more fields than the header; extra fields dropped",
                row=0,
            ))
            df = _read_csv(text, index_col=False, **options)
    except pd.errors.EmptyDataError:
        return [], diagnostics + [ParseDiagnostic("empty", "Source contained no data")]
    except pd.errors.ParserError as exc:
        diagnostics.append(ParseDiagnostic("quoting", f"Unreadable source: {exc}"))
        return [], diagnostics

    df.columns = [str(c).strip().lower() for c in df.columns]
    df = df.fillna("")
    return df.to_dict("records"), diagnostics


# ---------------------------------------------------------------------------
# Row → record
# ---------------------------------------------------------------------------

def _first(row: dict, aliases: list[str]) -> str:
    """Value of the first alias present in the row with non-empty content."""
    for alias in aliases:
        value = as_text(row.get(alias)).strip()
        if value:
            return value
    return ""


def map_appointment(row: dict, index: int) -> Appointment:
    a = APPOINTMENT_ALIASES
    service = _first(row, a["service_text"])
    return Appointment(
        id=_first(row, a["id"]) or f"cita-{index}",
        status=normalize_status(_first(row, a["status"])),
        client_name=_first(row, a["client_name"]),
        service_text=service,
        price=normalize_price(_first(row, a["price"])),
        date=normalize_date(_first(row, a["date"])),
        time=normalize_time(_first(row, a["time"])),
        phone=_first(row, a["phone"]),
        batch_id=_first(row, a["batch_id"]),
        service_category=categorize_service(service),
    )


def map_account(row: dict) -> MonthlyAccount:
    a = ACCOUNT_ALIASES
    return MonthlyAccount(
        date=normalize_date(_first(row, a["date"])),
        scheduled_count=parse_count(_first(row, a["scheduled_count"])),
        total=normalize_price(_first(row, a["total"])),
    )


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def _report(label: str, count: int, diagnostics: list[ParseDiagnostic]) -> None:
    if diagnostics:
        print(f"  Warning: {len(diagnostics)} CSV parse issue(s) in {label}")
        for d in diagnostics[:5]:
            print(f"    - [{d.code}] {d.message}")
    print(f"  Parsed {count:,} {label} from CSV")


def parse_appointments(text: str | None) -> IngestResult[Appointment]:
    """raw CSV text → ordered Appointment batch (input row order preserved)."""
    rows, diagnostics = read_table(text)
    records = tuple(map_appointment(row, idx) for idx, row in enumerate(rows))
    _report("appointments", len(records), diagnostics)
    return IngestResult(records=records, diagnostics=tuple(diagnostics))


def parse_monthly_accounts(text: str | None) -> IngestResult[MonthlyAccount]:
    """raw CSV text → ordered MonthlyAccount batch."""
    rows, diagnostics = read_table(text)
    records = tuple(map_account(row) for row in rows)
    _report("accounts", len(records), diagnostics)
    return IngestResult(records=records, diagnostics=tuple(diagnostics))
