"""
Field normalisation: price, status, date, time, count and service category.

Every function here is total — malformed input degrades to a documented
default instead of raising.
"""
from __future__ import annotations

import math
import re
import warnings

import pandas as pd

from salon_dash.config import (
    PRICE_STRIP_PATTERN, STATUS_UNKNOWN,
    CUT_KEYWORDS, BEARD_KEYWORDS, DYE_KEYWORDS,
)
from salon_dash.data.schemas import ServiceCategory


_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"(\d{1,2}:\d{2})")
_LEADING_FLOAT_RE = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_LEADING_INT_RE = re.compile(r"\s*[+-]?\d+")


def as_text(value) -> str:
    """Coerce a raw cell (str, None, NaN) to a plain string."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value)


def _leading_float(s: str) -> float:
    m = _LEADING_FLOAT_RE.match(s)
    if not m:
        return math.nan
    try:
        return float(m.group(0))
    except (ValueError, OverflowError):
        return math.nan


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------

def normalize_price(raw) -> float:
    """Parse a spreadsheet price like "€1.234,50", "25 EUR" or "2k".

    "." is a grouping separator and "," the decimal separator. A "k" suffix
    (checked after separator cleanup) multiplies by 1000.
    """
    cleaned = re.sub(PRICE_STRIP_PATTERN, "", as_text(raw))
    cleaned = cleaned.replace(".", "").replace(",", ".")

    multiplier = 1.0
    if "k" in cleaned.lower():
        cleaned = re.sub("k", "", cleaned, count=1, flags=re.IGNORECASE)
        multiplier = 1000.0

    value = _leading_float(cleaned) * multiplier
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def parse_count(raw) -> int:
    """Lenient integer parse for counts ("12", "12 citas"); 0 when unusable."""
    m = _LEADING_INT_RE.match(as_text(raw))
    if not m:
        return 0
    return max(int(m.group(0)), 0)


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

def normalize_status(raw) -> str:
    return as_text(raw).strip().lower() or STATUS_UNKNOWN


# ---------------------------------------------------------------------------
# Date / time
# ---------------------------------------------------------------------------

def normalize_date(raw) -> str:
    """Return YYYY-MM-DD when the value can be read as a date, else the raw text."""
    text = as_text(raw)
    value = text.strip()
    if not value:
        return ""
    if _ISO_DATE_RE.match(value):
        return value
    # Words like "now" or "today" would resolve to the wall clock
    if not any(ch.isdigit() for ch in value):
        return text

    try:
        with warnings.catch_warnings():
            # pandas warns when it has to guess the format; guessing is the point
            warnings.simplefilter("ignore")
            parsed = pd.to_datetime(value, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return text
    if parsed is None or pd.isna(parsed):
        return text
    return parsed.strftime("%Y-%m-%d")


def normalize_time(raw) -> str:
    """First H:MM / HH:MM in the value; "10:00-11:00" → "10:00"."""
    text = as_text(raw)
    if not text:
        return ""
    m = _TIME_RE.search(text)
    return m.group(1) if m else text


# ---------------------------------------------------------------------------
# Service categorisation
# ---------------------------------------------------------------------------

# Priority order matters: the combined rule must run before either single one.
# A rule matches when every keyword group has at least one hit.
_CATEGORY_RULES: list[tuple[ServiceCategory, tuple[tuple[str, ...], ...]]] = [
    (ServiceCategory.CUT_AND_BEARD, (CUT_KEYWORDS, BEARD_KEYWORDS)),
    (ServiceCategory.CUT, (CUT_KEYWORDS,)),
    (ServiceCategory.SHAVE, (BEARD_KEYWORDS,)),
    (ServiceCategory.DYE, (DYE_KEYWORDS,)),
]


def categorize_service(raw) -> ServiceCategory:
    """Map a free-text service description to a ServiceCategory."""
    s = as_text(raw).lower()
    if not s:
        return ServiceCategory.OTHER
    for category, groups in _CATEGORY_RULES:
        if all(any(kw in s for kw in group) for group in groups):
            return category
    return ServiceCategory.OTHER
