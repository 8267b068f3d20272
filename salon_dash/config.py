"""
Salon Dash — Configuration: paths, sources, refresh cadence, constants.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths — override with SALON_DATA_DIR env var for cloud deployment
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("SALON_DATA_DIR", str(Path.home() / "Salon Dash")))
BASE_FOLDER = _data_dir
REPORTS_FOLDER = _data_dir / "reports"

# ---------------------------------------------------------------------------
# Sources — spreadsheet CSV export links (or local file paths)
# ---------------------------------------------------------------------------
APPOINTMENTS_URL = os.environ.get("SALON_APPOINTMENTS_URL", "")
ACCOUNTS_URL = os.environ.get("SALON_ACCOUNTS_URL", "")
FETCH_TIMEOUT = float(os.environ.get("SALON_FETCH_TIMEOUT", "30"))

# ---------------------------------------------------------------------------
# Refresh policy (seconds, applied to each dataset independently)
# ---------------------------------------------------------------------------
REFRESH_INTERVAL = float(os.environ.get("SALON_REFRESH_SECONDS", "30"))
STALE_AFTER = float(os.environ.get("SALON_STALE_SECONDS", "20"))

# ---------------------------------------------------------------------------
# Business constants
# ---------------------------------------------------------------------------
MONTHLY_GOAL = float(os.environ.get("SALON_MONTHLY_GOAL", "15000"))  # EUR
CURRENCY_SYMBOL = "€"

STATUS_UNKNOWN = "desconocido"
STATUS_CONFIRMED = "confirmada"
STATUS_PENDING = "pendiente"
STATUS_CANCELLED = "cancelada"

# Badge variant per status for the agenda table; anything else is "outline"
STATUS_BADGES = {
    STATUS_CONFIRMED: "default",
    STATUS_PENDING: "secondary",
    STATUS_CANCELLED: "destructive",
}

# ---------------------------------------------------------------------------
# Column aliases from raw spreadsheet headers → internal field names.
# Headers are trimmed + lower-cased before lookup; first non-empty alias wins.
# ---------------------------------------------------------------------------
APPOINTMENT_ALIASES = {
    "id": ["id"],
    "status": ["estatus", "status", "estado"],
    "client_name": ["nombre", "cliente"],
    "service_text": ["servicio"],
    "price": ["precio del servicio", "precio"],
    "date": ["dia", "día", "fecha"],
    "time": ["hora"],
    "phone": [
        "numero de celular",
        "número de celular",
        "número celular",
        "numero celular",
        "celular",
        "telefono",
        "teléfono",
        "numero",
    ],
    "batch_id": ["execution id", "executionid"],
}

ACCOUNT_ALIASES = {
    "date": ["fecha", "dia"],
    "scheduled_count": ["agendas", "agendados"],
    "total": ["total"],
}

# ---------------------------------------------------------------------------
# Price cleanup: symbols, single characters of currency codes, whole codes
# ---------------------------------------------------------------------------
PRICE_STRIP_PATTERN = r"EUR|USD|[€$£COP\s]"

# ---------------------------------------------------------------------------
# Service keyword groups (matched case-insensitively as substrings)
# ---------------------------------------------------------------------------
CUT_KEYWORDS = ("corte",)
BEARD_KEYWORDS = ("barba", "afeitado")
DYE_KEYWORDS = ("tinte", "color")

# ---------------------------------------------------------------------------
# Hourly distribution bins: (label, start hour inclusive, end hour exclusive)
# ---------------------------------------------------------------------------
HOUR_BINS = [
    ("09:00-12:00", 9, 12),
    ("12:00-15:00", 12, 15),
    ("15:00-18:00", 15, 18),
    ("18:00-21:00", 18, 21),
]
HOUR_BIN_OTHER = "Otras"

# ---------------------------------------------------------------------------
# Spanish calendar labels (single locale)
# ---------------------------------------------------------------------------
MONTH_ABBR = ["", "ene", "feb", "mar", "abr", "may", "jun",
              "jul", "ago", "sept", "oct", "nov", "dic"]
WEEKDAY_ABBR = ["lun", "mar", "mié", "jue", "vie", "sáb", "dom"]
