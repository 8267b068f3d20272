"""
Dashboard analytics — derived views over appointment and account batches.

Every function is a pure function of its record batches and an explicit
``now`` (naive local wall-clock). Malformed dates never match a window,
missing data yields zeros or empty lists, and nothing here raises on a
well-typed batch, including an empty one.
"""
from __future__ import annotations

import datetime as dt
import re
from dataclasses import fields
from typing import Optional, Sequence

import pandas as pd

from salon_dash.config import (
    MONTHLY_GOAL, STATUS_CONFIRMED, STATUS_PENDING, STATUS_BADGES,
    HOUR_BINS, HOUR_BIN_OTHER, MONTH_ABBR, WEEKDAY_ABBR,
)
from salon_dash.data.schemas import Appointment, MonthlyAccount
from salon_dash.analytics.common import safe_divide, pct_of_total, format_eur, sanitize_for_json


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_APPOINTMENT_COLS = [f.name for f in fields(Appointment)]
_ACCOUNT_COLS = [f.name for f in fields(MonthlyAccount)]

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


def _frame(records: Sequence, columns: list[str]) -> pd.DataFrame:
    """Records → DataFrame with a parsed ``day`` column (NaT when malformed)."""
    df = pd.DataFrame([r.to_dict() for r in records], columns=columns)
    df["day"] = pd.to_datetime(df["date"], format="%Y-%m-%d", errors="coerce")
    return df


def _month_bounds(now: dt.datetime) -> tuple[pd.Timestamp, pd.Timestamp]:
    start = dt.date(now.year, now.month, 1)
    if now.month == 12:
        end = dt.date(now.year + 1, 1, 1) - dt.timedelta(days=1)
    else:
        end = dt.date(now.year, now.month + 1, 1) - dt.timedelta(days=1)
    return pd.Timestamp(start), pd.Timestamp(end)


def _clock(time_str: str) -> Optional[tuple[int, int]]:
    """"14:05" → (14, 5); None unless the value is a valid wall-clock time."""
    m = _CLOCK_RE.match(time_str or "")
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def _hour_slot(time_str: str) -> str:
    """Hourly bin label for a time value; unparseable hours land in "Otras"."""
    m = _LEADING_INT_RE.match((time_str or "").split(":")[0])
    if not m:
        return HOUR_BIN_OTHER
    hour = int(m.group(1))
    for label, start, end in HOUR_BINS:
        if start <= hour < end:
            return label
    return HOUR_BIN_OTHER


def _day_label(day: dt.date) -> str:
    return f"{day.day:02d} {MONTH_ABBR[day.month]}"


def _remaining_label(minutes: int) -> str:
    if minutes < 60:
        return f"En {minutes} min"
    return f"En {minutes // 60}h {minutes % 60}m"


# ---------------------------------------------------------------------------
# Windows
# ---------------------------------------------------------------------------

def filter_today(appointments: Sequence[Appointment], now: dt.datetime) -> list[Appointment]:
    """Appointments dated on the same local calendar day as ``now``."""
    df = _frame(appointments, _APPOINTMENT_COLS)
    mask = df["day"] == pd.Timestamp(now.date())
    return [a for a, keep in zip(appointments, mask) if keep]


def filter_month(accounts: Sequence[MonthlyAccount], now: dt.datetime) -> list[MonthlyAccount]:
    """Accounts dated inside ``now``'s calendar month (inclusive bounds)."""
    df = _frame(accounts, _ACCOUNT_COLS)
    start, end = _month_bounds(now)
    mask = (df["day"] >= start) & (df["day"] <= end)
    return [a for a, keep in zip(accounts, mask) if keep]


# ---------------------------------------------------------------------------
# Today's views
# ---------------------------------------------------------------------------

def status_counts(today: Sequence[Appointment]) -> dict:
    df = _frame(today, _APPOINTMENT_COLS)
    return {
        "total": len(df),
        "confirmed": int((df["status"] == STATUS_CONFIRMED).sum()),
        "pending": int((df["status"] == STATUS_PENDING).sum()),
    }


def revenue_today(today: Sequence[Appointment]) -> float:
    """Sum of price over today's confirmed appointments."""
    df = _frame(today, _APPOINTMENT_COLS)
    return float(df.loc[df["status"] == STATUS_CONFIRMED, "price"].sum())


def category_mix(today: Sequence[Appointment]) -> list[dict]:
    """Count per service category, in first-seen order."""
    df = _frame(today, _APPOINTMENT_COLS)
    counts = df.groupby("service_category", sort=False).size()
    total = int(counts.sum())
    return [
        {"name": str(name), "value": int(n), "pct": round(pct_of_total(int(n), total), 1)}
        for name, n in counts.items()
    ]


def hourly_buckets(today: Sequence[Appointment]) -> list[dict]:
    """Appointments per time slot, in fixed slot order; empty slots omitted."""
    df = _frame(today, _APPOINTMENT_COLS)
    counts = df["time"].map(_hour_slot).value_counts()
    labels = [label for label, _, _ in HOUR_BINS] + [HOUR_BIN_OTHER]
    return [{"slot": label, "appointments": int(counts[label])} for label in labels if label in counts]


def next_appointment(today: Sequence[Appointment], now: dt.datetime) -> Optional[dict]:
    """Earliest appointment later today than ``now``, or None if there is none."""
    upcoming = []
    for appt in today:
        clock = _clock(appt.time)
        if clock is None:
            continue
        at = dt.datetime.combine(now.date(), dt.time(*clock))
        if at > now:
            upcoming.append((clock, at, appt))
    if not upcoming:
        return None

    clock, at, appt = min(upcoming, key=lambda u: u[0])
    minutes = int((at - now).total_seconds() // 60)
    return {
        "appointment": appt.to_dict(),
        "time": appt.time,
        "minutes_remaining": minutes,
        "remaining_label": _remaining_label(minutes),
    }


def today_agenda(
    appointments: Sequence[Appointment],
    now: dt.datetime,
    search: Optional[str] = None,
) -> list[dict]:
    """Today's appointments as table rows, sorted by time, optionally searched.

    The search is a case-insensitive substring match on client name,
    service text and status. Rows without a readable time sort last.
    """
    today = filter_today(appointments, now)
    if search:
        s = search.strip().lower()
        today = [
            a for a in today
            if s in a.client_name.lower() or s in a.service_text.lower() or s in a.status.lower()
        ]

    def _sort_key(a: Appointment):
        clock = _clock(a.time)
        return (clock is None, clock or (0, 0))

    rows = []
    for a in sorted(today, key=_sort_key):
        rows.append({
            "id": a.id,
            "time": a.time,
            "client_name": a.client_name,
            "service_text": a.service_text,
            "service_category": a.service_category.value,
            "price": a.price,
            "price_formatted": format_eur(a.price),
            "status": a.status,
            "status_label": a.status[:1].upper() + a.status[1:],
            "badge": STATUS_BADGES.get(a.status, "outline"),
            "phone": a.phone,
        })
    return rows


# ---------------------------------------------------------------------------
# Monthly / weekly views
# ---------------------------------------------------------------------------

def monthly_trend(accounts: Sequence[MonthlyAccount], now: dt.datetime) -> list[dict]:
    """This month's daily totals, ascending by date."""
    month = filter_month(accounts, now)
    df = _frame(month, _ACCOUNT_COLS).sort_values("date", kind="stable")
    return [
        {"date": r["date"], "label": _day_label(r["day"].date()), "total": float(r["total"])}
        for _, r in df.iterrows()
    ]


def weekly_series(accounts: Sequence[MonthlyAccount], now: dt.datetime) -> list[dict]:
    """Seven points, one per day ending today; days without an account are zero."""
    by_date: dict[str, MonthlyAccount] = {}
    for acc in accounts:
        by_date.setdefault(acc.date, acc)

    series = []
    for offset in range(6, -1, -1):
        day = now.date() - dt.timedelta(days=offset)
        acc = by_date.get(day.isoformat())
        series.append({
            "date": day.isoformat(),
            "day": WEEKDAY_ABBR[day.weekday()],
            "appointments": acc.scheduled_count if acc else 0,
            "revenue": acc.total if acc else 0.0,
        })
    return series


def monthly_revenue(accounts: Sequence[MonthlyAccount], now: dt.datetime) -> float:
    return float(sum(a.total for a in filter_month(accounts, now)))


def goal_progress(revenue: float, goal: float = MONTHLY_GOAL) -> float:
    """Monthly revenue as a percentage of the goal."""
    return safe_divide(revenue, goal) * 100


# ---------------------------------------------------------------------------
# Full dashboard
# ---------------------------------------------------------------------------

def build_dashboard(
    appointments: Sequence[Appointment],
    accounts: Sequence[MonthlyAccount],
    now: dt.datetime,
    monthly_goal: float = MONTHLY_GOAL,
) -> dict:
    """KPI cards, chart series and today's agenda for one reference moment.

    Identical inputs always produce an identical (JSON-safe) result.
    """
    today = filter_today(appointments, now)
    counts = status_counts(today)
    revenue = revenue_today(today)
    upcoming = next_appointment(today, now)
    month_revenue = monthly_revenue(accounts, now)
    progress = goal_progress(month_revenue, monthly_goal)

    if upcoming:
        appt = upcoming["appointment"]
        next_card = {
            **upcoming,
            "value": upcoming["time"],
            "subtitle": f"{appt['client_name']} · {appt['service_text']}",
        }
    else:
        next_card = {"value": "--:--", "subtitle": "No hay citas pendientes"}

    kpis = {
        "appointments_today": {
            **counts,
            "subtitle": f"{counts['confirmed']} confirmadas · {counts['pending']} pendientes",
        },
        "revenue_today": {
            "value": revenue,
            "formatted": format_eur(revenue),
        },
        "next_appointment": next_card,
        "monthly_progress": {
            "revenue": month_revenue,
            "goal": monthly_goal,
            "percent": progress,
            "formatted": f"{progress:.1f}%",
            "subtitle": f"{format_eur(month_revenue, 0)} de {format_eur(monthly_goal, 0)}",
        },
    }

    return sanitize_for_json({
        "now": now.isoformat(timespec="seconds"),
        "today": now.date().isoformat(),
        "kpis": kpis,
        "charts": {
            "monthly_trend": monthly_trend(accounts, now),
            "category_mix": category_mix(today),
            "hourly_distribution": hourly_buckets(today),
            "weekly_comparison": weekly_series(accounts, now),
        },
        "agenda": today_agenda(appointments, now),
    })
