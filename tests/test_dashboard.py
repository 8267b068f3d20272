"""Dashboard views over the sample batches (reference time: Fri 14 Mar 2025 10:00)."""

from __future__ import annotations

import datetime as dt
import json

import pytest

from salon_dash.analytics.common import format_eur, safe_divide
from salon_dash.analytics.dashboard import (
    build_dashboard,
    category_mix,
    filter_month,
    filter_today,
    goal_progress,
    hourly_buckets,
    monthly_revenue,
    monthly_trend,
    next_appointment,
    revenue_today,
    status_counts,
    today_agenda,
    weekly_series,
)
from salon_dash.data.loader import parse_appointments


# -----------------------------------------------------------------------
# Windows
# -----------------------------------------------------------------------

class TestWindows:
    def test_today_excludes_other_days_and_bad_dates(self, appointments, now):
        today = filter_today(appointments, now)
        assert [a.id for a in today] == ["a1", "a2", "a3", "a4"]

    def test_month_inclusive_bounds(self, accounts, now):
        month = filter_month(accounts, now)
        assert [a.date for a in month] == ["2025-03-01", "2025-03-10", "2025-03-13", "2025-03-14"]

    def test_december_month_end(self, accounts):
        assert filter_month(accounts, dt.datetime(2025, 12, 31, 23, 59)) == []

    def test_empty_batches(self, now):
        assert filter_today([], now) == []
        assert filter_month([], now) == []


# -----------------------------------------------------------------------
# Today's KPIs
# -----------------------------------------------------------------------

class TestTodayKpis:
    def test_status_counts(self, appointments, now):
        counts = status_counts(filter_today(appointments, now))
        assert counts == {"total": 4, "confirmed": 2, "pending": 1}

    def test_revenue_only_confirmed(self, appointments, now):
        assert revenue_today(filter_today(appointments, now)) == 45.0

    def test_empty_day(self):
        assert status_counts([]) == {"total": 0, "confirmed": 0, "pending": 0}
        assert revenue_today([]) == 0.0

    def test_category_mix_first_seen_order(self, appointments, now):
        mix = category_mix(filter_today(appointments, now))
        assert [c["name"] for c in mix] == ["Corte", "Corte+Barba", "Tinte", "Afeitado"]
        assert all(c["value"] == 1 and c["pct"] == 25.0 for c in mix)

    def test_category_mix_counts(self, now):
        text = "servicio,dia\nCorte,2025-03-14\nTinte,2025-03-14\nCorte,2025-03-14\n"
        mix = category_mix(filter_today(parse_appointments(text).records, now))
        assert mix == [
            {"name": "Corte", "value": 2, "pct": 66.7},
            {"name": "Tinte", "value": 1, "pct": 33.3},
        ]

    def test_hourly_buckets(self, appointments, now):
        buckets = hourly_buckets(filter_today(appointments, now))
        assert buckets == [
            {"slot": "09:00-12:00", "appointments": 1},
            {"slot": "12:00-15:00", "appointments": 1},
            {"slot": "15:00-18:00", "appointments": 1},
            {"slot": "18:00-21:00", "appointments": 1},
        ]

    def test_hourly_other_bin_and_omitted_slots(self, now):
        text = "hora,dia\n08:00,2025-03-14\nsin hora,2025-03-14\n21:30,2025-03-14\n10:15,2025-03-14\n"
        buckets = hourly_buckets(filter_today(parse_appointments(text).records, now))
        assert buckets == [
            {"slot": "09:00-12:00", "appointments": 1},
            {"slot": "Otras", "appointments": 3},
        ]


class TestNextAppointment:
    def test_earliest_after_now(self, appointments, now):
        upcoming = next_appointment(filter_today(appointments, now), now)
        assert upcoming["appointment"]["id"] == "a2"
        assert upcoming["time"] == "14:00"
        assert upcoming["minutes_remaining"] == 240
        assert upcoming["remaining_label"] == "En 4h 0m"

    def test_minutes_label(self, appointments):
        now = dt.datetime(2025, 3, 14, 13, 15)
        upcoming = next_appointment(filter_today(appointments, now), now)
        assert upcoming["remaining_label"] == "En 45 min"

    def test_hours_and_minutes_label(self, appointments):
        now = dt.datetime(2025, 3, 14, 14, 0)
        upcoming = next_appointment(filter_today(appointments, now), now)
        assert upcoming["appointment"]["id"] == "a3"
        assert upcoming["remaining_label"] == "En 2h 15m"

    def test_none_after_last(self, appointments):
        now = dt.datetime(2025, 3, 14, 20, 0)
        assert next_appointment(filter_today(appointments, now), now) is None

    def test_sorted_by_clock_not_text(self, now):
        text = "id,hora,dia\nlate,11:00,2025-03-14\nearly,10:30,2025-03-14\nbad,25:00,2025-03-14\n"
        upcoming = next_appointment(parse_appointments(text).records, now)
        assert upcoming["appointment"]["id"] == "early"

    def test_single_digit_hour(self, now):
        text = "id,hora,dia\nx,9:45,2025-03-14\ny,12:00,2025-03-14\n"
        upcoming = next_appointment(parse_appointments(text).records, now)
        assert upcoming["appointment"]["id"] == "y"


class TestAgenda:
    def test_sorted_with_badges(self, appointments, now):
        rows = today_agenda(appointments, now)
        assert [r["id"] for r in rows] == ["a1", "a2", "a3", "a4"]
        assert [r["badge"] for r in rows] == ["default", "secondary", "default", "destructive"]
        assert rows[0]["status_label"] == "Confirmada"
        assert rows[1]["price_formatted"] == "€20,00"
        assert rows[1]["service_category"] == "Corte+Barba"

    def test_search(self, appointments, now):
        assert [r["id"] for r in today_agenda(appointments, now, "tinte")] == ["a3"]
        assert [r["id"] for r in today_agenda(appointments, now, "LÓPEZ")] == ["a1"]
        assert [r["id"] for r in today_agenda(appointments, now, "confirmada")] == ["a1", "a3"]
        assert today_agenda(appointments, now, "nadie") == []

    def test_unknown_status_outline(self, now):
        text = "estatus,dia,hora\nreprogramada,2025-03-14,10:00\n"
        (row,) = today_agenda(parse_appointments(text).records, now)
        assert row["badge"] == "outline"


# -----------------------------------------------------------------------
# Monthly / weekly
# -----------------------------------------------------------------------

class TestMonthly:
    def test_trend_sorted_with_labels(self, accounts, now):
        trend = monthly_trend(accounts, now)
        assert [t["label"] for t in trend] == ["01 mar", "10 mar", "13 mar", "14 mar"]
        assert [t["total"] for t in trend] == [1000.0, 2500.0, 500.0, 4000.0]

    def test_monthly_revenue(self, accounts, now):
        assert monthly_revenue(accounts, now) == 8000.0

    def test_goal_progress(self):
        assert goal_progress(7500, 15000) == 50.0
        assert goal_progress(0, 15000) == 0.0
        assert goal_progress(500, 0) == 0.0

    def test_weekly_always_seven_points(self, accounts, now):
        series = weekly_series(accounts, now)
        assert len(series) == 7
        assert series[0] == {"date": "2025-03-08", "day": "sáb", "appointments": 0, "revenue": 0.0}
        assert series[-1] == {"date": "2025-03-14", "day": "vie", "appointments": 12, "revenue": 4000.0}
        assert series[2]["revenue"] == 2500.0

    def test_weekly_empty(self, now):
        series = weekly_series([], now)
        assert len(series) == 7
        assert all(p["revenue"] == 0.0 and p["appointments"] == 0 for p in series)


# -----------------------------------------------------------------------
# Full dashboard
# -----------------------------------------------------------------------

class TestBuildDashboard:
    def test_kpis(self, appointments, accounts, now):
        data = build_dashboard(appointments, accounts, now, monthly_goal=16000)
        k = data["kpis"]
        assert k["appointments_today"]["subtitle"] == "2 confirmadas · 1 pendientes"
        assert k["revenue_today"]["formatted"] == "€45,00"
        assert k["next_appointment"]["value"] == "14:00"
        assert k["next_appointment"]["subtitle"] == "Luis Pérez · Corte y barba"
        assert k["monthly_progress"]["percent"] == 50.0
        assert k["monthly_progress"]["formatted"] == "50.0%"
        assert k["monthly_progress"]["subtitle"] == "€8.000 de €16.000"

    def test_no_pending_card(self, appointments, accounts):
        data = build_dashboard(appointments, accounts, dt.datetime(2025, 3, 14, 22, 0))
        assert data["kpis"]["next_appointment"] == {"value": "--:--", "subtitle": "No hay citas pendientes"}

    def test_empty_inputs(self, now):
        data = build_dashboard([], [], now)
        assert data["kpis"]["appointments_today"]["total"] == 0
        assert data["charts"]["category_mix"] == []
        assert data["charts"]["hourly_distribution"] == []
        assert data["charts"]["monthly_trend"] == []
        assert len(data["charts"]["weekly_comparison"]) == 7
        assert data["agenda"] == []

    def test_deterministic(self, appointments, accounts, now):
        a = build_dashboard(appointments, accounts, now)
        b = build_dashboard(appointments, accounts, now)
        assert json.dumps(a, sort_keys=True) == json.dumps(b, sort_keys=True)

    def test_json_safe(self, appointments, accounts, now):
        json.dumps(build_dashboard(appointments, accounts, now), allow_nan=False)


class TestCommon:
    @pytest.mark.parametrize("value, decimals, expected", [
        (1234.5, 2, "€1.234,50"),
        (0, 2, "€0,00"),
        (7500, 0, "€7.500"),
        (1234567.891, 2, "€1.234.567,89"),
    ])
    def test_format_eur(self, value, decimals, expected):
        assert format_eur(value, decimals) == expected

    def test_safe_divide(self):
        assert safe_divide(1, 0) == 0.0
        assert safe_divide(1, 4) == 0.25
