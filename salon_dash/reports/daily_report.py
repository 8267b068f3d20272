"""
Daily Salon Report — KPIs, today's agenda, service mix, hourly load, week and month.
"""
from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Sequence

from salon_dash.config import MONTHLY_GOAL, STATUS_CONFIRMED, STATUS_PENDING, STATUS_CANCELLED
from salon_dash.data.schemas import Appointment, MonthlyAccount
from salon_dash.analytics.dashboard import build_dashboard
from salon_dash.excel.writer import ExcelWriter


_STATUS_HIGHLIGHT = {
    STATUS_CONFIRMED: "confirmed",
    STATUS_PENDING: "pending",
    STATUS_CANCELLED: "cancelled",
}


def generate_json(
    appointments: Sequence[Appointment],
    accounts: Sequence[MonthlyAccount],
    now: dt.datetime,
    monthly_goal: float = MONTHLY_GOAL,
) -> dict:
    data = build_dashboard(appointments, accounts, now, monthly_goal=monthly_goal)
    data["date_label"] = f"{now:%d/%m/%Y %H:%M}"
    return data


def generate_excel(
    appointments: Sequence[Appointment],
    accounts: Sequence[MonthlyAccount],
    output_path: str | Path,
    now: dt.datetime,
    monthly_goal: float = MONTHLY_GOAL,
) -> Path:
    data = generate_json(appointments, accounts, now, monthly_goal)
    kpis = data["kpis"]
    charts = data["charts"]
    ew = ExcelWriter()

    # Summary
    ws = ew.add_sheet("Resumen")
    row = ew.write_title(ws, "SALON DASH", f"Informe diario  |  {data['date_label']}")
    nxt = kpis["next_appointment"]
    progress = kpis["monthly_progress"]
    row = ew.write_kpi_row(ws, row, [
        (kpis["appointments_today"]["total"], "Citas hoy", "number", kpis["appointments_today"]["subtitle"]),
        (kpis["revenue_today"]["value"], "Ingresos hoy", "currency"),
        (nxt["value"], "Próxima cita", "text", nxt["subtitle"]),
        (progress["percent"], "Meta mensual", "percent", progress["subtitle"]),
    ])

    row = ew.write_section(ws, row, "SERVICIOS DE HOY")
    if charts["category_mix"]:
        row = ew.write_table(ws, row, [
            ("name", "text", "Servicio"),
            ("value", "number", "Citas"),
            ("pct", "percent", "% del día"),
        ], charts["category_mix"], show_total=True, freeze=False) + 1
    else:
        row = ew.write_note(ws, row, "Sin citas para hoy")

    row = ew.write_section(ws, row, "CITAS POR FRANJA HORARIA")
    if charts["hourly_distribution"]:
        ew.write_table(ws, row, [
            ("slot", "text", "Franja"),
            ("appointments", "number", "Citas"),
        ], charts["hourly_distribution"], show_total=True, freeze=False)
    else:
        ew.write_note(ws, row, "Sin citas para hoy")

    # Agenda
    ws2 = ew.add_sheet("Agenda")
    ew.write_table(ws2, 1, [
        ("time", "text", "Hora"),
        ("client_name", "text", "Cliente"),
        ("service_text", "text", "Servicio"),
        ("service_category", "text", "Categoría"),
        ("price", "currency", "Precio"),
        ("status_label", "text", "Estado"),
        ("phone", "text", "Teléfono"),
    ], data["agenda"], highlight_fn=lambda i, r: _STATUS_HIGHLIGHT.get(r["status"]))

    # Week + month
    ws3 = ew.add_sheet("Mes")
    row = ew.write_section(ws3, 1, "ÚLTIMOS 7 DÍAS")
    row = ew.write_table(ws3, row, [
        ("date", "text", "Fecha"),
        ("day", "text", "Día"),
        ("appointments", "number", "Citas"),
        ("revenue", "currency", "Ingresos"),
    ], charts["weekly_comparison"], show_total=True, freeze=False) + 1

    row = ew.write_section(ws3, row, "INGRESOS DEL MES")
    if charts["monthly_trend"]:
        ew.write_table(ws3, row, [
            ("date", "text", "Fecha"),
            ("label", "text", "Día"),
            ("total", "currency", "Total"),
        ], charts["monthly_trend"], show_total=True, freeze=False,
            highlight_fn=lambda i, r: "gold" if r["date"] == data["today"] else None)
    else:
        ew.write_note(ws3, row, "Sin registros este mes")

    return ew.save(output_path)
