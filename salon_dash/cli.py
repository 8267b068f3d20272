#!/usr/bin/env python3
"""
Salon Dash CLI — Dashboard summary, daily Excel report, and API server.

USAGE:
  python -m salon_dash.cli summary                                   # Sources from env vars
  python -m salon_dash.cli summary --appointments citas.csv --accounts cuentas.csv
  python -m salon_dash.cli summary --now 2025-03-14T10:00 --json     # Fixed reference time

  python -m salon_dash.cli report                                    # Excel report into reports folder
  python -m salon_dash.cli report --output ./informe.xlsx

  python -m salon_dash.cli serve                                     # Start API server
  python -m salon_dash.cli serve --port 8000
"""
from __future__ import annotations

import argparse
import datetime as dt
import json
import os

from salon_dash.config import APPOINTMENTS_URL, ACCOUNTS_URL, MONTHLY_GOAL, REPORTS_FOLDER
from salon_dash.data.store import DataStore


def _build_store(args) -> DataStore:
    """Load both datasets once from the CLI sources (URL or local path)."""
    return DataStore(args.appointments, args.accounts).load()


def _reference_time(args) -> dt.datetime:
    if not args.now:
        return dt.datetime.now()
    return dt.datetime.fromisoformat(args.now).replace(tzinfo=None)


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--appointments", default=APPOINTMENTS_URL,
                   help="Appointments CSV URL or path (default: SALON_APPOINTMENTS_URL)")
    p.add_argument("--accounts", default=ACCOUNTS_URL,
                   help="Daily accounts CSV URL or path (default: SALON_ACCOUNTS_URL)")
    p.add_argument("--now", help="Reference time, ISO-8601 (default: now)")
    p.add_argument("--goal", type=float, default=MONTHLY_GOAL, help="Monthly revenue goal in EUR")


def cmd_summary(args):
    """Print the dashboard KPIs and charts for the reference time."""
    from salon_dash.analytics.common import format_eur
    from salon_dash.analytics.dashboard import build_dashboard

    now = _reference_time(args)
    store = _build_store(args)
    appointments, accounts = store.snapshot()
    data = build_dashboard(appointments, accounts, now, monthly_goal=args.goal)

    if args.json:
        data["datasets"] = store.status()
        print(json.dumps(data, ensure_ascii=False, indent=2, default=str))
        return

    k = data["kpis"]
    print("\n" + "=" * 70)
    print(f"  SALON DASH — {now:%d/%m/%Y %H:%M}")
    print("=" * 70)
    print(f"  Citas hoy:       {k['appointments_today']['total']:>6}   ({k['appointments_today']['subtitle']})")
    print(f"  Ingresos hoy:    {k['revenue_today']['formatted']:>12}")
    nxt = k["next_appointment"]
    extra = f"  {nxt['remaining_label']}" if "remaining_label" in nxt else ""
    print(f"  Próxima cita:    {nxt['value']:>6}   {nxt['subtitle']}{extra}")
    prog = k["monthly_progress"]
    print(f"  Meta mensual:    {prog['formatted']:>6}   ({prog['subtitle']})")

    charts = data["charts"]
    if charts["category_mix"]:
        print("\n  SERVICIOS")
        for c in charts["category_mix"]:
            print(f"    {c['name']:<14}{c['value']:>4}  {c['pct']:>5.1f}%")
    if charts["hourly_distribution"]:
        print("\n  FRANJAS")
        for h in charts["hourly_distribution"]:
            print(f"    {h['slot']:<14}{h['appointments']:>4}")
    print("\n  ÚLTIMOS 7 DÍAS")
    for d in charts["weekly_comparison"]:
        print(f"    {d['day']:<5}{d['date']}  {d['appointments']:>4} citas  {format_eur(d['revenue']):>12}")

    if data["agenda"]:
        print(f"\n  AGENDA ({len(data['agenda'])})")
        for a in data["agenda"]:
            print(f"    {a['time']:<6}{a['client_name'][:22]:<24}{a['service_text'][:22]:<24}{a['status_label']}")
    print("=" * 70 + "\n")


def cmd_report(args):
    """Generate the daily Excel report."""
    from salon_dash.reports.daily_report import generate_excel

    print("\n" + "=" * 70)
    print("  SALON DASH — DAILY REPORT")
    print("=" * 70)
    print(f"  Started: {dt.datetime.now():%Y-%m-%d %H:%M:%S}")

    now = _reference_time(args)
    store = _build_store(args)
    appointments, accounts = store.snapshot()

    if args.output:
        out = args.output
    else:
        REPORTS_FOLDER.mkdir(parents=True, exist_ok=True)
        out = REPORTS_FOLDER / f"Informe_{now:%Y-%m-%d_%H%M}.xlsx"

    path = generate_excel(appointments, accounts, out, now, monthly_goal=args.goal)
    print(f"\n  Report saved to: {path}\n")


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    print(f"\nStarting Salon Dash API on port {args.port}...")
    uvicorn.run("salon_dash.main:app", host="0.0.0.0", port=args.port, reload=args.reload,
                timeout_keep_alive=65)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Salon Dash — Appointments and revenue dashboard for a barber shop",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # summary subcommand
    summary_parser = subparsers.add_parser("summary", help="Print dashboard summary")
    _add_source_args(summary_parser)
    summary_parser.add_argument("--json", action="store_true", help="Print the full dashboard as JSON")
    summary_parser.set_defaults(func=cmd_summary)

    # report subcommand
    report_parser = subparsers.add_parser("report", help="Generate daily Excel report")
    _add_source_args(report_parser)
    report_parser.add_argument("--output", help="Output .xlsx path (default: reports folder)")
    report_parser.set_defaults(func=cmd_report)

    # serve subcommand
    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return

    if getattr(args, "now", None):
        try:
            _reference_time(args)
        except ValueError:
            parser.error(f"invalid --now: {args.now}")

    args.func(args)


if __name__ == "__main__":
    main()
