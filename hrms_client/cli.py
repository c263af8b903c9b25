"""HRMS command-line client.

Every command opens the matching page through the app's router, so the
same authentication and role gates apply as in any other front-end.

Examples:
  hrms login --email jane@acme.test
  hrms attendance --status present --from 2024-01-01 --to 2024-01-31
  hrms apply-leave --type casual --from 2024-01-10 --to 2024-01-12 --reason "Family trip"
  hrms payroll --month 1 --year 2024 --download
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Optional, Sequence

from hrms_client.common.constants import LOGIN_PATH
from hrms_client.common.exceptions import ApiError, error_message
from hrms_client.common.notifications import Notifier, Toast
from hrms_client.config import settings
from hrms_client.main import HrmsApp, create_app

logger = logging.getLogger(__name__)


# ── Output helpers ──────────────────────────────────────────────────

def _print_toast(toast: Toast) -> None:
    marker = "!" if toast.is_error else "*"
    text = f"{toast.title}: {toast.description}" if toast.description else toast.title
    print(f"{marker} {text}", file=sys.stderr)


def _print_table(rows: Sequence[dict[str, Any]], columns: Sequence[str]) -> None:
    if not rows:
        return
    widths = {
        col: max(len(col), *(len(str(row.get(col, ""))) for row in rows))
        for col in columns
    }
    print("  ".join(col.upper().ljust(widths[col]) for col in columns))
    for row in rows:
        print("  ".join(str(row.get(col, "")).ljust(widths[col]) for col in columns))


def _emit(args: argparse.Namespace, rows: Sequence[dict[str, Any]], columns: Sequence[str], empty: str) -> None:
    if args.output_json:
        print(json.dumps(list(rows), indent=2, default=str))
    elif rows:
        _print_table(rows, columns)
    else:
        print(empty)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r} (expected YYYY-MM-DD)")


async def _open(app: HrmsApp, path: str, query: Optional[dict[str, str]] = None) -> Any:
    """Open *path*; report why nothing rendered and return ``None`` then.

    Judged by where the navigator ended up, so plain redirects (``/`` to
    ``/dashboard``) still count as rendered.
    """
    page = await app.open(path, query=query)
    location = app.location
    if location is not None and location.state.get("accessDenied"):
        print(f"Access to {path} denied for your role.", file=sys.stderr)
        return None
    if location is not None and location.path == LOGIN_PATH:
        print("Not signed in. Run `hrms login` first.", file=sys.stderr)
        return None
    if page is None:
        print(f"No page at {path}.", file=sys.stderr)
        return None
    return page


# ═════════════════════════════════════════════════════════════════════
# Commands
# ═════════════════════════════════════════════════════════════════════


async def cmd_login(app: HrmsApp, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    try:
        user = await app.login(args.email, password)
    except ApiError as exc:
        print(f"Login failed: {error_message(exc, 'Invalid credentials')}", file=sys.stderr)
        return 1
    print(f"Signed in as {user.display_name} ({user.role or 'no role'})")
    return 0


async def cmd_logout(app: HrmsApp, args: argparse.Namespace) -> int:
    app.logout()
    print("Signed out.")
    return 0


async def cmd_whoami(app: HrmsApp, args: argparse.Namespace) -> int:
    user = app.session.user
    if not app.session.is_authenticated or user is None:
        print("Not signed in.", file=sys.stderr)
        return 1
    info = {
        "id": user.id,
        "name": user.display_name,
        "email": user.email,
        "role": user.role,
        "organizationId": user.organization_id,
    }
    if args.output_json:
        print(json.dumps(info, indent=2))
    else:
        for key, value in info.items():
            print(f"{key:>15}: {value or '-'}")
    return 0


async def cmd_attendance(app: HrmsApp, args: argparse.Namespace) -> int:
    path = f"/attendance/employee/{args.employee}" if args.employee else "/attendance"
    page = await _open(app, path)
    if page is None:
        return 1
    changes: dict[str, Any] = {}
    if args.status:
        changes["status"] = None if args.status == "all" else args.status
    if args.start:
        changes["start_date"] = args.start
    if args.end:
        changes["end_date"] = args.end
    if args.search:
        changes["search"] = args.search
    if changes:
        await page.listing.set_filters(**changes)
    if args.page and args.page > 1:
        await page.listing.set_page(args.page)
    if page.error:
        print(page.error, file=sys.stderr)
        return 1
    _emit(args, page.rows(), ("date", "employee", "status", "clock_in", "clock_out", "hours"), page.empty_message)
    if not args.output_json and page.records:
        print(f"\nPage {page.listing.page} of {page.listing.total_pages} ({page.listing.total} records)")
    if args.export:
        saved = await page.export()
        if saved is None:
            return 1
        print(f"Saved {saved}")
    return 0


async def cmd_clock(app: HrmsApp, args: argparse.Namespace) -> int:
    page = await _open(app, "/dashboard")
    if page is None:
        return 1
    if args.command == "clock-in":
        if not page.can_clock_in:
            print("Already clocked in today.", file=sys.stderr)
            return 1
        return 0 if await page.clock_in() else 1
    if not page.can_clock_out:
        print("Clock in first (or already clocked out today).", file=sys.stderr)
        return 1
    return 0 if await page.clock_out() else 1


async def cmd_leaves(app: HrmsApp, args: argparse.Namespace) -> int:
    page = await _open(app, "/leaves/track")
    if page is None:
        return 1
    if args.status:
        await page.set_status(None if args.status == "all" else args.status)
    if args.type:
        await page.set_leave_type(args.type)
    if page.listing.error:
        print(page.listing.error, file=sys.stderr)
        return 1
    rows = [
        {
            "id": item.id,
            "type": item.leave_type,
            "from": (item.start_date or "")[:10],
            "to": (item.end_date or "")[:10],
            "days": item.days,
            "status": item.status,
        }
        for item in page.requests
    ]
    _emit(args, rows, ("id", "type", "from", "to", "days", "status"), page.empty_message)
    return 0


async def cmd_apply_leave(app: HrmsApp, args: argparse.Namespace) -> int:
    page = await _open(app, "/apply-leave")
    if page is None:
        return 1
    if not page.select_leave_type(args.type):
        known = ", ".join(sorted({item.type for item in page.leave_types})) or "none configured"
        print(f"Unknown leave type {args.type!r} (available: {known})", file=sys.stderr)
        return 1
    page.set_dates(args.start, args.end)
    if args.days is not None:
        page.set_days(args.days)
    page.reason = args.reason
    if args.document:
        await page.attach([Path(p) for p in args.document])
    return 0 if await page.submit() else 1


async def cmd_cancel_leave(app: HrmsApp, args: argparse.Namespace) -> int:
    page = await _open(app, "/leaves/track")
    if page is None:
        return 1
    return 0 if await page.cancel(args.leave_id) else 1


async def cmd_balance(app: HrmsApp, args: argparse.Namespace) -> int:
    page = await _open(app, "/leaves/balance")
    if page is None:
        return 1
    if args.type:
        await page.set_leave_type(args.type)
    if page.error:
        print(page.error, file=sys.stderr)
        return 1
    rows = [
        {"type": row.label, "allocated": row.allocated, "used": row.used, "balance": row.balance}
        for row in page.rows
    ]
    if not args.output_json:
        print(f"Leave balance for {page.employee_name}\n")
    _emit(args, rows, ("type", "allocated", "used", "balance"), page.empty_message)
    return 0


async def cmd_payroll(app: HrmsApp, args: argparse.Namespace) -> int:
    query = {"employeeId": args.employee} if args.employee else None
    page = await _open(app, "/payroll", query=query)
    if page is None:
        return 1
    if args.month or args.year:
        try:
            await page.set_period(args.month, args.year)
        except ValueError as exc:
            print(str(exc), file=sys.stderr)
            return 1
    if page.error:
        print(page.error, file=sys.stderr)
        return 1
    rows = [
        {
            "id": record.id,
            "period": record.period_label,
            "status": record.status,
            "gross": record.gross_earnings,
            "deductions": record.total_deductions,
            "net": page.net_payable(record),
        }
        for record in page.records
    ]
    _emit(args, rows, ("id", "period", "status", "gross", "deductions", "net"), page.empty_message)
    if args.download:
        if not page.records:
            return 1
        saved = await page.download(page.records[0])
        if saved is None:
            return 1
        print(f"Saved {saved}")
    return 0


async def cmd_salary(app: HrmsApp, args: argparse.Namespace) -> int:
    query = {"employeeId": args.employee} if args.employee else None
    page = await _open(app, "/salary-slips", query=query)
    if page is None:
        return 1
    if page.error:
        print(page.error, file=sys.stderr)
        return 1
    if page.structure is None:
        print("No salary structure found")
        return 0
    data = page.structure.model_dump(exclude={"id", "employee_id"})
    data.update(gross=page.monthly_gross, total_deductions=page.total_deductions, net_pay=page.net_pay)
    if args.output_json:
        print(json.dumps(data, indent=2, default=str))
    else:
        for key, value in data.items():
            print(f"{key:>18}: {value}")
    return 0


async def cmd_open(app: HrmsApp, args: argparse.Namespace) -> int:
    page = await app.open(args.path)
    location = app.location
    print(f"Location: {location.path if location else '-'}")
    if location is not None and location.state:
        print(f"State:    {json.dumps(location.state, default=str)}")
    if page is not None:
        print(f"Page:     {type(page).__name__}")
    return 0


COMMANDS = {
    "login": cmd_login,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "attendance": cmd_attendance,
    "clock-in": cmd_clock,
    "clock-out": cmd_clock,
    "leaves": cmd_leaves,
    "apply-leave": cmd_apply_leave,
    "cancel-leave": cmd_cancel_leave,
    "balance": cmd_balance,
    "payroll": cmd_payroll,
    "salary": cmd_salary,
    "open": cmd_open,
}


# ═════════════════════════════════════════════════════════════════════
# Entry point
# ═════════════════════════════════════════════════════════════════════


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hrms",
        description="HRMS client — attendance, leave and payroll from the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s login --email jane@acme.test
  %(prog)s attendance --status present --from 2024-01-01 --to 2024-01-31
  %(prog)s apply-leave --type casual --from 2024-01-10 --to 2024-01-12 --reason "Family trip"
  %(prog)s open /leaves/balance
        """,
    )
    parser.add_argument("--json", dest="output_json", action="store_true",
                        help="Output results as JSON")
    parser.add_argument("--backend", type=str,
                        help=f"Backend base URL (default: {settings.BACKEND_URL})")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Sign in and store the session")
    login.add_argument("--email", required=True)
    login.add_argument("--password", help="Prompted for when omitted")

    sub.add_parser("logout", help="Clear the stored session")
    sub.add_parser("whoami", help="Show the signed-in user")

    attendance = sub.add_parser("attendance", help="List attendance records")
    attendance.add_argument("--status", choices=("all", "present", "absent", "halfDay", "late"))
    attendance.add_argument("--from", dest="start", type=_parse_date, help="Start date (YYYY-MM-DD)")
    attendance.add_argument("--to", dest="end", type=_parse_date, help="End date (YYYY-MM-DD)")
    attendance.add_argument("--search", type=str)
    attendance.add_argument("--employee", type=str, help="Employee id (admins only)")
    attendance.add_argument("--page", type=int, default=1)
    attendance.add_argument("--export", action="store_true",
                            help="Download the report for the current filters")

    sub.add_parser("clock-in", help="Clock in for today")
    sub.add_parser("clock-out", help="Clock out for today")

    leaves = sub.add_parser("leaves", help="Track leave requests")
    leaves.add_argument("--status", choices=("all", "applied", "pending", "approved", "rejected", "cancelled"))
    leaves.add_argument("--type", type=str, help="Leave type filter")

    apply = sub.add_parser("apply-leave", help="Apply for leave")
    apply.add_argument("--type", required=True, help="Leave type name or id")
    apply.add_argument("--from", dest="start", required=True, type=_parse_date)
    apply.add_argument("--to", dest="end", required=True, type=_parse_date)
    apply.add_argument("--days", type=float, help="Override the computed number of days")
    apply.add_argument("--reason", required=True)
    apply.add_argument("--document", action="append", help="Supporting image (repeatable)")

    cancel = sub.add_parser("cancel-leave", help="Cancel a pending leave request")
    cancel.add_argument("leave_id")

    balance = sub.add_parser("balance", help="Show leave balance")
    balance.add_argument("--type", type=str, help="Leave type (admins)")

    payroll = sub.add_parser("payroll", help="List payroll records")
    payroll.add_argument("--employee", type=str, help="Employee id")
    payroll.add_argument("--month", type=int)
    payroll.add_argument("--year", type=int)
    payroll.add_argument("--download", action="store_true", help="Download the first payslip listed")

    salary = sub.add_parser("salary", help="Show salary structure")
    salary.add_argument("--employee", type=str, help="Employee id")

    open_ = sub.add_parser("open", help="Resolve a path through the router and load its page")
    open_.add_argument("path")

    return parser


async def run(args: argparse.Namespace, app: HrmsApp) -> int:
    try:
        return await COMMANDS[args.command](app, args)
    finally:
        await app.aclose()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    config = settings.model_copy(update={"BACKEND_URL": args.backend}) if args.backend else settings
    app = create_app(config, notifier=Notifier(sink=_print_toast))
    try:
        return asyncio.run(run(args, app))
    except ApiError as exc:
        logger.error("Request failed: %r", exc)
        print(error_message(exc, "Request failed"), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
