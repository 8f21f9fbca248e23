"""Billing-month arithmetic in the configured billing timezone.

A billing month is a "YYYY-MM" string. "Today" is always taken from an
injectable clock and converted to the billing timezone before truncating to
a month, so a run shortly after midnight local time lands in the right month
regardless of the server's own timezone.
"""

import re
from datetime import date, datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from src.services.errors import LedgerValidationError

MONTH_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: current time, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def parse_month(month: str) -> date:
    """Return the first day of a YYYY-MM billing month.

    Raises:
        LedgerValidationError: If month is not a valid YYYY-MM string
    """
    match = MONTH_PATTERN.match(month or "")
    if not match:
        raise LedgerValidationError(f"Invalid billing month {month!r}, expected YYYY-MM")
    return date(int(match.group(1)), int(match.group(2)), 1)


def month_of(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def previous_month(month: str) -> str:
    """Billing month immediately before the given one ("2025-01" -> "2024-12")."""
    return month_of(parse_month(month) - relativedelta(months=1))


def next_month(month: str) -> str:
    return month_of(parse_month(month) + relativedelta(months=1))


def local_date(moment: datetime, tz: ZoneInfo) -> date:
    """Calendar date of a moment in the billing timezone.

    Naive datetimes are treated as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz).date()


def billing_month(moment: datetime, tz: ZoneInfo) -> str:
    return month_of(local_date(moment, tz))


def due_date_for(month: str, today: date, due_day: int = 5) -> date:
    """Due date for a billing month.

    Rent is due on due_day of the billing month. If that day has already
    passed, the next occurrence (due_day of the following month) is used.
    """
    due = parse_month(month).replace(day=due_day)
    if due < today:
        due = due + relativedelta(months=1)
    return due


__all__ = [
    "Clock",
    "utc_now",
    "parse_month",
    "month_of",
    "previous_month",
    "next_month",
    "local_date",
    "billing_month",
    "due_date_for",
]
