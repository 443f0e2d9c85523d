from __future__ import annotations

import calendar
import logging
import re
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta


logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})")

WEEKDAY_SHORT_NAMES: tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def parse_local_date(value: str | date | datetime | None) -> date | None:
    """Parse a ``YYYY-MM-DD`` value into a calendar date.

    The year, month and day are taken verbatim from the string, so the result
    never depends on the host timezone. Anything after the day component (a
    time of day, an offset) is ignored. Unparsable values resolve to ``None``.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    match = _DATE_PATTERN.match(str(value))
    if not match:
        if str(value).strip():
            logger.debug("Ignoring unparsable date value %r", value)
        return None

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        logger.debug("Ignoring out-of-range date value %r", value)
        return None


def resolve_today(today: date | datetime | None = None) -> date:
    if today is None:
        return date.today()
    if isinstance(today, datetime):
        return today.date()
    return today


def days_between(start: date | None, end: date | None) -> int | None:
    """Whole days between two dates regardless of order, or ``None``."""

    if start is None or end is None:
        return None
    return abs((end - start).days)


def shift_days(day: date, days: int) -> date:
    """Move ``day`` by ``days``, raising ``ValueError`` past the calendar range."""

    try:
        return day + timedelta(days=days)
    except OverflowError as exc:
        raise ValueError(f"{day.isoformat()} shifted by {days} days is out of range") from exc


def days_ago(today: date, days: int) -> date:
    return shift_days(today, -days)


def weeks_ago(today: date, weeks: int) -> date:
    return shift_days(today, -7 * weeks)


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""

    return day - timedelta(days=day.weekday())


def week_bounds(today: date, offset: int = 0) -> tuple[date, date]:
    """Return the Monday and Sunday of a week relative to ``today``.

    ``offset`` -1 is the current (possibly partial) week, 0 the most recent
    completed week, 1 the week before that, and so on.
    """

    monday = week_start(today)
    if offset != -1:
        monday = weeks_ago(monday, offset + 1)
    return monday, shift_days(monday, 6)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise ValueError("Month must be between 1 and 12")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def shift_months(day: date, months: int) -> date:
    """Move ``day`` by whole months, clamping to the end of shorter months."""

    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    if not MINYEAR <= year <= MAXYEAR:
        raise ValueError(f"{day.isoformat()} shifted by {months} months is out of range")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def iter_days(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def format_week_label(monday: date, sunday: date) -> str:
    return f"{monday.strftime('%b')} {monday.day} - {sunday.strftime('%b')} {sunday.day}, {sunday.year}"


def format_month_label(year: int, month: int) -> str:
    return date(year, month, 1).strftime("%B %Y")
