from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Any, Optional
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import RecordFieldError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def get_zone(name: str | None = None) -> ZoneInfo:
    return ZoneInfo(name or DEFAULT_TIMEZONE)


def now_local(tz: ZoneInfo | None = None) -> datetime:
    """Current time in the ledger timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz or get_zone())


def months_before(day: date, months: int) -> date:
    """Same day-of-month ``months`` earlier, clamped to the month's last day."""
    month_index = day.year * 12 + (day.month - 1) - int(months)
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def iter_days(start: date, end: date):
    """Yield every calendar day in ``[start, end]``."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def day_start(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def day_window(start: date, end: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Half-open timestamp window covering the whole days ``start``..``end``."""
    return day_start(start, tz), day_start(end + timedelta(days=1), tz)


def to_local_date(value: Any, tz: ZoneInfo) -> date:
    """Normalize a stored ``date`` field to the calendar day it represents.

    Stored values can be aware datetimes (Firestore), naive datetimes already in
    local wall time (MySQL), plain dates, or ISO strings written by older
    clients.
    """

    if value is None:
        raise RecordFieldError("record has no date")

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz).date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as exc:
            raise RecordFieldError(f"unparseable date {value!r}") from exc
        return to_local_date(parsed, tz)

    raise RecordFieldError(f"unsupported date value type: {type(value)!r}")


def parse_hhmm(value: str) -> time:
    """Parse 'HH:MM' (or 'HH:MM:SS') into a time."""
    parts = str(value).strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time string: {value!r}")
    seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
    return time(hour=int(parts[0]), minute=int(parts[1]), second=seconds)


def format_hhmm(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def hours_between(clock_in: str, clock_out: Optional[str]) -> Optional[str]:
    """Worked time between two same-day HH:MM strings as 'H:MM', or None when open."""
    if not clock_out:
        return None
    start = parse_hhmm(clock_in)
    end = parse_hhmm(clock_out)
    minutes = (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)
    if minutes < 0:
        raise ValueError(f"clock-out {clock_out} is before clock-in {clock_in}")
    return f"{minutes // 60}:{minutes % 60:02d}"
