from __future__ import annotations

import calendar
from datetime import date
from typing import Iterable, Sequence

from ..common.datetime_utils import iter_days, parse_iso_date
from ..core.constants import KNOWN_HOLIDAYS, WEEKLY_REST_WEEKDAY
from ..core.enums import PolicyKind
from ..core.exceptions import ValidationError
from .model import Holiday, PolicyDate


def default_holidays() -> list[Holiday]:
    return [Holiday(day=parse_iso_date(d), name=name) for d, name in KNOWN_HOLIDAYS]


def resolve_policy_dates(
    start: date,
    end: date,
    *,
    holidays: Iterable[Holiday] | None = None,
    rest_weekday: int = WEEKLY_REST_WEEKDAY,
) -> Sequence[PolicyDate]:
    """Merge named holidays and weekly rest days within ``[start, end]``.

    The result is chronological with one entry per day; a holiday that falls on
    the rest weekday keeps the holiday's name.
    """

    if start > end:
        raise ValidationError(f"start date {start} is after end date {end}")
    if not 0 <= int(rest_weekday) <= 6:
        raise ValidationError(f"rest weekday must be 0..6, got {rest_weekday}")

    named: dict[date, str] = {}
    for h in default_holidays() if holidays is None else holidays:
        if start <= h.day <= end:
            named.setdefault(h.day, h.name)

    rest_name = calendar.day_name[int(rest_weekday)]
    out: list[PolicyDate] = []
    for day in iter_days(start, end):
        if day in named:
            out.append(PolicyDate(day=day, reason=named[day], kind=PolicyKind.NAMED_HOLIDAY))
        elif day.weekday() == int(rest_weekday):
            out.append(PolicyDate(day=day, reason=rest_name, kind=PolicyKind.WEEKLY_REST))
    return out
