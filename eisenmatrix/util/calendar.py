# eisenmatrix/util/calendar.py
"""Calendar arithmetic on naive local dates.

All helpers are pure functions of their arguments. Week starts use Python's
weekday numbering (0=Monday .. 6=Sunday).
"""
from __future__ import annotations

import calendar as _cal
import datetime as dt
from typing import Iterator

from eisenmatrix.model import Frequency

MONDAY = 0
SUNDAY = 6

_ONE_DAY = dt.timedelta(days=1)


def _check_week_start(week_start: int) -> int:
    ws = int(week_start)
    if not (MONDAY <= ws <= SUNDAY):
        raise ValueError(f"week_start must be 0..6 (Monday..Sunday); got {week_start!r}")
    return ws


def start_of_week(d: dt.date, week_start: int = MONDAY) -> dt.date:
    ws = _check_week_start(week_start)
    diff = (d.weekday() - ws) % 7
    return d - dt.timedelta(days=diff)


def end_of_week(d: dt.date, week_start: int = MONDAY) -> dt.date:
    return start_of_week(d, week_start) + dt.timedelta(days=6)


def start_of_month(d: dt.date) -> dt.date:
    return d.replace(day=1)


def end_of_month(d: dt.date) -> dt.date:
    last = _cal.monthrange(d.year, d.month)[1]
    return d.replace(day=last)


def start_of_year(d: dt.date) -> dt.date:
    return dt.date(d.year, 1, 1)


def end_of_year(d: dt.date) -> dt.date:
    return dt.date(d.year, 12, 31)


def each_day(start: dt.date, end: dt.date) -> Iterator[dt.date]:
    """Yield every date from start to end, both inclusive."""
    cur = start
    while cur <= end:
        yield cur
        cur += _ONE_DAY


def period_key(d: dt.date, frequency: Frequency) -> str:
    """Identify the recurring period instance `d` falls into.

    Weekly keys use the ISO-8601 week-numbering year so that a key never
    names two different weeks (e.g. 2024-12-30 is "2025-W1").
    """
    if frequency is Frequency.DAILY:
        return d.isoformat()
    if frequency is Frequency.WEEKLY:
        iso_year, iso_week, _ = d.isocalendar()
        return f"{iso_year:04d}-W{iso_week}"
    if frequency is Frequency.MONTHLY:
        return f"{d.year:04d}-{d.month:02d}"
    if frequency is Frequency.YEARLY:
        return f"{d.year:04d}"
    return ""


def recurrence_deadline(d: dt.date, frequency: Frequency, week_start: int = MONDAY) -> dt.date:
    """End of the period containing `d` for weekly/monthly cadences; else `d`."""
    if frequency is Frequency.WEEKLY:
        return end_of_week(d, week_start)
    if frequency is Frequency.MONTHLY:
        return end_of_month(d)
    return d
