# eisenmatrix/occurrence.py
"""Occurrence projection for one-off tasks and recurring series.

A stored task maps onto a (possibly infinite) sequence of dated occurrences.
`is_active_on` answers whether an occurrence exists on a date, `status_on`
what state that occurrence is in. The two are deliberately independent:
the calendar grid asks both per cell, the matrix and list views ask for the
status at the viewed date only.
"""
from __future__ import annotations

import datetime as dt

from .model import Frequency, Task, TaskStatus
from .util.calendar import period_key
from .util.timeparse import DateLike, as_date, local_date_from_ms


def series_end_date(task: Task) -> dt.date | None:
    if task.recurrence_ended_at_ms is None:
        return None
    return local_date_from_ms(task.recurrence_ended_at_ms)


def is_active_on(task: Task, when: DateLike) -> bool:
    d = as_date(when)

    end = series_end_date(task)
    if end is not None and d > end:
        return False

    anchor = task.anchor_date
    if d < anchor:
        return False

    freq = task.frequency
    if freq is Frequency.DAILY:
        return True
    if freq is Frequency.WEEKLY:
        return d.weekday() == anchor.weekday()
    if freq is Frequency.MONTHLY:
        # No clamping: day 31 never occurs in a 30-day month.
        return d.day == anchor.day
    if freq is Frequency.YEARLY:
        return d.day == anchor.day and d.month == anchor.month
    return d == anchor


def status_on(task: Task, when: DateLike) -> TaskStatus:
    if task.frequency is Frequency.NONE:
        return task.status
    key = period_key(as_date(when), task.frequency)
    return task.completion_history.get(key, TaskStatus.TODO)


__all__ = ["is_active_on", "series_end_date", "status_on"]
