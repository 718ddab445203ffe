# eisenmatrix/interval.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Tuple, Union

from .model import Frequency, ProjectedTask, Task, ViewMode, parse_enum
from .occurrence import is_active_on, series_end_date, status_on
from .util.calendar import (
    MONDAY,
    each_day,
    end_of_month,
    end_of_week,
    end_of_year,
    start_of_month,
    start_of_week,
    start_of_year,
)
from .util.timeparse import DateLike, as_date


@dataclass(frozen=True)
class ViewInterval:
    mode: ViewMode
    start: dt.date   # inclusive
    end: dt.date     # inclusive

    def contains(self, d: dt.date) -> bool:
        return self.start <= d <= self.end

    def days(self) -> List[dt.date]:
        return list(each_day(self.start, self.end))


# Granularities in which each cadence may appear. A series is hidden from
# views coarser than its own cadence.
VISIBLE_MODES: Dict[Frequency, FrozenSet[ViewMode]] = {
    Frequency.DAILY: frozenset({ViewMode.DAY}),
    Frequency.WEEKLY: frozenset({ViewMode.DAY, ViewMode.WEEK}),
    Frequency.MONTHLY: frozenset({ViewMode.DAY, ViewMode.WEEK, ViewMode.MONTH}),
    Frequency.YEARLY: frozenset(ViewMode),
    Frequency.NONE: frozenset(ViewMode),
}


def _mode(mode: Union[ViewMode, str]) -> ViewMode:
    return parse_enum(ViewMode, mode)


def view_interval(mode: Union[ViewMode, str], anchor: DateLike, week_start: int = MONDAY) -> ViewInterval:
    m = _mode(mode)
    d = as_date(anchor)
    if m is ViewMode.DAY:
        return ViewInterval(m, d, d)
    if m is ViewMode.WEEK:
        return ViewInterval(m, start_of_week(d, week_start), end_of_week(d, week_start))
    if m is ViewMode.MONTH:
        return ViewInterval(m, start_of_month(d), end_of_month(d))
    return ViewInterval(m, start_of_year(d), end_of_year(d))


def visible_in_granularity(task: Task, mode: Union[ViewMode, str]) -> bool:
    return _mode(mode) in VISIBLE_MODES[task.frequency]


def projects_into(task: Task, interval: ViewInterval) -> bool:
    """True when the task has at least one occurrence inside `interval`.

    Does not apply the frequency ceiling; see `visible_in_granularity`.
    """
    if task.frequency is Frequency.NONE:
        return interval.contains(task.anchor_date)

    if interval.mode is ViewMode.YEAR:
        # Every cadence occurs at least once per calendar year once started,
        # so the year check only needs the series bounds.
        if task.anchor_date > interval.end:
            return False
        end = series_end_date(task)
        return end is None or end >= interval.start

    return any(is_active_on(task, d) for d in each_day(interval.start, interval.end))


def filter_for_view(
    tasks: Iterable[Task],
    mode: Union[ViewMode, str],
    anchor: DateLike,
    week_start: int = MONDAY,
) -> List[ProjectedTask]:
    """Tasks visible in the matrix/list for `mode` around `anchor`.

    Each row carries the status resolved at `anchor` itself, not at the
    individual occurrence dates inside the interval.
    """
    iv = view_interval(mode, anchor, week_start)
    at = as_date(anchor)
    out: List[ProjectedTask] = []
    for t in tasks:
        if not visible_in_granularity(t, iv.mode):
            continue
        if not projects_into(t, iv):
            continue
        out.append(ProjectedTask(task=t, status=status_on(t, at)))
    return out


def project_all(tasks: Iterable[Task], anchor: DateLike) -> List[ProjectedTask]:
    """Every task with its status at `anchor`, no interval filtering."""
    at = as_date(anchor)
    return [ProjectedTask(task=t, status=status_on(t, at)) for t in tasks]


# --- calendar grid ------------------------------------------------------------


def calendar_days(mode: Union[ViewMode, str], anchor: DateLike, week_start: int = MONDAY) -> List[dt.date]:
    """Cells of the calendar grid; Month pads to whole weeks, Year has none."""
    m = _mode(mode)
    d = as_date(anchor)
    if m is ViewMode.DAY:
        return [d]
    if m is ViewMode.WEEK:
        return list(each_day(start_of_week(d, week_start), end_of_week(d, week_start)))
    if m is ViewMode.MONTH:
        first = start_of_week(start_of_month(d), week_start)
        last = end_of_week(end_of_month(d), week_start)
        return list(each_day(first, last))
    return []


def tasks_on_day(tasks: Iterable[Task], day: DateLike) -> List[ProjectedTask]:
    """Occurrences on one grid cell, status resolved for that cell's date."""
    d = as_date(day)
    return [ProjectedTask(task=t, status=status_on(t, d)) for t in tasks if is_active_on(t, d)]


@dataclass(frozen=True)
class MonthSummary:
    month_start: dt.date
    tasks: Tuple[ProjectedTask, ...]


def year_overview(tasks: Iterable[Task], anchor: DateLike) -> List[MonthSummary]:
    d = as_date(anchor)
    pool = [t for t in tasks if visible_in_granularity(t, ViewMode.YEAR)]
    out: List[MonthSummary] = []
    for month in range(1, 13):
        first = dt.date(d.year, month, 1)
        last = end_of_month(first)
        rows: List[ProjectedTask] = []
        for t in pool:
            if t.frequency is Frequency.NONE:
                hit = first <= t.anchor_date <= last
            else:
                hit = any(is_active_on(t, day) for day in each_day(first, last))
            if hit:
                rows.append(ProjectedTask(task=t, status=status_on(t, first)))
        out.append(MonthSummary(month_start=first, tasks=tuple(rows)))
    return out


__all__ = [
    "MonthSummary",
    "VISIBLE_MODES",
    "ViewInterval",
    "calendar_days",
    "filter_for_view",
    "project_all",
    "projects_into",
    "tasks_on_day",
    "view_interval",
    "visible_in_granularity",
    "year_overview",
]
