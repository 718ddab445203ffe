# eisenmatrix/metrics.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .model import Task, TaskStatus


@dataclass(frozen=True)
class SeriesAnalytics:
    total_tracked: int
    completed_count: int
    completion_rate: int               # whole percent
    recent: Tuple[Tuple[str, TaskStatus], ...]


def _period_order(key: str) -> str:
    # "2024-W9" must sort before "2024-W10".
    year, sep, week = key.partition("-W")
    if sep and week.isdigit():
        return f"{year}-W{int(week):02d}"
    return key


def series_analytics(task: Task, limit: int = 10) -> SeriesAnalytics:
    """Summarize a recurring task's completion ledger, newest periods first."""
    ledger = task.completion_history
    total = len(ledger)
    done = sum(1 for s in ledger.values() if s is TaskStatus.DONE)
    rate = int(done * 100 / total + 0.5) if total else 0
    keys = sorted(ledger.keys(), key=_period_order, reverse=True)[: max(0, int(limit))]
    return SeriesAnalytics(
        total_tracked=total,
        completed_count=done,
        completion_rate=rate,
        recent=tuple((k, ledger[k]) for k in keys),
    )


__all__ = ["SeriesAnalytics", "series_analytics"]
