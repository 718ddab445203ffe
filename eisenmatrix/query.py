# eisenmatrix/query.py
from __future__ import annotations

"""eisenmatrix.query

List-view search, filtering and sorting over projected tasks.

Filters left as None mean "All". Status filtering uses the status resolved
for the viewed date, so a weekly task done this week is "Done" here even
though its series keeps going.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from .interval import project_all
from .model import Frequency, Importance, ProjectedTask, Task, TaskStatus, Urgency
from .util.timeparse import DateLike

SORT_KEYS = ("date", "title", "priority")


def priority_score(t: Task) -> int:
    """High/High = 3, Low urgency/High importance = 2, High/Low = 1, Low/Low = 0."""
    score = 0
    if t.importance is Importance.HIGH:
        score += 2
    if t.urgency is Urgency.HIGH:
        score += 1
    return score


@dataclass(frozen=True)
class ListQuery:
    search: str = ""
    status: Optional[TaskStatus] = None
    urgency: Optional[Urgency] = None
    importance: Optional[Importance] = None
    frequency: Optional[Frequency] = None
    sort_by: str = "date"
    descending: bool = True

    def __post_init__(self) -> None:
        if self.sort_by not in SORT_KEYS:
            raise ValueError(f"sort_by must be one of {SORT_KEYS}; got {self.sort_by!r}")

    def matches(self, row: ProjectedTask) -> bool:
        t = row.task
        needle = self.search.strip().lower()
        if needle and needle not in t.title.lower() and needle not in t.description.lower():
            return False
        if self.status is not None and row.status is not self.status:
            return False
        if self.urgency is not None and t.urgency is not self.urgency:
            return False
        if self.importance is not None and t.importance is not self.importance:
            return False
        if self.frequency is not None and t.frequency is not self.frequency:
            return False
        return True

    def run(self, rows: Iterable[ProjectedTask]) -> List[ProjectedTask]:
        kept = [r for r in rows if self.matches(r)]
        # Stable: ties keep collection order.
        return sorted(kept, key=_SORT_FUNCS[self.sort_by], reverse=self.descending)


_SORT_FUNCS: Dict[str, Callable[[ProjectedTask], Any]] = {
    # YYYY-MM-DD strings sort chronologically.
    "date": lambda r: r.task.date,
    "title": lambda r: r.task.title.lower(),
    "priority": lambda r: priority_score(r.task),
}


def list_view(tasks: Iterable[Task], anchor: DateLike, query: Optional[ListQuery] = None) -> List[ProjectedTask]:
    """All tasks with status at `anchor`, filtered and sorted by `query`."""
    q = query or ListQuery()
    return q.run(project_all(tasks, anchor))


__all__ = ["ListQuery", "SORT_KEYS", "list_view", "priority_score"]
