# eisenmatrix/quadrants.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple, TypeVar, Union

from .model import Frequency, Importance, ProjectedTask, Task, TaskPatch, Urgency


@dataclass(frozen=True)
class Quadrant:
    qid: str
    urgency: Urgency
    importance: Importance
    title: str


QUADRANTS: Dict[str, Quadrant] = {
    "q1": Quadrant("q1", Urgency.HIGH, Importance.HIGH, "Do First"),
    "q2": Quadrant("q2", Urgency.LOW, Importance.HIGH, "Schedule"),
    "q3": Quadrant("q3", Urgency.HIGH, Importance.LOW, "Delegate"),
    "q4": Quadrant("q4", Urgency.LOW, Importance.LOW, "Eliminate"),
}

_BY_PAIR: Dict[Tuple[Urgency, Importance], str] = {(q.urgency, q.importance): q.qid for q in QUADRANTS.values()}

T = TypeVar("T", Task, ProjectedTask)


def _task_of(item: Union[Task, ProjectedTask]) -> Task:
    return item.task if isinstance(item, ProjectedTask) else item


def quadrant_for(item: Union[Task, ProjectedTask]) -> str:
    t = _task_of(item)
    return _BY_PAIR[(t.urgency, t.importance)]


def group_by_quadrant(items: Iterable[T]) -> Dict[str, List[T]]:
    """Bucket tasks by quadrant id; every quadrant is present, input order kept."""
    out: Dict[str, List[T]] = {qid: [] for qid in QUADRANTS}
    for it in items:
        out[quadrant_for(it)].append(it)
    return out


def seed_for_quadrant(qid: str) -> TaskPatch:
    """Patch for a new task added straight into quadrant `qid`."""
    q = QUADRANTS[qid]
    return TaskPatch(urgency=q.urgency, importance=q.importance, frequency=Frequency.NONE)
