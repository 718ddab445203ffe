# eisenmatrix/exchange.py
"""Flat CSV exchange of the task collection.

History and completion ledgers are not part of the flat format. Import never
commits by itself: it yields candidates for review, and the reviewed subset
is merged into or replaces the live collection.
"""
from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import structlog

from .model import Frequency, Importance, Task, TaskStatus, Urgency, coerce_enum
from .store import MutationResult, TaskStore
from .util.timeparse import format_date, parse_ms, try_parse_date

log = structlog.get_logger(__name__)

COLUMNS: Tuple[str, ...] = (
    "id",
    "title",
    "description",
    "urgency",
    "importance",
    "status",
    "date",
    "frequency",
    "createdAt",
    "updatedAt",
    "completedAt",
    "recurrenceEndedAt",
)

NO_CANDIDATES_NOTICE = "No valid tasks found in the CSV file."


@dataclass(frozen=True)
class ImportCandidate:
    title: str
    date: str
    description: str = ""
    urgency: Urgency = Urgency.LOW
    importance: Importance = Importance.LOW
    status: TaskStatus = TaskStatus.TODO
    frequency: Frequency = Frequency.NONE
    source_id: Optional[str] = None
    created_at_ms: Optional[int] = None
    updated_at_ms: Optional[int] = None
    completed_at_ms: Optional[int] = None
    recurrence_ended_at_ms: Optional[int] = None


@dataclass(frozen=True)
class ImportResult:
    candidates: Tuple[ImportCandidate, ...]
    dropped: int = 0

    @property
    def notice(self) -> Optional[str]:
        return None if self.candidates else NO_CANDIDATES_NOTICE


# --- export -------------------------------------------------------------------


def _cell(v: object) -> str:
    if v is None:
        return ""
    if isinstance(v, (Urgency, Importance, TaskStatus, Frequency)):
        return v.value
    return str(v)


def export_csv(tasks: Iterable[Task]) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    w.writerow(COLUMNS)
    for t in tasks:
        w.writerow(
            [
                _cell(t.id),
                _cell(t.title),
                _cell(t.description),
                _cell(t.urgency),
                _cell(t.importance),
                _cell(t.status),
                _cell(t.date),
                _cell(t.frequency),
                _cell(t.created_at_ms),
                _cell(t.updated_at_ms),
                _cell(t.completed_at_ms),
                _cell(t.recurrence_ended_at_ms),
            ]
        )
    return buf.getvalue()


# --- import -------------------------------------------------------------------


def _column_map(header: Sequence[str]) -> Optional[Dict[str, int]]:
    """Column name -> index, or None when the row is not a header."""
    names = [h.strip() for h in header]
    found = {name: i for i, name in enumerate(names) if name in COLUMNS}
    if "title" in found and "date" in found:
        return found
    return None


def _row_to_candidate(row: Sequence[str], cols: Dict[str, int]) -> Optional[ImportCandidate]:
    def get(name: str) -> str:
        i = cols.get(name)
        if i is None or i >= len(row):
            return ""
        return row[i]

    title = get("title")
    day = try_parse_date(get("date").strip())
    if not title.strip() or day is None:
        return None

    source_id = get("id").strip() or None
    return ImportCandidate(
        title=title,
        date=format_date(day),
        description=get("description"),
        urgency=coerce_enum(Urgency, get("urgency"), Urgency.LOW),
        importance=coerce_enum(Importance, get("importance"), Importance.LOW),
        status=coerce_enum(TaskStatus, get("status"), TaskStatus.TODO),
        frequency=coerce_enum(Frequency, get("frequency") or None, Frequency.NONE),
        source_id=source_id,
        created_at_ms=parse_ms(get("createdAt")),
        updated_at_ms=parse_ms(get("updatedAt")),
        completed_at_ms=parse_ms(get("completedAt")),
        recurrence_ended_at_ms=parse_ms(get("recurrenceEndedAt")),
    )


def import_csv(text: str) -> ImportResult:
    """Parse exported CSV into reviewable candidates.

    A header row is matched by column name; without one, the fixed export
    column order is assumed. Rows lacking a title or a YYYY-MM-DD date are
    dropped.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    rows = [r for r in csv.reader(io.StringIO(text, newline="")) if any(c.strip() for c in r)]
    if not rows:
        return ImportResult(candidates=())

    cols = _column_map(rows[0])
    if cols is None:
        cols = {name: i for i, name in enumerate(COLUMNS)}
        body = rows
    else:
        body = rows[1:]

    candidates: List[ImportCandidate] = []
    dropped = 0
    for row in body:
        c = _row_to_candidate(row, cols)
        if c is None:
            dropped += 1
            continue
        candidates.append(c)

    if dropped:
        log.warning("import_rows_dropped", dropped=dropped, kept=len(candidates))
    return ImportResult(candidates=tuple(candidates), dropped=dropped)


def select_candidates(candidates: Sequence[ImportCandidate], indices: Optional[Iterable[int]] = None) -> List[ImportCandidate]:
    """Reviewed subset by 0-based index; None selects everything."""
    if indices is None:
        return list(candidates)
    keep = set(indices)
    return [c for i, c in enumerate(candidates) if i in keep]


# --- merge / replace ----------------------------------------------------------


def candidate_to_task(c: ImportCandidate, *, now: int, task_id: str) -> Task:
    return Task(
        id=task_id,
        title=c.title,
        description=c.description,
        urgency=c.urgency,
        importance=c.importance,
        status=c.status,
        date=c.date,
        frequency=c.frequency,
        created_at_ms=c.created_at_ms or now,
        updated_at_ms=now,
        completed_at_ms=c.completed_at_ms,
        recurrence_ended_at_ms=c.recurrence_ended_at_ms,
    )


def _normalize(store: TaskStore, selected: Iterable[ImportCandidate]) -> List[Task]:
    now = store.clock()
    return [candidate_to_task(c, now=now, task_id=store.new_id()) for c in selected]


def merge_candidates(store: TaskStore, selected: Iterable[ImportCandidate]) -> MutationResult:
    return store.append(_normalize(store, selected))


def replace_with_candidates(
    store: TaskStore,
    selected: Iterable[ImportCandidate],
    *,
    confirm: bool = False,
) -> MutationResult:
    return store.replace_all(_normalize(store, selected), confirm=confirm)


__all__ = [
    "COLUMNS",
    "ImportCandidate",
    "ImportResult",
    "NO_CANDIDATES_NOTICE",
    "candidate_to_task",
    "export_csv",
    "import_csv",
    "merge_candidates",
    "replace_with_candidates",
    "select_candidates",
]
