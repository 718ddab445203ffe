# eisenmatrix/store.py
"""Single-writer task collection with an explicit mutation API.

Every mutation returns a MutationResult carrying the resulting snapshot.
Rejected mutations never raise: they leave the collection untouched, keep
the version number, and explain themselves through `notice`.
"""
from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import structlog

from .history import diff_entries, relocation_entry
from .model import Frequency, Importance, Task, TaskPatch, TaskStatus, Urgency, parse_enum
from .util.calendar import MONDAY, period_key, recurrence_deadline
from .util.timeparse import DateLike, as_date, format_date, now_ms, try_parse_date

log = structlog.get_logger(__name__)

DEFAULT_TITLE = "Untitled Task"
DEFAULT_ACTOR = "User"

_CLEARABLE = frozenset({"recurrence_ended_at_ms"})


def new_task_id() -> str:
    return str(uuid.uuid4())


def _title_or_default(title: Optional[str]) -> str:
    return title if title and title.strip() else DEFAULT_TITLE


def _normalized_date(date_s: Optional[str]) -> Optional[str]:
    """Canonical zero-padded YYYY-MM-DD, or None when unparseable."""
    d = try_parse_date(date_s)
    return format_date(d) if d is not None else None


@dataclass(frozen=True)
class StoreSnapshot:
    version: int
    tasks: Tuple[Task, ...]

    def by_id(self, task_id: str) -> Optional[Task]:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None


@dataclass(frozen=True)
class MutationResult:
    snapshot: StoreSnapshot
    changed: bool
    notice: Optional[str] = None
    task: Optional[Task] = None


Listener = Callable[[StoreSnapshot], None]


class TaskStore:
    def __init__(
        self,
        tasks: Iterable[Task] = (),
        *,
        clock: Callable[[], int] = now_ms,
        new_id: Callable[[], str] = new_task_id,
        actor: str = DEFAULT_ACTOR,
        on_change: Optional[Listener] = None,
        on_reset: Optional[Callable[[], None]] = None,
    ) -> None:
        self._tasks: List[Task] = list(tasks)
        self._version = 0
        self.clock = clock
        self.new_id = new_id
        self.actor = actor
        self.on_change = on_change
        self.on_reset = on_reset

    # -------------------- queries --------------------
    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(version=self._version, tasks=tuple(self._tasks))

    def get(self, task_id: str) -> Optional[Task]:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def __len__(self) -> int:
        return len(self._tasks)

    # -------------------- plumbing --------------------
    def _commit(self, tasks: List[Task], task: Optional[Task] = None) -> MutationResult:
        self._tasks = tasks
        self._version += 1
        snap = self.snapshot()
        if self.on_change is not None:
            self.on_change(snap)
        return MutationResult(snapshot=snap, changed=True, task=task)

    def _reject(self, op: str, notice: str, *, task_id: Optional[str] = None) -> MutationResult:
        log.info("mutation_rejected", op=op, task_id=task_id, reason=notice)
        return MutationResult(snapshot=self.snapshot(), changed=False, notice=notice, task=self.get(task_id) if task_id else None)

    def _replace_task(self, updated: Task) -> List[Task]:
        return [updated if t.id == updated.id else t for t in self._tasks]

    def _apply(
        self,
        task: Task,
        changes: Dict[str, Any],
        *,
        ts: int,
        ledger: Optional[Dict[str, TaskStatus]] = None,
    ) -> Task:
        """Apply supplied fields, audit them, and derive completion state."""
        entries = diff_entries(task, changes, timestamp_ms=ts, actor=self.actor, new_id=self.new_id)

        fields = {
            k: v
            for k, v in changes.items()
            if k != "completion_history" and (v is not None or k in _CLEARABLE)
        }
        completion = dict(changes.get("completion_history", task.completion_history))
        if ledger:
            completion.update(ledger)

        frequency = fields.get("frequency", task.frequency)
        completed_at = task.completed_at_ms
        if frequency is Frequency.NONE and "status" in fields:
            new_status = fields["status"]
            if new_status is TaskStatus.DONE and task.status is not TaskStatus.DONE:
                completed_at = ts
            elif new_status is not TaskStatus.DONE:
                completed_at = None

        return dataclasses.replace(
            task,
            **fields,
            completed_at_ms=completed_at,
            updated_at_ms=ts,
            history=task.history + tuple(entries),
            completion_history=completion,
        )

    # -------------------- mutations --------------------
    def create(self, patch: TaskPatch, context_date: DateLike) -> MutationResult:
        """Build a new task from `patch`; the anchor defaults to `context_date`."""
        date_s = patch.get("date")
        if date_s is not None:
            date_s = _normalized_date(date_s)
            if date_s is None:
                return self._reject("create", f"Invalid date: {patch.date!r} (expected YYYY-MM-DD)")

        ts = self.clock()
        task = Task(
            id=self.new_id(),
            title=_title_or_default(patch.get("title")),
            description=patch.get("description") or "",
            urgency=patch.get("urgency") or Urgency.LOW,
            importance=patch.get("importance") or Importance.LOW,
            status=patch.get("status") or TaskStatus.TODO,
            frequency=patch.get("frequency") or Frequency.NONE,
            date=date_s or format_date(as_date(context_date)),
            created_at_ms=ts,
            updated_at_ms=ts,
        )
        if task.status is TaskStatus.DONE and task.frequency is Frequency.NONE:
            task = dataclasses.replace(task, completed_at_ms=ts)

        log.debug("task_created", task_id=task.id, frequency=task.frequency.value)
        return self._commit(self._tasks + [task], task)

    def update(self, task_id: str, patch: TaskPatch, context_date: Optional[DateLike] = None) -> MutationResult:
        """Save edits to an existing task.

        With a `context_date`, a recurring task's supplied status is also
        recorded in the ledger for the period containing that date.
        """
        task = self.get(task_id)
        if task is None:
            return self._reject("update", f"No task with id {task_id!r}", task_id=task_id)
        if task.is_series_ended:
            return self._reject("update", "Series has ended; resume it before editing", task_id=task_id)

        changes = patch.supplied()
        if changes.get("date") is not None:
            date_s = _normalized_date(changes["date"])
            if date_s is None:
                return self._reject("update", f"Invalid date: {changes['date']!r} (expected YYYY-MM-DD)", task_id=task_id)
            changes["date"] = date_s
        if changes.get("title") is not None:
            changes["title"] = _title_or_default(changes["title"])

        ledger: Dict[str, TaskStatus] = {}
        frequency = changes.get("frequency") or task.frequency
        status = changes.get("status")
        if context_date is not None and frequency is not Frequency.NONE and status is not None:
            ledger[period_key(as_date(context_date), frequency)] = status

        updated = self._apply(task, changes, ts=self.clock(), ledger=ledger)
        return self._commit(self._replace_task(updated), updated)

    def relocate(self, task_id: str, urgency: Urgency, importance: Importance) -> MutationResult:
        """Drag-and-drop into another quadrant."""
        try:
            urgency = parse_enum(Urgency, urgency)
            importance = parse_enum(Importance, importance)
        except ValueError as e:
            return self._reject("relocate", str(e), task_id=task_id)
        task = self.get(task_id)
        if task is None:
            return self._reject("relocate", f"No task with id {task_id!r}", task_id=task_id)
        if task.is_series_ended:
            return self._reject("relocate", "Series has ended; resume it before editing", task_id=task_id)
        if task.urgency is urgency and task.importance is importance:
            return MutationResult(snapshot=self.snapshot(), changed=False, task=task)

        ts = self.clock()
        entry = relocation_entry(task, urgency, importance, timestamp_ms=ts, actor=self.actor, new_id=self.new_id)
        updated = dataclasses.replace(
            task,
            urgency=urgency,
            importance=importance,
            history=task.history + (entry,),
            updated_at_ms=ts,
        )
        return self._commit(self._replace_task(updated), updated)

    def end_series(self, task_id: str, context_date: DateLike) -> MutationResult:
        """Close a recurring series, marking the context period done."""
        task = self.get(task_id)
        if task is None:
            return self._reject("end_series", f"No task with id {task_id!r}", task_id=task_id)
        if not task.is_recurring:
            return self._reject("end_series", "Only recurring tasks can be ended", task_id=task_id)
        if task.is_series_ended:
            return self._reject("end_series", "Series has already ended", task_id=task_id)

        ts = self.clock()
        ledger = {period_key(as_date(context_date), task.frequency): TaskStatus.DONE}
        changes: Dict[str, Any] = {"recurrence_ended_at_ms": ts, "status": TaskStatus.DONE}
        updated = self._apply(task, changes, ts=ts, ledger=ledger)
        log.debug("series_ended", task_id=task_id, ended_at_ms=ts)
        return self._commit(self._replace_task(updated), updated)

    def resume_series(self, task_id: str) -> MutationResult:
        task = self.get(task_id)
        if task is None:
            return self._reject("resume_series", f"No task with id {task_id!r}", task_id=task_id)
        if not task.is_series_ended:
            return MutationResult(snapshot=self.snapshot(), changed=False, notice="Series is not ended", task=task)

        changes: Dict[str, Any] = {"recurrence_ended_at_ms": None, "status": TaskStatus.TODO}
        updated = self._apply(task, changes, ts=self.clock())
        log.debug("series_resumed", task_id=task_id)
        return self._commit(self._replace_task(updated), updated)

    def delete(self, task_id: str) -> MutationResult:
        task = self.get(task_id)
        if task is None:
            return self._reject("delete", f"No task with id {task_id!r}", task_id=task_id)
        return self._commit([t for t in self._tasks if t.id != task_id], task)

    def append(self, tasks: Iterable[Task]) -> MutationResult:
        incoming = list(tasks)
        if not incoming:
            return MutationResult(snapshot=self.snapshot(), changed=False, notice="Nothing to add")
        return self._commit(self._tasks + incoming)

    def replace_all(self, tasks: Iterable[Task], *, confirm: bool = False) -> MutationResult:
        """Discard the whole collection in favour of `tasks`; needs confirm=True."""
        if not confirm:
            return self._reject("replace_all", "Replacing all tasks requires confirmation")
        return self._commit(list(tasks))

    def reset(self, *, confirm: bool = False) -> MutationResult:
        if not confirm:
            return self._reject("reset", "Resetting all data requires confirmation")
        res = self._commit([])
        if self.on_reset is not None:
            self.on_reset()
        return res


def propose_anchor_for_frequency(
    current_date: Optional[str],
    current_frequency: Frequency,
    new_frequency: Frequency,
    today: DateLike,
    week_start: int = MONDAY,
) -> Optional[str]:
    """Anchor date the editor proposes after the frequency selector changes.

    Switching to a different recurring cadence moves the anchor to the end of
    its period (week or month); other switches keep the current value.
    """
    if new_frequency is Frequency.NONE or new_frequency is current_frequency:
        return current_date
    base = try_parse_date(current_date) or as_date(today)
    return format_date(recurrence_deadline(base, new_frequency, week_start))


__all__ = [
    "DEFAULT_ACTOR",
    "DEFAULT_TITLE",
    "MutationResult",
    "StoreSnapshot",
    "TaskStore",
    "new_task_id",
    "propose_anchor_for_frequency",
]
