# eisenmatrix/model.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type, TypeVar, Union

from eisenmatrix.util.timeparse import parse_date_yyyy_mm_dd


class Urgency(str, Enum):
    HIGH = "High"
    LOW = "Low"


class Importance(str, Enum):
    HIGH = "High"
    LOW = "Low"


class TaskStatus(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class Frequency(str, Enum):
    NONE = "None"
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class ViewMode(str, Enum):
    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"
    YEAR = "Year"


E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: Type[E], value: Any, default: E) -> E:
    """Map a stored value (member, value string, or member name) onto enum_cls."""
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default
    s = str(value).strip()
    for member in enum_cls:
        if member.value == s or member.name == s.upper().replace(" ", "_").replace("-", "_"):
            return member
    return default


def parse_enum(enum_cls: Type[E], value: Any) -> E:
    """Strict variant of coerce_enum; raises ValueError on unknown values."""
    if isinstance(value, enum_cls):
        return value
    s = "" if value is None else str(value).strip()
    for member in enum_cls:
        if member.value == s or member.name == s.upper().replace(" ", "_").replace("-", "_"):
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValueError(f"Invalid {enum_cls.__name__}: {value!r} (expected one of: {allowed})")


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    timestamp_ms: int
    field: str
    old_value: str
    new_value: str
    user: str


@dataclass(frozen=True)
class Task:
    """One stored work item or recurring series.

    `date` is the anchor: the due date of a one-off task, or the reference
    day fixing a series' weekday / day-of-month / day-of-year. It is kept as
    the persisted YYYY-MM-DD string and parsed on demand.

    `status` and `completed_at_ms` only mean something for one-off tasks;
    recurring tasks keep per-period state in `completion_history`.
    """

    id: str
    title: str
    date: str
    created_at_ms: int
    updated_at_ms: int
    description: str = ""
    urgency: Urgency = Urgency.LOW
    importance: Importance = Importance.LOW
    status: TaskStatus = TaskStatus.TODO
    frequency: Frequency = Frequency.NONE
    completed_at_ms: Optional[int] = None
    recurrence_ended_at_ms: Optional[int] = None
    history: Tuple[HistoryEntry, ...] = ()
    completion_history: Dict[str, TaskStatus] = field(default_factory=dict)

    @property
    def anchor_date(self) -> dt.date:
        return parse_date_yyyy_mm_dd(self.date)

    @property
    def is_recurring(self) -> bool:
        return self.frequency is not Frequency.NONE

    @property
    def is_series_ended(self) -> bool:
        return self.recurrence_ended_at_ms is not None


class _Unset:
    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

_PATCH_ENUMS: Dict[str, Type[Enum]] = {
    "urgency": Urgency,
    "importance": Importance,
    "status": TaskStatus,
    "frequency": Frequency,
}


@dataclass(frozen=True)
class TaskPatch:
    """Field-mask update for a task.

    Every field defaults to UNSET ("not supplied"). Supplying None is an
    explicit clear; only `recurrence_ended_at_ms` is cleared that way.
    `completed_at_ms` is derived from status and cannot be patched.
    """

    title: Union[str, _Unset] = UNSET
    description: Union[str, _Unset] = UNSET
    urgency: Union[Urgency, _Unset] = UNSET
    importance: Union[Importance, _Unset] = UNSET
    status: Union[TaskStatus, _Unset] = UNSET
    date: Union[str, _Unset] = UNSET
    frequency: Union[Frequency, _Unset] = UNSET
    recurrence_ended_at_ms: Union[Optional[int], _Unset] = UNSET
    completion_history: Union[Dict[str, TaskStatus], _Unset] = UNSET

    def __post_init__(self) -> None:
        # Accept raw strings from forms / CLI flags; unknown values raise ValueError.
        for name, enum_cls in _PATCH_ENUMS.items():
            v = getattr(self, name)
            if v is not UNSET and v is not None:
                object.__setattr__(self, name, parse_enum(enum_cls, v))
        if self.completion_history is not UNSET:
            ledger = {str(k): parse_enum(TaskStatus, v) for k, v in dict(self.completion_history).items()}
            object.__setattr__(self, "completion_history", ledger)

    def supplied(self) -> Dict[str, Any]:
        """Fields the caller set on purpose, in declaration order."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not UNSET}

    def is_supplied(self, name: str) -> bool:
        return getattr(self, name) is not UNSET

    def get(self, name: str, default: Any = None) -> Any:
        v = getattr(self, name)
        return default if v is UNSET else v


@dataclass(frozen=True)
class ProjectedTask:
    """A task paired with the status resolved for one viewed date."""

    task: Task
    status: TaskStatus


__all__ = [
    "Frequency",
    "HistoryEntry",
    "Importance",
    "ProjectedTask",
    "Task",
    "TaskPatch",
    "TaskStatus",
    "UNSET",
    "Urgency",
    "ViewMode",
    "coerce_enum",
    "parse_enum",
]
