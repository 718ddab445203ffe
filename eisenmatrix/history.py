# eisenmatrix/history.py
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Mapping

from .model import HistoryEntry, Importance, Task, Urgency

FIELD_LABELS: Dict[str, str] = {
    "title": "Title",
    "description": "Description",
    "urgency": "Urgency",
    "importance": "Importance",
    "status": "Status",
    "date": "Date",
    "frequency": "Frequency",
    "completed_at_ms": "Completed At",
    "recurrence_ended_at_ms": "Recurrence Ended At",
}

MATRIX_POSITION = "Matrix Position"

# Bookkeeping fields; never audited.
_UNTRACKED = frozenset({"history", "completion_history"})


def stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def field_label(name: str) -> str:
    return FIELD_LABELS.get(name) or name.replace("_", " ").title()


def diff_entries(
    old: Task,
    changes: Mapping[str, Any],
    *,
    timestamp_ms: int,
    actor: str,
    new_id: Callable[[], str],
) -> List[HistoryEntry]:
    """One entry per supplied field whose new value is set and differs."""
    out: List[HistoryEntry] = []
    for name, new_value in changes.items():
        if name in _UNTRACKED or new_value is None:
            continue
        old_value = getattr(old, name)
        if new_value == old_value:
            continue
        out.append(
            HistoryEntry(
                id=new_id(),
                timestamp_ms=timestamp_ms,
                field=field_label(name),
                old_value=stringify(old_value),
                new_value=stringify(new_value),
                user=actor,
            )
        )
    return out


def position_label(urgency: Urgency, importance: Importance) -> str:
    return f"{urgency.value} / {importance.value}"


def relocation_entry(
    old: Task,
    urgency: Urgency,
    importance: Importance,
    *,
    timestamp_ms: int,
    actor: str,
    new_id: Callable[[], str],
) -> HistoryEntry:
    return HistoryEntry(
        id=new_id(),
        timestamp_ms=timestamp_ms,
        field=MATRIX_POSITION,
        old_value=position_label(old.urgency, old.importance),
        new_value=position_label(urgency, importance),
        user=actor,
    )
