# eisenmatrix/persist.py
"""Whole-collection persistence in a key-value blob store.

The collection is one JSON array under a fixed key, read once at startup
and rewritten in full after every successful mutation. Record keys use
the camelCase layout of browser-era stores so those load unchanged.
"""
from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

import structlog

from .model import Frequency, HistoryEntry, Importance, Task, TaskStatus, Urgency, coerce_enum
from .store import DEFAULT_ACTOR, TaskStore, new_task_id
from .util.timeparse import now_ms, try_parse_date

log = structlog.get_logger(__name__)

STORAGE_KEY = "eisenmatrix-tasks"

JsonDict = Dict[str, Any]


class BlobStore(Protocol):
    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, text: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryBlobStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.blobs: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def write(self, key: str, text: str) -> None:
        self.blobs[key] = text

    def delete(self, key: str) -> None:
        self.blobs.pop(key, None)


class FileBlobStore:
    """One `<key>.json` file per key inside `directory`."""

    def __init__(self, directory: os.PathLike[str] | str) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        p = self.path_for(key)
        if not p.exists():
            return None
        return p.read_text(encoding="utf-8", errors="replace")

    def write(self, key: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=str(self.directory))
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(text)
            os.replace(tmp, self.path_for(key))
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def delete(self, key: str) -> None:
        p = self.path_for(key)
        if p.exists():
            p.unlink()


# --- record <-> Task ----------------------------------------------------------


def _as_int(v: Any) -> Optional[int]:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, float) and v == v:
        return int(v)
    return None


def history_to_record(e: HistoryEntry) -> JsonDict:
    return {
        "id": e.id,
        "timestamp": e.timestamp_ms,
        "field": e.field,
        "oldValue": e.old_value,
        "newValue": e.new_value,
        "user": e.user,
    }


def history_from_record(raw: Any) -> Optional[HistoryEntry]:
    if not isinstance(raw, dict):
        return None
    return HistoryEntry(
        id=str(raw.get("id") or ""),
        timestamp_ms=_as_int(raw.get("timestamp")) or 0,
        field=str(raw.get("field") or ""),
        old_value=str(raw.get("oldValue") if raw.get("oldValue") is not None else ""),
        new_value=str(raw.get("newValue") if raw.get("newValue") is not None else ""),
        user=str(raw.get("user") or DEFAULT_ACTOR),
    )


def task_to_record(t: Task) -> JsonDict:
    rec: JsonDict = {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "urgency": t.urgency.value,
        "importance": t.importance.value,
        "status": t.status.value,
        "date": t.date,
        "frequency": t.frequency.value,
        "createdAt": t.created_at_ms,
        "updatedAt": t.updated_at_ms,
        "history": [history_to_record(e) for e in t.history],
        "completionHistory": {k: v.value for k, v in t.completion_history.items()},
    }
    if t.completed_at_ms is not None:
        rec["completedAt"] = t.completed_at_ms
    if t.recurrence_ended_at_ms is not None:
        rec["recurrenceEndedAt"] = t.recurrence_ended_at_ms
    return rec


def task_from_record(raw: Any) -> Task:
    """Decode one persisted record, repairing legacy gaps.

    Missing `history`, `frequency` and `completionHistory` default to [],
    None and {}. Raises ValueError when the record has no usable id or
    anchor date.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"record must be an object; got {type(raw).__name__}")
    tid = str(raw.get("id") or "").strip()
    if not tid:
        raise ValueError("record has no id")
    date_s = str(raw.get("date") or "").strip()
    if try_parse_date(date_s) is None:
        raise ValueError(f"record {tid!r} has invalid date {raw.get('date')!r}")

    hist_in = raw.get("history")
    history = tuple(e for e in (history_from_record(h) for h in hist_in) if e is not None) if isinstance(hist_in, list) else ()

    ledger_in = raw.get("completionHistory")
    ledger: Dict[str, TaskStatus] = {}
    if isinstance(ledger_in, dict):
        for k, v in ledger_in.items():
            ledger[str(k)] = coerce_enum(TaskStatus, v, TaskStatus.TODO)

    created = _as_int(raw.get("createdAt")) or 0
    return Task(
        id=tid,
        title=str(raw.get("title") or ""),
        description=str(raw.get("description") or ""),
        urgency=coerce_enum(Urgency, raw.get("urgency"), Urgency.LOW),
        importance=coerce_enum(Importance, raw.get("importance"), Importance.LOW),
        status=coerce_enum(TaskStatus, raw.get("status"), TaskStatus.TODO),
        date=date_s,
        frequency=coerce_enum(Frequency, raw.get("frequency") or None, Frequency.NONE),
        created_at_ms=created,
        updated_at_ms=_as_int(raw.get("updatedAt")) or created,
        completed_at_ms=_as_int(raw.get("completedAt")),
        recurrence_ended_at_ms=_as_int(raw.get("recurrenceEndedAt")),
        history=history,
        completion_history=ledger,
    )


# --- load / save --------------------------------------------------------------


def dumps_tasks(tasks: Iterable[Task]) -> str:
    return json.dumps([task_to_record(t) for t in tasks], ensure_ascii=False)


def loads_tasks(text: str) -> List[Task]:
    """Decode a blob; undecodable records are dropped, a broken blob yields []."""
    try:
        data = json.loads(text)
    except ValueError as e:
        log.error("store_load_failed", reason="invalid_json", error=str(e))
        return []
    if not isinstance(data, list):
        log.error("store_load_failed", reason="not_an_array", got=type(data).__name__)
        return []

    out: List[Task] = []
    for i, raw in enumerate(data):
        try:
            out.append(task_from_record(raw))
        except ValueError as e:
            log.warning("record_dropped", index=i, error=str(e))
    return out


def load_tasks(blob: BlobStore, key: str = STORAGE_KEY) -> List[Task]:
    try:
        text = blob.read(key)
    except OSError as e:
        log.error("store_load_failed", reason="read_error", key=key, error=str(e))
        return []
    if text is None:
        return []
    return loads_tasks(text)


def save_tasks(blob: BlobStore, tasks: Iterable[Task], key: str = STORAGE_KEY) -> bool:
    try:
        blob.write(key, dumps_tasks(tasks))
    except OSError as e:
        log.error("store_save_failed", key=key, error=str(e))
        return False
    return True


def clear_storage(blob: BlobStore, key: str = STORAGE_KEY) -> None:
    try:
        blob.delete(key)
    except OSError as e:
        log.error("store_clear_failed", key=key, error=str(e))


def open_store(
    blob: BlobStore,
    *,
    key: str = STORAGE_KEY,
    clock: Callable[[], int] = now_ms,
    new_id: Callable[[], str] = new_task_id,
    actor: str = DEFAULT_ACTOR,
) -> TaskStore:
    """Load the collection and persist it again after every mutation.

    A confirmed reset also deletes the stored key.
    """
    tasks = load_tasks(blob, key)
    log.debug("store_loaded", key=key, count=len(tasks))
    return TaskStore(
        tasks,
        clock=clock,
        new_id=new_id,
        actor=actor,
        on_change=lambda snap: save_tasks(blob, snap.tasks, key),
        on_reset=lambda: clear_storage(blob, key),
    )


__all__ = [
    "BlobStore",
    "FileBlobStore",
    "MemoryBlobStore",
    "STORAGE_KEY",
    "clear_storage",
    "dumps_tasks",
    "load_tasks",
    "loads_tasks",
    "open_store",
    "save_tasks",
    "task_from_record",
    "task_to_record",
]
