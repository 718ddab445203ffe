"""Persisted record validation helpers (library-facing)."""

from __future__ import annotations

from typing import Any, Dict, List

from eisenmatrix.model import Frequency, Importance, TaskStatus, Urgency
from eisenmatrix.util.timeparse import try_parse_date


class RecordValidationError(ValueError):
    """Raised when a persisted record fails validation."""


_ENUM_FIELDS = {
    "urgency": Urgency,
    "importance": Importance,
    "status": TaskStatus,
    "frequency": Frequency,
}

_TIMESTAMP_FIELDS = ("createdAt", "updatedAt", "completedAt", "recurrenceEndedAt")


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def validate_record(rec: Any, *, label: str = "task") -> List[str]:
    if not isinstance(rec, dict):
        return [f"{label}: must be an object"]
    errs: List[str] = []

    tid = rec.get("id")
    _require(isinstance(tid, str) and bool(tid.strip()), f"{label}.id must be non-empty string", errs)
    _require(isinstance(rec.get("title"), str), f"{label}.title must be string", errs)

    date_s = rec.get("date")
    _require(
        isinstance(date_s, str) and try_parse_date(date_s) is not None,
        f"{label}.date must be YYYY-MM-DD; got {date_s!r}",
        errs,
    )

    for name, enum_cls in _ENUM_FIELDS.items():
        if name not in rec and name == "frequency":
            continue  # legacy records predate frequency
        allowed = {m.value for m in enum_cls}
        _require(rec.get(name) in allowed, f"{label}.{name} must be one of {sorted(allowed)}; got {rec.get(name)!r}", errs)

    for name in _TIMESTAMP_FIELDS:
        v = rec.get(name)
        if v is None and name in ("completedAt", "recurrenceEndedAt"):
            continue
        _require(_is_int(v), f"{label}.{name} must be int epoch ms; got {v!r}", errs)

    hist = rec.get("history")
    if hist is not None:
        _require(isinstance(hist, list), f"{label}.history must be list", errs)
        if isinstance(hist, list):
            for i, h in enumerate(hist):
                if not isinstance(h, dict):
                    errs.append(f"{label}.history[{i}] must be object")
                    continue
                for k in ("id", "field", "oldValue", "newValue", "user"):
                    _require(isinstance(h.get(k), str), f"{label}.history[{i}].{k} must be string", errs)
                _require(_is_int(h.get("timestamp")), f"{label}.history[{i}].timestamp must be int", errs)

    ledger = rec.get("completionHistory")
    if ledger is not None:
        _require(isinstance(ledger, dict), f"{label}.completionHistory must be object", errs)
        if isinstance(ledger, dict):
            statuses = {m.value for m in TaskStatus}
            for k, v in ledger.items():
                _require(v in statuses, f"{label}.completionHistory[{k!r}] invalid status {v!r}", errs)

    if rec.get("frequency") in (None, Frequency.NONE.value) and rec.get("recurrenceEndedAt") is not None:
        errs.append(f"{label}.recurrenceEndedAt is only meaningful for recurring tasks")

    return errs


def validate_records(records: Any, *, label: str = "tasks") -> List[str]:
    if not isinstance(records, list):
        return [f"{label}: must be a JSON array"]
    errs: List[str] = []
    seen: Dict[str, int] = {}
    for i, rec in enumerate(records):
        errs.extend(validate_record(rec, label=f"{label}[{i}]"))
        tid = rec.get("id") if isinstance(rec, dict) else None
        if isinstance(tid, str) and tid:
            if tid in seen:
                errs.append(f"{label}[{i}].id duplicates {label}[{seen[tid]}].id ({tid!r})")
            else:
                seen[tid] = i
    return errs


def assert_valid_records(records: Any) -> None:
    errs = validate_records(records)
    if errs:
        raise RecordValidationError(errs[0])


__all__ = [
    "RecordValidationError",
    "assert_valid_records",
    "validate_record",
    "validate_records",
]
