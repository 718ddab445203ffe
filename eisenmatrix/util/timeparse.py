# eisenmatrix/util/timeparse.py
from __future__ import annotations

import datetime as dt
import re
import time
from typing import Optional, Union

_YMD_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")

DateLike = Union[dt.date, dt.datetime]


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    """Parse YYYY-MM-DD as a naive local calendar date.

    No timezone conversion is ever applied: the same string yields the same
    date on every host. Raises ValueError for malformed input.
    """
    m = _YMD_RE.match(str(s).strip())
    if not m:
        raise ValueError(f"Invalid YYYY-MM-DD: {s!r}")
    y, mo, d = (int(g) for g in m.groups())
    try:
        return dt.date(y, mo, d)
    except ValueError as ex:
        raise ValueError(f"Invalid YYYY-MM-DD: {s!r}") from ex


def try_parse_date(s: Optional[str]) -> Optional[dt.date]:
    if not s:
        return None
    try:
        return parse_date_yyyy_mm_dd(s)
    except ValueError:
        return None


def format_date(d: dt.date) -> str:
    return d.isoformat()


def as_date(value: DateLike) -> dt.date:
    """Truncate a datetime to its calendar date; dates pass through."""
    if isinstance(value, dt.datetime):
        return value.date()
    return value


def now_ms() -> int:
    return int(time.time() * 1000)


def local_date_from_ms(ms: int) -> dt.date:
    """Calendar date of an epoch-ms instant in the host's local time."""
    return dt.datetime.fromtimestamp(int(ms) / 1000.0).date()


def parse_ms(s: Optional[str]) -> Optional[int]:
    """Parse a numeric timestamp cell; empty or non-numeric -> None."""
    if s is None:
        return None
    ss = str(s).strip()
    if not ss:
        return None
    try:
        return int(ss)
    except ValueError:
        pass
    try:
        f = float(ss)
    except ValueError:
        return None
    if f != f or f in (float("inf"), float("-inf")):
        return None
    return int(f)
