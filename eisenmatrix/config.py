# eisenmatrix/config.py
"""Runtime settings from environment variables.

Environment Variables:
- EISENMATRIX_HOME: directory of the file blob store (default: ~/.eisenmatrix)
- EISENMATRIX_WEEK_START: first weekday, 0=Monday .. 6=Sunday (default: 0)
- EISENMATRIX_ACTOR: actor label written into task history (default: User)
- EISENMATRIX_LOG_LEVEL: DEBUG/INFO/WARNING/ERROR (default: WARNING)
- EISENMATRIX_LOG_FORMAT: "console" or "json" (default: console)
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .store import DEFAULT_ACTOR

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as ex:
        raise ValueError(f"{key} must be an integer; got {raw!r}") from ex


def _choice_env(env: Mapping[str, str], key: str, default: str, choices: tuple[str, ...], *, upper: bool) -> str:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    val = raw.upper() if upper else raw.lower()
    if val not in choices:
        raise ValueError(f"{key} must be one of {', '.join(choices)}; got {raw!r}")
    return val


@dataclass(frozen=True)
class Settings:
    home: Path
    week_start: int = 0
    actor: str = DEFAULT_ACTOR
    log_level: str = "WARNING"
    log_format: str = "console"

    def __post_init__(self) -> None:
        if not (0 <= self.week_start <= 6):
            raise ValueError(f"EISENMATRIX_WEEK_START must be 0..6; got {self.week_start}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        e = os.environ if env is None else env
        home_raw = (e.get("EISENMATRIX_HOME") or "").strip()
        home = Path(home_raw).expanduser() if home_raw else Path.home() / ".eisenmatrix"
        return cls(
            home=home,
            week_start=_int_env(e, "EISENMATRIX_WEEK_START", 0),
            actor=(e.get("EISENMATRIX_ACTOR") or "").strip() or DEFAULT_ACTOR,
            log_level=_choice_env(e, "EISENMATRIX_LOG_LEVEL", "WARNING", LOG_LEVELS, upper=True),
            log_format=_choice_env(e, "EISENMATRIX_LOG_FORMAT", "console", LOG_FORMATS, upper=False),
        )


__all__ = ["LOG_FORMATS", "LOG_LEVELS", "Settings"]
