from __future__ import annotations

import argparse
import dataclasses
import datetime as dt
import sys
from pathlib import Path
from typing import List, Optional

from .config import LOG_FORMATS, LOG_LEVELS, Settings
from .exchange import export_csv, import_csv, merge_candidates, replace_with_candidates, select_candidates
from .history import position_label
from .interval import calendar_days, filter_for_view, tasks_on_day, view_interval, year_overview
from .metrics import series_analytics
from .model import Frequency, Importance, ProjectedTask, TaskPatch, TaskStatus, Urgency, ViewMode, parse_enum
from .occurrence import status_on
from .persist import FileBlobStore, open_store
from .quadrants import QUADRANTS, group_by_quadrant, seed_for_quadrant
from .query import SORT_KEYS, ListQuery, list_view
from .store import MutationResult, TaskStore, propose_anchor_for_frequency
from .util.log import configure_logging
from .util.timeparse import format_date, parse_date_yyyy_mm_dd

PROG = "eisenmatrix"


class UsageError(Exception):
    pass


def _die(msg: str, rc: int = 2) -> int:
    print(f"[{PROG}] ERROR: {msg}", file=sys.stderr)
    return rc


def _notice(msg: str) -> None:
    print(f"[{PROG}] {msg}", file=sys.stderr)


def _date_arg(s: str) -> dt.date:
    try:
        return parse_date_yyyy_mm_dd(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _enum_arg(enum_cls):
    def conv(s: str):
        try:
            return parse_enum(enum_cls, s)
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e))

    conv.__name__ = enum_cls.__name__
    return conv


def _resolve_id(store: TaskStore, ref: str) -> str:
    """Full id for an exact id or a unique id prefix."""
    if store.get(ref) is not None:
        return ref
    hits = [t.id for t in store.snapshot().tasks if t.id.startswith(ref)]
    if len(hits) == 1:
        return hits[0]
    if not hits:
        raise UsageError(f"No task matches id {ref!r}")
    raise UsageError(f"Id prefix {ref!r} is ambiguous ({len(hits)} tasks)")


def _fmt_ms(ms: int) -> str:
    return dt.datetime.fromtimestamp(ms / 1000.0).isoformat(sep=" ", timespec="minutes")


def _fmt_row(row: ProjectedTask) -> str:
    t = row.task
    freq = "" if t.frequency is Frequency.NONE else f" every {t.frequency.value.lower()}"
    ended = " (ended)" if t.is_series_ended else ""
    return f"{t.id[:8]}  [{row.status.value}]  {t.title}  ({t.date}{freq}{ended})"


def _report(result: MutationResult, ok_msg: str) -> int:
    if not result.changed:
        if result.notice:
            _notice(result.notice)
            return 3
        print("no change")
        return 0
    print(ok_msg)
    return 0


def _patch_from_args(ns: argparse.Namespace) -> TaskPatch:
    kw = {}
    for name in ("title", "description", "urgency", "importance", "status", "frequency"):
        v = getattr(ns, name, None)
        if v is not None:
            kw[name] = v
    if getattr(ns, "date", None) is not None:
        kw["date"] = format_date(ns.date)
    return TaskPatch(**kw)


def _add_field_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--title", default=None)
    p.add_argument("--description", default=None)
    p.add_argument("--urgency", type=_enum_arg(Urgency), default=None, help="High or Low")
    p.add_argument("--importance", type=_enum_arg(Importance), default=None, help="High or Low")
    p.add_argument("--status", type=_enum_arg(TaskStatus), default=None, help="'To Do', 'In Progress' or Done")
    p.add_argument("--frequency", type=_enum_arg(Frequency), default=None, help="None, Daily, Weekly, Monthly or Yearly")
    p.add_argument("--date", type=_date_arg, default=None, help="Anchor date YYYY-MM-DD")


# -------------------- commands --------------------


def cmd_add(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    patch = _patch_from_args(ns)
    if ns.quadrant:
        seed = seed_for_quadrant(ns.quadrant)
        patch = dataclasses.replace(seed, **patch.supplied())
    res = store.create(patch, ns.context_date)
    return _report(res, res.task.id if res.task else "")


def cmd_edit(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    task_id = _resolve_id(store, ns.id)
    task = store.get(task_id)
    patch = _patch_from_args(ns)
    if task is not None and patch.is_supplied("frequency") and not patch.is_supplied("date"):
        proposed = propose_anchor_for_frequency(task.date, task.frequency, patch.frequency, ns.context_date, settings.week_start)
        if proposed and proposed != task.date:
            patch = dataclasses.replace(patch, date=proposed)
    res = store.update(task_id, patch, ns.context_date)
    return _report(res, f"updated {task_id}")


def cmd_move(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    task_id = _resolve_id(store, ns.id)
    if ns.quadrant:
        q = QUADRANTS[ns.quadrant]
        urgency, importance = q.urgency, q.importance
    elif ns.urgency is not None and ns.importance is not None:
        urgency, importance = ns.urgency, ns.importance
    else:
        raise UsageError("move needs --quadrant or both --urgency and --importance")
    res = store.relocate(task_id, urgency, importance)
    return _report(res, f"moved {task_id} to {position_label(urgency, importance)}")


def cmd_end(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    task_id = _resolve_id(store, ns.id)
    return _report(store.end_series(task_id, ns.context_date), f"ended series {task_id}")


def cmd_resume(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    task_id = _resolve_id(store, ns.id)
    return _report(store.resume_series(task_id), f"resumed series {task_id}")


def cmd_delete(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    task_id = _resolve_id(store, ns.id)
    return _report(store.delete(task_id), f"deleted {task_id}")


def cmd_show(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    task = store.get(_resolve_id(store, ns.id))
    if task is None:
        raise UsageError(f"No task with id {ns.id!r}")
    print(f"id:          {task.id}")
    print(f"title:       {task.title}")
    if task.description:
        print(f"description: {task.description}")
    print(f"position:    {position_label(task.urgency, task.importance)}")
    print(f"date:        {task.date}")
    print(f"frequency:   {task.frequency.value}")
    print(f"status:      {status_on(task, ns.date).value} (on {format_date(ns.date)})")
    if task.is_series_ended:
        print(f"ended at:    {_fmt_ms(task.recurrence_ended_at_ms)}")
    if task.is_recurring:
        a = series_analytics(task)
        print(f"completion:  {a.completed_count}/{a.total_tracked} periods ({a.completion_rate}%)")
        for key, st in a.recent:
            print(f"  {key:<12} {st.value}")
    if task.history:
        print("history:")
        for e in task.history:
            print(f"  {_fmt_ms(e.timestamp_ms)}  {e.user}: {e.field}: {e.old_value!r} -> {e.new_value!r}")
    return 0


def cmd_view(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    iv = view_interval(ns.mode, ns.date, settings.week_start)
    rows = filter_for_view(store.snapshot().tasks, iv.mode, ns.date, settings.week_start)
    print(f"{iv.mode.value} view {format_date(iv.start)} .. {format_date(iv.end)}")
    for qid, items in group_by_quadrant(rows).items():
        q = QUADRANTS[qid]
        print(f"\n{q.title} ({position_label(q.urgency, q.importance)}): {len(items)}")
        for r in items:
            print(f"  {_fmt_row(r)}")
    return 0


def cmd_calendar(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    tasks = store.snapshot().tasks
    mode = parse_enum(ViewMode, ns.mode)
    if mode is ViewMode.YEAR:
        for m in year_overview(tasks, ns.date):
            print(f"{m.month_start.strftime('%B')}: {len(m.tasks)}")
            for r in m.tasks:
                print(f"  {_fmt_row(r)}")
        return 0
    visible = [r.task for r in filter_for_view(tasks, mode, ns.date, settings.week_start)]
    for day in calendar_days(mode, ns.date, settings.week_start):
        cell = tasks_on_day(visible, day)
        if not cell and mode is ViewMode.MONTH:
            continue
        print(f"{day.strftime('%a')} {format_date(day)}")
        for r in cell:
            print(f"  {_fmt_row(r)}")
    return 0


def cmd_list(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    q = ListQuery(
        search=ns.search or "",
        status=ns.status,
        urgency=ns.urgency,
        importance=ns.importance,
        frequency=ns.frequency,
        sort_by=ns.sort,
        descending=not ns.asc,
    )
    for r in list_view(store.snapshot().tasks, ns.date, q):
        print(_fmt_row(r))
    return 0


def cmd_export(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    text = export_csv(store.snapshot().tasks)
    if not ns.out:
        sys.stdout.write(text)
        return 0
    out_path = Path(ns.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text, encoding="utf-8", newline="")
    print(f"[{PROG}] OK: wrote {out_path}")
    return 0


def _parse_selection(s: Optional[str], count: int) -> Optional[List[int]]:
    if not s:
        return None
    out: List[int] = []
    for part in s.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit() or not (1 <= int(part) <= count):
            raise UsageError(f"--select entries must be 1..{count}; got {part!r}")
        out.append(int(part) - 1)
    return out


def cmd_import(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    p = Path(ns.path)
    if not p.exists():
        raise UsageError(f"Missing CSV file: {p}")
    result = import_csv(p.read_text(encoding="utf-8", errors="replace"))
    if result.notice:
        _notice(result.notice)
        return 0
    if result.dropped:
        _notice(f"skipped {result.dropped} malformed row(s)")

    if ns.preview:
        for i, c in enumerate(result.candidates, start=1):
            print(f"{i:>3}. [{c.status.value}] {c.title} ({c.date}, {c.frequency.value})")
        return 0

    selected = select_candidates(result.candidates, _parse_selection(ns.select, len(result.candidates)))
    if ns.replace:
        res = replace_with_candidates(store, selected, confirm=ns.yes)
        return _report(res, f"replaced collection with {len(selected)} task(s)")
    res = merge_candidates(store, selected)
    return _report(res, f"merged {len(selected)} task(s)")


def cmd_reset(store: TaskStore, ns: argparse.Namespace, settings: Settings) -> int:
    return _report(store.reset(confirm=ns.yes), "all tasks removed")


# -------------------- parser --------------------


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog=PROG, description="Recurrence-aware Eisenhower matrix task manager.")
    ap.add_argument("--home", default=None, help="Store directory (default: env EISENMATRIX_HOME or ~/.eisenmatrix)")
    ap.add_argument("--week-start", type=int, default=None, help="First weekday 0=Monday..6=Sunday (default: env EISENMATRIX_WEEK_START or 0)")
    ap.add_argument("--actor", default=None, help="Actor label recorded in history (default: env EISENMATRIX_ACTOR or User)")
    ap.add_argument("--log-level", choices=LOG_LEVELS, default=None)
    ap.add_argument("--log-format", choices=LOG_FORMATS, default=None)

    sub = ap.add_subparsers(dest="command", required=True)
    today = dt.date.today()

    def dated(p: argparse.ArgumentParser, name: str = "--date", dest: Optional[str] = None) -> None:
        p.add_argument(name, dest=dest, type=_date_arg, default=today, help="YYYY-MM-DD (default: today)")

    p = sub.add_parser("add", help="Create a task")
    _add_field_args(p)
    p.add_argument("--quadrant", choices=sorted(QUADRANTS), default=None, help="Pre-seed urgency/importance from a quadrant")
    dated(p, "--context-date", "context_date")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("edit", help="Edit a task; recurring status applies to the --context-date period")
    p.add_argument("id")
    _add_field_args(p)
    dated(p, "--context-date", "context_date")
    p.set_defaults(func=cmd_edit)

    p = sub.add_parser("move", help="Move a task to another matrix position")
    p.add_argument("id")
    p.add_argument("--quadrant", choices=sorted(QUADRANTS), default=None)
    p.add_argument("--urgency", type=_enum_arg(Urgency), default=None)
    p.add_argument("--importance", type=_enum_arg(Importance), default=None)
    p.set_defaults(func=cmd_move)

    p = sub.add_parser("end", help="End a recurring series")
    p.add_argument("id")
    dated(p, "--context-date", "context_date")
    p.set_defaults(func=cmd_end)

    p = sub.add_parser("resume", help="Resume an ended series")
    p.add_argument("id")
    p.set_defaults(func=cmd_resume)

    p = sub.add_parser("delete", help="Delete a task")
    p.add_argument("id")
    p.set_defaults(func=cmd_delete)

    p = sub.add_parser("show", help="Show task details, analytics and history")
    p.add_argument("id")
    dated(p)
    p.set_defaults(func=cmd_show)

    for name, func, help_s in (
        ("view", cmd_view, "Matrix of tasks visible in a Day/Week/Month/Year view"),
        ("calendar", cmd_calendar, "Calendar cells with per-day status"),
    ):
        p = sub.add_parser(name, help=help_s)
        p.add_argument("--mode", type=_enum_arg(ViewMode), default=ViewMode.WEEK)
        dated(p)
        p.set_defaults(func=func)

    p = sub.add_parser("list", help="Search, filter and sort all tasks")
    p.add_argument("--search", default=None)
    p.add_argument("--status", type=_enum_arg(TaskStatus), default=None)
    p.add_argument("--urgency", type=_enum_arg(Urgency), default=None)
    p.add_argument("--importance", type=_enum_arg(Importance), default=None)
    p.add_argument("--frequency", type=_enum_arg(Frequency), default=None)
    p.add_argument("--sort", choices=SORT_KEYS, default="date")
    p.add_argument("--asc", action="store_true", help="Ascending order (default: descending)")
    dated(p)
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("export", help="Export tasks as CSV")
    p.add_argument("--out", default=None, help="Output path (default: stdout)")
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="Import tasks from CSV (merge by default)")
    p.add_argument("path")
    p.add_argument("--preview", action="store_true", help="List candidates without importing")
    p.add_argument("--select", default=None, help="Comma-separated 1-based candidate numbers (default: all)")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--merge", action="store_true", help="Append the selected tasks (default)")
    mode.add_argument("--replace", action="store_true", help="Replace the whole collection instead of merging")
    p.add_argument("--yes", action="store_true", help="Confirm a destructive --replace")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("reset", help="Remove all tasks")
    p.add_argument("--yes", action="store_true", help="Confirm the reset")
    p.set_defaults(func=cmd_reset)

    return ap


def main(argv: list[str] | None = None) -> int:
    ap = build_parser()
    ns = ap.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ValueError as e:
        return _die(str(e))
    overrides = {}
    if ns.home:
        overrides["home"] = Path(ns.home).expanduser()
    if ns.week_start is not None:
        overrides["week_start"] = ns.week_start
    if ns.actor:
        overrides["actor"] = ns.actor
    if ns.log_level:
        overrides["log_level"] = ns.log_level
    if ns.log_format:
        overrides["log_format"] = ns.log_format
    try:
        settings = dataclasses.replace(settings, **overrides)
    except ValueError as e:
        return _die(str(e))

    configure_logging(settings.log_level, settings.log_format)
    store = open_store(FileBlobStore(settings.home), actor=settings.actor)

    try:
        return int(ns.func(store, ns, settings))
    except UsageError as e:
        return _die(str(e))
    except ValueError as e:
        return _die(str(e))


if __name__ == "__main__":
    raise SystemExit(main())
