"""eisenmatrix.api

Stable *library* entrypoint for eisenmatrix.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from eisenmatrix.exchange import (
    ImportCandidate,
    ImportResult,
    export_csv,
    import_csv,
    merge_candidates,
    replace_with_candidates,
    select_candidates,
)
from eisenmatrix.history import MATRIX_POSITION, position_label
from eisenmatrix.interval import (
    MonthSummary,
    ViewInterval,
    calendar_days,
    filter_for_view,
    tasks_on_day,
    view_interval,
    visible_in_granularity,
    year_overview,
)
from eisenmatrix.metrics import SeriesAnalytics, series_analytics
from eisenmatrix.model import (
    Frequency,
    HistoryEntry,
    Importance,
    ProjectedTask,
    Task,
    TaskPatch,
    TaskStatus,
    Urgency,
    ViewMode,
)
from eisenmatrix.occurrence import is_active_on, status_on
from eisenmatrix.persist import (
    STORAGE_KEY,
    FileBlobStore,
    MemoryBlobStore,
    load_tasks,
    open_store,
    save_tasks,
)
from eisenmatrix.quadrants import QUADRANTS, Quadrant, group_by_quadrant, quadrant_for, seed_for_quadrant
from eisenmatrix.query import ListQuery, list_view
from eisenmatrix.store import MutationResult, StoreSnapshot, TaskStore, propose_anchor_for_frequency
from eisenmatrix.util.calendar import period_key
from eisenmatrix.util.timeparse import parse_date_yyyy_mm_dd
from eisenmatrix.validate import RecordValidationError, assert_valid_records, validate_records


# --- Public API exports ---------------------------------------------------
_PUBLIC_EXPORTS = (
    "FileBlobStore",
    "Frequency",
    "HistoryEntry",
    "ImportCandidate",
    "ImportResult",
    "Importance",
    "ListQuery",
    "MATRIX_POSITION",
    "MemoryBlobStore",
    "MonthSummary",
    "MutationResult",
    "ProjectedTask",
    "QUADRANTS",
    "Quadrant",
    "RecordValidationError",
    "STORAGE_KEY",
    "SeriesAnalytics",
    "StoreSnapshot",
    "Task",
    "TaskPatch",
    "TaskStatus",
    "TaskStore",
    "Urgency",
    "ViewInterval",
    "ViewMode",
    "assert_valid_records",
    "calendar_days",
    "export_csv",
    "filter_for_view",
    "group_by_quadrant",
    "import_csv",
    "is_active_on",
    "list_view",
    "load_tasks",
    "merge_candidates",
    "open_store",
    "parse_date_yyyy_mm_dd",
    "period_key",
    "position_label",
    "propose_anchor_for_frequency",
    "quadrant_for",
    "replace_with_candidates",
    "save_tasks",
    "seed_for_quadrant",
    "select_candidates",
    "series_analytics",
    "status_on",
    "tasks_on_day",
    "validate_records",
    "view_interval",
    "visible_in_granularity",
    "year_overview",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
