from __future__ import annotations

import datetime as dt
import unittest

from eisenmatrix.model import Frequency, Task, TaskStatus
from eisenmatrix.occurrence import is_active_on, series_end_date, status_on
from eisenmatrix.util.calendar import each_day


def _task(date: str, frequency: Frequency = Frequency.NONE, **kw) -> Task:
    return Task(id="t1", title="T", date=date, created_at_ms=0, updated_at_ms=0, frequency=frequency, **kw)


def _local_ms(y: int, m: int, d: int, hour: int = 12) -> int:
    return int(dt.datetime(y, m, d, hour).timestamp() * 1000)


class TestIsActiveOnContract(unittest.TestCase):
    def test_one_off_only_on_anchor(self) -> None:
        t = _task("2024-03-15")
        self.assertTrue(is_active_on(t, dt.date(2024, 3, 15)))
        self.assertFalse(is_active_on(t, dt.date(2024, 3, 16)))
        self.assertFalse(is_active_on(t, dt.date(2024, 3, 14)))

    def test_datetime_is_truncated(self) -> None:
        t = _task("2024-03-15")
        self.assertTrue(is_active_on(t, dt.datetime(2024, 3, 15, 23, 59)))

    def test_weekly_wednesday(self) -> None:
        t = _task("2024-01-03", Frequency.WEEKLY)
        self.assertTrue(is_active_on(t, dt.date(2024, 1, 10)))
        self.assertFalse(is_active_on(t, dt.date(2024, 1, 9)))
        for d in each_day(dt.date(2023, 12, 1), dt.date(2024, 3, 31)):
            expected = d >= dt.date(2024, 1, 3) and d.weekday() == 2
            self.assertEqual(is_active_on(t, d), expected, d.isoformat())

    def test_daily_from_anchor(self) -> None:
        t = _task("2024-01-03", Frequency.DAILY)
        self.assertFalse(is_active_on(t, dt.date(2024, 1, 2)))
        self.assertTrue(is_active_on(t, dt.date(2024, 1, 3)))
        self.assertTrue(is_active_on(t, dt.date(2030, 6, 1)))

    def test_monthly_day_31_is_not_clamped(self) -> None:
        t = _task("2024-01-31", Frequency.MONTHLY)
        april = [d for d in each_day(dt.date(2024, 4, 1), dt.date(2024, 4, 30)) if is_active_on(t, d)]
        self.assertEqual(april, [])
        feb = [d for d in each_day(dt.date(2024, 2, 1), dt.date(2024, 2, 29)) if is_active_on(t, d)]
        self.assertEqual(feb, [])
        self.assertTrue(is_active_on(t, dt.date(2024, 3, 31)))

    def test_yearly(self) -> None:
        t = _task("2020-02-29", Frequency.YEARLY)
        self.assertTrue(is_active_on(t, dt.date(2024, 2, 29)))
        self.assertFalse(is_active_on(t, dt.date(2023, 2, 28)))
        self.assertFalse(is_active_on(t, dt.date(2023, 3, 1)))

    def test_ended_series_closes_after_end_date(self) -> None:
        t = _task("2024-01-01", Frequency.DAILY, recurrence_ended_at_ms=_local_ms(2024, 1, 10))
        self.assertEqual(series_end_date(t), dt.date(2024, 1, 10))
        self.assertTrue(is_active_on(t, dt.date(2024, 1, 10)))
        self.assertFalse(is_active_on(t, dt.date(2024, 1, 11)))


class TestStatusOnContract(unittest.TestCase):
    def test_one_off_returns_stored_status(self) -> None:
        t = _task("2024-01-03", status=TaskStatus.IN_PROGRESS)
        self.assertIs(status_on(t, dt.date(2024, 1, 3)), TaskStatus.IN_PROGRESS)
        self.assertIs(status_on(t, dt.date(1999, 1, 1)), TaskStatus.IN_PROGRESS)

    def test_recurring_reads_ledger_by_period(self) -> None:
        t = _task(
            "2024-01-03",
            Frequency.WEEKLY,
            status=TaskStatus.DONE,
            completion_history={"2024-W2": TaskStatus.DONE, "2024-W3": TaskStatus.IN_PROGRESS},
        )
        self.assertIs(status_on(t, dt.date(2024, 1, 12)), TaskStatus.DONE)
        self.assertIs(status_on(t, dt.date(2024, 1, 17)), TaskStatus.IN_PROGRESS)

    def test_recurring_defaults_to_todo_when_absent(self) -> None:
        t = _task("2024-01-03", Frequency.WEEKLY, status=TaskStatus.DONE)
        self.assertIs(status_on(t, dt.date(2024, 1, 24)), TaskStatus.TODO)


if __name__ == "__main__":
    unittest.main(verbosity=2)
