from __future__ import annotations

import datetime as dt
import unittest

from eisenmatrix.model import Frequency
from eisenmatrix.util.calendar import (
    SUNDAY,
    each_day,
    end_of_month,
    end_of_week,
    end_of_year,
    period_key,
    recurrence_deadline,
    start_of_month,
    start_of_week,
    start_of_year,
)
from eisenmatrix.util.timeparse import parse_date_yyyy_mm_dd, parse_ms, try_parse_date


class TestCalendarArithmeticContract(unittest.TestCase):
    def test_week_bounds_default_to_monday(self) -> None:
        wed = dt.date(2024, 1, 10)
        self.assertEqual(start_of_week(wed), dt.date(2024, 1, 8))
        self.assertEqual(end_of_week(wed), dt.date(2024, 1, 14))

    def test_week_bounds_with_sunday_start(self) -> None:
        wed = dt.date(2024, 1, 10)
        self.assertEqual(start_of_week(wed, SUNDAY), dt.date(2024, 1, 7))
        self.assertEqual(end_of_week(wed, SUNDAY), dt.date(2024, 1, 13))
        # A Sunday starts its own week.
        self.assertEqual(start_of_week(dt.date(2024, 1, 7), SUNDAY), dt.date(2024, 1, 7))

    def test_week_start_out_of_range_raises(self) -> None:
        with self.assertRaises(ValueError):
            start_of_week(dt.date(2024, 1, 10), 7)

    def test_month_and_year_bounds(self) -> None:
        d = dt.date(2024, 2, 14)
        self.assertEqual(start_of_month(d), dt.date(2024, 2, 1))
        self.assertEqual(end_of_month(d), dt.date(2024, 2, 29))
        self.assertEqual(end_of_month(dt.date(2023, 2, 1)), dt.date(2023, 2, 28))
        self.assertEqual(start_of_year(d), dt.date(2024, 1, 1))
        self.assertEqual(end_of_year(d), dt.date(2024, 12, 31))

    def test_each_day_is_inclusive(self) -> None:
        days = list(each_day(dt.date(2024, 2, 27), dt.date(2024, 3, 1)))
        self.assertEqual(days, [dt.date(2024, 2, 27), dt.date(2024, 2, 28), dt.date(2024, 2, 29), dt.date(2024, 3, 1)])
        self.assertEqual(list(each_day(dt.date(2024, 3, 2), dt.date(2024, 3, 1))), [])


class TestPeriodKeyContract(unittest.TestCase):
    def test_period_key_per_frequency(self) -> None:
        d = dt.date(2024, 1, 10)
        self.assertEqual(period_key(d, Frequency.DAILY), "2024-01-10")
        self.assertEqual(period_key(d, Frequency.WEEKLY), "2024-W2")
        self.assertEqual(period_key(d, Frequency.MONTHLY), "2024-01")
        self.assertEqual(period_key(d, Frequency.YEARLY), "2024")
        self.assertEqual(period_key(d, Frequency.NONE), "")

    def test_weekly_key_uses_iso_week_year(self) -> None:
        # Monday 2024-12-30 belongs to ISO week 1 of 2025.
        self.assertEqual(period_key(dt.date(2024, 12, 30), Frequency.WEEKLY), "2025-W1")
        # Friday 2021-01-01 belongs to ISO week 53 of 2020.
        self.assertEqual(period_key(dt.date(2021, 1, 1), Frequency.WEEKLY), "2020-W53")

    def test_same_week_shares_a_key(self) -> None:
        keys = {period_key(d, Frequency.WEEKLY) for d in each_day(dt.date(2024, 1, 8), dt.date(2024, 1, 14))}
        self.assertEqual(keys, {"2024-W2"})

    def test_recurrence_deadline(self) -> None:
        d = dt.date(2024, 1, 10)
        self.assertEqual(recurrence_deadline(d, Frequency.WEEKLY), dt.date(2024, 1, 14))
        self.assertEqual(recurrence_deadline(d, Frequency.MONTHLY), dt.date(2024, 1, 31))
        self.assertEqual(recurrence_deadline(d, Frequency.DAILY), d)
        self.assertEqual(recurrence_deadline(d, Frequency.YEARLY), d)


class TestDateParsingContract(unittest.TestCase):
    def test_parse_is_naive_local(self) -> None:
        self.assertEqual(parse_date_yyyy_mm_dd("2024-01-03"), dt.date(2024, 1, 3))
        self.assertEqual(parse_date_yyyy_mm_dd(" 2024-1-3 "), dt.date(2024, 1, 3))

    def test_parse_rejects_malformed(self) -> None:
        for bad in ("", "2024/01/03", "2024-02-30", "03-01-2024", "tomorrow"):
            with self.assertRaises(ValueError, msg=bad):
                parse_date_yyyy_mm_dd(bad)
            self.assertIsNone(try_parse_date(bad))

    def test_parse_ms(self) -> None:
        self.assertEqual(parse_ms("1704067200000"), 1704067200000)
        self.assertEqual(parse_ms("1704067200000.0"), 1704067200000)
        self.assertIsNone(parse_ms(""))
        self.assertIsNone(parse_ms("soon"))
        self.assertIsNone(parse_ms("nan"))


if __name__ == "__main__":
    unittest.main(verbosity=2)
