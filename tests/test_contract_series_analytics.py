from __future__ import annotations

import unittest

from eisenmatrix.metrics import series_analytics
from eisenmatrix.model import Frequency, Task, TaskStatus


def _weekly(ledger) -> Task:
    return Task(
        id="w",
        title="w",
        date="2024-01-03",
        created_at_ms=0,
        updated_at_ms=0,
        frequency=Frequency.WEEKLY,
        completion_history=ledger,
    )


class TestSeriesAnalyticsContract(unittest.TestCase):
    def test_empty_ledger(self) -> None:
        a = series_analytics(_weekly({}))
        self.assertEqual((a.total_tracked, a.completed_count, a.completion_rate, a.recent), (0, 0, 0, ()))

    def test_counts_and_rounding(self) -> None:
        ledger = {
            "2024-W1": TaskStatus.DONE,
            "2024-W2": TaskStatus.IN_PROGRESS,
            "2024-W3": TaskStatus.DONE,
        }
        a = series_analytics(_weekly(ledger))
        self.assertEqual(a.total_tracked, 3)
        self.assertEqual(a.completed_count, 2)
        self.assertEqual(a.completion_rate, 67)

    def test_recent_is_newest_first_and_limited(self) -> None:
        ledger = {f"2024-W{n}": TaskStatus.DONE for n in range(1, 13)}
        ledger["2023-W52"] = TaskStatus.TODO
        a = series_analytics(_weekly(ledger), limit=3)
        self.assertEqual([k for k, _ in a.recent], ["2024-W12", "2024-W11", "2024-W10"])
        self.assertEqual(a.total_tracked, 13)


if __name__ == "__main__":
    unittest.main(verbosity=2)
