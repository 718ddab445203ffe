from __future__ import annotations

import datetime as dt
import unittest

from eisenmatrix.model import Frequency, Importance, ProjectedTask, Task, TaskStatus, Urgency
from eisenmatrix.quadrants import QUADRANTS, group_by_quadrant, quadrant_for, seed_for_quadrant
from eisenmatrix.store import TaskStore


def _t(tid: str, u: Urgency, i: Importance) -> Task:
    return Task(id=tid, title=tid, date="2024-01-01", created_at_ms=0, updated_at_ms=0, urgency=u, importance=i)


class TestQuadrantsContract(unittest.TestCase):
    def test_table(self) -> None:
        self.assertEqual([q.title for q in QUADRANTS.values()], ["Do First", "Schedule", "Delegate", "Eliminate"])
        self.assertEqual(quadrant_for(_t("a", Urgency.HIGH, Importance.HIGH)), "q1")
        self.assertEqual(quadrant_for(_t("a", Urgency.LOW, Importance.HIGH)), "q2")
        self.assertEqual(quadrant_for(_t("a", Urgency.HIGH, Importance.LOW)), "q3")
        self.assertEqual(quadrant_for(_t("a", Urgency.LOW, Importance.LOW)), "q4")

    def test_grouping_keeps_every_quadrant_and_order(self) -> None:
        rows = [
            ProjectedTask(_t("x", Urgency.LOW, Importance.LOW), TaskStatus.TODO),
            ProjectedTask(_t("y", Urgency.HIGH, Importance.HIGH), TaskStatus.TODO),
            ProjectedTask(_t("z", Urgency.LOW, Importance.LOW), TaskStatus.DONE),
        ]
        groups = group_by_quadrant(rows)
        self.assertEqual(list(groups), ["q1", "q2", "q3", "q4"])
        self.assertEqual([r.task.id for r in groups["q4"]], ["x", "z"])
        self.assertEqual(groups["q2"], [])

    def test_seed_creates_task_in_quadrant(self) -> None:
        seed = seed_for_quadrant("q3")
        self.assertEqual(seed.supplied(), {"urgency": Urgency.HIGH, "importance": Importance.LOW, "frequency": Frequency.NONE})
        t = TaskStore(new_id=lambda: "n").create(seed, dt.date(2024, 1, 10)).task
        self.assertEqual(quadrant_for(t), "q3")

    def test_unknown_quadrant(self) -> None:
        with self.assertRaises(KeyError):
            seed_for_quadrant("q5")


if __name__ == "__main__":
    unittest.main(verbosity=2)
