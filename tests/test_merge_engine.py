import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from log_schema import LogStore, SetEntry
from merge_engine import merge


def entry(eid: str, date: str = "2024-01-01", **kw) -> SetEntry:
    data = {
        "id": eid,
        "date": date,
        "exercise": "Bench Press",
        "category": "push",
        "weight": 100.0,
        "reps": 5,
    }
    data.update(kw)
    return SetEntry(**data)


def store(*entries: SetEntry, units: str = "lb") -> LogStore:
    return LogStore(units=units, sets=list(entries))


class MergeEngineTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.a = store(
            entry("1", "2024-01-03"),
            entry("2", "2024-01-01"),
            entry("3", "2024-01-02"),
        )
        self.b = store(
            entry("3", "2024-01-02"),
            entry("4", "2024-01-01", exercise="Squat", category="legs"),
            entry("5", "2024-01-05"),
            units="kg",
        )

    def test_disjoint_merge_orders_by_date(self) -> None:
        local = store(entry("1", "2024-01-01"))
        remote = store(entry("2", "2024-01-02"))
        result = merge(local, remote)
        self.assertEqual([s.id for s in result.sets], ["1", "2"])
        result = merge(remote, local)
        self.assertEqual([s.id for s in result.sets], ["1", "2"])

    def test_duplicate_id_collapses(self) -> None:
        local = store(entry("1", "2024-01-01"))
        remote = store(entry("1", "2024-01-01"))
        result = merge(local, remote)
        self.assertEqual(len(result.sets), 1)
        self.assertEqual(result.sets[0].id, "1")

    def test_same_id_keeps_primary_version(self) -> None:
        local = store(entry("1", weight=100.0))
        remote = store(entry("1", weight=90.0))
        self.assertEqual(merge(local, remote).sets[0].weight, 100.0)
        self.assertEqual(merge(remote, local).sets[0].weight, 90.0)

    def test_commutative_by_ids(self) -> None:
        self.assertEqual(merge(self.a, self.b).ids(), merge(self.b, self.a).ids())

    def test_idempotent(self) -> None:
        result = merge(self.a, self.a)
        self.assertEqual(len(result.sets), len(self.a.sets))
        self.assertEqual(result.ids(), self.a.ids())

    def test_size_formula(self) -> None:
        result = merge(self.a, self.b)
        shared = self.a.ids() & self.b.ids()
        self.assertEqual(
            len(result.sets), len(self.a.sets) + len(self.b.sets) - len(shared)
        )
        self.assertGreaterEqual(len(result.sets), max(len(self.a.sets), len(self.b.sets)))

    def test_sorted_by_date(self) -> None:
        dates = [s.date for s in merge(self.a, self.b).sets]
        self.assertEqual(dates, sorted(dates))

    def test_same_date_ties_keep_concatenation_order(self) -> None:
        result = merge(self.a, self.b)
        same_day = [s.id for s in result.sets if s.date == "2024-01-01"]
        self.assertEqual(same_day, ["2", "4"])
        result = merge(self.b, self.a)
        same_day = [s.id for s in result.sets if s.date == "2024-01-01"]
        self.assertEqual(same_day, ["4", "2"])

    def test_primary_units_win_without_conversion(self) -> None:
        result = merge(self.a, self.b)
        self.assertEqual(result.units, "lb")
        squat = next(s for s in result.sets if s.id == "4")
        self.assertEqual(squat.weight, 100.0)
        self.assertEqual(merge(self.b, self.a).units, "kg")

    def test_convert_units_converts_secondary_only(self) -> None:
        result = merge(self.a, self.b, convert_units=True)
        by_id = {s.id: s for s in result.sets}
        self.assertEqual(by_id["1"].weight, 100.0)
        self.assertEqual(by_id["3"].weight, 100.0)
        self.assertAlmostEqual(by_id["4"].weight, 220.46)
        self.assertAlmostEqual(by_id["5"].weight, 220.46)

    def test_inputs_not_mutated(self) -> None:
        before_a = self.a.model_dump()
        before_b = self.b.model_dump()
        merge(self.a, self.b, convert_units=True)
        self.assertEqual(self.a.model_dump(), before_a)
        self.assertEqual(self.b.model_dump(), before_b)

    def test_empty_inputs(self) -> None:
        result = merge(store(), store(units="kg"))
        self.assertEqual(result.sets, [])
        self.assertEqual(result.units, "lb")


if __name__ == "__main__":
    unittest.main()
