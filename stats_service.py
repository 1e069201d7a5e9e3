from __future__ import annotations
from typing import List, Optional, Dict

from algorithms import MathTools
from log_schema import CATEGORIES, LogStore, SetEntry


class StatisticsService:
    """Compute workout statistics from a log store snapshot.

    Every view accepts the same optional filters: an exact exercise name
    and inclusive ``YYYY-MM-DD`` date bounds.
    """

    def __init__(self, store_provider) -> None:
        self._provider = store_provider

    @classmethod
    def for_store(cls, store: LogStore) -> "StatisticsService":
        return cls(lambda: store)

    def _store(self) -> LogStore:
        return self._provider()

    def exercises(self) -> List[str]:
        """Return distinct exercise names in alphabetical order."""
        return sorted({s.exercise for s in self._store().sets if s.exercise})

    def filtered(
        self,
        exercise: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[SetEntry]:
        rows = [
            s
            for s in self._store().sets
            if (not exercise or s.exercise == exercise)
            and (not start_date or s.date >= start_date)
            and (not end_date or s.date <= end_date)
        ]
        return sorted(rows, key=lambda s: s.date)

    def totals(
        self,
        exercise: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, float]:
        rows = self.filtered(exercise, start_date, end_date)
        tonnage = MathTools.volume((s.reps, s.weight) for s in rows)
        rpe_total = sum(s.rpe or 0 for s in rows)
        return {
            "sets": len(rows),
            "tonnage": round(tonnage, 2),
            "avg_rpe": round(rpe_total / len(rows), 2) if rows else 0.0,
        }

    def exercise_summary(
        self,
        exercise: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, float]]:
        """Return personal bests and tonnage per exercise."""
        stats: Dict[str, Dict[str, float]] = {}
        for s in self.filtered(exercise, start_date, end_date):
            item = stats.setdefault(
                s.exercise,
                {
                    "max_weight": 0.0,
                    "max_reps": 0,
                    "tonnage": 0.0,
                    "best_e1rm": 0.0,
                    "sets": 0,
                },
            )
            item["max_weight"] = max(item["max_weight"], s.weight)
            item["max_reps"] = max(item["max_reps"], s.reps)
            item["tonnage"] += MathTools.set_volume(s.weight, s.reps)
            item["best_e1rm"] = max(
                item["best_e1rm"], MathTools.epley_1rm(s.weight, s.reps)
            )
            item["sets"] += 1
        result = []
        for name, data in stats.items():
            result.append(
                {
                    "exercise": name,
                    "max_weight": data["max_weight"],
                    "max_reps": int(data["max_reps"]),
                    "tonnage": round(data["tonnage"], 2),
                    "best_e1rm": round(data["best_e1rm"], 2),
                    "sets": int(data["sets"]),
                }
            )
        return sorted(result, key=lambda x: x["exercise"])

    def personal_records(
        self,
        exercise: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, float]]:
        """Return the best set for each exercise based on estimated 1RM."""
        records: Dict[str, Dict[str, float]] = {}
        for s in self.filtered(exercise, start_date, end_date):
            est = MathTools.epley_1rm(s.weight, s.reps)
            current = records.get(s.exercise)
            if current is None or est > current["est_1rm"]:
                records[s.exercise] = {
                    "exercise": s.exercise,
                    "date": s.date,
                    "category": s.category,
                    "reps": s.reps,
                    "weight": s.weight,
                    "rpe": s.rpe,
                    "est_1rm": round(est, 2),
                }
        return sorted(records.values(), key=lambda x: x["exercise"])

    def e1rm_trend(
        self,
        exercise: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, float]]:
        """Return the best estimated 1RM per date for ``exercise``."""
        if not exercise:
            return []
        by_date: Dict[str, float] = {}
        for s in self.filtered(exercise, start_date, end_date):
            est = MathTools.epley_1rm(s.weight, s.reps)
            if est > by_date.get(s.date, 0.0):
                by_date[s.date] = est
        return [
            {"date": date, "e1rm": round(value, 1)}
            for date, value in sorted(by_date.items())
        ]

    def category_balance(
        self,
        exercise: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, float]]:
        """Return tonnage per push/pull/legs with a 0-10 relative score."""
        sums = {cat: 0.0 for cat in CATEGORIES}
        for s in self.filtered(exercise, start_date, end_date):
            sums[s.category] += MathTools.set_volume(s.weight, s.reps)
        scores = MathTools.scaled_scores(sums)
        return [
            {
                "category": cat,
                "score": scores[cat],
                "tonnage": int(round(sums[cat])),
            }
            for cat in CATEGORIES
        ]
