from typing import Iterable


class MathTools:
    """Provides the set arithmetic used by the statistics views."""

    EPLEY_DIVISOR: float = 30.0
    BALANCE_SCALE: float = 10.0

    @classmethod
    def epley_1rm(cls, weight: float, reps: int) -> float:
        """Return the estimated one-rep max ``weight * (1 + reps / 30)``.

        A set without weight or without reps has no estimate and yields 0.
        """
        if not weight or not reps:
            return 0.0
        return float(weight) * (1 + reps / cls.EPLEY_DIVISOR)

    @staticmethod
    def set_volume(weight: float, reps: int) -> float:
        return float(weight) * int(reps)

    @staticmethod
    def volume(sets: Iterable[tuple[int, float]]) -> float:
        """Compute tonnage as the sum of reps times weight."""
        vol = 0.0
        for reps, weight in sets:
            vol += reps * weight
        return vol

    @classmethod
    def scaled_scores(cls, values: dict[str, float]) -> dict[str, float]:
        """Scale ``values`` to 0-10 relative to the largest one (at least 1)."""
        top = max([1.0, *values.values()])
        return {
            key: round(val / top * cls.BALANCE_SCALE, 2) for key, val in values.items()
        }
