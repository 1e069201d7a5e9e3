from __future__ import annotations
import json
import logging
import threading
from typing import Optional

from algorithms import WeightConverter
from db import LocalLogRepository
from log_schema import (
    CATEGORIES,
    LogStore,
    SetEntry,
    is_iso_date,
    new_entry_id,
    validate_store,
)
from merge_engine import merge

logger = logging.getLogger(__name__)


def _convert_sets(sets: list[SetEntry], from_unit: str, to_unit: str) -> list[SetEntry]:
    return [
        s.model_copy(
            update={"weight": WeightConverter.convert(s.weight, from_unit, to_unit)}
        )
        for s in sets
    ]


class WorkoutLog:
    """In-memory log store of the running session.

    Every mutation replaces the whole store and writes a full snapshot to
    local persistence. Reads hand out copies so callers never share live
    state with the sync threads.
    """

    def __init__(self, repo: LocalLogRepository) -> None:
        self.repo = repo
        self._lock = threading.RLock()
        self._store = repo.load()

    def snapshot(self) -> LogStore:
        with self._lock:
            return self._store.model_copy(deep=True)

    @property
    def units(self) -> str:
        with self._lock:
            return self._store.units

    def __len__(self) -> int:
        with self._lock:
            return len(self._store.sets)

    def _commit(self, store: LogStore) -> None:
        self._store = store
        self.repo.save(store)

    def add_entry(
        self,
        date: str,
        exercise: str,
        category: str,
        weight: float,
        reps: int,
        rpe: Optional[float] = None,
        notes: Optional[str] = None,
        entry_id: Optional[str] = None,
    ) -> SetEntry:
        """Validate and append a new set, returning the stored entry."""
        exercise = (exercise or "").strip()
        if not exercise:
            raise ValueError("exercise is required")
        if not is_iso_date(date):
            raise ValueError(f"invalid date: {date!r}")
        if category not in CATEGORIES:
            raise ValueError(f"category must be one of {', '.join(CATEGORIES)}")
        if not weight or weight < 0:
            raise ValueError("weight must be positive")
        if not reps or reps < 0:
            raise ValueError("reps must be positive")
        if reps != int(reps):
            raise ValueError(f"reps must be a whole number, got {reps!r}")
        entry = SetEntry(
            id=entry_id or new_entry_id(),
            date=date,
            exercise=exercise,
            category=category,
            weight=float(weight),
            reps=int(reps),
            rpe=rpe,
            notes=notes or None,
        )
        with self._lock:
            if any(s.id == entry.id for s in self._store.sets):
                raise ValueError(f"duplicate entry id: {entry.id}")
            sets = [*self._store.sets, entry]
            self._commit(LogStore(units=self._store.units, sets=sets))
        return entry

    def delete_entry(self, entry_id: str) -> None:
        """Remove an entry locally; the removal is not synchronized."""
        with self._lock:
            sets = [s for s in self._store.sets if s.id != entry_id]
            if len(sets) == len(self._store.sets):
                raise KeyError(entry_id)
            self._commit(LogStore(units=self._store.units, sets=sets))

    def set_units(self, units: str, convert: bool = False) -> None:
        if units not in WeightConverter.UNITS:
            raise ValueError(f"unknown unit: {units}")
        with self._lock:
            current = self._store
            if convert and units != current.units:
                sets = _convert_sets(current.sets, current.units, units)
            else:
                sets = list(current.sets)
            self._commit(LogStore(units=units, sets=sets))

    def absorb(self, remote: LogStore, convert_units: bool = False) -> int:
        """Merge ``remote`` into the live store, local units kept.

        Returns the number of entries that were new to this session.
        """
        with self._lock:
            before = len(self._store.sets)
            merged = merge(self._store, remote, convert_units)
            self._commit(merged)
            return len(merged.sets) - before

    def replace(self, store: LogStore) -> None:
        with self._lock:
            self._commit(store.model_copy(deep=True))

    def export_json(self) -> str:
        return json.dumps(self.snapshot().to_dict(), indent=2)

    def import_json(self, text: str) -> LogStore:
        """Adopt a JSON backup as the whole store.

        Weights recorded in another unit are converted on the way in so the
        store never mixes units.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Import failed: {e}")
        incoming = validate_store(data)
        with self._lock:
            units = self._store.units
            if incoming.units != units:
                incoming = LogStore(
                    units=units,
                    sets=_convert_sets(incoming.sets, incoming.units, units),
                )
            self._commit(incoming)
            logger.info("Imported %d sets", len(incoming.sets))
            return incoming.model_copy(deep=True)
