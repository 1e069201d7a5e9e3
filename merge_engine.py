"""Id based union of two log store snapshots.

``merge`` never drops, edits or content-deduplicates an entry; identity is
the entry ``id`` alone. The primary snapshot's ``units`` always wins, so
``merge(a, b)`` and ``merge(b, a)`` hold the same entries but may differ in
units label and in the relative order of entries sharing a date.
"""
from __future__ import annotations

from log_schema import LogStore, SetEntry
from algorithms import WeightConverter


def _converted(entry: SetEntry, from_unit: str, to_unit: str) -> SetEntry:
    weight = WeightConverter.convert(entry.weight, from_unit, to_unit)
    return entry.model_copy(update={"weight": weight})


def merge(
    primary: LogStore, secondary: LogStore, convert_units: bool = False
) -> LogStore:
    """Return the union of ``primary`` and ``secondary`` sorted by date.

    With ``convert_units`` the weights of entries taken from ``secondary``
    are converted into ``primary.units``; otherwise they are kept as-is.
    """
    sets = [entry.model_copy() for entry in primary.sets]
    seen = {entry.id for entry in sets}
    convert = convert_units and secondary.units != primary.units
    for entry in secondary.sets:
        if entry.id in seen:
            continue
        seen.add(entry.id)
        if convert:
            sets.append(_converted(entry, secondary.units, primary.units))
        else:
            sets.append(entry.model_copy())
    # list.sort is stable: same-date entries keep concatenation order
    sets.sort(key=lambda entry: entry.date)
    return LogStore(units=primary.units, sets=sets)
