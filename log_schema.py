from __future__ import annotations
import datetime
import json
import re
import secrets
import string
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

Category = Literal["push", "pull", "legs"]
Units = Literal["lb", "kg"]

CATEGORIES = ("push", "pull", "legs")
DEFAULT_UNITS = "lb"
_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_LENGTH = 7
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def is_iso_date(value: object) -> bool:
    """Return True for a real calendar date written as ``YYYY-MM-DD``."""
    if not isinstance(value, str) or not _DATE_RE.fullmatch(value):
        return False
    try:
        datetime.date.fromisoformat(value)
    except ValueError:
        return False
    return True


def new_entry_id() -> str:
    """Return a fresh 7 character base-36 entry id."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


class SetEntry(BaseModel):
    """One logged exercise set."""

    model_config = ConfigDict(extra="ignore")

    id: str
    date: str
    exercise: str
    category: Category
    weight: float
    reps: int
    rpe: Optional[float] = None
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        if not is_iso_date(value):
            raise ValueError(f"date must be YYYY-MM-DD, got {value!r}")
        return value

    @field_validator("weight")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("weight must be non-negative")
        return value


class LogStore(BaseModel):
    """All logged sets of one user plus the unit their weights are in."""

    units: Units = DEFAULT_UNITS
    sets: List[SetEntry]

    def ids(self) -> set[str]:
        return {entry.id for entry in self.sets}

    def to_dict(self) -> dict:
        return self.model_dump(exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def default_store() -> LogStore:
    return LogStore(units=DEFAULT_UNITS, sets=[])


def validate_store(data: object) -> LogStore:
    """Validate decoded JSON ``data`` as a log store.

    Raises ``ValueError`` when ``data`` lacks a ``sets`` array or any entry
    is malformed.
    """
    if not isinstance(data, dict) or not isinstance(data.get("sets"), list):
        raise ValueError("Invalid format: expected an object with a 'sets' array")
    try:
        return LogStore.model_validate(data)
    except ValidationError as e:
        raise ValueError(str(e))


def parse_store(text: str) -> LogStore:
    """Decode and validate a JSON encoded log store."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}")
    return validate_store(data)
