from typing import Literal, Optional

from pydantic import BaseModel, ValidationError, field_validator


class SettingsSchema(BaseModel):
    units: Literal["lb", "kg"] = "lb"
    sync_enabled: bool = True
    sync_url: str = ""
    sync_interval: float = 15.0
    sync_timeout: Optional[float] = None
    sync_convert_units: bool = False
    db_path: str = "workout.db"
    storage_key: str = "workout_tracker_v1"
    remote_key: str = "store"
    log_level: str = "INFO"

    @field_validator("sync_interval")
    @classmethod
    def _positive_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("sync_interval must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level

def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
