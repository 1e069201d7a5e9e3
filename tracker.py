from __future__ import annotations
import logging
from typing import Optional

from config import load_settings
from db import KeyValueRepository, LocalLogRepository
from log_service import WorkoutLog
from settings_schema import SettingsSchema
from stats_service import StatisticsService
from sync_client import SyncClient
from sync_service import SyncOrchestrator, SyncResult

logger = logging.getLogger(__name__)


class WorkoutTracker:
    """One application session: local log, statistics and optional sync."""

    def __init__(
        self,
        settings: Optional[SettingsSchema] = None,
        yaml_path: str = "settings.yaml",
        *,
        client: Optional[SyncClient] = None,
        storage=None,
    ) -> None:
        self.settings = settings or load_settings(yaml_path)
        if not logging.getLogger().handlers:
            logging.basicConfig(level=self.settings.log_level)
        self.storage = storage or KeyValueRepository(self.settings.db_path)
        self.repo = LocalLogRepository(self.storage, self.settings.storage_key)
        self.log = WorkoutLog(self.repo)
        if len(self.log) == 0 and self.log.units != self.settings.units:
            self.log.set_units(self.settings.units)
        self.statistics = StatisticsService(self.log.snapshot)
        self.sync: SyncOrchestrator | None = None
        if client is None and self.settings.sync_enabled and self.settings.sync_url:
            client = SyncClient(
                self.settings.sync_url, timeout=self.settings.sync_timeout
            )
        if client is not None and self.settings.sync_enabled:
            self.sync = SyncOrchestrator(
                self.log,
                client,
                self.settings.sync_interval,
                convert_units=self.settings.sync_convert_units,
            )

    def start(self) -> SyncResult | None:
        if self.sync is None:
            logger.info("Sync disabled, running offline")
            return None
        return self.sync.start()

    def stop(self) -> None:
        if self.sync is not None:
            self.sync.stop()

    def __enter__(self) -> "WorkoutTracker":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
