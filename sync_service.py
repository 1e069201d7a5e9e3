"""Periodic fetch, merge and push of the session log.

A cycle always runs fetch before merge and merge before push. Local state
is read again right before the push so edits made while the fetch was in
flight are included. Failures never roll local state back; the next tick
simply runs the whole cycle again.
"""
from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from log_service import WorkoutLog
from merge_engine import merge
from sync_client import FetchResult, SyncClient

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of one sync cycle."""

    status: str
    adopted: bool = False
    pushed_count: int = 0
    error: Optional[str] = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.status in ("pushed", "seeded")


class SyncScheduler(threading.Thread):
    """Background thread firing ``callback`` every ``interval`` seconds.

    Each tick runs on its own worker thread, so a slow cycle never delays
    the next tick.
    """

    def __init__(self, interval: float, callback: Callable[[], object]) -> None:
        super().__init__(daemon=True)
        self.interval = interval
        self.callback = callback
        self._stop_event = threading.Event()

    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()

    def run(self) -> None:
        while not self._stop_event.wait(self.interval):
            worker = threading.Thread(target=self.callback, daemon=True)
            worker.start()

    def stop(self) -> None:
        self._stop_event.set()


class SyncOrchestrator:
    """Keeps the session log and the remote snapshot converging."""

    def __init__(
        self,
        log: WorkoutLog,
        client: SyncClient,
        interval: float = 15.0,
        *,
        convert_units: bool = False,
        scheduler_factory: Callable[..., SyncScheduler] = SyncScheduler,
    ) -> None:
        self.log = log
        self.client = client
        self.interval = interval
        self.convert_units = convert_units
        self.scheduler_factory = scheduler_factory
        self.scheduler: SyncScheduler | None = None
        self.last_result: SyncResult | None = None
        self._cycle_lock = threading.Lock()
        self._stopped = False

    def start(self) -> SyncResult:
        """Run the startup cycle and begin periodic syncing."""
        self._stopped = False
        result = self.run_cycle()
        if self.scheduler is None:
            self.scheduler = self.scheduler_factory(self.interval, self.run_cycle)
            self.scheduler.start()
        return result

    def stop(self) -> None:
        """Stop ticking; results of a cycle still in flight are dropped."""
        self._stopped = True
        if self.scheduler is not None:
            self.scheduler.stop()
            self.scheduler = None

    @property
    def stopped(self) -> bool:
        return self._stopped

    def run_cycle(self) -> SyncResult:
        if self._stopped:
            return SyncResult("stopped")
        if not self._cycle_lock.acquire(blocking=False):
            logger.debug("Sync cycle still in progress, skipping tick")
            return SyncResult("skipped")
        start = time.monotonic()
        try:
            result = self._cycle()
        finally:
            self._cycle_lock.release()
        result.duration_ms = int((time.monotonic() - start) * 1000)
        self.last_result = result
        return result

    def _cycle(self) -> SyncResult:
        try:
            fetched: FetchResult = self.client.fetch_remote()
        except Exception as e:
            logger.warning("Sync fetch failed: %s", e)
            return SyncResult("failed", error=str(e))
        if self._stopped:
            return SyncResult("stopped")
        if fetched.failed:
            logger.warning("Sync cycle abandoned, remote unreadable: %s", fetched.error)
            return SyncResult("failed", error=fetched.error)

        adopted = False
        remote = fetched.snapshot
        if remote is None:
            status = "seeded"
            outgoing = self.log.snapshot()
        else:
            status = "pushed"
            if len(remote.sets) > len(self.log):
                added = self.log.absorb(remote, self.convert_units)
                adopted = True
                logger.info("Adopted %d sets from remote snapshot", added)
            outgoing = merge(remote, self.log.snapshot(), self.convert_units)

        try:
            ok = self.client.push_remote(outgoing)
        except Exception as e:
            logger.warning("Sync push failed: %s", e)
            return SyncResult("failed", adopted=adopted, error=str(e))
        if not ok:
            return SyncResult("failed", adopted=adopted, error="push rejected")
        logger.info("Synced %d sets (%s)", len(outgoing.sets), status)
        return SyncResult(status, adopted=adopted, pushed_count=len(outgoing.sets))
