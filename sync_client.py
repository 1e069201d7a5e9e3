import logging
import requests
from dataclasses import dataclass
from typing import Optional

from log_schema import LogStore, validate_store

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of reading the remote snapshot.

    ``snapshot`` is set when the remote answered with a readable store.
    ``error`` is set when the remote could not be read at all. Neither set
    means the remote holds nothing usable yet.
    """

    snapshot: Optional[LogStore] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def absent(self) -> bool:
        return self.snapshot is None and self.error is None


class SyncClient:
    """REST client for the remote snapshot endpoint.

    Neither operation raises: a fetch reports failures through
    ``FetchResult.error`` and a failed push returns ``False``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        session=None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _request_kwargs(self) -> dict:
        return {} if self.timeout is None else {"timeout": self.timeout}

    def fetch_remote(self) -> FetchResult:
        try:
            resp = self.session.get(f"{self.base_url}/sync", **self._request_kwargs())
        except requests.RequestException as e:
            logger.warning("Fetching remote snapshot failed: %s", e)
            return FetchResult(error=str(e))
        if resp.status_code == 404:
            logger.info("No remote snapshot stored yet")
            return FetchResult()
        if resp.status_code != 200:
            logger.warning("Remote snapshot unavailable (HTTP %s)", resp.status_code)
            return FetchResult(error=f"HTTP {resp.status_code}")
        try:
            return FetchResult(validate_store(resp.json()))
        except ValueError as e:
            # unreadable data is replaced by the next push
            logger.warning("Ignoring malformed remote snapshot: %s", e)
            return FetchResult()

    def push_remote(self, snapshot: LogStore) -> bool:
        try:
            resp = self.session.post(
                f"{self.base_url}/sync", json=snapshot.to_dict(), **self._request_kwargs()
            )
        except requests.RequestException as e:
            logger.warning("Pushing snapshot failed: %s", e)
            return False
        if resp.status_code != 200:
            logger.warning("Remote rejected snapshot (HTTP %s)", resp.status_code)
            return False
        return True
