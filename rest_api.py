import json
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import APP_VERSION, load_settings
from db import AsyncKeyValueRepository
from log_schema import default_store

logger = logging.getLogger(__name__)


class SyncAPI:
    """Remote endpoint holding one shared log store snapshot."""

    def __init__(
        self,
        db_path: str = "sync.db",
        yaml_path: str = "settings.yaml",
        *,
        slot_key: str | None = None,
    ) -> None:
        self.db_path = db_path
        self.settings = load_settings(yaml_path)
        self.slot_key = slot_key or self.settings.remote_key
        self.storage = AsyncKeyValueRepository(db_path)
        self.app = FastAPI(
            title="Workout Sync API",
            description="Snapshot store for offline-first workout logs",
            version=APP_VERSION,
        )
        self._setup_routes()

    @staticmethod
    def _error(e: Exception) -> JSONResponse:
        return JSONResponse({"error": str(e)}, status_code=500)

    def _setup_routes(self) -> None:
        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and storage connectivity.",
        )
        async def health():
            """Return API and storage connection status."""
            try:
                await self.storage.get_text(self.slot_key)
                return {"status": "ok"}
            except Exception as e:  # pragma: no cover - connectivity failure
                return self._error(e)

        @self.app.get(
            "/sync",
            summary="Read snapshot",
            description="Return the stored log store, or an empty one.",
        )
        async def read_snapshot():
            try:
                raw = await self.storage.get_text(self.slot_key)
                data = json.loads(raw) if raw else None
                return JSONResponse(data or default_store().to_dict())
            except Exception as e:
                logger.warning("Reading snapshot failed: %s", e)
                return self._error(e)

        @self.app.post(
            "/sync",
            summary="Overwrite snapshot",
            description="Replace the stored log store unconditionally.",
        )
        async def write_snapshot(request: Request):
            try:
                body = await request.json()
                await self.storage.set_text(self.slot_key, json.dumps(body))
                return {"ok": True}
            except Exception as e:
                logger.warning("Writing snapshot failed: %s", e)
                return self._error(e)


api = SyncAPI()
app = api.app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app)
