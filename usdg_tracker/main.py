# usdg_tracker/main.py
from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import FastAPI

from usdg_tracker.api import api, depth, metrics
from usdg_tracker.config.settings import CACHE_TTL_SECONDS, METRICS_LOG_FILE
from usdg_tracker.sources.exchanges.registry import build_clients
from usdg_tracker.storage.cache import TTLCache
from usdg_tracker.storage.history_log import HistoryLog
from usdg_tracker.utils.shortname import ShortNameFilter
from usdg_tracker.utils.types import format_timestamp

logging.basicConfig(
    level=logging.INFO,
    format="[%(levelname)s] %(shortname)s: %(message)s",
)
for handler in logging.getLogger().handlers:
    handler.addFilter(ShortNameFilter())
log = logging.getLogger(__name__)


def create_app(
    clients: Optional[dict] = None,
    history_log: Optional[HistoryLog] = None,
    cache: Optional[TTLCache] = None,
) -> FastAPI:
    app = FastAPI(title="USDG Volume Tracker")

    # Built once per process and handed to the routes through app.state
    app.state.clients = clients if clients is not None else build_clients()
    app.state.history_log = history_log or HistoryLog(METRICS_LOG_FILE)
    app.state.cache = cache or TTLCache(CACHE_TTL_SECONDS)

    app.include_router(api.router, prefix="/api")
    app.include_router(metrics.router, prefix="/api/metrics")
    app.include_router(depth.router, prefix="/api/depth")

    @app.get("/health")
    def health():
        return {"status": "ok", "timestamp": format_timestamp(datetime.now(timezone.utc))}

    @app.on_event("startup")
    def announce():
        log.info(f"✅ Tracking {len(app.state.clients)} exchanges: {', '.join(app.state.clients)}")
        log.info(f"📝 Metrics log: {app.state.history_log.path}")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=3002)
