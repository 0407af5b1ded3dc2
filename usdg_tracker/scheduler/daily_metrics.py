"""
Daily metrics snapshot.

Fetches every exchange, derives the MetricsSnapshot and appends it to the
history log. Beat fires it once a day at 23:59 UTC; a Redis lock keeps it
to one run at a time.
"""
import asyncio
import logging
from typing import Optional

from celery import shared_task
from redis import Redis
from redlock import Redlock

from usdg_tracker.config.settings import METRICS_LOG_FILE, REDIS_URL
from usdg_tracker.metrics.calculator import calculate_all_metrics
from usdg_tracker.sources.exchanges.registry import build_clients
from usdg_tracker.sources.orchestrator import fetch_aggregated_volume
from usdg_tracker.storage.history_log import HistoryLog
from usdg_tracker.utils.types import LogEntry

log = logging.getLogger(__name__)

# ── global Redis lock (only ONE daily run at a time) ────────────────────
LOCKER = Redlock([Redis.from_url(REDIS_URL)])
LOCK_NAME = "daily_metrics_lock"
LOCK_MS = 15 * 60 * 1000


async def run_metrics_job(
    clients: Optional[dict] = None,
    history_log: Optional[HistoryLog] = None,
) -> Optional[LogEntry]:
    """One pipeline run. Any failure aborts this run only and returns None."""
    log.info("🔄  Starting daily metrics collection…")
    try:
        clients = clients if clients is not None else build_clients()
        history_log = history_log or HistoryLog(METRICS_LOG_FILE)

        aggregated = await fetch_aggregated_volume(clients)
        metrics = calculate_all_metrics(aggregated)
        entry = history_log.append(metrics)
    except Exception:
        log.error("❌ Daily metrics run failed", exc_info=True)
        return None

    log.info(
        f"✅ Metrics collection complete: 7d=${metrics.volume_7day / 1_000_000:.2f}M, "
        f"exchanges={metrics.active_exchanges}, pairs={metrics.total_pairs}, "
        f"thresholds={metrics.exchange_thresholds.to_dict()}"
    )
    return entry


def run_locked(locker=None, job=run_metrics_job) -> Optional[LogEntry]:
    locker = locker or LOCKER
    lock = locker.lock(LOCK_NAME, LOCK_MS)
    if not lock:
        log.info("🔒 Another daily metrics run holds the lock; skipping.")
        return None

    try:
        return asyncio.run(job())
    finally:
        locker.unlock(lock)


@shared_task(name="log_daily_metrics", bind=True)
def log_daily_metrics(self):
    entry = run_locked()
    return entry.to_dict()["timestamp"] if entry else None
