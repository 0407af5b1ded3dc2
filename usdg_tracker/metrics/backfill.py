from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from usdg_tracker.metrics.calculator import calculate_all_metrics
from usdg_tracker.storage.history_log import HistoryLog
from usdg_tracker.utils.constants import BACKFILL_HOUR_UTC, BACKFILL_MINUTE_UTC
from usdg_tracker.utils.types import AggregatedVolume, BackfillReport, MetricsSnapshot

log = logging.getLogger(__name__)


def past_dates(weeks: int, now: Optional[datetime] = None) -> list[tuple[str, datetime]]:
    """
    One (YYYY-MM-DD, timestamp) per day for the last `weeks * 7` days,
    oldest first, today excluded. Timestamps sit at 23:59 UTC, where the
    scheduled job would have written them.
    """
    now = now or datetime.now(timezone.utc)
    now = now.astimezone(timezone.utc)
    dates = []
    for days_ago in range(weeks * 7, 0, -1):
        day = (now - timedelta(days=days_ago)).replace(
            hour=BACKFILL_HOUR_UTC, minute=BACKFILL_MINUTE_UTC, second=0, microsecond=0
        )
        dates.append((day.date().isoformat(), day))
    return dates


def metrics_as_of(target_date: str, aggregated: AggregatedVolume) -> Optional[MetricsSnapshot]:
    """Recompute the snapshot as it would have been on `target_date`; None when no data."""
    upto = [d for d in aggregated.daily_volume if d.date <= target_date]
    if not upto:
        return None
    return calculate_all_metrics(aggregated._replace(daily_volume=upto))


def backfill(
    history_log: HistoryLog,
    aggregated: AggregatedVolume,
    weeks: int = 4,
    now: Optional[datetime] = None,
) -> BackfillReport:
    existing = history_log.logged_dates()
    added = skipped = missing = 0
    last_entry = None

    for date_str, timestamp in past_dates(weeks, now):
        if date_str in existing:
            skipped += 1
            continue

        metrics = metrics_as_of(date_str, aggregated)
        if metrics is None:
            log.info(f"  No data available for {date_str}")
            missing += 1
            continue

        last_entry = history_log.append(metrics, timestamp=timestamp)
        existing.add(date_str)
        added += 1
        log.info(
            f"  {date_str}: 7d=${metrics.volume_7day / 1_000_000:.1f}M, "
            f"30d=${metrics.volume_30day / 1_000_000:.1f}M, "
            f"exchanges={metrics.active_exchanges}, "
            f"thresholds={list(metrics.exchange_thresholds)}"
        )

    log.info(f"✅ Backfill complete: {added} entries added, {skipped} skipped (already existed)")
    return BackfillReport(added, skipped, missing, last_entry)
