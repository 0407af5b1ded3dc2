"""
Weekly and monthly views over the history log.

Each period is represented by its latest entry. Weeks start on Sunday (UTC).
The month in progress is never reported; that check runs on every read.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from usdg_tracker.utils.constants import THRESHOLD_KEYS
from usdg_tracker.utils.types import LogEntry, MonthlySummary, WeeklySummary


def week_start(ts: datetime):
    day = ts.astimezone(timezone.utc).date()
    # weekday(): Monday=0 … Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def month_key(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime("%Y-%m")


def group_by_week(entries: list[LogEntry]) -> list[WeeklySummary]:
    weeks = {}
    for entry in entries:
        start = week_start(entry.timestamp)
        key = start.isoformat()
        current = weeks.get(key)
        if current is None or entry.timestamp > current.entry.timestamp:
            weeks[key] = WeeklySummary(key, (start + timedelta(days=6)).isoformat(), entry)
    return [weeks[k] for k in sorted(weeks)]


def group_by_month(entries: list[LogEntry], now: Optional[datetime] = None) -> list[MonthlySummary]:
    now = now or datetime.now(timezone.utc)
    in_progress = month_key(now)

    months = {}
    for entry in entries:
        key = month_key(entry.timestamp)
        if key == in_progress:
            continue
        current = months.get(key)
        if current is None or entry.timestamp > current.entry.timestamp:
            months[key] = MonthlySummary(key, entry)
    return [months[k] for k in sorted(months)]


def _percent_change(current: Decimal, previous: Decimal) -> Decimal:
    if previous > 0:
        return (current - previous) / previous * 100
    return Decimal(0)


def _volume_change(current: Decimal, previous: Decimal) -> dict:
    return {
        "current": current,
        "previous": previous,
        "change": current - previous,
        "percentChange": _percent_change(current, previous),
    }


def _count_change(current: int, previous: int) -> dict:
    return {"current": current, "previous": previous, "change": current - previous}


def period_changes(current, previous) -> Optional[dict]:
    """Period-over-period deltas; None unless both periods exist."""
    if current is None or previous is None:
        return None

    curr, prev = current.metrics, previous.metrics
    curr_thresholds = curr.exchange_thresholds.to_dict()
    prev_thresholds = prev.exchange_thresholds.to_dict()
    return {
        "volume7Day": _volume_change(curr.volume_7day, prev.volume_7day),
        "volume30Day": _volume_change(curr.volume_30day, prev.volume_30day),
        "activeExchanges": _count_change(curr.active_exchanges, prev.active_exchanges),
        "totalPairs": _count_change(curr.total_pairs, prev.total_pairs),
        "thresholds": {
            key: _count_change(curr_thresholds[key], prev_thresholds[key])
            for key in THRESHOLD_KEYS
        },
    }


def summarize(periods: list) -> dict:
    current = periods[-1] if len(periods) >= 1 else None
    previous = periods[-2] if len(periods) >= 2 else None
    return {
        "periods": periods,
        "current": current,
        "previous": previous,
        "changes": period_changes(current, previous),
    }
