"""
Rolling-window metrics over the unified daily series.

Windows are taken by position ("last N entries"), not by calendar span:
a gapped series simply contributes fewer days.
"""
from decimal import Decimal

from usdg_tracker.utils.constants import (
    AVERAGE_DIVISOR,
    MONTH_WINDOW,
    THRESHOLD_1M,
    THRESHOLD_5M,
    THRESHOLD_25M,
    WEEK_WINDOW,
)
from usdg_tracker.utils.types import AggregatedVolume, MetricsSnapshot, ThresholdCounts


def n_day_volume(daily_volume, days: int = WEEK_WINDOW) -> Decimal:
    if days <= 0:
        return Decimal(0)
    return sum((day.volume for day in daily_volume[-days:]), Decimal(0))


def _exchange_total(window, exchange: str) -> Decimal:
    return sum((day.by_exchange.get(exchange, Decimal(0)) for day in window), Decimal(0))


def count_active_exchanges(daily_volume, exchanges) -> int:
    window = daily_volume[-MONTH_WINDOW:]
    return sum(1 for exchange in exchanges if _exchange_total(window, exchange) > 0)


def count_total_pairs(pairs_by_exchange: dict) -> int:
    # Same pair on two venues counts twice
    return sum(len(pairs) for pairs in pairs_by_exchange.values())


def exchange_averages(daily_volume, exchanges) -> dict:
    """30-day average per exchange. The divisor is always 30, even with less history."""
    window = daily_volume[-MONTH_WINDOW:]
    if not window:
        return {exchange: Decimal(0) for exchange in exchanges}
    return {exchange: _exchange_total(window, exchange) / AVERAGE_DIVISOR for exchange in exchanges}


def threshold_bucket(average: Decimal):
    """Returns the bucket key, or None for the untracked (< 1M) tier."""
    if average >= THRESHOLD_25M:
        return "over25M"
    if average >= THRESHOLD_5M:
        return "5Mto25M"
    if average >= THRESHOLD_1M:
        return "1Mto5M"
    return None


def count_by_threshold(averages: dict) -> ThresholdCounts:
    counts = {"1Mto5M": 0, "5Mto25M": 0, "over25M": 0}
    for average in averages.values():
        key = threshold_bucket(average)
        if key is not None:
            counts[key] += 1
    return ThresholdCounts.from_dict(counts)


def calculate_all_metrics(aggregated: AggregatedVolume) -> MetricsSnapshot:
    daily = aggregated.daily_volume
    exchanges = aggregated.exchanges
    return MetricsSnapshot(
        volume_7day=n_day_volume(daily, WEEK_WINDOW),
        volume_30day=n_day_volume(daily, MONTH_WINDOW),
        active_exchanges=count_active_exchanges(daily, exchanges),
        total_pairs=count_total_pairs(aggregated.pairs_by_exchange),
        exchange_thresholds=count_by_threshold(exchange_averages(daily, exchanges)),
    )
