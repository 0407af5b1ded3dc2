from collections import defaultdict
from decimal import Decimal
import re

from usdg_tracker.utils.constants import STABLE_ASSET
from usdg_tracker.utils.types import (
    AggregatedVolume,
    DailyVolumePoint,
    ExchangeSeries,
    PairVolume,
    VolumePoint,
)


class VolumeAggregator:
    """Merges per-exchange daily series into one ledger keyed by date."""

    def __init__(self, exchanges):
        self.exchanges = list(exchanges)
        self.buckets = defaultdict(lambda: {
            "volume": Decimal(0),
            "by_exchange": defaultdict(Decimal),
        })
        self.pairs_by_exchange = {}

    def add(self, series: ExchangeSeries):
        exchange = series.exchange
        self.pairs_by_exchange[exchange] = list(series.pairs)

        for point in series.daily_volume:
            bucket = self.buckets[point.date]
            bucket["volume"] += point.volume
            bucket["by_exchange"][exchange] += point.volume

    def aggregate(self) -> AggregatedVolume:
        # Dates are zero-padded YYYY-MM-DD, so string order is calendar order
        daily = [
            DailyVolumePoint(date, data["volume"], dict(data["by_exchange"]))
            for date, data in sorted(self.buckets.items())
        ]
        total = sum((p.volume for p in daily), Decimal(0))
        pairs = {ex: self.pairs_by_exchange.get(ex, []) for ex in self.exchanges}
        for ex, listed in self.pairs_by_exchange.items():
            pairs.setdefault(ex, listed)
        return AggregatedVolume(daily, total, self.exchanges, pairs)

    def reset(self):
        self.buckets.clear()
        self.pairs_by_exchange.clear()


def aggregate_series(series_list, exchanges) -> AggregatedVolume:
    aggregator = VolumeAggregator(exchanges)
    for series in series_list:
        aggregator.add(series)
    return aggregator.aggregate()


def extract_asset(pair_name: str) -> str:
    """
    "BTC/USDG" → "BTC", "USDG_USDT" → "USDT".
    Falls back to the first non-USDG leg, then to the name itself.
    """
    normalized = re.sub(r"[/_-]", "", pair_name.upper())

    if normalized.startswith(STABLE_ASSET) or normalized.endswith(STABLE_ASSET):
        return normalized.replace(STABLE_ASSET, "", 1)

    for part in re.split(r"[/_-]", pair_name):
        if part.upper() != STABLE_ASSET:
            return part.upper()

    return pair_name


class AssetVolumeAggregator:
    """Regroups per-pair volume by counter-asset, per exchange."""

    def __init__(self, exchanges):
        self.exchanges = list(exchanges)
        # asset → exchange → date → volume
        self.buckets = defaultdict(lambda: defaultdict(lambda: defaultdict(Decimal)))

    def add(self, pair_volume: PairVolume):
        for pair_name, points in pair_volume.volume_by_pair.items():
            asset = extract_asset(pair_name)
            by_date = self.buckets[asset][pair_volume.exchange]
            for point in points:
                by_date[point.date] += point.volume

    def aggregate(self) -> dict:
        volume_by_asset = {
            asset: {
                exchange: [VolumePoint(d, v).to_dict() for d, v in sorted(by_date.items())]
                for exchange, by_date in per_exchange.items()
            }
            for asset, per_exchange in self.buckets.items()
        }
        return {
            "assets": sorted(self.buckets),
            "volumeByAsset": volume_by_asset,
            "exchanges": self.exchanges,
        }
