from typing import NamedTuple, Optional
from datetime import datetime, timezone
from decimal import Decimal

from usdg_tracker.utils.constants import THRESHOLD_KEYS


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a trailing Z."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    ts = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class VolumePoint(NamedTuple):
    date: str  # YYYY-MM-DD
    volume: Decimal

    def to_dict(self) -> dict:
        return {"date": self.date, "volume": self.volume}


class DailyCandle(NamedTuple):
    date: str
    close: Decimal
    volume: Decimal


class PairInfo(NamedTuple):
    symbol: str
    display_name: str
    base: str
    quote: str


class ExchangeSeries(NamedTuple):
    exchange: str
    pairs: list
    daily_volume: list  # [VolumePoint]

    @classmethod
    def empty(cls, exchange: str) -> "ExchangeSeries":
        return cls(exchange, [], [])

    def to_dict(self) -> dict:
        return {
            "exchange": self.exchange,
            "pairs": list(self.pairs),
            "dailyVolume": [p.to_dict() for p in self.daily_volume],
        }


class PairVolume(NamedTuple):
    exchange: str
    pairs: list
    volume_by_pair: dict  # pair -> [VolumePoint]

    @classmethod
    def empty(cls, exchange: str) -> "PairVolume":
        return cls(exchange, [], {})

    def to_dict(self) -> dict:
        return {
            "exchange": self.exchange,
            "pairs": list(self.pairs),
            "volumeByPair": {
                pair: [p.to_dict() for p in points]
                for pair, points in self.volume_by_pair.items()
            },
        }


class DailyVolumePoint(NamedTuple):
    date: str
    volume: Decimal
    by_exchange: dict  # exchange -> Decimal

    def to_dict(self) -> dict:
        return {"date": self.date, "volume": self.volume, "byExchange": dict(self.by_exchange)}


class AggregatedVolume(NamedTuple):
    daily_volume: list  # [DailyVolumePoint], ascending by date
    total_volume: Decimal
    exchanges: list
    pairs_by_exchange: dict

    def to_dict(self) -> dict:
        return {
            "dailyVolume": [p.to_dict() for p in self.daily_volume],
            "totalVolume": self.total_volume,
            "exchanges": list(self.exchanges),
            "pairsByExchange": {k: list(v) for k, v in self.pairs_by_exchange.items()},
        }


class ThresholdCounts(NamedTuple):
    one_to_five_m: int = 0
    five_to_25m: int = 0
    over_25m: int = 0

    def to_dict(self) -> dict:
        return dict(zip(THRESHOLD_KEYS, self))

    @classmethod
    def from_dict(cls, raw: dict) -> "ThresholdCounts":
        return cls(*(int(raw[key]) for key in THRESHOLD_KEYS))


class MetricsSnapshot(NamedTuple):
    volume_7day: Decimal
    volume_30day: Decimal
    active_exchanges: int
    total_pairs: int
    exchange_thresholds: ThresholdCounts

    def to_dict(self) -> dict:
        return {
            "volume7Day": self.volume_7day,
            "volume30Day": self.volume_30day,
            "activeExchanges": self.active_exchanges,
            "totalPairs": self.total_pairs,
            "exchangeThresholds": self.exchange_thresholds.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "MetricsSnapshot":
        # Older entries may lack volume30Day
        volume_7day = to_decimal(raw["volume7Day"])
        volume_30day = to_decimal(raw.get("volume30Day", 0))
        if not (volume_7day.is_finite() and volume_30day.is_finite()):
            raise ValueError("metrics volumes must be finite")
        return cls(
            volume_7day=volume_7day,
            volume_30day=volume_30day,
            active_exchanges=int(raw["activeExchanges"]),
            total_pairs=int(raw["totalPairs"]),
            exchange_thresholds=ThresholdCounts.from_dict(raw["exchangeThresholds"]),
        )


class LogEntry(NamedTuple):
    timestamp: datetime  # tz-aware UTC
    metrics: MetricsSnapshot

    def to_dict(self) -> dict:
        return {"timestamp": format_timestamp(self.timestamp), "metrics": self.metrics.to_dict()}

    @classmethod
    def from_dict(cls, raw: dict) -> "LogEntry":
        return cls(parse_timestamp(raw["timestamp"]), MetricsSnapshot.from_dict(raw["metrics"]))


class WeeklySummary(NamedTuple):
    week_start: str
    week_end: str
    entry: LogEntry

    @property
    def metrics(self) -> MetricsSnapshot:
        return self.entry.metrics

    def to_dict(self) -> dict:
        return {"weekStart": self.week_start, "weekEnd": self.week_end, **self.entry.to_dict()}


class MonthlySummary(NamedTuple):
    month: str  # YYYY-MM
    entry: LogEntry

    @property
    def metrics(self) -> MetricsSnapshot:
        return self.entry.metrics

    def to_dict(self) -> dict:
        return {"month": self.month, **self.entry.to_dict()}


class OrderBook(NamedTuple):
    bids: list  # [(price, qty)] best first, descending
    asks: list  # [(price, qty)] best first, ascending


class DepthMetrics(NamedTuple):
    mid_price: Decimal
    spread_bps: Decimal
    bid_depth: dict  # bps -> USD
    ask_depth: dict


class DepthRow(NamedTuple):
    exchange: str
    exchange_display: str
    pair: str
    pair_type: str  # 'stablecoin' | 'risk'
    mid_price: Decimal
    spread_bps: Decimal
    bps_levels: list
    bid_depth: dict
    ask_depth: dict

    def to_dict(self) -> dict:
        return {
            "exchange": self.exchange,
            "exchangeDisplay": self.exchange_display,
            "pair": self.pair,
            "pairType": self.pair_type,
            "midPrice": self.mid_price,
            "spreadBps": self.spread_bps,
            "bpsLevels": list(self.bps_levels),
            "bidDepth": dict(self.bid_depth),
            "askDepth": dict(self.ask_depth),
        }


class BackfillReport(NamedTuple):
    added: int
    skipped: int
    missing: int
    last_entry: Optional[LogEntry] = None
