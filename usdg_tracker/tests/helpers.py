from decimal import Decimal

from usdg_tracker.utils.types import (
    ExchangeSeries,
    MetricsSnapshot,
    OrderBook,
    PairInfo,
    PairVolume,
    ThresholdCounts,
    VolumePoint,
)


def D(value) -> Decimal:
    return Decimal(str(value))


def series(exchange, points, pairs=None) -> ExchangeSeries:
    return ExchangeSeries(exchange, pairs or [], [VolumePoint(d, D(v)) for d, v in points])


def snapshot(v7=100, v30=300, active=2, pairs=3, thresholds=(0, 0, 0)) -> MetricsSnapshot:
    return MetricsSnapshot(D(v7), D(v30), active, pairs, ThresholdCounts(*thresholds))


def pair(symbol, base, quote) -> PairInfo:
    return PairInfo(symbol, f"{base}/{quote}", base, quote)


def book(bids, asks) -> OrderBook:
    return OrderBook([(D(p), D(q)) for p, q in bids], [(D(p), D(q)) for p, q in asks])


class FakeExchange:
    """In-memory stand-in for an exchange client."""

    def __init__(self, name, volume=None, pairs=None, books=None, fail=False, pair_volume=None):
        self.name = name
        self.display_name = name.title()
        self.pair_delay = 0
        self.supports_orderbook = books is not None
        self._volume = volume or ExchangeSeries.empty(name)
        self._pairs = pairs or []
        self._books = books or {}
        self._pair_volume = pair_volume or PairVolume.empty(name)
        self.fail = fail
        self.volume_calls = 0

    async def get_aggregated_volume(self):
        self.volume_calls += 1
        if self.fail:
            raise RuntimeError(f"{self.name} is down")
        return self._volume

    async def get_per_pair_volume(self):
        if self.fail:
            raise RuntimeError(f"{self.name} is down")
        return self._pair_volume

    async def get_usdg_pairs(self):
        if self.fail:
            raise RuntimeError(f"{self.name} is down")
        return self._pairs

    async def get_orderbook(self, symbol):
        book = self._books[symbol]
        if isinstance(book, Exception):
            raise book
        return book
