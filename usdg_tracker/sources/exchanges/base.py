import asyncio
import logging
import re
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import backoff
import httpx

from usdg_tracker.config.settings import HTTP_TIMEOUT_SECONDS
from usdg_tracker.utils.constants import (
    ASSET_PREFIX_PATTERN,
    CONVERSION_STABLECOINS,
    EXCHANGE_NAMES,
    RATE_LIMITS,
)
from usdg_tracker.utils.types import (
    DailyCandle,
    ExchangeSeries,
    OrderBook,
    PairInfo,
    PairVolume,
    VolumePoint,
    to_decimal,
)

log = logging.getLogger(__name__)


class ExchangeAPIError(RuntimeError):
    """Venue answered, but with an error payload."""


def date_from_seconds(ts) -> str:
    return datetime.fromtimestamp(int(ts), tz=timezone.utc).date().isoformat()


def date_from_millis(ts) -> str:
    return datetime.fromtimestamp(int(ts) / 1000, tz=timezone.utc).date().isoformat()


def parse_levels(levels) -> list:
    return [(to_decimal(level[0]), to_decimal(level[1])) for level in levels or []]


def strip_asset_prefix(symbol: str) -> str:
    return re.sub(ASSET_PREFIX_PATTERN, "", symbol or "").upper()


def needs_usd_conversion(pair: PairInfo) -> bool:
    """Volume is quoted in the base leg; anything but a stablecoin base must be priced."""
    base = (pair.base or "").upper()
    return base not in CONVERSION_STABLECOINS and strip_asset_prefix(base) not in CONVERSION_STABLECOINS


def split_pair(symbol: str, separator: str) -> tuple[str, str]:
    parts = symbol.split(separator)
    if len(parts) < 2:
        return symbol.upper(), ""
    return parts[0].upper(), parts[1].upper()


class ExchangeClient:
    """
    Public-API client for one venue.

    Subclasses provide pair discovery, daily candles and (optionally) the
    orderbook; the USD-normalized series are derived here.
    """

    name = ""
    base_url = ""
    supports_orderbook = False

    def __init__(self, client: Optional[httpx.AsyncClient] = None, pair_delay: Optional[float] = None,
                 timeout: float = HTTP_TIMEOUT_SECONDS):
        self._client = client
        self.timeout = timeout
        self.pair_delay = RATE_LIMITS.get(self.name, 0.0) if pair_delay is None else pair_delay

    @property
    def display_name(self) -> str:
        return EXCHANGE_NAMES.get(self.name, self.name)

    @backoff.on_exception(backoff.expo, httpx.RequestError, max_tries=3, jitter=None)
    async def _get_json(self, path: str, params: Optional[dict] = None):
        url = f"{self.base_url}{path}"
        headers = {"accept": "application/json"}
        if self._client is not None:
            resp = await self._client.get(url, params=params, headers=headers, timeout=self.timeout)
        else:
            async with httpx.AsyncClient() as client:
                resp = await client.get(url, params=params, headers=headers, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    async def get_usdg_pairs(self) -> list[PairInfo]:
        raise NotImplementedError

    async def get_daily_candles(self, symbol: str) -> list[DailyCandle]:
        raise NotImplementedError

    async def get_orderbook(self, symbol: str) -> OrderBook:
        raise NotImplementedError(f"{self.name} has no orderbook support")

    async def _pair_volumes(self):
        """Yields (pair, [VolumePoint]) in USD; a failing pair yields an empty list."""
        pairs = await self.get_usdg_pairs()
        for i, pair in enumerate(pairs):
            if i:
                await asyncio.sleep(self.pair_delay)
            try:
                candles = await self.get_daily_candles(pair.symbol)
            except Exception as e:
                log.error(f"❌ Error fetching {self.name} volume for {pair.symbol}: {e}")
                yield pair, None
                continue

            convert = needs_usd_conversion(pair)
            yield pair, [
                VolumePoint(c.date, c.volume * c.close if convert else c.volume)
                for c in candles
                if c.date
            ]

    async def get_aggregated_volume(self) -> ExchangeSeries:
        volume_by_date = defaultdict(Decimal)
        pair_names = []

        async for pair, points in self._pair_volumes():
            pair_names.append(pair.display_name)
            for point in points or []:
                volume_by_date[point.date] += point.volume

        daily = [VolumePoint(d, v) for d, v in sorted(volume_by_date.items())]
        return ExchangeSeries(self.name, pair_names, daily)

    async def get_per_pair_volume(self) -> PairVolume:
        volume_by_pair = {}
        pair_names = []

        async for pair, points in self._pair_volumes():
            pair_names.append(pair.display_name)
            if points is not None:
                volume_by_pair[pair.display_name] = points

        return PairVolume(self.name, pair_names, volume_by_pair)
