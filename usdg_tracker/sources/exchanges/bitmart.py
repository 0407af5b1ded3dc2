import time

from usdg_tracker.sources.exchanges.base import (
    ExchangeAPIError,
    ExchangeClient,
    date_from_seconds,
    parse_levels,
    split_pair,
)
from usdg_tracker.utils.types import DailyCandle, OrderBook, PairInfo, to_decimal

USDG_PAIRS = ["USDG_USDT"]
HISTORY_SECONDS = 365 * 24 * 60 * 60
OK_CODE = 1000


class BitmartClient(ExchangeClient):
    name = "bitmart"
    base_url = "https://api-cloud.bitmart.com"
    supports_orderbook = True

    async def _get_data(self, path: str, params: dict):
        payload = await self._get_json(path, params)
        if payload.get("code") != OK_CODE:
            raise ExchangeAPIError(f"Bitmart API error: {payload.get('message')}")
        return payload.get("data")

    async def get_usdg_pairs(self) -> list[PairInfo]:
        return [PairInfo(p, p.replace("_", "/"), *split_pair(p, "_")) for p in USDG_PAIRS]

    async def get_daily_candles(self, symbol: str) -> list[DailyCandle]:
        data = await self._get_data(
            "/spot/quotation/v3/klines",
            {"symbol": symbol, "step": 1440, "after": int(time.time()) - HISTORY_SECONDS, "limit": 200},
        )
        # [timestamp, open, high, low, close, volume, quote volume]
        return [
            DailyCandle(date_from_seconds(c[0]), to_decimal(c[4] or 0), to_decimal(c[5] or 0))
            for c in data or []
        ]

    async def get_orderbook(self, symbol: str) -> OrderBook:
        data = await self._get_data("/spot/quotation/v3/books", {"symbol": symbol, "limit": 50}) or {}
        return OrderBook(parse_levels(data.get("bids")), parse_levels(data.get("asks")))
