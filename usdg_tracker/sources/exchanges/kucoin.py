import time

from usdg_tracker.sources.exchanges.base import (
    ExchangeAPIError,
    ExchangeClient,
    date_from_seconds,
    parse_levels,
    split_pair,
)
from usdg_tracker.utils.types import DailyCandle, OrderBook, PairInfo, to_decimal

USDG_PAIRS = ["USDG-USDT", "BTC-USDG"]
HISTORY_SECONDS = 365 * 24 * 60 * 60
OK_CODE = "200000"


class KucoinClient(ExchangeClient):
    name = "kucoin"
    base_url = "https://api.kucoin.com/api/v1"
    supports_orderbook = True

    async def _get_data(self, path: str, params: dict):
        payload = await self._get_json(path, params)
        if str(payload.get("code")) != OK_CODE:
            raise ExchangeAPIError(f"Kucoin API error: {payload.get('msg')}")
        return payload.get("data")

    async def get_usdg_pairs(self) -> list[PairInfo]:
        return [PairInfo(p, p.replace("-", "/"), *split_pair(p, "-")) for p in USDG_PAIRS]

    async def get_daily_candles(self, symbol: str) -> list[DailyCandle]:
        end_at = int(time.time())
        data = await self._get_data(
            "/market/candles",
            {"symbol": symbol, "type": "1day", "startAt": end_at - HISTORY_SECONDS, "endAt": end_at},
        )
        # [time, open, close, high, low, volume, turnover]
        return [
            DailyCandle(date_from_seconds(c[0]), to_decimal(c[2]), to_decimal(c[5]))
            for c in data or []
        ]

    async def get_orderbook(self, symbol: str) -> OrderBook:
        data = await self._get_data("/market/orderbook/level2_100", {"symbol": symbol}) or {}
        return OrderBook(parse_levels(data.get("bids")), parse_levels(data.get("asks")))
