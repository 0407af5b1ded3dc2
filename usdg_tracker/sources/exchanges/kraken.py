from usdg_tracker.sources.exchanges.base import (
    ExchangeAPIError,
    ExchangeClient,
    date_from_seconds,
    parse_levels,
)
from usdg_tracker.utils.constants import STABLE_ASSET
from usdg_tracker.utils.types import DailyCandle, OrderBook, PairInfo, to_decimal

DAILY_INTERVAL = 1440  # minutes
DEPTH_COUNT = 500


class KrakenClient(ExchangeClient):
    name = "kraken"
    base_url = "https://api.kraken.com/0/public"
    supports_orderbook = True

    async def _get_result(self, path: str, params: dict | None = None) -> dict:
        data = await self._get_json(path, params)
        if data.get("error"):
            raise ExchangeAPIError(f"Kraken API error: {', '.join(data['error'])}")
        return data.get("result") or {}

    @staticmethod
    def _payload(result: dict):
        # The payload sits under the pair's own key, next to "last"
        key = next((k for k in result if k != "last"), None)
        return result[key] if key else None

    async def get_usdg_pairs(self) -> list[PairInfo]:
        result = await self._get_result("/AssetPairs")
        pairs = []
        for name, info in result.items():
            base = info.get("base") or ""
            quote = info.get("quote") or ""
            if STABLE_ASSET in name or STABLE_ASSET in base or STABLE_ASSET in quote:
                pairs.append(PairInfo(name, info.get("wsname") or name, base, quote))
        return pairs

    async def get_daily_candles(self, symbol: str) -> list[DailyCandle]:
        result = await self._get_result("/OHLC", {"pair": symbol, "interval": DAILY_INTERVAL})
        candles = self._payload(result) or []
        # [time, open, high, low, close, vwap, volume, count]
        return [
            DailyCandle(date_from_seconds(c[0]), to_decimal(c[4]), to_decimal(c[6]))
            for c in candles
        ]

    async def get_orderbook(self, symbol: str) -> OrderBook:
        result = await self._get_result("/Depth", {"pair": symbol, "count": DEPTH_COUNT})
        raw = self._payload(result)
        if not raw:
            return OrderBook([], [])
        return OrderBook(parse_levels(raw.get("bids")), parse_levels(raw.get("asks")))
