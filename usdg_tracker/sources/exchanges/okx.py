from usdg_tracker.sources.exchanges.base import (
    ExchangeAPIError,
    ExchangeClient,
    date_from_millis,
    parse_levels,
    split_pair,
)
from usdg_tracker.utils.types import DailyCandle, OrderBook, PairInfo, to_decimal

USDG_PAIRS = ["USDG-USDT"]
OK_CODE = "0"


class OKXClient(ExchangeClient):
    name = "okx"
    base_url = "https://www.okx.com/api/v5"
    supports_orderbook = True

    async def _get_data(self, path: str, params: dict):
        payload = await self._get_json(path, params)
        if str(payload.get("code")) != OK_CODE:
            raise ExchangeAPIError(f"OKX API error: {payload.get('msg')}")
        return payload.get("data") or []

    async def get_usdg_pairs(self) -> list[PairInfo]:
        return [PairInfo(p, p.replace("-", "/"), *split_pair(p, "-")) for p in USDG_PAIRS]

    async def get_daily_candles(self, symbol: str) -> list[DailyCandle]:
        data = await self._get_data("/market/candles", {"instId": symbol, "bar": "1D", "limit": 300})
        # [ts(ms), open, high, low, close, vol, volCcy, volCcyQuote, confirm]
        return [
            DailyCandle(date_from_millis(c[0]), to_decimal(c[4]), to_decimal(c[5]))
            for c in data
        ]

    async def get_orderbook(self, symbol: str) -> OrderBook:
        data = await self._get_data("/market/books", {"instId": symbol, "sz": 400})
        if not data:
            return OrderBook([], [])
        book = data[0]
        return OrderBook(parse_levels(book.get("bids")), parse_levels(book.get("asks")))
