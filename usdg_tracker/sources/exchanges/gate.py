from usdg_tracker.sources.exchanges.base import (
    ExchangeClient,
    date_from_seconds,
    parse_levels,
    split_pair,
)
from usdg_tracker.utils.types import DailyCandle, OrderBook, PairInfo, to_decimal

USDG_PAIRS = ["USDG_USDT"]


class GateClient(ExchangeClient):
    name = "gate"
    base_url = "https://api.gateio.ws/api/v4"
    supports_orderbook = True

    async def get_usdg_pairs(self) -> list[PairInfo]:
        return [PairInfo(p, p.replace("_", "/"), *split_pair(p, "_")) for p in USDG_PAIRS]

    async def get_daily_candles(self, symbol: str) -> list[DailyCandle]:
        data = await self._get_json(
            "/spot/candlesticks",
            {"currency_pair": symbol, "interval": "1d", "limit": 1000},
        )
        # [timestamp, quote volume, close, high, low, open, base amount, closed]
        return [
            DailyCandle(date_from_seconds(c[0]), to_decimal(c[2]), to_decimal(c[1]))
            for c in data or []
        ]

    async def get_orderbook(self, symbol: str) -> OrderBook:
        data = await self._get_json("/spot/order_book", {"currency_pair": symbol, "limit": 100})
        return OrderBook(parse_levels(data.get("bids")), parse_levels(data.get("asks")))
