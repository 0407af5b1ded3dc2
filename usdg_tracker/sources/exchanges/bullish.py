from datetime import datetime, timedelta, timezone

from usdg_tracker.sources.exchanges.base import ExchangeClient
from usdg_tracker.utils.constants import STABLE_ASSET, STABLECOINS
from usdg_tracker.utils.types import DailyCandle, PairInfo, to_decimal

HISTORY_DAYS = 365


def _split_symbol(symbol: str) -> tuple[str, str]:
    """Bullish symbols are concatenated ("BTCUSDG", "USDGUSDC")."""
    upper = symbol.upper()
    for stable in sorted(STABLECOINS, key=len, reverse=True):
        if upper.startswith(stable):
            return stable, upper[len(stable):]
    if upper.endswith(STABLE_ASSET):
        return upper[: -len(STABLE_ASSET)], STABLE_ASSET
    return upper, ""


class BullishClient(ExchangeClient):
    """AMM venue: volume only, no orderbook."""

    name = "bullish"
    base_url = "https://api.exchange.bullish.com/trading-api/v1"

    async def get_usdg_pairs(self) -> list[PairInfo]:
        markets = await self._get_json("/markets")
        pairs = []
        for market in markets or []:
            symbol = market.get("symbol") or market.get("marketId") or ""
            if STABLE_ASSET not in symbol:
                continue
            base, quote = _split_symbol(symbol)
            base = market.get("baseSymbol") or market.get("baseAsset") or base
            quote = market.get("quoteSymbol") or market.get("quoteAsset") or quote
            pairs.append(PairInfo(symbol, symbol, base, quote))
        return pairs

    async def get_daily_candles(self, symbol: str) -> list[DailyCandle]:
        end = datetime.now(timezone.utc)
        start = end - timedelta(days=HISTORY_DAYS)
        data = await self._get_json(
            f"/markets/{symbol}/candle",
            {
                "createdAtDatetime[gte]": start.isoformat().replace("+00:00", "Z"),
                "createdAtDatetime[lte]": end.isoformat().replace("+00:00", "Z"),
                "timeBucket": "1d",
            },
        )
        if isinstance(data, dict):
            data = data.get("data") or data.get("candles") or []

        candles = []
        for c in data:
            stamp = c.get("createdAtDatetime") or c.get("datetime") or ""
            date = stamp.split("T")[0] if isinstance(stamp, str) else ""
            if not date:
                continue
            candles.append(DailyCandle(date, to_decimal(c.get("close") or 0), to_decimal(c.get("volume") or 0)))
        return candles
