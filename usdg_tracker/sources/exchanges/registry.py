from typing import Optional

import httpx

from usdg_tracker.sources.exchanges.base import ExchangeClient
from usdg_tracker.sources.exchanges.bitmart import BitmartClient
from usdg_tracker.sources.exchanges.bullish import BullishClient
from usdg_tracker.sources.exchanges.gate import GateClient
from usdg_tracker.sources.exchanges.kraken import KrakenClient
from usdg_tracker.sources.exchanges.kucoin import KucoinClient
from usdg_tracker.sources.exchanges.okx import OKXClient

EXCHANGE_CLASSES = {
    "kraken": KrakenClient,
    "bullish": BullishClient,
    "gate": GateClient,
    "kucoin": KucoinClient,
    "bitmart": BitmartClient,
    "okx": OKXClient,
}

EXCHANGES = list(EXCHANGE_CLASSES)


def build_clients(http_client: Optional[httpx.AsyncClient] = None) -> dict[str, ExchangeClient]:
    return {name: cls(client=http_client) for name, cls in EXCHANGE_CLASSES.items()}


def depth_clients(clients: dict) -> dict:
    return {name: c for name, c in clients.items() if c.supports_orderbook}
