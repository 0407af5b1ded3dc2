import httpx
import pytest

from helpers import D
from usdg_tracker.sources.exchanges.base import ExchangeAPIError, needs_usd_conversion
from usdg_tracker.sources.exchanges.bitmart import BitmartClient
from usdg_tracker.sources.exchanges.bullish import BullishClient, _split_symbol
from usdg_tracker.sources.exchanges.gate import GateClient
from usdg_tracker.sources.exchanges.kraken import KrakenClient
from usdg_tracker.sources.exchanges.kucoin import KucoinClient
from usdg_tracker.sources.exchanges.okx import OKXClient
from usdg_tracker.utils.types import PairInfo

MAR_1 = 1709251200  # 2024-03-01T00:00:00Z
MAR_2 = MAR_1 + 86400


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def kraken_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/AssetPairs"):
        return httpx.Response(200, json={"error": [], "result": {
            "USDGUSD": {"wsname": "USDG/USD", "base": "USDG", "quote": "ZUSD"},
            "XBTUSDG": {"wsname": "XBT/USDG", "base": "XXBT", "quote": "USDG"},
            "XBTUSD": {"wsname": "XBT/USD", "base": "XXBT", "quote": "ZUSD"},
        }})
    if path.endswith("/OHLC"):
        pair = request.url.params["pair"]
        rows = {
            "USDGUSD": [[MAR_1, "1", "1", "1", "1.0001", "1", "5000", 10]],
            "XBTUSDG": [
                [MAR_1, "0", "0", "0", "60000", "0", "0.5", 3],
                [MAR_2, "0", "0", "0", "62000", "0", "1", 4],
            ],
        }[pair]
        return httpx.Response(200, json={"error": [], "result": {pair: rows, "last": MAR_2}})
    if path.endswith("/Depth"):
        return httpx.Response(200, json={"error": [], "result": {"USDGUSD": {
            "bids": [["0.9999", "100", 1]],
            "asks": [["1.0001", "200", 1]],
        }}})
    return httpx.Response(404)


@pytest.mark.asyncio
async def test_kraken_discovers_usdg_pairs_only():
    async with mock_client(kraken_handler) as http:
        pairs = await KrakenClient(client=http, pair_delay=0).get_usdg_pairs()

    assert [p.symbol for p in pairs] == ["USDGUSD", "XBTUSDG"]
    assert pairs[1] == PairInfo("XBTUSDG", "XBT/USDG", "XXBT", "USDG")


@pytest.mark.asyncio
async def test_kraken_volume_is_converted_to_usd():
    async with mock_client(kraken_handler) as http:
        series = await KrakenClient(client=http, pair_delay=0).get_aggregated_volume()

    assert series.exchange == "kraken"
    assert series.pairs == ["USDG/USD", "XBT/USDG"]
    # USDG-based volume is taken as-is, BTC volume is priced at the close
    assert [(p.date, p.volume) for p in series.daily_volume] == [
        ("2024-03-01", D(5000) + D("0.5") * D(60000)),
        ("2024-03-02", D(62000)),
    ]


@pytest.mark.asyncio
async def test_kraken_orderbook():
    async with mock_client(kraken_handler) as http:
        book = await KrakenClient(client=http, pair_delay=0).get_orderbook("USDGUSD")

    assert book.bids == [(D("0.9999"), D(100))]
    assert book.asks == [(D("1.0001"), D(200))]


@pytest.mark.asyncio
async def test_kraken_error_payload_raises():
    def handler(request):
        return httpx.Response(200, json={"error": ["EGeneral:Too many requests"], "result": {}})

    async with mock_client(handler) as http:
        with pytest.raises(ExchangeAPIError, match="Too many requests"):
            await KrakenClient(client=http, pair_delay=0).get_usdg_pairs()


@pytest.mark.asyncio
async def test_kucoin_prices_btc_pair():
    def handler(request):
        symbol = request.url.params["symbol"]
        close = "65000" if symbol == "BTC-USDG" else "1"
        volume = "2" if symbol == "BTC-USDG" else "1000"
        return httpx.Response(200, json={
            "code": "200000",
            "data": [[str(MAR_1), "0", close, "0", "0", volume, "0"]],
        })

    async with mock_client(handler) as http:
        pair_volume = await KucoinClient(client=http, pair_delay=0).get_per_pair_volume()

    assert pair_volume.pairs == ["USDG/USDT", "BTC/USDG"]
    assert pair_volume.volume_by_pair["USDG/USDT"][0].volume == D(1000)
    assert pair_volume.volume_by_pair["BTC/USDG"][0].volume == D(130000)


@pytest.mark.asyncio
async def test_failed_pair_is_skipped():
    def handler(request):
        if request.url.params["symbol"] == "BTC-USDG":
            return httpx.Response(200, json={"code": "400100", "msg": "bad symbol"})
        return httpx.Response(200, json={
            "code": "200000",
            "data": [[str(MAR_1), "0", "1", "0", "0", "750", "0"]],
        })

    async with mock_client(handler) as http:
        client = KucoinClient(client=http, pair_delay=0)
        series = await client.get_aggregated_volume()
        pair_volume = await client.get_per_pair_volume()

    assert series.pairs == ["USDG/USDT", "BTC/USDG"]
    assert [(p.date, p.volume) for p in series.daily_volume] == [("2024-03-01", D(750))]
    assert list(pair_volume.volume_by_pair) == ["USDG/USDT"]


@pytest.mark.asyncio
async def test_http_error_status_propagates():
    def handler(request):
        return httpx.Response(503)

    async with mock_client(handler) as http:
        with pytest.raises(httpx.HTTPStatusError):
            await GateClient(client=http, pair_delay=0).get_orderbook("USDG_USDT")


@pytest.mark.asyncio
async def test_gate_uses_quote_volume():
    def handler(request):
        return httpx.Response(200, json=[[str(MAR_1), "12345.6", "1.0002", "0", "0", "0", "12340", "true"]])

    async with mock_client(handler) as http:
        series = await GateClient(client=http, pair_delay=0).get_aggregated_volume()

    assert series.pairs == ["USDG/USDT"]
    assert series.daily_volume[0].volume == D("12345.6")


@pytest.mark.asyncio
async def test_okx_candles_and_error_code():
    def handler(request):
        if request.url.path.endswith("/market/candles"):
            return httpx.Response(200, json={
                "code": "0",
                "data": [[str(MAR_1 * 1000), "1", "1", "1", "1", "4200", "4200", "4200", "1"]],
            })
        return httpx.Response(200, json={"code": "51001", "msg": "Instrument ID does not exist", "data": []})

    async with mock_client(handler) as http:
        client = OKXClient(client=http, pair_delay=0)
        series = await client.get_aggregated_volume()
        with pytest.raises(ExchangeAPIError):
            await client.get_orderbook("USDG-USDT")

    assert [(p.date, p.volume) for p in series.daily_volume] == [("2024-03-01", D(4200))]


def test_needs_usd_conversion():
    assert not needs_usd_conversion(PairInfo("USDGUSD", "USDG/USD", "USDG", "ZUSD"))
    assert not needs_usd_conversion(PairInfo("ZUSDUSDG", "USD/USDG", "ZUSD", "USDG"))
    assert needs_usd_conversion(PairInfo("XBTUSDG", "XBT/USDG", "XXBT", "USDG"))


def test_bullish_symbol_split():
    assert _split_symbol("BTCUSDG") == ("BTC", "USDG")
    assert _split_symbol("USDGUSDC") == ("USDG", "USDC")


@pytest.mark.asyncio
async def test_bitmart_candles_and_orderbook():
    def handler(request):
        if request.url.path.endswith("/klines"):
            return httpx.Response(200, json={
                "code": 1000,
                "data": [
                    [str(MAR_1), "1", "1", "1", "1.0001", "800", "800.08"],
                    [str(MAR_2), "1", "1", "1", "1.0002", None, "0"],
                ],
            })
        return httpx.Response(200, json={"code": 1000, "data": {
            "bids": [["0.9999", "10"], ["0.9998", "20"]],
            "asks": [["1.0001", "30"]],
        }})

    async with mock_client(handler) as http:
        client = BitmartClient(client=http, pair_delay=0)
        series = await client.get_aggregated_volume()
        book = await client.get_orderbook("USDG_USDT")

    assert series.pairs == ["USDG/USDT"]
    assert [(p.date, p.volume) for p in series.daily_volume] == [
        ("2024-03-01", D(800)),
        ("2024-03-02", D(0)),
    ]
    assert book.bids == [(D("0.9999"), D(10)), (D("0.9998"), D(20))]
    assert book.asks == [(D("1.0001"), D(30))]


@pytest.mark.asyncio
async def test_bitmart_error_code_raises():
    def handler(request):
        return httpx.Response(200, json={"code": 30000, "message": "Not found", "data": None})

    async with mock_client(handler) as http:
        client = BitmartClient(client=http, pair_delay=0)
        with pytest.raises(ExchangeAPIError, match="Not found"):
            await client.get_orderbook("USDG_USDT")
        series = await client.get_aggregated_volume()

    # A failing pair is skipped, not fatal
    assert series.pairs == ["USDG/USDT"]
    assert series.daily_volume == []


def bullish_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/markets"):
        return httpx.Response(200, json=[
            {"symbol": "BTCUSDG"},
            {"symbol": "USDGUSDC", "baseSymbol": "USDG", "quoteSymbol": "USDC"},
            {"symbol": "BTCUSDC"},
        ])
    if path.endswith("/markets/BTCUSDG/candle"):
        # Wrapped payload
        return httpx.Response(200, json={"data": [
            {"createdAtDatetime": "2024-03-01T00:00:00.000Z", "close": "60000", "volume": "0.5"},
            {"close": "61000", "volume": "9"},
        ]})
    if path.endswith("/markets/USDGUSDC/candle"):
        # Bare list payload
        return httpx.Response(200, json=[
            {"createdAtDatetime": "2024-03-01T00:00:00.000Z", "close": "1", "volume": "2500"},
            {"createdAtDatetime": "2024-03-02T00:00:00.000Z", "close": "1", "volume": "1000"},
        ])
    return httpx.Response(404)


@pytest.mark.asyncio
async def test_bullish_discovers_usdg_markets():
    async with mock_client(bullish_handler) as http:
        pairs = await BullishClient(client=http, pair_delay=0).get_usdg_pairs()

    assert pairs == [
        PairInfo("BTCUSDG", "BTCUSDG", "BTC", "USDG"),
        PairInfo("USDGUSDC", "USDGUSDC", "USDG", "USDC"),
    ]


@pytest.mark.asyncio
async def test_bullish_volume_converts_btc_pair():
    async with mock_client(bullish_handler) as http:
        client = BullishClient(client=http, pair_delay=0)
        series = await client.get_aggregated_volume()
        pair_volume = await client.get_per_pair_volume()

    # Candles without a timestamp are dropped
    assert [(p.date, p.volume) for p in series.daily_volume] == [
        ("2024-03-01", D("0.5") * D(60000) + D(2500)),
        ("2024-03-02", D(1000)),
    ]
    assert pair_volume.volume_by_pair["BTCUSDG"][0].volume == D(30000)


def test_bullish_has_no_orderbook():
    assert not BullishClient.supports_orderbook
