"""
Fan-out over the exchange clients.

Every exchange runs as its own task and a failure degrades only that
exchange's contribution. Results are merged after all tasks join.
"""
import asyncio
import logging

from usdg_tracker.metrics.depth import build_depth_row
from usdg_tracker.metrics.volume_aggregator import AssetVolumeAggregator, aggregate_series
from usdg_tracker.sources.exchanges.base import ExchangeClient
from usdg_tracker.utils.types import AggregatedVolume, ExchangeSeries, PairVolume

log = logging.getLogger(__name__)


async def _safe_volume(name: str, client: ExchangeClient) -> ExchangeSeries:
    try:
        return await client.get_aggregated_volume()
    except Exception as e:
        log.error(f"❌ {name} volume fetch failed: {e}")
        return ExchangeSeries.empty(name)


async def _safe_pair_volume(name: str, client: ExchangeClient) -> PairVolume:
    try:
        return await client.get_per_pair_volume()
    except Exception as e:
        log.error(f"❌ {name} pair volume fetch failed: {e}")
        return PairVolume.empty(name)


async def fetch_aggregated_volume(clients: dict) -> AggregatedVolume:
    results = await asyncio.gather(*(_safe_volume(n, c) for n, c in clients.items()))
    return aggregate_series(results, clients.keys())


async def fetch_asset_volume(clients: dict) -> dict:
    results = await asyncio.gather(*(_safe_pair_volume(n, c) for n, c in clients.items()))
    aggregator = AssetVolumeAggregator(clients.keys())
    for pair_volume in results:
        aggregator.add(pair_volume)
    return aggregator.aggregate()


async def _exchange_depth_rows(name: str, client: ExchangeClient, sleep=asyncio.sleep) -> list:
    rows = []
    try:
        pairs = await client.get_usdg_pairs()
    except Exception as e:
        log.error(f"❌ [depth] Error fetching pairs for {name}: {e}")
        return rows

    # Pairs on one venue go one at a time to stay under its rate limit
    for i, pair in enumerate(pairs):
        if i:
            await sleep(client.pair_delay)
        try:
            book = await client.get_orderbook(pair.symbol)
        except Exception as e:
            log.error(f"❌ [depth] Error fetching orderbook for {name}/{pair.symbol}: {e}")
            continue

        row = build_depth_row(name, client.display_name, pair, book)
        if row is None:
            log.info(f"[depth] {name}/{pair.symbol} has an empty side, skipped")
            continue
        rows.append(row)
    return rows


async def collect_depth_rows(clients: dict, sleep=asyncio.sleep) -> list:
    per_exchange = await asyncio.gather(
        *(_exchange_depth_rows(n, c, sleep) for n, c in clients.items())
    )
    rows = [row for exchange_rows in per_exchange for row in exchange_rows]
    rows.sort(key=lambda r: (r.exchange, r.pair))
    return rows
