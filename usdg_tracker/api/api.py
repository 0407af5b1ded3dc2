from fastapi import APIRouter, Depends, HTTPException
import logging

from usdg_tracker.api.deps import get_cache, get_clients
from usdg_tracker.sources.orchestrator import fetch_aggregated_volume, fetch_asset_volume
from usdg_tracker.storage.cache import TTLCache

log = logging.getLogger(__name__)

router = APIRouter()


def _client_for(exchange: str, clients: dict):
    client = clients.get(exchange.lower())
    if client is None:
        raise HTTPException(status_code=400, detail=f"Unknown exchange: {exchange}")
    return client


@router.get("/exchanges")
def list_exchanges(clients: dict = Depends(get_clients)):
    return list(clients)


@router.get("/volume/{exchange}")
async def exchange_volume(
    exchange: str,
    clients: dict = Depends(get_clients),
    cache: TTLCache = Depends(get_cache),
):
    cache_key = f"volume_{exchange.lower()}"
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    client = _client_for(exchange, clients)
    try:
        series = await client.get_aggregated_volume()
    except Exception as e:
        log.error(f"❌ Error fetching {exchange} volume: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    data = series.to_dict()
    cache.set(cache_key, data)
    return data


@router.get("/aggregated")
async def aggregated_volume(
    clients: dict = Depends(get_clients),
    cache: TTLCache = Depends(get_cache),
):
    cache_key = "volume_aggregated"
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    aggregated = await fetch_aggregated_volume(clients)
    data = aggregated.to_dict()
    cache.set(cache_key, data)
    return data


@router.get("/asset-volume")
async def asset_volume(
    clients: dict = Depends(get_clients),
    cache: TTLCache = Depends(get_cache),
):
    cache_key = "asset_volume"
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    data = await fetch_asset_volume(clients)
    cache.set(cache_key, data)
    return data


@router.get("/pairs/{exchange}")
async def pair_volume(
    exchange: str,
    clients: dict = Depends(get_clients),
    cache: TTLCache = Depends(get_cache),
):
    cache_key = f"pairs_{exchange.lower()}"
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    client = _client_for(exchange, clients)
    try:
        pairs = await client.get_per_pair_volume()
    except Exception as e:
        log.error(f"❌ Error fetching {exchange} pair volume: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    data = pairs.to_dict()
    cache.set(cache_key, data)
    return data
