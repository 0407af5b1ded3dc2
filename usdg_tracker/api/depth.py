from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from usdg_tracker.api.deps import get_cache, get_clients
from usdg_tracker.metrics.depth import RISK, STABLECOIN, partition_rows
from usdg_tracker.sources.exchanges.registry import depth_clients
from usdg_tracker.sources.orchestrator import collect_depth_rows
from usdg_tracker.storage.cache import TTLCache
from usdg_tracker.utils.types import format_timestamp

router = APIRouter()


@router.get("")
async def depth_table(
    clients: dict = Depends(get_clients),
    cache: TTLCache = Depends(get_cache),
):
    cache_key = "depth_all"
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    rows = await collect_depth_rows(depth_clients(clients))
    groups = partition_rows(rows)
    data = {
        "timestamp": format_timestamp(datetime.now(timezone.utc)),
        "rows": [r.to_dict() for r in rows],
        STABLECOIN: [r.to_dict() for r in groups[STABLECOIN]],
        RISK: [r.to_dict() for r in groups[RISK]],
    }
    cache.set(cache_key, data)
    return data
