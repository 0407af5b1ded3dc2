"""
Orderbook depth and spread.

Books are taken as delivered by the venue: bids best-first (descending),
asks best-first (ascending). The per-band scan stops at the first level
outside the band, so unsorted input is NOT corrected here.
"""
import re
from decimal import Decimal
from typing import Optional

from usdg_tracker.utils.constants import (
    ASSET_PREFIX_PATTERN,
    BPS,
    RISK_BPS_LEVELS,
    STABLECOIN_BPS_LEVELS,
    STABLECOINS,
)
from usdg_tracker.utils.types import DepthMetrics, DepthRow, OrderBook, PairInfo, to_decimal

STABLECOIN = "stablecoin"
RISK = "risk"


def _is_stable(symbol: str) -> bool:
    raw = (symbol or "").upper()
    stripped = re.sub(ASSET_PREFIX_PATTERN, "", symbol or "").upper()
    return raw in STABLECOINS or stripped in STABLECOINS


def classify_pair(base: str, quote: str) -> str:
    if _is_stable(base) or _is_stable(quote):
        return STABLECOIN
    return RISK


def bps_levels_for(pair_type: str) -> list[int]:
    if pair_type == STABLECOIN:
        return list(STABLECOIN_BPS_LEVELS)
    return list(RISK_BPS_LEVELS)


def calculate_depth_metrics(bids, asks, bps_levels) -> DepthMetrics:
    best_bid = to_decimal(bids[0][0])
    best_ask = to_decimal(asks[0][0])
    mid_price = (best_bid + best_ask) / 2
    spread_bps = (best_ask - best_bid) / mid_price * BPS

    bid_depth = {}
    ask_depth = {}
    for level in bps_levels:
        lower_bound = mid_price * (1 - Decimal(level) / BPS)
        bid_total = Decimal(0)
        for price, qty in bids:
            price = to_decimal(price)
            if price < lower_bound:
                break
            bid_total += price * to_decimal(qty)
        bid_depth[level] = bid_total

        upper_bound = mid_price * (1 + Decimal(level) / BPS)
        ask_total = Decimal(0)
        for price, qty in asks:
            price = to_decimal(price)
            if price > upper_bound:
                break
            ask_total += price * to_decimal(qty)
        ask_depth[level] = ask_total

    return DepthMetrics(mid_price, spread_bps, bid_depth, ask_depth)


def build_depth_row(exchange: str, exchange_display: str, pair: PairInfo, book: OrderBook) -> Optional[DepthRow]:
    """None when either side of the book is empty; such pairs are left out entirely."""
    if not book.bids or not book.asks:
        return None

    pair_type = classify_pair(pair.base, pair.quote)
    levels = bps_levels_for(pair_type)
    metrics = calculate_depth_metrics(book.bids, book.asks, levels)
    return DepthRow(
        exchange=exchange,
        exchange_display=exchange_display,
        pair=pair.display_name or pair.symbol,
        pair_type=pair_type,
        mid_price=metrics.mid_price,
        spread_bps=metrics.spread_bps,
        bps_levels=levels,
        bid_depth=metrics.bid_depth,
        ask_depth=metrics.ask_depth,
    )


def partition_rows(rows: list[DepthRow]) -> dict:
    return {
        STABLECOIN: [r for r in rows if r.pair_type == STABLECOIN],
        RISK: [r for r in rows if r.pair_type == RISK],
    }
