from fastapi import Request

from usdg_tracker.storage.cache import TTLCache
from usdg_tracker.storage.history_log import HistoryLog


def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache


def get_clients(request: Request) -> dict:
    return request.app.state.clients


def get_history_log(request: Request) -> HistoryLog:
    return request.app.state.history_log
