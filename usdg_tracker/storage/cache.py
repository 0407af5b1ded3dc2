import time

import cachetools

MAX_ENTRIES = 256


class TTLCache:
    """
    Process-wide read-through memo with a fixed time-to-live.

    A miss never waits on another in-flight fetch for the same key.
    """

    def __init__(self, ttl_seconds: float, clock=time.monotonic, maxsize: int = MAX_ENTRIES):
        self.ttl_seconds = ttl_seconds
        self._entries = cachetools.TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=clock)

    def get(self, key: str):
        return self._entries.get(key)

    def set(self, key: str, value):
        self._entries[key] = value

    def clear(self):
        self._entries.clear()
