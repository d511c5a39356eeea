"""In-memory cache of fetched price lists, one entry per date."""

import time
from typing import Any

# Cache key for "every date"
ALL_DATES = "all"


class PriceListCache:
    """Expiring cache of product lists keyed by price-list date.

    Holds at most max_dates lists; the least recently read one is dropped
    first. The date list from the available-dates endpoint is cached alongside.
    Safe for single-threaded asyncio (no await between check and set).
    """

    def __init__(self, ttl: float, max_dates: int = 64):
        self._ttl = ttl
        self._max_dates = max_dates
        self._lists: dict[str, tuple[float, list[dict[str, Any]]]] = {}
        self._dates: tuple[float, list[str]] | None = None

    @staticmethod
    def _key(date: str | None) -> str:
        return date or ALL_DATES

    def _fresh(self, fetched_at: float) -> bool:
        return time.time() - fetched_at < self._ttl

    def get_products(self, date: str | None) -> list[dict[str, Any]] | None:
        """Cached products for a date, or None if missing/expired."""
        key = self._key(date)
        entry = self._lists.pop(key, None)
        if entry is None or not self._fresh(entry[0]):
            return None
        # Re-insert so dict order tracks recency
        self._lists[key] = entry
        return entry[1]

    def put_products(self, date: str | None, products: list[dict[str, Any]]) -> None:
        key = self._key(date)
        self._lists.pop(key, None)
        self._lists[key] = (time.time(), products)
        if len(self._lists) > self._max_dates:
            self._evict()

    def get_dates(self) -> list[str] | None:
        if self._dates is None or not self._fresh(self._dates[0]):
            return None
        return self._dates[1]

    def put_dates(self, dates: list[str]) -> None:
        self._dates = (time.time(), dates)

    def _evict(self) -> None:
        for key in [k for k, (ts, _) in self._lists.items() if not self._fresh(ts)]:
            del self._lists[key]
        while len(self._lists) > self._max_dates:
            del self._lists[next(iter(self._lists))]

    def __len__(self) -> int:
        return len(self._lists)
