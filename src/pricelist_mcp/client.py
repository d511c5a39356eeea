"""Async client for the price-list dashboard REST API."""

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from .cache import ALL_DATES, PriceListCache
from .config import (
    AVAILABLE_DATES_PATH,
    PRICELIST_API_TOKEN,
    PRICELIST_API_URL,
    PRICELIST_CACHE_MAX_DATES,
    PRICELIST_CACHE_TTL,
    PRODUCTS_PATH,
    REQUEST_TIMEOUT,
)

logger = logging.getLogger(__name__)


class PriceListAPIError(Exception):
    """The dashboard API could not be reached or returned something unusable."""


def _extract_products(data: Any, source: str) -> list[dict[str, Any]]:
    """Accept a bare product list or a {"products": [...]} envelope."""
    if isinstance(data, dict):
        data = data.get("products")
    if not isinstance(data, list):
        raise PriceListAPIError(f"Unexpected price-list payload from {source}")

    products = [p for p in data if isinstance(p, dict)]
    skipped = len(data) - len(products)
    if skipped:
        logger.warning(f"Skipped {skipped} malformed product records from {source}")
    return products


def load_products_file(path: str | Path) -> list[dict[str, Any]]:
    """Load a price-list snapshot from a local JSON file.

    Raises:
        PriceListAPIError: If the file is missing or not a price list
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise PriceListAPIError(f"Failed to read price list {path.name}: {type(e).__name__}")
    return _extract_products(data, path.name)


class PriceListClient:
    """Async client for the dashboard's product endpoints."""

    def __init__(
        self,
        base_url: str = PRICELIST_API_URL,
        token: str = PRICELIST_API_TOKEN,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._cache = PriceListCache(ttl=PRICELIST_CACHE_TTL, max_dates=PRICELIST_CACHE_MAX_DATES)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self._token:
                headers["Authorization"] = f"Bearer {self._token}"
            self._client = httpx.AsyncClient(timeout=self._timeout, headers=headers)
        return self._client

    async def _get(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = await self._get_client().get(url, params=params)
        except httpx.HTTPError as e:
            # Don't echo request details, the auth header travels with them
            raise PriceListAPIError(f"Price-list API request failed ({type(e).__name__})")
        if response.status_code >= 400:
            raise PriceListAPIError(f"Price-list API returned HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError:
            raise PriceListAPIError("Price-list API returned invalid JSON")

    async def get_products(self, date: str | None = None) -> list[dict[str, Any]]:
        """Fetch the products of one price-list date ("DD-MM"), or all dates.

        Returns:
            List of product dicts

        Raises:
            PriceListAPIError: On network, HTTP or payload errors
        """
        cached = self._cache.get_products(date)
        if cached is not None:
            return cached

        params = {"date": date} if date and date != ALL_DATES else None
        data = await self._get(PRODUCTS_PATH, params=params)
        products = _extract_products(data, PRODUCTS_PATH)
        logger.info(f"Fetched {len(products)} products for date {date or 'all'}")

        self._cache.put_products(date, products)
        return products

    async def get_available_dates(self) -> list[str]:
        """Fetch the price-list dates, most recent first."""
        cached = self._cache.get_dates()
        if cached is not None:
            return cached

        data = await self._get(AVAILABLE_DATES_PATH)
        dates = data.get("availableDates") if isinstance(data, dict) else data
        if not isinstance(dates, list):
            raise PriceListAPIError(f"Unexpected payload from {AVAILABLE_DATES_PATH}")
        dates = [str(d) for d in dates]

        self._cache.put_dates(dates)
        return dates

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


class FilePriceListSource:
    """Serves a local JSON snapshot through the same interface as PriceListClient."""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._products: list[dict[str, Any]] | None = None

    def _load(self) -> list[dict[str, Any]]:
        if self._products is None:
            self._products = load_products_file(self._path)
            logger.info(f"Loaded {len(self._products)} products from {self._path.name}")
        return self._products

    async def get_products(self, date: str | None = None) -> list[dict[str, Any]]:
        products = self._load()
        if not date or date == ALL_DATES:
            return products
        return [p for p in products if p.get("date") == date]

    async def get_available_dates(self) -> list[str]:
        # Snapshot order is kept, most recent lists are expected first
        seen: dict[str, None] = {}
        for product in self._load():
            if product.get("date"):
                seen.setdefault(str(product["date"]), None)
        return list(seen)

    async def close(self) -> None:
        self._products = None
