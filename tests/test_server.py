"""Tests for the MCP server search helpers and middleware."""

from unittest.mock import MagicMock

import pytest

from pricelist_mcp.client import PriceListAPIError
from pricelist_mcp.server import (
    RateLimitMiddleware,
    _HealthFilterLog,
    dynamic_filters,
    search_price_list,
)


PRODUCTS = [
    {"model": "iPhone 15", "brand": "Apple", "category": "IPH", "color": "Preto", "storage": "128GB",
     "supplier": "Loja Centro"},
    {"model": "iPhone 15 Pro", "brand": "Apple", "category": "IPH", "color": "Natural", "storage": "256GB",
     "supplier": {"name": "Distribuidora Sul"}},
    {"model": "iPhone 15 Pro Max", "brand": "Apple", "category": "IPH", "color": "Natural", "storage": "256GB",
     "supplier": "Loja Centro"},
    {"model": "Galaxy S24", "brand": "Samsung", "category": "AND", "color": "Preto", "storage": "256GB",
     "supplier": "Loja Centro"},
]


class FakeSource:
    """In-memory price-list source recording requested dates."""

    def __init__(self, products=None, error: Exception | None = None, dates=None):
        self.products = products if products is not None else PRODUCTS
        self.error = error
        self.dates = dates if dates is not None else ["17-10"]
        self.requested_dates: list[str | None] = []

    async def get_products(self, date=None):
        self.requested_dates.append(date)
        if self.error:
            raise self.error
        return self.products

    async def get_available_dates(self):
        return self.dates

    async def close(self):
        pass


class TestSearchPriceList:
    @pytest.mark.asyncio
    async def test_exact_model_search(self):
        result = await search_price_list(FakeSource(), query="iphone 15 pro")
        assert [p["model"] for p in result["results"]] == ["iPhone 15 Pro"]
        assert result["total"] == 1
        assert result["parsed"]["type"] == "phone"
        assert result["detected_category"] == "IPH"

    @pytest.mark.asyncio
    async def test_filters_and_date(self):
        source = FakeSource()
        result = await search_price_list(
            source,
            query="loja",
            active_filters={"storage": "256gb", "brand": None, "date": "17-10"},
        )
        assert [p["model"] for p in result["results"]] == ["iPhone 15 Pro Max", "Galaxy S24"]
        assert result["filters_applied"] == {"storage": "256gb", "date": "17-10"}
        assert source.requested_dates == ["17-10"]

    @pytest.mark.asyncio
    async def test_limit_caps_results_not_total(self):
        result = await search_price_list(FakeSource(), query="apple", limit=1)
        assert len(result["results"]) == 1
        assert result["total"] == 3

    @pytest.mark.asyncio
    async def test_query_too_long(self):
        source = FakeSource()
        result = await search_price_list(source, query="x" * 201)
        assert "Query too long" in result["error"]
        assert source.requested_dates == []

    @pytest.mark.asyncio
    async def test_source_error(self):
        result = await search_price_list(FakeSource(error=PriceListAPIError("Price-list API returned HTTP 502")), query="x")
        assert result == {"error": "Price-list API returned HTTP 502", "results": [], "total": 0}

    @pytest.mark.asyncio
    async def test_unknown_filter(self):
        result = await search_price_list(FakeSource(), query="x", active_filters={"sku": "1"})
        assert "Unknown filter field" in result["error"]

    @pytest.mark.asyncio
    async def test_defaults_to_latest_date(self):
        source = FakeSource(dates=["16-10"])
        result = await search_price_list(source, query="iphone")
        assert source.requested_dates == ["16-10"]
        assert result["date"] == "16-10"
        assert result["filters_applied"] == {}

    @pytest.mark.asyncio
    async def test_all_dates_on_request(self):
        source = FakeSource(dates=["16-10"])
        result = await search_price_list(source, query="iphone", active_filters={"date": "all"})
        assert source.requested_dates == ["all"]
        assert result["total"] == 3

    @pytest.mark.asyncio
    async def test_no_dates_fetches_everything(self):
        source = FakeSource(dates=[])
        await search_price_list(source, query="iphone")
        assert source.requested_dates == [None]


class TestDynamicFilters:
    @pytest.mark.asyncio
    async def test_counts_sorted(self):
        result = await dynamic_filters(FakeSource(), query="iphone")
        assert result["totalProducts"] == 3
        assert result["searchTerm"] == "iphone"
        assert result["colors"] == [
            {"value": "Natural", "label": "Natural", "count": 2},
            {"value": "Preto", "label": "Preto", "count": 1},
        ]
        assert result["categories"] == [{"value": "IPH", "label": "IPH", "count": 3}]

    @pytest.mark.asyncio
    async def test_supplier_filter(self):
        result = await dynamic_filters(FakeSource(), active_filters={"supplier": "Distribuidora Sul"})
        assert result["totalProducts"] == 1
        assert result["searchTerm"] is None

    @pytest.mark.asyncio
    async def test_source_error(self):
        result = await dynamic_filters(FakeSource(error=PriceListAPIError("boom")))
        assert result == {"error": "boom"}

    @pytest.mark.asyncio
    async def test_default_date(self):
        source = FakeSource(dates=["16-10"])
        result = await dynamic_filters(source, query="galaxy")
        assert source.requested_dates == ["16-10"]
        assert result["date"] == "16-10"
        assert result["totalProducts"] == 1


class TestRateLimitMiddleware:
    def test_limit(self):
        middleware = RateLimitMiddleware(app=None, requests_per_minute=2)
        assert middleware._check_rate_limit("1.2.3.4", now=6000.0) is False
        assert middleware._check_rate_limit("1.2.3.4", now=6001.0) is False
        assert middleware._check_rate_limit("1.2.3.4", now=6002.0) is True
        assert middleware._check_rate_limit("5.6.7.8", now=6003.0) is False

    def test_new_window_resets_counts(self):
        middleware = RateLimitMiddleware(app=None, requests_per_minute=1)
        assert middleware._check_rate_limit("1.2.3.4", now=6000.0) is False
        assert middleware._check_rate_limit("1.2.3.4", now=6059.0) is True
        assert middleware._check_rate_limit("1.2.3.4", now=6060.0) is False
        assert middleware._counts == {"1.2.3.4": 1}

    def test_client_key(self):
        forwarded = MagicMock()
        forwarded.headers = {"x-forwarded-for": "10.0.0.1, 203.0.113.7"}
        direct = MagicMock()
        direct.headers = {}
        direct.client.host = "198.51.100.2"
        assert RateLimitMiddleware._client_key(forwarded) == "203.0.113.7"
        assert RateLimitMiddleware._client_key(direct) == "198.51.100.2"


class TestHealthFilterLog:
    def test_filters_health_lines(self):
        import logging

        log_filter = _HealthFilterLog()
        health = logging.LogRecord("uvicorn.access", logging.INFO, "", 0, '"GET /health HTTP/1.1" 200', None, None)
        other = logging.LogRecord("uvicorn.access", logging.INFO, "", 0, '"POST /mcp HTTP/1.1" 200', None, None)
        assert log_filter.filter(health) is False
        assert log_filter.filter(other) is True
