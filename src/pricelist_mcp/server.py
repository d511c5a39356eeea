"""Price-list MCP Server - Search reseller electronics price lists."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Protocol

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from . import __version__
from .client import FilePriceListSource, PriceListAPIError, PriceListClient
from .config import (
    DEFAULT_RESULT_LIMIT,
    HTTP_PORT,
    MAX_QUERY_LENGTH,
    MAX_RESULT_LIMIT,
    PRICELIST_API_URL,
    PRICELIST_FILE,
    RATE_LIMIT_REQUESTS,
)
from .search import facets_to_dict, pick_default_date, search_products as run_search
from .smart_parser import describe_intent, detect_category_from_search, normalize_term, parse_search_term

logger = logging.getLogger(__name__)


class PriceListSource(Protocol):
    async def get_products(self, date: str | None = None) -> list[dict[str, Any]]: ...
    async def get_available_dates(self) -> list[str]: ...
    async def close(self) -> None: ...


# Global state
_source: PriceListSource | None = None


def create_source() -> PriceListSource | None:
    """Pick the configured price-list source: local snapshot first, then the API."""
    if PRICELIST_FILE:
        return FilePriceListSource(PRICELIST_FILE)
    if PRICELIST_API_URL:
        return PriceListClient()
    return None


@asynccontextmanager
async def lifespan(app):
    """Open the price-list source on startup and close it on shutdown."""
    global _source
    _source = create_source()
    if _source is None:
        logger.warning("No price-list source configured (set PRICELIST_API_URL or PRICELIST_FILE)")
    else:
        logger.info(f"Price-list source ready: {type(_source).__name__}")

    yield

    if _source:
        await _source.close()
        _source = None


# Create MCP server
mcp = FastMCP(
    name="pricelist",
    instructions="Search electronics reseller price lists. Use search_products for product lookups; searches like 'iphone 15 pro' match that exact model only (not Pro Max). Use get_dynamic_filters to see which categories, brands, colors, storages and regions exist for a search.",
    lifespan=lifespan,
)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-client request cap over fixed one-minute windows.

    All counters reset when a new window starts, so memory only grows with
    the clients seen in the current minute.
    """

    WINDOW_SECONDS = 60

    def __init__(self, app, requests_per_minute: int = RATE_LIMIT_REQUESTS):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self._window = -1
        self._counts: dict[str, int] = {}

    @staticmethod
    def _client_key(request) -> str:
        """Client IP, preferring the rightmost X-Forwarded-For entry."""
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[-1].strip() or "unknown"
        return request.client.host if request.client else "unknown"

    def _check_rate_limit(self, client: str, now: float) -> bool:
        """Count one request. True when the client is over its limit."""
        window = int(now // self.WINDOW_SECONDS)
        if window != self._window:
            self._window = window
            self._counts.clear()

        count = self._counts.get(client, 0)
        if count >= self.requests_per_minute:
            return True
        self._counts[client] = count + 1
        return False

    async def dispatch(self, request, call_next):
        if request.url.path == "/health":
            return await call_next(request)

        now = time.time()
        client = self._client_key(request)
        if self._check_rate_limit(client, now):
            retry_after = int(self.WINDOW_SECONDS - now % self.WINDOW_SECONDS) + 1
            logger.warning(f"Rate limit exceeded for {client}")
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded", "retry_after": retry_after},
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)


def _require_source() -> PriceListSource:
    if not _source:
        raise RuntimeError("Price-list source not initialized")
    return _source


def _validate_query(query: str | None) -> dict | None:
    if query and len(query) > MAX_QUERY_LENGTH:
        return {"error": f"Query too long (max {MAX_QUERY_LENGTH} characters)", "results": [], "total": 0}
    return None


async def _resolve_date(source: PriceListSource, date: str | None) -> str | None:
    """The selected date, else today's list or the most recent one.

    "all" is passed through and means every date.
    """
    if date:
        return date
    return pick_default_date(await source.get_available_dates())


async def search_price_list(
    source: PriceListSource,
    query: str | None = None,
    active_filters: dict[str, str | None] | None = None,
    limit: int = DEFAULT_RESULT_LIMIT,
) -> dict:
    """Fetch the price list for the selected date and run a search over it.

    Tool implementations delegate here so the logic can be exercised without
    an MCP transport.
    """
    invalid = _validate_query(query)
    if invalid:
        return invalid

    active_filters = {k: v for k, v in (active_filters or {}).items() if v}
    effective_limit = max(1, min(limit, MAX_RESULT_LIMIT))
    # The source already selects the date, products may not carry it
    search_filters = {k: v for k, v in active_filters.items() if k != "date"}

    try:
        date = await _resolve_date(source, active_filters.get("date"))
        products = await source.get_products(date=date)
    except PriceListAPIError as e:
        logger.error(f"Price-list fetch failed: {e}")
        return {"error": str(e), "results": [], "total": 0}

    try:
        result = run_search(query, products, search_filters)
    except ValueError as e:
        return {"error": str(e), "results": [], "total": 0}

    output = result.to_dict(limit=effective_limit)
    output["filters_applied"] = active_filters
    output["date"] = date
    return output


async def dynamic_filters(
    source: PriceListSource,
    query: str | None = None,
    active_filters: dict[str, str | None] | None = None,
) -> dict:
    """Facets (most common first) for a search, for populating dropdowns."""
    invalid = _validate_query(query)
    if invalid:
        return {"error": invalid["error"]}

    active_filters = {k: v for k, v in (active_filters or {}).items() if v}
    search_filters = {k: v for k, v in active_filters.items() if k != "date"}
    try:
        date = await _resolve_date(source, active_filters.get("date"))
        products = await source.get_products(date=date)
        result = run_search(query, products, search_filters, sort_facets=True)
    except PriceListAPIError as e:
        logger.error(f"Price-list fetch failed: {e}")
        return {"error": str(e)}
    except ValueError as e:
        return {"error": str(e)}

    return {
        **facets_to_dict(result.facets),
        "totalProducts": result.total,
        "searchTerm": query or None,
        "date": date,
    }


# Tools

@mcp.tool(
    annotations=ToolAnnotations(
        title="Search Price Lists",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def search_products(
    query: str | None = None,
    category: str | None = None,
    brand: str | None = None,
    color: str | None = None,
    storage: str | None = None,
    region: str | None = None,
    supplier: str | None = None,
    date: str | None = None,
    limit: int = DEFAULT_RESULT_LIMIT,
) -> dict:
    """Search reseller price lists.

    Phone model searches are exact: "iphone 15" never returns the 15 Pro or
    15 Pro Max, "iphone 15 pro" never returns the 15 Pro Max. Any other query
    is a substring search over model, brand, category, supplier, color and
    storage.

    Args:
        query: Search text (e.g., "iphone 15 pro", "galaxy", "256GB")
        category: Category code filter (e.g., "IPH", "MCB", "IPAD")
        brand: Brand filter
        color: Color filter
        storage: Storage/capacity filter (e.g., "256GB")
        region: Region filter
        supplier: Supplier name filter
        date: Price-list date "DD-MM" or "all" (default: today's list, else the most recent)
        limit: Max results (default 50, max 500)

    Returns:
        results: Matching products
        total: Total count (before limit)
        facets: Value counts per filter dimension over the results
        parsed: What was detected in the query
        detected_category: Category the query seems to be about
        date: Price-list date that was searched
    """
    return await search_price_list(
        _require_source(),
        query=query,
        active_filters={
            "category": category,
            "brand": brand,
            "color": color,
            "storage": storage,
            "region": region,
            "supplier": supplier,
            "date": date,
        },
        limit=limit,
    )


@mcp.tool(
    annotations=ToolAnnotations(
        title="Dynamic Filters",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def get_dynamic_filters(
    query: str | None = None,
    date: str | None = None,
    category: str | None = None,
    supplier: str | None = None,
) -> dict:
    """Available filter values for a search, most common first.

    Args:
        query: Search text
        date: Price-list date "DD-MM" or "all" (default: today's list, else the most recent)
        category: Category code filter
        supplier: Supplier name filter

    Returns:
        categories, brands, colors, storages, regions: [{value, label, count}]
        totalProducts: Number of products the counts were taken from
    """
    return await dynamic_filters(
        _require_source(),
        query=query,
        active_filters={"date": date, "category": category, "supplier": supplier},
    )


@mcp.tool(
    annotations=ToolAnnotations(
        title="Available Price-List Dates",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def list_available_dates() -> dict:
    """Price-list dates ("DD-MM", most recent first) and the default one to use."""
    source = _require_source()
    try:
        dates = await source.get_available_dates()
    except PriceListAPIError as e:
        logger.error(f"Available dates fetch failed: {e}")
        return {"error": str(e)}
    return {"dates": dates, "default": pick_default_date(dates)}


@mcp.tool(
    annotations=ToolAnnotations(
        title="Explain Search",
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def parse_search(query: str) -> dict:
    """Show how a search term is interpreted, without searching."""
    invalid = _validate_query(query)
    if invalid:
        return {"error": invalid["error"]}
    normalized = normalize_term(query)
    return {
        "original_query": query,
        "normalized": normalized,
        "parsed": describe_intent(parse_search_term(normalized)),
        "detected_category": detect_category_from_search(normalized),
    }


# Health check endpoint
async def health(request):
    return JSONResponse({
        "status": "healthy",
        "service": "pricelist-mcp",
        "version": __version__,
    })


def create_app():
    """Create the ASGI application."""
    middleware = [
        Middleware(RateLimitMiddleware, requests_per_minute=RATE_LIMIT_REQUESTS),
    ]

    app = mcp.http_app(
        path="/mcp",
        middleware=middleware,
        transport="streamable-http",
        stateless_http=True,
    )
    app.routes.append(Route("/health", health))
    return app


app = create_app()


class _HealthFilterLog(logging.Filter):
    """Suppress noisy /health access logs from container healthchecks."""

    def filter(self, record: logging.LogRecord) -> bool:
        return "/health" not in record.getMessage()


def main():
    """Run the server."""
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("uvicorn.access").addFilter(_HealthFilterLog())

    uvicorn.run(
        "pricelist_mcp.server:app",
        host="0.0.0.0",
        port=HTTP_PORT,
        lifespan="on",
    )


if __name__ == "__main__":
    main()
