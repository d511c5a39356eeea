"""Search pipeline for price-list products."""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ..products import Product
from ..smart_parser import (
    ParsedIntent,
    describe_intent,
    detect_category_from_search,
    normalize_term,
    parse_query,
)
from .facets import Facets, aggregate_facets, facets_to_dict
from .filters import apply_active_filters
from .matcher import filter_by_intent

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    """Products matching a search plus the facets derived from them."""
    search_term: str | None
    intent: ParsedIntent
    products: list[Product] = field(default_factory=list)
    facets: Facets = field(default_factory=dict)
    detected_category: str | None = None

    @property
    def total(self) -> int:
        return len(self.products)

    def to_dict(self, limit: int | None = None) -> dict[str, Any]:
        """Serialize for tool output. limit caps the product list only."""
        results = self.products if limit is None else self.products[:limit]
        return {
            "results": results,
            "total": self.total,
            "facets": facets_to_dict(self.facets),
            "parsed": describe_intent(self.intent),
            "detected_category": self.detected_category,
        }


def search_products(
    search_term: str | None,
    products: Iterable[Product],
    active_filters: Mapping[str, str | None] | None = None,
    sort_facets: bool = True,
) -> SearchResult:
    """Run a search over a price list.

    Steps: normalize and parse the term, keep matching products, apply the
    caller's active filters (AND), then count facets over what is left.

    Args:
        search_term: Free-text search, empty for "everything"
        products: Candidate products (a list, possibly empty)
        active_filters: Field -> selected value, see apply_active_filters()
        sort_facets: Most common facet values first

    Returns:
        SearchResult
    """
    normalized = normalize_term(search_term)
    intent = parse_query(search_term)
    matched = filter_by_intent(products, intent)

    filtered = apply_active_filters(matched, active_filters)
    result = SearchResult(
        search_term=search_term,
        intent=intent,
        products=filtered,
        facets=aggregate_facets(filtered, sort_by_count=sort_facets),
        detected_category=detect_category_from_search(normalized),
    )

    logger.debug(
        f"Search {normalized or 'all'!r}: {len(matched)} matched, "
        f"{result.total} after filters {dict(active_filters or {})}"
    )
    if normalized and result.total == 0:
        logger.debug(f"No products found for search term {search_term!r}")

    return result
