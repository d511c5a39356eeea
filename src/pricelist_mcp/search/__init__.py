"""Search package for price-list products.

This package provides the matcher, facet aggregation, the active filter step
and the pipeline that strings them together.
"""

from .engine import SearchResult, search_products
from .facets import FACET_FIELDS, FacetOption, Facets, aggregate_facets, facets_to_dict
from .filters import ALL_VALUES, FILTER_FIELDS, apply_active_filters, pick_default_date
from .matcher import KEYWORD_FIELDS, filter_by_intent, filter_products, matches, matches_keyword, matches_phone

__all__ = [
    "search_products",
    "SearchResult",
    "matches",
    "matches_phone",
    "matches_keyword",
    "filter_products",
    "filter_by_intent",
    "KEYWORD_FIELDS",
    "aggregate_facets",
    "facets_to_dict",
    "FacetOption",
    "Facets",
    "FACET_FIELDS",
    "apply_active_filters",
    "pick_default_date",
    "FILTER_FIELDS",
    "ALL_VALUES",
]
