"""Facet aggregation for filter dropdowns."""

from collections import Counter
from dataclasses import asdict, dataclass
from typing import Any, Callable, Iterable

from ..products import Product, field_text, product_storage


@dataclass(frozen=True)
class FacetOption:
    """One selectable value of a facet, with its product count."""
    value: str
    label: str
    count: int


Facets = dict[str, list[FacetOption]]

# Facet name -> value accessor
FACET_FIELDS: dict[str, Callable[[Product], str]] = {
    "categories": lambda p: field_text(p, "category"),
    "brands": lambda p: field_text(p, "brand"),
    "colors": lambda p: field_text(p, "color"),
    "storages": product_storage,
    "regions": lambda p: field_text(p, "region"),
}


def aggregate_facets(products: Iterable[Product], sort_by_count: bool = False) -> Facets:
    """Count distinct values per facet over a product set.

    Blank values are skipped. Options come out in first-seen order, or by
    descending count when sort_by_count is set (ties keep first-seen order),
    so identical input always gives identical output.

    Args:
        products: Products to count, usually already filtered by the search
        sort_by_count: Most common values first

    Returns:
        Dict of facet name -> list of FacetOption
    """
    counters: dict[str, Counter[str]] = {name: Counter() for name in FACET_FIELDS}

    for product in products:
        for name, accessor in FACET_FIELDS.items():
            value = accessor(product)
            if value.strip():
                counters[name][value] += 1

    facets: Facets = {}
    for name, counter in counters.items():
        options = [FacetOption(value=value, label=value, count=count) for value, count in counter.items()]
        if sort_by_count:
            options.sort(key=lambda option: option.count, reverse=True)
        facets[name] = options
    return facets


def facets_to_dict(facets: Facets) -> dict[str, list[dict[str, Any]]]:
    """Convert facets to plain dicts for JSON output."""
    return {name: [asdict(option) for option in options] for name, options in facets.items()}
