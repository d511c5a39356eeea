"""Product matching for parsed search intents."""

import logging
from typing import Iterable

from ..config import PHONE_CATEGORY
from ..products import Product, field_text, supplier_name
from ..smart_parser import (
    FAMILY_TOKEN,
    QUALIFIER_TOKENS,
    KeywordIntent,
    ParsedIntent,
    PhoneIntent,
    normalize_term,
    parse_query,
)

logger = logging.getLogger(__name__)


# Fields searched by keyword intents. Region is facet-only.
KEYWORD_FIELDS = ("model", "brand", "category", "supplier", "color", "storage", "capacity")


def _excluded_followers(intent: PhoneIntent) -> tuple[str, ...]:
    """Qualifiers that may not follow the requested tokens.

    A less specific query never matches a more specific sibling: "iphone 15"
    excludes Pro/Max/Plus/Mini, "iphone 15 pro" excludes Pro Max/Pro Plus.
    A size qualifier is already the most specific token.
    """
    if intent.size:
        return ()
    if intent.is_pro:
        return ("max", "plus")
    return QUALIFIER_TOKENS


def matches_phone(product: Product, intent: PhoneIntent) -> bool:
    """Exact phone model match with sibling exclusion."""
    model = normalize_term(field_text(product, "model"))

    # Category gate: accessories named "... 15 ..." never match a phone query
    if product.get("category") != PHONE_CATEGORY and FAMILY_TOKEN not in model:
        return False

    model_tokens = model.split()
    expected = intent.tokens()
    if model_tokens[:len(expected)] != expected:
        return False

    if len(model_tokens) > len(expected):
        following = model_tokens[len(expected)]
        excluded = _excluded_followers(intent)
        if excluded and following.startswith(excluded):
            return False

    return True


def _keyword_field_values(product: Product) -> list[str]:
    return [
        supplier_name(product) if field == "supplier" else field_text(product, field)
        for field in KEYWORD_FIELDS
    ]


def matches_keyword(product: Product, intent: KeywordIntent) -> bool:
    """Substring match of the term against any searchable field.

    A field matches when the query as typed is a substring of the lowercased
    field, or the normalized query is a substring of the normalized field
    ("usb-c" finds "USB C").
    """
    if not intent.term:
        return True
    raw = intent.raw or intent.term
    return any(
        raw in value.lower() or intent.term in normalize_term(value)
        for value in _keyword_field_values(product)
        if value
    )


def matches(product: Product, intent: ParsedIntent) -> bool:
    """Decide whether a product matches a parsed search intent.

    Args:
        product: Price-list product dict
        intent: Output of parse_search_term()

    Returns:
        True if the product belongs in the search results
    """
    if isinstance(intent, PhoneIntent):
        return matches_phone(product, intent)
    return matches_keyword(product, intent)


def filter_by_intent(products: Iterable[Product], intent: ParsedIntent) -> list[Product]:
    """Keep products matching an already parsed intent, in input order."""
    if isinstance(intent, KeywordIntent) and not intent.term:
        return list(products)
    return [product for product in products if matches(product, intent)]


def filter_products(products: Iterable[Product], search_term: str | None) -> list[Product]:
    """Filter products by a raw search term, keeping input order.

    An empty search term keeps every product.
    """
    intent = parse_query(search_term)
    matched = filter_by_intent(products, intent)
    logger.debug(f"Search {search_term!r} -> {type(intent).__name__}, {len(matched)} matches")
    return matched
