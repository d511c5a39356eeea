"""Smart parser package for price-list search terms.

This package turns free-text searches into structured intents:
- "iPhone 15" -> PhoneIntent(number="15")
- "iphone15promax" -> PhoneIntent(number="15", is_pro=True, size="max")
- "iphone 16e" -> PhoneIntent(number="16", variant="e")
- "galaxy s24" -> KeywordIntent(term="galaxy s24")

Key features:
1. Normalization shared by search terms and product model strings
2. Anchored phone model grammar with a keyword fallback
3. Category detection from search keywords (informational)
"""

from .normalizer import QUALIFIER_TOKENS, normalize_term
from .parser import (
    FAMILY_TOKEN,
    SIZE_QUALIFIERS,
    KeywordIntent,
    ParsedIntent,
    PhoneIntent,
    describe_intent,
    parse_query,
    parse_search_term,
)
from .categories import CATEGORY_KEYWORDS, detect_category_from_search

__all__ = [
    # Main API
    "normalize_term",
    "parse_search_term",
    "parse_query",
    "describe_intent",
    "detect_category_from_search",
    # Data classes
    "PhoneIntent",
    "KeywordIntent",
    "ParsedIntent",
    # Constants
    "FAMILY_TOKEN",
    "QUALIFIER_TOKENS",
    "SIZE_QUALIFIERS",
    "CATEGORY_KEYWORDS",
]
