"""Category detection from free-text search terms.

Maps what resellers type ("iphone", "macbook", "relógio", "capa") to the
category codes used in the price lists. Detection is informational: the
search pipeline reports it but never filters on it.
"""

from .normalizer import normalize_term


# Category code -> keywords. Portuguese keywords come from the reseller sheets.
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "IPH": ("iphone", "iph", "ip"),
    "MCB": ("macbook", "mac", "mcb", "book"),
    "IPAD": ("ipad", "pad", "tablet"),
    "RLG": ("apple watch", "watch", "relógio", "relogio", "rlg"),
    "PODS": ("airpods", "pods", "fone", "earbuds"),
    "ACSS": ("carregador", "cabo", "acessório", "acessorio", "case", "capa", "acss"),
}

# Longest keywords first so "apple watch" wins over "watch" and "ipad" over "ip"
_KEYWORDS_BY_LENGTH: list[tuple[str, str]] = sorted(
    ((keyword, code) for code, keywords in CATEGORY_KEYWORDS.items() for keyword in keywords),
    key=lambda item: len(item[0]),
    reverse=True,
)


def detect_category_from_search(term: str | None) -> str | None:
    """Detect the category code a search term is about.

    Keywords must match whole tokens, so "ipad" is never read as "ip".

    Args:
        term: Raw or normalized search term

    Returns:
        Category code (e.g. "IPH") or None
    """
    normalized = normalize_term(term)
    if len(normalized) < 2:
        return None

    padded = f" {normalized} "
    for keyword, code in _KEYWORDS_BY_LENGTH:
        if f" {keyword} " in padded:
            return code
    return None
