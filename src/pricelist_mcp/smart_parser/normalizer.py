"""Search term normalization.

The same normalization is applied to search terms and to product model
strings, so "iPhone15ProMax", "iphone 15 pro-max" and "  IPHONE 15 PRO MAX "
all end up as "iphone 15 pro max".
"""

import re


# Tier/size qualifiers that resellers glue onto model numbers ("15promax")
QUALIFIER_TOKENS = ("pro", "max", "plus", "mini")

_NON_WORD_RE = re.compile(r"[\W_]+")
_GLUED_FAMILY_RE = re.compile(r"\b(iphone)(?=\d)")
_TRAILING_QUALIFIER_RE = re.compile(r"(pro|max|plus|mini)$")
# Model number with any glued suffix letters: 15, 16e, 15pro
_MODEL_NUMBER_RE = re.compile(r"\d+[a-z]*")


def _split_qualifiers(token: str) -> str:
    """Peel glued qualifiers off a digit-led token: "15promax" -> "15 pro max"."""
    if token == "promax":
        return "pro max"
    if not token[0].isdigit():
        return token

    peeled: list[str] = []
    while True:
        match = _TRAILING_QUALIFIER_RE.search(token)
        if not match or match.start() == 0:
            break
        head = token[:match.start()]
        if not _MODEL_NUMBER_RE.fullmatch(head):
            break
        peeled.insert(0, match.group(1))
        token = head

    return " ".join([token, *peeled])


def normalize_term(raw: str | None) -> str:
    """Normalize a search term or model string for matching.

    Lowercases, turns every run of punctuation into a single space, collapses
    whitespace and splits glued family/qualifier tokens.

    Args:
        raw: Free text, may be None

    Returns:
        Normalized text, "" for empty input
    """
    if not raw:
        return ""

    text = _NON_WORD_RE.sub(" ", raw.lower()).strip()
    if not text:
        return ""

    text = _GLUED_FAMILY_RE.sub(r"\1 ", text)
    return " ".join(_split_qualifiers(token) for token in text.split())
