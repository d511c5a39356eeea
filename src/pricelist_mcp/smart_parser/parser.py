"""Intent parser for price-list search terms.

Recognizes the phone model grammar:

    iphone <digits><letters*> [pro] [max | plus | mini]

and turns it into a PhoneIntent. Any other term falls back to a
KeywordIntent that is matched as a plain substring.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Any, Literal

from .normalizer import normalize_term


SizeQualifier = Literal["max", "plus", "mini"]
SIZE_QUALIFIERS: tuple[str, ...] = ("max", "plus", "mini")

FAMILY_TOKEN = "iphone"

# Family token, optional space, model number and any letters glued to it
_FAMILY_HEAD_RE = re.compile(r"iphone\s*(\d+)([a-z]*)(?=\s|$)")


@dataclass(frozen=True)
class PhoneIntent:
    """A structured phone model query such as "iphone 15 pro max"."""
    number: str  # Raw digits, never converted to int
    variant: str = ""  # Letters glued to the number ("e" in "16e")
    is_pro: bool = False
    size: SizeQualifier | None = None

    @property
    def model_token(self) -> str:
        return f"{self.number}{self.variant}"

    def tokens(self) -> list[str]:
        """Tokens a matching model must start with, in order."""
        tokens = [FAMILY_TOKEN, self.model_token]
        if self.is_pro:
            tokens.append("pro")
        if self.size:
            tokens.append(self.size)
        return tokens


@dataclass(frozen=True)
class KeywordIntent:
    """Unstructured fallback: substring search over product fields."""
    term: str  # Normalized
    raw: str = field(default="", compare=False)  # Lowercased query as typed


ParsedIntent = PhoneIntent | KeywordIntent


def parse_search_term(normalized_term: str) -> ParsedIntent:
    """Parse a normalized search term into an intent.

    Never fails: partial or malformed phone queries ("iphone pro",
    "iphone 15 max pro") are simply keyword searches.

    Args:
        normalized_term: Output of normalize_term()

    Returns:
        PhoneIntent when the whole term is a phone model, else KeywordIntent
    """
    term = normalized_term.strip()
    match = _FAMILY_HEAD_RE.match(term)
    if not match:
        return KeywordIntent(term)

    rest = term[match.end():].split()
    is_pro = False
    size = None
    if rest and rest[0] == "pro":
        is_pro = True
        rest = rest[1:]
    if rest and rest[0] in SIZE_QUALIFIERS:
        size = rest[0]
        rest = rest[1:]
    if rest:
        # Trailing words ("iphone 15 case") make this a keyword search
        return KeywordIntent(term)

    return PhoneIntent(
        number=match.group(1),
        variant=match.group(2),
        is_pro=is_pro,
        size=size,
    )


def parse_query(raw: str | None) -> ParsedIntent:
    """Normalize and parse a raw search term.

    Keyword intents also keep the lowercased query as typed, so partial
    input like "15p" still finds "iPhone 15Pro".
    """
    intent = parse_search_term(normalize_term(raw))
    if isinstance(intent, KeywordIntent):
        return replace(intent, raw=(raw or "").strip().lower())
    return intent


def describe_intent(intent: ParsedIntent) -> dict[str, Any]:
    """JSON-friendly description of what was detected in the query."""
    if isinstance(intent, PhoneIntent):
        return {
            "type": "phone",
            "family": FAMILY_TOKEN,
            "number": intent.number,
            "variant": intent.variant,
            "pro": intent.is_pro,
            "size": intent.size,
            "model": " ".join(intent.tokens()),
        }
    return {"type": "keyword", "term": intent.term}
