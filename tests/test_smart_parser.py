"""Tests for search term normalization, intent parsing and category detection."""

import pytest

from pricelist_mcp.smart_parser import (
    KeywordIntent,
    PhoneIntent,
    describe_intent,
    detect_category_from_search,
    normalize_term,
    parse_query,
    parse_search_term,
)


class TestNormalizeTerm:
    """Tests for normalize_term function."""

    @pytest.mark.parametrize("raw,expected", [
        ("IPHONE 15 PRO", "iphone 15 pro"),
        ("  iphone   15   pro  ", "iphone 15 pro"),
        ("iPhone 15 Pro-Max", "iphone 15 pro max"),
        ("iPhone (15) / Pro", "iphone 15 pro"),
        ("Apple_Watch Series", "apple watch series"),
        ("Galaxy S24 Ultra", "galaxy s24 ultra"),
        ("256GB", "256gb"),
    ])
    def test_case_punctuation_and_spacing(self, raw, expected):
        assert normalize_term(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("iPhone15", "iphone 15"),
        ("iPhone15Pro", "iphone 15 pro"),
        ("iphone15promax", "iphone 15 pro max"),
        ("iphone 12promax", "iphone 12 pro max"),
        ("iphone 13mini", "iphone 13 mini"),
        ("iphone 15plus", "iphone 15 plus"),
        ("iphone 15 promax", "iphone 15 pro max"),
    ])
    def test_glued_tokens_are_split(self, raw, expected):
        assert normalize_term(raw) == expected

    def test_model_suffix_letters_stay_attached(self):
        """Suffix letters that aren't qualifiers are part of the model number."""
        assert normalize_term("iPhone 16e") == "iphone 16e"
        assert normalize_term("iphone16e") == "iphone 16e"

    def test_non_phone_words_untouched(self):
        """Qualifier splitting only applies to digit-led tokens."""
        assert normalize_term("Airpods Pro") == "airpods pro"
        assert normalize_term("supermax") == "supermax"

    @pytest.mark.parametrize("raw", [None, "", "   ", "!!!", "-- / --"])
    def test_empty_input(self, raw):
        assert normalize_term(raw) == ""

    def test_idempotent(self):
        once = normalize_term("iPhone15ProMax 256GB (Azul)")
        assert normalize_term(once) == once


class TestParseSearchTerm:
    """Tests for the phone model grammar."""

    @pytest.mark.parametrize("term,expected", [
        ("iphone 15", PhoneIntent(number="15")),
        ("iphone15", PhoneIntent(number="15")),
        ("iphone 15 pro", PhoneIntent(number="15", is_pro=True)),
        ("iphone 15 pro max", PhoneIntent(number="15", is_pro=True, size="max")),
        ("iphone 14 plus", PhoneIntent(number="14", size="plus")),
        ("iphone 13 mini", PhoneIntent(number="13", size="mini")),
        ("iphone 11 max", PhoneIntent(number="11", size="max")),
        ("iphone 16e", PhoneIntent(number="16", variant="e")),
        ("iphone 3gs", PhoneIntent(number="3", variant="gs")),
    ])
    def test_phone_intents(self, term, expected):
        assert parse_search_term(term) == expected

    def test_number_kept_as_text(self):
        intent = parse_search_term("iphone 015")
        assert isinstance(intent, PhoneIntent)
        assert intent.number == "015"

    @pytest.mark.parametrize("term", [
        "iphone",
        "iphone pro",
        "iphone 15 case",
        "iphone 15 max pro",
        "iphone 15 pro max 256gb",
        "apple iphone 15",
        "galaxy s24",
        "capa",
    ])
    def test_keyword_fallback(self, term):
        assert parse_search_term(term) == KeywordIntent(term)

    def test_empty_term_is_empty_keyword(self):
        assert parse_search_term("") == KeywordIntent("")
        assert parse_query(None) == KeywordIntent("")

    def test_spelling_variants_parse_identically(self):
        """Case, spacing and glued forms all give the same intent."""
        expected = PhoneIntent(number="15", is_pro=True)
        assert parse_query("IPHONE 15 PRO") == expected
        assert parse_query("iPhone15Pro") == expected
        assert parse_query("  iphone   15   pro  ") == expected

    def test_tokens(self):
        assert PhoneIntent(number="15").tokens() == ["iphone", "15"]
        assert PhoneIntent(number="16", variant="e").tokens() == ["iphone", "16e"]
        assert PhoneIntent(number="15", is_pro=True, size="max").tokens() == ["iphone", "15", "pro", "max"]


class TestDescribeIntent:
    """Tests for describe_intent output."""

    def test_phone(self):
        info = describe_intent(parse_query("iPhone 15 Pro Max"))
        assert info == {
            "type": "phone",
            "family": "iphone",
            "number": "15",
            "variant": "",
            "pro": True,
            "size": "max",
            "model": "iphone 15 pro max",
        }

    def test_keyword(self):
        assert describe_intent(parse_query("Galaxy S24")) == {"type": "keyword", "term": "galaxy s24"}


class TestDetectCategory:
    """Tests for category detection from search keywords."""

    @pytest.mark.parametrize("term,expected", [
        ("iphone 15", "IPH"),
        ("iPhone15Pro", "IPH"),
        ("ip 13", "IPH"),
        ("macbook air m2", "MCB"),
        ("ipad air", "IPAD"),
        ("tablet samsung", "IPAD"),
        ("apple watch series 9", "RLG"),
        ("relógio", "RLG"),
        ("airpods pro", "PODS"),
        ("capa silicone", "ACSS"),
        ("carregador 20w", "ACSS"),
    ])
    def test_detected(self, term, expected):
        assert detect_category_from_search(term) == expected

    def test_whole_tokens_only(self):
        """'ip' and 'pad' must not fire inside longer words."""
        assert detect_category_from_search("ipad") == "IPAD"
        assert detect_category_from_search("notepad") is None
        assert detect_category_from_search("zip") is None

    def test_longest_keyword_wins(self):
        assert detect_category_from_search("capa iphone") == "IPH"

    @pytest.mark.parametrize("term", [None, "", "x", "galaxy s24"])
    def test_nothing_detected(self, term):
        assert detect_category_from_search(term) is None
