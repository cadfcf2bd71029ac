"""Tests for query normalization."""

import pytest

from food_search.services.normalizer import QueryNormalizer


@pytest.fixture
def normalizer() -> QueryNormalizer:
    return QueryNormalizer()


def test_normalize_trims_lowercases_and_collapses(normalizer: QueryNormalizer) -> None:
    assert normalizer.normalize("  Brown   RICE  ") == "brown rice"


@pytest.mark.parametrize("raw", ["", "   ", "a", "ab", "  ab  ", "\tx\n"])
def test_short_queries_are_skipped(normalizer: QueryNormalizer, raw: str) -> None:
    assert normalizer.normalize(raw) is None


def test_three_characters_is_enough(normalizer: QueryNormalizer) -> None:
    assert normalizer.normalize("egg") == "egg"


def test_trailing_plural_is_stripped(normalizer: QueryNormalizer) -> None:
    assert normalizer.normalize("Apples") == "apple"
    assert normalizer.normalize("chicken nuggets") == "chicken nugget"


def test_plural_strip_keeps_minimum_length(normalizer: QueryNormalizer) -> None:
    assert normalizer.normalize("oats") == "oat"
    assert normalizer.normalize("ess") == "ess"


def test_double_s_endings_are_kept(normalizer: QueryNormalizer) -> None:
    assert normalizer.normalize("grass") == "grass"
    assert normalizer.normalize("swiss") == "swiss"


def test_lone_trailing_s_is_not_stripped(normalizer: QueryNormalizer) -> None:
    assert normalizer.normalize("ab s") == "ab s"
    assert normalizer.normalize("chips s") == "chips s"


def test_alias_is_applied(normalizer: QueryNormalizer) -> None:
    assert normalizer.normalize("chikfila nugget") == "chick-fil-a nugget"
    assert normalizer.normalize("Mcdonalds fries") == "mcdonald's fries"


def test_longest_alias_wins_and_does_not_chain() -> None:
    normalizer = QueryNormalizer(
        aliases={"mc": "XX", "mcdonalds": "mcdonald's", "donalds": "zz"},
        known_brands=frozenset(),
    )

    assert normalizer.normalize("mcdonalds burger") == "mcdonald's burger"


def test_only_first_alias_occurrence_is_replaced() -> None:
    normalizer = QueryNormalizer(aliases={"wendys": "wendy's"})

    assert normalizer.normalize("wendys wendys") == "wendy's wendys"


def test_known_brand_keeps_trailing_s(normalizer: QueryNormalizer) -> None:
    assert normalizer.normalize("Starbucks") == "starbucks"
    assert normalizer.normalize("popeyes") == "popeyes"
    assert normalizer.normalize("Chick-fil-A Nuggets") == "chick-fil-a nuggets"


def test_brand_alias_then_exemption(normalizer: QueryNormalizer) -> None:
    assert normalizer.normalize("reeses") == "reese's"


@pytest.mark.parametrize(
    "raw",
    [
        "Apples",
        "  chicken   NUGGETS ",
        "chikfila nugget",
        "Starbucks",
        "grass",
        "chikfilas",
        "mcdonalds fries",
        "oats",
        "ab s",
        "chips s",
    ],
)
def test_normalize_is_idempotent(normalizer: QueryNormalizer, raw: str) -> None:
    once = normalizer.normalize(raw)

    assert once is not None
    assert once == once.strip()
    assert len(once) >= normalizer.min_length
    assert normalizer.normalize(once) == once


def test_contains_known_brand_respects_word_boundaries(
    normalizer: QueryNormalizer,
) -> None:
    assert normalizer.contains_known_brand("taco bell burrito")
    assert not normalizer.contains_known_brand("kfcx meal")
    assert not normalizer.contains_known_brand("chicken nugget")
