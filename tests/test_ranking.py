"""Tests for relevance ranking."""

import pytest

from food_search.services.ranking import RelevanceRanker, tokenize, word_match_score
from tests.conftest import make_result


@pytest.fixture
def ranker() -> RelevanceRanker:
    return RelevanceRanker()


def test_tokenize_drops_stop_words_and_short_tokens() -> None:
    assert tokenize("Chick-fil-A Chicken with Rice (4 pieces)") == [
        "chick",
        "fil",
        "chicken",
        "rice",
        "pieces",
    ]


def test_word_match_score_gives_half_credit_for_partial_match() -> None:
    assert word_match_score(["chicken", "nugget"], "Chicken Nuggets") == 75.0
    assert word_match_score(["rice"], "") == 0.0
    assert word_match_score([], "rice") == 0.0


def test_generic_query_prefers_whole_foods(ranker: RelevanceRanker) -> None:
    branded = make_result(
        "Chick-fil-A Chicken Nuggets (4 pieces)",
        data_type="Branded",
        brand="Chick-fil-A",
    )
    foundation = make_result("Chicken nugget", data_type="Foundation")

    ranked = ranker.rank([branded, foundation], "chicken nugget")

    assert ranked == [foundation, branded]


def test_brand_query_prefers_branded_items(ranker: RelevanceRanker) -> None:
    branded = make_result(
        "Chick-fil-A Chicken Nuggets (4 pieces)",
        data_type="Branded",
        brand="Chick-fil-A",
    )
    foundation = make_result("Chicken nugget", data_type="Foundation")

    ranked = ranker.rank([foundation, branded], "chick-fil-a nugget")

    assert ranked == [branded, foundation]


def test_exact_match_beats_prefix_beats_plain_match(ranker: RelevanceRanker) -> None:
    exact = make_result("Rice")
    prefix = make_result("Rice, white")
    plain = make_result("White rice")

    assert ranker.score(exact, "rice") == 280
    assert ranker.score(prefix, "rice") == 260
    assert ranker.score(plain, "rice") == 230
    assert ranker.rank([plain, prefix, exact], "rice") == [exact, prefix, plain]


def test_unknown_data_type_uses_default_score(ranker: RelevanceRanker) -> None:
    unknown = make_result("Rice", data_type=None)
    branded = make_result("Rice", data_type="Branded")

    assert ranker.score(unknown, "rice") == ranker.score(branded, "rice")


def test_ties_keep_input_order(ranker: RelevanceRanker) -> None:
    first = make_result("Banana", source_id="1")
    second = make_result("Banana", source_id="2")
    third = make_result("Banana", source_id="3")

    assert ranker.rank([second, first, third], "banana") == [second, first, third]


def test_ranking_is_deterministic(ranker: RelevanceRanker) -> None:
    results = [
        make_result("Oat milk", data_type="Branded", brand="Oatly"),
        make_result("Oats", data_type="SR Legacy"),
        make_result("Oat bran", data_type="Survey (FNDDS)"),
        make_result("Oat", data_type="Foundation"),
    ]

    first = ranker.rank(results, "oat")
    second = ranker.rank(list(results), "oat")

    assert first == second
    assert first[0].name == "Oat"
