"""Relevance ranking for external food search results."""

import re
from dataclasses import dataclass, field

from food_search.domain.foods import CanonicalFoodResult
from food_search.services.normalizer import QueryNormalizer

GENERIC_DATA_TYPE_SCORES = {
    "Foundation": 100,
    "SR Legacy": 80,
    "Survey (FNDDS)": 60,
    "Branded": 20,
}
BRAND_DATA_TYPE_SCORES = {
    "Branded": 100,
    "Foundation": 40,
    "SR Legacy": 30,
    "Survey (FNDDS)": 20,
}
DEFAULT_DATA_TYPE_SCORE = 20

STOP_WORDS = frozenset(
    {"a", "an", "and", "in", "of", "on", "or", "the", "to", "with", "without"}
)

EXACT_MATCH_BONUS = 50
PREFIX_MATCH_BONUS = 30
BRAND_MATCH_WEIGHT = 0.5
CONCISENESS_CAP = 30
CONCISENESS_BASE = 50

_TOKEN = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> list[str]:
    """Split text on whitespace and punctuation, dropping stop-words."""
    return [
        token
        for token in _TOKEN.findall(text.lower())
        if len(token) >= 2 and token not in STOP_WORDS
    ]


def word_match_score(query_tokens: list[str], text: str) -> float:
    """Score 0-100: full credit per exact token, half credit per partial match."""
    if not query_tokens:
        return 0.0
    text_tokens = tokenize(text)
    if not text_tokens:
        return 0.0
    exact = set(text_tokens)
    credit = 0.0
    for query_token in query_tokens:
        if query_token in exact:
            credit += 1.0
        elif any(
            query_token in token or (len(token) >= 3 and token in query_token)
            for token in text_tokens
        ):
            credit += 0.5
    return 100.0 * credit / len(query_tokens)


@dataclass
class RelevanceRanker:
    """Order results by an additive relevance score; ties keep input order."""

    normalizer: QueryNormalizer = field(default_factory=QueryNormalizer)

    def rank(
        self, results: list[CanonicalFoodResult], normalized_query: str
    ) -> list[CanonicalFoodResult]:
        """Return results sorted by descending score."""
        query = normalized_query.lower().strip()
        brand_query = self.normalizer.contains_known_brand(query)
        query_tokens = tokenize(query)
        scored = [
            (self._score(result, query, query_tokens, brand_query), result)
            for result in results
        ]
        # sorted() is stable, so equal scores keep their relative order.
        return [
            result
            for _, result in sorted(scored, key=lambda item: item[0], reverse=True)
        ]

    def score(self, result: CanonicalFoodResult, normalized_query: str) -> float:
        """Return the relevance score of one result."""
        query = normalized_query.lower().strip()
        return self._score(
            result,
            query,
            tokenize(query),
            self.normalizer.contains_known_brand(query),
        )

    def _score(
        self,
        result: CanonicalFoodResult,
        query: str,
        query_tokens: list[str],
        brand_query: bool,
    ) -> float:
        description = result.name.lower().strip()
        table = BRAND_DATA_TYPE_SCORES if brand_query else GENERIC_DATA_TYPE_SCORES
        score = float(table.get(result.data_type or "", DEFAULT_DATA_TYPE_SCORE))

        score += word_match_score(query_tokens, description)
        if brand_query and result.brand:
            score += BRAND_MATCH_WEIGHT * word_match_score(query_tokens, result.brand)

        if description == query:
            score += EXACT_MATCH_BONUS
        elif description.startswith(query):
            score += PREFIX_MATCH_BONUS

        score += max(0, min(CONCISENESS_CAP, CONCISENESS_BASE - len(description)))
        return score
