"""Search aggregation across the primary and fallback food sources."""

import logging
from dataclasses import dataclass, field

from food_search.domain.errors import (
    AllSourcesFailedError,
    RateLimitExceededError,
    SourceUnavailableError,
)
from food_search.domain.foods import (
    CanonicalFoodResult,
    LocalFoodRecord,
    Provenance,
    SearchResponse,
)
from food_search.services.cache import Cache
from food_search.services.local_foods import exclude_local_duplicates
from food_search.services.normalizer import QueryNormalizer
from food_search.services.ranking import RelevanceRanker
from food_search.services.sources import FoodSource

_logger = logging.getLogger(__name__)


@dataclass
class SearchAggregator:
    """Normalize, fetch, fall back, deduplicate and rank.

    Primary failures are logged and trigger the fallback source. Only a
    failure of both sources raises ``AllSourcesFailedError``; a rate-limit
    denial on the fallback raises ``RateLimitExceededError`` since there is
    nothing left to fall back to.
    """

    primary: FoodSource
    fallback: FoodSource
    cache: Cache
    normalizer: QueryNormalizer = field(default_factory=QueryNormalizer)
    ranker: RelevanceRanker = field(default_factory=RelevanceRanker)
    page_size: int = 25
    cache_ttl_seconds: int | None = None
    debug: bool = False

    async def search(
        self,
        raw_query: str,
        local_items: list[LocalFoodRecord] | None = None,
        limit: int | None = None,
    ) -> SearchResponse:
        """Run one aggregated search; an empty result is not an error."""
        query = self.normalizer.normalize(raw_query)
        if query is None:
            return SearchResponse(query=None, results=[], provenance=None)
        local = local_items or []
        max_results = limit or self.page_size
        fetch_size = max(max_results, self.page_size)

        cache_key = f"search:{query}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            if self.debug:
                _logger.info("Search cache hit: query=%s", query)
            return SearchResponse(
                query=query,
                results=self._finish(cached, query, local, max_results),
                provenance=Provenance.PRIMARY,
                from_cache=True,
            )

        primary_error: Exception | None = None
        try:
            primary_results = await self.primary.search(query, fetch_size)
        except (SourceUnavailableError, RateLimitExceededError) as exc:
            _logger.warning("Primary source %s failed: %s", self.primary.name, exc)
            primary_error = exc
            primary_results = []

        if primary_results:
            self.cache.set(
                cache_key, primary_results, ttl_seconds=self.cache_ttl_seconds
            )
            return SearchResponse(
                query=query,
                results=self._finish(primary_results, query, local, max_results),
                provenance=Provenance.PRIMARY,
            )

        try:
            fallback_results = await self.fallback.search(query, fetch_size)
        except SourceUnavailableError as exc:
            if primary_error is None:
                _logger.warning(
                    "Fallback source %s failed after an empty primary result: %s",
                    self.fallback.name,
                    exc,
                )
                return SearchResponse(
                    query=query, results=[], provenance=Provenance.PRIMARY
                )
            raise AllSourcesFailedError(primary_error, exc) from exc

        tagged = [
            result.with_provenance(Provenance.FALLBACK) for result in fallback_results
        ]
        if self.debug:
            _logger.info("Search fallback: query=%s results=%s", query, len(tagged))
        return SearchResponse(
            query=query,
            results=self._finish(tagged, query, local, max_results),
            provenance=Provenance.FALLBACK,
        )

    def _finish(
        self,
        results: list[CanonicalFoodResult],
        query: str,
        local_items: list[LocalFoodRecord],
        limit: int,
    ) -> list[CanonicalFoodResult]:
        valid = [result for result in results if result.nutrition.calories > 0]
        unique = exclude_local_duplicates(valid, local_items)
        return self.ranker.rank(unique, query)[:limit]
