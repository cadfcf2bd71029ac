"""Dependency container wiring for the food search layer."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from food_search.adapters.fdc_client import HttpxFdcClient
from food_search.adapters.open_food_facts_client import HttpxOpenFoodFactsClient
from food_search.adapters.supabase_food_repository import SupabaseFoodRepository
from food_search.app_logging import configure_logging
from food_search.config import Settings
from food_search.services.cache import ResultCache
from food_search.services.controller import DebouncedSearchController
from food_search.services.local_foods import (
    InMemoryFoodRepository,
    LocalFoodCatalog,
    LocalFoodRepository,
)
from food_search.services.normalizer import QueryNormalizer
from food_search.services.rate_limiter import RateLimiter
from food_search.services.ranking import RelevanceRanker
from food_search.services.search import SearchAggregator
from food_search.services.sources import FdcFoodSource, OpenFoodFactsSource


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    normalizer: QueryNormalizer
    search_cache: ResultCache
    off_rate_limiter: RateLimiter
    fdc_rate_limiter: RateLimiter | None
    primary_source: FdcFoodSource
    fallback_source: OpenFoodFactsSource
    aggregator: SearchAggregator
    local_catalog: LocalFoodCatalog
    close_resources: Callable[[], Awaitable[None]]

    def create_controller(self) -> DebouncedSearchController:
        """Create a search controller for one search screen."""
        return DebouncedSearchController(
            runner=self.aggregator,
            normalizer=self.normalizer,
            local_items=self.local_catalog.list_foods,
            min_query_length=self.settings.min_query_length,
            short_delay_ms=self.settings.debounce_short_ms,
            long_delay_ms=self.settings.debounce_long_ms,
            long_query_threshold=self.settings.long_query_threshold,
        )


def build_container(
    settings: Settings | None = None,
    repository: LocalFoodRepository | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(debug=resolved_settings.debug)

    if repository is None:
        if resolved_settings.uses_supabase:
            repository = SupabaseFoodRepository(
                create_client(
                    resolved_settings.supabase_url,
                    resolved_settings.supabase_service_key,
                ),
                table=resolved_settings.supabase_foods_table,
            )
        else:
            repository = InMemoryFoodRepository()

    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
        timeout=resolved_settings.http_timeout_seconds,
    )
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.off_base_url,
        user_agent=resolved_settings.off_user_agent,
        timeout=resolved_settings.http_timeout_seconds,
    )
    fdc_rate_limiter = (
        RateLimiter(resolved_settings.fdc_requests_per_minute)
        if resolved_settings.fdc_requests_per_minute
        else None
    )
    off_rate_limiter = RateLimiter(resolved_settings.off_requests_per_minute)
    search_cache = ResultCache(
        ttl_seconds=resolved_settings.search_cache_ttl_seconds,
        max_entries=resolved_settings.cache_max_entries,
    )
    food_cache = ResultCache(
        ttl_seconds=resolved_settings.food_cache_ttl_seconds,
        max_entries=resolved_settings.cache_max_entries,
    )
    normalizer = QueryNormalizer(min_length=resolved_settings.min_query_length)
    primary_source = FdcFoodSource(
        client=fdc_client,
        rate_limiter=fdc_rate_limiter,
        food_cache=food_cache,
        food_ttl_seconds=resolved_settings.food_cache_ttl_seconds,
        debug=resolved_settings.debug,
    )
    fallback_source = OpenFoodFactsSource(
        client=off_client,
        rate_limiter=off_rate_limiter,
        debug=resolved_settings.debug,
    )
    aggregator = SearchAggregator(
        primary=primary_source,
        fallback=fallback_source,
        cache=search_cache,
        normalizer=normalizer,
        ranker=RelevanceRanker(normalizer),
        page_size=resolved_settings.search_page_size,
        debug=resolved_settings.debug,
    )

    async def close_resources() -> None:
        await fdc_client.close()
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        normalizer=normalizer,
        search_cache=search_cache,
        off_rate_limiter=off_rate_limiter,
        fdc_rate_limiter=fdc_rate_limiter,
        primary_source=primary_source,
        fallback_source=fallback_source,
        aggregator=aggregator,
        local_catalog=LocalFoodCatalog(repository),
        close_resources=close_resources,
    )
