"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    fdc_api_key: str
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_requests_per_minute: int | None = None
    off_base_url: str = "https://world.openfoodfacts.org"
    off_user_agent: str = "FoodSearch/0.1 (nutrition tracker)"
    off_requests_per_minute: int = 10
    http_timeout_seconds: float = 15
    search_cache_ttl_seconds: int = 600
    food_cache_ttl_seconds: int = 86400
    cache_max_entries: int = 200
    search_page_size: int = 25
    min_query_length: int = 3
    debounce_short_ms: int = 300
    debounce_long_ms: int = 600
    long_query_threshold: int = 10
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_foods_table: str = "foods"
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_supabase(self) -> bool:
        """True when remote storage for the food library is configured."""
        return bool(self.supabase_url and self.supabase_service_key)
