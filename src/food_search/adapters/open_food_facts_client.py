"""Open Food Facts API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from food_search.adapters.http import request_json

OFF_SOURCE = "open_food_facts"
OFF_MAX_PAGE_SIZE = 100


class OpenFoodFactsClient(Protocol):
    """Interface for Open Food Facts API interactions."""

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode and return raw API data."""

    async def search_products(
        self, query: str, page_size: int = 20
    ) -> dict[str, object]:
        """Search products by keywords and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(
        cls, base_url: str, user_agent: str, timeout: float = 15
    ) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(
                headers={"Accept": "application/json", "User-Agent": user_agent}
            ),
            timeout=timeout,
        )

    async def get_product(self, barcode: str) -> dict[str, object]:
        """Fetch a product by barcode."""
        return await request_json(
            self.http_client,
            OFF_SOURCE,
            "GET",
            f"{self.base_url}/api/v0/product/{barcode}.json",
            timeout=self.timeout,
        )

    async def search_products(
        self, query: str, page_size: int = 20
    ) -> dict[str, object]:
        """Run a keyword search."""
        return await request_json(
            self.http_client,
            OFF_SOURCE,
            "GET",
            f"{self.base_url}/cgi/search.pl",
            params={
                "search_terms": query,
                "search_simple": 1,
                "action": "process",
                "json": 1,
                "page_size": min(page_size, OFF_MAX_PAGE_SIZE),
            },
            timeout=self.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
