"""USDA FoodData Central API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from food_search.adapters.http import request_json

FDC_SOURCE = "fdc"
FDC_MAX_PAGE_SIZE = 200
FDC_DATA_TYPES = ["Foundation", "SR Legacy", "Survey (FNDDS)", "Branded"]


class FdcClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(self, query: str, page_size: int = 25) -> dict[str, object]:
        """Search foods by query and return raw API data."""

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id and return raw API data."""


@dataclass
class HttpxFdcClient(FdcClient):
    """HTTPX-backed FDC client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout: float = 15
    ) -> "HttpxFdcClient":
        """Create an FDC client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(headers={"Accept": "application/json"}),
            timeout=timeout,
        )

    async def search_foods(self, query: str, page_size: int = 25) -> dict[str, object]:
        """Search foods by query across all supported data types."""
        return await request_json(
            self.http_client,
            FDC_SOURCE,
            "POST",
            f"{self.base_url}/foods/search",
            params={"api_key": self.api_key},
            json={
                "query": query,
                "pageSize": min(page_size, FDC_MAX_PAGE_SIZE),
                "dataType": FDC_DATA_TYPES,
                "pageNumber": 1,
            },
            timeout=self.timeout,
        )

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id."""
        return await request_json(
            self.http_client,
            FDC_SOURCE,
            "GET",
            f"{self.base_url}/food/{fdc_id}",
            params={"api_key": self.api_key},
            timeout=self.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
