"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from food_search.config import Settings
from food_search.domain.foods import CanonicalFoodResult, NutritionFacts, Provenance
from food_search.services.local_foods import InMemoryFoodRepository


def make_result(  # noqa: PLR0913
    name: str,
    *,
    data_type: str | None = "Foundation",
    brand: str | None = None,
    barcode: str | None = None,
    calories: float = 100,
    provenance: Provenance = Provenance.PRIMARY,
    source_id: str | None = None,
) -> CanonicalFoodResult:
    """Build a canonical result with sensible defaults."""
    return CanonicalFoodResult(
        name=name,
        brand=brand,
        source_id=source_id or name.lower().replace(" ", "-"),
        barcode=barcode,
        serving_description="100g",
        nutrition=NutritionFacts(calories=calories, protein=1, carbs=2, fat=3),
        provenance=provenance,
        data_type=data_type,
    )


@dataclass
class ManualClock:
    """Clock the tests move forward by hand."""

    now: float = 1_000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def as_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.now, tz=UTC)


@dataclass
class FakeSource:
    """Food source returning canned results or raising a canned error."""

    name: str = "fake"
    results: list[CanonicalFoodResult] = field(default_factory=list)
    error: Exception | None = None
    calls: list[tuple[str, int]] = field(default_factory=list)

    async def search(self, query: str, limit: int) -> list[CanonicalFoodResult]:
        self.calls.append((query, limit))
        if self.error is not None:
            raise self.error
        return list(self.results)


@pytest.fixture
def settings() -> Settings:
    return Settings(fdc_api_key="fdc-key", _env_file=None)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def food_repository() -> InMemoryFoodRepository:
    return InMemoryFoodRepository()
