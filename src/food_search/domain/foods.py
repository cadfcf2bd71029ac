"""Food search domain models."""

from dataclasses import dataclass, replace
from enum import StrEnum


class Provenance(StrEnum):
    """Which external source produced a search result."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class NutritionFacts:
    """Nutrition values for one serving."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None


@dataclass(frozen=True)
class CanonicalFoodResult:
    """Source-agnostic food search result."""

    name: str
    brand: str | None
    source_id: str
    barcode: str | None
    serving_description: str
    nutrition: NutritionFacts
    provenance: Provenance
    data_type: str | None = None

    def with_provenance(self, provenance: Provenance) -> "CanonicalFoodResult":
        """Return a copy tagged with a different provenance."""
        return replace(self, provenance=provenance)


@dataclass(frozen=True)
class LocalFoodRecord:
    """A food the user already saved locally."""

    id: str
    name: str
    brand: str | None
    barcode: str | None


@dataclass(frozen=True)
class SearchResponse:
    """Outcome of a single aggregated search."""

    query: str | None
    results: list[CanonicalFoodResult]
    provenance: Provenance | None
    from_cache: bool = False
