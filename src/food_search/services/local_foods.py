"""Read-only access to foods the user has already saved."""

from dataclasses import dataclass, field
from typing import Protocol

from food_search.domain.foods import CanonicalFoodResult, LocalFoodRecord


class LocalFoodRepository(Protocol):
    """Storage collaborator that owns the saved food library."""

    def list_foods(self) -> list[LocalFoodRecord]:
        """Return every saved food, most recently updated first."""


@dataclass
class InMemoryFoodRepository(LocalFoodRepository):
    """Repository used when no remote storage is configured."""

    foods: list[LocalFoodRecord] = field(default_factory=list)

    def list_foods(self) -> list[LocalFoodRecord]:
        return list(self.foods)


def _identity_key(name: str, brand: str | None) -> tuple[str, str]:
    return name.strip().lower(), (brand or "").strip().lower()


def exclude_local_duplicates(
    candidates: list[CanonicalFoodResult], local_items: list[LocalFoodRecord]
) -> list[CanonicalFoodResult]:
    """Drop external candidates that duplicate a local item."""
    barcodes = {item.barcode for item in local_items if item.barcode}
    identities = {_identity_key(item.name, item.brand) for item in local_items}
    return [
        candidate
        for candidate in candidates
        if not (candidate.barcode and candidate.barcode in barcodes)
        and _identity_key(candidate.name, candidate.brand) not in identities
    ]


def dedupe_local(foods: list[LocalFoodRecord]) -> list[LocalFoodRecord]:
    """Remove repeated ids, then repeated name and brand pairs."""
    seen_ids: set[str] = set()
    seen_keys: set[tuple[str, str]] = set()
    unique: list[LocalFoodRecord] = []
    for food in foods:
        key = _identity_key(food.name, food.brand)
        if food.id in seen_ids or key in seen_keys:
            continue
        seen_ids.add(food.id)
        seen_keys.add(key)
        unique.append(food)
    return unique


@dataclass
class LocalFoodCatalog:
    """Search and list the local food library."""

    repository: LocalFoodRepository

    def list_foods(self) -> list[LocalFoodRecord]:
        """Return all local foods without duplicates."""
        return dedupe_local(self.repository.list_foods())

    def list_recent(self, limit: int = 20) -> list[LocalFoodRecord]:
        """Return the most recent local foods."""
        return self.list_foods()[:limit]

    def search(self, query: str) -> list[LocalFoodRecord]:
        """Match the query against food names and brands."""
        needle = query.strip().lower()
        if not needle:
            return self.list_recent()
        return [
            food
            for food in self.list_foods()
            if needle in food.name.lower() or needle in (food.brand or "").lower()
        ]
