"""Supabase implementation of the local food library reader."""

from dataclasses import dataclass

from supabase import Client

from food_search.domain.foods import LocalFoodRecord
from food_search.services.local_foods import LocalFoodRepository


@dataclass
class SupabaseFoodRepository(LocalFoodRepository):
    """Supabase-backed, read-only view of the saved food library."""

    client: Client
    table: str = "foods"

    def list_foods(self) -> list[LocalFoodRecord]:
        """Return saved foods, most recently updated first."""
        response = (
            self.client.table(self.table)
            .select("id, name, brand, barcode")
            .order("updated_at", desc=True)
            .execute()
        )
        return [_parse_food(row) for row in response.data or []]


def _parse_food(row: dict[str, object]) -> LocalFoodRecord:
    """Parse a food row into a domain model."""
    brand = row.get("brand")
    barcode = row.get("barcode")
    return LocalFoodRecord(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        brand=str(brand) if brand else None,
        barcode=str(barcode) if barcode else None,
    )
