"""Pydantic models for Open Food Facts payloads."""

from pydantic import BaseModel, field_validator


def _to_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


class OffProduct(BaseModel):
    """Product payload; only the fields the search maps are declared."""

    code: str | None = None
    product_name: str | None = None
    product_name_en: str | None = None
    brands: str | None = None
    nutriments: dict[str, object] = {}
    serving_size: str | None = None
    serving_quantity: float | None = None
    serving_quantity_unit: str | None = None
    quantity: str | None = None

    @field_validator("serving_quantity", mode="before")
    @classmethod
    def _parse_quantity(cls, value: object) -> float | None:
        return _to_float(value)

    @field_validator("code", mode="before")
    @classmethod
    def _parse_code(cls, value: object) -> str | None:
        if value is None:
            return None
        return str(value)

    def nutrient(self, key: str) -> float | None:
        """Return a numeric nutriment value, ignoring malformed entries."""
        return _to_float(self.nutriments.get(key))


class OffProductResponse(BaseModel):
    """Barcode lookup payload."""

    code: str | None = None
    status: int = 0
    status_verbose: str | None = None
    product: OffProduct | None = None


class OffSearchResponse(BaseModel):
    """Keyword search payload; products are validated one by one."""

    count: int | None = None
    products: list[dict[str, object]] = []
