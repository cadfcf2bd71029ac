"""Pydantic models for FoodData Central payloads."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _FdcModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FdcNutrientInfo(_FdcModel):
    """Nested nutrient descriptor used by the food details endpoint."""

    id: int | None = None
    number: str | None = None
    name: str | None = None
    unit_name: str | None = None


class FdcNutrient(_FdcModel):
    """A nutrient entry in either the search or the details shape."""

    nutrient_id: int | None = None
    nutrient_name: str | None = None
    nutrient_number: str | None = None
    unit_name: str | None = None
    value: float | None = None
    amount: float | None = None
    nutrient: FdcNutrientInfo | None = None

    @property
    def name(self) -> str:
        if self.nutrient_name:
            return self.nutrient_name.lower()
        if self.nutrient and self.nutrient.name:
            return self.nutrient.name.lower()
        return ""

    @property
    def number(self) -> str | None:
        if self.nutrient_number:
            return self.nutrient_number
        return self.nutrient.number if self.nutrient else None

    @property
    def unit(self) -> str:
        unit = self.unit_name or (self.nutrient.unit_name if self.nutrient else None)
        return (unit or "").lower()

    @property
    def quantity(self) -> float | None:
        return self.value if self.value is not None else self.amount


class FdcMeasureUnit(_FdcModel):
    """Unit of a household portion."""

    name: str | None = None
    abbreviation: str | None = None


class FdcPortion(_FdcModel):
    """Household portion with its gram weight."""

    amount: float | None = None
    gram_weight: float | None = None
    data_points: int | None = None
    measure_unit: FdcMeasureUnit | None = None
    portion_description: str | None = None


class FdcFood(_FdcModel):
    """A food as returned by search or details."""

    fdc_id: int
    description: str = ""
    data_type: str | None = None
    brand_owner: str | None = None
    brand_name: str | None = None
    gtin_upc: str | None = None
    food_nutrients: list[FdcNutrient] = []
    food_portions: list[FdcPortion] = []
    serving_size: float | None = None
    serving_size_unit: str | None = None
    household_serving_full_text: str | None = None


class FdcSearchResponse(_FdcModel):
    """Search endpoint payload; foods are validated one by one."""

    foods: list[dict[str, object]] = []
    total_hits: int | None = None
    current_page: int | None = None
    total_pages: int | None = None
