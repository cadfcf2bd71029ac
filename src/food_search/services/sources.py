"""External food sources mapped into canonical search results."""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from food_search.adapters.fdc_client import FDC_SOURCE, FdcClient
from food_search.adapters.fdc_models import FdcFood, FdcNutrient, FdcSearchResponse
from food_search.adapters.off_models import (
    OffProduct,
    OffProductResponse,
    OffSearchResponse,
)
from food_search.adapters.open_food_facts_client import (
    OFF_SOURCE,
    OpenFoodFactsClient,
)
from food_search.domain.errors import (
    ApiError,
    InvalidBarcodeError,
    RateLimitExceededError,
    SourceUnavailableError,
)
from food_search.domain.foods import CanonicalFoodResult, NutritionFacts, Provenance
from food_search.services.cache import Cache
from food_search.services.rate_limiter import RateLimiter

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

KJ_PER_KCAL = 4.184
DEFAULT_SERVING = "100g"
MIN_BARCODE_LENGTH = 8

_GRAM_UNITS = {"g", "grm", "gram", "grams"}
_MILLILITER_UNITS = {"ml", "mlt", "milliliter", "milliliters"}
_MACRO_KEYS = ("calories", "protein", "carbs", "fat")

# Nutrient numbers used by FDC, checked alongside name fragments.
_FDC_NUTRIENTS: list[tuple[str, str, tuple[str, ...], set[str]]] = [
    ("calories", "208", ("energy",), {"kcal", "kilocalorie", "kj", "kilojoule"}),
    ("protein", "203", ("protein",), {"g", "gram"}),
    ("carbs", "205", ("carbohydrate",), {"g", "gram"}),
    ("fat", "204", ("fat, total", "total lipid"), {"g", "gram"}),
    ("fiber", "291", ("fiber",), {"g", "gram"}),
    ("sugar", "269", ("sugar",), {"g", "gram"}),
    ("sodium", "307", ("sodium",), {"mg", "milligram"}),
]

_OFF_NUTRIENTS = {
    "protein": "proteins",
    "carbs": "carbohydrates",
    "fat": "fat",
    "fiber": "fiber",
    "sugar": "sugars",
    "sodium": "sodium",
}


class FoodSource(Protocol):
    """A searchable external food database."""

    name: str

    async def search(self, query: str, limit: int) -> list[CanonicalFoodResult]:
        """Return canonical results for a normalized query."""


@dataclass
class FdcFoodSource:
    """Primary source backed by USDA FoodData Central."""

    client: FdcClient
    rate_limiter: RateLimiter | None = None
    food_cache: Cache | None = None
    food_ttl_seconds: int = 86400
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3
    debug: bool = False
    name: str = FDC_SOURCE

    async def search(self, query: str, limit: int = 25) -> list[CanonicalFoodResult]:
        """Search FDC and map every complete record."""
        _acquire(self.rate_limiter, self.name)
        payload = await self._call_with_retry(
            lambda: self.client.search_foods(query, page_size=limit),
            action="search",
        )
        response = _validate(FdcSearchResponse, payload, self.name)
        results: list[CanonicalFoodResult] = []
        for raw_food in response.foods:
            try:
                food = FdcFood.model_validate(raw_food)
            except ValidationError:
                _logger.debug("Dropping malformed FDC record: %s", raw_food.get("fdcId"))
                continue
            result = map_fdc_food(food)
            if result is not None:
                results.append(result)
        if self.debug:
            _logger.info(
                "FDC search: query=%s foods=%s valid=%s",
                query,
                len(response.foods),
                len(results),
            )
        return results

    async def get_food(self, fdc_id: int) -> CanonicalFoodResult | None:
        """Fetch a single food by FDC id, cached for a day."""
        cache_key = f"fdc:food:{fdc_id}"
        if self.food_cache is not None:
            cached = self.food_cache.get(cache_key)
            if isinstance(cached, CanonicalFoodResult):
                return cached

        _acquire(self.rate_limiter, self.name)
        payload = await self._call_with_retry(
            lambda: self.client.get_food(fdc_id),
            action=f"get_food:{fdc_id}",
        )
        food = _validate(FdcFood, payload, self.name)
        result = map_fdc_food(food)
        if result is not None and self.food_cache is not None:
            self.food_cache.set(cache_key, result, ttl_seconds=self.food_ttl_seconds)
        return result

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function, retrying transient failures."""
        attempt = 0
        while True:
            try:
                return await func()
            except SourceUnavailableError as exc:
                attempt += 1
                if self.debug:
                    _logger.warning(
                        "FDC %s failed (attempt %s/%s): %s",
                        action,
                        attempt,
                        self.retry_attempts + 1,
                        exc,
                    )
                if attempt > self.retry_attempts or not _is_transient(exc):
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


@dataclass
class OpenFoodFactsSource:
    """Secondary source backed by Open Food Facts."""

    client: OpenFoodFactsClient
    rate_limiter: RateLimiter | None = None
    debug: bool = False
    name: str = OFF_SOURCE

    async def search(self, query: str, limit: int = 20) -> list[CanonicalFoodResult]:
        """Keyword search; records a request against the rate limiter."""
        _acquire(self.rate_limiter, self.name)
        payload = await self.client.search_products(query, page_size=limit)
        response = _validate(OffSearchResponse, payload, self.name)
        results: list[CanonicalFoodResult] = []
        for raw_product in response.products:
            try:
                product = OffProduct.model_validate(raw_product)
            except ValidationError:
                _logger.debug("Dropping malformed OFF product: %s", raw_product.get("code"))
                continue
            result = map_off_product(product)
            if result is not None:
                results.append(result)
        if self.debug:
            _logger.info(
                "OFF search: query=%s products=%s valid=%s",
                query,
                len(response.products),
                len(results),
            )
        return results[:limit]

    async def lookup_barcode(self, barcode: str) -> CanonicalFoodResult | None:
        """Look up a product by barcode; None when the product is unknown."""
        cleaned = barcode.strip()
        if len(cleaned) < MIN_BARCODE_LENGTH:
            raise InvalidBarcodeError(f"Invalid barcode: {barcode!r}")
        _acquire(self.rate_limiter, self.name)
        payload = await self.client.get_product(cleaned)
        response = _validate(OffProductResponse, payload, self.name)
        if response.status == 0 or response.product is None:
            return None
        product = response.product
        if not product.code:
            product = product.model_copy(update={"code": response.code or cleaned})
        return map_off_product(product)


def map_fdc_food(food: FdcFood) -> CanonicalFoodResult | None:
    """Map an FDC food to a canonical result, or None if it is incomplete."""
    values = _extract_fdc_nutrients(food.food_nutrients)
    if all(values.get(key) is None for key in _MACRO_KEYS):
        return None
    serving_description, serving_grams = _fdc_serving(food)
    scale = serving_grams / 100 if serving_grams else 1.0
    nutrition = _build_nutrition(values, scale)
    if nutrition is None:
        return None
    return CanonicalFoodResult(
        name=food.description,
        brand=food.brand_owner or food.brand_name,
        source_id=str(food.fdc_id),
        barcode=food.gtin_upc or None,
        serving_description=serving_description,
        nutrition=nutrition,
        provenance=Provenance.PRIMARY,
        data_type=food.data_type,
    )


def map_off_product(product: OffProduct) -> CanonicalFoodResult | None:
    """Map an OFF product to a canonical result, or None if it is incomplete."""
    if _has_serving_values(product):
        values = _extract_off_nutrients(product, "serving")
        serving_description = product.serving_size or _quantity_text(product)
        scale = 1.0
    else:
        values = _extract_off_nutrients(product, "100g")
        if product.serving_quantity and _is_mass_or_volume(
            product.serving_quantity_unit
        ):
            serving_description = product.serving_size or _quantity_text(product)
            scale = product.serving_quantity / 100
        else:
            serving_description = DEFAULT_SERVING
            scale = 1.0
    if all(values.get(key) is None for key in _MACRO_KEYS):
        return None
    nutrition = _build_nutrition(values, scale)
    if nutrition is None:
        return None
    brand = (product.brands or "").split(",")[0].strip() or None
    return CanonicalFoodResult(
        name=product.product_name_en or product.product_name or "Unknown Product",
        brand=brand,
        source_id=product.code or "",
        barcode=product.code or None,
        serving_description=serving_description,
        nutrition=nutrition,
        provenance=Provenance.FALLBACK,
    )


def _acquire(rate_limiter: RateLimiter | None, source: str) -> None:
    """Record a request, raising when the source budget is exhausted."""
    if rate_limiter is None:
        return
    if not rate_limiter.record_request():
        raise RateLimitExceededError(
            source, rate_limiter.get_time_until_next_request()
        )


def _validate(
    model: type[ModelT], payload: dict[str, object], source: str
) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise SourceUnavailableError(source, "malformed response payload") from exc


def _is_transient(exc: SourceUnavailableError) -> bool:
    if isinstance(exc, ApiError):
        return exc.status_code >= 500 or exc.status_code == 429
    return True


def _extract_fdc_nutrients(nutrients: list[FdcNutrient]) -> dict[str, float | None]:
    """Pick calories, macros and micros out of an FDC nutrient list."""
    values: dict[str, float | None] = {}
    for nutrient in nutrients:
        quantity = nutrient.quantity
        if quantity is None:
            continue
        for key, number, fragments, units in _FDC_NUTRIENTS:
            if nutrient.number != number and not any(
                fragment in nutrient.name for fragment in fragments
            ):
                continue
            if nutrient.unit in units and values.get(key) is None:
                if nutrient.unit in {"kj", "kilojoule"}:
                    values[key] = quantity / KJ_PER_KCAL
                else:
                    values[key] = quantity
            break
    return values


def _fdc_serving(food: FdcFood) -> tuple[str, float | None]:
    """Return the serving description and its gram weight, if known."""
    unit = (food.serving_size_unit or "").lower()
    if food.serving_size and (unit in _GRAM_UNITS or unit in _MILLILITER_UNITS):
        if food.household_serving_full_text:
            return food.household_serving_full_text, food.serving_size
        suffix = "ml" if unit in _MILLILITER_UNITS else "g"
        return f"{_format_amount(food.serving_size)}{suffix}", food.serving_size

    portions = sorted(
        (portion for portion in food.food_portions if portion.gram_weight),
        key=lambda portion: portion.data_points or 0,
        reverse=True,
    )
    if portions:
        portion = portions[0]
        if portion.portion_description:
            return portion.portion_description, portion.gram_weight
        unit_name = None
        if portion.measure_unit:
            unit_name = portion.measure_unit.name or portion.measure_unit.abbreviation
        if unit_name:
            amount = _format_amount(portion.amount or 1)
            return f"{amount} {unit_name}".strip(), portion.gram_weight

    return DEFAULT_SERVING, None


def _has_serving_values(product: OffProduct) -> bool:
    return (
        product.nutrient("energy-kcal_serving") is not None
        or product.nutrient("energy_serving") is not None
    )


def _extract_off_nutrients(product: OffProduct, basis: str) -> dict[str, float | None]:
    values: dict[str, float | None] = {}
    calories = product.nutrient(f"energy-kcal_{basis}")
    if calories is None:
        kilojoules = product.nutrient(f"energy_{basis}")
        calories = kilojoules / KJ_PER_KCAL if kilojoules is not None else None
    values["calories"] = calories
    for key, off_key in _OFF_NUTRIENTS.items():
        values[key] = product.nutrient(f"{off_key}_{basis}")
    if values["sodium"] is not None:
        values["sodium"] = values["sodium"] * 1000
    return values


def _quantity_text(product: OffProduct) -> str:
    if product.serving_quantity:
        unit = product.serving_quantity_unit or "g"
        return f"{_format_amount(product.serving_quantity)} {unit}"
    return "1 serving"


def _is_mass_or_volume(unit: str | None) -> bool:
    if unit is None:
        return True
    lowered = unit.lower()
    return lowered in _GRAM_UNITS or lowered in _MILLILITER_UNITS


def _build_nutrition(
    values: dict[str, float | None], scale: float
) -> NutritionFacts | None:
    """Scale and round nutrient values; None if the record is not usable."""
    calories = _round_half_up((values.get("calories") or 0.0) * scale, 0)
    protein = _round_half_up((values.get("protein") or 0.0) * scale, 1)
    carbs = _round_half_up((values.get("carbs") or 0.0) * scale, 1)
    fat = _round_half_up((values.get("fat") or 0.0) * scale, 1)
    if calories <= 0 or min(protein, carbs, fat) < 0:
        return None
    return NutritionFacts(
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        fiber=_scaled_optional(values.get("fiber"), scale, 1),
        sugar=_scaled_optional(values.get("sugar"), scale, 1),
        sodium=_scaled_optional(values.get("sodium"), scale, 0),
    )


def _scaled_optional(value: float | None, scale: float, places: int) -> float | None:
    if value is None:
        return None
    return _round_half_up(value * scale, places)


def _round_half_up(value: float, places: int) -> float:
    factor = 10**places
    return math.floor(value * factor + 0.5) / factor


def _format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return str(int(amount))
    return f"{amount:g}"
