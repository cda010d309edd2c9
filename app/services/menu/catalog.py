"""Normalized, read-only dish catalog."""
import json
import logging
import math
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from app.services.menu.base import DishRecord, Nutrition, Review

logger = logging.getLogger(__name__)

SPICE_LABELS = {0: "不辣", 1: "微辣", 2: "中辣"}


class DishNotFoundError(LookupError):
    """Raised when a dish id is not present in the catalog."""

    def __init__(self, dish_id: str):
        super().__init__(f"Dish '{dish_id}' is not on the menu")
        self.dish_id = dish_id


def _coerce_price(value: Any) -> Optional[float]:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return price


def _coerce_spicy_level(value: Any) -> int:
    try:
        level = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return min(max(level, 0), 2)


def _coerce_nutrition(value: Any) -> Optional[Nutrition]:
    if not isinstance(value, dict):
        return None
    try:
        return Nutrition(**value)
    except (TypeError, ValidationError):
        return None


def _coerce_reviews(value: Any) -> Tuple[Review, ...]:
    if not isinstance(value, list):
        return ()
    reviews = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        try:
            reviews.append(Review(**{**raw, "id": str(raw.get("id", ""))}))
        except (TypeError, ValidationError):
            continue
    return tuple(reviews)


def normalize_record(raw: Dict[str, Any]) -> Optional[DishRecord]:
    """Coerce one raw record into a DishRecord, or None if it is unusable."""
    raw_id = raw.get("id")
    name = raw.get("name")
    if raw_id is None or str(raw_id).strip() == "" or not name:
        return None

    price = _coerce_price(raw.get("price"))
    if price is None:
        return None

    ingredients = raw.get("ingredients")
    spicy_level = raw.get("spicyLevel", raw.get("spicy_level"))

    try:
        return DishRecord(
            id=str(raw_id).strip(),
            name=str(name),
            description=str(raw.get("description") or ""),
            price=price,
            category=str(raw.get("category") or "其他"),
            spicy_level=_coerce_spicy_level(spicy_level),
            ingredients=tuple(str(i) for i in ingredients) if isinstance(ingredients, list) else (),
            nutrition=_coerce_nutrition(raw.get("nutrition")),
            reviews=_coerce_reviews(raw.get("reviews")),
            image=raw.get("image"),
        )
    except ValidationError:
        return None


def normalize(raw_records: Iterable[Dict[str, Any]]) -> Tuple[DishRecord, ...]:
    """Normalize raw records once at load time.

    Records without an id or name, with an unreadable price, or reusing an
    id already seen are dropped.
    """
    dishes: List[DishRecord] = []
    seen_ids = set()
    for raw in raw_records:
        dish = normalize_record(raw) if isinstance(raw, dict) else None
        if dish is None:
            logger.debug(f"[CATALOG] Dropping malformed record: {raw!r}")
            continue
        if dish.id in seen_ids:
            logger.debug(f"[CATALOG] Dropping duplicate id: {dish.id}")
            continue
        seen_ids.add(dish.id)
        dishes.append(dish)
    return tuple(dishes)


def spice_label(level: int) -> str:
    return SPICE_LABELS.get(level, SPICE_LABELS[2])


def nutrition_summary(dish: DishRecord) -> str:
    """Human-readable nutrition line used in prompts."""
    n = dish.nutrition
    if n is None:
        return "营养信息暂无"
    return (
        f"热量{n.calories:g}卡, 蛋白质{n.protein:g}g, "
        f"脂肪{n.fat:g}g, 碳水{n.carbs:g}g"
    )


class MenuCatalog:
    """Immutable view of the available dishes, indexed by id."""

    def __init__(self, dishes: Sequence[DishRecord]):
        self._dishes: Tuple[DishRecord, ...] = tuple(dishes)
        self._by_id: Dict[str, DishRecord] = {dish.id: dish for dish in self._dishes}

    @classmethod
    def from_raw(cls, raw_records: Iterable[Dict[str, Any]]) -> "MenuCatalog":
        return cls(normalize(raw_records))

    @property
    def dishes(self) -> Tuple[DishRecord, ...]:
        return self._dishes

    @property
    def categories(self) -> List[str]:
        """Distinct categories in catalog order."""
        return list(dict.fromkeys(dish.category for dish in self._dishes))

    def find_by_id(self, dish_id: str) -> Optional[DishRecord]:
        return self._by_id.get(dish_id)

    def require(self, dish_id: str) -> DishRecord:
        dish = self._by_id.get(dish_id)
        if dish is None:
            raise DishNotFoundError(dish_id)
        return dish

    def __contains__(self, dish_id: object) -> bool:
        return dish_id in self._by_id

    def __iter__(self) -> Iterator[DishRecord]:
        return iter(self._dishes)

    def __len__(self) -> int:
        return len(self._dishes)

    def to_prompt_listing(self) -> str:
        """Compact JSON listing of the whole catalog for LLM context."""
        listing = [
            {
                "id": dish.id,
                "name": dish.name,
                "description": dish.description,
                "price": dish.price,
                "category": dish.category,
                "spicyLevel": spice_label(dish.spicy_level),
                "ingredients": ", ".join(dish.ingredients),
                "nutrition": nutrition_summary(dish),
            }
            for dish in self._dishes
        ]
        return json.dumps(listing, ensure_ascii=False, indent=2)
