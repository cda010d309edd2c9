"""Deterministic, rule-based dish filtering and ranking.

Pure functions over a catalog and a payload; no external calls. The same
catalog and payload always produce the same ordered result.
"""
from typing import Iterable, List

from app.services.menu.base import DishRecord
from app.services.menu.catalog import MenuCatalog
from app.services.recommendation.models import (
    BudgetRange,
    NutritionFocus,
    PreferencePayload,
)

HIGH_PROTEIN_MIN_GRAMS = 20
LOW_CALORIE_MAX_KCAL = 300


def within_budget(price: float, budget: BudgetRange) -> bool:
    """Map a budget band to a price filter.

    The bands partition the price axis as [0, 20), [20, 50] and (50, inf),
    not by their 10-30 / 30-50 / 50-100 labels. A low band keeps single
    dishes cheap enough that a meal of several stays near the label.
    """
    if budget == BudgetRange.LOW:
        return price < 20
    if budget == BudgetRange.MEDIUM:
        return 20 <= price <= 50
    return price > 50


def _normalized_terms(terms: Iterable[str]) -> List[str]:
    return [term.strip().lower() for term in terms if term and term.strip()]


def mentions_any(dish: DishRecord, terms: List[str]) -> bool:
    """True if any ingredient contains any term, case-insensitively."""
    ingredients = [ingredient.lower() for ingredient in dish.ingredients]
    return any(term in ingredient for term in terms for ingredient in ingredients)


def meets_nutrition_focus(dish: DishRecord, focus: NutritionFocus) -> bool:
    # Dishes without nutrition data never pass a nutrition filter
    if focus == NutritionFocus.HIGH_PROTEIN:
        return dish.nutrition is not None and dish.nutrition.protein >= HIGH_PROTEIN_MIN_GRAMS
    if focus == NutritionFocus.LOW_CALORIE:
        return dish.nutrition is not None and dish.nutrition.calories <= LOW_CALORIE_MAX_KCAL
    return True


def protein_price_ratio(dish: DishRecord) -> float:
    if dish.price <= 0:
        return 0.0
    return dish.protein / dish.price


def filter_dishes(catalog: MenuCatalog, payload: PreferencePayload) -> List[DishRecord]:
    """Apply every hard filter the payload asks for, keeping catalog order."""
    dishes = list(catalog)

    if payload.budget_range is not None:
        dishes = [d for d in dishes if within_budget(d.price, payload.budget_range)]

    if payload.cuisine_preference:
        wanted = set(payload.cuisine_preference)
        dishes = [d for d in dishes if d.category in wanted]

    if payload.spicy_tolerance is not None:
        dishes = [d for d in dishes if d.spicy_level <= payload.spicy_tolerance]

    restricted = _normalized_terms(payload.dietary_restrictions)
    if restricted:
        dishes = [d for d in dishes if not mentions_any(d, restricted)]

    preferred = _normalized_terms(payload.preferred_ingredients)
    if preferred:
        dishes = [d for d in dishes if mentions_any(d, preferred)]

    if payload.nutrition_focus is not None:
        dishes = [d for d in dishes if meets_nutrition_focus(d, payload.nutrition_focus)]

    return dishes


def recommend_by_rules(catalog: MenuCatalog, payload: PreferencePayload) -> List[DishRecord]:
    """Filter, rank by protein per unit price and return the top N."""
    candidates = filter_dishes(catalog, payload)
    # sorted() is stable, so ties keep catalog order
    ranked = sorted(candidates, key=protein_price_ratio, reverse=True)
    return ranked[: payload.number_of_recommendations]
