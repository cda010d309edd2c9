"""Canned answers to quick questions about a single dish."""
from app.services.agent.constants import (
    DISH_ANSWER_DEFAULT,
    DISH_ANSWER_DRINK,
    DISH_ANSWER_FEATURE,
    DISH_ANSWER_GREASY,
    DISH_ANSWER_PORTION,
    DISH_ANSWER_RECOMMEND,
    DISH_ANSWER_SPICY,
    DISH_ANSWER_SPICY_ADVICE_HOT,
    DISH_ANSWER_SPICY_ADVICE_MILD,
    DISH_ANSWER_SUITABILITY,
)
from app.services.menu.base import DishRecord
from app.services.menu.catalog import spice_label


def answer_dish_question(dish: DishRecord, question: str) -> str:
    """Answer by the first keyword found in the question; no model call."""
    text = question.lower()
    if "辣" in text or "spicy" in text:
        advice = DISH_ANSWER_SPICY_ADVICE_MILD if dish.spicy_level == 0 else DISH_ANSWER_SPICY_ADVICE_HOT
        return DISH_ANSWER_SPICY.format(
            name=dish.name, spice=spice_label(dish.spicy_level), advice=advice
        )
    if "女生" in text or ("适合" in text and "几个人" not in text):
        return DISH_ANSWER_SUITABILITY
    if "油腻" in text:
        return DISH_ANSWER_GREASY
    if "特色" in text:
        if not dish.description:
            return DISH_ANSWER_DEFAULT
        return DISH_ANSWER_FEATURE.format(name=dish.name, description=dish.description)
    if "饮料" in text or "喝" in text:
        return DISH_ANSWER_DRINK.format(name=dish.name)
    if "几个人" in text or "几人" in text:
        return DISH_ANSWER_PORTION.format(name=dish.name)
    if "推荐" in text or "建议" in text:
        return DISH_ANSWER_RECOMMEND
    return DISH_ANSWER_DEFAULT
