"""Prompt templates and tool schema for dish selection."""
from typing import Any, Dict

from app.services.menu.catalog import MenuCatalog
from app.services.recommendation.models import (
    BudgetRange,
    MealPurpose,
    NutritionFocus,
    PreferencePayload,
)

RECOMMEND_MENU_TOOL_NAME = "recommend_menu"

DISH_CATEGORIES = [
    "热菜", "小炒", "蒸菜", "汤品", "主食", "汉堡", "饮品", "小食",
    "甜品", "配菜", "牛排", "沙拉", "披萨", "意面", "加价升级",
]

RECOMMEND_MENU_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": RECOMMEND_MENU_TOOL_NAME,
        "description": "基于用户的需求和偏好推荐合适的菜品",
        "parameters": {
            "type": "object",
            "properties": {
                "budget_range": {
                    "type": "string",
                    "enum": [band.value for band in BudgetRange],
                    "description": "预算范围：10-30元、30-50元、50-100元",
                },
                "cuisine_preference": {
                    "type": "array",
                    "items": {"type": "string", "enum": DISH_CATEGORIES},
                    "description": "菜系偏好",
                },
                "spicy_tolerance": {
                    "type": "number",
                    "minimum": 0,
                    "maximum": 2,
                    "description": "辣度承受能力：0(不辣), 1(微辣), 2(中辣)",
                },
                "dietary_restrictions": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "饮食限制或忌口食材",
                },
                "meal_purpose": {
                    "type": "string",
                    "enum": [purpose.value for purpose in MealPurpose],
                    "description": "用餐目的",
                },
                "preferred_ingredients": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "偏好的食材",
                },
                "nutrition_focus": {
                    "type": "string",
                    "enum": [focus.value for focus in NutritionFocus],
                    "description": "营养关注点",
                },
                "number_of_recommendations": {
                    "type": "number",
                    "minimum": 1,
                    "maximum": 10,
                    "default": 6,
                    "description": "推荐菜品数量",
                },
            },
            "required": ["number_of_recommendations"],
        },
    },
}

SELECTION_SYSTEM_PROMPT = (
    "你是一位专业的餐厅推荐师，精通营养搭配和菜品推荐。"
    "你必须严格按照用户要求返回菜品ID的JSON数组，不能返回菜单中不存在的ID。"
)

SPICE_TOLERANCE_LABELS = {0: "不能吃辣", 1: "能吃微辣", 2: "能吃中辣"}

NUTRITION_FOCUS_LABELS = {
    NutritionFocus.HIGH_PROTEIN: "高蛋白",
    NutritionFocus.LOW_CALORIE: "低卡路里",
    NutritionFocus.BALANCED: "营养均衡",
    NutritionFocus.NO_PREFERENCE: "无特殊要求",
}


def describe_requirements(payload: PreferencePayload) -> Dict[str, str]:
    """Translate a payload into the human-readable labels used in prompts."""
    if payload.spicy_tolerance is None:
        spicy = "无特殊要求"
    else:
        spicy = SPICE_TOLERANCE_LABELS[payload.spicy_tolerance]

    return {
        "budget": f"{payload.budget_range.value}元" if payload.budget_range else "不限",
        "cuisine": ", ".join(payload.cuisine_preference) or "无特殊偏好",
        "spicy": spicy,
        "restrictions": ", ".join(payload.dietary_restrictions) or "无忌口",
        "preferred": ", ".join(payload.preferred_ingredients) or "无特殊偏好",
        "nutrition": NUTRITION_FOCUS_LABELS[
            payload.nutrition_focus or NutritionFocus.NO_PREFERENCE
        ],
        "purpose": payload.meal_purpose.value if payload.meal_purpose else MealPurpose.MAIN_MEAL.value,
        "count": str(payload.number_of_recommendations),
    }


def get_selection_prompt(catalog: MenuCatalog, payload: PreferencePayload) -> str:
    """Build the single user prompt asking the model for a JSON array of ids."""
    labels = describe_requirements(payload)
    return f"""请根据以下用户需求，从菜单中挑选最合适的菜品。

用户需求：
- 预算范围：{labels["budget"]}
- 菜系偏好：{labels["cuisine"]}
- 辣度承受：{labels["spicy"]}
- 饮食忌口：{labels["restrictions"]}
- 偏好食材：{labels["preferred"]}
- 营养关注：{labels["nutrition"]}
- 用餐目的：{labels["purpose"]}
- 推荐数量：{labels["count"]}道

可选菜单（JSON格式）：
{catalog.to_prompt_listing()}

挑选时请考虑：
1. 营养搭配均衡（主食、菜品、汤品等）
2. 口味层次丰富，不要都是同一种口味
3. 价格搭配合理，注重性价比
4. 严格遵守用户的饮食限制和偏好

只返回菜品ID组成的JSON数组，格式为：["id1", "id2", "id3"]
不要包含任何其他文字说明。"""
