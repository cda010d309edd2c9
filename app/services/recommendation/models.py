"""Recommendation request models."""
import logging
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_RECOMMENDATION_COUNT = 6


class BudgetRange(str, Enum):
    """Budget bands offered to the customer.

    The labels are what the customer picks. The rule strategy filters on
    its own price cut-offs (see rules.within_budget), so a 10-30 pick
    means dishes under 20.
    """

    LOW = "10-30"
    MEDIUM = "30-50"
    HIGH = "50-100"

    @classmethod
    def _missing_(cls, value: object) -> Optional["BudgetRange"]:
        aliases = {"low": cls.LOW, "medium": cls.MEDIUM, "high": cls.HIGH}
        if isinstance(value, str):
            return aliases.get(value.strip().lower())
        return None

    def __str__(self) -> str:
        return self.value


class MealPurpose(str, Enum):
    MAIN_MEAL = "正餐"
    SNACK = "小食"
    AFTERNOON_TEA = "下午茶"
    LATE_NIGHT = "夜宵"
    GATHERING = "聚餐"
    WORK_MEAL = "工作餐"
    HEALTHY_MEAL = "健康餐"


class NutritionFocus(str, Enum):
    HIGH_PROTEIN = "high_protein"
    LOW_CALORIE = "low_calorie"
    BALANCED = "balanced"
    NO_PREFERENCE = "no_preference"


class PreferencePayload(BaseModel):
    """Structured preferences the recommendation engine works from."""

    budget_range: Optional[BudgetRange] = None
    cuisine_preference: List[str] = []
    spicy_tolerance: Optional[int] = Field(default=None, ge=0, le=2)
    dietary_restrictions: List[str] = []
    preferred_ingredients: List[str] = []
    meal_purpose: Optional[MealPurpose] = None
    nutrition_focus: Optional[NutritionFocus] = None
    number_of_recommendations: int = Field(
        default=DEFAULT_RECOMMENDATION_COUNT, ge=1, le=10
    )

    @field_validator("budget_range", mode="before")
    @classmethod
    def accept_band_aliases(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in ("low", "medium", "high"):
            return BudgetRange(value)
        return value

    @classmethod
    def from_tool_arguments(cls, arguments: Any) -> "PreferencePayload":
        """Build a payload from model tool arguments, dropping invalid fields."""
        if not isinstance(arguments, dict):
            arguments = {}
        try:
            return cls.model_validate(arguments)
        except ValidationError as e:
            invalid = {err["loc"][0] for err in e.errors() if err.get("loc")}
            logger.warning(
                f"[PREFERENCES] Dropping invalid tool arguments: {sorted(map(str, invalid))}"
            )
            cleaned = {k: v for k, v in arguments.items() if k not in invalid}
            return cls.model_validate(cleaned)
