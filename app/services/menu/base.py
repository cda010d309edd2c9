"""Dish models and the menu provider interface."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Nutrition(BaseModel):
    """Per-serving nutrition facts."""

    model_config = ConfigDict(frozen=True)

    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    fat: float = Field(ge=0)
    carbs: float = Field(ge=0)


class Review(BaseModel):
    """Customer review attached to a dish."""

    model_config = ConfigDict(frozen=True)

    id: str
    rating: int = Field(ge=0, le=5)
    comment: str = ""
    author: str = ""


class DishRecord(BaseModel):
    """Normalized catalog dish. Never mutated after load."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    price: float = Field(ge=0)
    category: str = "其他"
    spicy_level: int = Field(default=0, ge=0, le=2)
    ingredients: Tuple[str, ...] = ()
    nutrition: Optional[Nutrition] = None
    reviews: Tuple[Review, ...] = ()
    image: Optional[str] = None

    @property
    def protein(self) -> float:
        """Protein grams, 0 when nutrition is unknown."""
        return self.nutrition.protein if self.nutrition else 0.0


class MenuProvider(ABC):
    """Abstract base class for menu providers."""

    @abstractmethod
    async def load_raw_records(self) -> List[Dict[str, Any]]:
        """Load raw, not yet normalized dish records."""
        pass
