"""Order models."""
from pydantic import BaseModel, Field


class CartLine(BaseModel):
    """One dish in the cart."""

    dish_id: str
    quantity: int = Field(default=1, ge=1)
