"""Shopping cart."""
import logging
from typing import Callable, Dict, List

from app.services.menu.base import DishRecord
from app.services.menu.catalog import MenuCatalog
from app.services.ordering.models import CartLine

logger = logging.getLogger(__name__)

CartListener = Callable[[List[CartLine]], None]


class CartModel:
    """Selected dishes with quantities; at most one line per dish id."""

    def __init__(self, catalog: MenuCatalog):
        self.catalog = catalog
        self._lines: Dict[str, CartLine] = {}
        self._listeners: List[CartListener] = []

    @property
    def lines(self) -> List[CartLine]:
        """Cart lines in insertion order."""
        return [line.model_copy() for line in self._lines.values()]

    @property
    def total_price(self) -> float:
        """Sum of quantity x price, recomputed on every read."""
        total = 0.0
        for line in self._lines.values():
            dish = self.catalog.find_by_id(line.dish_id)
            if dish is not None:
                total += dish.price * line.quantity
        return round(total, 2)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def quantity_of(self, dish_id: str) -> int:
        line = self._lines.get(dish_id)
        return line.quantity if line else 0

    def subscribe(self, listener: CartListener) -> None:
        """Register a callback invoked with the lines after every change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        lines = self.lines
        for listener in self._listeners:
            listener(lines)

    def add(self, dish: DishRecord) -> CartLine:
        """Add one unit of a dish."""
        line = self._lines.get(dish.id)
        if line is None:
            line = CartLine(dish_id=dish.id, quantity=1)
            self._lines[dish.id] = line
        else:
            line.quantity += 1
        logger.info(f"[CART] Added {dish.id} - quantity now {line.quantity}")
        self._notify()
        return line.model_copy()

    def set_quantity(self, dish_id: str, quantity: int) -> None:
        """Set the quantity of an existing line; 0 removes it."""
        if quantity < 0:
            raise ValueError(f"Quantity must not be negative, got {quantity}")
        if dish_id not in self._lines:
            logger.debug(f"[CART] set_quantity ignored, {dish_id} not in cart")
            return
        if quantity == 0:
            del self._lines[dish_id]
        else:
            self._lines[dish_id].quantity = quantity
        logger.info(f"[CART] Set {dish_id} quantity to {quantity}")
        self._notify()

    def remove(self, dish_id: str) -> None:
        if self._lines.pop(dish_id, None) is not None:
            logger.info(f"[CART] Removed {dish_id}")
            self._notify()

    def clear(self) -> None:
        self._lines.clear()
        logger.info("[CART] Cleared")
        self._notify()
