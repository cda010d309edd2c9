"""Chat session models."""
import logging
from typing import Any, Dict, Optional

from app.services.agent.constants import (
    CART_ACK_TEMPLATE,
    CHECKOUT_MESSAGE,
    EMPTY_CART_CHECKOUT_MESSAGE,
)
from app.services.agent.orchestrator import ConversationOrchestrator
from app.services.agent.state import ConversationTurn
from app.services.menu.catalog import MenuCatalog
from app.services.ordering.cart import CartModel
from app.services.ordering.models import CartLine

logger = logging.getLogger(__name__)


class ChatSession:
    """One conversation plus the cart built alongside it."""

    def __init__(
        self,
        session_id: str,
        orchestrator: ConversationOrchestrator,
        catalog: MenuCatalog,
    ):
        self.session_id = session_id
        self.orchestrator = orchestrator
        self.catalog = catalog
        self.cart = CartModel(catalog)

    def add_to_cart(self, dish_id: str) -> CartLine:
        """Add one unit and acknowledge it in the conversation.

        Raises DishNotFoundError for ids outside the catalog.
        """
        dish = self.catalog.require(dish_id)
        line = self.cart.add(dish)
        self.orchestrator.add_system_turn(CART_ACK_TEMPLATE.format(name=dish.name))
        return line

    async def ask_about_dish(self, dish_id: str, question: str) -> Optional[ConversationTurn]:
        """Ask a quick question about a catalog dish.

        Raises DishNotFoundError for ids outside the catalog.
        """
        dish = self.catalog.require(dish_id)
        return await self.orchestrator.ask_about_dish(dish, question)

    def set_cart_quantity(self, dish_id: str, quantity: int) -> None:
        self.cart.set_quantity(dish_id, quantity)

    def remove_from_cart(self, dish_id: str) -> None:
        self.cart.remove(dish_id)

    def clear_cart(self) -> None:
        self.cart.clear()

    def checkout(self) -> Optional[ConversationTurn]:
        """Close the order with a farewell turn. No payment happens here."""
        if not self.cart.lines:
            return self.orchestrator.add_assistant_turn(EMPTY_CART_CHECKOUT_MESSAGE)
        logger.info(
            f"[SESSION] Checkout {self.session_id} - {self.cart.item_count} items, "
            f"total {self.cart.total_price}"
        )
        return self.orchestrator.add_assistant_turn(CHECKOUT_MESSAGE)

    def close(self) -> None:
        self.orchestrator.close()

    def snapshot(self) -> Dict[str, Any]:
        """Observable state: turns, step, processing flag and cart."""
        return {
            "session_id": self.session_id,
            "current_step": self.orchestrator.current_step,
            "is_processing": self.orchestrator.is_processing,
            "turns": self.orchestrator.turns,
            "cart": self.cart.lines,
            "cart_total": self.cart.total_price,
            "cart_item_count": self.cart.item_count,
        }
