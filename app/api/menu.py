"""Menu API endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from app.core.dependencies import get_menu_repository
from app.services.agent.constants import DISH_QUESTIONS
from app.services.menu.base import DishRecord
from app.services.menu.catalog import nutrition_summary, spice_label
from app.services.menu.repository import MenuRepository

router = APIRouter()
logger = logging.getLogger(__name__)


class MenuResponse(BaseModel):
    """Menu response model."""
    items: List[DishRecord]
    categories: List[str] = []


class DishDetailResponse(BaseModel):
    """Dish details with display labels."""
    dish: DishRecord
    spice_label: str
    nutrition_summary: str
    questions: List[str] = []


@router.get("/api/menu", response_model=MenuResponse)
async def get_menu(
    request: Request,
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Get the full menu."""
    logger.info(
        f"[MENU] Request received - Client: {request.client.host if request.client else 'unknown'}"
    )
    try:
        catalog = await menu_repository.get_catalog()
        logger.info(f"[MENU] Menu loaded - {len(catalog)} items, {len(catalog.categories)} categories")
        return MenuResponse(items=catalog.dishes, categories=catalog.categories)
    except Exception as e:
        logger.error(
            f"[MENU] Error fetching menu - Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Error fetching menu: {str(e)}")


@router.get("/api/menu/{dish_id}", response_model=DishDetailResponse)
async def get_dish(
    dish_id: str,
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Get one dish for the details view."""
    dish = await menu_repository.get_dish(dish_id)
    if dish is None:
        logger.warning(f"[MENU] Dish not found: {dish_id}")
        raise HTTPException(status_code=404, detail=f"Dish '{dish_id}' not found")
    return DishDetailResponse(
        dish=dish,
        spice_label=spice_label(dish.spicy_level),
        nutrition_summary=nutrition_summary(dish),
        questions=list(DISH_QUESTIONS),
    )
