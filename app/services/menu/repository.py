"""Menu repository."""
import logging
from typing import Optional

from app.services.menu.base import DishRecord, MenuProvider
from app.services.menu.catalog import MenuCatalog

logger = logging.getLogger(__name__)


class MenuRepository:
    """Loads the catalog from a provider once and serves it read-only."""

    def __init__(self, provider: MenuProvider):
        self.provider = provider
        self._catalog: Optional[MenuCatalog] = None

    async def get_catalog(self) -> MenuCatalog:
        """Get the normalized catalog, loading it on first call."""
        if self._catalog is None:
            raw_records = await self.provider.load_raw_records()
            self._catalog = MenuCatalog.from_raw(raw_records)
            dropped = len(raw_records) - len(self._catalog)
            logger.info(
                f"[MENU] Catalog loaded - {len(self._catalog)} dishes, "
                f"{len(self._catalog.categories)} categories, {dropped} records dropped"
            )
        return self._catalog

    async def get_dish(self, dish_id: str) -> Optional[DishRecord]:
        """Get a dish by id."""
        catalog = await self.get_catalog()
        return catalog.find_by_id(dish_id)
