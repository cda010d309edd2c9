"""FastAPI dependencies."""
from functools import lru_cache

from fastapi import Depends

from app.core.config import settings
from app.services.agent.agent import AgentService
from app.services.chat_session.manager import ChatSessionManager
from app.services.menu.catalog import MenuCatalog
from app.services.menu.in_memory_menu import InMemoryMenuProvider
from app.services.menu.repository import MenuRepository


@lru_cache
def get_menu_repository() -> MenuRepository:
    """Get the process-wide menu repository."""
    return MenuRepository(provider=InMemoryMenuProvider(menu_file=settings.menu_file))


@lru_cache
def get_agent_service() -> AgentService:
    """Get the shared agent service (one OpenAI client per process)."""
    return AgentService()


async def get_catalog(
    menu_repository: MenuRepository = Depends(get_menu_repository),
) -> MenuCatalog:
    return await menu_repository.get_catalog()


async def get_session_manager(
    catalog: MenuCatalog = Depends(get_catalog),
    agent_service: AgentService = Depends(get_agent_service),
) -> ChatSessionManager:
    return ChatSessionManager(agent_service, catalog)
