"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api import chat, health, menu, recommendations
from app.core.config import settings
from app.core.dependencies import get_menu_repository
from app.core.logging import setup_logging
from app.services.chat_session.manager import close_all_sessions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    catalog = await get_menu_repository().get_catalog()
    logger.info(f"[STARTUP] Menu assistant ready with {len(catalog)} dishes")
    yield
    # Shutdown
    closed = close_all_sessions()
    logger.info(f"[SHUTDOWN] Closed {closed} chat sessions")


app = FastAPI(
    title="Menu Assistant",
    description="Conversational assistant for food recommendations and ordering",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(menu.router, tags=["menu"])
app.include_router(chat.router, tags=["chat"])
app.include_router(recommendations.router, tags=["recommendations"])


@app.get("/")
async def root():
    return {"message": "Menu Assistant API", "version": "0.1.0"}


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port)
