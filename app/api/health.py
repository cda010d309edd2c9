"""Health check endpoint."""
import logging

from fastapi import APIRouter, Depends, Request

from app.core.dependencies import get_catalog
from app.services.menu.catalog import MenuCatalog

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(request: Request, catalog: MenuCatalog = Depends(get_catalog)):
    """Health check endpoint."""
    logger.debug(
        f"[HEALTH] Health check requested - Client: {request.client.host if request.client else 'unknown'}"
    )
    return {"status": "healthy", "dishes": len(catalog)}
