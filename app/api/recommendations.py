"""Stateless recommendation endpoint."""
import logging
from enum import Enum
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.core.dependencies import get_agent_service, get_catalog
from app.services.agent.agent import AgentService
from app.services.menu.base import DishRecord
from app.services.menu.catalog import MenuCatalog
from app.services.recommendation.engine import (
    CandidateStrategy,
    ModelCandidateStrategy,
    RecommendationEngine,
    RuleBasedStrategy,
)
from app.services.recommendation.models import PreferencePayload

router = APIRouter()
logger = logging.getLogger(__name__)


class StrategyName(str, Enum):
    RULES = "rules"
    MODEL = "model"


class RecommendationResponse(BaseModel):
    strategy: StrategyName
    dishes: List[DishRecord]


@router.post("/api/recommendations", response_model=RecommendationResponse)
async def recommend(
    payload: PreferencePayload,
    strategy: StrategyName = StrategyName.RULES,
    catalog: MenuCatalog = Depends(get_catalog),
    agent_service: AgentService = Depends(get_agent_service),
):
    """Recommend dishes for a preference payload without a conversation."""
    if strategy == StrategyName.MODEL:
        candidate_strategy: CandidateStrategy = ModelCandidateStrategy(
            catalog, agent_service.client
        )
    else:
        candidate_strategy = RuleBasedStrategy(catalog)

    try:
        dishes = await RecommendationEngine(catalog, candidate_strategy).recommend(payload)
    except Exception as e:
        logger.error(
            f"[RECOMMEND] Error recommending - Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Error recommending dishes: {str(e)}")

    logger.info(f"[RECOMMEND] {strategy.value}: {[dish.id for dish in dishes]}")
    return RecommendationResponse(strategy=strategy, dishes=dishes)
