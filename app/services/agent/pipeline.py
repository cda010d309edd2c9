"""Two-stage recommendation turn: select dishes, then narrate them."""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from app.services.agent.agent import AgentService, AssistantReply, ToolInvocation
from app.services.menu.base import DishRecord
from app.services.recommendation.engine import RecommendationEngine
from app.services.recommendation.models import PreferencePayload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionArtifact:
    """Validated output of the selection stage, input of the narration stage."""

    invocation: ToolInvocation
    payload: PreferencePayload
    dishes: List[DishRecord] = field(default_factory=list)


class RecommendationPipeline:
    """Runs the engine on a tool invocation and frames the result in words."""

    def __init__(self, agent: AgentService, engine: RecommendationEngine):
        self.agent = agent
        self.engine = engine

    async def select(self, invocation: ToolInvocation) -> SelectionArtifact:
        payload = PreferencePayload.from_tool_arguments(invocation.arguments)
        dishes = await self.engine.recommend(payload)
        logger.info(
            f"[PIPELINE] Selected {[dish.id for dish in dishes]} for {payload.model_dump(exclude_none=True)}"
        )
        return SelectionArtifact(invocation=invocation, payload=payload, dishes=dishes)

    async def narrate(
        self,
        messages: List[Dict[str, Any]],
        reply: AssistantReply,
        artifact: SelectionArtifact,
    ) -> str:
        return await self.agent.narrate(messages, reply, artifact.dishes)
