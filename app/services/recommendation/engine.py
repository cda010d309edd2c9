"""Recommendation engine: candidate strategies wrapped in validation, top-up and fallback."""
import json
import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

from openai import AsyncOpenAI

from app.core.config import Settings, settings
from app.services.menu.base import DishRecord
from app.services.menu.catalog import MenuCatalog
from app.services.recommendation.models import PreferencePayload
from app.services.recommendation.prompt import SELECTION_SYSTEM_PROMPT, get_selection_prompt
from app.services.recommendation.rules import recommend_by_rules

logger = logging.getLogger(__name__)


class CandidateStrategy(ABC):
    """Proposes raw candidate dish ids for a payload."""

    name = "base"

    @abstractmethod
    async def propose(self, payload: PreferencePayload) -> List[str]:
        """Return candidate ids; may include unknown ids or duplicates."""
        pass


class RuleBasedStrategy(CandidateStrategy):
    """Deterministic filtering and ranking, no external calls."""

    name = "rules"

    def __init__(self, catalog: MenuCatalog):
        self.catalog = catalog

    async def propose(self, payload: PreferencePayload) -> List[str]:
        return [dish.id for dish in recommend_by_rules(self.catalog, payload)]


def _strip_code_fence(content: str) -> str:
    if content.startswith("```"):
        content = content.split("\n", 1)[1] if "\n" in content else ""
        if content.rstrip().endswith("```"):
            content = content.rstrip()[:-3]
    return content.strip()


class ModelCandidateStrategy(CandidateStrategy):
    """Asks the language model to pick dish ids from the full catalog."""

    name = "model"

    def __init__(
        self,
        catalog: MenuCatalog,
        client: AsyncOpenAI,
        config: Optional[Settings] = None,
    ):
        self.catalog = catalog
        self.client = client
        self.config = config or settings

    async def propose(self, payload: PreferencePayload) -> List[str]:
        response = await self.client.chat.completions.create(
            model=self.config.openai_model,
            messages=[
                {"role": "system", "content": SELECTION_SYSTEM_PROMPT},
                {"role": "user", "content": get_selection_prompt(self.catalog, payload)},
            ],
            temperature=self.config.chat_temperature,
            max_tokens=self.config.selection_max_tokens,
        )
        content = response.choices[0].message.content
        logger.info(f"[ENGINE] Model selection output: {content!r}")
        return self.parse_candidate_ids(content)

    def parse_candidate_ids(self, content: Optional[str]) -> List[str]:
        """Parse a JSON array of ids; anything else yields the classic combo."""
        text = _strip_code_fence((content or "").strip()) or "[]"
        try:
            parsed: Any = json.loads(text)
        except json.JSONDecodeError:
            parsed = None
        if not isinstance(parsed, list):
            logger.warning("[ENGINE] Could not parse model selection, using classic combo")
            return list(self.config.classic_combo_ids)
        return [str(item) for item in parsed if isinstance(item, (str, int))]


def top_up_score(dish: DishRecord) -> float:
    """Protein per square root of price; only meaningful for price > 0."""
    return dish.protein / math.sqrt(dish.price)


class RecommendationEngine:
    """Turns a preference payload into a bounded list of catalog dishes.

    Whatever strategy proposes candidates, the result is validated against
    the catalog, deduplicated, truncated and topped up. If the strategy
    raises, the configured default combo is returned instead.
    """

    def __init__(
        self,
        catalog: MenuCatalog,
        strategy: CandidateStrategy,
        config: Optional[Settings] = None,
    ):
        self.catalog = catalog
        self.strategy = strategy
        self.config = config or settings

    async def recommend(self, payload: PreferencePayload) -> List[DishRecord]:
        count = payload.number_of_recommendations
        try:
            candidate_ids = await self.strategy.propose(payload)
        except Exception:
            logger.warning(
                f"[ENGINE] {self.strategy.name} strategy failed, using default combo",
                exc_info=True,
            )
            return self.default_combo(count)

        selected = self.validate(candidate_ids, count)
        result = self.top_up(selected, count)
        logger.info(
            f"[ENGINE] {self.strategy.name}: {len(candidate_ids)} candidates, "
            f"{len(selected)} valid, {len(result)} returned"
        )
        return result

    def validate(self, candidate_ids: Iterable[str], count: int) -> List[DishRecord]:
        """Resolve ids against the catalog, dropping unknown and repeated ids."""
        selected: List[DishRecord] = []
        seen = set()
        for dish_id in candidate_ids:
            dish = self.catalog.find_by_id(dish_id)
            if dish is None:
                logger.debug(f"[ENGINE] Dropping unknown id: {dish_id}")
                continue
            if dish.id in seen:
                continue
            seen.add(dish.id)
            selected.append(dish)
        return selected[:count]

    def top_up(self, selected: List[DishRecord], count: int) -> List[DishRecord]:
        """Fill a short result with the best protein/sqrt(price) dishes not yet chosen."""
        missing = count - len(selected)
        if missing <= 0:
            return selected[:count]
        chosen = {dish.id for dish in selected}
        pool = [d for d in self.catalog if d.id not in chosen and d.price > 0]
        pool.sort(key=top_up_score, reverse=True)
        return selected + pool[:missing]

    def default_combo(self, count: int) -> List[DishRecord]:
        return self.validate(self.config.default_combo_ids, count)
