"""Conversation state machine driving the ordering dialog."""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from app.core.config import Settings, settings
from app.services.agent.constants import (
    BUDGET_DEGRADED_MESSAGE,
    BUDGET_OPTIONS,
    BUDGET_QUESTION,
    CUISINE_LABELS,
    CUISINE_OPTIONS,
    FREE_TEXT_DEGRADED_MESSAGE,
    GREETING_MESSAGE,
    NO_MATCH_MESSAGE,
    RECOMMENDATION_FALLBACK_FRAMING,
    RECOMMENDATION_REQUEST_TEMPLATE,
)
from app.services.agent.dish_questions import answer_dish_question
from app.services.agent.intent import IntentClassifier, KeywordIntentClassifier
from app.services.agent.pipeline import RecommendationPipeline
from app.services.agent.stages import ConversationStep
from app.services.agent.state import (
    ConversationState,
    ConversationTurn,
    CuisineType,
    RenderHint,
    TurnListener,
    TurnRole,
)
from app.services.menu.base import DishRecord
from app.services.recommendation.models import BudgetRange, PreferencePayload
from app.services.recommendation.prompt import RECOMMEND_MENU_TOOL_NAME

logger = logging.getLogger(__name__)


class SessionClosedError(Exception):
    """The session was torn down while a call was suspended."""


@dataclass
class _Draft:
    """Assistant turn content produced by a model round trip."""

    content: str
    dishes: List[DishRecord] = field(default_factory=list)
    preferences: Optional[PreferencePayload] = None


class ConversationOrchestrator:
    """Owns the turns, profile and current step of one session.

    Input handlers are serialized: a new input waits until the previous
    one has appended its assistant turn.
    """

    def __init__(
        self,
        session_id: str,
        pipeline: RecommendationPipeline,
        classifier: Optional[IntentClassifier] = None,
        config: Optional[Settings] = None,
    ):
        self.state = ConversationState(session_id=session_id)
        self.pipeline = pipeline
        self.agent = pipeline.agent
        self.classifier = classifier or KeywordIntentClassifier()
        self.config = config or settings
        self.is_processing = False
        self._closed = False
        self._lock = asyncio.Lock()
        self._listeners: List[TurnListener] = []

    @property
    def current_step(self) -> ConversationStep:
        return self.state.current_step

    @property
    def turns(self) -> List[ConversationTurn]:
        return list(self.state.turns)

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: TurnListener) -> None:
        """Register a callback invoked for every appended turn."""
        self._listeners.append(listener)

    def close(self) -> None:
        """Tear down the session; pending results are discarded."""
        self._closed = True
        logger.info(f"[ORCHESTRATOR] Session {self.state.session_id} closed")

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError(self.state.session_id)

    def _append(
        self,
        role: TurnRole,
        content: str,
        options: Optional[List[str]] = None,
        dishes: Optional[List[DishRecord]] = None,
    ) -> ConversationTurn:
        render_hint = None
        if dishes:
            render_hint = RenderHint.MENU_RECOMMENDATIONS
        elif options:
            render_hint = RenderHint.OPTIONS_SELECTOR
        turn = self.state.add_turn(
            ConversationTurn(
                role=role,
                content=content,
                options=options,
                attached_dishes=dishes or None,
                render_hint=render_hint,
            )
        )
        for listener in self._listeners:
            listener(turn)
        return turn

    def _set_step(self, step: ConversationStep) -> None:
        old_step = self.state.current_step
        # Recommendations is never left once entered
        if old_step == ConversationStep.RECOMMENDATIONS:
            return
        self.state.current_step = step
        if old_step != step:
            logger.info(f"[STEP TRANSITION] {old_step.value} -> {step.value}")

    def add_system_turn(self, content: str) -> Optional[ConversationTurn]:
        if self._closed:
            return None
        return self._append(TurnRole.SYSTEM, content)

    def add_assistant_turn(self, content: str) -> Optional[ConversationTurn]:
        if self._closed:
            return None
        return self._append(TurnRole.ASSISTANT, content)

    async def start_session(self) -> Optional[ConversationTurn]:
        """Greet the customer and ask for a cuisine."""
        async with self._lock:
            if self._closed or self.state.current_step != ConversationStep.WELCOME:
                logger.debug("[ORCHESTRATOR] start_session ignored")
                return None
            turn = self._append(
                TurnRole.ASSISTANT, GREETING_MESSAGE, options=list(CUISINE_OPTIONS)
            )
            self._set_step(ConversationStep.CUISINE_PREFERENCE)
            return turn

    async def handle_option_selection(self, option: str) -> Optional[ConversationTurn]:
        """Dispatch a fixed-option selection by the current step."""
        async with self._lock:
            if self._closed:
                return None
            step = self.state.current_step
            if step == ConversationStep.CUISINE_PREFERENCE and option in CUISINE_OPTIONS:
                return await self._run(self._select_cuisine, option)
            if step == ConversationStep.BUDGET and option in BUDGET_OPTIONS:
                return await self._run(self._select_budget, option)
            logger.debug(f"[ORCHESTRATOR] Option '{option}' ignored in step {step.value}")
            return None

    async def handle_free_text_input(self, text: str) -> Optional[ConversationTurn]:
        """Forward free text to the model with the full conversation history."""
        message = text.strip()
        if not message:
            return None
        async with self._lock:
            if self._closed:
                return None
            return await self._run(self._answer_free_text, message)

    async def ask_about_dish(
        self, dish: DishRecord, question: str
    ) -> Optional[ConversationTurn]:
        """Answer a quick question about one dish. The step never changes."""
        message = question.strip()
        if not message:
            return None
        async with self._lock:
            if self._closed:
                return None
            self._append(TurnRole.USER, message)
            self.is_processing = True
            try:
                await asyncio.sleep(self.config.thinking_delay_seconds)
                self._ensure_open()
                logger.info(f"[ORCHESTRATOR] Question about {dish.id}: '{message}'")
                return self._append(TurnRole.ASSISTANT, answer_dish_question(dish, message))
            except SessionClosedError:
                logger.info(
                    f"[ORCHESTRATOR] Session {self.state.session_id} closed mid-turn, result discarded"
                )
                return None
            finally:
                self.is_processing = False

    async def _run(self, handler, argument: str) -> Optional[ConversationTurn]:
        try:
            return await handler(argument)
        except SessionClosedError:
            logger.info(
                f"[ORCHESTRATOR] Session {self.state.session_id} closed mid-turn, result discarded"
            )
            return None
        finally:
            self.is_processing = False

    async def _select_cuisine(self, option: str) -> ConversationTurn:
        self._append(TurnRole.USER, f"我选择：{option}")
        self.is_processing = True
        await asyncio.sleep(self.config.thinking_delay_seconds)
        self._ensure_open()
        self.state.user_profile.cuisine_type = CUISINE_OPTIONS[option]
        turn = self._append(TurnRole.ASSISTANT, BUDGET_QUESTION, options=list(BUDGET_OPTIONS))
        self._set_step(ConversationStep.BUDGET)
        return turn

    async def _select_budget(self, option: str) -> ConversationTurn:
        history = self.state.to_history()
        self._append(TurnRole.USER, f"我选择：{option}元")
        self.is_processing = True
        budget = BudgetRange(option)
        cuisine = self.state.user_profile.cuisine_type or CuisineType.CHINESE
        request = RECOMMENDATION_REQUEST_TEMPLATE.format(
            cuisine=CUISINE_LABELS[cuisine], budget=budget.value
        )
        try:
            draft = await self._converse(history, request)
        except SessionClosedError:
            raise
        except Exception:
            logger.warning("[ORCHESTRATOR] Budget recommendation failed", exc_info=True)
            self._ensure_open()
            return self._append(
                TurnRole.ASSISTANT, BUDGET_DEGRADED_MESSAGE.format(budget=budget.value)
            )
        self._ensure_open()
        self.state.user_profile.budget = budget
        turn = self._complete(draft)
        self._set_step(ConversationStep.RECOMMENDATIONS)
        return turn

    async def _answer_free_text(self, message: str) -> ConversationTurn:
        history = self.state.to_history()
        self._append(TurnRole.USER, message)
        self.is_processing = True
        try:
            draft = await self._converse(history, message)
        except SessionClosedError:
            raise
        except Exception:
            logger.warning("[ORCHESTRATOR] Free-text turn failed", exc_info=True)
            self._ensure_open()
            return self._append(TurnRole.ASSISTANT, FREE_TEXT_DEGRADED_MESSAGE)
        self._ensure_open()
        turn = self._complete(draft)
        if draft.dishes:
            self._set_step(ConversationStep.RECOMMENDATIONS)
        return turn

    def _complete(self, draft: _Draft) -> ConversationTurn:
        if draft.preferences is not None:
            self.state.user_profile.last_preferences = draft.preferences
        return self._append(TurnRole.ASSISTANT, draft.content, dishes=draft.dishes)

    async def _converse(self, history: List[Dict[str, str]], message: str) -> _Draft:
        """Chat call, then optional selection and narration stages."""
        messages = self.agent.build_messages(history, message)
        force_tool = self.classifier.is_recommendation_request(message)
        reply = await self.agent.reply(messages, force_tool=force_tool)
        self._ensure_open()

        invocation = reply.tool_invocation
        if invocation is None or invocation.name != RECOMMEND_MENU_TOOL_NAME:
            return _Draft(content=reply.content or FREE_TEXT_DEGRADED_MESSAGE)

        artifact = await self.pipeline.select(invocation)
        self._ensure_open()
        if not artifact.dishes:
            return _Draft(content=NO_MATCH_MESSAGE, preferences=artifact.payload)

        try:
            framing = await self.pipeline.narrate(messages, reply, artifact)
        except Exception:
            logger.warning("[ORCHESTRATOR] Narration failed, using fixed framing", exc_info=True)
            framing = ""
        self._ensure_open()
        return _Draft(
            content=framing or RECOMMENDATION_FALLBACK_FRAMING,
            dishes=artifact.dishes,
            preferences=artifact.payload,
        )
