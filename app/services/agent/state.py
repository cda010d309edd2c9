"""Conversation state management."""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from app.services.agent.stages import ConversationStep
from app.services.menu.base import DishRecord
from app.services.recommendation.models import BudgetRange, PreferencePayload


class TurnRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class RenderHint(str, Enum):
    """Which interactive widget accompanies a turn."""

    OPTIONS_SELECTOR = "options-selector"
    MENU_RECOMMENDATIONS = "menu-recommendations"


class CuisineType(str, Enum):
    CHINESE = "chinese"
    WESTERN = "western"


class ConversationTurn(BaseModel):
    """One message in the conversation."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: TurnRole
    content: str
    options: Optional[List[str]] = None
    attached_dishes: Optional[List[DishRecord]] = None
    render_hint: Optional[RenderHint] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UserProfile(BaseModel):
    """Preferences accumulated across the dialog."""

    cuisine_type: Optional[CuisineType] = None
    budget: Optional[BudgetRange] = None
    last_preferences: Optional[PreferencePayload] = None


TurnListener = Callable[[ConversationTurn], None]


class ConversationState(BaseModel):
    """Conversation state for one session."""

    session_id: str
    turns: List[ConversationTurn] = []
    current_step: ConversationStep = ConversationStep.WELCOME
    user_profile: UserProfile = Field(default_factory=UserProfile)

    def add_turn(self, turn: ConversationTurn) -> ConversationTurn:
        """Append a turn. Turns are never edited or removed."""
        self.turns.append(turn)
        return turn

    def to_history(self) -> List[Dict[str, str]]:
        """Role/content messages for the model, without system turns."""
        return [
            {"role": turn.role.value, "content": turn.content}
            for turn in self.turns
            if turn.role != TurnRole.SYSTEM
        ]
