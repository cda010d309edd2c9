"""Chat session manager."""
import logging
import uuid
from typing import Dict, Optional

from app.core.config import Settings, settings
from app.services.agent.agent import AgentService
from app.services.agent.orchestrator import ConversationOrchestrator
from app.services.agent.pipeline import RecommendationPipeline
from app.services.chat_session.models import ChatSession
from app.services.menu.catalog import MenuCatalog
from app.services.recommendation.engine import ModelCandidateStrategy, RecommendationEngine

logger = logging.getLogger(__name__)

# Module-level session storage (persists across requests)
_sessions: Dict[str, ChatSession] = {}


class ChatSessionManager:
    """Creates sessions and keeps them in memory until they are ended."""

    def __init__(
        self,
        agent_service: AgentService,
        catalog: MenuCatalog,
        config: Optional[Settings] = None,
    ):
        self.agent_service = agent_service
        self.catalog = catalog
        self.config = config or settings

    def create_session(self) -> ChatSession:
        session_id = uuid.uuid4().hex
        strategy = ModelCandidateStrategy(
            self.catalog, self.agent_service.client, config=self.config
        )
        engine = RecommendationEngine(self.catalog, strategy, config=self.config)
        pipeline = RecommendationPipeline(self.agent_service, engine)
        orchestrator = ConversationOrchestrator(session_id, pipeline, config=self.config)

        session = ChatSession(session_id, orchestrator, self.catalog)
        _sessions[session_id] = session
        logger.info(f"[SESSION MANAGER] Created session {session_id}")
        return session

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        return _sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """Close and forget a session. Returns False if it was unknown."""
        session = _sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info(f"[SESSION MANAGER] Ended session {session_id}")
        return True


def close_all_sessions() -> int:
    """Close every live session, e.g. on shutdown. Returns how many were closed."""
    count = len(_sessions)
    for session in _sessions.values():
        session.close()
    _sessions.clear()
    return count
