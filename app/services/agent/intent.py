"""Recommendation-intent classification."""
import re
from typing import Iterable, Optional, Protocol

from app.services.agent.constants import RECOMMENDATION_KEYWORDS


class IntentClassifier(Protocol):
    """Decides whether a message asks for dish recommendations."""

    def is_recommendation_request(self, message: str) -> bool:
        ...


class KeywordIntentClassifier:
    """Keyword heuristic: any listed keyword in the message counts."""

    def __init__(self, keywords: Optional[Iterable[str]] = None):
        words = [w.lower() for w in (keywords or RECOMMENDATION_KEYWORDS) if w]
        self._pattern = re.compile("|".join(re.escape(w) for w in words)) if words else None

    def is_recommendation_request(self, message: str) -> bool:
        if self._pattern is None:
            return False
        return self._pattern.search(message.lower()) is not None
