"""Conversation step enumeration."""
from enum import Enum


class ConversationStep(str, Enum):
    """Steps of the ordering dialog."""

    WELCOME = "welcome"  # Session created, greeting not shown yet
    CUISINE_PREFERENCE = "cuisine-preference"  # Chinese or western food
    BUDGET = "budget"  # Budget band selection
    RECOMMENDATIONS = "recommendations"  # Free-form preference turns, never left once entered

    def __str__(self) -> str:
        """Return the string value of the step."""
        return self.value
