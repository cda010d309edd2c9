"""LLM agent service."""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from app.core.config import Settings, settings
from app.services.agent.prompt import get_system_prompt
from app.services.menu.base import DishRecord
from app.services.recommendation.prompt import RECOMMEND_MENU_TOOL, RECOMMEND_MENU_TOOL_NAME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolInvocation:
    """A structured function call returned by the model."""

    call_id: str
    name: str
    arguments: Dict[str, Any]
    raw_arguments: str


@dataclass(frozen=True)
class AssistantReply:
    """First-pass model answer: plain text, a tool invocation, or both."""

    content: Optional[str]
    tool_invocation: Optional[ToolInvocation] = None


class AgentService:
    """Service for LLM-powered conversation turns."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        config: Optional[Settings] = None,
    ):
        self.config = config or settings
        self.client = client or AsyncOpenAI(
            api_key=self.config.openai_api_key,
            timeout=self.config.openai_timeout,
        )

    def build_messages(
        self, history: List[Dict[str, str]], user_message: str
    ) -> List[Dict[str, Any]]:
        """System instruction, prior turns, then the new user message."""
        return [
            {"role": "system", "content": get_system_prompt(self.config.restaurant_name)},
            *history,
            {"role": "user", "content": user_message},
        ]

    async def reply(
        self, messages: List[Dict[str, Any]], force_tool: bool = False
    ) -> AssistantReply:
        """Ask the model for the next assistant message.

        When force_tool is set the model must call the recommendation tool;
        otherwise calling it is left to the model.
        """
        if force_tool:
            tool_choice: Any = {"type": "function", "function": {"name": RECOMMEND_MENU_TOOL_NAME}}
        else:
            tool_choice = "auto"

        logger.info(
            f"[AGENT INPUT] {len(messages)} messages, force_tool={force_tool}, "
            f"latest: '{messages[-1]['content']}'"
        )
        response = await self.client.chat.completions.create(
            model=self.config.openai_model,
            messages=messages,
            tools=[RECOMMEND_MENU_TOOL],
            tool_choice=tool_choice,
            temperature=self.config.chat_temperature,
            max_tokens=self.config.chat_max_tokens,
        )

        message = response.choices[0].message
        invocation = None
        if message.tool_calls:
            tool_call = message.tool_calls[0]
            raw_arguments = tool_call.function.arguments or "{}"
            invocation = ToolInvocation(
                call_id=tool_call.id,
                name=tool_call.function.name,
                arguments=json.loads(raw_arguments),
                raw_arguments=raw_arguments,
            )
            logger.info(
                f"[AGENT OUTPUT] Tool call {invocation.name} with arguments {raw_arguments}"
            )
        else:
            logger.info(f"[AGENT OUTPUT] Text reply: '{message.content}'")

        return AssistantReply(content=message.content, tool_invocation=invocation)

    async def narrate(
        self,
        messages: List[Dict[str, Any]],
        reply: AssistantReply,
        dishes: List[DishRecord],
    ) -> str:
        """Produce framing text for dishes that were already selected."""
        invocation = reply.tool_invocation
        if invocation is None:
            raise ValueError("narrate() requires a reply carrying a tool invocation")

        tool_result = [
            {
                "id": dish.id,
                "name": dish.name,
                "price": dish.price,
                "category": dish.category,
                "description": dish.description,
            }
            for dish in dishes
        ]
        follow_up = [
            *messages,
            {
                "role": "assistant",
                "content": reply.content,
                "tool_calls": [
                    {
                        "id": invocation.call_id,
                        "type": "function",
                        "function": {
                            "name": invocation.name,
                            "arguments": invocation.raw_arguments,
                        },
                    }
                ],
            },
            {
                "role": "tool",
                "tool_call_id": invocation.call_id,
                "content": json.dumps(tool_result, ensure_ascii=False),
            },
        ]
        response = await self.client.chat.completions.create(
            model=self.config.openai_model,
            messages=follow_up,
            temperature=self.config.chat_temperature,
            max_tokens=self.config.narration_max_tokens,
        )
        return (response.choices[0].message.content or "").strip()
