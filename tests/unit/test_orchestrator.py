"""Unit tests for the conversation orchestrator."""
import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from app.services.agent.constants import (
    BUDGET_QUESTION,
    DISH_ANSWER_DEFAULT,
    DISH_ANSWER_GREASY,
    DISH_ANSWER_SPICY_ADVICE_HOT,
    DISH_ANSWER_SPICY_ADVICE_MILD,
    DISH_ANSWER_SUITABILITY,
    FREE_TEXT_DEGRADED_MESSAGE,
    GREETING_MESSAGE,
    NO_MATCH_MESSAGE,
    RECOMMENDATION_FALLBACK_FRAMING,
)
from app.services.agent.dish_questions import answer_dish_question
from app.services.agent.orchestrator import ConversationOrchestrator
from app.services.agent.pipeline import RecommendationPipeline
from app.services.agent.stages import ConversationStep
from app.services.agent.state import CuisineType, RenderHint, TurnRole
from app.services.recommendation.models import BudgetRange


async def _reach_budget_step(orchestrator):
    await orchestrator.start_session()
    await orchestrator.handle_option_selection("中餐")


def _roles(orchestrator):
    return [turn.role for turn in orchestrator.turns]


class TestGuidedFlow:
    """Test welcome -> cuisine -> budget -> recommendations."""

    @pytest.mark.asyncio
    async def test_start_session_greets_once(self, orchestrator):
        turn = await orchestrator.start_session()

        assert turn.content == GREETING_MESSAGE
        assert turn.options == ["中餐", "西餐"]
        assert turn.render_hint == RenderHint.OPTIONS_SELECTOR
        assert orchestrator.current_step == ConversationStep.CUISINE_PREFERENCE

        assert await orchestrator.start_session() is None
        assert len(orchestrator.turns) == 1

    @pytest.mark.asyncio
    async def test_cuisine_selection_asks_budget(self, orchestrator):
        await _reach_budget_step(orchestrator)

        user_turn, budget_turn = orchestrator.turns[1:]
        assert user_turn.role == TurnRole.USER
        assert user_turn.content == "我选择：中餐"
        assert budget_turn.content == BUDGET_QUESTION
        assert budget_turn.options == ["10-30", "30-50", "50-100"]
        assert orchestrator.state.user_profile.cuisine_type == CuisineType.CHINESE
        assert orchestrator.current_step == ConversationStep.BUDGET
        assert orchestrator.is_processing is False

    @pytest.mark.asyncio
    async def test_budget_selection_recommends(
        self, orchestrator, mock_openai, tool_completion, completion
    ):
        """Test 中餐 then 30-50 ends with dishes attached in the recommendations step."""
        mock_openai.chat.completions.create.side_effect = [
            tool_completion({"budget_range": "30-50", "number_of_recommendations": 2}),
            completion('["braised-pork", "kungpao-chicken"]'),
            completion("为您推荐两道下饭菜"),
        ]
        await _reach_budget_step(orchestrator)

        turn = await orchestrator.handle_option_selection("30-50")

        assert _roles(orchestrator)[1:] == [
            TurnRole.USER, TurnRole.ASSISTANT, TurnRole.USER, TurnRole.ASSISTANT,
        ]
        assert orchestrator.turns[3].content == "我选择：30-50元"
        assert turn.content == "为您推荐两道下饭菜"
        assert [dish.id for dish in turn.attached_dishes] == ["braised-pork", "kungpao-chicken"]
        assert turn.render_hint == RenderHint.MENU_RECOMMENDATIONS
        assert orchestrator.current_step == ConversationStep.RECOMMENDATIONS
        assert orchestrator.state.user_profile.budget == BudgetRange.MEDIUM
        assert orchestrator.state.user_profile.last_preferences.number_of_recommendations == 2

        first_call = mock_openai.chat.completions.create.call_args_list[0].kwargs
        assert first_call["messages"][-1]["content"] == "我想要中餐，预算是30-50元，请为我推荐一些菜品"
        assert first_call["tool_choice"]["function"]["name"] == "recommend_menu"
        # History before the new request: greeting, cuisine choice, budget question
        assert [m["role"] for m in first_call["messages"][1:-1]] == [
            "assistant", "user", "assistant",
        ]

    @pytest.mark.asyncio
    async def test_budget_failure_stays_in_budget_step(self, orchestrator, mock_openai):
        mock_openai.chat.completions.create.side_effect = Exception("network down")
        await _reach_budget_step(orchestrator)

        turn = await orchestrator.handle_option_selection("10-30")

        assert turn.role == TurnRole.ASSISTANT
        assert "10-30" in turn.content
        assert turn.attached_dishes is None
        assert orchestrator.current_step == ConversationStep.BUDGET
        assert orchestrator.state.user_profile.budget is None
        assert orchestrator.is_processing is False

    @pytest.mark.asyncio
    async def test_unrecognized_option_is_ignored(self, orchestrator):
        await orchestrator.start_session()

        assert await orchestrator.handle_option_selection("30-50") is None
        assert await orchestrator.handle_option_selection("日料") is None
        assert len(orchestrator.turns) == 1
        assert orchestrator.current_step == ConversationStep.CUISINE_PREFERENCE


class TestFreeText:
    """Test free-text handling in any step."""

    @pytest.mark.asyncio
    async def test_small_talk_gets_text_reply(self, orchestrator, mock_openai, completion):
        mock_openai.chat.completions.create.return_value = completion("我是这个餐厅的点餐助手")
        await orchestrator.start_session()

        turn = await orchestrator.handle_free_text_input("你是谁")

        assert turn.content == "我是这个餐厅的点餐助手"
        assert turn.attached_dishes is None
        assert orchestrator.current_step == ConversationStep.CUISINE_PREFERENCE
        call_kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert call_kwargs["tool_choice"] == "auto"

    @pytest.mark.asyncio
    async def test_free_text_recommendation_jumps_to_recommendations(
        self, orchestrator, mock_openai, tool_completion, completion
    ):
        mock_openai.chat.completions.create.side_effect = [
            tool_completion({"spicy_tolerance": 0, "number_of_recommendations": 1}),
            completion('["steamed-fish"]'),
            completion("清蒸鲈鱼很适合您"),
        ]
        await orchestrator.start_session()

        turn = await orchestrator.handle_free_text_input("  推荐一道不辣的菜  ")

        assert orchestrator.turns[1].content == "推荐一道不辣的菜"
        assert [dish.id for dish in turn.attached_dishes] == ["steamed-fish"]
        assert orchestrator.current_step == ConversationStep.RECOMMENDATIONS

    @pytest.mark.asyncio
    async def test_blank_input_is_ignored(self, orchestrator, mock_openai):
        assert await orchestrator.handle_free_text_input("   ") is None
        assert orchestrator.turns == []
        mock_openai.chat.completions.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_gives_degraded_turn(self, orchestrator, mock_openai):
        mock_openai.chat.completions.create.side_effect = Exception("rate limited")

        turn = await orchestrator.handle_free_text_input("推荐点菜")

        assert turn.content == FREE_TEXT_DEGRADED_MESSAGE
        assert _roles(orchestrator) == [TurnRole.USER, TurnRole.ASSISTANT]

    @pytest.mark.asyncio
    async def test_narration_failure_keeps_dishes(
        self, orchestrator, mock_openai, tool_completion, completion
    ):
        mock_openai.chat.completions.create.side_effect = [
            tool_completion({"number_of_recommendations": 1}),
            completion('["rice"]'),
            Exception("narration timeout"),
        ]

        turn = await orchestrator.handle_free_text_input("推荐")

        assert turn.content == RECOMMENDATION_FALLBACK_FRAMING
        assert [dish.id for dish in turn.attached_dishes] == ["rice"]

    @pytest.mark.asyncio
    async def test_empty_selection_is_reported_honestly(
        self, agent_service, mock_openai, tool_completion, test_settings
    ):
        engine = Mock()
        engine.recommend = AsyncMock(return_value=[])
        orchestrator = ConversationOrchestrator(
            "s1", RecommendationPipeline(agent_service, engine), config=test_settings
        )
        mock_openai.chat.completions.create.return_value = tool_completion({})

        turn = await orchestrator.handle_free_text_input("推荐")

        assert turn.content == NO_MATCH_MESSAGE
        assert turn.attached_dishes is None
        assert orchestrator.current_step == ConversationStep.WELCOME

    @pytest.mark.asyncio
    async def test_system_turns_are_not_sent_to_model(
        self, orchestrator, mock_openai, completion
    ):
        mock_openai.chat.completions.create.return_value = completion("好的")
        orchestrator.add_system_turn("红烧肉 已添加到购物车")

        await orchestrator.handle_free_text_input("谢谢")

        sent = mock_openai.chat.completions.create.call_args.kwargs["messages"]
        assert all("购物车" not in message["content"] for message in sent[1:])


class TestConcurrency:
    """Test serialization and teardown."""

    @pytest.mark.asyncio
    async def test_inputs_are_serialized(self, orchestrator, mock_openai, completion):
        async def slow_reply(**kwargs):
            await asyncio.sleep(0.01)
            return completion(f"回复：{kwargs['messages'][-1]['content']}")

        mock_openai.chat.completions.create.side_effect = slow_reply

        await asyncio.gather(
            orchestrator.handle_free_text_input("你好"),
            orchestrator.handle_free_text_input("谢谢"),
        )

        assert [turn.content for turn in orchestrator.turns] == [
            "你好", "回复：你好", "谢谢", "回复：谢谢",
        ]

    @pytest.mark.asyncio
    async def test_close_discards_pending_result(self, orchestrator, mock_openai, completion):
        async def close_then_reply(**kwargs):
            orchestrator.close()
            return completion("太迟了")

        mock_openai.chat.completions.create.side_effect = close_then_reply

        turn = await orchestrator.handle_free_text_input("你好")

        assert turn is None
        assert _roles(orchestrator) == [TurnRole.USER]
        assert orchestrator.is_processing is False

    @pytest.mark.asyncio
    async def test_closed_orchestrator_ignores_input(self, orchestrator):
        orchestrator.close()

        assert await orchestrator.start_session() is None
        assert await orchestrator.handle_free_text_input("你好") is None
        assert orchestrator.add_system_turn("x") is None
        assert orchestrator.turns == []

    @pytest.mark.asyncio
    async def test_listeners_see_every_turn(self, orchestrator):
        seen = []
        orchestrator.subscribe(lambda turn: seen.append(turn.content))

        await _reach_budget_step(orchestrator)

        assert seen == [GREETING_MESSAGE, "我选择：中餐", BUDGET_QUESTION]


class TestDishQuestions:
    """Test quick questions asked from the dish details view."""

    @pytest.mark.asyncio
    async def test_spicy_dish_answer(self, orchestrator, catalog, mock_openai):
        await _reach_budget_step(orchestrator)

        turn = await orchestrator.ask_about_dish(catalog.require("kungpao-chicken"), "这道菜辣不辣？")

        assert turn.role == TurnRole.ASSISTANT
        assert turn.content == f"宫保鸡丁是中辣的。{DISH_ANSWER_SPICY_ADVICE_HOT}"
        assert orchestrator.turns[-2].role == TurnRole.USER
        assert orchestrator.turns[-2].content == "这道菜辣不辣？"
        assert orchestrator.current_step == ConversationStep.BUDGET
        assert orchestrator.is_processing is False
        mock_openai.chat.completions.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_mild_dish_answer(self, orchestrator, catalog):
        turn = await orchestrator.ask_about_dish(catalog.require("braised-pork"), "辣吗")

        assert turn.content == f"红烧肉是不辣的。{DISH_ANSWER_SPICY_ADVICE_MILD}"
        assert orchestrator.current_step == ConversationStep.WELCOME

    @pytest.mark.asyncio
    async def test_blank_question_is_ignored(self, orchestrator, catalog):
        assert await orchestrator.ask_about_dish(catalog.require("rice"), "   ") is None
        assert orchestrator.turns == []

    @pytest.mark.asyncio
    async def test_closed_orchestrator_ignores_question(self, orchestrator, catalog):
        orchestrator.close()

        assert await orchestrator.ask_about_dish(catalog.require("rice"), "辣吗") is None
        assert orchestrator.turns == []


class TestDishAnswers:
    """Test keyword dispatch of dish answers."""

    @pytest.mark.asyncio
    async def test_feature_uses_description(self, catalog):
        dish = catalog.require("braised-pork")
        assert answer_dish_question(dish, "有什么特色？") == "红烧肉：肥而不腻的家常红烧肉"

    @pytest.mark.asyncio
    async def test_feature_without_description_falls_back(self, catalog):
        assert answer_dish_question(catalog.require("rice"), "有什么特色？") == DISH_ANSWER_DEFAULT

    @pytest.mark.asyncio
    async def test_fixed_questions(self, catalog):
        dish = catalog.require("tomato-egg")

        assert answer_dish_question(dish, "适合女生吃吗？") == DISH_ANSWER_SUITABILITY
        assert answer_dish_question(dish, "这个菜油腻吗？") == DISH_ANSWER_GREASY
        assert "番茄炒蛋配一杯" in answer_dish_question(dish, "配什么饮料好？")
        assert answer_dish_question(dish, "适合几个人吃？").startswith("一份番茄炒蛋适合1-2人")
        assert answer_dish_question(dish, "你好") == DISH_ANSWER_DEFAULT
