"""Chat session API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.core.dependencies import get_session_manager
from app.services.agent.stages import ConversationStep
from app.services.agent.state import ConversationTurn
from app.services.chat_session.manager import ChatSessionManager
from app.services.chat_session.models import ChatSession
from app.services.menu.catalog import DishNotFoundError
from app.services.ordering.models import CartLine

router = APIRouter(prefix="/api/sessions")
logger = logging.getLogger(__name__)


class OptionRequest(BaseModel):
    option: str


class MessageRequest(BaseModel):
    text: str


class AddToCartRequest(BaseModel):
    dish_id: str


class QuestionRequest(BaseModel):
    dish_id: str
    question: str


class QuantityRequest(BaseModel):
    quantity: int = Field(ge=0)


class TurnResponse(BaseModel):
    """The assistant turn produced by an input, if any."""
    turn: Optional[ConversationTurn] = None


class SessionResponse(BaseModel):
    """Session snapshot."""
    session_id: str
    current_step: ConversationStep
    is_processing: bool
    turns: List[ConversationTurn]
    cart: List[CartLine]
    cart_total: float
    cart_item_count: int


def _require_session(session_id: str, manager: ChatSessionManager) -> ChatSession:
    session = manager.get_session(session_id)
    if session is None:
        logger.warning(f"[CHAT] Session not found: {session_id}")
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")
    return session


def _snapshot(session: ChatSession) -> SessionResponse:
    return SessionResponse(**session.snapshot())


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(manager: ChatSessionManager = Depends(get_session_manager)):
    """Create a new chat session."""
    session = manager.create_session()
    return _snapshot(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str, manager: ChatSessionManager = Depends(get_session_manager)
):
    return _snapshot(_require_session(session_id, manager))


@router.delete("/{session_id}", status_code=204)
async def end_session(
    session_id: str, manager: ChatSessionManager = Depends(get_session_manager)
):
    """End a session; late results of in-flight turns are discarded."""
    if not manager.end_session(session_id):
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found")


@router.post("/{session_id}/start", response_model=TurnResponse)
async def start_session(
    session_id: str, manager: ChatSessionManager = Depends(get_session_manager)
):
    session = _require_session(session_id, manager)
    turn = await session.orchestrator.start_session()
    return TurnResponse(turn=turn)


@router.post("/{session_id}/options", response_model=TurnResponse)
async def select_option(
    session_id: str,
    body: OptionRequest,
    manager: ChatSessionManager = Depends(get_session_manager),
):
    """Select one of the options offered by the last assistant turn."""
    session = _require_session(session_id, manager)
    logger.info(f"[CHAT] {session_id} option selected: {body.option}")
    turn = await session.orchestrator.handle_option_selection(body.option)
    return TurnResponse(turn=turn)


@router.post("/{session_id}/messages", response_model=TurnResponse)
async def send_message(
    session_id: str,
    body: MessageRequest,
    manager: ChatSessionManager = Depends(get_session_manager),
):
    """Send free text to the assistant."""
    session = _require_session(session_id, manager)
    logger.info(f"[CHAT] {session_id} message: '{body.text}'")
    turn = await session.orchestrator.handle_free_text_input(body.text)
    return TurnResponse(turn=turn)


@router.post("/{session_id}/questions", response_model=TurnResponse)
async def ask_about_dish(
    session_id: str,
    body: QuestionRequest,
    manager: ChatSessionManager = Depends(get_session_manager),
):
    """Ask a quick question about one dish from its details view."""
    session = _require_session(session_id, manager)
    logger.info(f"[CHAT] {session_id} question about {body.dish_id}: '{body.question}'")
    try:
        turn = await session.ask_about_dish(body.dish_id, body.question)
    except DishNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return TurnResponse(turn=turn)


@router.post("/{session_id}/cart/items", response_model=SessionResponse)
async def add_to_cart(
    session_id: str,
    body: AddToCartRequest,
    manager: ChatSessionManager = Depends(get_session_manager),
):
    session = _require_session(session_id, manager)
    try:
        session.add_to_cart(body.dish_id)
    except DishNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _snapshot(session)


@router.put("/{session_id}/cart/items/{dish_id}", response_model=SessionResponse)
async def set_cart_quantity(
    session_id: str,
    dish_id: str,
    body: QuantityRequest,
    manager: ChatSessionManager = Depends(get_session_manager),
):
    """Set a line's quantity; 0 removes the line."""
    session = _require_session(session_id, manager)
    session.set_cart_quantity(dish_id, body.quantity)
    return _snapshot(session)


@router.delete("/{session_id}/cart/items/{dish_id}", response_model=SessionResponse)
async def remove_from_cart(
    session_id: str,
    dish_id: str,
    manager: ChatSessionManager = Depends(get_session_manager),
):
    session = _require_session(session_id, manager)
    session.remove_from_cart(dish_id)
    return _snapshot(session)


@router.delete("/{session_id}/cart", response_model=SessionResponse)
async def clear_cart(
    session_id: str, manager: ChatSessionManager = Depends(get_session_manager)
):
    session = _require_session(session_id, manager)
    session.clear_cart()
    return _snapshot(session)


@router.post("/{session_id}/checkout", response_model=SessionResponse)
async def checkout(
    session_id: str, manager: ChatSessionManager = Depends(get_session_manager)
):
    """Finish the order. No payment is taken."""
    session = _require_session(session_id, manager)
    session.checkout()
    return _snapshot(session)
