"""
Game API endpoints - Create sessions, generate puzzles, and play them
"""

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from machigai.engine.controller import SessionController
from machigai.engine.errors import InvalidCommandError
from machigai.engine.protocols import ContentProvider
from machigai.llm.image_generator import detect_mime_type
from machigai.llm.provider import GeminiContentProvider
from machigai.models.catalog import DIFFICULTY_CONFIG, resolve_theme_name
from machigai.models.views import (
    ClickRequest,
    ClickResponse,
    DifferenceView,
    DifficultyRequest,
    HintView,
    NewGameRequest,
    SessionRequest,
    SessionView,
    StartRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# In-memory game sessions (single process, nothing survives a restart)
game_sessions: dict[str, SessionController] = {}


def get_content_provider() -> ContentProvider:
    """Content provider for new sessions (overridden in tests)"""
    return GeminiContentProvider()


def _get_controller(session_id: str) -> SessionController:
    controller = game_sessions.get(session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail="Game session not found")
    return controller


def _view(controller: SessionController) -> SessionView:
    return SessionView.from_session(controller.session_id, controller.session)


def _conflict(e: InvalidCommandError) -> HTTPException:
    logger.warning(f"Rejected command: {e.message}")
    return HTTPException(status_code=409, detail=e.message)


@router.get("/difficulties")
async def list_difficulties():
    """List difficulty levels and how many differences each has"""
    return {
        "difficulties": [
            {"id": difficulty.value, "label": config.label, "count": config.count}
            for difficulty, config in DIFFICULTY_CONFIG.items()
        ]
    }


@router.post("/new", response_model=SessionView)
async def new_game(
    request: NewGameRequest,
    provider: ContentProvider = Depends(get_content_provider),
):
    """Create an idle game session"""
    controller = SessionController(provider, difficulty=request.difficulty)
    game_sessions[controller.session_id] = controller
    logger.info(f"Created session {controller.session_id}")
    return _view(controller)


@router.post("/start", response_model=SessionView)
async def start_game(request: StartRequest):
    """
    Start generating a puzzle.

    Returns immediately; poll /state to follow the generation stages.
    Starting again while a puzzle is generating abandons the earlier one.
    """
    controller = _get_controller(request.session_id)
    try:
        controller.start(resolve_theme_name(request.theme))
    except InvalidCommandError as e:
        raise _conflict(e)
    return _view(controller)


@router.get("/state/{session_id}", response_model=SessionView)
async def get_state(session_id: str):
    """Get current session state"""
    return _view(_get_controller(session_id))


@router.post("/difficulty", response_model=SessionView)
async def set_difficulty(request: DifficultyRequest):
    """Change the difficulty used by the next start"""
    controller = _get_controller(request.session_id)
    try:
        controller.set_difficulty(request.difficulty)
    except InvalidCommandError as e:
        raise _conflict(e)
    return _view(controller)


@router.post("/click", response_model=ClickResponse)
async def click(request: ClickRequest):
    """Check a click against the remaining differences"""
    controller = _get_controller(request.session_id)
    try:
        hit = controller.click(request.x, request.y)
    except InvalidCommandError as e:
        raise _conflict(e)
    return ClickResponse(
        hit=hit is not None,
        difference=DifferenceView.from_difference(hit) if hit else None,
        state=_view(controller),
    )


@router.post("/reset", response_model=SessionView)
async def reset_game(request: SessionRequest):
    """Return the session to idle"""
    controller = _get_controller(request.session_id)
    controller.reset()
    return _view(controller)


@router.get("/hint/{session_id}")
async def get_hint(session_id: str):
    """Get the location of one difference that has not been found yet"""
    difference = _get_controller(session_id).hint()
    if difference is None:
        return {"hint": None}
    return {"hint": HintView(x=difference.x, y=difference.y)}


@router.get("/image/{session_id}/{which}")
async def get_image(session_id: str, which: Literal["base", "modified"]):
    """Get one of the two puzzle pictures"""
    session = _get_controller(session_id).session
    image = session.base_image if which == "base" else session.modified_image
    if image is None:
        raise HTTPException(status_code=404, detail=f"No {which} image yet")
    return Response(
        content=image,
        media_type=detect_mime_type(image),
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )


@router.delete("/{session_id}")
async def end_session(session_id: str):
    """Discard a session and cancel any generation in flight"""
    controller = _get_controller(session_id)
    await controller.close()
    game_sessions.pop(session_id, None)
    return {"status": "deleted", "session_id": session_id}
