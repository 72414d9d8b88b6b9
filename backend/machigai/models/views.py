"""
API view models - what the browser client is allowed to see of a session.

Undiscovered differences expose only their id; location and description are
revealed once found. Images are served separately as PNG.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from machigai.models.catalog import STAGE_MESSAGES
from machigai.models.game import (
    Difference,
    Difficulty,
    Session,
    SessionStatus,
    format_elapsed,
)


class DifferenceView(BaseModel):
    """A difference as shown in the checklist"""
    id: str
    found: bool
    description: str | None = None  # Revealed after discovery
    x: float | None = None
    y: float | None = None

    @classmethod
    def from_difference(cls, difference: Difference) -> "DifferenceView":
        if not difference.found:
            return cls(id=difference.id, found=False)
        return cls(
            id=difference.id,
            found=True,
            description=difference.description,
            x=difference.x,
            y=difference.y,
        )


class HintView(BaseModel):
    """Location to pulse a hint marker at"""
    x: float
    y: float


class SessionView(BaseModel):
    """Read-only state of a game session"""
    session_id: str
    status: SessionStatus
    stage_message: str
    difficulty: Difficulty
    theme: str | None = None
    differences: list[DifferenceView] = Field(default_factory=list)
    found_count: int = 0
    total_differences: int = 0
    elapsed_seconds: int = 0
    elapsed_display: str = "0:00"
    error: str | None = None
    base_image_url: str | None = None
    modified_image_url: str | None = None

    @classmethod
    def from_session(cls, session_id: str, session: Session) -> "SessionView":
        level = session.level
        return cls(
            session_id=session_id,
            status=session.status,
            stage_message=STAGE_MESSAGES[session.status],
            difficulty=session.difficulty,
            theme=level.theme if level else session.theme,
            differences=[DifferenceView.from_difference(d) for d in level.differences]
            if level
            else [],
            found_count=session.found_count,
            total_differences=session.total_differences,
            elapsed_seconds=session.elapsed_seconds,
            elapsed_display=format_elapsed(session.elapsed_seconds),
            error=session.last_error,
            base_image_url=f"/api/game/image/{session_id}/base"
            if session.base_image is not None
            else None,
            modified_image_url=f"/api/game/image/{session_id}/modified"
            if session.modified_image is not None
            else None,
        )


class SessionRequest(BaseModel):
    """Request addressing an existing session"""
    session_id: str


class NewGameRequest(BaseModel):
    """Request to create a new session"""
    difficulty: Difficulty = Difficulty.MEDIUM


class StartRequest(SessionRequest):
    """Request to generate a new puzzle"""
    theme: str = Field(min_length=1)  # Catalog id or free-form theme


class DifficultyRequest(SessionRequest):
    difficulty: Difficulty


class ClickRequest(SessionRequest):
    """A click on either picture, in 0-100 coordinates"""
    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)


class ClickResponse(BaseModel):
    hit: bool
    difference: DifferenceView | None = None
    state: SessionView
