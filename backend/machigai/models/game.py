"""
Game session models - Pydantic models for the spot-the-difference session
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Difficulty(str, Enum):
    """Puzzle difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SessionStatus(str, Enum):
    """Lifecycle status of a game session.

    Attributes:
        IDLE: No puzzle, waiting for a start command
        GENERATING_METADATA: Waiting for the level design (differences + prompts)
        GENERATING_BASE_IMAGE: Waiting for the first picture
        GENERATING_MODIFIED_IMAGE: Waiting for the edited second picture
        PLAYING: Both pictures ready, timer running
        COMPLETED: Every difference found
        FAILED: A generation step failed
    """

    IDLE = "idle"
    GENERATING_METADATA = "generating_metadata"
    GENERATING_BASE_IMAGE = "generating_base_image"
    GENERATING_MODIFIED_IMAGE = "generating_modified_image"
    PLAYING = "playing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_generating(self) -> bool:
        return self in GENERATING_STATUSES

    @property
    def accepts_start(self) -> bool:
        """Whether a new puzzle may be configured (difficulty change) now."""
        return self in (SessionStatus.IDLE, SessionStatus.COMPLETED, SessionStatus.FAILED)


GENERATING_STATUSES = frozenset(
    {
        SessionStatus.GENERATING_METADATA,
        SessionStatus.GENERATING_BASE_IMAGE,
        SessionStatus.GENERATING_MODIFIED_IMAGE,
    }
)


# =============================================================================
# Level Models
# =============================================================================


class Difference(BaseModel):
    """A single discoverable discrepancy between the two pictures.

    Coordinates are percentages of the image width/height (0-100).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    description: str
    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)
    found: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # Models sometimes emit numeric ids
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value)) if float(value).is_integer() else str(value)
        return value

    @field_validator("id", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("x", "y", mode="before")
    @classmethod
    def _reject_bool(cls, value):
        if isinstance(value, bool):
            raise ValueError("coordinate must be a number")
        return value


class Level(BaseModel):
    """One generated puzzle: the image prompts plus the difference list."""

    model_config = ConfigDict(frozen=True)

    theme: str
    base_prompt: str
    modification_prompt: str
    differences: tuple[Difference, ...]

    @model_validator(mode="after")
    def _unique_ids(self) -> "Level":
        ids = [d.id for d in self.differences]
        if len(ids) != len(set(ids)):
            raise ValueError(f"difference ids must be unique, got {ids}")
        return self

    @property
    def found_count(self) -> int:
        return sum(1 for d in self.differences if d.found)

    @property
    def remaining(self) -> list[Difference]:
        return [d for d in self.differences if not d.found]

    def get_difference(self, difference_id: str) -> Difference | None:
        for difference in self.differences:
            if difference.id == difference_id:
                return difference
        return None

    def with_found(self, difference_id: str) -> "Level":
        """Return a copy with the given difference marked found."""
        differences = tuple(
            d.model_copy(update={"found": True}) if d.id == difference_id else d
            for d in self.differences
        )
        return self.model_copy(update={"differences": differences})


# =============================================================================
# Session Snapshot
# =============================================================================


class Session(BaseModel):
    """Immutable snapshot of a game session.

    Every transition in the state machine produces a new Session; fields are
    never changed in place.

    Attributes:
        status: Current lifecycle status
        difficulty: Difficulty used by the next start command
        theme: Theme of the current/last attempt
        level: Generated level (from GENERATING_BASE_IMAGE onward)
        base_image: PNG bytes of the first picture
        modified_image: PNG bytes of the second picture
        found_count: Cached count of found differences
        elapsed_seconds: Seconds spent in PLAYING
        last_error: Player-facing failure message (FAILED only)
    """

    model_config = ConfigDict(frozen=True)

    status: SessionStatus = SessionStatus.IDLE
    difficulty: Difficulty = Difficulty.MEDIUM
    theme: str | None = None
    level: Level | None = None
    base_image: bytes | None = Field(default=None, repr=False)
    modified_image: bytes | None = Field(default=None, repr=False)
    found_count: int = Field(default=0, ge=0)
    elapsed_seconds: int = Field(default=0, ge=0)
    last_error: str | None = None

    @property
    def total_differences(self) -> int:
        return len(self.level.differences) if self.level else 0

    @property
    def is_complete(self) -> bool:
        return self.status == SessionStatus.COMPLETED


def format_elapsed(seconds: int) -> str:
    """Render seconds as m:ss."""
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"
