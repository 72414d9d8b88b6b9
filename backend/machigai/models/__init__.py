"""Pydantic models for Machigai"""

from machigai.models.game import (
    Difference,
    Difficulty,
    Level,
    Session,
    SessionStatus,
    format_elapsed,
)
from machigai.models.catalog import (
    DIFFICULTY_CONFIG,
    GAME_THEMES,
    STAGE_MESSAGES,
    DifficultyConfig,
    Theme,
    get_difficulty_config,
)
from machigai.models.events import (
    BaseImageGenerated,
    DifferenceFound,
    DifficultyChanged,
    Event,
    EventType,
    GenerationFailed,
    LevelGenerated,
    ModifiedImageGenerated,
    Reset,
    StartRequested,
    StepSucceeded,
    Tick,
)

__all__ = [
    # Session models
    "Difference",
    "Difficulty",
    "Level",
    "Session",
    "SessionStatus",
    "format_elapsed",
    # Catalogs
    "DIFFICULTY_CONFIG",
    "GAME_THEMES",
    "STAGE_MESSAGES",
    "DifficultyConfig",
    "Theme",
    "get_difficulty_config",
    # State machine events
    "BaseImageGenerated",
    "DifferenceFound",
    "DifficultyChanged",
    "Event",
    "EventType",
    "GenerationFailed",
    "LevelGenerated",
    "ModifiedImageGenerated",
    "Reset",
    "StartRequested",
    "StepSucceeded",
    "Tick",
]
