"""
Event models for the session state machine.

Events are the only inputs to the transition function. User commands,
provider completions and timer ticks are all expressed as events and
applied one at a time to the current Session snapshot.

Example:
    >>> session = apply_event(Session(), StartRequested(theme="Busy Kitchen"))
    >>> session.status
    <SessionStatus.GENERATING_METADATA: 'generating_metadata'>
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from machigai.models.game import Difficulty, Level


class EventType(str, Enum):
    """Kinds of state machine events.

    Categories:
        Commands: START_REQUESTED, DIFFERENCE_FOUND, RESET, DIFFICULTY_CHANGED
        Pipeline: LEVEL_GENERATED, BASE_IMAGE_GENERATED,
                  MODIFIED_IMAGE_GENERATED, GENERATION_FAILED
        Timer: TICK
    """

    # Commands
    START_REQUESTED = "start_requested"
    DIFFERENCE_FOUND = "difference_found"
    RESET = "reset"
    DIFFICULTY_CHANGED = "difficulty_changed"

    # Pipeline completions
    LEVEL_GENERATED = "level_generated"
    BASE_IMAGE_GENERATED = "base_image_generated"
    MODIFIED_IMAGE_GENERATED = "modified_image_generated"
    GENERATION_FAILED = "generation_failed"

    # Timer
    TICK = "tick"


class _BaseEvent(BaseModel):
    model_config = ConfigDict(frozen=True)


class StartRequested(_BaseEvent):
    type: Literal[EventType.START_REQUESTED] = EventType.START_REQUESTED
    theme: str = Field(min_length=1)


class DifferenceFound(_BaseEvent):
    type: Literal[EventType.DIFFERENCE_FOUND] = EventType.DIFFERENCE_FOUND
    difference_id: str


class Reset(_BaseEvent):
    type: Literal[EventType.RESET] = EventType.RESET


class DifficultyChanged(_BaseEvent):
    type: Literal[EventType.DIFFICULTY_CHANGED] = EventType.DIFFICULTY_CHANGED
    difficulty: Difficulty


class LevelGenerated(_BaseEvent):
    type: Literal[EventType.LEVEL_GENERATED] = EventType.LEVEL_GENERATED
    level: Level


class BaseImageGenerated(_BaseEvent):
    type: Literal[EventType.BASE_IMAGE_GENERATED] = EventType.BASE_IMAGE_GENERATED
    image: bytes = Field(repr=False)


class ModifiedImageGenerated(_BaseEvent):
    type: Literal[EventType.MODIFIED_IMAGE_GENERATED] = (
        EventType.MODIFIED_IMAGE_GENERATED
    )
    image: bytes = Field(repr=False)


class GenerationFailed(_BaseEvent):
    type: Literal[EventType.GENERATION_FAILED] = EventType.GENERATION_FAILED
    message: str = Field(min_length=1)


class Tick(_BaseEvent):
    type: Literal[EventType.TICK] = EventType.TICK


# Pipeline step completions, in pipeline order
StepSucceeded = Union[LevelGenerated, BaseImageGenerated, ModifiedImageGenerated]

Event = Union[
    StartRequested,
    DifferenceFound,
    Reset,
    DifficultyChanged,
    LevelGenerated,
    BaseImageGenerated,
    ModifiedImageGenerated,
    GenerationFailed,
    Tick,
]
