"""
Session state machine.

`apply_event` is the single place where a Session changes. It takes the
current snapshot and an event and returns the next snapshot; invalid
commands raise InvalidCommandError and leave the caller's snapshot as is.

Transitions:
    Any                     --start-->      GENERATING_METADATA
    GENERATING_METADATA     --level-->      GENERATING_BASE_IMAGE
    GENERATING_BASE_IMAGE   --image-->      GENERATING_MODIFIED_IMAGE
    GENERATING_MODIFIED_IMAGE --image-->    PLAYING
    GENERATING_*            --failure-->    FAILED
    PLAYING                 --found-->      PLAYING | COMPLETED
    Any                     --reset-->      IDLE
"""

from __future__ import annotations

from machigai.engine.errors import InvalidCommandError, InvalidLevelError
from machigai.models.catalog import get_difficulty_config
from machigai.models.events import (
    BaseImageGenerated,
    DifferenceFound,
    DifficultyChanged,
    Event,
    GenerationFailed,
    LevelGenerated,
    ModifiedImageGenerated,
    Reset,
    StartRequested,
    Tick,
)
from machigai.models.game import (
    GENERATING_STATUSES,
    Difficulty,
    Level,
    Session,
    SessionStatus,
)


def check_level(level: Level, difficulty: Difficulty) -> None:
    """Raise InvalidLevelError unless the level fits the difficulty."""
    expected = get_difficulty_config(difficulty).count
    actual = len(level.differences)
    if actual != expected:
        raise InvalidLevelError(
            f"Expected {expected} differences for {difficulty.value}, got {actual}"
        )


def apply_event(session: Session, event: Event) -> Session:
    """Return the session that results from applying event to session."""
    if isinstance(event, StartRequested):
        return _start(session, event)
    if isinstance(event, LevelGenerated):
        return _level_generated(session, event)
    if isinstance(event, BaseImageGenerated):
        _require(session, SessionStatus.GENERATING_BASE_IMAGE, event)
        return session.model_copy(
            update={
                "base_image": event.image,
                "status": SessionStatus.GENERATING_MODIFIED_IMAGE,
            }
        )
    if isinstance(event, ModifiedImageGenerated):
        _require(session, SessionStatus.GENERATING_MODIFIED_IMAGE, event)
        return session.model_copy(
            update={
                "modified_image": event.image,
                "status": SessionStatus.PLAYING,
                "elapsed_seconds": 0,
            }
        )
    if isinstance(event, GenerationFailed):
        return _generation_failed(session, event)
    if isinstance(event, DifferenceFound):
        return _difference_found(session, event)
    if isinstance(event, Tick):
        if session.status != SessionStatus.PLAYING:
            return session
        return session.model_copy(
            update={"elapsed_seconds": session.elapsed_seconds + 1}
        )
    if isinstance(event, Reset):
        return Session(difficulty=session.difficulty)
    if isinstance(event, DifficultyChanged):
        return _difficulty_changed(session, event)
    raise TypeError(f"Unsupported event: {event!r}")


def _require(session: Session, status: SessionStatus, event: Event) -> None:
    if session.status != status:
        raise InvalidCommandError(
            f"Cannot apply {event.type.value} while {session.status.value}",
            status=session.status.value,
        )


def _start(session: Session, event: StartRequested) -> Session:
    theme = event.theme.strip()
    if not theme:
        raise InvalidCommandError("Theme must not be empty", status=session.status.value)
    # Full replacement: nothing from the previous attempt survives but difficulty
    return Session(
        status=SessionStatus.GENERATING_METADATA,
        difficulty=session.difficulty,
        theme=theme,
    )


def _level_generated(session: Session, event: LevelGenerated) -> Session:
    _require(session, SessionStatus.GENERATING_METADATA, event)
    check_level(event.level, session.difficulty)
    differences = tuple(
        d.model_copy(update={"found": False}) for d in event.level.differences
    )
    level = event.level.model_copy(update={"differences": differences})
    return session.model_copy(
        update={
            "level": level,
            "found_count": 0,
            "status": SessionStatus.GENERATING_BASE_IMAGE,
        }
    )


def _generation_failed(session: Session, event: GenerationFailed) -> Session:
    if session.status not in GENERATING_STATUSES:
        raise InvalidCommandError(
            f"No generation in progress (status {session.status.value})",
            status=session.status.value,
        )
    # Partial results of the failed attempt are dropped
    return Session(
        status=SessionStatus.FAILED,
        difficulty=session.difficulty,
        theme=session.theme,
        last_error=event.message,
    )


def _difference_found(session: Session, event: DifferenceFound) -> Session:
    if session.status == SessionStatus.COMPLETED:
        return session
    _require(session, SessionStatus.PLAYING, event)

    level = session.level
    difference = level.get_difference(event.difference_id)
    if difference is None or difference.found:
        return session

    level = level.with_found(difference.id)
    found_count = level.found_count
    status = (
        SessionStatus.COMPLETED
        if found_count == len(level.differences)
        else SessionStatus.PLAYING
    )
    return session.model_copy(
        update={"level": level, "found_count": found_count, "status": status}
    )


def _difficulty_changed(session: Session, event: DifficultyChanged) -> Session:
    if not session.status.accepts_start:
        raise InvalidCommandError(
            f"Cannot change difficulty while {session.status.value}",
            status=session.status.value,
        )
    if session.difficulty == event.difficulty:
        return session
    return session.model_copy(update={"difficulty": event.difficulty})
