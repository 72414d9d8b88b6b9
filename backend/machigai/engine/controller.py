"""
Session controller - owns one game session and runs its generation pipeline.

All state changes go through `dispatch`, which applies one event to the
current snapshot with `apply_event`. Event handlers never await, so on a
single event loop no handler can observe a half-applied transition.

Each start (and reset) bumps an epoch counter. Pipeline completions and
timer ticks carry the epoch they were issued under and are discarded when
it no longer matches, so a late result from an abandoned attempt can never
overwrite a newer session.

Example:
    >>> controller = SessionController(GeminiContentProvider())
    >>> await controller.start("Busy Kitchen")
    >>> controller.session.status
    <SessionStatus.PLAYING: 'playing'>
    >>> controller.click(42.0, 61.5)
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
import uuid

from machigai.engine.errors import InvalidCommandError
from machigai.engine.matcher import HIT_RADIUS, match
from machigai.engine.protocols import ContentProvider
from machigai.engine.state_machine import apply_event
from machigai.engine.ticker import ElapsedTicker
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
from machigai.models.game import Difference, Difficulty, Session, SessionStatus

logger = logging.getLogger(__name__)

GENERATION_ERROR_MESSAGE = (
    "Something went wrong while generating the pictures. "
    "Try another theme or start again."
)


class SessionController:
    """Authoritative controller for a single-player game session.

    Attributes:
        session_id: Unique identifier for this session
        provider: Content provider used by the generation pipeline
        hit_radius: Click tolerance used by `click`
    """

    def __init__(
        self,
        provider: ContentProvider,
        difficulty: Difficulty = Difficulty.MEDIUM,
        tick_interval: float = 1.0,
        hit_radius: float = HIT_RADIUS,
        rng: random.Random | None = None,
    ):
        self.session_id = str(uuid.uuid4())
        self.provider = provider
        self.hit_radius = hit_radius
        self._session = Session(difficulty=difficulty)
        self._epoch = 0
        self._pipeline: asyncio.Task | None = None
        self._ticker = ElapsedTicker(self._on_tick, interval=tick_interval)
        self._rng = rng or random.Random()

    # =========================================================================
    # Read-only view
    # =========================================================================

    @property
    def session(self) -> Session:
        """Current immutable session snapshot."""
        return self._session

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def pipeline(self) -> asyncio.Task | None:
        """The in-flight generation task, if any."""
        return self._pipeline

    @property
    def ticker_running(self) -> bool:
        return self._ticker.running

    # =========================================================================
    # Event application
    # =========================================================================

    def dispatch(self, event: Event, epoch: int | None = None) -> bool:
        """Apply an event to the session.

        Args:
            event: The event to apply
            epoch: Epoch the event was issued under. Events from an older
                   epoch are dropped. None means "current" (user commands).

        Returns:
            True if the event was applied, False if it was stale.

        Raises:
            InvalidCommandError: If the event is not valid in the current status
        """
        if epoch is not None and epoch != self._epoch:
            logger.warning(
                f"[{self.session_id[:8]}] Discarding stale {event.type.value} "
                f"(epoch {epoch}, current {self._epoch})"
            )
            return False

        previous = self._session
        self._session = apply_event(previous, event)

        if previous.status != self._session.status:
            logger.info(
                f"[{self.session_id[:8]}] {previous.status.value} -> "
                f"{self._session.status.value} ({event.type.value})"
            )
        self._sync_ticker(previous.status, self._session.status)
        return True

    def _sync_ticker(self, before: SessionStatus, after: SessionStatus) -> None:
        if after == SessionStatus.PLAYING:
            if before != SessionStatus.PLAYING:
                self._ticker.start(self._epoch)
        else:
            self._ticker.stop()

    def _on_tick(self, epoch: int) -> None:
        self.dispatch(Tick(), epoch)

    # =========================================================================
    # Commands
    # =========================================================================

    def start(self, theme: str) -> asyncio.Task:
        """Begin a new puzzle for the theme.

        Supersedes any pipeline already in flight: its task is cancelled and
        any result it still produces is ignored. Must be called from a
        running event loop.

        Returns:
            The pipeline task (await it to wait for Playing or Failed)

        Raises:
            InvalidCommandError: If the theme is empty
        """
        if not theme or not theme.strip():
            raise InvalidCommandError(
                "Theme must not be empty", status=self._session.status.value
            )
        # Fail before touching state when there is no loop to run on
        asyncio.get_running_loop()

        self._cancel_pipeline()
        self._epoch += 1
        epoch = self._epoch
        self.dispatch(StartRequested(theme=theme.strip()))

        session = self._session
        logger.info(
            f"[{self.session_id[:8]}] Starting generation: theme={session.theme!r}, "
            f"difficulty={session.difficulty.value}, epoch={epoch}"
        )
        self._pipeline = asyncio.create_task(
            self._run_pipeline(epoch, session.theme, session.difficulty)
        )
        return self._pipeline

    def difference_found(self, difference_id: str) -> Session:
        """Mark a difference as found. Repeats and unknown ids are no-ops."""
        self.dispatch(DifferenceFound(difference_id=difference_id))
        return self._session

    def click(self, x: float, y: float) -> Difference | None:
        """Match a click against the undiscovered differences.

        Returns:
            The difference that was found (now marked found), or None on a miss
        """
        session = self._session
        if session.status == SessionStatus.COMPLETED:
            return None
        if session.status != SessionStatus.PLAYING:
            raise InvalidCommandError(
                f"Cannot click while {session.status.value}",
                status=session.status.value,
            )

        hit = match(x, y, session.level.differences, radius=self.hit_radius)
        if hit is None:
            return None
        self.difference_found(hit.id)
        return self._session.level.get_difference(hit.id)

    def hint(self) -> Difference | None:
        """Pick a random undiscovered difference to point the player at."""
        session = self._session
        if session.status != SessionStatus.PLAYING:
            return None
        remaining = session.level.remaining
        if not remaining:
            return None
        return self._rng.choice(remaining)

    def reset(self) -> Session:
        """Return to Idle, abandoning any pipeline and stopping the timer."""
        self._cancel_pipeline()
        self._epoch += 1
        self.dispatch(Reset())
        return self._session

    def set_difficulty(self, difficulty: Difficulty) -> Session:
        """Choose the difficulty used by the next start."""
        self.dispatch(DifficultyChanged(difficulty=difficulty))
        return self._session

    async def close(self) -> None:
        """Cancel background work. The session snapshot is left as is."""
        task = self._pipeline
        self._cancel_pipeline()
        self._epoch += 1
        await self._ticker.aclose()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # =========================================================================
    # Generation pipeline
    # =========================================================================

    def _cancel_pipeline(self) -> None:
        if self._pipeline is not None and not self._pipeline.done():
            logger.info(f"[{self.session_id[:8]}] Cancelling in-flight generation")
            self._pipeline.cancel()
        self._pipeline = None

    async def _run_pipeline(
        self, epoch: int, theme: str, difficulty: Difficulty
    ) -> None:
        """Metadata -> base image -> modified image, strictly in sequence."""
        tag = self.session_id[:8]
        try:
            logger.info(f"[{tag}] Step 1/3: level metadata")
            level = await self.provider.generate_level_metadata(theme, difficulty)
            if not self.dispatch(LevelGenerated(level=level), epoch):
                return

            logger.info(f"[{tag}] Step 2/3: base image")
            base_image = await self.provider.generate_base_image(level.base_prompt)
            if not self.dispatch(BaseImageGenerated(image=base_image), epoch):
                return

            logger.info(f"[{tag}] Step 3/3: modified image")
            modified_image = await self.provider.generate_modified_image(
                base_image, level.modification_prompt
            )
            self.dispatch(ModifiedImageGenerated(image=modified_image), epoch)
        except asyncio.CancelledError:
            logger.info(f"[{tag}] Generation cancelled (epoch {epoch})")
            raise
        except Exception as e:
            logger.error(f"[{tag}] Generation failed: {type(e).__name__}: {e}")
            self.dispatch(GenerationFailed(message=GENERATION_ERROR_MESSAGE), epoch)
