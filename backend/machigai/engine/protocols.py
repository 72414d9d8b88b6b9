"""
Protocol definitions for the content generation boundary.

The session controller depends only on this interface, so the Gemini
implementation can be swapped for a scripted fake in tests.

Pipeline:
    generate_level_metadata(theme, difficulty) -> Level
                    |
                    v
    generate_base_image(level.base_prompt) -> PNG bytes
                    |
                    v
    generate_modified_image(base, level.modification_prompt) -> PNG bytes
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from machigai.models.game import Difficulty, Level


class ContentProviderError(Exception):
    """A generation request failed (network error, timeout, bad payload)."""

    def __init__(self, message: str, is_retryable: bool = False):
        super().__init__(message)
        self.message = message
        self.is_retryable = is_retryable


@runtime_checkable
class ContentProvider(Protocol):
    """Generates puzzle content for the session controller.

    Implementations raise ContentProviderError (or any other exception) on
    failure; they never return partial results.
    """

    async def generate_level_metadata(
        self, theme: str, difficulty: "Difficulty"
    ) -> "Level":
        """Design a level for the theme.

        Args:
            theme: Puzzle setting, e.g. "Busy Kitchen"
            difficulty: Controls the difference count and change magnitude

        Returns:
            Level with exactly the configured number of differences
        """
        ...

    async def generate_base_image(self, prompt: str) -> bytes:
        """Render the first picture from a text prompt."""
        ...

    async def generate_modified_image(
        self, base_image: bytes, instructions: str
    ) -> bytes:
        """Edit the base picture, changing only what the instructions ask for."""
        ...
