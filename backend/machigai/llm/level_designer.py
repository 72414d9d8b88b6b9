"""
Level Designer - asks the LLM for a puzzle layout and validates the reply.

The reply must describe exactly the number of differences the difficulty
requires, each with coordinates in 0-100. Anything else is reported as a
ContentProviderError so the session fails cleanly instead of crashing.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError

from machigai.engine.errors import InvalidLevelError
from machigai.engine.protocols import ContentProviderError
from machigai.engine.state_machine import check_level
from machigai.llm.client import get_completion, get_timeout, parse_json_response
from machigai.llm.prompt_loader import get_loader
from machigai.models.catalog import get_difficulty_config
from machigai.models.game import Difficulty, Level

logger = logging.getLogger(__name__)

# Accept both snake_case and the camelCase some models prefer
_FIELD_ALIASES = {
    "basePrompt": "base_prompt",
    "modificationPrompt": "modification_prompt",
}


def build_messages(theme: str, difficulty: Difficulty) -> list[dict[str, str]]:
    """Build the chat messages for a level design request."""
    config = get_difficulty_config(difficulty)
    loader = get_loader()
    system_prompt = loader.get_prompt("level_designer", "system_prompt.txt")
    user_prompt = loader.get_prompt("level_designer", "user_prompt.txt").format(
        theme=theme,
        label=config.label,
        count=config.count,
        guidance=config.guidance,
    )
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


def parse_level(raw: str | None, theme: str, difficulty: Difficulty) -> Level:
    """Turn a raw LLM reply into a validated Level.

    Raises:
        ContentProviderError: If the reply is not usable
    """
    try:
        data = parse_json_response(raw)
    except ValueError as e:
        raise ContentProviderError(str(e)) from e

    for alias, name in _FIELD_ALIASES.items():
        if alias in data and name not in data:
            data[name] = data.pop(alias)

    # The model may rename the theme; an empty one falls back to the request
    if not data.get("theme"):
        data["theme"] = theme

    differences = data.get("differences")
    if not isinstance(differences, list):
        raise ContentProviderError("Level metadata has no differences list")
    data["differences"] = [
        {**d, "found": False} if isinstance(d, dict) else d for d in differences
    ]

    try:
        level = Level.model_validate(data)
    except ValidationError as e:
        raise ContentProviderError(
            f"Malformed level metadata: {e.error_count()} validation error(s)"
        ) from e

    if not level.base_prompt.strip() or not level.modification_prompt.strip():
        raise ContentProviderError("Level metadata is missing an image prompt")

    try:
        check_level(level, difficulty)
    except InvalidLevelError as e:
        raise ContentProviderError(str(e)) from e

    return level


class LevelDesigner:
    """Generates level metadata for a theme and difficulty."""

    def __init__(
        self,
        model: str | None = None,
        temperature: float = 0.8,
        max_tokens: int = 4096,
        timeout: float | None = None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout if timeout is not None else get_timeout()

    async def design(self, theme: str, difficulty: Difficulty) -> Level:
        """Generate and validate a level."""
        logger.info(f"Designing level: theme={theme!r}, difficulty={difficulty.value}")
        messages = build_messages(theme, difficulty)

        try:
            raw = await asyncio.wait_for(
                get_completion(
                    messages,
                    model=self.model,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    response_format={"type": "json_object"},
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ContentProviderError(
                f"Level design timed out after {self.timeout}s", is_retryable=True
            ) from e
        except Exception as e:
            raise ContentProviderError(f"LLM error: {e}") from e

        level = parse_level(raw, theme, difficulty)
        logger.info(
            f"Level designed: {len(level.differences)} differences, theme={level.theme!r}"
        )
        return level
