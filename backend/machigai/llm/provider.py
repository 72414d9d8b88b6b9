"""
Gemini content provider - the production ContentProvider.

Level metadata goes through LiteLLM; pictures go through the google-genai SDK.
"""

from __future__ import annotations

from machigai.llm.image_generator import ImageGenerator
from machigai.llm.level_designer import LevelDesigner
from machigai.models.game import Difficulty, Level


class GeminiContentProvider:
    """ContentProvider backed by Gemini text and image models."""

    def __init__(
        self,
        designer: LevelDesigner | None = None,
        images: ImageGenerator | None = None,
    ):
        self.designer = designer or LevelDesigner()
        self.images = images or ImageGenerator()

    async def generate_level_metadata(self, theme: str, difficulty: Difficulty) -> Level:
        return await self.designer.design(theme, difficulty)

    async def generate_base_image(self, prompt: str) -> bytes:
        return await self.images.generate_base_image(prompt)

    async def generate_modified_image(self, base_image: bytes, instructions: str) -> bytes:
        return await self.images.generate_modified_image(base_image, instructions)
