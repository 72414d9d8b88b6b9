"""
Image Generator - Uses Google Gemini to paint the two puzzle pictures.

The base picture comes from a text prompt; the modified picture is an
image-to-image edit of the base picture. Both are returned as raw image
bytes in whatever format the model produced (PNG in practice); callers use
`detect_mime_type` to label them.
"""

import os
import base64
import asyncio
import logging
from typing import Any, Optional

from dotenv import load_dotenv

from machigai.engine.protocols import ContentProviderError
from machigai.llm.client import get_timeout
from machigai.llm.prompt_loader import get_loader

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
ASPECT_RATIO = "1:1"

# Leading bytes of the formats Gemini can return
IMAGE_SIGNATURES = {
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"\xff\xd8\xff": "image/jpeg",
    b"GIF87a": "image/gif",
    b"GIF89a": "image/gif",
}


def detect_mime_type(data: bytes) -> str:
    """Guess an image's MIME type from its leading bytes (default PNG)."""
    for signature, mime_type in IMAGE_SIGNATURES.items():
        if data.startswith(signature):
            return mime_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "image/png"


def get_image_model() -> str:
    """Get configured image model name"""
    return os.getenv("IMAGE_MODEL", DEFAULT_IMAGE_MODEL)


def get_base_image_prompt(prompt: str) -> str:
    """Wrap a scene prompt with the house art direction."""
    template = get_loader().get_prompt("image_generator", "base_image.txt")
    return template.format(prompt=prompt).strip()


def get_edit_prompt(instructions: str) -> str:
    """Wrap modification instructions with the identity constraints."""
    template = get_loader().get_prompt("image_generator", "modified_image.txt")
    return template.format(instructions=instructions).strip()


def extract_image_bytes(response: Any) -> Optional[bytes]:
    """Return the first inline image in a generate_content response."""
    parts = getattr(response, "parts", None)
    if not parts:
        candidates = getattr(response, "candidates", None) or []
        content = getattr(candidates[0], "content", None) if candidates else None
        parts = getattr(content, "parts", None) or []

    for part in parts:
        inline_data = getattr(part, "inline_data", None)
        if inline_data is not None and inline_data.data:
            data = inline_data.data
            if isinstance(data, str):
                data = base64.b64decode(data)
            return data
    return None


def _finish_reason(response: Any) -> Optional[str]:
    candidates = getattr(response, "candidates", None)
    if candidates:
        reason = getattr(candidates[0], "finish_reason", None)
        return str(reason) if reason is not None else None
    return None


class ImageGenerator:
    """Generates the base and modified puzzle pictures."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        self.model = model or get_image_model()
        self.timeout = timeout if timeout is not None else get_timeout()
        self._client = None

    def _get_client(self):
        from google import genai

        if self._client is None:
            if not self.api_key:
                raise ContentProviderError(
                    "GEMINI_API_KEY environment variable is required"
                )
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _config(self):
        from google.genai import types

        return types.GenerateContentConfig(
            response_modalities=["IMAGE"],
            image_config=types.ImageConfig(aspect_ratio=ASPECT_RATIO),
        )

    async def generate_base_image(self, prompt: str) -> bytes:
        """Render the first picture from a scene prompt."""
        return await self._generate(get_base_image_prompt(prompt), label="base")

    async def generate_modified_image(self, base_image: bytes, instructions: str) -> bytes:
        """Edit the base picture according to the modification instructions."""
        from google.genai import types

        image_part = types.Part.from_bytes(
            data=base_image, mime_type=detect_mime_type(base_image)
        )
        contents = [image_part, get_edit_prompt(instructions)]
        return await self._generate(contents, label="modified")

    async def _generate(self, contents: Any, label: str) -> bytes:
        client = self._get_client()
        config = self._config()

        logger.info(f"Image request ({label}): model={self.model}")
        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    client.models.generate_content,
                    model=self.model,
                    contents=contents,
                    config=config,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ContentProviderError(
                f"Image generation ({label}) timed out after {self.timeout}s",
                is_retryable=True,
            ) from e
        except Exception as e:
            error_str = str(e)
            is_retryable = any(code in error_str for code in ["503", "429", "UNAVAILABLE"])
            raise ContentProviderError(
                f"API error: {error_str}", is_retryable=is_retryable
            ) from e

        image = extract_image_bytes(response)
        if image is None:
            raise ContentProviderError(
                f"No image data in response (finish_reason={_finish_reason(response)})"
            )

        logger.info(f"Image received ({label}): {len(image)} bytes")
        return image
