"""Unit tests for the Gemini image generator.

Tests cover:
- Prompt framing for base and modified pictures
- Extracting inline image bytes from SDK responses
- Detecting the image format from its leading bytes
- Error mapping (no image, API error, timeout, missing key)
"""

import asyncio
import base64
from types import SimpleNamespace

import pytest
from unittest.mock import MagicMock

from machigai.engine.protocols import ContentProviderError
from machigai.llm.image_generator import (
    ImageGenerator,
    detect_mime_type,
    extract_image_bytes,
    get_base_image_prompt,
    get_edit_prompt,
)

PNG = b"\x89PNG\r\n\x1a\nfake"


def _response(data=PNG, finish_reason="STOP"):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data) if data else None)
    return SimpleNamespace(
        parts=[part],
        candidates=[SimpleNamespace(finish_reason=finish_reason)],
    )


def _generator_with(generate_content) -> ImageGenerator:
    generator = ImageGenerator(api_key="test-key", model="test-image-model", timeout=1)
    generator._client = SimpleNamespace(
        models=SimpleNamespace(generate_content=generate_content)
    )
    return generator


class TestPrompts:
    """Tests for prompt framing."""

    def test_base_prompt_framing(self) -> None:
        prompt = get_base_image_prompt("A kitchen with a red kettle")

        assert prompt.startswith("High-quality digital art")
        assert prompt.endswith("A kitchen with a red kettle")

    def test_edit_prompt_constraints(self) -> None:
        prompt = get_edit_prompt("Make the kettle blue")

        assert "Make the kettle blue" in prompt
        assert "PIXEL-PERFECT ALIGNMENT" in prompt


class TestExtractImageBytes:
    """Tests for reading image parts."""

    def test_inline_bytes(self) -> None:
        assert extract_image_bytes(_response()) == PNG

    def test_base64_string(self) -> None:
        encoded = base64.b64encode(PNG).decode()

        assert extract_image_bytes(_response(data=encoded)) == PNG

    def test_candidate_parts_fallback(self) -> None:
        part = SimpleNamespace(inline_data=SimpleNamespace(data=PNG))
        response = SimpleNamespace(
            parts=None,
            candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))],
        )

        assert extract_image_bytes(response) == PNG

    def test_text_only_response(self) -> None:
        assert extract_image_bytes(_response(data=None)) is None


class TestDetectMimeType:
    """Tests for labelling image bytes."""

    @pytest.mark.parametrize(
        "data,expected",
        [
            (PNG, "image/png"),
            (b"\xff\xd8\xff\xe0rest", "image/jpeg"),
            (b"GIF89a...", "image/gif"),
            (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"unknown", "image/png"),
        ],
    )
    def test_signatures(self, data, expected) -> None:
        assert detect_mime_type(data) == expected


class TestImageGenerator:
    """Tests for ImageGenerator with a stubbed SDK client."""

    @pytest.mark.asyncio
    async def test_base_image(self) -> None:
        generate = MagicMock(return_value=_response())
        generator = _generator_with(generate)

        image = await generator.generate_base_image("A kitchen")

        assert image == PNG
        kwargs = generate.call_args.kwargs
        assert kwargs["model"] == "test-image-model"
        assert "A kitchen" in kwargs["contents"]

    @pytest.mark.asyncio
    async def test_modified_image_sends_base_picture(self) -> None:
        generate = MagicMock(return_value=_response())
        generator = _generator_with(generate)

        image = await generator.generate_modified_image(PNG, "Make the kettle blue")

        assert image == PNG
        contents = generate.call_args.kwargs["contents"]
        assert len(contents) == 2
        assert contents[0].inline_data.mime_type == "image/png"
        assert "Make the kettle blue" in contents[1]

    @pytest.mark.asyncio
    async def test_no_image_in_response(self) -> None:
        generator = _generator_with(
            MagicMock(return_value=_response(data=None, finish_reason="SAFETY"))
        )

        with pytest.raises(ContentProviderError, match="SAFETY"):
            await generator.generate_base_image("A kitchen")

    @pytest.mark.asyncio
    async def test_api_error_retryable_flag(self) -> None:
        generator = _generator_with(MagicMock(side_effect=RuntimeError("503 UNAVAILABLE")))

        with pytest.raises(ContentProviderError) as exc_info:
            await generator.generate_base_image("A kitchen")

        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_timeout(self, monkeypatch) -> None:
        generator = _generator_with(MagicMock(return_value=_response()))
        generator.timeout = 0.01

        async def never(*args, **kwargs):
            await asyncio.sleep(1)

        monkeypatch.setattr(asyncio, "to_thread", never)

        with pytest.raises(ContentProviderError, match="timed out"):
            await generator.generate_base_image("A kitchen")

    @pytest.mark.asyncio
    async def test_missing_api_key(self, monkeypatch) -> None:
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        generator = ImageGenerator(api_key=None, timeout=1)

        with pytest.raises(ContentProviderError, match="GEMINI_API_KEY"):
            await generator.generate_base_image("A kitchen")
