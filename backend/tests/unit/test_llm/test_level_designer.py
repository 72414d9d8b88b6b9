"""Unit tests for level metadata generation.

Tests cover:
- Prompt construction per difficulty
- Parsing and validating LLM replies
- Converting malformed replies and LLM errors to ContentProviderError
"""

import asyncio
import json

import pytest
from unittest.mock import AsyncMock, patch

from machigai.engine.protocols import ContentProviderError
from machigai.llm.client import parse_json_response
from machigai.llm.level_designer import LevelDesigner, build_messages, parse_level
from machigai.models.game import Difficulty


def _reply(count: int = 3, **overrides) -> dict:
    data = {
        "theme": "Busy Kitchen",
        "base_prompt": "A kitchen with a red kettle on the stove",
        "modification_prompt": "Make the kettle blue",
        "differences": [
            {"id": str(i + 1), "description": f"Change {i + 1}", "x": 10 * (i + 1), "y": 20}
            for i in range(count)
        ],
    }
    data.update(overrides)
    return data


class TestBuildMessages:
    """Tests for prompt construction."""

    @pytest.mark.parametrize(
        "difficulty,count", [(Difficulty.EASY, 3), (Difficulty.HARD, 7)]
    )
    def test_prompt_mentions_count_and_theme(self, difficulty, count) -> None:
        messages = build_messages("Toy Shop", difficulty)

        assert [m["role"] for m in messages] == ["system", "user"]
        user = messages[1]["content"]
        assert "Toy Shop" in user
        assert f"exactly {count}" in user

    def test_prompt_includes_guidance(self) -> None:
        user = build_messages("Toy Shop", Difficulty.HARD)[1]["content"]

        assert "extremely subtle" in user


class TestParseLevel:
    """Tests for reply validation."""

    def test_valid_reply(self) -> None:
        level = parse_level(json.dumps(_reply()), "Busy Kitchen", Difficulty.EASY)

        assert len(level.differences) == 3
        assert all(not d.found for d in level.differences)

    def test_code_fenced_reply(self) -> None:
        raw = "```json\n" + json.dumps(_reply()) + "\n```"

        level = parse_level(raw, "Busy Kitchen", Difficulty.EASY)

        assert level.theme == "Busy Kitchen"

    def test_camel_case_keys(self) -> None:
        data = _reply()
        data["basePrompt"] = data.pop("base_prompt")
        data["modificationPrompt"] = data.pop("modification_prompt")

        level = parse_level(json.dumps(data), "Busy Kitchen", Difficulty.EASY)

        assert level.base_prompt.startswith("A kitchen")

    def test_missing_theme_uses_request(self) -> None:
        data = _reply()
        del data["theme"]

        level = parse_level(json.dumps(data), "Toy Shop", Difficulty.EASY)

        assert level.theme == "Toy Shop"

    def test_found_flags_cleared(self) -> None:
        data = _reply()
        data["differences"][0]["found"] = True

        level = parse_level(json.dumps(data), "Busy Kitchen", Difficulty.EASY)

        assert level.found_count == 0

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "not json at all",
            json.dumps(_reply(count=4)),
            json.dumps(_reply(differences="none")),
            json.dumps(_reply(base_prompt="")),
            json.dumps({"theme": "x"}),
        ],
    )
    def test_malformed_replies(self, raw) -> None:
        with pytest.raises(ContentProviderError):
            parse_level(raw, "Busy Kitchen", Difficulty.EASY)

    def test_non_numeric_coordinate(self) -> None:
        data = _reply()
        data["differences"][1]["x"] = "middle"

        with pytest.raises(ContentProviderError):
            parse_level(json.dumps(data), "Busy Kitchen", Difficulty.EASY)

    def test_out_of_range_coordinate(self) -> None:
        data = _reply()
        data["differences"][1]["y"] = 140

        with pytest.raises(ContentProviderError):
            parse_level(json.dumps(data), "Busy Kitchen", Difficulty.EASY)

    def test_duplicate_ids(self) -> None:
        data = _reply()
        data["differences"][2]["id"] = "1"

        with pytest.raises(ContentProviderError):
            parse_level(json.dumps(data), "Busy Kitchen", Difficulty.EASY)


class TestLevelDesigner:
    """Tests for LevelDesigner.design with a mocked completion."""

    @pytest.mark.asyncio
    async def test_design_returns_level(self) -> None:
        designer = LevelDesigner(timeout=1)
        completion = AsyncMock(return_value=json.dumps(_reply(count=5)))

        with patch("machigai.llm.level_designer.get_completion", completion):
            level = await designer.design("Busy Kitchen", Difficulty.MEDIUM)

        assert len(level.differences) == 5
        kwargs = completion.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_llm_error_wrapped(self) -> None:
        designer = LevelDesigner(timeout=1)
        completion = AsyncMock(side_effect=RuntimeError("quota exceeded"))

        with patch("machigai.llm.level_designer.get_completion", completion):
            with pytest.raises(ContentProviderError, match="quota exceeded"):
                await designer.design("Busy Kitchen", Difficulty.MEDIUM)

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self) -> None:
        designer = LevelDesigner(timeout=0.01)

        async def slow(*args, **kwargs):
            await asyncio.sleep(1)

        with patch("machigai.llm.level_designer.get_completion", slow):
            with pytest.raises(ContentProviderError) as exc_info:
                await designer.design("Busy Kitchen", Difficulty.MEDIUM)

        assert exc_info.value.is_retryable is True


class TestParseJsonResponse:
    """Tests for the shared JSON reply parser."""

    def test_plain_object(self) -> None:
        assert parse_json_response('{"a": 1}') == {"a": 1}

    def test_object_inside_chatter(self) -> None:
        assert parse_json_response('Sure! {"a": 1} Enjoy.') == {"a": 1}

    @pytest.mark.parametrize("raw", [None, "   ", "[1, 2]", "{broken"])
    def test_rejects_non_objects(self, raw) -> None:
        with pytest.raises(ValueError):
            parse_json_response(raw)
