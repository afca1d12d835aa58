"""Tests for poa.gateway.GeminiGateway with a mocked chat model."""

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from poa.agents.story_writer import EPICS_SCHEMA
from poa.gateway import GeminiGateway, GenerationError, build_message
from poa.models import ImagePayload


def _mock_llm_response(content):
    response = MagicMock()
    response.content = content
    return response


def _mock_llm(side_effect):
    llm = MagicMock()
    llm.ainvoke = AsyncMock(side_effect=side_effect)
    return llm


class TestBuildMessage:
    def test_text_only(self):
        message = build_message("hello")
        assert message.content == "hello"

    def test_with_image(self):
        message = build_message("hello", ImagePayload(data=b"\x89PNG", mime_type="image/png"))
        text_part, image_part = message.content
        assert text_part == {"type": "text", "text": "hello"}
        encoded = base64.b64encode(b"\x89PNG").decode("ascii")
        assert image_part["image_url"] == f"data:image/png;base64,{encoded}"


@pytest.mark.usefixtures("mock_config")
class TestGeminiGateway:
    @pytest.mark.asyncio
    @patch("poa.gateway.ChatGoogleGenerativeAI")
    async def test_prototype_uses_prototype_model_and_strips_fences(self, MockLLM):
        MockLLM.return_value = _mock_llm([_mock_llm_response("```html\n<main>hi</main>\n```")])

        markup = await GeminiGateway().generate_prototype("Build a login form")

        assert markup == "<main>hi</main>"
        assert MockLLM.call_args.kwargs["model"] == "gemini-test-pro"

    @pytest.mark.asyncio
    @patch("poa.gateway.ChatGoogleGenerativeAI")
    async def test_prompt_contains_requirements(self, MockLLM):
        llm = _mock_llm([_mock_llm_response("<main/>")])
        MockLLM.return_value = llm

        await GeminiGateway().generate_prototype("Build a login form")

        messages = llm.ainvoke.call_args.args[0]
        assert "Build a login form" in messages[0].content

    @pytest.mark.asyncio
    @patch("poa.gateway.ChatGoogleGenerativeAI")
    async def test_stories_request_json_from_stories_model(self, MockLLM, stories_json):
        MockLLM.return_value = _mock_llm([_mock_llm_response(stories_json)])

        text = await GeminiGateway().generate_stories("Build a login form")

        assert text == stories_json
        kwargs = MockLLM.call_args.kwargs
        assert kwargs["model"] == "gemini-test-flash"
        assert kwargs["response_mime_type"] == "application/json"
        assert kwargs["response_schema"] == EPICS_SCHEMA

    @pytest.mark.asyncio
    @patch("poa.gateway.ChatGoogleGenerativeAI")
    async def test_joins_list_content(self, MockLLM):
        parts = [{"type": "text", "text": "<main>"}, {"type": "text", "text": "</main>"}]
        MockLLM.return_value = _mock_llm([_mock_llm_response(parts)])

        assert await GeminiGateway().refine("<main/>", "tweak") == "<main></main>"

    @pytest.mark.asyncio
    @patch("poa.gateway.ChatGoogleGenerativeAI")
    async def test_variant_prompt_includes_previous_markup(self, MockLLM):
        llm = _mock_llm([_mock_llm_response("<main>new</main>")])
        MockLLM.return_value = llm

        await GeminiGateway().generate_variant("Build a login form", "<main>old</main>")

        prompt = llm.ainvoke.call_args.args[0][0].content
        assert "<main>old</main>" in prompt
        assert "distinctly different" in prompt

    @pytest.mark.asyncio
    @patch("poa.gateway.ChatGoogleGenerativeAI")
    async def test_failure_becomes_generation_error(self, MockLLM):
        MockLLM.return_value = _mock_llm([RuntimeError("quota exceeded")])

        with pytest.raises(GenerationError, match="Failed to generate UI prototype.") as excinfo:
            await GeminiGateway().generate_prototype("Build a login form")

        assert isinstance(excinfo.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    @patch("poa.gateway.ChatGoogleGenerativeAI")
    async def test_refine_failure_message(self, MockLLM):
        MockLLM.return_value = _mock_llm([RuntimeError("boom")])

        with pytest.raises(GenerationError, match="Failed to refine UI prototype."):
            await GeminiGateway().refine("<main/>", "tweak")
