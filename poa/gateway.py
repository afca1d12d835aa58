"""Generation gateway: the boundary to the content-generation service.

``GenerationGateway`` is the contract the orchestrator relies on. Every call
is a coroutine that returns text or raises ``GenerationError``. Stories come
back as JSON text; turning that into epics (and failing on malformed output)
is the caller's job.

``GeminiGateway`` implements the contract on Gemini chat models.
"""

import base64
import sys
from typing import Protocol

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from poa.agents.prototyper import (
    build_prototype_prompt,
    build_refine_prompt,
    build_variant_prompt,
)
from poa.agents.story_writer import EPICS_SCHEMA, build_stories_prompt
from poa.config import get_config
from poa.models import ImagePayload
from poa.utils.parsing import ainvoke_with_retry, message_text, strip_fences


class GenerationError(Exception):
    """The generation service failed; the message is safe to show to the user."""


class GenerationGateway(Protocol):
    async def generate_prototype(self, requirements: str, image: ImagePayload | None = None) -> str: ...

    async def generate_stories(self, requirements: str, image: ImagePayload | None = None) -> str: ...

    async def refine(self, current_markup: str, instruction: str) -> str: ...

    async def generate_variant(
        self, requirements: str, previous_markup: str, image: ImagePayload | None = None
    ) -> str: ...


def build_message(prompt: str, image: ImagePayload | None = None) -> HumanMessage:
    """Build a user message carrying the prompt and, optionally, inline image data."""
    if image is None:
        return HumanMessage(content=prompt)
    encoded = base64.b64encode(image.data).decode("ascii")
    return HumanMessage(
        content=[
            {"type": "text", "text": prompt},
            {"type": "image_url", "image_url": f"data:{image.mime_type};base64,{encoded}"},
        ]
    )


class GeminiGateway:
    """Gemini-backed gateway. Markup calls use the prototype model, stories the stories model."""

    def __init__(self, prototype_model: str | None = None, stories_model: str | None = None) -> None:
        config = get_config()
        self.prototype_model = prototype_model or config["prototype_model"]
        self.stories_model = stories_model or config["stories_model"]

    def _markup_llm(self):
        return ChatGoogleGenerativeAI(model=self.prototype_model)

    def _stories_llm(self):
        return ChatGoogleGenerativeAI(
            model=self.stories_model,
            temperature=0,
            response_mime_type="application/json",
            response_schema=EPICS_SCHEMA,
        )

    async def _call(self, llm, message: HumanMessage, failure: str) -> str:
        try:
            response = await ainvoke_with_retry(llm, [message])
        except Exception as exc:
            print(f"[POA] {failure} Cause: {exc!r}", file=sys.stderr)
            raise GenerationError(failure) from exc
        return message_text(response)

    async def generate_prototype(self, requirements: str, image: ImagePayload | None = None) -> str:
        prompt = build_prototype_prompt(requirements, has_image=image is not None)
        text = await self._call(
            self._markup_llm(), build_message(prompt, image), "Failed to generate UI prototype."
        )
        return strip_fences(text)

    async def generate_stories(self, requirements: str, image: ImagePayload | None = None) -> str:
        prompt = build_stories_prompt(requirements, has_image=image is not None)
        return await self._call(
            self._stories_llm(), build_message(prompt, image), "Failed to generate Jira stories."
        )

    async def refine(self, current_markup: str, instruction: str) -> str:
        prompt = build_refine_prompt(current_markup, instruction)
        text = await self._call(
            self._markup_llm(), build_message(prompt), "Failed to refine UI prototype."
        )
        return strip_fences(text)

    async def generate_variant(
        self, requirements: str, previous_markup: str, image: ImagePayload | None = None
    ) -> str:
        prompt = build_variant_prompt(requirements, previous_markup, has_image=image is not None)
        text = await self._call(
            self._markup_llm(), build_message(prompt, image), "Failed to generate UI variant."
        )
        return strip_fences(text)
