"""Tests for poa.orchestrator.GenerationOrchestrator with a fake gateway."""

import asyncio

import pytest

from poa.gateway import GenerationError
from poa.models import OutputTab
from poa.orchestrator import STORIES_PARSE_ERROR, GenerationOrchestrator
from poa.state import SessionState, UploadedImage


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


class TestGenerate:
    @pytest.mark.asyncio
    async def test_success_sets_both_artifacts(self, gateway, epics):
        session = SessionState(user_input="Build a login form")

        assert await GenerationOrchestrator(gateway).generate(session) is True

        assert session.ui_code == "<main>login</main>"
        assert session.jira_stories == epics
        assert session.error is None
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_both_calls_get_same_input_and_image(self, gateway):
        image = UploadedImage.from_bytes(b"\x89PNG", "image/png")
        session = SessionState(user_input="Build a login form", uploaded_image=image)

        await GenerationOrchestrator(gateway).generate(session)

        gateway.generate_prototype.assert_awaited_once_with("Build a login form", image.payload())
        gateway.generate_stories.assert_awaited_once_with("Build a login form", image.payload())

    @pytest.mark.asyncio
    async def test_calls_run_concurrently(self, gateway, stories_json):
        prototype_started = asyncio.Event()
        stories_started = asyncio.Event()

        async def prototype(*_args):
            prototype_started.set()
            await asyncio.wait_for(stories_started.wait(), timeout=2)
            return "<main>login</main>"

        async def stories(*_args):
            stories_started.set()
            await asyncio.wait_for(prototype_started.wait(), timeout=2)
            return stories_json

        gateway.generate_prototype.side_effect = prototype
        gateway.generate_stories.side_effect = stories
        session = SessionState(user_input="Build a login form")

        await GenerationOrchestrator(gateway).generate(session)

        assert session.error is None
        assert session.ui_code == "<main>login</main>"

    @pytest.mark.asyncio
    async def test_starts_unsaved_draft(self, gateway):
        session = SessionState(
            user_input="Build a login form",
            ui_code="<old/>",
            active_project_id="p1",
            error="previous failure",
            active_tab=OutputTab.STORY_BOARD,
        )

        await GenerationOrchestrator(gateway).generate(session)

        assert session.active_project_id is None
        assert session.active_tab is OutputTab.UI_PROTOTYPE
        assert session.error is None

    @pytest.mark.asyncio
    async def test_loading_while_in_flight(self, gateway):
        session = SessionState(user_input="Build a login form", ui_code="<old/>")
        seen = {}

        async def prototype(*_args):
            seen["loading"] = session.is_loading
            seen["ui_code"] = session.ui_code
            return "<main/>"

        gateway.generate_prototype.side_effect = prototype
        await GenerationOrchestrator(gateway).generate(session)

        assert seen == {"loading": True, "ui_code": None}
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_malformed_stories_keep_prototype(self, gateway):
        gateway.generate_stories.return_value = '[{"epicTitle": "Auth", "stories": ['
        session = SessionState(user_input="Build a login form")

        await GenerationOrchestrator(gateway).generate(session)

        assert session.ui_code == "<main>login</main>"
        assert session.jira_stories is None
        assert session.error == STORIES_PARSE_ERROR
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_stories_failure_drops_both(self, gateway):
        gateway.generate_stories.side_effect = GenerationError("Failed to generate Jira stories.")
        session = SessionState(user_input="Build a login form")

        await GenerationOrchestrator(gateway).generate(session)

        assert session.ui_code is None
        assert session.jira_stories is None
        assert session.error == "Failed to generate Jira stories."
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_prototype_failure_drops_both(self, gateway):
        gateway.generate_prototype.side_effect = GenerationError("Failed to generate UI prototype.")
        session = SessionState(user_input="Build a login form")

        await GenerationOrchestrator(gateway).generate(session)

        assert session.ui_code is None
        assert session.jira_stories is None
        assert session.error == "Failed to generate UI prototype."

    @pytest.mark.asyncio
    async def test_blank_failure_message_gets_fallback(self, gateway):
        gateway.generate_prototype.side_effect = RuntimeError()
        session = SessionState(user_input="Build a login form")

        await GenerationOrchestrator(gateway).generate(session)

        assert session.error == "An unknown error occurred."

    @pytest.mark.asyncio
    async def test_image_only_is_allowed(self, gateway):
        session = SessionState(user_input="   ", uploaded_image=UploadedImage.from_bytes(b"img", "image/png"))

        assert await GenerationOrchestrator(gateway).generate(session) is True
        assert session.ui_code == "<main>login</main>"

    @pytest.mark.asyncio
    async def test_refused_without_input(self, gateway):
        session = SessionState(user_input="  ", ui_code="<old/>", active_project_id="p1")

        assert await GenerationOrchestrator(gateway).generate(session) is False

        gateway.generate_prototype.assert_not_awaited()
        gateway.generate_stories.assert_not_awaited()
        assert session.ui_code == "<old/>"
        assert session.active_project_id == "p1"


# ---------------------------------------------------------------------------
# refine
# ---------------------------------------------------------------------------


class TestRefine:
    @pytest.mark.asyncio
    async def test_success_replaces_prototype(self, gateway, epics):
        session = SessionState(ui_code="<main/>", jira_stories=epics, active_project_id="p1", error="old")

        assert await GenerationOrchestrator(gateway).refine(session, "Make it dark") is True

        gateway.refine.assert_awaited_once_with("<main/>", "Make it dark")
        assert session.ui_code == "<main>refined</main>"
        assert session.jira_stories == epics
        assert session.active_project_id is None
        assert session.error is None
        assert session.is_refining is False

    @pytest.mark.asyncio
    async def test_failure_keeps_prototype(self, gateway):
        gateway.refine.side_effect = GenerationError("Failed to refine UI prototype.")
        session = SessionState(ui_code="<main/>")

        await GenerationOrchestrator(gateway).refine(session, "Make it dark")

        assert session.ui_code == "<main/>"
        assert session.error == "Failed to refine UI prototype."
        assert session.is_refining is False

    @pytest.mark.asyncio
    async def test_refining_flag_while_in_flight(self, gateway):
        session = SessionState(ui_code="<main/>")
        seen = []

        async def refine(*_args):
            seen.append(session.is_refining)
            return "<main/>"

        gateway.refine.side_effect = refine
        await GenerationOrchestrator(gateway).refine(session, "tweak")

        assert seen == [True]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("instruction", ["", "   ", None])
    async def test_refused_with_blank_instruction(self, gateway, instruction):
        session = SessionState(ui_code="<main/>")

        assert await GenerationOrchestrator(gateway).refine(session, instruction) is False
        gateway.refine.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refused_without_prototype(self, gateway):
        session = SessionState(active_project_id="p1")

        assert await GenerationOrchestrator(gateway).refine(session, "Make it dark") is False
        gateway.refine.assert_not_awaited()
        assert session.active_project_id == "p1"


# ---------------------------------------------------------------------------
# generate_variant
# ---------------------------------------------------------------------------


class TestGenerateVariant:
    @pytest.mark.asyncio
    async def test_success_replaces_prototype(self, gateway):
        session = SessionState(user_input="Build a login form", ui_code="<main/>", active_tab=OutputTab.JIRA_STORIES)

        assert await GenerationOrchestrator(gateway).generate_variant(session) is True

        gateway.generate_variant.assert_awaited_once_with("Build a login form", "<main/>", None)
        assert session.ui_code == "<main>variant</main>"
        assert session.active_tab is OutputTab.UI_PROTOTYPE
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_clears_prototype_while_in_flight(self, gateway):
        session = SessionState(user_input="Build a login form", ui_code="<main/>")
        seen = {}

        async def variant(*_args):
            seen["ui_code"] = session.ui_code
            seen["loading"] = session.is_loading
            return "<main>variant</main>"

        gateway.generate_variant.side_effect = variant
        await GenerationOrchestrator(gateway).generate_variant(session)

        assert seen == {"ui_code": None, "loading": True}

    @pytest.mark.asyncio
    async def test_failure_restores_previous_prototype(self, gateway):
        gateway.generate_variant.side_effect = GenerationError("Failed to generate UI variant.")
        session = SessionState(user_input="Build a login form", ui_code="<main>original</main>")

        await GenerationOrchestrator(gateway).generate_variant(session)

        assert session.ui_code == "<main>original</main>"
        assert session.error == "Failed to generate UI variant."
        assert session.is_loading is False

    @pytest.mark.asyncio
    async def test_starts_unsaved_draft(self, gateway):
        session = SessionState(user_input="Build a login form", ui_code="<main/>", active_project_id="p1")

        await GenerationOrchestrator(gateway).generate_variant(session)

        assert session.active_project_id is None

    @pytest.mark.asyncio
    async def test_refused_without_prototype(self, gateway):
        session = SessionState(user_input="Build a login form")

        assert await GenerationOrchestrator(gateway).generate_variant(session) is False
        gateway.generate_variant.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refused_without_input(self, gateway):
        session = SessionState(user_input="", ui_code="<main/>")

        assert await GenerationOrchestrator(gateway).generate_variant(session) is False
        assert session.ui_code == "<main/>"
