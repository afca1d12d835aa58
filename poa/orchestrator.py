"""Generation orchestrator: sequences gateway calls and writes results into the session.

Each operation follows Idle -> Loading -> Success | Failed -> Idle: a busy
flag is raised, the gateway is awaited, the outcome is written back, and the
flag is always lowered. Operations refuse silently (return False) when their
preconditions are not met; overlapping triggers are prevented by the UI
disabling its controls while a flag is up, not by locking here.
"""

import sys

from poa.graph import run_dual_generation
from poa.models import OutputTab, StoriesParseError, parse_epics
from poa.state import SessionState
from poa.utils.validator import has_generation_input

STORIES_PARSE_ERROR = "Failed to parse generated stories. Please try again."


def _error_message(exc: Exception, fallback: str) -> str:
    message = str(exc)
    return message if message else fallback


class GenerationOrchestrator:
    def __init__(self, gateway) -> None:
        self.gateway = gateway

    async def generate(self, session: SessionState) -> bool:
        """Generate prototype and stories together from the session's input and image.

        The draft is detached from any saved project. If either call fails,
        both artifacts stay empty. If only the stories text fails to parse,
        the prototype is kept and the parse error is reported.
        """
        image = session.image_payload()
        if not has_generation_input(session.user_input, image):
            return False

        session.is_loading = True
        session.error = None
        session.ui_code = None
        session.jira_stories = None
        session.active_project_id = None
        session.active_tab = OutputTab.UI_PROTOTYPE

        try:
            result = await run_dual_generation(self.gateway, session.user_input, image)
            session.ui_code = result["ui_code"]
            try:
                session.jira_stories = parse_epics(result["stories_text"])
            except StoriesParseError as exc:
                print(
                    f"[POA] Failed to parse stories ({len(result['stories_text'] or '')} chars): {exc}",
                    file=sys.stderr,
                )
                session.error = STORIES_PARSE_ERROR
        except Exception as exc:
            print(f"[POA] Generation failed: {exc!r}", file=sys.stderr)
            session.ui_code = None
            session.jira_stories = None
            session.error = _error_message(exc, "An unknown error occurred.")
        finally:
            session.is_loading = False
        return True

    async def refine(self, session: SessionState, instruction: str) -> bool:
        """Apply a free-text change request to the current prototype."""
        if not instruction or not instruction.strip() or session.ui_code is None:
            return False

        session.is_refining = True
        session.error = None
        session.active_project_id = None
        try:
            session.ui_code = await self.gateway.refine(session.ui_code, instruction)
        except Exception as exc:
            print(f"[POA] Refinement failed: {exc!r}", file=sys.stderr)
            session.error = _error_message(exc, "An unknown error occurred during refinement.")
        finally:
            session.is_refining = False
        return True

    async def generate_variant(self, session: SessionState) -> bool:
        """Replace the prototype with a distinctly different design.

        The prototype is cleared while the call is in flight and put back
        exactly as it was if the call fails.
        """
        image = session.image_payload()
        if not has_generation_input(session.user_input, image) or session.ui_code is None:
            return False

        previous_ui_code = session.ui_code
        session.is_loading = True
        session.error = None
        session.ui_code = None
        session.active_project_id = None
        session.active_tab = OutputTab.UI_PROTOTYPE
        try:
            session.ui_code = await self.gateway.generate_variant(
                session.user_input, previous_ui_code, image
            )
        except Exception as exc:
            print(f"[POA] Variant generation failed: {exc!r}", file=sys.stderr)
            session.ui_code = previous_ui_code
            session.error = _error_message(exc, "An unknown error occurred while generating a variant.")
        finally:
            session.is_loading = False
        return True
