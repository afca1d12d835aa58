"""Reconciliation between the working draft and the saved projects.

Decides whether the draft has unsaved changes relative to the project it is
linked to, and performs the save / update / load / delete / new-session
operations so the session and the store never disagree about which project
is active.
"""

import sys
import uuid
from copy import deepcopy
from datetime import UTC, datetime
from enum import Enum

from poa.config import get_config
from poa.models import OutputTab, Project
from poa.state import SessionState
from poa.store import ProjectStore
from poa.utils.validator import validate_project_name

DEFAULT_PROJECT_NAME = "New Project"
ELLIPSIS = "..."
SAVE_ERROR = "Failed to save project. Please try again."
DELETE_ERROR = "Failed to delete project. Please try again."


class CommitResult(str, Enum):
    UPDATED = "updated"  # active project overwritten with the draft
    NEEDS_NAME = "needs_name"  # unsaved draft; call create_named() once a name is chosen
    REFUSED = "refused"  # missing artifacts, or nothing changed
    FAILED = "failed"  # the store could not be written; see session.error


def _utcnow() -> str:
    return datetime.now(UTC).isoformat()


def _new_project_id(store: ProjectStore) -> str:
    taken = store.ids()
    while True:
        candidate = uuid.uuid4().hex
        if candidate not in taken:
            return candidate


def is_unchanged(session: SessionState, project: Project | None) -> bool:
    """True iff a project is active and the draft matches it exactly.

    Compares user input, prototype markup and stories. Stories compare
    structurally and order-sensitively; text is compared without any
    whitespace normalization.
    """
    if session.active_project_id is None or project is None:
        return False
    if project.id != session.active_project_id:
        return False
    return (
        project.ui_code == session.ui_code
        and project.jira_stories == session.jira_stories
        and project.user_input == session.user_input
    )


def active_project(session: SessionState, store: ProjectStore) -> Project | None:
    if session.active_project_id is None:
        return None
    return store.get(session.active_project_id)


def default_project_name(user_input: str) -> str:
    """Propose a project name from the requirements text."""
    max_length = get_config().get("project_name_max_length", 40)
    trimmed = (user_input or "").strip()
    if not trimmed:
        return DEFAULT_PROJECT_NAME
    if len(trimmed) > max_length:
        return trimmed[:max_length] + ELLIPSIS
    return trimmed


def commit(session: SessionState, store: ProjectStore) -> CommitResult:
    """Save-or-update the draft.

    An active, diverged project is overwritten in place and its timestamp
    refreshed. An unsaved draft is not written: the caller must ask for a
    name and finish with create_named().
    """
    if not session.has_artifacts():
        return CommitResult.REFUSED

    if session.active_project_id is None:
        return CommitResult.NEEDS_NAME

    project = store.get(session.active_project_id)
    if project is None:
        # The linked record vanished; treat the draft as new.
        session.active_project_id = None
        return CommitResult.NEEDS_NAME
    if is_unchanged(session, project):
        return CommitResult.REFUSED

    project.user_input = session.user_input
    project.ui_code = session.ui_code
    project.jira_stories = deepcopy(session.jira_stories)
    project.created_at = _utcnow()
    try:
        store.replace(project.id, project)
    except OSError as exc:
        print(f"[POA] Failed to update project {project.id}: {exc!r}", file=sys.stderr)
        session.error = SAVE_ERROR
        return CommitResult.FAILED
    return CommitResult.UPDATED


def create_named(session: SessionState, store: ProjectStore, name: str) -> Project | None:
    """Save the draft as a new project called *name* and make it active.

    Returns the new project, or None (with nothing changed) when the name is
    blank or the draft lacks an artifact. A failed write also returns None
    and leaves the reason in session.error.
    """
    try:
        clean_name = validate_project_name(name)
    except ValueError:
        return None
    if not session.has_artifacts():
        return None

    project = Project(
        id=_new_project_id(store),
        name=clean_name,
        user_input=session.user_input,
        ui_code=session.ui_code,
        jira_stories=deepcopy(session.jira_stories),
        created_at=_utcnow(),
    )
    try:
        store.add(project)
    except OSError as exc:
        print(f"[POA] Failed to save project {project.id}: {exc!r}", file=sys.stderr)
        session.error = SAVE_ERROR
        return None
    session.active_project_id = project.id
    return project


def load(session: SessionState, store: ProjectStore, project_id: str) -> bool:
    """Replace the draft with a saved project. Unknown ids are ignored."""
    project = store.get(project_id)
    if project is None:
        return False

    session.user_input = project.user_input
    session.ui_code = project.ui_code
    session.jira_stories = project.jira_stories
    session.uploaded_image = None
    session.error = None
    session.active_project_id = project.id
    session.active_tab = OutputTab.UI_PROTOTYPE
    return True


def delete(session: SessionState, store: ProjectStore, project_id: str) -> None:
    """Remove a project. Deleting the active project also clears the draft."""
    try:
        store.remove(project_id)
    except OSError as exc:
        print(f"[POA] Failed to delete project {project_id}: {exc!r}", file=sys.stderr)
        session.error = DELETE_ERROR
        return
    if session.active_project_id == project_id:
        session.reset_draft()


def new_session(session: SessionState) -> None:
    """Start over with an empty, unsaved draft."""
    session.reset_draft()
    session.uploaded_image = None
    session.error = None
    session.active_tab = OutputTab.UI_PROTOTYPE


def save_button_state(session: SessionState, store: ProjectStore) -> tuple[bool, str]:
    """Return (enabled, label) for the save/update action."""
    if not session.has_artifacts():
        return False, "Save"
    project = active_project(session, store)
    if project is None:
        return True, "Save Project"
    if is_unchanged(session, project):
        return False, "Saved"
    return True, "Update Project"


def unsaved_changes_prompt(session: SessionState, store: ProjectStore) -> str | None:
    """Name of the active project if the draft has diverged from it, else None.

    Used to offer saving before the draft is replaced by another project or
    a new session.
    """
    project = active_project(session, store)
    if project is None or not session.has_artifacts():
        return None
    if is_unchanged(session, project):
        return None
    return project.name
