"""Product Owner Assistant: Streamlit UI for prototypes, user stories and saved projects."""

import sys
from pathlib import Path

# Add project root to path so 'poa' package is importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

import asyncio

import streamlit as st
import streamlit.components.v1 as components

from poa import reconcile
from poa.config import get_config, get_store_path
from poa.gateway import GeminiGateway
from poa.models import Epic, OutputTab
from poa.orchestrator import GenerationOrchestrator
from poa.state import SessionState, UploadedImage
from poa.store import ProjectStore
from poa.utils.formatter import (
    CSV_FILE_NAME,
    PROTOTYPE_FILE_NAME,
    format_time_ago,
    prototype_document,
    stories_to_csv,
    stories_to_html,
)
from poa.utils.validator import has_generation_input

st.set_page_config(page_title="Product Owner AI Assistant", layout="wide")
st.title("Product Owner AI Assistant")
st.markdown("Transform your ideas into wireframes and user stories instantly.")

_TAB_LABELS = {
    OutputTab.UI_PROTOTYPE: "UI Prototype",
    OutputTab.JIRA_STORIES: "Jira Stories",
    OutputTab.STORY_BOARD: "Story Board",
}


# ---------------------------------------------------------------------------
# Session bootstrap
# ---------------------------------------------------------------------------

if "poa_session" not in st.session_state:
    st.session_state["poa_session"] = SessionState(user_input=get_config().get("default_user_input", ""))
    st.session_state["poa_store"] = ProjectStore(get_store_path())
    st.session_state["user_input_widget"] = st.session_state["poa_session"].user_input
    st.session_state["naming_project"] = False
    st.session_state["pending_action"] = None
    st.session_state["confirm_delete"] = None
    st.session_state["uploader_generation"] = 0

session: SessionState = st.session_state["poa_session"]
store: ProjectStore = st.session_state["poa_store"]


def _orchestrator() -> GenerationOrchestrator:
    return GenerationOrchestrator(GeminiGateway())


def _sync_input_widget() -> None:
    """Push the draft into the input widgets before they are drawn."""
    st.session_state["user_input_widget"] = session.user_input
    if session.uploaded_image is None:
        # A fresh key empties the file uploader.
        st.session_state["uploader_generation"] += 1


# ---------------------------------------------------------------------------
# Project actions (button callbacks run before the page is redrawn)
# ---------------------------------------------------------------------------


def _apply_action(action: tuple[str, str | None]) -> None:
    kind, project_id = action
    if kind == "load":
        reconcile.load(session, store, project_id)
    elif kind == "new":
        reconcile.new_session(session)
    _sync_input_widget()


def _request_action(kind: str, project_id: str | None = None) -> None:
    """Run a draft-replacing action, or hold it while the user decides about unsaved changes."""
    if reconcile.unsaved_changes_prompt(session, store):
        st.session_state["pending_action"] = (kind, project_id)
        return
    _apply_action((kind, project_id))


def _resolve_pending(save_first: bool) -> None:
    action = st.session_state["pending_action"]
    st.session_state["pending_action"] = None
    if save_first and reconcile.commit(session, store) is reconcile.CommitResult.FAILED:
        return
    if action:
        _apply_action(action)


def _on_save_clicked() -> None:
    result = reconcile.commit(session, store)
    st.session_state["naming_project"] = result is reconcile.CommitResult.NEEDS_NAME
    if result is reconcile.CommitResult.UPDATED:
        st.toast("Project updated.")


def _on_name_submitted() -> None:
    name = st.session_state.get("project_name_widget", "")
    project = reconcile.create_named(session, store, name)
    if project is not None:
        st.session_state["naming_project"] = False
        st.toast(f"Saved \"{project.name}\".")


def _on_delete_confirmed(project_id: str) -> None:
    st.session_state["confirm_delete"] = None
    reconcile.delete(session, store, project_id)
    _sync_input_widget()


# ---------------------------------------------------------------------------
# Sidebar: saved projects
# ---------------------------------------------------------------------------


def _render_projects_sidebar() -> None:
    with st.sidebar:
        st.header("Projects")
        st.button(
            "New Project",
            type="primary",
            use_container_width=True,
            on_click=_request_action,
            args=("new",),
        )

        projects = store.list()
        if not projects:
            st.caption("No saved projects yet. Generated projects will appear here once you save them.")
            return

        for project in projects:
            active = project.id == session.active_project_id
            label = f"**{project.name}**" if active else project.name
            st.markdown(f"{label}  \n:gray[{format_time_ago(project.created_at)}]")
            col_load, col_delete = st.columns(2)
            col_load.button(
                "Load",
                key=f"load_{project.id}",
                on_click=_request_action,
                args=("load", project.id),
                disabled=session.is_loading or session.is_refining,
            )
            if st.session_state["confirm_delete"] == project.id:
                col_delete.button(
                    "Confirm delete",
                    key=f"confirm_{project.id}",
                    type="primary",
                    on_click=_on_delete_confirmed,
                    args=(project.id,),
                )
            else:
                col_delete.button(
                    "Delete",
                    key=f"delete_{project.id}",
                    on_click=lambda pid=project.id: st.session_state.update(confirm_delete=pid),
                )


def _render_unsaved_prompt() -> None:
    name = reconcile.unsaved_changes_prompt(session, store)
    if not st.session_state["pending_action"] or not name:
        st.session_state["pending_action"] = None
        return
    st.warning(f"We've detected unsaved changes to \"{name}\". Would you like to save them?")
    col_save, col_dismiss = st.columns(2)
    col_save.button("Save Changes", type="primary", on_click=_resolve_pending, args=(True,))
    col_dismiss.button("Dismiss", on_click=_resolve_pending, args=(False,))


# ---------------------------------------------------------------------------
# Input panel
# ---------------------------------------------------------------------------


def _render_input_panel() -> None:
    st.subheader("Requirements")
    st.text_area(
        "Describe the product or feature:",
        key="user_input_widget",
        height=220,
        placeholder="e.g. Build a login form with email, password and a 'forgot password' link",
    )
    session.user_input = st.session_state["user_input_widget"]

    uploaded = st.file_uploader(
        "Wireframe or inspiration image (optional)",
        type=["png", "jpg", "jpeg", "webp"],
        key=f"image_widget_{st.session_state['uploader_generation']}",
    )
    if uploaded is None:
        session.uploaded_image = None
    else:
        data = uploaded.getvalue()
        if session.uploaded_image is None or session.uploaded_image.data != data:
            session.uploaded_image = UploadedImage.from_bytes(data, uploaded.type or "image/png")
    if session.uploaded_image is not None:
        st.image(session.uploaded_image.data, caption="Reference image", use_container_width=True)

    can_generate = has_generation_input(session.user_input, session.uploaded_image)
    if st.button(
        "Generate",
        type="primary",
        disabled=session.is_loading or not can_generate,
        use_container_width=True,
    ):
        with st.spinner("Generating UI prototype and user stories..."):
            asyncio.run(_orchestrator().generate(session))
        st.session_state["naming_project"] = False
        st.rerun()

    enabled, label = reconcile.save_button_state(session, store)
    st.button(label, disabled=not enabled or session.is_loading, on_click=_on_save_clicked)

    if st.session_state["naming_project"]:
        with st.form("save_project_form"):
            st.text_input(
                "Project Name",
                value=reconcile.default_project_name(session.user_input),
                key="project_name_widget",
            )
            col_save, col_cancel = st.columns(2)
            col_save.form_submit_button("Save", type="primary", on_click=_on_name_submitted)
            col_cancel.form_submit_button(
                "Cancel", on_click=lambda: st.session_state.update(naming_project=False)
            )


# ---------------------------------------------------------------------------
# Output panel
# ---------------------------------------------------------------------------


def _render_prototype() -> None:
    if session.ui_code is None:
        st.info("Your generated UI prototype will appear here.")
        return

    components.html(prototype_document(session.ui_code), height=640, scrolling=True)
    st.download_button(
        "Download HTML",
        data=prototype_document(session.ui_code),
        file_name=PROTOTYPE_FILE_NAME,
        mime="text/html",
    )

    with st.form("refine_form", clear_on_submit=True):
        instruction = st.text_input("Refine the prototype", placeholder="e.g. Make the header sticky and dark")
        refine = st.form_submit_button("Refine", disabled=session.is_refining)
    if refine and instruction.strip():
        with st.spinner("Refining prototype..."):
            asyncio.run(_orchestrator().refine(session, instruction))
        st.rerun()

    if st.button("Generate Variant", disabled=session.is_loading):
        with st.spinner("Generating an alternative design..."):
            asyncio.run(_orchestrator().generate_variant(session))
        st.rerun()

    with st.expander("View HTML"):
        st.code(session.ui_code, language="html")


def _render_stories(epics: list[Epic]) -> None:
    st.download_button(
        "Export CSV",
        data=stories_to_csv(epics),
        file_name=CSV_FILE_NAME,
        mime="text/csv",
    )
    for epic in epics:
        st.markdown(f"### {epic.epic_title}")
        for story in epic.stories:
            with st.expander(story.title):
                st.markdown(f"*{story.user_story}*")
                if story.acceptance_criteria:
                    st.markdown("**Acceptance Criteria**")
                    st.markdown("\n".join(f"- {c}" for c in story.acceptance_criteria))
                for bdd in story.bdd_scenarios:
                    st.markdown(
                        f"**Scenario:** {bdd.scenario}  \n"
                        f"**Given** {bdd.given}  \n"
                        f"**When** {bdd.when}  \n"
                        f"**Then** {bdd.then}"
                    )
    with st.expander("Copy as HTML"):
        st.code(stories_to_html(epics), language="html")


def _render_story_board(epics: list[Epic]) -> None:
    columns = st.columns(max(len(epics), 1))
    for column, epic in zip(columns, epics):
        with column:
            st.markdown(f"#### {epic.epic_title}")
            for story in epic.stories:
                with st.container(border=True):
                    st.markdown(f"**{story.title}**")
                    st.caption(story.user_story)


def _render_output_panel() -> None:
    st.subheader("Output")
    if session.error:
        st.error(session.error)

    selected = st.radio(
        "View",
        list(_TAB_LABELS),
        index=list(_TAB_LABELS).index(session.active_tab),
        format_func=_TAB_LABELS.get,
        horizontal=True,
        label_visibility="collapsed",
    )
    session.active_tab = selected

    if selected is OutputTab.UI_PROTOTYPE:
        _render_prototype()
    elif session.jira_stories is None:
        st.info("Your generated user stories will appear here.")
    elif selected is OutputTab.JIRA_STORIES:
        _render_stories(session.jira_stories)
    else:
        _render_story_board(session.jira_stories)


# ---------------------------------------------------------------------------
# Page logic
# ---------------------------------------------------------------------------

_render_projects_sidebar()
_render_unsaved_prompt()

col_input, col_output = st.columns(2)
with col_input:
    _render_input_panel()
with col_output:
    _render_output_panel()
