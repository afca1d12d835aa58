"""Entry point: generates a prototype and stories from requirements, exports them, manages saved projects."""

import asyncio
import mimetypes
import sys
from pathlib import Path

from poa import reconcile
from poa.config import get_config, get_store_path
from poa.gateway import GeminiGateway
from poa.orchestrator import GenerationOrchestrator
from poa.state import SessionState, UploadedImage
from poa.store import ProjectStore
from poa.utils.formatter import format_time_ago, write_exports
from poa.utils.validator import has_generation_input

USAGE = """\
Usage:
  poa [--image PATH] [--save NAME] <requirements...>
  poa --list
  poa --export PROJECT_ID
  poa --delete PROJECT_ID"""


def _load_image(path: str) -> UploadedImage:
    mime_type, _ = mimetypes.guess_type(path)
    return UploadedImage.from_bytes(Path(path).read_bytes(), mime_type or "image/png")


def _pop_option(args: list[str], flag: str) -> str | None:
    """Remove ``flag VALUE`` from *args* and return VALUE (None if the flag is absent)."""
    if flag not in args:
        return None
    i = args.index(flag)
    if i + 1 >= len(args):
        print(f"ERROR: {flag} needs a value.\n{USAGE}", file=sys.stderr)
        sys.exit(2)
    value = args[i + 1]
    del args[i:i + 2]
    return value


def list_projects(store: ProjectStore) -> None:
    projects = store.list()
    if not projects:
        print("No saved projects yet.")
        return
    for project in projects:
        print(f"{project.id}  {project.name}  ({format_time_ago(project.created_at)})")


def export_project(store: ProjectStore, project_id: str) -> None:
    session = SessionState()
    if not reconcile.load(session, store, project_id):
        print(f"[POA] No project with id {project_id}", file=sys.stderr)
        sys.exit(1)
    output_dir = Path(get_config().get("output_dir", "./output"))
    for path in write_exports(session.ui_code, session.jira_stories, output_dir):
        print(f"[POA] Wrote {path}")


def run(
    requirements: str,
    image_path: str | None = None,
    save_as: str | None = None,
    store: ProjectStore | None = None,
    gateway=None,
) -> SessionState:
    """Generate both artifacts, write the exports, and optionally save the result as a project."""
    session = SessionState(user_input=requirements)
    if image_path:
        session.uploaded_image = _load_image(image_path)

    if not has_generation_input(session.user_input, session.uploaded_image):
        print("ERROR: Provide requirements text or an --image.", file=sys.stderr)
        sys.exit(2)

    orchestrator = GenerationOrchestrator(gateway or GeminiGateway())
    print("[POA] Generating UI prototype and user stories...")
    asyncio.run(orchestrator.generate(session))

    if session.error:
        print(f"[POA] Error: {session.error}", file=sys.stderr)

    output_dir = Path(get_config().get("output_dir", "./output"))
    for path in write_exports(session.ui_code, session.jira_stories, output_dir):
        print(f"[POA] Wrote {path}")

    if save_as is not None:
        if store is None:
            store = ProjectStore(get_store_path())
        name = save_as or reconcile.default_project_name(session.user_input)
        if reconcile.commit(session, store) is reconcile.CommitResult.NEEDS_NAME:
            project = reconcile.create_named(session, store, name)
            if project is not None:
                print(f"[POA] Saved project {project.name!r} ({project.id})")
            elif session.error:
                print(f"[POA] {session.error}", file=sys.stderr)
        else:
            print("[POA] Nothing to save: generation did not produce both artifacts.", file=sys.stderr)

    return session


def main() -> None:
    """CLI entry point: accepts requirements as arguments or from stdin."""
    args = sys.argv[1:]

    if "--help" in args or "-h" in args:
        print(USAGE)
        return

    if "--list" in args:
        list_projects(ProjectStore(get_store_path()))
        return

    project_id = _pop_option(args, "--delete")
    if project_id is not None:
        store = ProjectStore(get_store_path())
        session = SessionState()
        reconcile.delete(session, store, project_id)
        if session.error:
            print(f"[POA] {session.error}", file=sys.stderr)
        else:
            print(f"[POA] Deleted {project_id}")
        return

    project_id = _pop_option(args, "--export")
    if project_id is not None:
        export_project(ProjectStore(get_store_path()), project_id)
        return

    image_path = _pop_option(args, "--image")
    save_as = _pop_option(args, "--save")

    if args:
        requirements = " ".join(args)
    elif image_path:
        requirements = ""
    else:
        print("Enter your requirements (Ctrl+D / Ctrl+Z to submit):")
        requirements = sys.stdin.read()

    run(requirements, image_path=image_path, save_as=save_as)


if __name__ == "__main__":
    main()
