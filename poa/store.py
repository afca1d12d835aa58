"""Project store: the durable, ordered collection of saved projects.

The whole list lives in one JSON file (an array of project records, newest
save first). It is read once at construction and rewritten after every
mutation, before the mutating call returns.
"""

from __future__ import annotations

import json
import os
import sys
import tempfile
from copy import deepcopy
from pathlib import Path

from poa.models import Project


class ProjectExistsError(ValueError):
    """A project with this id is already stored."""


class ProjectNotFoundError(KeyError):
    """No stored project has this id."""


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _atomic_write_text(path: Path, content: str) -> None:
    """Write *content* to *path* via a temp file in the same directory and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp_handle:
            os.chmod(tmp_path, 0o666 & ~_current_umask())
            tmp_handle.write(content)
            tmp_handle.flush()
            os.fsync(tmp_handle.fileno())
        os.replace(tmp_path, str(path))
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def _read_projects(path: Path) -> list[Project]:
    """Load the persisted list. Missing or corrupt data yields an empty list."""
    if not path.is_file():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError("expected a JSON array of projects")
        projects = [Project.from_dict(item) for item in data]
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        print(f"[POA] Ignoring unreadable project store at {path}: {exc}", file=sys.stderr)
        return []

    # Keep the first record for any duplicated id.
    seen = set()
    unique = []
    for project in projects:
        if project.id in seen:
            print(f"[POA] Dropping duplicate project id {project.id!r} from {path}", file=sys.stderr)
            continue
        seen.add(project.id)
        unique.append(project)
    return unique


class ProjectStore:
    """Ordered project collection persisted to a JSON file.

    Records are copied on the way in and on the way out so callers can never
    mutate the stored list behind the store's back.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._projects = _read_projects(self.path)

    def list(self) -> list[Project]:
        """Return every project in stored order."""
        return deepcopy(self._projects)

    def get(self, project_id: str) -> Project | None:
        for project in self._projects:
            if project.id == project_id:
                return deepcopy(project)
        return None

    def ids(self) -> set[str]:
        return {p.id for p in self._projects}

    def __len__(self) -> int:
        return len(self._projects)

    def __contains__(self, project_id: str) -> bool:
        return any(p.id == project_id for p in self._projects)

    def add(self, project: Project) -> None:
        """Insert *project* at the front. Raises ProjectExistsError on a duplicate id."""
        if project.id in self:
            raise ProjectExistsError(f"Project {project.id!r} already exists")
        self._commit([deepcopy(project)] + self._projects)

    def replace(self, project_id: str, project: Project) -> None:
        """Overwrite the record with *project_id* in place. Raises ProjectNotFoundError."""
        for i, existing in enumerate(self._projects):
            if existing.id == project_id:
                updated = list(self._projects)
                updated[i] = deepcopy(project)
                self._commit(updated)
                return
        raise ProjectNotFoundError(project_id)

    def remove(self, project_id: str) -> None:
        """Delete the record with *project_id*; no-op if absent."""
        remaining = [p for p in self._projects if p.id != project_id]
        if len(remaining) == len(self._projects):
            return
        self._commit(remaining)

    def _commit(self, projects: list[Project]) -> None:
        # Memory only changes once the file holds the new list.
        payload = json.dumps([p.to_dict() for p in projects], indent=2, ensure_ascii=False)
        _atomic_write_text(self.path, payload)
        self._projects = projects
