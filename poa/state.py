"""Session state: the single mutable working draft.

Owns no persistence: everything here is disposable and can be rebuilt by
loading a saved project.
"""

import base64
from dataclasses import dataclass

from poa.models import Epic, ImagePayload, OutputTab


@dataclass
class UploadedImage:
    """A reference image (wireframe or inspiration) attached to the requirements."""

    data: bytes
    mime_type: str
    preview_url: str = ""

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> "UploadedImage":
        encoded = base64.b64encode(data).decode("ascii")
        return cls(data=data, mime_type=mime_type, preview_url=f"data:{mime_type};base64,{encoded}")

    def payload(self) -> ImagePayload:
        return ImagePayload(data=self.data, mime_type=self.mime_type)


@dataclass
class SessionState:
    user_input: str = ""
    uploaded_image: UploadedImage | None = None
    ui_code: str | None = None
    jira_stories: list[Epic] | None = None
    active_project_id: str | None = None  # None = unsaved draft
    is_loading: bool = False
    is_refining: bool = False
    active_tab: OutputTab = OutputTab.UI_PROTOTYPE
    error: str | None = None

    def image_payload(self) -> ImagePayload | None:
        return self.uploaded_image.payload() if self.uploaded_image else None

    def has_artifacts(self) -> bool:
        """True when both the prototype and the stories are present."""
        return self.ui_code is not None and self.jira_stories is not None

    def reset_draft(self) -> None:
        """Clear the draft back to its empty form and detach it from any project."""
        self.user_input = ""
        self.ui_code = None
        self.jira_stories = None
        self.active_project_id = None
