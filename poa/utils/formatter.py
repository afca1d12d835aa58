"""Output Formatter: exports stories as CSV, HTML or Markdown, and wraps prototypes as documents."""

import html
import re
from datetime import UTC, datetime
from pathlib import Path

from poa.models import Epic

CSV_HEADER = "Epic,Story Title,User Story,Acceptance Criteria,BDD Scenario,Given,When,Then"
CSV_FILE_NAME = "jira_stories.csv"
PROTOTYPE_FILE_NAME = "ui-prototype.html"

_NEEDS_QUOTING = re.compile(r'[",\r\n]')

TAILWIND_CDN = "https://cdn.tailwindcss.com"


def escape_csv_cell(value: str) -> str:
    """Quote a cell if it contains a comma, quote or line break; quotes are doubled."""
    if _NEEDS_QUOTING.search(value):
        return '"' + value.replace('"', '""') + '"'
    return value


def stories_to_csv(epics: list[Epic]) -> str:
    """One row per BDD scenario; a story without scenarios gets one row with blank scenario cells.

    Returns an empty string when there is nothing to export.
    """
    if not epics:
        return ""

    lines = [CSV_HEADER]
    for epic in epics:
        for story in epic.stories:
            head = [
                escape_csv_cell(epic.epic_title),
                escape_csv_cell(story.title),
                escape_csv_cell(story.user_story),
                escape_csv_cell("\n".join(story.acceptance_criteria)),
            ]
            if story.bdd_scenarios:
                for bdd in story.bdd_scenarios:
                    tail = [
                        escape_csv_cell(bdd.scenario),
                        escape_csv_cell(bdd.given),
                        escape_csv_cell(bdd.when),
                        escape_csv_cell(bdd.then),
                    ]
                    lines.append(",".join(head + tail))
            else:
                lines.append(",".join(head + ["", "", "", ""]))
    return "\n".join(lines) + "\n"


def stories_to_html(epics: list[Epic]) -> str:
    """Render epics as a copyable HTML fragment. All text is escaped."""
    parts = []
    for epic in epics:
        parts.append("<section>")
        parts.append(f"<h2>{html.escape(epic.epic_title)}</h2>")
        for story in epic.stories:
            parts.append("<article>")
            parts.append(f"<h3>{html.escape(story.title)}</h3>")
            parts.append(f"<p><em>{html.escape(story.user_story)}</em></p>")
            if story.acceptance_criteria:
                parts.append("<h4>Acceptance Criteria</h4>")
                parts.append("<ul>")
                for criterion in story.acceptance_criteria:
                    parts.append(f"<li>{html.escape(criterion)}</li>")
                parts.append("</ul>")
            if story.bdd_scenarios:
                parts.append("<h4>BDD Scenarios</h4>")
                for bdd in story.bdd_scenarios:
                    parts.append("<div>")
                    parts.append(f"<p><strong>Scenario:</strong> {html.escape(bdd.scenario)}</p>")
                    parts.append(f"<p><strong>Given</strong> {html.escape(bdd.given)}</p>")
                    parts.append(f"<p><strong>When</strong> {html.escape(bdd.when)}</p>")
                    parts.append(f"<p><strong>Then</strong> {html.escape(bdd.then)}</p>")
                    parts.append("</div>")
            parts.append("</article>")
        parts.append("</section>")
    return "\n".join(parts)


def stories_to_markdown(epics: list[Epic], title: str = "User Stories") -> str:
    """Convert epics into a Markdown document."""
    lines = [f"# {title}", ""]

    if not epics:
        lines.append("*No stories generated.*")
        lines.append("")
        return "\n".join(lines)

    for epic in epics:
        lines.append(f"## {epic.epic_title}")
        lines.append("")
        for story in epic.stories:
            lines.append(f"### {story.title}")
            lines.append("")
            lines.append(f"> {story.user_story}")
            lines.append("")
            if story.acceptance_criteria:
                lines.append("**Acceptance Criteria:**")
                lines.append("")
                for criterion in story.acceptance_criteria:
                    lines.append(f"- [ ] {criterion}")
                lines.append("")
            for bdd in story.bdd_scenarios:
                lines.append(f"**Scenario:** {bdd.scenario}")
                lines.append("")
                lines.append(f"- **Given** {bdd.given}")
                lines.append(f"- **When** {bdd.when}")
                lines.append(f"- **Then** {bdd.then}")
                lines.append("")

    return "\n".join(lines)


def prototype_document(ui_code: str, title: str = "UI Prototype") -> str:
    """Wrap a body fragment in a standalone HTML document that loads Tailwind."""
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="utf-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1">\n'
        f"<title>{html.escape(title)}</title>\n"
        f'<script src="{TAILWIND_CDN}"></script>\n'
        "</head>\n"
        "<body>\n"
        f"{ui_code}\n"
        "</body>\n"
        "</html>\n"
    )


def format_time_ago(iso_string: str, now: datetime | None = None) -> str:
    """Describe an ISO 8601 timestamp relative to *now* ("3 hours ago", "just now")."""
    moment = datetime.fromisoformat(iso_string)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)
    seconds = int((now - moment).total_seconds())

    for unit_seconds, label in (
        (31536000, "years"),
        (2592000, "months"),
        (86400, "days"),
        (3600, "hours"),
        (60, "minutes"),
    ):
        interval = seconds / unit_seconds
        if interval > 1:
            return f"{int(interval)} {label} ago"
    return "just now"


def write_exports(ui_code: str | None, epics: list[Epic] | None, output_dir: Path) -> list[Path]:
    """Write the prototype document and story exports into *output_dir*; return written paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []

    if ui_code is not None:
        path = output_dir / PROTOTYPE_FILE_NAME
        path.write_text(prototype_document(ui_code), encoding="utf-8")
        written.append(path)

    if epics:
        path = output_dir / CSV_FILE_NAME
        path.write_text(stories_to_csv(epics), encoding="utf-8")
        written.append(path)
        path = output_dir / "jira_stories.md"
        path.write_text(stories_to_markdown(epics), encoding="utf-8")
        written.append(path)

    return written
