"""Domain records: epics, stories, BDD scenarios and saved projects.

Field names on the wire are camelCase and verbatim (``userInput``, ``uiCode``,
``jiraStories``, ``createdAt``, ``epicTitle``, ``userStory``,
``acceptanceCriteria``, ``bddScenarios``), matching the JSON the stories
model is asked to produce.

Equality is the dataclass-generated field-by-field comparison: nested lists
compare element-by-element, so reordering epics, stories, criteria or
scenarios counts as a change, and no whitespace normalization is applied.
"""

import json
from dataclasses import dataclass, field
from enum import Enum

from poa.utils.parsing import strip_fences


class OutputTab(str, Enum):
    UI_PROTOTYPE = "UI_PROTOTYPE"
    JIRA_STORIES = "JIRA_STORIES"
    STORY_BOARD = "STORY_BOARD"


class StoriesParseError(ValueError):
    """The generated stories text is not a valid Epic/Story/BddScenario payload."""


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes handed to the generation gateway."""

    data: bytes
    mime_type: str


@dataclass
class BddScenario:
    scenario: str
    given: str
    when: str
    then: str

    def to_dict(self) -> dict:
        return {"scenario": self.scenario, "given": self.given, "when": self.when, "then": self.then}

    @classmethod
    def from_dict(cls, data: dict) -> "BddScenario":
        return cls(
            scenario=_require_str(data, "scenario"),
            given=_require_str(data, "given"),
            when=_require_str(data, "when"),
            then=_require_str(data, "then"),
        )


@dataclass
class Story:
    title: str
    user_story: str
    acceptance_criteria: list[str] = field(default_factory=list)
    bdd_scenarios: list[BddScenario] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "userStory": self.user_story,
            "acceptanceCriteria": list(self.acceptance_criteria),
            "bddScenarios": [s.to_dict() for s in self.bdd_scenarios],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Story":
        criteria = _require_list(data, "acceptanceCriteria")
        for i, item in enumerate(criteria):
            if not isinstance(item, str):
                raise StoriesParseError(f"acceptanceCriteria[{i}] must be a string")
        return cls(
            title=_require_str(data, "title"),
            user_story=_require_str(data, "userStory"),
            acceptance_criteria=list(criteria),
            bdd_scenarios=[
                BddScenario.from_dict(_require_dict(s, "bddScenarios"))
                for s in _require_list(data, "bddScenarios")
            ],
        )


@dataclass
class Epic:
    epic_title: str
    stories: list[Story] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"epicTitle": self.epic_title, "stories": [s.to_dict() for s in self.stories]}

    @classmethod
    def from_dict(cls, data: dict) -> "Epic":
        return cls(
            epic_title=_require_str(data, "epicTitle"),
            stories=[Story.from_dict(_require_dict(s, "stories")) for s in _require_list(data, "stories")],
        )


@dataclass
class Project:
    id: str
    name: str
    user_input: str
    ui_code: str
    jira_stories: list[Epic]
    created_at: str  # ISO 8601, refreshed on every overwrite

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "userInput": self.user_input,
            "uiCode": self.ui_code,
            "jiraStories": epics_to_list(self.jira_stories),
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        if not isinstance(data, dict):
            raise StoriesParseError("project record must be an object")
        return cls(
            id=_require_str(data, "id"),
            name=_require_str(data, "name"),
            user_input=_require_str(data, "userInput"),
            ui_code=_require_str(data, "uiCode"),
            jira_stories=epics_from_list(data.get("jiraStories")),
            created_at=_require_str(data, "createdAt"),
        )


def epics_to_list(epics: list[Epic]) -> list[dict]:
    return [e.to_dict() for e in epics]


def epics_from_list(items) -> list[Epic]:
    """Build epics from already-decoded JSON. Raises StoriesParseError on shape errors."""
    if not isinstance(items, list):
        raise StoriesParseError("stories payload must be a JSON array of epics")
    return [Epic.from_dict(_require_dict(item, "epics")) for item in items]


def parse_epics(text: str) -> list[Epic]:
    """Parse the stories text returned by the gateway into epics.

    Markdown code fences around the payload are tolerated. Any JSON syntax
    error or schema mismatch raises StoriesParseError.
    """
    if not isinstance(text, str):
        raise StoriesParseError("stories payload must be text")
    try:
        data = json.loads(strip_fences(text))
    except json.JSONDecodeError as exc:
        raise StoriesParseError(f"stories payload is not valid JSON: {exc}") from exc
    return epics_from_list(data)


def _require_dict(value, where: str) -> dict:
    if not isinstance(value, dict):
        raise StoriesParseError(f"every entry in '{where}' must be an object")
    return value


def _require_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise StoriesParseError(f"missing or non-string field '{key}'")
    return value


def _require_list(data: dict, key: str) -> list:
    value = data.get(key)
    if not isinstance(value, list):
        raise StoriesParseError(f"missing or non-array field '{key}'")
    return value
