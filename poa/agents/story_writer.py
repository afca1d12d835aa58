"""Story Writer prompt: breaks requirements into epics, user stories and BDD scenarios.

Required output schema:
[
  {
    "epicTitle": "string",
    "stories": [
      {
        "title": "string",
        "userStory": "As a ..., I want ... so that ...",
        "acceptanceCriteria": ["string"],
        "bddScenarios": [
          {"scenario": "string", "given": "string", "when": "string", "then": "string"}
        ]
      }
    ]
  }
]
"""

import json

EPICS_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "epicTitle": {
                "type": "string",
                "description": "A high-level title for the epic or feature that groups related user stories.",
            },
            "stories": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string", "description": "A concise, descriptive title for the user story."},
                        "userStory": {
                            "type": "string",
                            "description": "The user story in the format: 'As a [user type], I want to [goal] so that [benefit]'.",
                        },
                        "acceptanceCriteria": {"type": "array", "items": {"type": "string"}},
                        "bddScenarios": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "scenario": {"type": "string"},
                                    "given": {"type": "string"},
                                    "when": {"type": "string"},
                                    "then": {"type": "string"},
                                },
                                "required": ["scenario", "given", "when", "then"],
                            },
                        },
                    },
                    "required": ["title", "userStory", "acceptanceCriteria", "bddScenarios"],
                },
            },
        },
        "required": ["epicTitle", "stories"],
    },
}

_ROLE = "You are an expert Agile Product Owner."

_STORY_RULES = (
    "For each epic, define the necessary Jira-style user stories that fall under it.\n"
    "For each user story, provide a title, the story itself (in the 'As a..., I want..., so "
    "that...' format), detailed acceptance criteria, and at least one BDD scenario "
    "(Given-When-Then)."
)


def build_stories_prompt(requirements: str, has_image: bool = False) -> str:
    """Prompt for the epics JSON. Blank requirements with an image use the image-only form."""
    if not requirements.strip() and has_image:
        head = (
            "Analyze the provided wireframe image and break it down into a list of high-level "
            "features or epics required to build the interface shown."
        )
        body = ""
    else:
        source = "user requirements and the provided wireframe image" if has_image else "user requirements"
        head = f"Analyze the following {source} and break them down into a list of high-level features or epics."
        body = f'\n\nUser Requirements:\n"{requirements}"'

    return (
        f"{_ROLE}\n{head}\n{_STORY_RULES}\n\n"
        "Respond ONLY with JSON matching this schema. No markdown fences, no commentary.\n"
        f"{json.dumps(EPICS_SCHEMA, indent=2)}"
        f"{body}\n"
    )
