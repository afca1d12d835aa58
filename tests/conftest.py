"""Shared fixtures for the POA test suite."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from poa.models import BddScenario, Epic, Story
from poa.state import SessionState
from poa.store import ProjectStore


@pytest.fixture
def stories_payload():
    """Stories JSON as the gateway returns it (decoded)."""
    return [
        {
            "epicTitle": "Authentication",
            "stories": [
                {
                    "title": "Log in with email",
                    "userStory": "As a user, I want to log in with my email so that I can access my account.",
                    "acceptanceCriteria": [
                        "Email and password fields are shown",
                        "Invalid credentials show an error",
                    ],
                    "bddScenarios": [
                        {
                            "scenario": "Successful login",
                            "given": "a registered user on the login page",
                            "when": "they submit valid credentials",
                            "then": "they are redirected to the dashboard",
                        }
                    ],
                },
                {
                    "title": "Reset password",
                    "userStory": "As a user, I want to reset my password so that I can recover access.",
                    "acceptanceCriteria": ["A reset link is emailed"],
                    "bddScenarios": [],
                },
            ],
        }
    ]


@pytest.fixture
def stories_json(stories_payload):
    return json.dumps(stories_payload)


@pytest.fixture
def epics():
    """The parsed form of stories_payload."""
    return [
        Epic(
            epic_title="Authentication",
            stories=[
                Story(
                    title="Log in with email",
                    user_story="As a user, I want to log in with my email so that I can access my account.",
                    acceptance_criteria=[
                        "Email and password fields are shown",
                        "Invalid credentials show an error",
                    ],
                    bdd_scenarios=[
                        BddScenario(
                            scenario="Successful login",
                            given="a registered user on the login page",
                            when="they submit valid credentials",
                            then="they are redirected to the dashboard",
                        )
                    ],
                ),
                Story(
                    title="Reset password",
                    user_story="As a user, I want to reset my password so that I can recover access.",
                    acceptance_criteria=["A reset link is emailed"],
                    bdd_scenarios=[],
                ),
            ],
        )
    ]


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "projects.json"


@pytest.fixture
def store(store_path):
    return ProjectStore(store_path)


@pytest.fixture
def draft(epics):
    """A freshly generated, unsaved session holding both artifacts."""
    return SessionState(
        user_input="Build a login form",
        ui_code="<form class=\"p-4\"></form>",
        jira_stories=epics,
    )


@pytest.fixture
def gateway(stories_json):
    """Gateway double whose calls all succeed."""
    fake = MagicMock()
    fake.generate_prototype = AsyncMock(return_value="<main>login</main>")
    fake.generate_stories = AsyncMock(return_value=stories_json)
    fake.refine = AsyncMock(return_value="<main>refined</main>")
    fake.generate_variant = AsyncMock(return_value="<main>variant</main>")
    return fake


@pytest.fixture
def mock_config():
    """Patch the config singleton with test-friendly values."""
    test_config = {
        "prototype_model": "gemini-test-pro",
        "stories_model": "gemini-test-flash",
        "llm_max_retries": 2,
        "store_path": "./.poa/projects.json",
        "output_dir": "./output",
        "project_name_max_length": 40,
    }
    with patch("poa.config._config", test_config):
        yield test_config
