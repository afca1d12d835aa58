"""Centralized config loading: read once at import time."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Load .env from project root (parent of poa/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"

_config = yaml.safe_load(CONFIG_PATH.read_text())


def get_config() -> dict:
    """Return the loaded config dictionary."""
    return _config


def get_store_path() -> Path:
    """Return the project store location. POA_STORE_PATH overrides the config file."""
    raw = os.getenv("POA_STORE_PATH") or get_config().get("store_path", "./.poa/projects.json")
    return Path(raw).expanduser()
