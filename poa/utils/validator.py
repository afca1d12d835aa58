"""Input validation: generation preconditions and project names."""


def has_generation_input(user_input: str, image=None) -> bool:
    """True when there is something to generate from: non-blank text or an image."""
    return bool(isinstance(user_input, str) and user_input.strip()) or image is not None


def validate_project_name(name: str) -> str:
    """Return the trimmed project name. Raises ValueError if it is blank."""
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Project name must be a non-empty string.")
    return name.strip()
