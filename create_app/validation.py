"""Syntactic validation of template and project names.

Nothing here touches the filesystem.  Template names never fail: anything
unusable collapses to the fallback template.  Project names become a
directory the user will ``cd`` into, so they are never substituted and an
invalid one produces a message instead.

Examples::

    validate_template_name("  Redux ")    -> "redux"
    validate_template_name("../../etc")   -> "base"
    project_name_error("my-app")          -> None
    project_name_error("my app")          -> "Project name may only contain ..."
"""

from __future__ import annotations

import re

from create_app.errors import InvalidProjectNameError

TEMPLATE_NAME_RE = re.compile(r"^[a-z0-9-]+$")
PROJECT_NAME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")

DEFAULT_FALLBACK = "base"
DEFAULT_MAX_PROJECT_NAME_LENGTH = 50


def validate_template_name(raw: object, fallback: str = DEFAULT_FALLBACK) -> str:
    """Normalise a raw template name, returning *fallback* when it is unusable.

    Args:
        raw: Untrusted input (CLI flag, prompt answer or ``None``).
        fallback: Value returned for non-string, empty or malformed input.

    Returns:
        The trimmed, lower-cased name, or *fallback*.
    """
    if not isinstance(raw, str):
        return fallback

    name = raw.strip().lower()
    # fullmatch: ``$`` alone would accept a trailing newline.
    if not name or not TEMPLATE_NAME_RE.fullmatch(name):
        return fallback
    return name


def project_name_error(
    raw: object, max_length: int = DEFAULT_MAX_PROJECT_NAME_LENGTH
) -> str | None:
    """Return a user-facing message describing why *raw* is not a valid
    project name, or ``None`` if it is valid."""
    if not isinstance(raw, str) or not raw:
        return "Project name is required"
    if len(raw) > max_length:
        return f"Project name must be {max_length} characters or fewer"
    if not PROJECT_NAME_RE.fullmatch(raw):
        return "Project name may only contain letters, digits, '-' and '_'"
    return None


def validate_project_name(
    raw: object, max_length: int = DEFAULT_MAX_PROJECT_NAME_LENGTH
) -> str:
    """Return *raw* unchanged if it is a valid project name.

    Raises:
        InvalidProjectNameError: With the message from :func:`project_name_error`.
    """
    message = project_name_error(raw, max_length)
    if message is not None:
        raise InvalidProjectNameError(message, name=raw)
    return raw  # type: ignore[return-value]
