"""Exception hierarchy for create-modern-app.

Every failure the tool can report derives from :class:`ScaffoldError`, so the
orchestrator can tell an expected, user-facing failure from a programming
error.  Template problems are never surfaced as exceptions to callers: the
resolver converts them into a fallback.
"""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(Exception):
    """Base class for all expected create-modern-app failures."""


class InvalidProjectNameError(ScaffoldError):
    """Raised when a project name fails validation.

    The message is meant to be shown to the user verbatim.
    """

    def __init__(self, message: str, name: object = None) -> None:
        self.name = name
        super().__init__(message)


class TemplateRejectedError(ScaffoldError):
    """Raised inside the resolver when a template cannot be trusted."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Template '{name}' rejected: {reason}")


class ManifestError(ScaffoldError):
    """Raised when a template manifest exists but cannot be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Unreadable manifest {path}: {reason}")


class DestinationError(ScaffoldError):
    """Raised when the project destination cannot be used."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(message)


class DestinationExistsError(DestinationError):
    """The destination already exists."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            path,
            f"Directory '{path.name}' already exists. "
            "Please choose a different project name.",
        )


class DestinationNotWritableError(DestinationError):
    """The destination's parent directory is missing or not writable."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            path,
            f"Cannot create '{path.name}': parent directory '{path.parent}' is not writable.",
        )


class FetchError(ScaffoldError):
    """Raised when the remote template cannot be fetched or extracted."""

    def __init__(self, message: str, source: str = "") -> None:
        self.source = source
        super().__init__(message)


class TemplateNotFoundError(FetchError):
    """The remote template repository or ref does not exist."""


class PromptUnavailableError(ScaffoldError):
    """Raised when an interactive prompt cannot be rendered (e.g. no TTY)."""
