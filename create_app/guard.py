"""Destination guard.

The fetch step is not transactional, so every check that can fail cheaply is
done before anything is downloaded or created.
"""

from __future__ import annotations

import os
from pathlib import Path

from create_app.errors import DestinationExistsError, DestinationNotWritableError


def destination_for(project_name: str, cwd: str | Path | None = None) -> Path:
    """Return the absolute project path ``<cwd>/<project_name>``.

    *project_name* must already be validated; a value that would not land
    directly inside *cwd* is a programming error.
    """
    base = Path(cwd) if cwd is not None else Path.cwd()
    base = base.absolute()
    destination = base / project_name
    if (
        project_name in (os.curdir, os.pardir)
        or destination.parent != base
        or destination.name != project_name
    ):
        raise ValueError(f"Project name is not a single path segment: {project_name!r}")
    return destination


def guard_destination(path: str | Path) -> Path:
    """Check that *path* can be created as a new project directory.

    Checks run in order: the path must not exist (a dangling symlink counts
    as existing), then its parent must be a writable directory.

    Returns:
        *path* as a ``Path``.

    Raises:
        DestinationExistsError: If anything already exists at *path*.
        DestinationNotWritableError: If the parent is missing or not writable.
    """
    destination = Path(path)

    if os.path.lexists(destination):
        raise DestinationExistsError(destination)

    parent = destination.parent
    if not parent.is_dir() or not os.access(parent, os.W_OK | os.X_OK):
        raise DestinationNotWritableError(destination)

    return destination
