"""Path confinement checks shared by the resolver and the manifest loader."""

from __future__ import annotations

import os
from pathlib import Path


def is_confined(root: str | Path, candidate: str | Path) -> bool:
    """Return ``True`` if *candidate* is a proper descendant of *root*.

    Both arguments are expected to be real (symlink-resolved) paths.  The
    check decomposes the relative path rather than comparing string prefixes,
    so ``/templates-evil`` is not mistaken for a child of ``/templates``.
    """
    try:
        relative = os.path.relpath(candidate, root)
    except ValueError:
        # Different drives on Windows.
        return False

    if relative == os.curdir or os.path.isabs(relative):
        return False
    first = relative.split(os.sep, 1)[0]
    return first != os.pardir
