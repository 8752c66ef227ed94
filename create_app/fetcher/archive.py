"""Safe extraction of repository tarballs.

GitHub archives wrap the repository in a single ``<repo>-<ref>/`` directory;
that level is stripped so the repository root lands directly in the
destination.  Only regular files and directories are written.  Links and
device nodes are skipped, and member names that are absolute or climb out
with ``..`` abort the extraction.
"""

from __future__ import annotations

import os
import re
import shutil
import tarfile
import threading
from pathlib import Path

from create_app.errors import FetchError


def _member_parts(name: str) -> list[str]:
    """Split a member name into path segments below the archive's top directory."""
    normalised = name.replace("\\", "/")
    if normalised.startswith("/") or re.match(r"^[A-Za-z]:", normalised):
        raise FetchError(f"Archive member has an absolute path: {name!r}")

    parts = [p for p in normalised.split("/") if p not in ("", ".")]
    if ".." in parts:
        raise FetchError(f"Archive member escapes the destination: {name!r}")
    return parts[1:]


def extract_tarball(
    archive: Path,
    destination: Path,
    subdir: str | None = None,
    force: bool = True,
    stop: threading.Event | None = None,
) -> int:
    """Extract *archive* into *destination*.

    Args:
        archive: Path to a (possibly compressed) tar archive.
        destination: Directory to populate.  Created if missing.
        subdir: Keep only this sub-directory of the repository, re-rooted.
        force: Allow extracting into an existing, non-empty directory.
        stop: Checked between members; when set, extraction aborts.

    Returns:
        Number of files written.

    Raises:
        FetchError: On unreadable archives, unsafe member names, an empty
            result, a non-empty destination without *force*, or when *stop*
            is set.
    """
    if destination.is_dir() and any(destination.iterdir()) and not force:
        raise FetchError(f"Destination '{destination}' is not empty")

    prefix = [p for p in subdir.split("/") if p] if subdir else []
    destination.mkdir(parents=True, exist_ok=True)
    written = 0

    try:
        with tarfile.open(archive, "r:*") as tar:
            for member in tar:
                if stop is not None and stop.is_set():
                    raise FetchError("Extraction cancelled")

                parts = _member_parts(member.name)
                if prefix:
                    if parts[: len(prefix)] != prefix:
                        continue
                    parts = parts[len(prefix):]
                if not parts:
                    continue

                target = destination.joinpath(*parts)
                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                elif member.isfile():
                    target.parent.mkdir(parents=True, exist_ok=True)
                    source = tar.extractfile(member)
                    if source is None:
                        continue
                    with source, open(target, "wb") as fh:
                        shutil.copyfileobj(source, fh)
                    os.chmod(target, 0o755 if member.mode & 0o111 else 0o644)
                    written += 1
    except (tarfile.TarError, EOFError, OSError) as exc:
        raise FetchError(f"Could not extract template archive: {exc}") from exc

    if written == 0:
        where = f"sub-directory '{subdir}'" if subdir else "archive"
        raise FetchError(f"Template {where} contains no files")
    return written
