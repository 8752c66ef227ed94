"""Remote template coordinates and fetch options.

A coordinate names a template repository the same way the ``degit`` tool
does::

    owner/repo
    owner/repo#v2.1.0
    owner/repo/sub/dir#main
    github:owner/repo
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

from create_app.errors import FetchError

_COORDINATE_RE = re.compile(
    r"^(?:github:)?"
    r"(?P<owner>[A-Za-z0-9][A-Za-z0-9-]*)/"
    r"(?P<repo>[A-Za-z0-9._-]+)"
    r"(?P<subdir>(?:/[A-Za-z0-9._-]+)*)"
    r"(?:#(?P<ref>[A-Za-z0-9._/-]+))?$"
)


class RemoteCoordinate(BaseModel):
    """A parsed ``owner/repo[/subdir][#ref]`` coordinate."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    subdir: str | None = None
    ref: str = "HEAD"

    def __str__(self) -> str:
        text = f"{self.owner}/{self.repo}"
        if self.subdir:
            text += f"/{self.subdir}"
        if self.ref != "HEAD":
            text += f"#{self.ref}"
        return text


class FetchOptions(BaseModel):
    """Options passed to the remote-fetch collaborator."""

    force: bool = Field(default=True, description="Allow writing into a non-empty destination")
    cache: bool = Field(default=False, description="Allow cached responses from intermediaries")


def parse_coordinate(source: str) -> RemoteCoordinate:
    """Parse *source* into a :class:`RemoteCoordinate`.

    Raises:
        FetchError: If *source* is not a well-formed coordinate, or a path
            segment is ``.`` or ``..``.
    """
    match = _COORDINATE_RE.match(source.strip())
    if match is None:
        raise FetchError(f"Invalid template source: '{source}'", source=source)

    repo = match.group("repo")
    subdir_parts = [p for p in match.group("subdir").split("/") if p]
    ref = match.group("ref") or "HEAD"
    if repo in (".", "..") or any(p in (".", "..") for p in subdir_parts) or ".." in ref.split("/"):
        raise FetchError(f"Invalid template source: '{source}'", source=source)

    return RemoteCoordinate(
        owner=match.group("owner"),
        repo=repo,
        subdir="/".join(subdir_parts) or None,
        ref=ref,
    )
