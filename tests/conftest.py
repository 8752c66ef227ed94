"""Shared pytest fixtures for the create-modern-app test suite.

Provides reusable fixtures for:
- A temporary templates root with ``template-base`` and ``template-redux``
- A ``Config`` pointing at that root
- A recording Rich console swapped in for the shared one
- Fake prompt and fetch collaborators
- In-memory GitHub-style tarballs
"""

from __future__ import annotations

import io
import json
import tarfile
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from create_app import utils
from create_app.config import Config


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def recorded_console(monkeypatch: pytest.MonkeyPatch) -> Console:
    """Replace the shared console with a wide, recording, colourless one."""
    test_console = Console(record=True, width=250, force_terminal=False, color_system=None)
    monkeypatch.setattr(utils, "console", test_console)
    return test_console


# ---------------------------------------------------------------------------
# Templates root & config
# ---------------------------------------------------------------------------

def write_manifest(template_dir: Path, data: Any) -> Path:
    """Write ``package.json`` into *template_dir* (creating it)."""
    template_dir.mkdir(parents=True, exist_ok=True)
    path = template_dir / "package.json"
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def templates_root(tmp_path: Path) -> Path:
    """Templates root containing ``template-base`` and ``template-redux``."""
    root = tmp_path / "packages"
    write_manifest(
        root / "template-base",
        {"name": "template-base", "scripts": {"dev": "vite", "build": "vite build"}},
    )
    write_manifest(
        root / "template-redux",
        {"name": "template-redux", "scripts": {"dev": "vite"}},
    )
    return root


@pytest.fixture
def config(templates_root: Path) -> Config:
    return Config(templates_root=templates_root)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Empty directory projects are created in."""
    path = tmp_path / "work"
    path.mkdir()
    return path


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------

class FakePrompter:
    """Prompt collaborator that answers from a dict.

    Honours each question's ``when`` predicate and ``required`` flag the same
    way ``RichPrompter`` does, and records which questions were asked.
    """

    def __init__(self, answers: dict[str, str] | None = None, interactive: bool = True) -> None:
        self.answers = answers or {}
        self.interactive = interactive
        self.asked: list[str] = []

    async def ask(self, questions):
        from create_app.errors import PromptUnavailableError

        result: dict[str, str] = {}
        for question in questions:
            if question.when is not None and not question.when(result):
                continue
            if not self.interactive:
                if question.required:
                    raise PromptUnavailableError("Prompt couldn't be rendered in the current environment")
                continue
            self.asked.append(question.name)
            result[question.name] = self.answers[question.name]
        return result


class FakeFetcher:
    """Fetch collaborator that writes files locally or fails on demand.

    Args:
        files: Relative path -> content written into the destination.
        error: Exception raised after *files* were written.
    """

    def __init__(self, files: dict[str, str] | None = None, error: BaseException | None = None) -> None:
        self.files = files if files is not None else {"package.json": "{}\n", "src/main.tsx": "// app\n"}
        self.error = error
        self.calls: list[tuple[str, Path, Any]] = []

    async def fetch(self, source: str, destination: Path, options=None) -> Path:
        self.calls.append((source, destination, options))
        destination.mkdir()
        for rel, content in self.files.items():
            target = destination / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        if self.error is not None:
            raise self.error
        return destination


@pytest.fixture
def fake_prompter() -> FakePrompter:
    return FakePrompter()


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


# ---------------------------------------------------------------------------
# Tarballs
# ---------------------------------------------------------------------------

def make_tarball(
    files: dict[str, str],
    top: str = "template-base-main",
    extra: list[tarfile.TarInfo] | None = None,
) -> bytes:
    """Build a gzip tarball shaped like a GitHub source archive.

    Args:
        files: Paths relative to the repository root -> text content.
        top: Name of the wrapping directory.
        extra: Additional raw members (links, hostile names) appended as-is.
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        root = tarfile.TarInfo(top)
        root.type = tarfile.DIRTYPE
        root.mode = 0o755
        tar.addfile(root)
        for rel, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{top}/{rel}")
            info.size = len(data)
            info.mode = 0o755 if rel.endswith(".sh") else 0o644
            tar.addfile(info, io.BytesIO(data))
        for info in extra or []:
            tar.addfile(info, io.BytesIO(b"x" * info.size) if info.isfile() else None)
    return buffer.getvalue()


@pytest.fixture
def sample_tarball() -> bytes:
    return make_tarball({
        "package.json": '{"name": "template-base"}\n',
        "src/main.tsx": "console.log('hi')\n",
        "scripts/setup.sh": "#!/bin/sh\n",
    })


@pytest.fixture
def tarball_factory():
    return make_tarball


@pytest.fixture
def prompter_factory():
    return FakePrompter


@pytest.fixture
def fetcher_factory():
    return FakeFetcher
