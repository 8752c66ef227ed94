"""Lifecycle-script scanner for local templates.

A template's ``package.json`` may declare install-time hooks that a package
manager runs automatically.  The scaffolder never runs them itself, but the
user is about to, so any declared hook is reported before the download.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from create_app.errors import ManifestError
from create_app.templates.paths import is_confined

RECOGNIZED_HOOKS: tuple[str, ...] = (
    "preinstall",
    "install",
    "postinstall",
    "prepublish",
    "prepare",
)


class TemplateManifest(BaseModel):
    """The parts of a template manifest the scanner cares about.

    Unknown keys are kept so the model accepts any real ``package.json``.
    """

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    version: str | None = None
    scripts: dict[str, Any] | None = None


class LifecycleWarning(BaseModel):
    """Advisory: lifecycle hooks declared by a template."""

    model_config = ConfigDict(frozen=True)

    template: str
    hooks: tuple[str, ...] = Field(default=())

    @property
    def message(self) -> str:
        return (
            f"Template '{self.template}' declares lifecycle scripts "
            f"({', '.join(self.hooks)}). These will run during installation. "
            "Proceed with caution."
        )


def load_manifest(template_dir: Path, manifest_name: str = "package.json") -> TemplateManifest | None:
    """Read and validate the manifest inside *template_dir*.

    Returns:
        The parsed manifest, or ``None`` when the template has no manifest.

    Raises:
        ManifestError: If the file exists but is unreadable, is not JSON, or
            does not have the shape of a manifest.  A manifest that is a
            dangling symlink, or resolves outside *template_dir*, is rejected
            without being opened.
    """
    path = template_dir / manifest_name
    if not os.path.lexists(path):
        return None

    real_dir = os.path.realpath(template_dir)
    real_path = os.path.realpath(path)
    if not is_confined(real_dir, real_path):
        raise ManifestError(path, "resolves outside the template directory")
    if not os.path.isfile(real_path):
        raise ManifestError(path, "not a regular file")

    try:
        raw = Path(real_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(path, str(exc)) from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ManifestError(path, f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc

    try:
        return TemplateManifest.model_validate(data)
    except ValidationError as exc:
        raise ManifestError(path, f"unexpected structure ({exc.error_count()} error(s))") from exc


def find_lifecycle_hooks(
    manifest: TemplateManifest, hooks: tuple[str, ...] = RECOGNIZED_HOOKS
) -> tuple[str, ...]:
    """Return the recognised hooks present in *manifest*, in canonical order."""
    if not manifest.scripts:
        return ()
    return tuple(hook for hook in hooks if hook in manifest.scripts)


def scan_lifecycle_scripts(
    template_dir: Path,
    template: str,
    manifest_name: str = "package.json",
    hooks: tuple[str, ...] = RECOGNIZED_HOOKS,
) -> LifecycleWarning | None:
    """Scan a resolved template directory for auto-executing install hooks.

    Args:
        template_dir: Confined, existing template directory.
        template: Display name used in the warning (``template-<name>``).
        manifest_name: Manifest file to inspect.
        hooks: Hook names considered dangerous.

    Returns:
        A :class:`LifecycleWarning` if any hook is declared, otherwise ``None``.

    Raises:
        ManifestError: Propagated from :func:`load_manifest`; callers treat
            it as an untrusted template.
    """
    manifest = load_manifest(template_dir, manifest_name)
    if manifest is None:
        return None

    found = find_lifecycle_hooks(manifest, hooks)
    if not found:
        return None
    return LifecycleWarning(template=template, hooks=found)
