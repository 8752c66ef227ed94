"""Template resolution with filesystem confinement.

A template name is untrusted input.  It is first normalised syntactically,
then turned into ``<templates_root>/template-<name>`` and both paths are
resolved through symlinks.  The candidate is accepted only if its real path
lies strictly inside the real templates root, is an existing directory, and
its manifest (if any) parses.  Anything else resolves to the fallback
template; the resolver never raises.

The allow-list in :class:`~create_app.config.Config` is *not* consulted here.
It only decides which choices the interactive prompt offers.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from create_app.config import Config
from create_app.errors import ManifestError, TemplateRejectedError
from create_app.templates.lifecycle import LifecycleWarning, scan_lifecycle_scripts
from create_app.templates.paths import is_confined
from create_app.validation import validate_template_name


class ResolvedTemplate(BaseModel):
    """Outcome of resolving one template name.

    Attributes:
        name: Template name that will be used (possibly the fallback).
        requested: The raw value supplied by the user.
        path: Real path of the local template directory, always strictly
            inside the templates root; ``None`` when no local copy is usable.
        fallback_reason: Why the requested name was replaced, if it was.
        lifecycle: Lifecycle hooks declared by the local template.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    requested: Any = None
    path: Path | None = None
    fallback_reason: str | None = None
    lifecycle: LifecycleWarning | None = None

    @property
    def used_fallback(self) -> bool:
        return self.fallback_reason is not None


class TemplateResolver:
    """Map template names to confined local directories and remote coordinates."""

    def __init__(self, config: Config) -> None:
        self.config = config

    # -- Public API --------------------------------------------------------

    def resolve(self, raw: object) -> ResolvedTemplate:
        """Resolve *raw* to a usable template, falling back when necessary.

        Args:
            raw: Untrusted template name.

        Returns:
            A :class:`ResolvedTemplate`.  ``used_fallback`` is set whenever
            the result differs from what was requested.
        """
        fallback = self.config.fallback_template
        name = validate_template_name(raw, fallback)
        if name == fallback and not self._asks_for_fallback(raw):
            return self._fallback(raw, "malformed template name")

        try:
            path, lifecycle = self._confine(name)
        except TemplateRejectedError as exc:
            if name == fallback:
                # Nothing to fall back to; the remote fetch still works.
                return ResolvedTemplate(name=fallback, requested=raw)
            return self._fallback(raw, exc.reason)

        return ResolvedTemplate(name=name, requested=raw, path=path, lifecycle=lifecycle)

    def remote_coordinate(self, name: str) -> str:
        """Return the remote repository coordinate for template *name*.

        The coordinate is ``<namespace>/template-<name>``, with ``#<ref>``
        appended when a ref other than ``HEAD`` is configured.
        """
        coordinate = f"{self.config.remote_namespace}/{self.config.template_dir_name(name)}"
        if self.config.remote_ref and self.config.remote_ref != "HEAD":
            coordinate += f"#{self.config.remote_ref}"
        return coordinate

    def template_path(self, name: str) -> Path:
        """Unresolved candidate path for *name* under the templates root."""
        return self.config.templates_root / self.config.template_dir_name(name)

    # -- Internals ---------------------------------------------------------

    def _asks_for_fallback(self, raw: object) -> bool:
        """True when *raw* is missing or already names the fallback template."""
        if raw is None:
            return True
        if not isinstance(raw, str):
            return False
        return raw.strip().lower() in ("", self.config.fallback_template)

    def _fallback(self, raw: object, reason: str) -> ResolvedTemplate:
        fallback = self.config.fallback_template
        try:
            path, lifecycle = self._confine(fallback)
        except TemplateRejectedError:
            path, lifecycle = None, None
        return ResolvedTemplate(
            name=fallback,
            requested=raw,
            path=path,
            fallback_reason=reason,
            lifecycle=lifecycle,
        )

    def _confine(self, name: str) -> tuple[Path, LifecycleWarning | None]:
        """Resolve *name* inside the templates root or raise ``TemplateRejectedError``."""
        candidate = self.template_path(name)
        try:
            real_root = os.path.realpath(self.config.templates_root)
            real_candidate = os.path.realpath(candidate)
        except (OSError, ValueError) as exc:
            raise TemplateRejectedError(name, f"cannot resolve path ({exc})") from exc

        if not is_confined(real_root, real_candidate):
            raise TemplateRejectedError(name, "resolves outside the templates root")

        resolved = Path(real_candidate)
        if not resolved.exists():
            raise TemplateRejectedError(name, "template does not exist")
        if not resolved.is_dir():
            raise TemplateRejectedError(name, "template is not a directory")

        try:
            lifecycle = scan_lifecycle_scripts(
                resolved,
                self.config.template_dir_name(name),
                manifest_name=self.config.manifest_name,
            )
        except ManifestError as exc:
            raise TemplateRejectedError(name, f"manifest could not be parsed: {exc.reason}") from exc

        return resolved, lifecycle
