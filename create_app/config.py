"""create-modern-app configuration.

Centralised, typed configuration for a scaffolding run. Settings use a
Pydantic v2 model so they are validated once at startup and then passed
explicitly to the validator, resolver and orchestrator.  The model is frozen:
nothing in the tool mutates configuration after construction.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Shipped local catalog: sibling ``template-<name>`` directories.
DEFAULT_TEMPLATES_ROOT = Path(__file__).resolve().parent / "catalog"

DEFAULT_ARCHIVE_URL = "https://github.com/{owner}/{repo}/archive/{ref}.tar.gz"

_TEMPLATE_NAME_RE = re.compile(r"^[a-z0-9-]+$")


class Config(BaseModel):
    """Global create-modern-app configuration.

    Instances are created once by the CLI entry point (usually through
    :meth:`from_env`) and handed to :class:`~create_app.creator.ProjectCreator`.
    Tests build their own instances pointing at temporary template roots.
    """

    model_config = ConfigDict(frozen=True)

    templates_root: Path = Field(default=DEFAULT_TEMPLATES_ROOT)
    available_templates: tuple[str, ...] = Field(default=("base", "redux"))
    fallback_template: str = Field(default="base")
    template_prefix: str = Field(default="template-")
    manifest_name: str = Field(default="package.json")

    remote_namespace: str = Field(default="fraanlol")
    remote_ref: str = Field(default="HEAD")
    archive_url: str = Field(default=DEFAULT_ARCHIVE_URL)
    fetch_timeout: int = Field(default=60, ge=5, description="Per-request timeout in seconds")

    max_project_name_length: int = Field(default=50, ge=1)
    next_steps: tuple[str, ...] = Field(
        default=("cd {project_name}", "npm install", "npm run dev"),
    )

    @field_validator("available_templates")
    @classmethod
    def _check_available(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        bad = [name for name in value if not _TEMPLATE_NAME_RE.match(name)]
        if bad:
            raise ValueError(f"Invalid template names in allow-list: {', '.join(bad)}")
        if not value:
            raise ValueError("At least one template must be available")
        return value

    @model_validator(mode="after")
    def _check_fallback(self) -> "Config":
        if self.fallback_template not in self.available_templates:
            raise ValueError(
                f"Fallback template '{self.fallback_template}' is not one of "
                f"{', '.join(self.available_templates)}"
            )
        return self

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def template_dir_name(self, name: str) -> str:
        """Directory name of a template inside the templates root."""
        return f"{self.template_prefix}{name}"

    def render_next_steps(self, project_name: str) -> list[str]:
        """Return the post-creation guidance with the project name filled in."""
        return [step.format(project_name=project_name) for step in self.next_steps]

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CREATE_APP_TEMPLATES_ROOT, CREATE_APP_TEMPLATES,
            CREATE_APP_FALLBACK_TEMPLATE, CREATE_APP_REMOTE_NAMESPACE,
            CREATE_APP_REMOTE_REF, CREATE_APP_FETCH_TIMEOUT.

        ``CREATE_APP_TEMPLATES`` is a comma-separated allow-list.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CREATE_APP_TEMPLATES_ROOT"):
            kwargs["templates_root"] = Path(os.environ["CREATE_APP_TEMPLATES_ROOT"])
        if os.environ.get("CREATE_APP_TEMPLATES"):
            names = os.environ["CREATE_APP_TEMPLATES"].split(",")
            kwargs["available_templates"] = tuple(n.strip() for n in names if n.strip())
        if os.environ.get("CREATE_APP_FALLBACK_TEMPLATE"):
            kwargs["fallback_template"] = os.environ["CREATE_APP_FALLBACK_TEMPLATE"]
        if os.environ.get("CREATE_APP_REMOTE_NAMESPACE"):
            kwargs["remote_namespace"] = os.environ["CREATE_APP_REMOTE_NAMESPACE"]
        if os.environ.get("CREATE_APP_REMOTE_REF"):
            kwargs["remote_ref"] = os.environ["CREATE_APP_REMOTE_REF"]
        if os.environ.get("CREATE_APP_FETCH_TIMEOUT"):
            kwargs["fetch_timeout"] = int(os.environ["CREATE_APP_FETCH_TIMEOUT"])

        return cls(**kwargs)
