"""Fetch-and-materialize orchestrator.

Drives one project creation from raw inputs to a populated directory::

    COLLECTING_INPUT -> VALIDATING -> RESOLVING -> GUARDING -> FETCHING
        -> SUCCEEDED
        -> ROLLING_BACK -> FAILED

Every warning (template fallback, lifecycle scripts) is printed before the
download starts so the user can still interrupt.  A failed or interrupted
download removes the destination entirely.

Usage::

    creator = ProjectCreator(Config.from_env())
    result = await creator.create("my-app", template="redux")
    sys.exit(result.exit_code)
"""

from __future__ import annotations

import asyncio
import os
import shutil
import signal
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from create_app.config import Config
from create_app.errors import (
    FetchError,
    InvalidProjectNameError,
    PromptUnavailableError,
    ScaffoldError,
)
from create_app.fetcher import FetchOptions, GitHubFetcher
from create_app.guard import destination_for, guard_destination
from create_app.prompts import Question, RichPrompter
from create_app.templates import ResolvedTemplate, TemplateResolver
from create_app.utils import (
    create_progress,
    print_banner,
    print_error,
    print_info,
    print_next_steps,
    print_success,
    print_warning,
)
from create_app.validation import project_name_error, validate_project_name, validate_template_name


class CreationState(str, Enum):
    COLLECTING_INPUT = "collecting_input"
    VALIDATING = "validating"
    RESOLVING = "resolving"
    GUARDING = "guarding"
    FETCHING = "fetching"
    ROLLING_BACK = "rolling_back"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class CreationResult(BaseModel):
    """Outcome of one :meth:`ProjectCreator.create` call."""

    state: CreationState = CreationState.COLLECTING_INPUT
    success: bool = False
    exit_code: int = 1
    project_name: str | None = None
    project_path: Path | None = None
    template: str | None = None
    source: str | None = None
    error: str | None = None
    warnings: list[str] = Field(default_factory=list)
    cleanup_failed: bool = False


class ProjectCreator:
    """Create a project directory from a remote template.

    Args:
        config: Read-only tool configuration.
        prompter: Prompt collaborator; defaults to :class:`RichPrompter`.
        fetcher: Remote-fetch collaborator exposing
            ``async fetch(source, destination, options)``; defaults to
            :class:`GitHubFetcher`.
        cwd: Directory the project is created in; defaults to the process cwd.
        verbose: Print resolved paths, coordinates and state transitions.
    """

    def __init__(
        self,
        config: Config,
        prompter: Any = None,
        fetcher: Any = None,
        cwd: str | Path | None = None,
        verbose: bool = False,
    ) -> None:
        self.config = config
        self.prompter = prompter or RichPrompter()
        self.fetcher = fetcher or GitHubFetcher(config.archive_url, config.fetch_timeout)
        self.resolver = TemplateResolver(config)
        self.cwd = Path(cwd) if cwd is not None else None
        self.verbose = verbose
        self.result = CreationResult()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create(
        self, project_name: str | None = None, template: str | None = None
    ) -> CreationResult:
        """Run the full creation flow.

        Args:
            project_name: Name from the command line, or ``None`` to prompt.
            template: Template from the command line, or ``None`` to prompt.

        Returns:
            A :class:`CreationResult`; ``exit_code`` is 0 only on success.
            Cancellation is not converted: the destination is rolled back
            and ``asyncio.CancelledError`` propagates.
        """
        self.result = CreationResult()
        try:
            project_name, template = await self._collect_input(project_name, template)

            self._transition(CreationState.VALIDATING)
            project_name = validate_project_name(project_name, self.config.max_project_name_length)
            self.result.project_name = project_name

            self._transition(CreationState.RESOLVING)
            resolved = self.resolver.resolve(template)
            self._report_resolution(resolved)
            self.result.template = resolved.name
            print_banner(project_name, resolved.name)

            self._transition(CreationState.GUARDING)
            destination = guard_destination(destination_for(project_name, self.cwd))
            self.result.project_path = destination

            source = self.resolver.remote_coordinate(resolved.name)
            self.result.source = source
            if self.verbose:
                print_info(f"Destination: {destination}")
                print_info(f"Source:      {source}")

            self._transition(CreationState.FETCHING)
            await self._fetch(source, destination)
        except ScaffoldError as exc:
            return self._fail(exc)

        self._transition(CreationState.SUCCEEDED)
        self.result.success = True
        self.result.exit_code = 0
        print_next_steps(project_name, self.config.render_next_steps(project_name))
        return self.result

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _collect_input(
        self, project_name: str | None, template: str | None
    ) -> tuple[str, str | None]:
        """Fill in missing or invalid inputs interactively."""
        max_length = self.config.max_project_name_length
        given_error = project_name_error(project_name, max_length) if project_name else None
        if given_error:
            print_warning(f"{given_error}: '{project_name}'")

        questions = [
            Question(
                name="projectName",
                message="Project name:",
                when=lambda _: not project_name or given_error is not None,
                validate=lambda value: project_name_error(value, max_length),
            ),
            Question(
                name="template",
                message="Select a template:",
                kind="list",
                choices=list(self.config.available_templates),
                default=self.config.fallback_template,
                when=lambda _: self._needs_template_choice(template),
                required=False,
            ),
        ]

        try:
            answers = await self.prompter.ask(questions)
        except PromptUnavailableError:
            if given_error:
                raise InvalidProjectNameError(given_error, name=project_name)
            raise
        except ScaffoldError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise ScaffoldError(f"Something went wrong while prompting: {exc}") from exc

        if not project_name or given_error:
            project_name = answers.get("projectName")
        template = answers.get("template", template)
        return project_name, template

    def _needs_template_choice(self, template: str | None) -> bool:
        """Prompt when no template was given or the given one would fall back."""
        if template is None:
            return True
        normalised = validate_template_name(template, fallback="")
        if normalised in self.config.available_templates:
            return False
        # On-disk templates outside the allow-list are accepted as given.
        return self.resolver.resolve(template).used_fallback

    def _report_resolution(self, resolved: ResolvedTemplate) -> None:
        if resolved.used_fallback:
            message = (
                f"Template '{resolved.requested}' is not valid. Falling back to "
                f"'{resolved.name}'. Available templates: "
                f"{', '.join(self.config.available_templates)}"
            )
            self._warn(message)
            if self.verbose:
                print_info(f"Reason: {resolved.fallback_reason}")

        if resolved.lifecycle is not None:
            self._warn(resolved.lifecycle.message)

        if self.verbose:
            if resolved.path is not None:
                print_info(f"Local template: {resolved.path}")
            else:
                print_info(f"No local copy of template '{resolved.name}'; using remote only")

    async def _fetch(self, source: str, destination: Path) -> None:
        """Download into *destination*, rolling back on any failure."""
        loop = asyncio.get_running_loop()
        sigterm_installed = _cancel_on_sigterm(loop, asyncio.current_task())
        try:
            with create_progress() as progress:
                progress.add_task("Downloading template...", total=None)
                await self.fetcher.fetch(source, destination, FetchOptions(force=True, cache=False))
        except (Exception, asyncio.CancelledError, KeyboardInterrupt) as exc:
            print_error("Failed to download template.")
            self._transition(CreationState.ROLLING_BACK)
            self._rollback(destination)
            if isinstance(exc, ScaffoldError):
                raise
            if isinstance(exc, Exception):
                raise FetchError(f"Failed to download template: {exc}", source=source) from exc
            raise
        finally:
            if sigterm_installed:
                loop.remove_signal_handler(signal.SIGTERM)

        print_success("Template downloaded!")

    def _rollback(self, destination: Path) -> bool:
        """Remove a partially populated destination.  Returns ``True`` on success."""
        if not os.path.lexists(destination):
            return True
        try:
            if destination.is_dir() and not destination.is_symlink():
                shutil.rmtree(destination)
            else:
                destination.unlink()
        except OSError as exc:
            self.result.cleanup_failed = True
            self._warn(
                f"Could not remove partial project at '{destination}' ({exc}). "
                "Please delete it manually."
            )
            return False
        print_warning(f"Cleaned up partial project at '{destination}'.")
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transition(self, state: CreationState) -> None:
        self.result.state = state
        if self.verbose:
            print_info(f"[{state.value}]")

    def _warn(self, message: str) -> None:
        self.result.warnings.append(message)
        print_warning(message)

    def _fail(self, exc: ScaffoldError) -> CreationResult:
        self._transition(CreationState.FAILED)
        self.result.error = str(exc)
        self.result.exit_code = 1
        print_error(f"Error: {exc}")
        return self.result


def _cancel_on_sigterm(loop: asyncio.AbstractEventLoop, task: asyncio.Task | None) -> bool:
    """Cancel *task* on SIGTERM so the fetch rolls back.  Best effort."""
    if task is None:
        return False
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except (NotImplementedError, RuntimeError, ValueError, AttributeError):
        # Windows loops, or not running in the main thread.
        return False
    return True
