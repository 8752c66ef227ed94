"""Interactive prompts built on ``rich.prompt``.

Questions are declared up front, each with an optional skip predicate, and
asked one at a time.  Invalid answers are re-prompted with the validator's
message.  When the session is not interactive (stdin is not a TTY) a
required question raises :class:`PromptUnavailableError`; optional ones are
skipped so the caller's defaults apply.
"""

from __future__ import annotations

import signal
import sys
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TextIO

from rich.console import Console
from rich.prompt import InvalidResponse, Prompt

from create_app.errors import PromptUnavailableError
from create_app.utils import console as default_console


@dataclass
class Question:
    """One prompt in a question list.

    Attributes:
        name: Key of the answer in the returned mapping.
        message: Text shown to the user.
        kind: ``"input"`` for free text, ``"list"`` to pick from *choices*.
        default: Value used when the user just presses Enter.
        choices: Allowed answers for ``"list"`` questions.
        when: Skip predicate; receives the answers so far.
        validate: Returns an error message for a bad answer, ``None`` if fine.
        required: Whether a non-interactive session must fail on this question.
    """

    name: str
    message: str
    kind: str = "input"
    default: str | None = None
    choices: list[str] = field(default_factory=list)
    when: Callable[[dict[str, str]], bool] | None = None
    validate: Callable[[str], str | None] | None = None
    required: bool = True


class _ValidatingPrompt(Prompt):
    """``Prompt`` that runs an extra validator and treats EOF as unrenderable."""

    validator: Callable[[str], str | None] | None = None

    @classmethod
    def get_input(cls, console: Console, prompt, password: bool, stream: TextIO | None = None) -> str:
        value = super().get_input(console, prompt, password, stream=stream)
        if stream is not None:
            # readline() keeps the newline and signals EOF with "".
            if value == "":
                raise EOFError
            value = value.rstrip("\r\n")
        return value

    def process_response(self, value: str) -> str:
        answer = super().process_response(value)
        if self.validator is not None:
            message = self.validator(answer)
            if message:
                raise InvalidResponse(f"[prompt.invalid]{message}")
        return answer


@contextmanager
def _interruptible() -> Iterator[None]:
    """Make Ctrl-C raise ``KeyboardInterrupt`` while a blocking read waits.

    ``asyncio.run`` replaces the SIGINT handler with one that only cancels
    the main task, which a thread blocked in ``input()`` never notices.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = signal.getsignal(signal.SIGINT)
    signal.signal(signal.SIGINT, signal.default_int_handler)
    try:
        yield
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)


class RichPrompter:
    """Prompt collaborator used by :class:`~create_app.creator.ProjectCreator`.

    Args:
        console: Console to render on; defaults to the shared console.
        interactive: Force interactivity on or off.  Defaults to whether
            stdin is a TTY.
        stream: Read answers from this stream instead of stdin.
    """

    def __init__(
        self,
        console: Console | None = None,
        interactive: bool | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.console = console or default_console
        if interactive is None:
            interactive = stream is not None or sys.stdin.isatty()
        self.interactive = interactive
        self.stream = stream

    async def ask(self, questions: list[Question]) -> dict[str, str]:
        """Ask each applicable question in order.

        Returns:
            Mapping of question name to answer for the questions actually asked.

        Raises:
            PromptUnavailableError: A required question cannot be asked in
                this environment, or input ended before it was answered.
            KeyboardInterrupt: Ctrl-C while waiting for an answer.
        """
        answers: dict[str, str] = {}
        for question in questions:
            if question.when is not None and not question.when(answers):
                continue
            if not self.interactive:
                if question.required:
                    raise PromptUnavailableError(
                        "Prompt couldn't be rendered in the current environment "
                        f"(needed: {question.message.rstrip(':')})"
                    )
                continue
            answers[question.name] = self._ask_one(question)
        return answers

    def _ask_one(self, question: Question) -> str:
        prompt = _ValidatingPrompt(
            question.message.rstrip(":"),
            console=self.console,
            choices=(question.choices or None) if question.kind == "list" else None,
            show_choices=question.kind == "list",
        )
        prompt.validator = question.validate

        kwargs = {"stream": self.stream}
        if question.default is not None:
            kwargs["default"] = question.default
        try:
            with _interruptible():
                return prompt(**kwargs)
        except EOFError as exc:
            raise PromptUnavailableError(
                f"Input ended before '{question.name}' was answered"
            ) from exc
