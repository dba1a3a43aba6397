"""Interactive questions asked when a release option is missing.

Questions are data (``Question``); rendering them is the job of a
``Prompter``. Question factories receive the options resolved so far, so a
later question can offer a default derived from an earlier answer.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Literal, Protocol

from binrel.core.config import ReleaseConfig
from binrel.core.result import Err, Ok, Result
from binrel.platform.detection import Platform
from binrel.release.errors import CollaboratorFailure, ReleaseError
from binrel.release.layout import zip_name
from binrel.release.options import OptionField, ReleaseOptions
from binrel.release.semver import is_valid_version, next_patch

QuestionKind = Literal["choice", "text", "confirm", "version"]
Answer = str | bool


@dataclass(frozen=True, slots=True)
class Choice:
    value: str
    label: str


@dataclass(frozen=True, slots=True)
class Question:
    name: str
    message: str
    kind: QuestionKind
    choices: tuple[Choice, ...] = ()
    default: Answer | None = None


QuestionFactory = Callable[[ReleaseOptions, ReleaseConfig], Question]


class Prompter(Protocol):
    """Renders one question and waits for the answer."""

    def ask(self, question: Question) -> Result[Answer, ReleaseError]: ...


# -----------------------------------------------------------------------------
# Questions
# -----------------------------------------------------------------------------


def which_platform(options: ReleaseOptions, config: ReleaseConfig) -> Question:
    return Question(
        name="platform",
        message="Which OS should we deploy?",
        kind="choice",
        choices=tuple(Choice(value=p.value, label=p.label) for p in Platform),
    )


def deploy_new_version(options: ReleaseOptions, config: ReleaseConfig) -> Question:
    current = config.product.current_version
    return Question(
        name="version",
        message=f"Bump version to (current is {current})?",
        kind="version",
        default=next_patch(current),
    )


def which_zip_file(options: ReleaseOptions, config: ReleaseConfig) -> Question:
    return Question(
        name="zip",
        message="Which zip file should we upload?",
        kind="text",
        default=zip_name(config, options.platform),
    )


def to_commit(options: ReleaseOptions, config: ReleaseConfig) -> Question:
    return Question(
        name="commit",
        message=f"Commit this new version to git?{_version_suffix(options)}",
        kind="confirm",
        default=True,
    )


def which_bump_task() -> Question:
    return Question(
        name="task",
        message="Which bump task?",
        kind="choice",
        choices=(
            Choice(value="run", label="Run test projects"),
            Choice(value="version", label="Bump version"),
        ),
    )


def which_version(config: ReleaseConfig) -> Question:
    return Question(
        name="version",
        message="Bump test projects to which version?",
        kind="version",
        default=config.product.current_version,
    )


def ensure_version(options: ReleaseOptions, config: ReleaseConfig) -> Question:
    return Question(
        name="version",
        message="Which version to ensure exists?",
        kind="version",
        default=config.product.current_version,
    )


def _version_suffix(options: ReleaseOptions) -> str:
    return f" (v{options.version})" if options.version else ""


# asked in this order, whatever order the caller lists its required fields in
MISSING_OPTION_QUESTIONS: Mapping[OptionField, QuestionFactory] = {
    "platform": which_platform,
    "version": deploy_new_version,
    "zip": which_zip_file,
    "commit": to_commit,
}


# -----------------------------------------------------------------------------
# Terminal prompter
# -----------------------------------------------------------------------------


def _is_interactive() -> bool:
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


class TyperPrompter:
    """Asks questions on the terminal with ``typer.prompt`` / ``typer.confirm``."""

    def __init__(self, *, interactive: Callable[[], bool] = _is_interactive) -> None:
        self._interactive = interactive

    def ask(self, question: Question) -> Result[Answer, ReleaseError]:
        import click
        import typer

        if not self._interactive():
            return Err(
                CollaboratorFailure(
                    stage="prompt",
                    message=f"missing option '{question.name}' and no terminal to ask",
                    hint=f"pass --{question.name} on the command line",
                )
            )

        try:
            match question.kind:
                case "confirm":
                    return Ok(typer.confirm(question.message, default=bool(question.default)))
                case "choice":
                    return Ok(self._ask_choice(question))
                case "version":
                    answer = typer.prompt(
                        question.message,
                        default=question.default,
                        value_proc=_version_value,
                    )
                    return Ok(str(answer).strip())
                case "text":
                    answer = typer.prompt(question.message, default=question.default)
                    return Ok(str(answer).strip())
        except click.exceptions.Abort:
            return Err(CollaboratorFailure(stage="prompt", message="cancelled by user"))
        return Err(CollaboratorFailure(stage="prompt", message=f"cannot ask {question.kind}"))

    def _ask_choice(self, question: Question) -> str:
        import click
        import typer

        typer.echo(question.message)
        for i, choice in enumerate(question.choices, start=1):
            typer.echo(f"  {i}) {choice.label}")
        numbers = [str(i) for i in range(1, len(question.choices) + 1)]
        picked = typer.prompt("Select", type=click.Choice(numbers), show_choices=False)
        return question.choices[int(picked) - 1].value


def _version_value(value: str) -> str:
    import click

    cleaned = str(value).strip()
    if not is_valid_version(cleaned):
        raise click.UsageError(f"'{cleaned}' is not a semantic version (X.Y.Z)")
    return cleaned


class MockPrompter:
    """Answers questions from a table for tests.

    Questions without a canned answer fall back to their default; a question
    with neither fails like a closed terminal. Every asked question is kept in
    ``asked``.
    """

    def __init__(self, answers: Mapping[str, Answer] | None = None) -> None:
        self.answers: dict[str, Answer] = dict(answers or {})
        self.asked: list[Question] = []

    def ask(self, question: Question) -> Result[Answer, ReleaseError]:
        self.asked.append(question)
        if question.name in self.answers:
            return Ok(self.answers[question.name])
        if question.default is not None:
            return Ok(question.default)
        return Err(CollaboratorFailure(stage="prompt", message=f"no answer for {question.name}"))

    @property
    def asked_names(self) -> list[str]:
        return [q.name for q in self.asked]
