"""Fill in missing release options by asking questions.

Questions run strictly one after another, in the order of the question
table, and only for fields that are still missing. A field that is already
set never reaches the prompter.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from binrel.core.config import ReleaseConfig
from binrel.core.result import Err, Ok, Result
from binrel.release.errors import InvalidInput, ReleaseError
from binrel.release.options import OptionField, ReleaseOptions, normalize_platform
from binrel.release.questions import (
    MISSING_OPTION_QUESTIONS,
    Answer,
    Prompter,
    QuestionFactory,
)

__all__ = ["ask_missing", "ask_missing_options"]

log = logging.getLogger(__name__)


def _store(options: ReleaseOptions, name: OptionField, answer: Answer) -> None:
    match name:
        case "commit":
            options.commit = answer if isinstance(answer, bool) else answer.lower() in ("y", "yes")
        case "platform":
            options.platform = normalize_platform(str(answer))
            options.platform_inferred = False
        case "version":
            options.version = str(answer).strip()
        case "zip":
            options.zip = str(answer).strip()


def ask_missing(
    options: ReleaseOptions,
    questions: Sequence[tuple[OptionField, QuestionFactory]],
    prompter: Prompter,
    config: ReleaseConfig,
) -> Result[ReleaseOptions, ReleaseError]:
    """Ask each (field, question) pair whose field is missing, in order.

    The question for a field is built only when it is about to be asked, from
    the options as they stand after the previous answers.
    """
    for name, factory in questions:
        if not options.is_missing(name):
            continue
        question = factory(options, config)
        log.debug("asking for %s", name)
        answer = prompter.ask(question)
        if isinstance(answer, Err):
            return answer
        _store(options, name, answer.value)
    return Ok(options)


def ask_missing_options(
    options: ReleaseOptions,
    required: Iterable[OptionField],
    prompter: Prompter,
    config: ReleaseConfig,
    *,
    table: Mapping[OptionField, QuestionFactory] = MISSING_OPTION_QUESTIONS,
) -> Result[ReleaseOptions, ReleaseError]:
    """Resolve every field in ``required``, asking only for the missing ones."""
    wanted = set(required)
    unknown = sorted(wanted - set(table))
    if unknown:
        return Err(InvalidInput(message=f"no question for option(s): {', '.join(unknown)}"))

    picked = [(name, factory) for name, factory in table.items() if name in wanted]
    return ask_missing(options, picked, prompter, config)
