"""Mode resolution, dispatch to the schema engine and exit-code mapping."""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, TextIO, Tuple, TypeVar, Union

from schema_check.config import ConfigError, Settings
from schema_check.options import Mode, OptionSet, UsageError, parse_options, render_help
from schema_check.validation import (
    EngineError,
    ProcessingReport,
    SchemaCheckError,
    SchemaFactory,
    SyntaxValidator,
    load_document,
)

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ExitCode(IntEnum):
    SUCCESS = 0
    EXCEPTION = 1
    USAGE = 2
    VALIDATION_FAILURE = 100


class OutcomeKind(Enum):
    SUCCESS = "success"
    REPORTED_FAILURE = "reported-failure"
    ENGINE_EXCEPTION = "engine-exception"


@dataclass(frozen=True)
class Outcome:
    path: str
    report: Optional[ProcessingReport] = None
    error: Optional[Exception] = None

    @property
    def kind(self) -> OutcomeKind:
        if self.error is not None:
            return OutcomeKind.ENGINE_EXCEPTION
        if self.report is not None and not self.report.success:
            return OutcomeKind.REPORTED_FAILURE
        return OutcomeKind.SUCCESS


@dataclass(frozen=True)
class InputSpec:
    mode: Mode
    schema: Optional[str]
    paths: Tuple[str, ...]


def required_arguments(mode: Mode) -> int:
    return 1 if mode is Mode.SYNTAX_ONLY else 2


def resolve_inputs(option_set: OptionSet) -> Union[InputSpec, UsageError]:
    mode = option_set.mode
    arguments = option_set.arguments
    if len(arguments) < required_arguments(mode):
        return UsageError("missing arguments")
    if mode is Mode.SYNTAX_ONLY:
        return InputSpec(mode=mode, schema=None, paths=arguments)
    return InputSpec(mode=mode, schema=arguments[0], paths=arguments[1:])


def _capture(path: str, check: Callable[[], T]) -> Tuple[Optional[T], Optional[SchemaCheckError]]:
    """Run one engine step, turning any failure into an error bound to ``path``."""
    try:
        return check(), None
    except SchemaCheckError as exc:
        LOGGER.debug("%s raised %r", path, exc)
        return None, exc
    except Exception as exc:
        LOGGER.debug("unexpected failure on %s", path, exc_info=True)
        return None, EngineError(f"{type(exc).__name__}: {exc}", path)


def _check_syntax(paths: Iterable[str], settings: Settings) -> List[Outcome]:
    validator = SyntaxValidator(settings.default_draft)
    outcomes: List[Outcome] = []
    for path in paths:
        LOGGER.debug("syntax check: %s", path)
        report, error = _capture(path, lambda: validator.validate_schema(load_document(path), source=path))
        outcomes.append(Outcome(path, report=report, error=error))
    return outcomes


def _validate_instances(schema_path: str, paths: Iterable[str], settings: Settings) -> List[Outcome]:
    factory = SchemaFactory(settings.default_draft, settings.format_check)
    LOGGER.debug("loading schema: %s", schema_path)
    schema, error = _capture(schema_path, lambda: factory.get_schema(load_document(schema_path), source=schema_path))
    if schema is None:
        return [Outcome(schema_path, error=error)]

    outcomes: List[Outcome] = []
    for path in paths:
        LOGGER.debug("validating %s against %s", path, schema_path)
        report, error = _capture(path, lambda: schema.validate(load_document(path), source=path))
        outcomes.append(Outcome(path, report=report, error=error))
    return outcomes


def dispatch(inputs: InputSpec, settings: Optional[Settings] = None) -> List[Outcome]:
    """Run every input through the engine, one outcome per input, in order.

    A failing input never stops the batch; in full validation mode a schema
    that cannot be loaded or compiled yields a single outcome for the schema.
    """
    settings = settings or Settings()
    if inputs.schema is None:
        return _check_syntax(inputs.paths, settings)
    return _validate_instances(inputs.schema, inputs.paths, settings)


def exit_code_for(outcomes: Iterable[Outcome]) -> ExitCode:
    kinds = {outcome.kind for outcome in outcomes}
    if OutcomeKind.ENGINE_EXCEPTION in kinds:
        return ExitCode.EXCEPTION
    if OutcomeKind.REPORTED_FAILURE in kinds:
        return ExitCode.VALIDATION_FAILURE
    return ExitCode.SUCCESS


def report_outcomes(outcomes: Iterable[Outcome], stdout: TextIO, stderr: TextIO) -> None:
    for outcome in outcomes:
        if outcome.error is not None:
            print(str(outcome.error), file=stderr)
        elif outcome.report is not None:
            print(outcome.report.render(), file=stdout)


def _usage_failure(error: UsageError, help_text: str, stderr: TextIO) -> ExitCode:
    print(error.message, file=stderr)
    stderr.write(help_text)
    return ExitCode.USAGE


def run(
    argv: Sequence[str],
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Execute one invocation and return its exit code."""
    stdout = sys.stdout if stdout is None else stdout
    stderr = sys.stderr if stderr is None else stderr
    help_text = render_help()

    parsed = parse_options(argv)
    if isinstance(parsed, UsageError):
        return int(_usage_failure(parsed, help_text, stderr))
    if parsed.help:
        stdout.write(help_text)
        return int(ExitCode.SUCCESS)

    inputs = resolve_inputs(parsed)
    if isinstance(inputs, UsageError):
        return int(_usage_failure(inputs, help_text, stderr))

    try:
        settings = Settings.from_env(environ)
    except ConfigError as exc:
        print(str(exc), file=stderr)
        return int(ExitCode.EXCEPTION)
    logging.getLogger("schema_check").setLevel(settings.log_level)

    try:
        outcomes = dispatch(inputs, settings)
    except Exception as exc:
        LOGGER.debug("unexpected engine failure", exc_info=True)
        print(f"{type(exc).__name__}: {exc}", file=stderr)
        return int(ExitCode.EXCEPTION)

    report_outcomes(outcomes, stdout, stderr)
    return int(exit_code_for(outcomes))
