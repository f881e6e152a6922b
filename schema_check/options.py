"""Command-line options and help text for ``schema-check``.

Both the argument parser and the help renderer are generated from the
``OPTIONS`` table so the two can never disagree.
"""
from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

PROGRAM = "schema-check"
OPTION_MARKER = "--"
ALIAS_JOINER = ", "

EXIT_CODE_LINES = [
    "\t0: validation successful;",
    "\t1: exception occurred (appears on stderr)",
    "\t2: command line syntax error (missing argument, etc)",
    "\t100: one or more file(s) failed validation",
]


@dataclass(frozen=True)
class OptionSpec:
    aliases: Tuple[str, ...]
    description: str
    takes_value: bool = False

    @property
    def name(self) -> str:
        return self.aliases[0]

    @property
    def flags(self) -> List[str]:
        return [OPTION_MARKER + alias for alias in self.aliases]


OPTIONS: Tuple[OptionSpec, ...] = (
    OptionSpec(("syntax",), "check the syntax of schema(s) given as argument(s)"),
    OptionSpec(("help",), "show this help"),
)


class Mode(Enum):
    SYNTAX_ONLY = "syntax"
    FULL_VALIDATION = "full"


@dataclass(frozen=True)
class OptionSet:
    syntax: bool = False
    help: bool = False
    arguments: Tuple[str, ...] = ()

    @property
    def mode(self) -> Mode:
        return Mode.SYNTAX_ONLY if self.syntax else Mode.FULL_VALIDATION


class UsageError(Exception):
    """Malformed or insufficient command line.

    Returned as a value by :func:`parse_options`; only raised internally to get
    out of argparse.
    """

    def __init__(self, message: str, options: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.options = tuple(options)


class _OptionParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def build_parser(options: Sequence[OptionSpec] = OPTIONS) -> argparse.ArgumentParser:
    parser = _OptionParser(prog=PROGRAM, add_help=False, allow_abbrev=False)
    for spec in options:
        if spec.takes_value:
            parser.add_argument(*spec.flags, dest=spec.name, metavar="VALUE")
        else:
            parser.add_argument(*spec.flags, dest=spec.name, action="store_true")
    parser.add_argument("arguments", nargs="*", default=[])
    return parser


def option_name(token: str) -> str:
    return token.lstrip("-").split("=", 1)[0]


def _requests_help(tokens: Sequence[str], options: Sequence[OptionSpec]) -> bool:
    help_flags = {flag for spec in options if spec.name == "help" for flag in spec.flags}
    return any(token in help_flags for token in tokens)


def parse_options(
    argv: Sequence[str],
    options: Sequence[OptionSpec] = OPTIONS,
) -> Union[OptionSet, UsageError]:
    """Turn a raw argument vector into an :class:`OptionSet` or a :class:`UsageError`."""
    tokens = list(argv)
    trailing: List[str] = []
    if OPTION_MARKER in tokens:
        split = tokens.index(OPTION_MARKER)
        tokens, trailing = tokens[:split], tokens[split + 1:]
    parser = build_parser(options)
    try:
        namespace, extras = parser.parse_known_intermixed_args(tokens)
    except UsageError as error:
        if _requests_help(tokens, options):
            return OptionSet(help=True)
        return error

    wants_help = bool(getattr(namespace, "help", False))
    if extras and not wants_help:
        names: List[str] = []
        for token in extras:
            name = option_name(token)
            if name not in names:
                names.append(name)
        return UsageError(f"unrecognized option(s): {ALIAS_JOINER.join(names)}", names)

    return OptionSet(
        syntax=bool(getattr(namespace, "syntax", False)),
        help=wants_help,
        arguments=tuple(namespace.arguments) + tuple(trailing),
    )


def render_help(
    options: Sequence[OptionSpec] = OPTIONS,
    program: str = PROGRAM,
    line_separator: Optional[str] = None,
) -> str:
    separator = os.linesep if line_separator is None else line_separator
    lines = [f"Syntax: {program} [options] file [file...]", "", "Options:"]
    for spec in options:
        lines.append(f"\t{ALIAS_JOINER.join(spec.flags)}: {spec.description}")
    lines.append("")
    lines.append("Exit codes:")
    lines.extend(EXIT_CODE_LINES)
    return separator.join(lines) + separator
