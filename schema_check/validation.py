"""Thin adapter over ``jsonschema`` used by the command-line front-end.

The rest of the package only talks to the engine through :func:`load_document`,
:class:`SyntaxValidator`, :class:`SchemaFactory` and :class:`ProcessingReport`.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

import jsonschema
from jsonschema.exceptions import SchemaError, UnknownType, ValidationError
from jsonschema.validators import validator_for
from referencing.exceptions import Unresolvable

LOGGER = logging.getLogger(__name__)

# Failures raised from inside the engine rather than reported as errors.
ENGINE_FAILURES = (Unresolvable, UnknownType, RecursionError, re.error)

DRAFTS: Dict[str, Type[Any]] = {
    "draft3": jsonschema.Draft3Validator,
    "draft4": jsonschema.Draft4Validator,
    "draft6": jsonschema.Draft6Validator,
    "draft7": jsonschema.Draft7Validator,
    "draft2019-09": jsonschema.Draft201909Validator,
    "draft2020-12": jsonschema.Draft202012Validator,
}
DEFAULT_DRAFT = "draft4"


class SchemaCheckError(Exception):
    """Base class for errors raised while loading or checking a document."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class LoadError(SchemaCheckError):
    """A file could not be read or is not valid JSON."""


class EngineError(SchemaCheckError):
    """The schema engine failed to compile a schema or to run a validation."""


def json_pointer(parts: Iterable[Any]) -> str:
    return "".join("/" + str(part).replace("~", "~0").replace("/", "~1") for part in parts)


@dataclass(frozen=True)
class ProcessingMessage:
    message: str
    keyword: Optional[str] = None
    instance_pointer: str = ""
    schema_pointer: str = ""
    level: str = "error"

    @classmethod
    def from_error(cls, error: ValidationError) -> "ProcessingMessage":
        return cls(
            message=error.message,
            keyword=error.validator if isinstance(error.validator, str) else None,
            instance_pointer=json_pointer(error.absolute_path),
            schema_pointer=json_pointer(error.absolute_schema_path),
        )

    def render(self) -> List[str]:
        lines = [f"{self.level}: {self.message}", f"    level: {json.dumps(self.level)}"]
        if self.keyword is not None:
            lines.append(f"    keyword: {json.dumps(self.keyword)}")
        lines.append(f"    instance: {json.dumps({'pointer': self.instance_pointer})}")
        lines.append(f"    schema: {json.dumps({'pointer': self.schema_pointer})}")
        return lines


@dataclass(frozen=True)
class ProcessingReport:
    """Outcome of one syntax or instance validation.

    ``str(report)`` is the exact text printed on standard output.
    """

    success: bool
    messages: Tuple[ProcessingMessage, ...] = field(default_factory=tuple)
    source: Optional[str] = None

    @classmethod
    def from_errors(cls, errors: Iterable[ValidationError], source: Optional[str] = None) -> "ProcessingReport":
        messages = sorted(
            (ProcessingMessage.from_error(error) for error in errors),
            key=lambda m: (m.instance_pointer, m.schema_pointer, m.message),
        )
        return cls(success=not messages, messages=tuple(messages), source=source)

    def render(self) -> str:
        status = "success" if self.success else "failure"
        lines = [f"{self.source}: {status}" if self.source else status]
        if self.messages:
            lines.append("--- BEGIN MESSAGES ---")
            for message in self.messages:
                lines.extend(message.render())
            lines.append("--- END MESSAGES ---")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()


def load_document(path: str) -> Any:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        raise LoadError("file not found", path) from None
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"cannot read file: {exc}", path) from exc
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise LoadError(f"invalid JSON: {exc}", path) from exc


def _declared_validator(document: Any) -> Optional[Type[Any]]:
    """Validator class named by ``$schema``, or None when the URI is unknown."""
    uri = document.get("$schema")
    if not isinstance(uri, str):
        return None
    # The meta-schema registry keys some drafts with a trailing empty fragment.
    for candidate in (uri, uri.rstrip("#"), uri.rstrip("#") + "#"):
        cls = validator_for({"$schema": candidate}, default=None)
        if cls is not None:
            return cls
    return None


def resolve_validator(document: Any, default_draft: str = DEFAULT_DRAFT, path: Optional[str] = None) -> Type[Any]:
    if isinstance(document, dict) and "$schema" in document:
        cls = _declared_validator(document)
        if cls is None:
            raise EngineError(f"unsupported $schema: {document['$schema']!r}", path)
        return cls
    return DRAFTS[default_draft]


class SyntaxValidator:
    """Checks that a document is itself a well-formed schema."""

    def __init__(self, default_draft: str = DEFAULT_DRAFT) -> None:
        self.default_draft = default_draft

    def validate_schema(self, document: Any, source: Optional[str] = None) -> ProcessingReport:
        try:
            cls = resolve_validator(document, self.default_draft, source)
        except EngineError as exc:
            message = ProcessingMessage(message=exc.message, keyword="$schema", instance_pointer="/$schema")
            return ProcessingReport(success=False, messages=(message,), source=source)

        meta_cls = validator_for(cls.META_SCHEMA, default=cls)
        LOGGER.debug("checking %s against %s", source or "<document>", meta_cls.__name__)
        try:
            errors = list(meta_cls(cls.META_SCHEMA).iter_errors(document))
        except ENGINE_FAILURES as exc:
            raise EngineError(f"meta-schema check failed: {exc}", source) from exc
        return ProcessingReport.from_errors(errors, source)


class Schema:
    def __init__(self, validator: Any, source: Optional[str] = None) -> None:
        self._validator = validator
        self.source = source

    def validate(self, instance: Any, source: Optional[str] = None) -> ProcessingReport:
        try:
            errors = list(self._validator.iter_errors(instance))
        except ENGINE_FAILURES + (SchemaError,) as exc:
            raise EngineError(f"validation against {self.source or 'schema'} failed: {exc}", source) from exc
        return ProcessingReport.from_errors(errors, source)


class SchemaFactory:
    """Compiles schema documents into :class:`Schema` objects."""

    def __init__(self, default_draft: str = DEFAULT_DRAFT, format_check: bool = False) -> None:
        self.default_draft = default_draft
        self.format_check = format_check

    def get_schema(self, document: Any, source: Optional[str] = None) -> Schema:
        cls = resolve_validator(document, self.default_draft, source)
        try:
            cls.check_schema(document)
        except SchemaError as exc:
            raise EngineError(f"invalid schema: {exc.message}", source) from exc
        except ENGINE_FAILURES as exc:
            raise EngineError(f"cannot check schema: {exc}", source) from exc
        format_checker = cls.FORMAT_CHECKER if self.format_check else None
        LOGGER.debug("compiled %s with %s", source or "<schema>", cls.__name__)
        return Schema(cls(document, format_checker=format_checker), source)
