"""Environment-driven settings for the ``schema-check`` tool."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from schema_check.validation import DEFAULT_DRAFT, DRAFTS, SchemaCheckError

DEFAULT_DRAFT_VAR = "SCHEMA_CHECK_DEFAULT_DRAFT"
FORMAT_VAR = "SCHEMA_CHECK_FORMAT"
LOG_LEVEL_VAR = "SCHEMA_CHECK_LOG_LEVEL"

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"", "0", "false", "no", "off"}


class ConfigError(SchemaCheckError):
    """An environment variable holds a value the tool cannot use."""


@dataclass(frozen=True)
class Settings:
    default_draft: str = DEFAULT_DRAFT
    format_check: bool = False
    log_level: int = logging.WARNING

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        draft = env.get(DEFAULT_DRAFT_VAR, DEFAULT_DRAFT).strip().lower() or DEFAULT_DRAFT
        if draft not in DRAFTS:
            choices = ", ".join(DRAFTS)
            raise ConfigError(f"{DEFAULT_DRAFT_VAR}={draft!r} is not one of: {choices}")

        raw_format = env.get(FORMAT_VAR, "").strip().lower()
        if raw_format in TRUE_VALUES:
            format_check = True
        elif raw_format in FALSE_VALUES:
            format_check = False
        else:
            raise ConfigError(f"{FORMAT_VAR}={raw_format!r} is not a boolean")

        level_name = env.get(LOG_LEVEL_VAR, "WARNING").strip().upper() or "WARNING"
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ConfigError(f"{LOG_LEVEL_VAR}={level_name!r} is not a logging level")

        return cls(default_draft=draft, format_check=format_check, log_level=level)
