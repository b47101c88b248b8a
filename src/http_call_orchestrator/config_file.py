"""Typed parsing and validation for call option config files.

Usage example (`http-call.toml`):
    schema_version = 1

    [call]
    response_timeout_ms = 5000
    deadline_ms = 30000
    max_retries = 2
    verbose = false
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .exceptions import ConfigFileNotFoundError, ConfigFileParseError, ConfigFileValidationError

_SCHEMA_VERSION = 1


@dataclass(frozen=True)
class CallOptionsFile:
    """Validated call option values loaded from a TOML file."""

    response_timeout_ms: int | None = None
    deadline_ms: int | None = None
    max_retries: int | None = None
    verbose: bool | None = None


class _CallSectionModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    response_timeout_ms: int | None = None
    deadline_ms: int | None = None
    max_retries: int | None = None
    verbose: bool | None = None

    @field_validator("response_timeout_ms", "deadline_ms")
    @classmethod
    def _validate_positive_int(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 1:
            raise ValueError
        return value

    @field_validator("max_retries")
    @classmethod
    def _validate_non_negative_int(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 0:
            raise ValueError
        return value


class _ConfigFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: int
    call: _CallSectionModel

    @field_validator("schema_version")
    @classmethod
    def _validate_schema_version(cls, value: int) -> int:
        if value != _SCHEMA_VERSION:
            raise ValueError
        return value


def format_validation_error(exc: ValidationError) -> str:
    """Summarise the first pydantic validation error as `location: message`."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ("<root>",)))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}"


def load_call_options_file(path: Path) -> CallOptionsFile:
    """Load and validate a call options TOML config file."""
    if not path.exists():
        raise ConfigFileNotFoundError(str(path))

    raw_payload = path.read_text(encoding="utf-8")
    try:
        payload: object = tomllib.loads(raw_payload)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileParseError(str(path), str(exc)) from exc

    try:
        model = _ConfigFileModel.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileValidationError(str(path), format_validation_error(exc)) from exc

    section = model.call
    return CallOptionsFile(
        response_timeout_ms=section.response_timeout_ms,
        deadline_ms=section.deadline_ms,
        max_retries=section.max_retries,
        verbose=section.verbose,
    )
