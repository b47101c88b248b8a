"""Centralised, injectable configuration for a single top-level call."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .config_file import CallOptionsFile, format_validation_error
from .exceptions import ConfigurationError

DEFAULT_RESPONSE_TIMEOUT_MS = 10_000
DEFAULT_DEADLINE_MS = 60_000
DEFAULT_MAX_RETRIES = 0
DEFAULT_VERBOSE = True


class PositiveIntegerEnvVarError(ValueError):
    """Raised when an environment variable must be a positive integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a positive integer.")


class NonNegativeIntegerEnvVarError(ValueError):
    """Raised when an environment variable must be zero or a positive integer."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be zero or a positive integer.")


class BooleanEnvVarError(ValueError):
    """Raised when an environment variable must be a supported boolean."""

    def __init__(self, env_name: str) -> None:
        super().__init__(f"{env_name} must be a boolean value (true/false, 1/0, yes/no, on/off).")


@dataclass(frozen=True)
class CallOptions:
    """Immutable options for one top-level call.

    Load from environment with `CallOptions.from_env()`, from a caller-supplied
    mapping with `CallOptions.from_mapping()`, or construct directly for testing.
    """

    response_timeout_ms: int = DEFAULT_RESPONSE_TIMEOUT_MS  # time to first byte
    deadline_ms: int = DEFAULT_DEADLINE_MS  # total time budget
    max_retries: int = DEFAULT_MAX_RETRIES  # attempts after the first
    verbose: bool = DEFAULT_VERBOSE

    def __post_init__(self) -> None:
        if self.response_timeout_ms <= 0:
            raise ConfigurationError.for_invalid_options("response_timeout_ms must be positive")
        if self.deadline_ms <= 0:
            raise ConfigurationError.for_invalid_options("deadline_ms must be positive")
        if self.max_retries < 0:
            raise ConfigurationError.for_invalid_options("max_retries must not be negative")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    @classmethod
    def from_env(cls, dotenv_path: str | None = None) -> Self:
        """Load options from environment variables.

        Args:
            dotenv_path: Optional path to .env file. If None, uses default .env discovery.

        Returns:
            CallOptions instance populated from environment.
        """
        load_dotenv(dotenv_path)

        return cls(
            response_timeout_ms=_parse_positive_int(
                os.getenv("HTTP_CALL_RESPONSE_TIMEOUT_MS", ""),
                default=DEFAULT_RESPONSE_TIMEOUT_MS,
                env_name="HTTP_CALL_RESPONSE_TIMEOUT_MS",
            ),
            deadline_ms=_parse_positive_int(
                os.getenv("HTTP_CALL_DEADLINE_MS", ""),
                default=DEFAULT_DEADLINE_MS,
                env_name="HTTP_CALL_DEADLINE_MS",
            ),
            max_retries=_parse_non_negative_int(
                os.getenv("HTTP_CALL_MAX_RETRIES", ""),
                default=DEFAULT_MAX_RETRIES,
                env_name="HTTP_CALL_MAX_RETRIES",
            ),
            verbose=_parse_bool(
                os.getenv("HTTP_CALL_VERBOSE", ""),
                default=DEFAULT_VERBOSE,
                env_name="HTTP_CALL_VERBOSE",
            ),
        )

    @classmethod
    def from_mapping(
        cls,
        options: Mapping[str, object] | None,
        *,
        base: Self | None = None,
    ) -> Self:
        """Project a caller-supplied options mapping onto `base` (or the defaults).

        Recognized keys are `responseTimeoutMs`, `deadlineMs`, `maxRetries` and
        `verbose`; snake_case names and the legacy `response`, `deadline` and
        `retry` keys are accepted as aliases.

        Raises:
            ConfigurationError: On unknown keys or invalid values.
        """
        start = base if base is not None else cls()
        if not options:
            return start
        try:
            model = _CallOptionsModel.model_validate(dict(options))
        except ValidationError as exc:
            raise ConfigurationError.for_invalid_options(format_validation_error(exc)) from exc
        return start.with_overrides(
            response_timeout_ms=model.response_timeout_ms,
            deadline_ms=model.deadline_ms,
            max_retries=model.max_retries,
            verbose=model.verbose,
        )

    def with_overrides(
        self,
        *,
        response_timeout_ms: int | None = None,
        deadline_ms: int | None = None,
        max_retries: int | None = None,
        verbose: bool | None = None,
    ) -> Self:
        """Return new options with the specified overrides."""
        return replace(
            self,
            response_timeout_ms=self.response_timeout_ms
            if response_timeout_ms is None
            else response_timeout_ms,
            deadline_ms=self.deadline_ms if deadline_ms is None else deadline_ms,
            max_retries=self.max_retries if max_retries is None else max_retries,
            verbose=self.verbose if verbose is None else verbose,
        )

    def with_file_overrides(self, file_config: CallOptionsFile) -> Self:
        """Return new options with config-file values overriding env/default values."""
        return self.with_overrides(
            response_timeout_ms=file_config.response_timeout_ms,
            deadline_ms=file_config.deadline_ms,
            max_retries=file_config.max_retries,
            verbose=file_config.verbose,
        )


class _CallOptionsModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)

    response_timeout_ms: int | None = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("responseTimeoutMs", "response_timeout_ms", "response"),
    )
    deadline_ms: int | None = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("deadlineMs", "deadline_ms", "deadline"),
    )
    max_retries: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("maxRetries", "max_retries", "retry"),
    )
    verbose: bool | None = None


def _parse_positive_int(value: str, *, default: int, env_name: str) -> int:
    """Parse a positive integer from an environment variable, or return the default."""
    text = value.strip()
    if not text:
        return default
    try:
        parsed = int(text)
    except ValueError as exc:
        raise PositiveIntegerEnvVarError(env_name) from exc
    if parsed < 1:
        raise PositiveIntegerEnvVarError(env_name)
    return parsed


def _parse_non_negative_int(value: str, *, default: int, env_name: str) -> int:
    """Parse a non-negative integer from an environment variable, or return the default."""
    text = value.strip()
    if not text:
        return default
    try:
        parsed = int(text)
    except ValueError as exc:
        raise NonNegativeIntegerEnvVarError(env_name) from exc
    if parsed < 0:
        raise NonNegativeIntegerEnvVarError(env_name)
    return parsed


def _parse_bool(value: str, *, default: bool, env_name: str) -> bool:
    """Parse a boolean from an environment variable, or return the default."""
    text = value.strip().lower()
    if not text:
        return default
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    raise BooleanEnvVarError(env_name)
