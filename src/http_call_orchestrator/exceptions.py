"""Custom exceptions for the HTTP call orchestrator.

Every error that reaches a caller of a top-level call is a `CallError` carrying the
status code the caller can branch on. Configuration problems fail locally, before any
network activity, with `ConfigurationError`.
"""

from __future__ import annotations

TIMEOUT_STATUS_CODE = 408
ABORTED_STATUS_CODE = 499


class HttpCallError(Exception):
    """Base exception for all orchestrator errors."""

    pass


class ConfigurationError(HttpCallError, ValueError):
    """Raised when a call is configured incorrectly (never sent over the network)."""

    @classmethod
    def for_unsupported_method(cls, method: str) -> ConfigurationError:
        return cls(f"Unsupported HTTP method {method!r}. Expected one of GET, POST, PUT, DELETE.")

    @classmethod
    def for_unserializable_body(cls, method: str, detail: str) -> ConfigurationError:
        return cls(f"Cannot serialize {method} body: {detail}")

    @classmethod
    def for_invalid_options(cls, detail: str) -> ConfigurationError:
        return cls(f"Invalid call options: {detail}")


class CallError(HttpCallError):
    """Base exception for terminal call outcomes; always carries a status code."""

    def __init__(self, message: str, status_code: int | None) -> None:
        self.status_code = status_code
        super().__init__(message)


class NetworkError(CallError):
    """Raised when the last attempt failed at the transport level.

    Retryable: absorbed by the retry loop until the retry budget is exhausted.
    """

    def __init__(self, cause: BaseException, status_code: int | None = None) -> None:
        self.cause = cause
        super().__init__(f"Network error during request: {cause}", status_code)


class ServerError(CallError):
    """Raised when the last attempt received a status code >= 400.

    The decoded payload is kept on `payload` so callers never lose the response body.
    """

    def __init__(self, status_code: int, payload: object) -> None:
        self.payload = payload
        super().__init__(_server_error_message(status_code, payload), status_code)


class CallTimeoutError(CallError, TimeoutError):
    """Raised when the response or deadline timer fires before the call completes.

    Not retryable: remaining retry budget never extends the call.
    """

    def __init__(self, kind: str, limit_ms: int) -> None:
        self.kind = kind
        self.limit_ms = limit_ms
        super().__init__(
            f"Https Client Timeout -> {kind.capitalize()} passed {limit_ms} ms",
            TIMEOUT_STATUS_CODE,
        )


class AbortedError(CallError):
    """Raised when an external cancellation signal aborts the call."""

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason
        message = "Request aborted by cancellation signal"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, ABORTED_STATUS_CODE)


class TransportError(HttpCallError):
    """Raised by transports for connection-level failures (reset, DNS, broken stream)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class StaleTimerError(HttpCallError, RuntimeError):
    """Raised when the response timer fires after acknowledgement was already received."""

    def __init__(self, limit_ms: int) -> None:
        self.limit_ms = limit_ms
        super().__init__(
            f"Response timer ({limit_ms} ms) fired after the response was acknowledged."
        )


class ConfigFileNotFoundError(HttpCallError):
    """Raised when a config file path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")


class ConfigFileParseError(HttpCallError):
    """Raised when a config file is not valid TOML."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} is not valid TOML: {detail}")


class ConfigFileValidationError(HttpCallError):
    """Raised when a config file has unexpected keys or values."""

    def __init__(self, path: str, detail: str) -> None:
        super().__init__(f"Config file {path} failed validation: {detail}")


def _server_error_message(status_code: int, payload: object) -> str:
    if isinstance(payload, str):
        return (
            f"Received {status_code} code. Response treated as rejection. "
            f"Full response: {payload}"
        )
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message
    return f"Received {status_code} code. Response treated as rejection."
