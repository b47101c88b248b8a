"""Request building: turn caller arguments into a transport-ready descriptor.

Usage example:
    from http_call_orchestrator.domain.request import build_request

    request = build_request("GET", "https://api.example.com", "/v1/users", {"page": 2})
    assert request.path == "/v1/users?page=2"
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

from ..exceptions import ConfigurationError

JSON_MEDIA_TYPE = "application/json"
_HTTPS_PREFIX = "https://"


class Method(StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @property
    def writes_body(self) -> bool:
        return self is not Method.GET


def _empty_headers() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True)
class RequestDescriptor:
    """Immutable description of one request; reused verbatim on every retry."""

    method: Method
    host: str
    path: str
    headers: Mapping[str, str] = field(default_factory=_empty_headers)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Return a header value, matching the name case-insensitively."""
        return find_header(self.headers, name)


def find_header(headers: Mapping[str, str], name: str) -> str | None:
    """Return the value of `name` in `headers`, ignoring case, or None."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def parse_method(method: str) -> Method:
    """Return the supported method for `method`, case-insensitively.

    Raises:
        ConfigurationError: If the method is not GET, POST, PUT or DELETE.
    """
    try:
        return Method(method.upper())
    except (AttributeError, ValueError) as exc:
        raise ConfigurationError.for_unsupported_method(str(method)) from exc


def strip_scheme(host: str) -> str:
    """Strip a leading `https://` from a host."""
    if host.startswith(_HTTPS_PREFIX):
        return host[len(_HTTPS_PREFIX) :]
    return host


def _query_value(value: object) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


def append_query(path: str, params: Mapping[str, object] | None) -> str:
    """Append `params` to `path` as `?k=v&k2=v2` in insertion order.

    Keys and values are interpolated verbatim, without URL encoding.
    """
    if not params:
        return path
    # TODO: percent-encode keys and values once callers stop relying on raw interpolation.
    query = "&".join(f"{key}={_query_value(value)}" for key, value in params.items())
    return f"{path}?{query}"


def serialize_body(method: Method, body: object, content_type: str | None) -> bytes:
    """Serialize a write body according to its content type.

    Raises:
        ConfigurationError: If the body cannot be serialized.
    """
    if content_type is not None and "json" in content_type.lower():
        try:
            return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise ConfigurationError.for_unserializable_body(method, str(exc)) from exc
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    raise ConfigurationError.for_unserializable_body(
        method, f"{type(body).__name__} body requires a JSON Content-Type"
    )


def build_request(
    method: str,
    host: str,
    path: str,
    body: object = None,
    headers: Mapping[str, str] | None = None,
) -> RequestDescriptor:
    """Build the descriptor for one top-level call.

    GET bodies become the query string. Write bodies are serialized and
    `Content-Length` is filled in unless the caller supplied it. `Content-Type` and
    `Accept` default to JSON when absent. The caller's headers are never mutated.

    Raises:
        ConfigurationError: For unsupported methods, non-mapping GET bodies, or
            unserializable write bodies.
    """
    verb = parse_method(method)
    merged: dict[str, str] = dict(headers or {})
    if find_header(merged, "Content-Type") is None:
        merged["Content-Type"] = JSON_MEDIA_TYPE
    if find_header(merged, "Accept") is None:
        merged["Accept"] = JSON_MEDIA_TYPE

    if not verb.writes_body:
        if body is not None and not isinstance(body, Mapping):
            raise ConfigurationError.for_unserializable_body(
                verb, "GET body must be a mapping of query parameters"
            )
        return RequestDescriptor(
            method=verb,
            host=strip_scheme(host),
            path=append_query(path, body),
            headers=MappingProxyType(merged),
        )

    content_type = find_header(merged, "Content-Type")
    payload = serialize_body(verb, {} if body is None else body, content_type)
    if find_header(merged, "Content-Length") is None:
        merged["Content-Length"] = str(len(payload))
    return RequestDescriptor(
        method=verb,
        host=strip_scheme(host),
        path=path,
        headers=MappingProxyType(merged),
        body=payload,
    )
