"""Response classification: decoded payload + status code -> attempt outcome."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass

from ..exceptions import CallError, NetworkError, ServerError
from .request import find_header

STATUS_CODE_FIELD = "statusCode"
_ERROR_STATUS_FLOOR = 400


@dataclass(frozen=True)
class SuccessOutcome:
    """Attempt finished with a status code below 400."""

    value: object
    status_code: int


@dataclass(frozen=True)
class ServerErrorOutcome:
    """Attempt finished with a status code of 400 or above."""

    status_code: int
    payload: object

    def to_error(self) -> CallError:
        return ServerError(self.status_code, self.payload)


@dataclass(frozen=True)
class NetworkErrorOutcome:
    """Attempt failed at the transport level, or the chunk callback failed."""

    status_code: int | None
    cause: BaseException

    def to_error(self) -> CallError:
        return NetworkError(self.cause, self.status_code)


AttemptOutcome = SuccessOutcome | ServerErrorOutcome | NetworkErrorOutcome
FailureOutcome = ServerErrorOutcome | NetworkErrorOutcome


def accepts_json(headers: Mapping[str, str]) -> bool:
    """Return True when the request's Accept header asks for JSON."""
    accept = find_header(headers, "Accept")
    return accept is not None and "json" in accept.lower()


def decode_payload(body: bytes, status_code: int, *, json_accepted: bool) -> object:
    """Decode a buffered response body.

    JSON-accepting calls get the parsed object or array, with the status code merged
    into objects that lack a `statusCode` field. Scalar JSON and unparseable bodies
    come back as the raw text. Other calls get a `{"data": text, "statusCode": status}` envelope.
    """
    text = body.decode("utf-8", errors="replace")
    if not json_accepted:
        return {"data": text, STATUS_CODE_FIELD: status_code}
    try:
        payload: object = json.loads(text)
    except ValueError:
        return text
    if not isinstance(payload, (dict, list)):
        return text
    if isinstance(payload, dict) and payload.get(STATUS_CODE_FIELD) is None:
        payload[STATUS_CODE_FIELD] = status_code
    return payload


def classify(payload: object, status_code: int) -> AttemptOutcome:
    """Map a decoded payload to success or a server failure, keeping the status code."""
    if status_code >= _ERROR_STATUS_FLOOR:
        return ServerErrorOutcome(status_code=status_code, payload=payload)
    return SuccessOutcome(value=payload, status_code=status_code)
