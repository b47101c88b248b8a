"""Exports for test fakes."""

from .transport import FakeResponse, FakeTransport, ScriptedExchange, json_body
from .warnings import RecordingWarningSink

__all__ = [
    "FakeResponse",
    "FakeTransport",
    "RecordingWarningSink",
    "ScriptedExchange",
    "json_body",
]
