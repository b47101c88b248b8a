"""Protocol definitions for dependency injection.

These protocols define the collaborators a call depends on, so tests can substitute a
fake transport or a recording warning sink.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Mapping
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .domain.request import RequestDescriptor


@runtime_checkable
class TransportResponse(Protocol):
    """One in-flight HTTP response whose body is streamed back in chunks."""

    status_code: int
    headers: Mapping[str, str]

    def iter_chunks(self) -> AsyncIterator[bytes]:
        """Yield body chunks as they arrive.

        Raises:
            TransportError: If the connection breaks while streaming.
        """
        ...


@runtime_checkable
class Transport(Protocol):
    """Issues one HTTP request and streams back status, headers and body chunks."""

    def stream(self, request: RequestDescriptor) -> AbstractAsyncContextManager[TransportResponse]:
        """Open a streamed exchange for `request`.

        Leaving the context closes the underlying connection, including when the
        surrounding task is cancelled.

        Raises:
            TransportError: If the request cannot be sent (connection reset, DNS failure).
        """
        ...


class WarningSink(Protocol):
    """Pluggable callback receiving warnings about absorbed or failed attempts."""

    def __call__(self, message: str) -> None:
        """Emit a warning message."""
        ...


class ChunkCallback(Protocol):
    """Per-chunk callback used in streaming body-delivery mode."""

    def __call__(self, chunk: bytes) -> Awaitable[None] | None:
        """Consume one body chunk; may be a plain function or a coroutine function."""
        ...
