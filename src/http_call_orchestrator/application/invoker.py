"""Single-attempt transport invocation.

Usage example:
    invoker = TransportInvoker(transport, warn=default_warning_sink())
    outcome = await invoker.invoke(request, acknowledge=race.acknowledge)
"""

from __future__ import annotations

import inspect
from collections.abc import Callable

from ..domain.classifier import (
    STATUS_CODE_FIELD,
    AttemptOutcome,
    NetworkErrorOutcome,
    ServerErrorOutcome,
    accepts_json,
    classify,
    decode_payload,
)
from ..domain.request import RequestDescriptor
from ..exceptions import TransportError
from ..protocols import ChunkCallback, Transport, WarningSink


async def _deliver(callback: ChunkCallback, chunk: bytes) -> None:
    result = callback(chunk)
    if inspect.isawaitable(result):
        await result


class TransportInvoker:
    """Issues exactly one attempt against the transport and produces one outcome.

    Body delivery is buffered by default; passing `on_chunk` switches to streaming,
    where each chunk is handed to the callback instead of being accumulated.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        warn: WarningSink,
        verbose: bool = True,
        on_chunk: ChunkCallback | None = None,
    ) -> None:
        self.transport = transport
        self.verbose = verbose
        self.on_chunk = on_chunk
        self._warn = warn

    def warn(self, message: str) -> None:
        if self.verbose:
            self._warn(message)

    async def invoke(
        self,
        request: RequestDescriptor,
        *,
        acknowledge: Callable[[], None],
    ) -> AttemptOutcome:
        """Run one request/response cycle.

        `acknowledge` is called on the first body chunk, at end-of-stream, and when
        the stream breaks after the status line arrived.
        """
        status_code: int | None = None
        chunks: list[bytes] = []
        try:
            async with self.transport.stream(request) as response:
                status_code = response.status_code
                async for chunk in response.iter_chunks():
                    acknowledge()
                    if self.on_chunk is None:
                        chunks.append(chunk)
                        continue
                    try:
                        await _deliver(self.on_chunk, chunk)
                    except Exception as exc:
                        return self._network_failure(request, status_code, exc)
        except (TransportError, OSError) as exc:
            if status_code is not None:
                acknowledge()
            else:
                status_code = getattr(exc, "status_code", None)
            return self._network_failure(request, status_code, exc)

        acknowledge()
        return self._complete(request, response.status_code, chunks)

    def _complete(
        self,
        request: RequestDescriptor,
        status_code: int,
        chunks: list[bytes],
    ) -> AttemptOutcome:
        if self.on_chunk is not None:
            payload: object = {STATUS_CODE_FIELD: status_code}
        else:
            payload = decode_payload(
                b"".join(chunks),
                status_code,
                json_accepted=accepts_json(request.headers),
            )
        outcome = classify(payload, status_code)
        if isinstance(outcome, ServerErrorOutcome):
            self.warn(
                f"{request.method} {request.host}{request.path} returned "
                f"{outcome.status_code}: {outcome.payload}"
            )
        return outcome

    def _network_failure(
        self,
        request: RequestDescriptor,
        status_code: int | None,
        cause: BaseException,
    ) -> NetworkErrorOutcome:
        self.warn(f"{request.method} {request.host}{request.path} failed: {cause!r}")
        return NetworkErrorOutcome(status_code=status_code, cause=cause)
