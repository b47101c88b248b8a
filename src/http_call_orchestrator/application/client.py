"""Call surface: one awaitable per HTTP(S) call, with timeouts, retries and cancellation.

Usage example:
    from http_call_orchestrator.application.client import HttpsClient

    async with HttpsClient() as client:
        user = await client.get("/v1/users/42", "https://api.example.com")
        created = await client.post(
            "/v1/users",
            "api.example.com",
            {"name": "Ada"},
            {"Authorization": "Bearer ..."},
            {"maxRetries": 2, "deadlineMs": 5000},
        )
"""

from __future__ import annotations

from collections.abc import Mapping
from types import TracebackType
from typing import Self

from ..config import CallOptions
from ..domain.request import build_request
from ..infrastructure.http import HttpxTransport
from ..observability import default_warning_sink
from ..protocols import ChunkCallback, Transport, WarningSink
from .cancellation import CancellationSignal
from .invoker import TransportInvoker
from .retry import RetryController

OptionsArg = CallOptions | Mapping[str, object] | None


class HttpsClient:
    """Issues single HTTP(S) calls against an injected transport.

    Each call resolves to the decoded response value or raises exactly one error:
    - ConfigurationError before any network activity (bad method, options or body)
    - CallTimeoutError (408) when the response or deadline timer fires first
    - AbortedError (499) when the cancellation signal fires
    - ServerError / NetworkError from the last attempt once retries are exhausted
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        options: CallOptions | None = None,
        warn: WarningSink | None = None,
    ) -> None:
        self._owned_transport: HttpxTransport | None = None
        if transport is None:
            self._owned_transport = HttpxTransport()
            transport = self._owned_transport
        self.transport = transport
        self.options = options or CallOptions()
        self.warn = warn or default_warning_sink()

    async def get(
        self,
        path: str,
        host: str,
        body: Mapping[str, object] | None = None,
        headers: Mapping[str, str] | None = None,
        options: OptionsArg = None,
        *,
        cancellation: CancellationSignal | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> object:
        """GET `path`; `body` becomes the query string."""
        return await self.call(
            "GET", path, host, body, headers, options, cancellation=cancellation, on_chunk=on_chunk
        )

    async def post(
        self,
        path: str,
        host: str,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        options: OptionsArg = None,
        *,
        cancellation: CancellationSignal | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> object:
        return await self.call(
            "POST", path, host, body, headers, options, cancellation=cancellation, on_chunk=on_chunk
        )

    async def put(
        self,
        path: str,
        host: str,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        options: OptionsArg = None,
        *,
        cancellation: CancellationSignal | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> object:
        return await self.call(
            "PUT", path, host, body, headers, options, cancellation=cancellation, on_chunk=on_chunk
        )

    async def delete(
        self,
        path: str,
        host: str,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        options: OptionsArg = None,
        *,
        cancellation: CancellationSignal | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> object:
        return await self.call(
            "DELETE",
            path,
            host,
            body,
            headers,
            options,
            cancellation=cancellation,
            on_chunk=on_chunk,
        )

    async def call(
        self,
        method: str,
        path: str,
        host: str,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        options: OptionsArg = None,
        *,
        cancellation: CancellationSignal | None = None,
        on_chunk: ChunkCallback | None = None,
    ) -> object:
        """Make one top-level call.

        Args:
            method: GET, POST, PUT or DELETE.
            path: Endpoint path, for example `/api/v1/users`.
            host: Host to call, bare or with an `https://` prefix.
            body: Query parameters for GET, a JSON-serializable value for writes.
            headers: Request headers; never mutated.
            options: `CallOptions` or a mapping of recognized option keys, projected
                onto the client's default options.
            cancellation: Optional signal that aborts the call when triggered.
            on_chunk: Optional per-chunk callback; switches to streaming delivery.

        Returns:
            The decoded response value.
        """
        request = build_request(method, host, path, body, headers)
        call_options = self.resolve_options(options)
        invoker = TransportInvoker(
            self.transport,
            warn=self.warn,
            verbose=call_options.verbose,
            on_chunk=on_chunk,
        )
        controller = RetryController(invoker, call_options, cancellation=cancellation)
        return await controller.run(request)

    def resolve_options(self, options: OptionsArg) -> CallOptions:
        if isinstance(options, CallOptions):
            return options
        return CallOptions.from_mapping(options, base=self.options)

    async def aclose(self) -> None:
        """Close the default transport if this client created it."""
        if self._owned_transport is not None:
            await self._owned_transport.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.aclose()
