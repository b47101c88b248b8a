"""httpx-backed transport used when callers do not inject their own.

Usage example:
    import httpx

    from http_call_orchestrator.infrastructure.http import HttpxTransport

    transport = HttpxTransport()
    async with transport.stream(request) as response:
        async for chunk in response.iter_chunks():
            ...
    await transport.aclose()

The orchestrator owns every timeout, so the underlying client is built without any.
Tests inject an `httpx.AsyncClient(transport=httpx.MockTransport(handler))`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing_extensions import override

import httpx

from ..domain.request import RequestDescriptor
from ..exceptions import TransportError
from ..protocols import Transport, TransportResponse


def build_async_client() -> httpx.AsyncClient:
    """Return an AsyncClient with no client-side timeouts and redirects disabled."""
    return httpx.AsyncClient(timeout=None, follow_redirects=False)


class HttpxResponse(TransportResponse):
    """Adapts a streamed `httpx.Response` to the transport response protocol."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self.status_code = response.status_code
        self.headers: Mapping[str, str] = dict(response.headers)

    @override
    async def iter_chunks(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                if chunk:
                    yield chunk
        except httpx.RequestError as exc:
            raise TransportError(f"Response stream failed: {exc}", self.status_code) from exc


class HttpxTransport(Transport):
    """Transport that issues each request through an `httpx.AsyncClient`."""

    def __init__(self, *, client: httpx.AsyncClient | None = None, scheme: str = "https") -> None:
        self._client = client or build_async_client()
        self._scheme = scheme

    def url_for(self, request: RequestDescriptor) -> str:
        return f"{self._scheme}://{request.host}{request.path}"

    @override
    @asynccontextmanager
    async def stream(self, request: RequestDescriptor) -> AsyncIterator[TransportResponse]:
        url = self.url_for(request)
        http_request = self._client.build_request(
            request.method.value,
            url,
            headers=dict(request.headers),
            content=request.body if request.method.writes_body else None,
        )
        try:
            response = await self._client.send(http_request, stream=True)
        except httpx.RequestError as exc:
            raise TransportError(f"{request.method} {url} failed: {exc}") from exc
        try:
            yield HttpxResponse(response)
        finally:
            await response.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()
