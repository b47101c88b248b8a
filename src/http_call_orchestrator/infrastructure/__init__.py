"""Concrete transport implementations."""

from .http import HttpxResponse, HttpxTransport, build_async_client

__all__ = ["HttpxResponse", "HttpxTransport", "build_async_client"]
