"""Cooperative cancellation handle for in-flight calls.

Usage example:
    signal = CancellationSignal()
    task = asyncio.create_task(client.get("/slow", "api.example.com", cancellation=signal))
    signal.cancel("user navigated away")
    # awaiting `task` raises AbortedError (status 499)

The signal is not thread-safe; from another thread use
`loop.call_soon_threadsafe(signal.cancel)`.
"""

from __future__ import annotations

from collections.abc import Callable

CancelListener = Callable[[str | None], None]


class CancellationSignal:
    """Externally triggered abort handle; triggering it more than once is a no-op."""

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: str | None = None
        self._listeners: list[CancelListener] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> bool:
        """Trigger cancellation.

        Returns:
            True if this call triggered the signal, False if it had already fired.
        """
        if self._cancelled:
            return False
        self._cancelled = True
        self._reason = reason
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener(reason)
        return True

    def add_listener(self, listener: CancelListener) -> Callable[[], None]:
        """Register `listener` and return a function that unregisters it.

        A listener added after the signal fired is invoked immediately.
        """
        if self._cancelled:
            listener(self._reason)
            return _noop
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove


def _noop() -> None:
    return None
