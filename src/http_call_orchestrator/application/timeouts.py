"""Response and deadline timers for one top-level call.

Both timers are armed once per call and shared by every attempt. The response
timer only guards the wait for the first byte: acknowledgement disables it for the
rest of the call. The deadline fires unconditionally.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Literal

from ..exceptions import CallTimeoutError, StaleTimerError

TimeoutKind = Literal["response", "deadline"]


@dataclass(frozen=True)
class TimeoutMarker:
    """Which timer resolved the race, and its configured limit."""

    kind: TimeoutKind
    limit_ms: int

    def to_error(self) -> CallTimeoutError:
        return CallTimeoutError(self.kind, self.limit_ms)


@dataclass
class CallState:
    """Mutable state for one top-level call.

    Written only by the owning RetryController and the TimeoutRace callbacks, which
    run on the same event loop.
    """

    acknowledged: bool = False
    timed_out: TimeoutKind | None = None
    attempts: int = 0
    num_retries: int = 0


class TimeoutRace:
    """Arms both timers and exposes a single future resolved by whichever fires first."""

    def __init__(self, response_timeout_ms: int, deadline_ms: int, *, state: CallState) -> None:
        self.response_timeout_ms = response_timeout_ms
        self.deadline_ms = deadline_ms
        self.state = state
        self._signal: asyncio.Future[TimeoutMarker] | None = None
        self._response_handle: asyncio.TimerHandle | None = None
        self._deadline_handle: asyncio.TimerHandle | None = None

    @property
    def signal(self) -> asyncio.Future[TimeoutMarker]:
        if self._signal is None:
            raise RuntimeError("TimeoutRace.arm() must be called before reading the signal")
        return self._signal

    def arm(self) -> None:
        """Start both timers on the running loop."""
        if self._signal is not None:
            raise RuntimeError("TimeoutRace timers are armed once per call")
        loop = asyncio.get_running_loop()
        self._signal = loop.create_future()
        self._deadline_handle = loop.call_later(self.deadline_ms / 1000, self._on_deadline)
        if not self.state.acknowledged:
            self._response_handle = loop.call_later(
                self.response_timeout_ms / 1000, self._on_response_timeout
            )

    def acknowledge(self) -> None:
        """Record that the first byte arrived; permanently disables the response timer."""
        if self.state.acknowledged:
            return
        self.state.acknowledged = True
        if self._response_handle is not None:
            self._response_handle.cancel()
            self._response_handle = None

    def disarm(self) -> None:
        """Cancel both timers and release the signal."""
        for handle in (self._response_handle, self._deadline_handle):
            if handle is not None:
                handle.cancel()
        self._response_handle = None
        self._deadline_handle = None
        if self._signal is None:
            return
        if not self._signal.done():
            self._signal.cancel()
        elif not self._signal.cancelled():
            # retrieve a stale-timer failure that lost the race
            self._signal.exception()

    def _on_response_timeout(self) -> None:
        self._response_handle = None
        signal = self.signal
        if signal.done():
            return
        if self.state.acknowledged:
            signal.set_exception(StaleTimerError(self.response_timeout_ms))
            return
        self.state.timed_out = "response"
        signal.set_result(TimeoutMarker("response", self.response_timeout_ms))

    def _on_deadline(self) -> None:
        self._deadline_handle = None
        signal = self.signal
        if signal.done():
            return
        self.state.timed_out = "deadline"
        signal.set_result(TimeoutMarker("deadline", self.deadline_ms))
