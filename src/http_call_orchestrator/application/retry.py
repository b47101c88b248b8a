"""Bounded retry state machine for one top-level call.

    IDLE -> ATTEMPTING -> SUCCEEDED | TIMED_OUT | ABORTED | EXHAUSTED
                       -> RETRYING -> ATTEMPTING

Every attempt is raced against the call's timers and its cancellation signal.
Timeouts and cancellation end the call regardless of the remaining retry budget;
server and network failures are retried immediately with the same descriptor.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from enum import StrEnum

from ..config import CallOptions
from ..domain.classifier import AttemptOutcome, NetworkErrorOutcome, SuccessOutcome
from ..domain.request import RequestDescriptor
from ..exceptions import AbortedError
from ..observability import get_logger
from .cancellation import CancellationSignal
from .invoker import TransportInvoker
from .timeouts import CallState, TimeoutRace

logger = get_logger("http_call_orchestrator.retry")


class CallPhase(StrEnum):
    IDLE = "idle"
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed_out"
    ABORTED = "aborted"
    EXHAUSTED = "exhausted"


TERMINAL_PHASES = frozenset(
    {CallPhase.SUCCEEDED, CallPhase.TIMED_OUT, CallPhase.ABORTED, CallPhase.EXHAUSTED}
)


class RetryController:
    """Runs one top-level call to exactly one terminal outcome. Single use."""

    def __init__(
        self,
        invoker: TransportInvoker,
        options: CallOptions,
        *,
        cancellation: CancellationSignal | None = None,
    ) -> None:
        self.invoker = invoker
        self.options = options
        self.cancellation = cancellation
        self.state = CallState()
        self.phase = CallPhase.IDLE
        self.transitions: list[CallPhase] = [CallPhase.IDLE]

    async def run(self, request: RequestDescriptor) -> object:
        """Issue attempts until success, timeout, cancellation or exhaustion.

        Raises:
            CallTimeoutError: If either timer fires first (status 408).
            AbortedError: If the cancellation signal fires (status 499).
            ServerError: If the last allowed attempt got a status >= 400.
            NetworkError: If the last allowed attempt failed at the transport level.
            StaleTimerError: If the response timer fires after acknowledgement.
        """
        if self.phase is not CallPhase.IDLE:
            raise RuntimeError("RetryController instances run a single call")
        if self.cancellation is not None and self.cancellation.cancelled:
            self._transition(CallPhase.ABORTED)
            raise AbortedError(self.cancellation.reason)

        loop = asyncio.get_running_loop()
        aborted: asyncio.Future[str | None] = loop.create_future()
        stop_watching = self._watch_cancellation(aborted)
        race = TimeoutRace(
            self.options.response_timeout_ms, self.options.deadline_ms, state=self.state
        )
        race.arm()
        try:
            return await self._run_attempts(request, race, aborted)
        finally:
            race.disarm()
            stop_watching()
            if not aborted.done():
                aborted.cancel()

    async def _run_attempts(
        self,
        request: RequestDescriptor,
        race: TimeoutRace,
        aborted: asyncio.Future[str | None],
    ) -> object:
        self._transition(CallPhase.ATTEMPTING)
        outcome = await self._race_attempt(request, race, aborted)
        for _ in range(self.options.max_retries):
            if isinstance(outcome, SuccessOutcome):
                break
            self.state.num_retries += 1
            self._transition(CallPhase.RETRYING)
            self._transition(CallPhase.ATTEMPTING)
            outcome = await self._race_attempt(request, race, aborted)

        if isinstance(outcome, SuccessOutcome):
            self._transition(CallPhase.SUCCEEDED)
            return outcome.value

        self._transition(CallPhase.EXHAUSTED)
        error = outcome.to_error()
        if isinstance(outcome, NetworkErrorOutcome):
            raise error from outcome.cause
        raise error

    async def _race_attempt(
        self,
        request: RequestDescriptor,
        race: TimeoutRace,
        aborted: asyncio.Future[str | None],
    ) -> AttemptOutcome:
        self.state.attempts += 1
        logger.debug(
            "Attempt %s of %s: %s %s%s",
            self.state.attempts,
            self.options.max_attempts,
            request.method,
            request.host,
            request.path,
        )
        attempt = asyncio.ensure_future(
            self.invoker.invoke(request, acknowledge=race.acknowledge)
        )
        try:
            done, _ = await asyncio.wait(
                {attempt, race.signal, aborted}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            if not attempt.done():
                attempt.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await attempt

        if aborted.done():
            self._transition(CallPhase.ABORTED)
            raise AbortedError(aborted.result())
        if attempt in done:
            outcome = attempt.result()
            if isinstance(outcome, SuccessOutcome):
                return outcome
        if race.signal.done():
            marker = race.signal.result()
            self._transition(CallPhase.TIMED_OUT)
            raise marker.to_error()
        return attempt.result()

    def _watch_cancellation(self, aborted: asyncio.Future[str | None]) -> Callable[[], None]:
        if self.cancellation is None:
            return _noop

        def on_cancel(reason: str | None) -> None:
            if not aborted.done():
                aborted.set_result(reason)

        return self.cancellation.add_listener(on_cancel)

    def _transition(self, phase: CallPhase) -> None:
        if self.phase in TERMINAL_PHASES:
            raise RuntimeError(f"Call already finished in phase {self.phase}")
        logger.debug("Call phase %s -> %s", self.phase, phase)
        self.phase = phase
        self.transitions.append(phase)


def _noop() -> None:
    return None
