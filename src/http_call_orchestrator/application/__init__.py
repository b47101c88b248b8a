"""Call orchestration: timers, cancellation, attempts and the retry state machine."""

from .cancellation import CancellationSignal
from .client import HttpsClient
from .invoker import TransportInvoker
from .retry import CallPhase, RetryController
from .timeouts import CallState, TimeoutMarker, TimeoutRace

__all__ = [
    "CallPhase",
    "CallState",
    "CancellationSignal",
    "HttpsClient",
    "RetryController",
    "TimeoutMarker",
    "TimeoutRace",
    "TransportInvoker",
]
