"""Tests for the response/deadline timer race."""

import asyncio

import pytest

from http_call_orchestrator.application.timeouts import CallState, TimeoutMarker, TimeoutRace
from http_call_orchestrator.exceptions import CallTimeoutError, StaleTimerError


def test_response_timer_fires_when_not_acknowledged() -> None:
    async def scenario() -> tuple[TimeoutMarker, CallState]:
        state = CallState()
        race = TimeoutRace(20, 1_000, state=state)
        race.arm()
        try:
            return await race.signal, state
        finally:
            race.disarm()

    marker, state = asyncio.run(scenario())

    assert marker == TimeoutMarker("response", 20)
    assert state.timed_out == "response"


def test_acknowledge_disables_response_timer_but_not_deadline() -> None:
    async def scenario() -> TimeoutMarker:
        race = TimeoutRace(20, 80, state=CallState())
        race.arm()
        race.acknowledge()
        try:
            return await race.signal
        finally:
            race.disarm()

    marker = asyncio.run(scenario())

    assert marker == TimeoutMarker("deadline", 80)


def test_acknowledge_before_arm_skips_response_timer() -> None:
    async def scenario() -> TimeoutMarker:
        state = CallState(acknowledged=True)
        race = TimeoutRace(10, 60, state=state)
        race.arm()
        try:
            return await race.signal
        finally:
            race.disarm()

    assert asyncio.run(scenario()).kind == "deadline"


def test_disarm_cancels_pending_signal() -> None:
    async def scenario() -> bool:
        race = TimeoutRace(1_000, 2_000, state=CallState())
        race.arm()
        race.disarm()
        return race.signal.cancelled()

    assert asyncio.run(scenario()) is True


def test_signal_requires_arm_and_arm_is_single_use() -> None:
    race = TimeoutRace(10, 20, state=CallState())

    with pytest.raises(RuntimeError, match="arm"):
        _ = race.signal

    async def arm_twice() -> None:
        race.arm()
        try:
            race.arm()
        finally:
            race.disarm()

    with pytest.raises(RuntimeError, match="armed once"):
        asyncio.run(arm_twice())


def test_response_timer_after_acknowledgement_is_a_stale_timer_error() -> None:
    async def scenario() -> None:
        state = CallState()
        race = TimeoutRace(1_000, 2_000, state=state)
        race.arm()
        race.acknowledge()
        try:
            race._on_response_timeout()
            await race.signal
        finally:
            race.disarm()

    with pytest.raises(StaleTimerError, match="1000 ms"):
        asyncio.run(scenario())


def test_timeout_marker_error_message_and_status() -> None:
    error = TimeoutMarker("deadline", 60_000).to_error()

    assert isinstance(error, CallTimeoutError)
    assert isinstance(error, TimeoutError)
    assert error.status_code == 408
    assert str(error) == "Https Client Timeout -> Deadline passed 60000 ms"
