"""Tests for WaitEngine polling, deadlines and error tolerance."""

import time

import pytest

from uiharness.core.condition import Condition, Fatal, NotReady, Ready
from uiharness.core.errors import ConditionTimeout, ElementNotPresent, SessionLost
from uiharness.core.wait import WaitEngine


def _sequence(*results):
    """Build an evaluate function answering with `results` in order.

    Exception instances are raised; the last result repeats forever.
    """
    calls = []

    def evaluate(driver):
        index = min(len(calls), len(results) - 1)
        calls.append(index)
        result = results[index]
        if isinstance(result, BaseException):
            raise result
        return result

    evaluate.calls = calls
    return evaluate


def test_ready_immediately_returns_value_without_sleeping(wait_engine, fake_clock) -> None:
    condition = Condition("always ready", _sequence(Ready("value")), timeout=5, poll_interval=0.5)

    assert wait_engine.wait_for(condition, driver=None) == "value"
    assert fake_clock.sleeps == []
    assert fake_clock.now == 0.0


def test_ready_immediately_with_real_clock_returns_within_one_poll_interval() -> None:
    engine = WaitEngine()
    condition = Condition("always ready", _sequence(Ready()), timeout=5, poll_interval=0.5)

    started = time.monotonic()
    engine.wait_for(condition, driver=None)

    assert time.monotonic() - started < 0.5


def test_never_ready_times_out_between_deadline_and_one_extra_poll(wait_engine, fake_clock) -> None:
    condition = Condition("never ready", _sequence(NotReady("still loading")), timeout=5, poll_interval=0.5)

    with pytest.raises(ConditionTimeout) as exc_info:
        wait_engine.wait_for(condition, driver=None)

    error = exc_info.value
    assert error.condition_name == "never ready"
    assert 5 <= error.elapsed <= 5.5
    assert error.last_reason == "still loading"
    assert "never ready" in str(error)


def test_element_visible_after_three_polls_returns_at_one_and_a_half_seconds(wait_engine, fake_clock) -> None:
    """Three NotReady answers at a 500ms cadence, then Ready, well before the 5s deadline."""
    evaluate = _sequence(NotReady(), NotReady(), NotReady(), Ready("#panel"))
    condition = Condition("element visible: #panel", evaluate, timeout=5, poll_interval=0.5)

    assert wait_engine.wait_for(condition, driver=None) == "#panel"
    assert fake_clock.now == pytest.approx(1.5)
    assert fake_clock.sleeps == [0.5, 0.5, 0.5]
    assert len(evaluate.calls) == 4


def test_last_sleep_is_clipped_to_remaining_time(wait_engine, fake_clock) -> None:
    condition = Condition("never ready", _sequence(NotReady()), timeout=1.2, poll_interval=0.5)

    with pytest.raises(ConditionTimeout) as exc_info:
        wait_engine.wait_for(condition, driver=None)

    assert fake_clock.sleeps == pytest.approx([0.5, 0.5, 0.2])
    assert exc_info.value.elapsed == pytest.approx(1.2)


def test_element_not_present_keeps_polling(wait_engine) -> None:
    evaluate = _sequence(ElementNotPresent("#late"), ElementNotPresent("#late"), Ready("found"))
    condition = Condition("element present: #late", evaluate, timeout=5, poll_interval=0.5)

    assert wait_engine.wait_for(condition, driver=None) == "found"
    assert len(evaluate.calls) == 3


def test_unexpected_evaluation_errors_are_transient(wait_engine) -> None:
    evaluate = _sequence(RuntimeError("stale element reference"), Ready())
    condition = Condition("flaky", evaluate, timeout=5, poll_interval=0.5)

    assert wait_engine.wait_for(condition, driver=None) is True


def test_transient_error_reason_is_reported_on_timeout(wait_engine) -> None:
    condition = Condition("broken check", _sequence(ValueError("bad script")), timeout=1, poll_interval=0.5)

    with pytest.raises(ConditionTimeout) as exc_info:
        wait_engine.wait_for(condition, driver=None)

    assert "ValueError: bad script" in exc_info.value.last_reason


def test_session_lost_aborts_immediately(wait_engine, fake_clock) -> None:
    evaluate = _sequence(SessionLost("browser has been closed"))
    condition = Condition("page ready", evaluate, timeout=30, poll_interval=0.5)

    with pytest.raises(SessionLost):
        wait_engine.wait_for(condition, driver=None)

    assert len(evaluate.calls) == 1
    assert fake_clock.sleeps == []


def test_fatal_result_raises_its_error(wait_engine) -> None:
    error = SessionLost("handle invalid")
    condition = Condition("fatal", _sequence(NotReady(), Fatal(error)), timeout=30, poll_interval=0.5)

    with pytest.raises(SessionLost) as exc_info:
        wait_engine.wait_for(condition, driver=None)

    assert exc_info.value is error


def test_condition_receives_the_driver(wait_engine, fake_driver_factory) -> None:
    driver = fake_driver_factory()
    seen = []

    def evaluate(d):
        seen.append(d)
        return Ready()

    wait_engine.wait_for(Condition("sees driver", evaluate), driver)

    assert seen == [driver]
