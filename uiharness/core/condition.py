"""Conditions: named, stateless predicates over a browser session.

A condition's evaluate function observes the page and answers with one of
three results: ``Ready(value)``, ``NotReady(reason)`` or ``Fatal(error)``.
Evaluate functions must not change page state.

Default deadlines are tiered by expected latency: animations settle fast,
single elements take a few seconds, whole pages and network activity take
the longest.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Union

from uiharness.core.protocols.driver_protocol import DriverProtocol

# Timeouts (seconds)
DEFAULT_TIMEOUT: float = 10
PAGE_LOAD_TIMEOUT: float = 30
AJAX_TIMEOUT: float = 15
ANIMATION_TIMEOUT: float = 5

DEFAULT_POLL_INTERVAL: float = 0.5

READY_STATE_SCRIPT = "() => document.readyState"
PENDING_AJAX_SCRIPT = "() => (typeof jQuery !== 'undefined') ? jQuery.active : 0"
RUNNING_ANIMATIONS_SCRIPT = "() => (typeof jQuery !== 'undefined') ? jQuery(':animated').length : 0"


@dataclass(frozen=True)
class Ready:
    value: Any = True


@dataclass(frozen=True)
class NotReady:
    reason: str = ""


@dataclass(frozen=True)
class Fatal:
    error: BaseException


Evaluation = Union[Ready, NotReady, Fatal]


@dataclass(frozen=True)
class Condition:
    """A named predicate with its own polling cadence and deadline."""
    name: str
    evaluate: Callable[[DriverProtocol], Evaluation]
    timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def with_timeout(self, timeout: float) -> "Condition":
        return Condition(self.name, self.evaluate, timeout, self.poll_interval)


def page_ready(timeout: float = PAGE_LOAD_TIMEOUT, poll_interval: float = DEFAULT_POLL_INTERVAL) -> Condition:
    """DOM fully loaded and, when jQuery is on the page, no request in flight."""

    def evaluate(driver: DriverProtocol) -> Evaluation:
        state = driver.execute_script(READY_STATE_SCRIPT)
        if state != "complete":
            return NotReady(f"document.readyState={state}")
        pending = _pending_ajax(driver)
        if pending:
            return NotReady(f"{pending} AJAX request(s) pending")
        return Ready()

    return Condition("page ready", evaluate, timeout, poll_interval)


def ajax_complete(timeout: float = AJAX_TIMEOUT, poll_interval: float = DEFAULT_POLL_INTERVAL) -> Condition:
    def evaluate(driver: DriverProtocol) -> Evaluation:
        pending = _pending_ajax(driver)
        if pending:
            return NotReady(f"{pending} AJAX request(s) pending")
        return Ready()

    return Condition("no pending AJAX", evaluate, timeout, poll_interval)


def animations_complete(timeout: float = ANIMATION_TIMEOUT, poll_interval: float = DEFAULT_POLL_INTERVAL) -> Condition:
    def evaluate(driver: DriverProtocol) -> Evaluation:
        running = driver.execute_script(RUNNING_ANIMATIONS_SCRIPT) or 0
        if running:
            return NotReady(f"{running} animation(s) running")
        return Ready()

    return Condition("no running animation", evaluate, timeout, poll_interval)


def present(locator: str, timeout: float = DEFAULT_TIMEOUT, poll_interval: float = DEFAULT_POLL_INTERVAL) -> Condition:
    """At least one element matches; the value is the match count."""

    def evaluate(driver: DriverProtocol) -> Evaluation:
        matches = driver.count(locator)
        if matches:
            return Ready(matches)
        return NotReady("no match")

    return Condition(f"element present: {locator}", evaluate, timeout, poll_interval)


def visible(locator: str, timeout: float = DEFAULT_TIMEOUT, poll_interval: float = DEFAULT_POLL_INTERVAL) -> Condition:
    def evaluate(driver: DriverProtocol) -> Evaluation:
        if driver.is_visible(locator):
            return Ready(locator)
        return NotReady("hidden")

    return Condition(f"element visible: {locator}", evaluate, timeout, poll_interval)


def clickable(locator: str, timeout: float = DEFAULT_TIMEOUT, poll_interval: float = DEFAULT_POLL_INTERVAL) -> Condition:
    def evaluate(driver: DriverProtocol) -> Evaluation:
        if not driver.is_visible(locator):
            return NotReady("hidden")
        if not driver.is_enabled(locator):
            return NotReady("disabled")
        return Ready(locator)

    return Condition(f"element clickable: {locator}", evaluate, timeout, poll_interval)


def in_viewport(locator: str, timeout: float = DEFAULT_TIMEOUT, poll_interval: float = DEFAULT_POLL_INTERVAL) -> Condition:
    def evaluate(driver: DriverProtocol) -> Evaluation:
        if driver.in_viewport(locator):
            return Ready(locator)
        return NotReady("outside viewport")

    return Condition(f"element in viewport: {locator}", evaluate, timeout, poll_interval)


def _pending_ajax(driver: DriverProtocol) -> int:
    return int(driver.execute_script(PENDING_AJAX_SCRIPT) or 0)


__all__ = [
    "Condition",
    "Evaluation",
    "Ready",
    "NotReady",
    "Fatal",
    "page_ready",
    "ajax_complete",
    "animations_complete",
    "present",
    "visible",
    "clickable",
    "in_viewport",
]
