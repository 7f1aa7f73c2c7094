"""Typed failures raised by the synchronization and interaction engine."""

from __future__ import annotations


class FrameworkError(Exception):
    """Base exception for every failure raised by uiharness."""


class ConfigurationError(FrameworkError):
    """Configuration file is missing a required value or holds an invalid one."""


# --- Driver-level signals (raised by adapters, consumed by the core) ---

class DriverError(FrameworkError):
    """Base class for signals a DriverProtocol implementation raises."""


class ElementNotPresent(DriverError):
    """Nothing currently matches the locator. Expected while the DOM is rebuilding."""

    def __init__(self, locator: str) -> None:
        super().__init__(f"No element matches locator: {locator}")
        self.locator = locator


class ClickIntercepted(DriverError):
    """Another element received the pointer event aimed at the target."""

    def __init__(self, locator: str, reason: str) -> None:
        super().__init__(f"Click on {locator} intercepted: {reason}")
        self.locator = locator
        self.reason = reason


# --- Failures surfaced to callers ---

class ConditionTimeout(FrameworkError):
    def __init__(self, condition_name: str, elapsed: float, last_reason: str | None = None) -> None:
        message = f"Condition '{condition_name}' not met after {elapsed:.2f}s"
        if last_reason:
            message += f" (last state: {last_reason})"
        super().__init__(message)
        self.condition_name = condition_name
        self.elapsed = elapsed
        self.last_reason = last_reason


class SessionLost(FrameworkError):
    """The browser session behind a handle is gone. Fatal for the execution."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Browser session lost: {reason}")
        self.reason = reason


class NoActiveSession(FrameworkError):
    """An interaction was invoked outside a bracketed test execution."""

    def __init__(self, execution_key: str) -> None:
        super().__init__(f"No browser session bound to execution '{execution_key}'")
        self.execution_key = execution_key


class DuplicateBinding(FrameworkError):
    def __init__(self, execution_key: str) -> None:
        super().__init__(f"Execution '{execution_key}' already owns a browser session")
        self.execution_key = execution_key


class InteractionFailed(FrameworkError):
    def __init__(self, locator: str, reason: str) -> None:
        super().__init__(f"Interaction with {locator} failed: {reason}")
        self.locator = locator
        self.reason = reason


class OptionNotFound(InteractionFailed):
    def __init__(self, visible_text: str, locator: str = "") -> None:
        FrameworkError.__init__(self, f"Option not found: {visible_text}")
        self.locator = locator
        self.reason = f"no option labelled '{visible_text}'"
        self.visible_text = visible_text
