from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from uiharness.core.condition import PENDING_AJAX_SCRIPT, READY_STATE_SCRIPT, RUNNING_ANIMATIONS_SCRIPT
from uiharness.core.errors import ClickIntercepted, ElementNotPresent, InteractionFailed, SessionLost
from uiharness.core.protocols.driver_protocol import DriverProtocol
from uiharness.core.registry import ExecutionContextRegistry
from uiharness.core.wait import WaitEngine


@dataclass
class FakeElement:
    visible: bool = True
    enabled: bool = True
    editable: bool = True
    in_viewport: bool = True
    text: str = ""
    value: str = ""
    options: list[str] = field(default_factory=list)
    count: int = 1
    # number of is_visible() calls answered with False before `visible` applies
    visible_after: int = 0


class _FakeDriver(DriverProtocol):
    def __init__(
        self,
        *,
        elements: dict[str, FakeElement] | None = None,
        ready_state: str = "complete",
        pending_ajax: int = 0,
        running_animations: int = 0,
        intercept_clicks: int = 0,
        script_click_fails: bool = False,
        quit_error: Exception | None = None,
        html: str = "<html><head><title>Fake</title></head><body></body></html>",
        url: str = "http://app.test/",
        screenshot_error: Exception | None = None,
    ) -> None:
        self.elements = elements or {}
        self.ready_state = ready_state
        self.pending_ajax = pending_ajax
        self.running_animations = running_animations
        self.intercept_clicks = intercept_clicks
        self.script_click_fails = script_click_fails
        self.quit_error = quit_error
        self.html = html
        self.url = url
        self.screenshot_error = screenshot_error
        self.closed = False

        # recording
        self.navigate_calls: list[str] = []
        self.clicked: list[str] = []
        self.script_clicked: list[str] = []
        self.filled: list[tuple[str, str]] = []
        self.selected: list[tuple[str, str]] = []
        self.hovered: list[str] = []
        self.scrolled: list[str] = []
        self.screenshots: list[str | None] = []
        self.visibility_checks: dict[str, int] = {}
        self.refresh_calls = 0
        self.quit_calls = 0

    def _element(self, locator: str) -> FakeElement:
        if self.closed:
            raise SessionLost("Target page, context or browser has been closed")
        element = self.elements.get(locator)
        if element is None or element.count == 0:
            raise ElementNotPresent(locator)
        return element

    # DriverProtocol
    def navigate(self, path: str) -> None:
        self.navigate_calls.append(path)

    def refresh(self) -> None:
        self.refresh_calls += 1

    def current_url(self) -> str:
        return self.url

    def title(self) -> str:
        return "Fake"

    def content(self) -> str:
        return self.html

    def execute_script(self, script: str, arg: Any = None) -> Any:
        if self.closed:
            raise SessionLost("Target page, context or browser has been closed")
        if script == READY_STATE_SCRIPT:
            return self.ready_state
        if script == PENDING_AJAX_SCRIPT:
            return self.pending_ajax
        if script == RUNNING_ANIMATIONS_SCRIPT:
            return self.running_animations
        return None

    def count(self, locator: str) -> int:
        element = self.elements.get(locator)
        return element.count if element else 0

    def is_visible(self, locator: str) -> bool:
        element = self._element(locator)
        checks = self.visibility_checks.get(locator, 0) + 1
        self.visibility_checks[locator] = checks
        if checks <= element.visible_after:
            return False
        return element.visible

    def is_enabled(self, locator: str) -> bool:
        return self._element(locator).enabled

    def is_editable(self, locator: str) -> bool:
        return self._element(locator).editable

    def in_viewport(self, locator: str) -> bool:
        return self._element(locator).in_viewport

    def click(self, locator: str) -> None:
        self._element(locator)
        if self.intercept_clicks > 0:
            self.intercept_clicks -= 1
            raise ClickIntercepted(locator, '<div class="overlay"></div> intercepts pointer events')
        self.clicked.append(locator)

    def script_click(self, locator: str) -> None:
        self._element(locator)
        if self.script_click_fails:
            raise InteractionFailed(locator, "el.click is not a function")
        self.script_clicked.append(locator)

    def fill(self, locator: str, text: str) -> None:
        element = self._element(locator)
        element.value = text
        self.filled.append((locator, text))

    def option_labels(self, locator: str) -> list[str]:
        return list(self._element(locator).options)

    def select_option(self, locator: str, label: str) -> None:
        self._element(locator).value = label
        self.selected.append((locator, label))

    def inner_text(self, locator: str) -> str:
        return self._element(locator).text

    def hover(self, locator: str) -> None:
        self._element(locator)
        self.hovered.append(locator)

    def scroll_into_view(self, locator: str) -> None:
        self._element(locator)
        self.scrolled.append(locator)

    def screenshot(self, path: str | None = None) -> bytes:
        if self.screenshot_error is not None:
            raise self.screenshot_error
        self.screenshots.append(path)
        if path:
            Path(path).write_bytes(b"\x89PNG")
        return b"\x89PNG"

    def quit(self) -> None:
        self.quit_calls += 1
        self.closed = True
        if self.quit_error is not None:
            raise self.quit_error


class FakeClock:
    """Deterministic stand-in for time.monotonic/time.sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_driver_factory():
    """Return a factory that constructs a configured FakeDriver.

    Usage:
        driver = fake_driver_factory(elements={'#login': FakeElement()}, intercept_clicks=1)
    """

    def _factory(**kwargs):
        return _FakeDriver(**kwargs)

    return _factory


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wait_engine(fake_clock: FakeClock) -> WaitEngine:
    return WaitEngine(clock=fake_clock.time, sleep=fake_clock.sleep)


@pytest.fixture
def registry() -> ExecutionContextRegistry:
    return ExecutionContextRegistry()
