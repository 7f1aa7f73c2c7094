from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, Protocol, TypeVar

from uiharness.config.config import WaitConfig
from uiharness.core import condition as conditions
from uiharness.core.condition import Condition
from uiharness.core.errors import (
    ClickIntercepted,
    DriverError,
    ElementNotPresent,
    FrameworkError,
    InteractionFailed,
    OptionNotFound,
    SessionLost,
)
from uiharness.core.protocols.driver_protocol import DriverProtocol
from uiharness.core.registry import ExecutionContextRegistry, execution_key
from uiharness.core.wait import WaitEngine

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class FailureSink(Protocol):
    """Receives typed failures for visibility (report entries, dashboards)."""

    def report_failure(self, error: FrameworkError, key: str) -> None:
        """`key` identifies the execution the failure happened on."""


def _reported(method: F) -> F:
    """Forward typed failures to the failure sink, then let them propagate."""

    @functools.wraps(method)
    def wrapper(self: "Interactions", *args: Any, **kwargs: Any) -> Any:
        try:
            return method(self, *args, **kwargs)
        except FrameworkError as e:
            self._report(e)
            raise

    return wrapper  # type: ignore[return-value]


class Interactions:
    """User-facing actions gated on the conditions that make them safe.

    Page objects hold an instance of this class and call it; they do not
    inherit from it. Every call looks up the calling execution's browser
    session in the registry, so calling it outside a test execution fails
    with NoActiveSession.
    """

    def __init__(
        self,
        registry: ExecutionContextRegistry,
        wait_engine: Optional[WaitEngine] = None,
        wait_config: Optional[WaitConfig] = None,
        failure_sink: Optional[FailureSink] = None,
        key_provider: Callable[[], str] = execution_key,
    ) -> None:
        self.registry = registry
        self.wait_engine = wait_engine or WaitEngine()
        self.wait_config = wait_config or WaitConfig()
        self.failure_sink = failure_sink
        self._key_provider = key_provider

    # --- Actions ---
    @_reported
    def click(self, locator: str) -> None:
        """Wait until clickable, then click.

        When another element intercepts the click (an overlay animating in,
        a sticky header), retries once with a script-level click on the
        element itself.
        """
        driver = self._driver()
        self._wait(conditions.clickable(locator, **self._element_timing()), driver)

        try:
            driver.click(locator)
        except ClickIntercepted as intercepted:
            logger.warning(f"Click on {locator} intercepted, trying JavaScript click")
            try:
                driver.script_click(locator)
            except SessionLost:
                raise
            except Exception as fallback_error:
                logger.debug(f"JavaScript click on {locator} failed: {fallback_error}")
                raise InteractionFailed(locator, intercepted.reason) from intercepted
        except DriverError as e:
            raise InteractionFailed(locator, str(e)) from e

        logger.debug(f"Clicked on element: {locator}")

    @_reported
    def type(self, locator: str, text: str) -> None:
        """Wait until visible, clear the field and enter `text`."""
        driver = self._driver()
        self._wait(conditions.visible(locator, **self._element_timing()), driver)

        try:
            if not driver.is_editable(locator):
                raise InteractionFailed(locator, "element is not editable")
            driver.fill(locator, text)
        except ElementNotPresent as e:
            raise InteractionFailed(locator, "element is not present") from e

        logger.debug(f"Typed {len(text)} character(s) into element: {locator}")

    @_reported
    def select_option(self, locator: str, visible_text: str) -> None:
        """Select the option whose visible label equals `visible_text` exactly."""
        driver = self._driver()
        self._wait(conditions.visible(locator, **self._element_timing()), driver)

        try:
            labels = driver.option_labels(locator)
            if visible_text not in labels:
                raise OptionNotFound(visible_text, locator)
            driver.select_option(locator, visible_text)
        except ElementNotPresent as e:
            raise InteractionFailed(locator, "element is not present") from e

        logger.debug(f"Selected option '{visible_text}' from dropdown: {locator}")

    @_reported
    def read_text(self, locator: str) -> str:
        driver = self._driver()
        self._wait(conditions.visible(locator, **self._element_timing()), driver)
        try:
            return driver.inner_text(locator)
        except ElementNotPresent as e:
            raise InteractionFailed(locator, "element is not present") from e

    def is_displayed(self, locator: str) -> bool:
        """Non-waiting visibility check for branching on optional elements.

        Absent, stale or otherwise unreadable elements count as not displayed.
        """
        driver = self._driver()
        try:
            return bool(driver.is_visible(locator))
        except Exception as e:
            logger.debug(f"Treating {locator} as not displayed: {e}")
            return False

    @_reported
    def hover(self, locator: str) -> None:
        driver = self._driver()
        self._wait(conditions.visible(locator, **self._element_timing()), driver)
        try:
            driver.hover(locator)
        except ElementNotPresent as e:
            raise InteractionFailed(locator, "element is not present") from e
        logger.debug(f"Hovered over element: {locator}")

    @_reported
    def scroll_to(self, locator: str) -> None:
        driver = self._driver()
        self._wait(conditions.present(locator, **self._element_timing()), driver)
        try:
            driver.scroll_into_view(locator)
        except ElementNotPresent as e:
            raise InteractionFailed(locator, "element is not present") from e
        logger.debug(f"Scrolled to element: {locator}")

    # --- Navigation ---
    @_reported
    def navigate(self, path: str, page_name: str | None = None) -> None:
        """Open `path`, record the page marker and wait for the page to settle."""
        driver = self._driver()
        driver.navigate(path)
        if page_name:
            self.registry.mark_page(page_name, self._key_provider())
        self._wait_for_page_load(driver)
        logger.info(f"Opened {page_name or path}")

    @_reported
    def refresh(self) -> None:
        driver = self._driver()
        driver.refresh()
        self._wait_for_page_load(driver)
        logger.debug("Page refreshed")

    def current_url(self) -> str:
        return self._driver().current_url()

    def title(self) -> str:
        return self._driver().title()

    # --- Explicit waits ---
    @_reported
    def wait_until(self, condition: Condition) -> Any:
        """Wait for a custom condition, e.g. one defined by a page object."""
        return self._wait(condition, self._driver())

    @_reported
    def wait_for_visible(self, locator: str) -> None:
        self._wait(conditions.visible(locator, **self._element_timing()), self._driver())

    @_reported
    def wait_for_clickable(self, locator: str) -> None:
        self._wait(conditions.clickable(locator, **self._element_timing()), self._driver())

    @_reported
    def wait_for_in_viewport(self, locator: str) -> None:
        self._wait(conditions.in_viewport(locator, **self._element_timing()), self._driver())

    @_reported
    def wait_for_page_load(self) -> None:
        self._wait_for_page_load(self._driver())

    @_reported
    def wait_for_ajax(self) -> None:
        cfg = self.wait_config
        self._wait(
            conditions.ajax_complete(timeout=cfg.ajax_timeout_seconds, poll_interval=cfg.poll_interval),
            self._driver(),
        )
        logger.debug("AJAX calls completed")

    @_reported
    def wait_for_animations(self) -> None:
        cfg = self.wait_config
        self._wait(
            conditions.animations_complete(timeout=cfg.animation_timeout_seconds, poll_interval=cfg.poll_interval),
            self._driver(),
        )
        logger.debug("Animations completed")

    # --- Helpers ---
    def _driver(self) -> DriverProtocol:
        return self.registry.current(self._key_provider())

    def _wait(self, condition: Condition, driver: DriverProtocol) -> Any:
        return self.wait_engine.wait_for(condition, driver)

    def _wait_for_page_load(self, driver: DriverProtocol) -> None:
        cfg = self.wait_config
        self._wait(
            conditions.page_ready(timeout=cfg.page_load_timeout_seconds, poll_interval=cfg.poll_interval),
            driver,
        )
        logger.debug("Page loaded completely")

    def _element_timing(self) -> dict[str, float]:
        return {
            "timeout": self.wait_config.default_timeout_seconds,
            "poll_interval": self.wait_config.poll_interval,
        }

    def _report(self, error: FrameworkError) -> None:
        if self.failure_sink is None:
            return
        try:
            self.failure_sink.report_failure(error, self._key_provider())
        except Exception as e:
            logger.warning(f"Failure sink rejected {type(error).__name__}: {e}")
