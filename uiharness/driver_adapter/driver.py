import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from playwright.sync_api import Browser, Error as PlaywrightError, Locator, Page, Playwright
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from uiharness.config.config import Browser as BrowserName, DriverConfig
from uiharness.core.errors import ClickIntercepted, ElementNotPresent, InteractionFailed, SessionLost

logger = logging.getLogger(__name__)

# Playwright itself retries actions until actionable; the core has already
# waited for the matching condition, so these stay short.
ACTION_TIMEOUT_MS = 5000
QUERY_TIMEOUT_MS = 1000

# browser identifier -> (playwright browser type, channel)
BROWSER_TYPES: dict[BrowserName, tuple[str, Optional[str]]] = {
    BrowserName.CHROMIUM: ("chromium", None),
    BrowserName.CHROME: ("chromium", "chrome"),
    BrowserName.EDGE: ("chromium", "msedge"),
    BrowserName.FIREFOX: ("firefox", None),
    BrowserName.WEBKIT: ("webkit", None),
    BrowserName.SAFARI: ("webkit", None),
}

_CLOSED_MARKERS = ("has been closed", "Target closed", "Connection closed", "Browser closed")
_INTERCEPT_MARKER = "intercepts pointer events"

IN_VIEWPORT_SCRIPT = """el => {
    const rect = el.getBoundingClientRect();
    return rect.top >= 0 && rect.left >= 0
        && rect.bottom <= (window.innerHeight || document.documentElement.clientHeight)
        && rect.right <= (window.innerWidth || document.documentElement.clientWidth);
}"""
SCRIPT_CLICK = "el => el.click()"
OPTION_LABELS_SCRIPT = "el => Array.from(el.options || []).map(o => o.label)"


def _first_line(message: str) -> str:
    return message.strip().splitlines()[0] if message.strip() else message


class PlaywrightDriver:
    """DriverProtocol implementation over a Playwright sync Page.

    Playwright objects are bound to the thread that created them, which
    matches the one-session-per-execution rule of the registry.
    """

    def __init__(
        self,
        page: Page,
        base_url: str = "",
        browser: Optional[Browser] = None,
        playwright: Optional[Playwright] = None,
    ) -> None:
        self.page = page
        self.base_url = base_url.rstrip("/")
        self.browser = browser
        self.playwright = playwright

    # --- Navigation ---
    def navigate(self, path: str) -> None:
        """Navigate to a path on the configured server, or to an absolute URL."""
        if "://" in path:
            url = path
        else:
            if not path.startswith("/"):
                path = "/" + path
            url = f"{self.base_url}{path}"

        logger.debug(f"Navigating to: {url}")
        with self._translate_errors(url):
            self.page.goto(url)

    def refresh(self) -> None:
        with self._translate_errors("page"):
            self.page.reload()

    def current_url(self) -> str:
        return self.page.url

    def title(self) -> str:
        with self._translate_errors("page"):
            return self.page.title()

    def content(self) -> str:
        with self._translate_errors("page"):
            return self.page.content()

    def execute_script(self, script: str, arg: Any = None) -> Any:
        with self._translate_errors("page"):
            return self.page.evaluate(script, arg)

    # --- Element queries (never wait) ---
    def count(self, locator: str) -> int:
        with self._translate_errors(locator):
            return self.page.locator(locator).count()

    def is_visible(self, locator: str) -> bool:
        with self._translate_errors(locator):
            return self._present(locator).is_visible()

    def is_enabled(self, locator: str) -> bool:
        with self._translate_errors(locator):
            return self._present(locator).is_enabled(timeout=QUERY_TIMEOUT_MS)

    def is_editable(self, locator: str) -> bool:
        with self._translate_errors(locator):
            return self._present(locator).is_editable(timeout=QUERY_TIMEOUT_MS)

    def in_viewport(self, locator: str) -> bool:
        with self._translate_errors(locator):
            return bool(self._present(locator).evaluate(IN_VIEWPORT_SCRIPT))

    # --- Actions ---
    def click(self, locator: str) -> None:
        with self._translate_errors(locator):
            self.page.locator(locator).first.click(timeout=ACTION_TIMEOUT_MS)

    def script_click(self, locator: str) -> None:
        with self._translate_errors(locator):
            self._present(locator).evaluate(SCRIPT_CLICK)

    def fill(self, locator: str, text: str) -> None:
        with self._translate_errors(locator):
            element = self._present(locator)
            element.clear(timeout=ACTION_TIMEOUT_MS)
            element.fill(text, timeout=ACTION_TIMEOUT_MS)

    def option_labels(self, locator: str) -> list[str]:
        with self._translate_errors(locator):
            return list(self._present(locator).evaluate(OPTION_LABELS_SCRIPT))

    def select_option(self, locator: str, label: str) -> None:
        with self._translate_errors(locator):
            self._present(locator).select_option(label=label, timeout=ACTION_TIMEOUT_MS)

    def inner_text(self, locator: str) -> str:
        with self._translate_errors(locator):
            return self._present(locator).inner_text(timeout=QUERY_TIMEOUT_MS)

    def hover(self, locator: str) -> None:
        with self._translate_errors(locator):
            self._present(locator).hover(timeout=ACTION_TIMEOUT_MS)

    def scroll_into_view(self, locator: str) -> None:
        with self._translate_errors(locator):
            self._present(locator).scroll_into_view_if_needed(timeout=ACTION_TIMEOUT_MS)

    # --- Session ---
    def screenshot(self, path: str | None = None) -> bytes:
        with self._translate_errors("page"):
            return self.page.screenshot(path=path)

    def quit(self) -> None:
        """Close the browser and stop the Playwright instance owned by this driver."""
        try:
            if self.browser is not None:
                self.browser.close()
            else:
                self.page.context.close()
        finally:
            if self.playwright is not None:
                self.playwright.stop()
                self.playwright = None

    # --- Helpers ---
    def _present(self, locator: str) -> Locator:
        element = self.page.locator(locator)
        if element.count() == 0:
            raise ElementNotPresent(locator)
        return element.first

    @contextmanager
    def _translate_errors(self, locator: str) -> Iterator[None]:
        """Map Playwright failures onto the core's typed signals."""
        try:
            yield
        except PlaywrightTimeoutError as e:
            message = str(e)
            if _INTERCEPT_MARKER in message:
                raise ClickIntercepted(locator, _first_line(message)) from e
            raise InteractionFailed(locator, _first_line(message)) from e
        except PlaywrightError as e:
            message = str(e)
            if any(marker in message for marker in _CLOSED_MARKERS):
                raise SessionLost(_first_line(message)) from e
            if _INTERCEPT_MARKER in message:
                raise ClickIntercepted(locator, _first_line(message)) from e
            raise InteractionFailed(locator, _first_line(message)) from e


def launch_driver(driver_config: DriverConfig) -> PlaywrightDriver:
    """Start a browser session for the calling thread and open the base URL.

    Each call starts its own Playwright instance: sync Playwright objects
    cannot be shared between threads.
    """
    browser_type, channel = BROWSER_TYPES[driver_config.browser]
    playwright = sync_playwright().start()
    browser: Optional[Browser] = None
    try:
        launch_options: dict[str, Any] = {"headless": driver_config.headless}
        if channel:
            launch_options["channel"] = channel
        browser = getattr(playwright, browser_type).launch(**launch_options)
        context = browser.new_context(
            viewport={"width": driver_config.viewport_width, "height": driver_config.viewport_height},
        )
        page = context.new_page()
        driver = PlaywrightDriver(page, driver_config.base_url, browser=browser, playwright=playwright)
        driver.navigate("/")
    except Exception as e:
        if browser is not None:
            browser.close()
        playwright.stop()
        if isinstance(e, PlaywrightError):
            # missing browser binary, bad channel, sandbox refusal
            raise SessionLost(f"could not start {driver_config.browser.value}: {_first_line(str(e))}") from e
        raise

    logger.info(f"Started {driver_config.browser.value} session (headless={driver_config.headless})")
    return driver
