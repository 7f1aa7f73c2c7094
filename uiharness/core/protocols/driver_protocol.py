from __future__ import annotations

from typing import Any, Protocol


class DriverProtocol(Protocol):
    """Driver Handle: the capability surface of one live browser session.

    The protocol intentionally exposes a small surface so the core
    package does not depend on Playwright. The Playwright-based driver in
    `uiharness/driver_adapter/driver.py` implements these methods.

    Locators are selector strings (CSS, ``text=...``, ``xpath=...``).
    Element queries look at the first match only. Any member may raise
    ``SessionLost`` once the browser, context or page has been closed.
    """

    def navigate(self, path: str) -> None:
        """Navigate to a server-relative path or an absolute URL."""

    def refresh(self) -> None:
        """Reload the current page."""

    def current_url(self) -> str:
        """Return the driver's current URL as a string."""

    def title(self) -> str:
        """Return the document title."""

    def content(self) -> str:
        """Return the HTML content of the current page."""

    def execute_script(self, script: str, arg: Any = None) -> Any:
        """Evaluate a JavaScript expression or function in the page and return its result."""

    def count(self, locator: str) -> int:
        """Return the number of elements matching `locator`. Never waits."""

    def is_visible(self, locator: str) -> bool:
        """Return True if the first match is rendered.

        Raises ElementNotPresent when nothing matches.
        """

    def is_enabled(self, locator: str) -> bool:
        """Return True if the first match is enabled.

        Raises ElementNotPresent when nothing matches.
        """

    def is_editable(self, locator: str) -> bool:
        """Return True if the first match accepts text input.

        Raises ElementNotPresent when nothing matches.
        """

    def in_viewport(self, locator: str) -> bool:
        """Return True if the first match's bounding box lies inside the viewport."""

    def click(self, locator: str) -> None:
        """Click the first match.

        Raises ClickIntercepted when another element receives the pointer event.
        """

    def script_click(self, locator: str) -> None:
        """Dispatch a click from JavaScript directly on the first match, bypassing hit testing."""

    def fill(self, locator: str, text: str) -> None:
        """Clear the first match, then enter `text`."""

    def option_labels(self, locator: str) -> list[str]:
        """Return the visible labels of the options of a <select> element."""

    def select_option(self, locator: str, label: str) -> None:
        """Select the option whose visible label equals `label`."""

    def inner_text(self, locator: str) -> str:
        """Return the rendered text of the first match."""

    def hover(self, locator: str) -> None:
        """Move the pointer over the first match."""

    def scroll_into_view(self, locator: str) -> None:
        """Scroll the first match into the centre of the viewport."""

    def screenshot(self, path: str | None = None) -> bytes:
        """Capture the visible page. Writes to `path` when given."""

    def quit(self) -> None:
        """Terminate the browser session. Irreversible."""
