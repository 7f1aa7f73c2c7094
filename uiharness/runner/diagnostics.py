"""Failure artifacts: screenshots and a short summary of the page under test."""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup

from uiharness.core.protocols.driver_protocol import DriverProtocol

logger = logging.getLogger(__name__)

ERROR_CLASS_PATTERN = re.compile(r"error|alert|invalid")
MAX_MESSAGES = 5


@dataclass
class PageSummary:
    url: str = ""
    title: str = ""
    error_messages: list[str] = field(default_factory=list)

    def describe(self) -> str:
        parts = [f"url={self.url}", f"title={self.title!r}"]
        if self.error_messages:
            parts.append("errors=" + "; ".join(self.error_messages))
        return ", ".join(parts)


def summarize_html(html: str, url: str = "") -> PageSummary:
    """Extract the title and any visible error/alert messages from page HTML."""
    soup = BeautifulSoup(html, "html.parser")
    title = soup.title.get_text(strip=True) if soup.title else ""

    messages: list[str] = []
    candidates = soup.find_all(attrs={"role": "alert"}) + soup.find_all(class_=ERROR_CLASS_PATTERN)
    for element in candidates:
        text = element.get_text(" ", strip=True)
        if text and text not in messages:
            messages.append(text)
        if len(messages) >= MAX_MESSAGES:
            break

    return PageSummary(url=url, title=title, error_messages=messages)


def _safe_file_name(test_name: str) -> str:
    return re.sub(r"[^\w.-]+", "_", test_name).strip("_") or "test"


def take_failure_screenshot(driver: DriverProtocol, test_name: str, screenshots_dir: str) -> Optional[str]:
    """Save a screenshot as `<dir>/<test>_<timestamp>.png`. Returns None when capture fails."""
    directory = Path(screenshots_dir)
    path = directory / f"{_safe_file_name(test_name)}_{datetime.now():%Y%m%d_%H%M%S_%f}.png"
    try:
        directory.mkdir(parents=True, exist_ok=True)
        driver.screenshot(str(path))
    except Exception as e:
        logger.error(f"Failed to capture screenshot for {test_name}: {e}")
        return None
    logger.info(f"Screenshot saved: {path}")
    return str(path)


def summarize_page(driver: DriverProtocol) -> Optional[PageSummary]:
    try:
        return summarize_html(driver.content(), driver.current_url())
    except Exception as e:
        logger.error(f"Failed to read page for diagnostics: {e}")
        return None
