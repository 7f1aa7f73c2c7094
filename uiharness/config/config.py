from dataclasses import dataclass, field
from enum import Enum


class Browser(Enum):
    CHROMIUM = "chromium"
    CHROME = "chrome"
    EDGE = "edge"
    FIREFOX = "firefox"
    WEBKIT = "webkit"
    SAFARI = "safari"


@dataclass(frozen=True)
class DriverConfig:
    """Configuration for the browser session factory."""
    base_url: str
    browser: Browser = Browser.CHROMIUM
    headless: bool = True
    viewport_width: int = 1920
    viewport_height: int = 1080


@dataclass(frozen=True)
class WaitConfig:
    """Deadlines (seconds) and polling cadence (milliseconds) for conditions."""
    default_timeout_seconds: float = 10
    page_load_timeout_seconds: float = 30
    ajax_timeout_seconds: float = 15
    animation_timeout_seconds: float = 5
    poll_interval_millis: int = 500

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_millis / 1000


@dataclass(frozen=True)
class ArtifactsConfig:
    """Where failure screenshots and run reports are written."""
    screenshots_dir: str = "target/screenshots"
    reports_dir: str = "target/reports"


@dataclass
class Config:
    """Main configuration containing log level and nested config objects."""
    log_level: str
    driver_config: DriverConfig
    wait_config: WaitConfig = field(default_factory=WaitConfig)
    artifacts_config: ArtifactsConfig = field(default_factory=ArtifactsConfig)
