import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from uiharness.config.config import ArtifactsConfig, Browser, Config, DriverConfig, WaitConfig
from uiharness.core.errors import ConfigurationError

CONFIG_FILENAME = "uiharness.yaml"


def find_config_path() -> str:
    """Find the most appropriate uiharness.yaml path.

    Order of precedence:
    1. CONFIG_PATH environment variable (if set and file exists)
    2. ./uiharness.yaml in current working directory
    3. Search upward from current working directory for uiharness.yaml
    4. uiharness.yaml next to the installed package (fallback when running from source tree)

    Raises FileNotFoundError if no config file is found.
    """
    env_config_path = os.getenv("CONFIG_PATH")
    if env_config_path:
        path = Path(env_config_path)
        if path.is_file():
            return str(path)
        raise FileNotFoundError(f"CONFIG_PATH is set but file not found: {env_config_path}")

    cwd_config = Path.cwd() / CONFIG_FILENAME
    if cwd_config.is_file():
        return str(cwd_config)

    p = Path.cwd()
    for parent in (p, *p.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.is_file():
            return str(candidate)

    package_config = Path(__file__).resolve().parents[1] / CONFIG_FILENAME
    if package_config.is_file():
        return str(package_config)

    raise FileNotFoundError(
        f"{CONFIG_FILENAME} not found. Set CONFIG_PATH, or place {CONFIG_FILENAME} in the current working "
        "directory or a parent directory."
    )


def load(config_path: Optional[str] = None) -> Config:
    file = _find_config(config_path)
    data = _read_config(file)

    if not isinstance(data, dict):
        raise ConfigurationError(f"Parsed config file {file} does not contain a mapping")

    return _map_to_domain(data)


def _read_config(file: Path) -> Any:
    content = file.read_text()

    def replace_env_var(match: re.Match) -> str:
        var_name = match.group(1)
        return os.getenv(var_name, match.group(0))

    content = re.sub(r'\$\{(\w+)}', replace_env_var, content)

    return yaml.safe_load(content)


def _find_config(config_path: str | None) -> Path:
    load_dotenv()

    if config_path:
        path = Path(config_path)
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return path
    return Path(find_config_path())


def _normalize_keys(raw: dict[str, Any] | None) -> dict[str, Any]:
    """Accept both `page-load-timeout-seconds` and `page_load_timeout_seconds`."""
    return {str(key).replace("-", "_"): value for key, value in (raw or {}).items()}


def _positive(section: dict[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number, got {value!r}")
    if number <= 0:
        raise ConfigurationError(f"{key} must be positive, got {value!r}")
    return number


def _parse_bool(value: Any) -> bool:
    # ${VAR} substitution turns YAML booleans into strings
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _map_to_domain(data: dict) -> Config:
    data = _normalize_keys(data)

    base_url = data.get('base_url')
    if not base_url:
        raise ConfigurationError("Missing property: base_url")

    browser_name = str(data.get('browser', Browser.CHROMIUM.value)).lower()
    try:
        browser = Browser(browser_name)
    except ValueError:
        raise ConfigurationError(f"Browser {browser_name} is not supported")

    viewport = _normalize_keys(data.get('viewport'))
    driver_config = DriverConfig(
        base_url=str(base_url).rstrip("/"),
        browser=browser,
        headless=_parse_bool(data.get('headless', True)),
        viewport_width=int(viewport.get('width', 1920)),
        viewport_height=int(viewport.get('height', 1080)),
    )

    waits = _normalize_keys(data.get('waits'))
    wait_config = WaitConfig(
        default_timeout_seconds=_positive(waits, 'default_timeout_seconds', 10),
        page_load_timeout_seconds=_positive(waits, 'page_load_timeout_seconds', 30),
        ajax_timeout_seconds=_positive(waits, 'ajax_timeout_seconds', 15),
        animation_timeout_seconds=_positive(waits, 'animation_timeout_seconds', 5),
        poll_interval_millis=int(_positive(waits, 'poll_interval_millis', 500)),
    )

    artifacts = _normalize_keys(data.get('artifacts'))
    artifacts_config = ArtifactsConfig(
        screenshots_dir=str(artifacts.get('screenshots_dir', 'target/screenshots')),
        reports_dir=str(artifacts.get('reports_dir', 'target/reports')),
    )

    return Config(
        log_level=data.get('log_level', 'INFO'),
        driver_config=driver_config,
        wait_config=wait_config,
        artifacts_config=artifacts_config,
    )
