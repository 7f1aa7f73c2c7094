# Import only what's necessary for startup
import logging
import os
import sys
from functools import partial

from uiharness.config.config import Config
from uiharness.config.logging_config import configure_logging
from uiharness.infrastructure.config_loader import load

logger = logging.getLogger(__name__)


def setup_env() -> Config:
    """Load configuration and configure logging."""
    config = load()
    configure_logging(os.getenv("LOG_LEVEL", config.log_level))
    return config


def run_smoke(config: Config) -> bool:
    """Open the configured site in a fresh session and wait for it to settle."""
    from uiharness.core.errors import FrameworkError
    from uiharness.core.interactions import Interactions
    from uiharness.core.registry import ExecutionContextRegistry
    from uiharness.driver_adapter.driver import launch_driver
    from uiharness.runner.report import LogReporter
    from uiharness.runner.session import execution

    registry = ExecutionContextRegistry()
    reporter = LogReporter()
    ui = Interactions(registry, wait_config=config.wait_config, failure_sink=reporter)

    try:
        with execution(
            "smoke",
            registry,
            partial(launch_driver, config.driver_config),
            artifacts_config=config.artifacts_config,
            reporter=reporter,
        ):
            ui.wait_for_page_load()
            logger.info(f"Loaded '{ui.title()}' at {ui.current_url()}")
        return True
    except FrameworkError as e:
        logger.error(f"Smoke run failed: {e}")
        return False
    finally:
        reporter.write_summary(config.artifacts_config.reports_dir)


def main() -> None:
    config = setup_env()
    sys.exit(0 if run_smoke(config) else 1)


if __name__ == "__main__":
    main()
