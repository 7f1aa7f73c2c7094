import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from uiharness.config.config import ArtifactsConfig
from uiharness.core.protocols.driver_protocol import DriverProtocol
from uiharness.core.registry import ExecutionContext, ExecutionContextRegistry, execution_key
from uiharness.runner.diagnostics import summarize_page, take_failure_screenshot
from uiharness.runner.report import LogReporter

logger = logging.getLogger(__name__)


@contextmanager
def execution(
    test_name: str,
    registry: ExecutionContextRegistry,
    driver_factory: Callable[[], DriverProtocol],
    artifacts_config: Optional[ArtifactsConfig] = None,
    reporter: Optional[LogReporter] = None,
    key: str | None = None,
) -> Iterator[ExecutionContext]:
    """Bracket one test execution with its own browser session.

    The session is acquired on entry and released on every exit path. When
    the body fails, including through a test runner's own outcome
    exceptions such as ``pytest.fail``, a screenshot and page summary are
    captured before the session is released; diagnostic failures never
    replace the test's error. Interrupts are let through untouched.
    """
    key = key or execution_key()
    artifacts_config = artifacts_config or ArtifactsConfig()

    with registry.session(driver_factory, key) as context:
        if reporter is not None:
            reporter.start_test(test_name, key)
        else:
            logger.info(f"Starting test: {test_name}")
        try:
            yield context
        except (KeyboardInterrupt, GeneratorExit):
            raise
        except BaseException as e:
            _record_failure(context, test_name, e, artifacts_config, reporter)
            raise
        finally:
            if reporter is not None:
                reporter.end_test(key)
        if reporter is not None:
            reporter.log_pass(test_name)
        else:
            logger.info(f"Test passed: {test_name}")


def _record_failure(
    context: ExecutionContext,
    test_name: str,
    error: BaseException,
    artifacts_config: ArtifactsConfig,
    reporter: Optional[LogReporter],
) -> None:
    screenshot = take_failure_screenshot(context.handle, test_name, artifacts_config.screenshots_dir)
    summary = summarize_page(context.handle)

    message = f"{type(error).__name__}: {error}"
    if context.current_page:
        message += f" [page: {context.current_page}]"
    if summary is not None:
        message += f" ({summary.describe()})"

    if reporter is not None:
        reporter.log_fail(test_name, message, screenshot=screenshot)
    else:
        logger.error(f"Test failed: {test_name}: {message}")
