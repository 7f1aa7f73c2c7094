import logging
import time
from typing import Any, Callable

from uiharness.core.condition import Condition, Evaluation, Fatal, NotReady, Ready
from uiharness.core.errors import ConditionTimeout, ElementNotPresent, SessionLost
from uiharness.core.protocols.driver_protocol import DriverProtocol

logger = logging.getLogger(__name__)


class WaitEngine:
    """Turns a Condition into a blocking call with bounded latency.

    Every higher-level synchronization (page ready, element visible,
    network and animation settling) is a Condition polled through
    `wait_for`. The engine holds no per-execution state, so one instance
    can serve any number of concurrent executions.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._clock = clock
        self._sleep = sleep

    def wait_for(self, condition: Condition, driver: DriverProtocol) -> Any:
        """Poll `condition` against `driver` until it is ready, then return its value.

        The first evaluation happens immediately. Raises ConditionTimeout once
        `condition.timeout` has elapsed without a Ready result, and SessionLost
        as soon as the session behind `driver` dies.
        """
        start = self._clock()
        last_reason: str | None = None
        attempts = 0

        while True:
            attempts += 1
            result = self._evaluate(condition, driver)

            if isinstance(result, Ready):
                logger.debug(f"'{condition.name}' ready after {attempts} evaluation(s)")
                return result.value
            if isinstance(result, Fatal):
                raise result.error
            last_reason = result.reason

            elapsed = self._clock() - start
            remaining = condition.timeout - elapsed
            if remaining <= 0:
                logger.debug(f"'{condition.name}' timed out after {elapsed:.2f}s ({attempts} evaluations)")
                raise ConditionTimeout(condition.name, elapsed, last_reason)

            self._sleep(min(condition.poll_interval, remaining))

    def _evaluate(self, condition: Condition, driver: DriverProtocol) -> Evaluation:
        try:
            return condition.evaluate(driver)
        except SessionLost:
            raise
        except ElementNotPresent:
            return NotReady("no match")
        except Exception as e:
            # The page may be rebuilding its DOM between renders; keep polling.
            logger.debug(f"Transient error evaluating '{condition.name}': {e!r}")
            return NotReady(f"{type(e).__name__}: {e}")
