from __future__ import annotations

import asyncio
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from uiharness.core.errors import DuplicateBinding, NoActiveSession
from uiharness.core.protocols.driver_protocol import DriverProtocol

logger = logging.getLogger(__name__)


def execution_key() -> str:
    """Identify the calling test execution.

    Inside a running asyncio task the task is the execution; otherwise the
    current thread is.
    """
    try:
        task = asyncio.current_task()
    except RuntimeError:
        task = None
    if task is not None:
        return f"task:{task.get_name()}:{id(task)}"
    thread = threading.current_thread()
    return f"{thread.name}:{threading.get_ident()}"


@dataclass
class ExecutionContext:
    """One running test execution and the browser session it owns."""
    key: str
    handle: DriverProtocol
    current_page: Optional[str] = None


class ExecutionContextRegistry:
    """Binds at most one Driver Handle to each concurrent test execution.

    The registry's mapping is the only state shared between executions; it
    is guarded by a lock. A single key is never used concurrently with
    itself, so handles themselves need no locking.
    """

    def __init__(self) -> None:
        self._contexts: dict[str, ExecutionContext] = {}
        self._lock = threading.Lock()

    def acquire(self, key: str | None, handle: DriverProtocol) -> ExecutionContext:
        key = key or execution_key()
        with self._lock:
            if key in self._contexts:
                raise DuplicateBinding(key)
            context = ExecutionContext(key=key, handle=handle)
            self._contexts[key] = context
        logger.debug(f"Bound browser session to execution '{key}'")
        return context

    def context(self, key: str | None = None) -> ExecutionContext:
        key = key or execution_key()
        with self._lock:
            context = self._contexts.get(key)
        if context is None:
            raise NoActiveSession(key)
        return context

    def current(self, key: str | None = None) -> DriverProtocol:
        """Return the handle bound to `key` (default: the calling execution)."""
        return self.context(key).handle

    def mark_page(self, page_name: str, key: str | None = None) -> None:
        self.context(key).current_page = page_name

    def release(self, key: str | None = None) -> None:
        """Unbind the execution and quit its browser session.

        Quit errors are logged, not raised. Releasing an unbound key is a no-op.
        """
        key = key or execution_key()
        with self._lock:
            context = self._contexts.pop(key, None)
        if context is None:
            return

        try:
            context.handle.quit()
            logger.debug(f"Browser session of execution '{key}' closed")
        except Exception as e:
            logger.warning(f"Failed to close browser session of execution '{key}': {e}")

    def active_keys(self) -> list[str]:
        with self._lock:
            return list(self._contexts)

    def __len__(self) -> int:
        with self._lock:
            return len(self._contexts)

    @contextmanager
    def session(self, handle_factory: Callable[[], DriverProtocol], key: str | None = None) -> Iterator[ExecutionContext]:
        """Scoped acquisition: the handle is released on every exit path."""
        key = key or execution_key()
        handle = handle_factory()
        try:
            context = self.acquire(key, handle)
        except DuplicateBinding:
            # the freshly created session belongs to nobody; do not leak it
            try:
                handle.quit()
            except Exception as e:
                logger.warning(f"Failed to close unbound browser session: {e}")
            raise

        try:
            yield context
        finally:
            self.release(key)
