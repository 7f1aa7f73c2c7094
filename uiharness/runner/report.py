import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from uiharness.core.errors import FrameworkError
from uiharness.core.registry import execution_key

logger = logging.getLogger(__name__)


class EntryStatus(Enum):
    PASSED = "passed"
    FAILED = "failed"
    # an interaction failure seen while the test was still running
    FAILURE_REPORTED = "failure_reported"


@dataclass
class ReportEntry:
    test_name: str
    status: EntryStatus
    message: str
    screenshot: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


class LogReporter:
    """Collects pass/fail entries for concurrently running tests and logs them.

    Also serves as the Interactions failure sink: typed failures are
    attributed to the test running on the calling execution.
    """

    def __init__(self) -> None:
        self.entries: list[ReportEntry] = []
        self._tests: dict[str, str] = {}
        self._lock = threading.Lock()

    def start_test(self, test_name: str, key: str | None = None) -> None:
        with self._lock:
            self._tests[key or execution_key()] = test_name
        logger.info(f"Starting test: {test_name}")

    def log_pass(self, test_name: str, message: str = "Test passed successfully") -> None:
        self._add(ReportEntry(test_name, EntryStatus.PASSED, message))
        logger.info(f"Test passed: {test_name}")

    def log_fail(self, test_name: str, message: str, screenshot: str | None = None) -> None:
        self._add(ReportEntry(test_name, EntryStatus.FAILED, message, screenshot=screenshot))
        logger.error(f"Test failed: {test_name}: {message}")

    def end_test(self, key: str | None = None) -> None:
        with self._lock:
            self._tests.pop(key or execution_key(), None)

    def report_failure(self, error: FrameworkError, key: str | None = None) -> None:
        with self._lock:
            test_name = self._tests.get(key or execution_key(), "<unknown test>")
        self._add(ReportEntry(test_name, EntryStatus.FAILURE_REPORTED, f"{type(error).__name__}: {error}"))
        logger.debug(f"{test_name}: {type(error).__name__}: {error}")

    def entries_for(self, test_name: str) -> list[ReportEntry]:
        with self._lock:
            return [e for e in self.entries if e.test_name == test_name]

    def write_summary(self, reports_dir: str) -> Path:
        """Write every entry to `<reports_dir>/report_<timestamp>.json` and return the path."""
        directory = Path(reports_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"report_{datetime.now():%Y%m%d_%H%M%S_%f}.json"

        with self._lock:
            entries = [
                {**asdict(e), "status": e.status.value, "timestamp": e.timestamp.isoformat()}
                for e in self.entries
            ]
        passed = sum(1 for e in entries if e["status"] == EntryStatus.PASSED.value)
        failed = sum(1 for e in entries if e["status"] == EntryStatus.FAILED.value)

        path.write_text(json.dumps({"passed": passed, "failed": failed, "entries": entries}, indent=2))
        logger.info(f"Passed tests: {passed}, failed tests: {failed}; report written to {path}")
        return path

    def _add(self, entry: ReportEntry) -> None:
        with self._lock:
            self.entries.append(entry)
