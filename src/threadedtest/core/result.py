"""Data models for test outcomes."""

from dataclasses import dataclass, field
from enum import Enum

from threadedtest.core.failures import Failure


class TestStatus(str, Enum):
    """Status of a test execution."""

    PASSED = "passed"
    FAILED = "failed"


@dataclass
class TestResult:
    """Represents the result of a single test case run."""

    path: str
    status: TestStatus = TestStatus.PASSED
    duration_ms: int = 0
    failures: list[Failure] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status == TestStatus.PASSED

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "path": self.path,
            "status": self.status.value,
            "duration_ms": self.duration_ms,
            "failures": [f.to_dict() for f in self.failures],
        }


@dataclass
class RunSummary:
    """Aggregated outcome of running a set of test cases."""

    results: list[TestResult] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def failed_results(self) -> list[TestResult]:
        return [r for r in self.results if not r.passed]

    @property
    def success(self) -> bool:
        """Check if every test passed."""
        return self.failed == 0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "duration_ms": self.duration_ms,
            "results": [r.to_dict() for r in self.results],
            "failed_tests": [r.to_dict() for r in self.failed_results],
        }
