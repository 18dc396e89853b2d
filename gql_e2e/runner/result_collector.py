"""Result collection for scenario group runs.

Collects the outcome of each step executed by a registrar that runs the
group in-process.
"""

from dataclasses import dataclass, field
from typing import Optional


PASSED = "passed"
FAILED = "failed"
SKIPPED = "skipped"


@dataclass
class StepOutcome:
    """Outcome of a single step."""
    name: str
    status: str
    duration_ms: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status == PASSED


@dataclass
class GroupResult:
    """Aggregated outcomes of one scenario group."""
    group_name: str
    steps: list[StepOutcome] = field(default_factory=list)
    duration_ms: int = 0
    error: Optional[str] = None
    variables_written: list[str] = field(default_factory=list)

    def add_passed(self, name: str, duration_ms: int = 0) -> None:
        self.steps.append(StepOutcome(name=name, status=PASSED, duration_ms=duration_ms))

    def add_failed(self, name: str, exc: BaseException, duration_ms: int = 0) -> None:
        """Record a failed step from the exception that ended it."""
        self.steps.append(StepOutcome(
            name=name,
            status=FAILED,
            duration_ms=duration_ms,
            error=str(exc) or type(exc).__name__,
            error_type=type(exc).__name__,
        ))

    def add_skipped(self, name: str, reason: str) -> None:
        self.steps.append(StepOutcome(name=name, status=SKIPPED, error=reason))

    @property
    def all_passed(self) -> bool:
        return self.error is None and all(s.passed for s in self.steps)

    @property
    def passed_count(self) -> int:
        return sum(1 for s in self.steps if s.status == PASSED)

    @property
    def failed_count(self) -> int:
        return sum(1 for s in self.steps if s.status == FAILED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for s in self.steps if s.status == SKIPPED)

    @property
    def total_count(self) -> int:
        return len(self.steps)
