"""
Expectation verifier.
Replays the invocation logs of a double against its expectations.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from stunt.core.config import Settings, get_settings
from stunt.core.errors import ExpectationFailedError
from stunt.core.models import DoubleMode, Invocation
from stunt.matchers import Expectation
from stunt.synthesizer import control_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationEntry:
    """Outcome of one operation's expectation"""
    operation: str
    expectation: Expectation
    passed: bool
    actual_count: int
    total_calls: int
    mismatched_calls: Tuple[Invocation, ...] = ()

    def __repr__(self):
        status = "PASS" if self.passed else "FAIL"
        return (f"{status} {self.operation}: expected to be {self.expectation.describe()}, "
                f"matched {self.actual_count} of {self.total_calls} call(s)")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "expectation": self.expectation.describe(),
            "passed": self.passed,
            "actual_count": self.actual_count,
            "total_calls": self.total_calls,
            "mismatched_calls": [repr(inv) for inv in self.mismatched_calls],
        }


@dataclass(frozen=True)
class VerificationReport:
    """Verification outcome for every expectation of one double"""
    double_name: str
    mode: DoubleMode
    entries: Tuple[VerificationEntry, ...] = ()

    @property
    def total(self) -> int:
        return len(self.entries)

    @property
    def failures(self) -> List[VerificationEntry]:
        return [e for e in self.entries if not e.passed]

    @property
    def passed(self) -> bool:
        return not self.failures

    def entry(self, operation: str) -> Optional[VerificationEntry]:
        for e in self.entries:
            if e.operation == operation:
                return e
        return None

    def raise_for_failures(self) -> None:
        """
        Raise ExpectationFailedError if any expectation failed.

        Host frameworks call this at the end of a test case.
        """
        if not self.passed:
            raise ExpectationFailedError(self)

    def format_text(self) -> str:
        lines = [f"Expectations of {self.mode.value} {self.double_name}: "
                 f"{self.total - len(self.failures)}/{self.total} passed"]
        for e in self.entries:
            lines.append(f"  {e!r}")
            for inv in e.mismatched_calls:
                lines.append(f"      rejected {inv!r}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "double": self.double_name,
            "mode": self.mode.value,
            "passed": self.passed,
            "entries": [e.to_dict() for e in self.entries],
        }

    def to_json_string(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def verify(double: Any, settings: Optional[Settings] = None) -> VerificationReport:
    """
    Check a double's invocation logs against its expectations.

    Only calls whose arguments satisfy every constraint are counted.
    Expectations on stubs are skipped unless
    settings.verify_stub_expectations is set. Failures are reported,
    never raised; calling verify again without new calls yields an
    equal report.

    Args:
        double: Double created by the synthesizer
        settings: Overrides the process-wide settings

    Returns:
        VerificationReport with one entry per checked expectation
    """
    control = control_of(double)
    settings = settings or get_settings()

    entries: List[VerificationEntry] = []
    if control.mode is DoubleMode.MOCK or settings.verify_stub_expectations:
        for name, plan in control.plans.items():
            if plan.expectation is None:
                continue
            entries.append(_check_plan(name, plan.expectation, plan.invocations, settings))

    report = VerificationReport(double_name=control.name, mode=control.mode, entries=tuple(entries))
    for failure in report.failures:
        logger.info("Expectation failed on %s: %r", control.name, failure)
    return report


def verify_all(doubles: Iterable[Any], settings: Optional[Settings] = None) -> List[VerificationReport]:
    return [verify(d, settings) for d in doubles]


def _check_plan(name: str, expectation: Expectation, calls: List[Invocation],
                settings: Settings) -> VerificationEntry:
    matching = 0
    mismatched: List[Invocation] = []
    for inv in calls:
        if expectation.accepts(inv.arguments):
            matching += 1
        else:
            mismatched.append(inv)

    return VerificationEntry(
        operation=name,
        expectation=expectation,
        passed=expectation.count.matches(matching),
        actual_count=matching,
        total_calls=len(calls),
        mismatched_calls=tuple(mismatched[:settings.max_mismatch_samples]),
    )
