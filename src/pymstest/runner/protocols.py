#
# src/pymstest/runner/protocols.py
#
"""
Defines protocols and data structures for test execution.
"""
from typing import Protocol, runtime_checkable

from attrs import define, field

from pymstest.parsing.events import EventSink, TestResult
from pymstest.runner.command import RunCommand


@define(frozen=True, slots=True)
class TestRunResult:
    """
    Structured result of one runner invocation.
    """

    __test__ = False

    exit_code: int
    results: list[TestResult] = field(factory=list)
    passed: list[TestResult] = field(factory=list)
    failed: list[TestResult] = field(factory=list)
    errors: list[str] = field(factory=list)
    timed_out: bool = field(default=False)

    @property
    def all_passed(self) -> bool:
        return not self.failed and not self.timed_out


@runtime_checkable
class TestRunner(Protocol):
    """
    Protocol for something that runs mstest.exe and streams parsed events.
    """

    async def run(
        self,
        command: RunCommand,
        sink: EventSink,
        timeout: float | None = None,
    ) -> TestRunResult:
        """
        Runs the command and feeds its output through a ResultParser.

        Args:
            command: The resolved executable, arguments and parser settings.
            sink: Receives TestEvent, DoneEvent and ErrorEvent objects.
            timeout: Seconds before the process is killed; None waits forever.

        Returns:
            A TestRunResult with everything that was parsed.
        """
        ...

# 🔼⚙️
