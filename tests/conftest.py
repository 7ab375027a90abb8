#
# tests/conftest.py
#
"""Shared fixtures and sample mstest.exe output."""

import pytest

from pymstest.parsing import DoneEvent, ErrorEvent, ResultParser, TestEvent

SAMPLE_LINES = [
    "Microsoft (R) Test Execution Command Line Tool Version 12.0.21005.1",
    "Copyright (c) Microsoft Corporation. All rights reserved.",
    "",
    "Loading C:\\build\\MyTests.dll...",
    "Starting execution...",
    "",
    "Results               Top Level Tests",
    "-------               ---------------",
    "Passed                MyTests.CalculatorTests.Adds",
    "[owner] = alice",
    "Failed                MyTests.CalculatorTests.Divides",
    "[errormessage] = Assert.AreEqual failed. Expected:<2>. Actual:<3>.",
    "[errorstacktrace] =    at MyTests.CalculatorTests.Divides() in C:\\src\\CalculatorTests.cs:line 42",
    "   at MyTests.Helpers.Run()",
    "Inconclusive          MyTests.CalculatorTests.Pending",
    "1/3 test(s) Passed, 1 Failed, 1 Inconclusive",
    "",
    "Summary",
    "-------",
    "Test Run Failed.",
    "Passed                MyTests.NotAResult",
]


class EventRecorder:
    """Sink that keeps every event it receives."""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)

    @property
    def tests(self):
        return [e.result for e in self.events if isinstance(e, TestEvent)]

    @property
    def done(self):
        return [e for e in self.events if isinstance(e, DoneEvent)]

    @property
    def errors(self):
        return [e.message for e in self.events if isinstance(e, ErrorEvent)]


def to_crlf(*lines: str) -> str:
    return "".join(f"{line}\r\n" for line in lines)


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def parser(recorder: EventRecorder) -> ResultParser:
    """Parser wired to a recorder, normalizing a few common detail names."""
    return ResultParser(recorder, details=["Priority", "Owner", "errorMessage", "errorStackTrace"])


@pytest.fixture
def sample_output() -> str:
    """Console output of a small mstest.exe run, CRLF terminated."""
    return to_crlf(*SAMPLE_LINES)
