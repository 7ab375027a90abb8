#
# src/pymstest/__init__.py
#
"""
pymstest: runs mstest.exe and turns its console output into a stream of
structured test results.
"""
from .exceptions import (
    ConfigurationError,
    ExecutableNotFoundError,
    PyMSTestError,
    RunnerError,
    RunnerLaunchError,
)
from .parsing import (
    CallbackSink,
    DoneEvent,
    ErrorEvent,
    QueueSink,
    ResultParser,
    TestEvent,
    TestResult,
)
from .runner import (
    MSTestOptions,
    RunCommand,
    SubprocessTestRunner,
    TestContainer,
    TestMetadata,
    TestRunResult,
    resolve_executable,
    stream_events,
)

__all__ = [
    "CallbackSink",
    "ConfigurationError",
    "DoneEvent",
    "ErrorEvent",
    "ExecutableNotFoundError",
    "MSTestOptions",
    "PyMSTestError",
    "QueueSink",
    "ResultParser",
    "RunCommand",
    "RunnerError",
    "RunnerLaunchError",
    "SubprocessTestRunner",
    "TestContainer",
    "TestEvent",
    "TestMetadata",
    "TestResult",
    "TestRunResult",
    "resolve_executable",
    "stream_events",
]

# 🔼⚙️
