#
# src/pymstest/runner/__init__.py
#
"""
Process runner and command building for mstest.exe.
"""
from .command import (
    KNOWN_DETAILS,
    CategoryFilter,
    MSTestOptions,
    PublishOptions,
    RunCommand,
    TestContainer,
    TestMetadata,
    TestSource,
    resolve_executable,
)
from .protocols import TestRunner, TestRunResult
from .subprocess_runner import SubprocessTestRunner, stream_events

__all__ = [
    "KNOWN_DETAILS",
    "CategoryFilter",
    "MSTestOptions",
    "PublishOptions",
    "RunCommand",
    "SubprocessTestRunner",
    "TestContainer",
    "TestMetadata",
    "TestRunResult",
    "TestRunner",
    "TestSource",
    "resolve_executable",
    "stream_events",
]

# 🔼⚙️
