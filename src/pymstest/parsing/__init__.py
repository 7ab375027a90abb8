#
# src/pymstest/parsing/__init__.py
#
"""
Incremental parser for mstest.exe console output.
"""
from .buffer import LineBuffer
from .events import (
    CallbackSink,
    DoneEvent,
    ErrorEvent,
    EventSink,
    ParserEvent,
    QueueSink,
    TestEvent,
    TestResult,
)
from .lines import LineKind, classify_line
from .localization import DEFAULT_LANGUAGE, LOCALIZATION_TABLE, LocalizedTokens, get_tokens
from .parser import ParserState, ResultParser

__all__ = [
    "DEFAULT_LANGUAGE",
    "LOCALIZATION_TABLE",
    "CallbackSink",
    "DoneEvent",
    "ErrorEvent",
    "EventSink",
    "LineBuffer",
    "LineKind",
    "LocalizedTokens",
    "ParserEvent",
    "ParserState",
    "QueueSink",
    "ResultParser",
    "TestEvent",
    "TestResult",
    "classify_line",
    "get_tokens",
]

# 🔼⚙️
