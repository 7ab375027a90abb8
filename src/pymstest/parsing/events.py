#
# src/pymstest/parsing/events.py
#
"""
Result records and the events the parser emits while a run is in progress.
"""
import asyncio
from collections.abc import Callable
from typing import Protocol, TypeAlias, runtime_checkable

import structlog
from attrs import define, field, mutable

log = structlog.get_logger("parsing.events")


@mutable(slots=True)
class TestResult:
    """
    One test case as reported by the runner.

    Mutable only while the parser still has it open; once a TestEvent has been
    emitted for it the parser never touches it again.
    """

    __test__ = False  # Not a pytest test class.

    status: str = field()
    name: str = field()
    passed: bool = field(default=False)
    attributes: dict[str, str] = field(factory=dict)


@define(frozen=True, slots=True)
class TestEvent:
    """Fired once per finalized result, in output order."""

    __test__ = False

    result: TestResult


@define(frozen=True, slots=True)
class DoneEvent:
    """Fired exactly once per session, after every TestEvent."""

    results: list[TestResult]
    passed: list[TestResult]
    failed: list[TestResult]


@define(frozen=True, slots=True)
class ErrorEvent:
    """Runner stderr output or a line the parser could not place."""

    message: str


ParserEvent: TypeAlias = TestEvent | DoneEvent | ErrorEvent


@runtime_checkable
class EventSink(Protocol):
    """Receives parser events. Must not block."""

    def __call__(self, event: ParserEvent) -> None: ...


class CallbackSink:
    """
    Dispatches events to optional per-kind callbacks.

    A callback that raises is logged and otherwise ignored, so a faulty
    handler cannot break the stream delivering the output.
    """

    def __init__(
        self,
        on_test: Callable[[TestResult], object] | None = None,
        on_done: Callable[[list[TestResult], list[TestResult], list[TestResult]], object] | None = None,
        on_error: Callable[[str], object] | None = None,
    ):
        self.on_test = on_test
        self.on_done = on_done
        self.on_error = on_error

    def __call__(self, event: ParserEvent) -> None:
        try:
            if isinstance(event, TestEvent):
                if self.on_test:
                    self.on_test(event.result)
            elif isinstance(event, DoneEvent):
                if self.on_done:
                    self.on_done(event.results, event.passed, event.failed)
            elif isinstance(event, ErrorEvent):
                if self.on_error:
                    self.on_error(event.message)
        except Exception:
            log.exception("Event callback raised", event_type=type(event).__name__)


class QueueSink:
    """Puts every event on an asyncio queue for a consumer to drain."""

    def __init__(self, queue: "asyncio.Queue[ParserEvent] | None" = None):
        self.queue: asyncio.Queue[ParserEvent] = queue if queue is not None else asyncio.Queue()

    def __call__(self, event: ParserEvent) -> None:
        self.queue.put_nowait(event)

# 🔼⚙️
