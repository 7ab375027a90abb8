#
# src/pymstest/parsing/parser.py
#
"""
Streaming state machine that turns mstest.exe console output into results.

Output looks like this once the banner is out of the way::

    Results               Top Level Tests
    -------               ---------------
    Passed                MyTests.TestA
    [errormessage] = ...
    Failed                MyTests.TestB
    1/2 test(s) Passed, 1 Failed

Everything up to the dashed line is ignored. Each outcome line opens a result,
``[key] = value`` lines attach attributes to it (values may continue on the
following lines) and the summary line closes the block.
"""
from collections.abc import Iterable, Sequence
from enum import Enum, auto

import structlog
from attrs import field, mutable

from pymstest.parsing.buffer import DEFAULT_TERMINATOR, LineBuffer
from pymstest.parsing.events import (
    DoneEvent,
    ErrorEvent,
    EventSink,
    ParserEvent,
    TestEvent,
    TestResult,
)
from pymstest.parsing.lines import (
    LineKind,
    classify_line,
    is_begin_marker,
    parse_attribute_header,
    parse_result_header,
)
from pymstest.parsing.localization import DEFAULT_LANGUAGE, get_tokens

log = structlog.get_logger("parsing.parser")


class ParserState(Enum):
    """Where the parser is relative to the result block."""

    AWAITING_BEGIN = auto()
    PARSING = auto()
    STOPPED = auto()


@mutable(slots=True)
class PendingAttribute:
    """An attribute whose value may still grow by continuation lines."""

    key: str = field(default="")
    value: str = field(default="")

    def clear(self) -> None:
        self.key = ""
        self.value = ""


def build_detail_lookup(details: Iterable[str]) -> dict[str, str]:
    """Maps lowercased detail names to the caller's spelling. First one wins."""
    lookup: dict[str, str] = {}
    for name in details:
        lookup.setdefault(name.lower(), name)
    return lookup


class ResultParser:
    """
    Consumes chunks of runner output and emits TestEvent, DoneEvent and
    ErrorEvent objects to a sink.

    Not thread-safe: feed() and close() must be called from one thread (the
    event loop reading the process output).
    """

    def __init__(
        self,
        sink: EventSink,
        details: Sequence[str] = (),
        language: str | None = DEFAULT_LANGUAGE,
        terminator: str = DEFAULT_TERMINATOR,
    ) -> None:
        self._sink = sink
        self.language = language or DEFAULT_LANGUAGE
        self.tokens = get_tokens(self.language)
        self._detail_lookup = build_detail_lookup(details)
        self._buffer = LineBuffer(terminator=terminator)
        self._joiner = terminator

        self.results: list[TestResult] = []
        self.passed: list[TestResult] = []
        self.failed: list[TestResult] = []

        self.state = ParserState.AWAITING_BEGIN
        self._begin_seen = False
        self._current: TestResult | None = None
        self._attribute = PendingAttribute()
        self._done_emitted = False
        self._log = log.bind(language=self.language, parser_id=id(self))

    @property
    def has_started(self) -> bool:
        """Whether the begin marker has been seen."""
        return self._begin_seen

    @property
    def has_stopped(self) -> bool:
        return self.state is ParserState.STOPPED

    @property
    def is_done(self) -> bool:
        return self._done_emitted

    @property
    def current_result(self) -> TestResult | None:
        """The result still collecting attributes, if any."""
        return self._current

    @property
    def current_attribute(self) -> tuple[str, str] | None:
        if not self._attribute.value:
            return None
        return self._attribute.key, self._attribute.value

    # --- Input ---

    def feed(self, chunk: bytes | str) -> None:
        """Processes one chunk of stdout exactly as it was delivered."""
        if self.has_stopped:
            return
        self.feed_lines(self._buffer.feed(chunk))

    def feed_lines(self, lines: Iterable[str]) -> None:
        """Processes already complete lines (without terminators)."""
        for line in lines:
            if self.has_stopped:
                return
            self._process_line(line)

    def close(self) -> None:
        """
        Signals that the process has exited.

        Any trailing unterminated line is processed, the open result is
        finalized and DoneEvent is emitted unless the end marker already did.
        """
        if not self.has_stopped:
            self.feed_lines(self._buffer.flush())
        if not self.has_stopped:
            self._finalize_current()
            self.state = ParserState.STOPPED
            self._log.debug("Stream closed before end marker", results=len(self.results))
        self._emit_done()

    # --- State machine ---

    def _process_line(self, line: str) -> None:
        if not line:
            return

        if self.state is ParserState.AWAITING_BEGIN:
            if is_begin_marker(line):
                self.state = ParserState.PARSING
                self._begin_seen = True
                self._log.debug("Begin marker found", emoji_key="parse")
            return

        kind = classify_line(line, self.tokens)
        if kind is LineKind.END_MARKER:
            self._finalize_current()
            self.state = ParserState.STOPPED
            self._log.debug("End marker found", line=line, results=len(self.results))
            self._emit_done()
        elif kind is LineKind.NEW_TEST_HEADER:
            self._finalize_current()
            status, name = parse_result_header(line, self.tokens)
            self._current = TestResult(status=status, name=name)
        elif kind is LineKind.ATTRIBUTE_HEADER:
            self._start_attribute(line)
        else:
            # A second dashed line inside the block is just text.
            self._continue_attribute(line)

    def _start_attribute(self, line: str) -> None:
        if self._attribute.value:
            self._commit_attribute()

        key, value = parse_attribute_header(line)
        if self._current is None:
            self._report(f"Unexpected attribute: {key}\nLine: {line}")
            return
        self._attribute.key = key
        self._attribute.value = value

    def _continue_attribute(self, line: str) -> None:
        if not self._attribute.value:
            # Only this line is skipped; the rest of the chunk is still parsed.
            self._report(f"Expected continuing attribute but got: {line}")
            return
        self._attribute.value += self._joiner + line

    def _commit_attribute(self) -> None:
        if self._current is not None and self._attribute.value:
            key = self._detail_lookup.get(self._attribute.key.lower(), self._attribute.key)
            self._current.attributes[key] = self._attribute.value
        self._attribute.clear()

    def _finalize_current(self) -> None:
        result = self._current
        if result is None:
            self._attribute.clear()
            return

        self._commit_attribute()
        self._current = None

        result.passed = result.status == self.tokens.passed
        self.results.append(result)
        (self.passed if result.passed else self.failed).append(result)
        self._log.debug(
            "Result finalized",
            name=result.name,
            status=result.status,
            attributes=len(result.attributes),
            emoji_key="test",
        )
        self._emit(TestEvent(result=result))

    # --- Output ---

    def _report(self, message: str) -> None:
        self._log.warning("Unparseable runner output", detail=message, emoji_key="anomaly")
        self._emit(ErrorEvent(message=message))

    def _emit_done(self) -> None:
        if self._done_emitted:
            return
        self._done_emitted = True
        self._emit(
            DoneEvent(
                results=list(self.results),
                passed=list(self.passed),
                failed=list(self.failed),
            )
        )

    def _emit(self, event: ParserEvent) -> None:
        try:
            self._sink(event)
        except Exception:
            self._log.exception("Event sink raised", event_type=type(event).__name__)

# 🔼⚙️
