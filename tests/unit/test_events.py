#
# tests/unit/test_events.py
#
"""Tests for the event sinks."""

import asyncio

import pytest

from pymstest.parsing import CallbackSink, DoneEvent, ErrorEvent, QueueSink, TestEvent, TestResult


def test_callback_sink_dispatches_by_kind() -> None:
    calls = []
    sink = CallbackSink(
        on_test=lambda r: calls.append(("test", r.name)),
        on_done=lambda all_, passed, failed: calls.append(("done", len(all_), len(passed), len(failed))),
        on_error=lambda m: calls.append(("error", m)),
    )
    result = TestResult(status="Passed", name="A", passed=True)

    sink(TestEvent(result=result))
    sink(ErrorEvent(message="oops"))
    sink(DoneEvent(results=[result], passed=[result], failed=[]))

    assert calls == [("test", "A"), ("error", "oops"), ("done", 1, 1, 0)]


def test_callback_sink_without_handlers() -> None:
    CallbackSink()(ErrorEvent(message="ignored"))


def test_callback_sink_swallows_handler_errors() -> None:
    def boom(message: str) -> None:
        raise RuntimeError(message)

    CallbackSink(on_error=boom)(ErrorEvent(message="handler fails"))


@pytest.mark.asyncio
async def test_queue_sink_preserves_order() -> None:
    sink = QueueSink()
    events = [ErrorEvent(message="one"), DoneEvent(results=[], passed=[], failed=[])]
    for event in events:
        sink(event)

    received = [await asyncio.wait_for(sink.queue.get(), 1) for _ in events]
    assert received == events
