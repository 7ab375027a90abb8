#
# tests/unit/test_subprocess_runner.py
#
"""Tests for SubprocessTestRunner and stream_events using a fake mstest.exe."""

import os
import sys
import textwrap
from pathlib import Path

import pytest

from pymstest.exceptions import RunnerLaunchError
from pymstest.parsing import DoneEvent, ErrorEvent, TestEvent
from pymstest.runner import KNOWN_DETAILS, RunCommand, SubprocessTestRunner, TestRunner, stream_events
from tests.conftest import EventRecorder

# Writes mstest-style output in awkward pieces, with pauses so the reader
# sees several chunks.
FAKE_MSTEST = textwrap.dedent(
    """
    import sys, time
    pieces = [
        b"Microsoft (R) Test Execution Command Line Tool\\r\\n",
        b"Results    Top Level Tests\\r\\n-------    ---------------\\r\\nPass",
        b"ed   Calc.Adds\\r\\n[owner] = ali",
        b"ce\\r\\nFailed   Calc.Divides\\r\\n[errormessage] = boom\\r\\n",
        b"  at Calc.Divides()\\r\\n",
        b"1/2 test(s) Passed, 1 Failed\\r\\n",
    ]
    for piece in pieces:
        sys.stdout.buffer.write(piece)
        sys.stdout.buffer.flush()
        time.sleep(0.05)
    sys.stderr.write("warning from mstest\\n")
    sys.stderr.flush()
    sys.exit(1)
    """
)


def _python_command(script: str, **kwargs) -> RunCommand:
    return RunCommand(executable=sys.executable, arguments=["-c", script], details=KNOWN_DETAILS, **kwargs)


def test_runner_satisfies_protocol() -> None:
    assert isinstance(SubprocessTestRunner(), TestRunner)


@pytest.mark.asyncio
async def test_run_parses_streamed_output() -> None:
    recorder = EventRecorder()

    outcome = await SubprocessTestRunner(read_size=16).run(_python_command(FAKE_MSTEST), recorder)

    assert outcome.exit_code == 1
    assert not outcome.timed_out
    assert [r.name for r in outcome.results] == ["Calc.Adds", "Calc.Divides"]
    assert [r.name for r in outcome.failed] == ["Calc.Divides"]
    assert outcome.results[0].attributes == {"owner": "alice"}
    assert outcome.results[1].attributes == {"errorMessage": "boom\r\n  at Calc.Divides()"}
    assert "warning from mstest" in outcome.errors
    assert not outcome.all_passed

    assert len(recorder.tests) == 2
    assert len(recorder.done) == 1
    assert recorder.errors == ["warning from mstest"]


@pytest.mark.asyncio
async def test_run_without_end_marker_still_finishes(tmp_path: Path) -> None:
    script = "import sys; sys.stdout.write('----\\r\\nPassed Only\\r\\n')"
    recorder = EventRecorder()

    outcome = await SubprocessTestRunner().run(_python_command(script, working_dir=tmp_path), recorder)

    assert outcome.exit_code == 0
    assert outcome.all_passed
    assert [r.name for r in recorder.done[0].passed] == ["Only"]


@pytest.mark.asyncio
async def test_launch_failure(tmp_path: Path) -> None:
    recorder = EventRecorder()
    command = RunCommand(executable=str(tmp_path / "missing" / "mstest.exe"), arguments=["/nologo"])

    with pytest.raises(RunnerLaunchError, match="not found") as exc_info:
        await SubprocessTestRunner().run(command, recorder)

    assert exc_info.value.command == command.argv
    assert len(recorder.errors) == 1
    assert recorder.done == []
    assert recorder.tests == []


@pytest.mark.asyncio
async def test_timeout_kills_process() -> None:
    script = "import sys, time; sys.stdout.write('----\\r\\nPassed A\\r\\n'); sys.stdout.flush(); time.sleep(30)"
    recorder = EventRecorder()

    outcome = await SubprocessTestRunner().run(_python_command(script), recorder, timeout=2)

    assert outcome.timed_out
    assert not outcome.all_passed
    assert recorder.errors[-1] == "Test run timed out after 2 seconds"
    assert [r.name for r in recorder.done[0].results] == ["A"]


@pytest.mark.asyncio
async def test_stream_events_yields_in_order() -> None:
    events = [event async for event in stream_events(_python_command(FAKE_MSTEST))]

    tests = [e.result.name for e in events if isinstance(e, TestEvent)]
    assert tests == ["Calc.Adds", "Calc.Divides"]
    done_at = [i for i, e in enumerate(events) if isinstance(e, DoneEvent)]
    assert len(done_at) == 1
    assert all(isinstance(e, ErrorEvent) for e in events[done_at[0] + 1 :])
    assert "warning from mstest" in [e.message for e in events if isinstance(e, ErrorEvent)]


@pytest.mark.asyncio
async def test_stream_events_keeps_errors_after_summary() -> None:
    script = textwrap.dedent(
        """
        import sys, time
        sys.stdout.write("----\\r\\nPassed A\\r\\n1/1 test(s) Passed\\r\\n")
        sys.stdout.flush()
        time.sleep(0.3)
        sys.stderr.write("late warning\\n")
        sys.stderr.flush()
        """
    )

    events = [event async for event in stream_events(_python_command(script))]

    assert [type(e) for e in events] == [TestEvent, DoneEvent, ErrorEvent]
    assert events[-1].message == "late warning"


@pytest.mark.asyncio
async def test_stream_events_reports_timeout_after_summary() -> None:
    script = (
        "import sys, time; sys.stdout.write('----\\r\\nPassed A\\r\\n1 done\\r\\n'); "
        "sys.stdout.flush(); time.sleep(30)"
    )

    events = [event async for event in stream_events(_python_command(script), timeout=1)]

    assert isinstance(events[1], DoneEvent)
    assert events[-1] == ErrorEvent(message="Test run timed out after 1 seconds")


@pytest.mark.asyncio
@pytest.mark.skipif(sys.platform == "win32", reason="uses os.kill(pid, 0) to probe the child")
async def test_closing_stream_early_kills_process(tmp_path: Path) -> None:
    pid_file = tmp_path / "pid"
    script = textwrap.dedent(
        f"""
        import os, sys, time
        open({str(pid_file)!r}, "w").write(str(os.getpid()))
        sys.stdout.write("----\\r\\nPassed A\\r\\nPassed B\\r\\n")
        sys.stdout.flush()
        time.sleep(30)
        """
    )

    events = stream_events(_python_command(script))
    async for event in events:
        if isinstance(event, TestEvent):
            break
    await events.aclose()

    pid = int(pid_file.read_text())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


@pytest.mark.asyncio
async def test_stderr_lines_survive_small_reads() -> None:
    script = textwrap.dedent(
        """
        import sys
        sys.stderr.write("first  line with   spaces\\r\\n\\nsecond line\\nno newline at end")
        sys.stderr.flush()
        """
    )
    recorder = EventRecorder()

    outcome = await SubprocessTestRunner(read_size=4).run(_python_command(script), recorder)

    assert outcome.errors == ["first  line with   spaces", "second line", "no newline at end"]
    assert recorder.errors == outcome.errors


@pytest.mark.asyncio
async def test_stream_events_raises_launch_failure(tmp_path: Path) -> None:
    command = RunCommand(executable=str(tmp_path / "nope.exe"))
    seen = []

    with pytest.raises(RunnerLaunchError):
        async for event in stream_events(command):
            seen.append(event)

    assert len(seen) == 1
    assert isinstance(seen[0], ErrorEvent)
