#
# src/pymstest/runner/subprocess_runner.py
#
"""
Runs mstest.exe with asyncio.subprocess and parses its output as it arrives.
"""
import asyncio
from collections.abc import AsyncIterator

import structlog

from pymstest.exceptions import RunnerLaunchError
from pymstest.parsing.buffer import LineBuffer
from pymstest.parsing.events import ErrorEvent, EventSink, ParserEvent, QueueSink
from pymstest.parsing.parser import ResultParser
from pymstest.runner.command import RunCommand
from pymstest.runner.protocols import TestRunner, TestRunResult

log = structlog.get_logger("runner.subprocess")

DEFAULT_READ_SIZE = 4096


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()


class _RecordingSink:
    """Forwards events and keeps the text of every error."""

    def __init__(self, sink: EventSink):
        self._sink = sink
        self.errors: list[str] = []

    def __call__(self, event: ParserEvent) -> None:
        if isinstance(event, ErrorEvent):
            self.errors.append(event.message)
        try:
            self._sink(event)
        except Exception:
            log.exception("Event sink raised", event_type=type(event).__name__)


class SubprocessTestRunner(TestRunner):
    """
    Implements the TestRunner protocol by executing mstest.exe in a subprocess.

    stdout is read in raw chunks and handed to the parser unchanged; chunk
    boundaries are not line boundaries. stderr is split into lines and each
    non-blank line is reported as an ErrorEvent without interrupting stdout
    parsing. If the run is cancelled the process is killed.
    """

    def __init__(self, read_size: int = DEFAULT_READ_SIZE):
        self.read_size = read_size

    async def run(
        self,
        command: RunCommand,
        sink: EventSink,
        timeout: float | None = None,
    ) -> TestRunResult:
        recorder = _RecordingSink(sink)
        parser = ResultParser(recorder, details=command.details, language=command.language)
        runner_log = log.bind(
            command=" ".join(command.argv),
            working_dir=str(command.working_dir) if command.working_dir else None,
        )
        runner_log.info("Executing test command", emoji_key="launch")

        try:
            process = await asyncio.create_subprocess_exec(
                *command.argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=command.working_dir,
            )
        except FileNotFoundError as e:
            message = f"Test command not found: '{command.executable}'"
            runner_log.error("Test command not found", error=str(e))
            recorder(ErrorEvent(message=message))
            raise RunnerLaunchError(message, command=command.argv, details=e) from e
        except OSError as e:
            message = f"Failed to start '{command.executable}': {e}"
            runner_log.error("Test command could not be started", error=str(e))
            recorder(ErrorEvent(message=message))
            raise RunnerLaunchError(message, command=command.argv, details=e) from e

        stderr_lines = LineBuffer(terminator="\n")

        def report_stderr(lines: list[str]) -> None:
            for line in lines:
                text = line.strip()
                if text:
                    runner_log.debug("Test command stderr", text=text)
                    recorder(ErrorEvent(message=text))

        async def read_stdout() -> None:
            assert process.stdout is not None
            while chunk := await process.stdout.read(self.read_size):
                parser.feed(chunk)

        async def read_stderr() -> None:
            assert process.stderr is not None
            while chunk := await process.stderr.read(self.read_size):
                report_stderr(stderr_lines.feed(chunk))

        timed_out = False
        try:
            await asyncio.wait_for(
                asyncio.gather(read_stdout(), read_stderr(), process.wait()),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            timed_out = True
            runner_log.warning("Test command timed out, killing", timeout=timeout)
            await _kill(process)
            report_stderr(stderr_lines.flush())
            recorder(ErrorEvent(message=f"Test run timed out after {timeout} seconds"))
        except asyncio.CancelledError:
            runner_log.warning("Test run cancelled, killing test command")
            await _kill(process)
            raise
        else:
            report_stderr(stderr_lines.flush())

        parser.close()

        exit_code = process.returncode if process.returncode is not None else -1
        runner_log.info(
            "Test command finished",
            exit_code=exit_code,
            results=len(parser.results),
            failed=len(parser.failed),
            emoji_key="done",
        )
        return TestRunResult(
            exit_code=exit_code,
            results=list(parser.results),
            passed=list(parser.passed),
            failed=list(parser.failed),
            errors=list(recorder.errors),
            timed_out=timed_out,
        )


async def stream_events(
    command: RunCommand,
    runner: TestRunner | None = None,
    timeout: float | None = None,
) -> AsyncIterator[ParserEvent]:
    """
    Runs the command and yields its events as they are produced.

    Iteration ends when the process has exited and every event has been
    yielded. ErrorEvents from stderr or a timeout may still follow the
    DoneEvent. A launch failure is raised from the iterator after its
    ErrorEvent has been yielded. Closing the iterator early kills the process.
    """
    runner = runner or SubprocessTestRunner()
    sink = QueueSink()
    run_task = asyncio.create_task(runner.run(command, sink, timeout=timeout))

    try:
        while True:
            if run_task.done() and sink.queue.empty():
                run_task.result()
                return

            get_task = asyncio.create_task(sink.queue.get())
            done, _ = await asyncio.wait(
                {get_task, run_task}, return_when=asyncio.FIRST_COMPLETED
            )
            if get_task not in done:
                get_task.cancel()
                continue

            yield get_task.result()
    finally:
        if not run_task.done():
            run_task.cancel()
            await asyncio.gather(run_task, return_exceptions=True)

# 🔼⚙️
