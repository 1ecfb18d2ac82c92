"""Run AppleScript programs as bounded child processes."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, List, Sequence, Set

from ..domain import ErrorKind, ExecutionOutcome, Failure, RunState, ScriptSpec, Success

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("osascript", "-e")
DEFAULT_GRACE_PERIOD = 1.0
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024
TIMEOUT_MARKER = "timed out"

_READ_CHUNK = 64 * 1024


class _Invocation:
    """Settlement token shared by the exit path and the deadline timer.

    Whichever path settles first wins; the other becomes a no-op.
    """

    def __init__(self, spec: ScriptSpec, future: "asyncio.Future[ExecutionOutcome]") -> None:
        self.spec = spec
        self.state = RunState.RUNNING
        self._future = future

    def settle(self, state: RunState, outcome: ExecutionOutcome) -> bool:
        if self.state is not RunState.RUNNING or self._future.done():
            return False
        self.state = state
        self._future.set_result(outcome)
        return True

    async def outcome(self) -> ExecutionOutcome:
        return await self._future


class ProcessRunner:
    """Execute one script per call in a fresh interpreter process.

    ``command`` is the interpreter argv prefix; the script source is appended as
    the final argument. No shell is involved.
    """

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        *,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    ) -> None:
        self.command = tuple(command)
        self.grace_period = grace_period
        self.max_output_bytes = max_output_bytes
        self._cleanups: Set[asyncio.Future[Any]] = set()

    async def run(self, spec: ScriptSpec, deadline: float) -> ExecutionOutcome:
        """Run ``spec`` and return its outcome no later than ``deadline`` seconds from now."""

        started = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                spec.source,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.warning("Could not start interpreter for %s: %s", spec.operation, exc)
            return Failure(ErrorKind.UNKNOWN, f"Could not start {self.command[0]}: {exc}")

        loop = asyncio.get_running_loop()
        invocation = _Invocation(spec, loop.create_future())
        collector = asyncio.ensure_future(self._collect(process))
        collector.add_done_callback(lambda task: self._on_exit(invocation, process, task))
        timer = loop.call_later(deadline, self._on_deadline, invocation, process, collector, deadline)

        try:
            outcome = await invocation.outcome()
        except asyncio.CancelledError:
            logger.debug("%s cancelled; terminating pid %s", spec.operation, process.pid)
            self._schedule_termination(process, collector)
            raise
        finally:
            timer.cancel()

        logger.debug(
            "%s finished in %.3fs state=%s ok=%s",
            spec.operation,
            time.monotonic() - started,
            invocation.state.value,
            outcome.ok,
        )
        return outcome

    async def drain(self) -> None:
        """Wait for background terminations started by timeouts or cancellation."""

        while self._cleanups:
            await asyncio.gather(*list(self._cleanups), return_exceptions=True)

    @property
    def pending_cleanups(self) -> int:
        return len(self._cleanups)

    def _on_exit(
        self,
        invocation: _Invocation,
        process: asyncio.subprocess.Process,
        collector: "asyncio.Task[tuple[bytes, bytes]]",
    ) -> None:
        if collector.cancelled():
            return
        error = collector.exception()
        if error is not None:
            invocation.settle(RunState.COMPLETED, Failure(ErrorKind.UNKNOWN, str(error)))
            return
        stdout_bytes, stderr_bytes = collector.result()
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        if process.returncode == 0:
            invocation.settle(RunState.COMPLETED, Success(stdout))
            return
        message = stderr.strip() or stdout.strip() or f"exit code {process.returncode}"
        logger.debug("%s exited with %s: %s", invocation.spec.operation, process.returncode, message[:500])
        invocation.settle(RunState.COMPLETED, Failure(ErrorKind.UNKNOWN, message))

    def _on_deadline(
        self,
        invocation: _Invocation,
        process: asyncio.subprocess.Process,
        collector: "asyncio.Task[tuple[bytes, bytes]]",
        deadline: float,
    ) -> None:
        message = f"Script '{invocation.spec.operation}' {TIMEOUT_MARKER} after {deadline:g}s"
        if not invocation.settle(RunState.TIMED_OUT, Failure(ErrorKind.TIMEOUT, message)):
            return
        logger.warning(message)
        self._schedule_termination(process, collector)

    def _schedule_termination(
        self,
        process: asyncio.subprocess.Process,
        collector: "asyncio.Future[tuple[bytes, bytes]]",
    ) -> None:
        # The collector keeps draining both pipes so the child can never block
        # on a full pipe while it is being terminated.
        tasks: List["asyncio.Future[Any]"] = [collector]
        if process.returncode is None:
            tasks.append(asyncio.ensure_future(self._terminate(process)))
        for task in tasks:
            if task.done():
                continue
            self._cleanups.add(task)
            task.add_done_callback(self._cleanups.discard)

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        try:
            process.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(process.wait(), timeout=self.grace_period)
            return
        except asyncio.TimeoutError:
            logger.warning("Process %s ignored SIGTERM for %.1fs; killing", process.pid, self.grace_period)
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()

    async def _collect(self, process: asyncio.subprocess.Process) -> tuple[bytes, bytes]:
        assert process.stdout is not None and process.stderr is not None
        stdout, stderr = await asyncio.gather(
            self._read_capped(process.stdout),
            self._read_capped(process.stderr),
        )
        await process.wait()
        return stdout, stderr

    async def _read_capped(self, stream: asyncio.StreamReader) -> bytes:
        buffer = bytearray()
        truncated = False
        while True:
            chunk = await stream.read(_READ_CHUNK)
            if not chunk:
                break
            room = self.max_output_bytes - len(buffer)
            if room > 0:
                buffer.extend(chunk[:room])
            if len(chunk) > room:
                truncated = True
        if truncated:
            logger.warning("Script output exceeded %d bytes; truncated", self.max_output_bytes)
        return bytes(buffer)
