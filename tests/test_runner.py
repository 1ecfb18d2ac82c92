"""ProcessRunner tests against real child processes (a Python interpreter stands in for osascript)."""

from __future__ import annotations

import asyncio
import os
import sys
import time
from pathlib import Path

import pytest

from macos_calendar_mcp.core import ProcessRunner, classify
from macos_calendar_mcp.core.runner import _Invocation
from macos_calendar_mcp.domain import ErrorKind, Failure, RunState, ScriptSpec, Success

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals required")

PYTHON = (sys.executable, "-c")


def _spec(source: str, operation: str = "test-op") -> ScriptSpec:
    return ScriptSpec(operation=operation, source=source)


def _sleeper(pid_file: Path, *, ignore_sigterm: bool = False) -> str:
    lines = ["import os, signal, time"]
    if ignore_sigterm:
        lines.append("signal.signal(signal.SIGTERM, signal.SIG_IGN)")
    lines.append(f"open({str(pid_file)!r}, 'w').write(str(os.getpid()))")
    lines.append("time.sleep(30)")
    return "\n".join(lines)


async def _wait_for_file(path: Path, timeout: float = 5.0) -> int:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if path.exists() and path.read_text():
            return int(path.read_text())
        await asyncio.sleep(0.02)
    raise AssertionError(f"{path} was never written")


def _is_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True


async def test_success_returns_stdout():
    runner = ProcessRunner(PYTHON)
    outcome = await runner.run(_spec("print('hello')"), deadline=10)
    assert outcome == Success("hello\n")


async def test_non_zero_exit_reports_stderr():
    runner = ProcessRunner(PYTHON)
    outcome = await runner.run(_spec("import sys; sys.stderr.write('boom'); sys.exit(3)"), deadline=10)
    assert isinstance(outcome, Failure)
    assert outcome.kind is ErrorKind.UNKNOWN
    assert outcome.message == "boom"


async def test_non_zero_exit_without_output_reports_exit_code():
    runner = ProcessRunner(PYTHON)
    outcome = await runner.run(_spec("import sys; sys.exit(4)"), deadline=10)
    assert outcome == Failure(ErrorKind.UNKNOWN, "exit code 4")


async def test_spawn_error_is_a_failure():
    runner = ProcessRunner(("/nonexistent/osascript-binary", "-e"))
    outcome = await runner.run(_spec("return 1"), deadline=1)
    assert isinstance(outcome, Failure)
    assert outcome.kind is ErrorKind.UNKNOWN
    assert "Could not start" in outcome.message


async def test_script_is_passed_as_one_argument_without_a_shell():
    runner = ProcessRunner(PYTHON)
    outcome = await runner.run(_spec("import sys; print(sys.argv[1:])\n# $(echo injected) ; `id`"), deadline=10)
    assert outcome == Success("[]\n")


async def test_timeout_returns_promptly_and_terminates_child(tmp_path):
    pid_file = tmp_path / "pid"
    runner = ProcessRunner(PYTHON, grace_period=1.0)
    started = time.monotonic()
    outcome = await runner.run(_spec(_sleeper(pid_file), operation="slow-op"), deadline=1.0)
    elapsed = time.monotonic() - started

    assert isinstance(outcome, Failure)
    assert outcome.kind is ErrorKind.TIMEOUT
    assert "slow-op" in outcome.message
    assert classify(outcome.message) is ErrorKind.TIMEOUT
    assert elapsed < 1.0 + 0.5

    pid = await _wait_for_file(pid_file)
    await runner.drain()
    assert runner.pending_cleanups == 0
    assert not _is_alive(pid)


async def test_child_ignoring_sigterm_is_killed(tmp_path):
    pid_file = tmp_path / "pid"
    runner = ProcessRunner(PYTHON, grace_period=0.3)
    task = asyncio.ensure_future(runner.run(_spec(_sleeper(pid_file, ignore_sigterm=True)), deadline=30))
    pid = await _wait_for_file(pid_file)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    started = time.monotonic()
    await asyncio.wait_for(runner.drain(), timeout=5)
    assert time.monotonic() - started >= 0.25
    assert not _is_alive(pid)


async def test_cancellation_terminates_child_and_propagates(tmp_path):
    pid_file = tmp_path / "pid"
    runner = ProcessRunner(PYTHON, grace_period=1.0)
    task = asyncio.ensure_future(runner.run(_spec(_sleeper(pid_file)), deadline=30))
    pid = await _wait_for_file(pid_file)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await asyncio.wait_for(runner.drain(), timeout=5)
    assert not _is_alive(pid)


async def test_output_is_capped():
    runner = ProcessRunner(PYTHON, max_output_bytes=1000)
    outcome = await runner.run(_spec("import sys; sys.stdout.write('x' * 50000)"), deadline=10)
    assert isinstance(outcome, Success)
    assert len(outcome.stdout) == 1000


async def test_large_output_does_not_block_the_child():
    runner = ProcessRunner(PYTHON)
    source = "import sys; sys.stdout.write('y' * 2000000); sys.stderr.write('e' * 200000)"
    outcome = await runner.run(_spec(source), deadline=20)
    assert isinstance(outcome, Success)
    assert len(outcome.stdout) == 2000000


async def test_concurrent_invocations_are_independent():
    runner = ProcessRunner(PYTHON)
    outcomes = await asyncio.gather(
        runner.run(_spec("print('a')"), deadline=10),
        runner.run(_spec("import sys; sys.exit(2)"), deadline=10),
        runner.run(_spec("import time; time.sleep(5)"), deadline=0.5),
        runner.run(_spec("print('d')"), deadline=10),
    )
    assert outcomes[0] == Success("a\n")
    assert outcomes[1] == Failure(ErrorKind.UNKNOWN, "exit code 2")
    assert outcomes[2].kind is ErrorKind.TIMEOUT
    assert outcomes[3] == Success("d\n")
    await runner.drain()


async def test_invocation_settles_only_once():
    loop = asyncio.get_running_loop()
    invocation = _Invocation(_spec("x"), loop.create_future())
    assert invocation.settle(RunState.TIMED_OUT, Failure(ErrorKind.TIMEOUT, "timed out"))
    assert not invocation.settle(RunState.COMPLETED, Success("late"))
    assert invocation.state is RunState.TIMED_OUT
    assert (await invocation.outcome()).kind is ErrorKind.TIMEOUT
