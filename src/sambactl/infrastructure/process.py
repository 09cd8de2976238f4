"""Process spawning — the single outbound primitive of the core.

Runs an argument vector with ``asyncio.create_subprocess_exec`` (never a
shell), feeds optional stdin, and waits under a deadline.  Failures are
reported with three exception types so the caller can tell "ran and
failed" from "never started" from "ran too long".

INVARIANT: The child runs in its own session. On timeout or cancellation the
whole process group is signalled (SIGTERM, then SIGKILL), so a tool started
under ``sudo`` is stopped too, and the wait for exit is bounded.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)

TERM_GRACE = 0.5
KILL_GRACE = 2.0


class ProcessError(Exception):
    """Base class for spawn-level faults."""

    def __init__(self, argv: Sequence[str], message: str) -> None:
        super().__init__(message)
        self.argv = list(argv)

    @property
    def output(self) -> str:
        """Raw text to hand to the error classifier."""
        return str(self)


class ProcessStartError(ProcessError):
    """The process could not be started at all (missing binary, EACCES, bad argv)."""

    def __init__(self, argv: Sequence[str], cause: OSError | ValueError) -> None:
        super().__init__(argv, f"failed to start {argv[0] if argv else '?'}: {cause}")
        self.cause = cause


class ProcessExitError(ProcessError):
    """The process ran and exited with a nonzero status."""

    def __init__(self, argv: Sequence[str], returncode: int, stdout: str, stderr: str) -> None:
        super().__init__(argv, f"exited with status {returncode}")
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    @property
    def output(self) -> str:
        return self.stderr.strip() or self.stdout.strip() or str(self)


class ProcessTimeoutError(ProcessError):
    """The wall-clock deadline passed before the process exited."""

    def __init__(self, argv: Sequence[str], timeout: float) -> None:
        super().__init__(argv, f"timed out after {timeout:g}s")
        self.timeout = timeout


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def _signal_group(proc: asyncio.subprocess.Process, sig: signal.Signals) -> None:
    # sudo relays SIGTERM to its child but cannot relay SIGKILL.
    with contextlib.suppress(ProcessLookupError, PermissionError):
        os.killpg(proc.pid, sig)


async def _wait_bounded(proc: asyncio.subprocess.Process, grace: float) -> bool:
    try:
        await asyncio.wait_for(proc.wait(), grace)
    except TimeoutError:
        return False
    return True


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Stop the child's process group and reap the child within a bounded time."""
    if proc.returncode is None:
        _signal_group(proc, signal.SIGTERM)
        await _wait_bounded(proc, TERM_GRACE)
    _signal_group(proc, signal.SIGKILL)
    if not await _wait_bounded(proc, KILL_GRACE):
        logger.warning("pid=%s still running after SIGKILL", proc.pid)


async def spawn(
    argv: Sequence[str],
    *,
    timeout: float,
    input: str | None = None,
    env: Mapping[str, str] | None = None,
) -> str:
    """Run *argv* and return its standard output.

    Args:
        argv: Program and arguments; ``argv[0]`` is resolved via ``PATH``.
        timeout: Seconds to wait for exit before killing the child.
        input: Text written to stdin (stdin is closed when ``None``).
        env: Extra variables merged over the current environment.

    Raises:
        ProcessStartError: The program could not be executed.
        ProcessExitError: Nonzero exit status.
        ProcessTimeoutError: Deadline exceeded; the child has been killed.
    """
    if not argv:
        raise ProcessStartError(argv, ValueError("empty argument vector"))

    environment = os.environ.copy()
    environment.update(env or {})

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE if input is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=environment,
            start_new_session=True,
        )
    except (OSError, ValueError) as exc:
        raise ProcessStartError(argv, exc) from exc

    logger.debug("spawned pid=%s argv0=%s", proc.pid, argv[0])
    stdin_data = input.encode("utf-8") if input is not None else None
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(stdin_data), timeout)
    except TimeoutError:
        await _terminate(proc)
        raise ProcessTimeoutError(argv, timeout) from None
    except BaseException:
        await _terminate(proc)
        raise

    returncode = proc.returncode if proc.returncode is not None else -1
    if returncode != 0:
        raise ProcessExitError(argv, returncode, _decode(stdout), _decode(stderr))
    return _decode(stdout)
