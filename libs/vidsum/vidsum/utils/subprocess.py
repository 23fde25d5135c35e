"""Async-friendly subprocess helpers.

We prefer `subprocess.run()` executed via `asyncio.to_thread()` instead of
`asyncio.create_subprocess_exec()` since some runtime environments have flaky
child watchers that can cause `.wait()`/`.communicate()` to hang. `subprocess.run`
kills the child when `timeout_s` elapses, so a hung tool never blocks the caller.
"""

from __future__ import annotations

import asyncio
import subprocess
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class RunResult:
    returncode: int
    stdout: bytes
    stderr: bytes


class SubprocessTimeout(Exception):
    """Raised when a child process is killed after exceeding its timeout."""

    def __init__(self, args: Sequence[str], timeout_s: float) -> None:
        super().__init__(f"command timed out after {timeout_s}s: {' '.join(args)}")
        self.cmd = list(args)
        self.timeout_s = float(timeout_s)


async def run_subprocess(
    args: Sequence[str],
    *,
    capture_output: bool = True,
    check: bool = False,
    timeout_s: float | None = None,
) -> RunResult:
    def _run() -> subprocess.CompletedProcess[bytes]:
        return subprocess.run(
            list(args),
            stdout=subprocess.PIPE if capture_output else subprocess.DEVNULL,
            stderr=subprocess.PIPE if capture_output else subprocess.DEVNULL,
            check=check,
            timeout=timeout_s,
        )

    try:
        cp = await asyncio.to_thread(_run)
    except subprocess.TimeoutExpired as exc:
        raise SubprocessTimeout(args, float(timeout_s or 0.0)) from exc
    return RunResult(
        returncode=int(cp.returncode),
        stdout=cp.stdout or b"",
        stderr=cp.stderr or b"",
    )
