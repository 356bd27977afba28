"""Run ffmpeg and other external tools without blocking the event loop.

Commands go through `subprocess.run()` inside `asyncio.to_thread()`; asyncio child
watchers have been seen to hang on `.communicate()` in some containers.
"""

from __future__ import annotations

import asyncio
import subprocess
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class RunResult:
    args: tuple[str, ...]
    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def stderr_tail(self, max_lines: int = 20) -> str:
        lines = self.stderr.decode(errors="ignore").strip().splitlines()
        return "\n".join(lines[-max_lines:])


async def run_subprocess(
    args: Sequence[str],
    *,
    capture_output: bool = True,
    timeout_s: float | None = None,
) -> RunResult:
    """Run `args` to completion in a worker thread.

    Raises `FileNotFoundError` when the executable is missing and
    `subprocess.TimeoutExpired` when `timeout_s` elapses; a non-zero exit is
    reported through `RunResult.returncode`.
    """
    argv = [str(a) for a in args]

    def _run() -> subprocess.CompletedProcess[bytes]:
        return subprocess.run(
            argv,
            stdout=subprocess.PIPE if capture_output else subprocess.DEVNULL,
            stderr=subprocess.PIPE if capture_output else subprocess.DEVNULL,
            check=False,
            timeout=timeout_s,
        )

    cp = await asyncio.to_thread(_run)
    return RunResult(
        args=tuple(argv),
        returncode=int(cp.returncode),
        stdout=cp.stdout or b"",
        stderr=cp.stderr or b"",
    )
