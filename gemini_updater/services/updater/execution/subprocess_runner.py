"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called. Commands are
argument vectors, never shell strings; the executable is resolved on
PATH first so Windows ``.cmd`` shims (npm, gcloud) work too.

Child failures never raise: they come back as a CommandResult with
a conventional exit code.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from gemini_updater.core.models.action import CommandResult

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126
EXIT_TIMEOUT = 124


class RunFn(Protocol):
    def __call__(
        self,
        cmd: list[str],
        *,
        timeout: float | None = None,
        cwd: str | None = None,
        merge_stderr: bool = True,
        env_overrides: dict[str, str] | None = None,
    ) -> CommandResult: ...


def _decode(data: str | bytes | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def _run_subprocess(
    cmd: list[str],
    *,
    timeout: float | None = None,
    cwd: str | None = None,
    merge_stderr: bool = True,
    env_overrides: dict[str, str] | None = None,
) -> CommandResult:
    """Run one external command to completion.

    Args:
        cmd: Argument vector. ``cmd[0]`` is looked up on PATH.
        timeout: Seconds before the child is killed (None = wait forever).
        cwd: Working directory for the command.
        merge_stderr: Capture stderr into the same stream as stdout.
            Version probes turn this off so warnings don't pollute the
            version string.
        env_overrides: Extra environment variables.

    Returns:
        CommandResult; exit code 127 when the executable is missing,
        124 on timeout, 126 when the OS refuses to start it.
    """
    if not cmd:
        raise ValueError("empty command")

    exe = shutil.which(cmd[0])
    if exe is None:
        return CommandResult(
            command=list(cmd),
            exit_code=EXIT_NOT_FOUND,
            output=f"command not found: {cmd[0]}",
        )

    env = None
    if env_overrides:
        env = os.environ.copy()
        env.update(env_overrides)

    start = time.monotonic()
    try:
        result = subprocess.run(
            [exe, *cmd[1:]],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            cwd=cwd,
            env=env,
        )
    except subprocess.TimeoutExpired as e:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        return CommandResult(
            command=list(cmd),
            exit_code=EXIT_TIMEOUT,
            output=_decode(e.output),
            duration_ms=elapsed_ms,
            timed_out=True,
        )
    except OSError as e:
        logger.debug("Cannot start %s: %s", cmd[0], e)
        return CommandResult(
            command=list(cmd),
            exit_code=EXIT_NOT_EXECUTABLE,
            output=str(e),
        )

    elapsed_ms = int((time.monotonic() - start) * 1000)
    return CommandResult(
        command=list(cmd),
        exit_code=result.returncode,
        output=result.stdout or "",
        duration_ms=elapsed_ms,
    )


@dataclass
class Shell:
    """The two OS primitives every component needs: run and PATH lookup.

    Injected so tests can script command outcomes without touching the
    machine's package managers.
    """

    run: RunFn = _run_subprocess
    which: Callable[[str], str | None] = field(default=shutil.which)
