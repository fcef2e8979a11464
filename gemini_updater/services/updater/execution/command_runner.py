"""
L4 Execution — CommandRunner.

Runs mutating commands on behalf of update steps and classifies the
result:

    dry-run        log "DRY RUN: Would execute: ..." and report success
    exit 0         SUCCESS
    exit != 0      ERROR (counted), then either
                     allow_failure  → WARNING (counted), return False
                     otherwise      → raise StepFailedError (fatal)

Read-only queries (version probes, package listings) go through
``query`` and run even in dry-run mode.
"""

from __future__ import annotations

import logging

from gemini_updater.core.context import RunContext
from gemini_updater.core.models.action import CommandResult, format_command
from gemini_updater.core.observability.logging_config import log_success, write_transcript
from gemini_updater.services.updater.execution.subprocess_runner import Shell

logger = logging.getLogger(__name__)

_RULE = "-" * 40


class StepFailedError(Exception):
    """A command failed and its step does not allow failure; the run must abort."""

    def __init__(self, description: str, exit_code: int):
        self.description = description
        self.exit_code = exit_code
        super().__init__(f"{description} failed with exit code {exit_code}")


class CommandRunner:
    """Execute external commands with logging, dry-run and failure policy."""

    def __init__(self, ctx: RunContext, shell: Shell | None = None):
        self._ctx = ctx
        self._shell = shell or Shell()

    def run(
        self,
        command: list[str],
        description: str,
        *,
        timeout: float | None = None,
        cwd: str | None = None,
    ) -> CommandResult:
        """Run a mutating command without classifying the result.

        In dry-run mode nothing is executed and a planned result
        (exit 0, ``dry_run=True``) is returned.
        """
        text = format_command(command)
        if self._ctx.dry_run:
            logger.info("DRY RUN: Would execute: %s", text)
            return CommandResult.planned(command, description)

        logger.debug("%s: %s", description, text)
        result = self._shell.run(
            list(command),
            timeout=timeout if timeout is not None else self._ctx.config.command_timeout,
            cwd=cwd,
        )
        result = result.model_copy(update={"description": description})

        write_transcript(
            f"Command output: {description}\n{_RULE}\n{result.output.rstrip()}\n{_RULE}"
        )
        return result

    def execute(
        self,
        command: list[str],
        description: str,
        allow_failure: bool = False,
        *,
        timeout: float | None = None,
        cwd: str | None = None,
    ) -> bool:
        """Run a command and apply the failure policy.

        Returns:
            True on success (or dry-run), False on an allowed failure.

        Raises:
            StepFailedError: The command failed and ``allow_failure`` is False.
        """
        result = self.run(command, description, timeout=timeout, cwd=cwd)
        if result.dry_run:
            return True

        if result.ok:
            log_success(logger, "Command completed successfully: %s", description)
            return True

        if result.timed_out:
            self._ctx.error(
                "Command timed out: %s (exit code %d after %.0fs)",
                description, result.exit_code, result.duration_ms / 1000,
            )
        else:
            self._ctx.error("Command failed: %s (exit code %d)", description, result.exit_code)

        if allow_failure:
            self._ctx.warn("Continuing despite command failure (allow_failure=true)")
            return False

        raise StepFailedError(description, result.exit_code)

    def query(self, command: list[str], *, timeout: float | None = None) -> CommandResult:
        """Run a read-only command. Executes in dry-run mode too; never counted."""
        return self._shell.run(
            list(command),
            timeout=timeout if timeout is not None else self._ctx.config.query_timeout,
            merge_stderr=False,
        )

    def which(self, executable: str) -> str | None:
        return self._shell.which(executable)
