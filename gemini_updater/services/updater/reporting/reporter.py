"""
L6 Reporting — verify, smoke-test, summarise, clean up.

Runs after the last update step:

    1. re-probe every tracked tool (tool lost during the run → ERROR)
    2. one smoke-test invocation of the Gemini CLI (never an error)
    3. build and write the RunSummary
    4. retention cleanup of logs, summaries and backups

An interrupted run gets only step 3, from the versions captured before
the update steps started.
"""

from __future__ import annotations

import logging
import platform
from datetime import datetime
from pathlib import Path

from gemini_updater import __version__
from gemini_updater.core.context import RunContext
from gemini_updater.core.models.state import (
    NOT_VERIFIED,
    RunSummary,
    StepOutcome,
    ToolVersion,
    VersionChange,
)
from gemini_updater.core.observability.logging_config import log_success
from gemini_updater.core.persistence.artifacts import (
    BACKUP_DIR,
    BACKUP_PREFIX,
    BACKUP_SUFFIX,
    LOG_PREFIX,
    LOG_SUFFIX,
    SUMMARY_PREFIX,
    SUMMARY_SUFFIX,
    atomic_write_text,
    prune_artifacts,
)
from gemini_updater.services.updater.detection.tool_version import VersionProbe
from gemini_updater.services.updater.execution.command_runner import CommandRunner
from gemini_updater.services.updater.reporting.summary import render_summary

logger = logging.getLogger(__name__)


def pair_versions(original: list[ToolVersion], updated: list[ToolVersion]) -> list[VersionChange]:
    """Match before/after probes by tool, in the original order."""
    after = {v.tool: v for v in updated}
    changes = []
    for before in original:
        now = after.get(before.tool, before)
        changes.append(VersionChange(
            tool=before.tool,
            label=before.label,
            original=before.version,
            updated=now.version,
        ))
    return changes


class Reporter:
    """Produce the end-of-run RunSummary."""

    def __init__(self, ctx: RunContext, runner: CommandRunner, probe: VersionProbe):
        self._ctx = ctx
        self._runner = runner
        self._probe = probe

    def finalize(
        self,
        original_versions: list[ToolVersion],
        outcomes: list[StepOutcome] | None = None,
    ) -> RunSummary:
        ctx = self._ctx

        updated = self.verify()
        changes = pair_versions(original_versions, updated)
        for change in changes:
            if change.regressed:
                ctx.error(
                    "%s was installed (%s) before the update but is no longer found",
                    change.label, change.original,
                )

        smoke_ok = self.smoke_test()

        summary = self._write(self._build(changes, outcomes, smoke_test_ok=smoke_ok))
        self.cleanup()
        return summary

    def finalize_partial(
        self,
        original_versions: list[ToolVersion],
        outcomes: list[StepOutcome] | None = None,
    ) -> RunSummary:
        """Write the summary of an interrupted run.

        Nothing is executed: tools are not re-probed, the smoke test and
        retention cleanup are skipped. Step states are reported as they
        stood when the run stopped.
        """
        changes = [
            VersionChange(tool=v.tool, label=v.label, original=v.version, updated=NOT_VERIFIED)
            for v in original_versions
        ]
        return self._write(self._build(changes, outcomes, interrupted=True))

    def _build(
        self,
        changes: list[VersionChange],
        outcomes: list[StepOutcome] | None,
        *,
        smoke_test_ok: bool | None = None,
        interrupted: bool = False,
    ) -> RunSummary:
        ctx = self._ctx
        return RunSummary(
            version=__version__,
            platform=platform.system() or "unknown",
            dry_run=ctx.dry_run,
            started_at=ctx.started_at,
            ended_at=datetime.now(),
            versions=changes,
            steps=list(outcomes or []),
            error_count=ctx.error_count,
            warning_count=ctx.warning_count,
            smoke_test_ok=smoke_test_ok,
            interrupted=interrupted,
            log_file=ctx.log_file if ctx.log_active else None,
            summary_file=ctx.summary_file,
            backup_file=ctx.backup_file,
        )

    def _write(self, summary: RunSummary) -> RunSummary:
        summary_file = summary.summary_file
        logger.info("Generating update summary...")
        try:
            atomic_write_text(summary_file, render_summary(summary))
        except OSError as e:
            logger.warning("Could not write summary %s: %s", summary_file, e)
            return summary.model_copy(update={"summary_file": None})
        log_success(logger, "Summary report created: %s", summary_file)
        return summary

    def verify(self) -> list[ToolVersion]:
        """Re-probe every tracked tool and log the final state."""
        logger.info("Verifying all installations...")
        versions = []
        for spec in self._probe.tools:
            current = self._probe.probe(spec.tool)
            if not current.installed:
                self._ctx.warn("✗ %s: Not found", current.label)
            else:
                log_success(logger, "✓ %s: %s", current.label, current.version)
            versions.append(current)
        return versions

    def smoke_test(self) -> bool | None:
        """Invoke the Gemini CLI once with a trivial prompt.

        Returns:
            True/False for a real invocation, None when it did not run
            (dry-run or CLI missing). A failure is only ever a warning:
            a missing API key is an expected end state.
        """
        config = self._ctx.config
        exe = config.gemini_executable
        logger.info("Testing Gemini CLI functionality...")

        if not self._ctx.dry_run and self._runner.which(exe) is None:
            self._ctx.warn("✗ Gemini CLI not found - functionality test skipped")
            return None

        result = self._runner.run(
            [exe, *config.smoke_test_args],
            "Testing Gemini CLI basic functionality",
            timeout=config.smoke_timeout,
        )
        if result.dry_run:
            return None
        if result.ok:
            log_success(logger, "✓ Gemini CLI is functioning correctly")
            return True

        if result.timed_out:
            self._ctx.warn("⚠ Gemini CLI smoke test timed out after %.0fs", config.smoke_timeout)
        else:
            self._ctx.warn(
                "⚠ Gemini CLI installed but may need API key configuration (exit code %d)",
                result.exit_code,
            )
        logger.info("Configure credentials: run '%s' interactively or set GEMINI_API_KEY", exe)
        return False

    def cleanup(self) -> list[Path]:
        """Keep the newest ``retention`` artifacts of each type."""
        keep = self._ctx.config.retention
        base = self._ctx.base_dir
        logger.info("Cleaning up old log files (keeping last %d)...", keep)

        deleted = []
        deleted += prune_artifacts(base, LOG_PREFIX, LOG_SUFFIX, keep)
        deleted += prune_artifacts(base, SUMMARY_PREFIX, SUMMARY_SUFFIX, keep)
        deleted += prune_artifacts(base / BACKUP_DIR, BACKUP_PREFIX, BACKUP_SUFFIX, keep)

        log_success(logger, "Log cleanup completed (%d removed)", len(deleted))
        return deleted
