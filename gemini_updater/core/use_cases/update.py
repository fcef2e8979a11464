"""
Update use case — one full updater run.

The vertical slice from CLI flags to persisted artifacts:

    logging → platform → versions → backup → steps → report → cleanup

A fatal step aborts before the report: the log and backup already
written stay on disk, but no summary is produced. The process exit
status is then the failed command's own code, or 128 + N when the
command was killed by signal N.

Ctrl-C (exit 130) still writes a partial summary once the original
versions are known, with each step's state as it stood when the run
stopped.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from gemini_updater import __version__
from gemini_updater.adapters.registry import PlatformRegistry, UnsupportedPlatformError
from gemini_updater.core.config.loader import UpdaterConfig
from gemini_updater.core.context import RunContext, RunOptions
from gemini_updater.core.models.state import RunSummary, StepOutcome, ToolVersion
from gemini_updater.core.observability.logging_config import (
    log_success,
    setup_logging,
    shutdown_logging,
    write_transcript,
)
from gemini_updater.services.updater.detection.tool_version import VersionProbe
from gemini_updater.services.updater.execution.backup import BackupSnapshot, system_info
from gemini_updater.services.updater.execution.command_runner import (
    CommandRunner,
    StepFailedError,
)
from gemini_updater.services.updater.execution.subprocess_runner import Shell
from gemini_updater.services.updater.orchestration.orchestrator import Orchestrator
from gemini_updater.services.updater.reporting.reporter import Reporter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

_RULE = "=" * 77


@dataclass
class UpdateResult:
    """Result of one updater run."""

    exit_code: int = EXIT_OK
    summary: RunSummary | None = None
    outcomes: list[StepOutcome] | None = None
    log_file: Path | None = None
    backup_file: Path | None = None
    error_count: int = 0
    warning_count: int = 0
    aborted: bool = False
    interrupted: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == EXIT_OK

    def to_dict(self) -> dict:
        result: dict = {
            "exit_code": self.exit_code,
            "errors": self.error_count,
            "warnings": self.warning_count,
            "aborted": self.aborted,
            "interrupted": self.interrupted,
            "log_file": str(self.log_file) if self.log_file else None,
            "backup_file": str(self.backup_file) if self.backup_file else None,
        }
        if self.error:
            result["error"] = self.error
        if self.summary:
            result["status"] = self.summary.status
            result["summary_file"] = str(self.summary.summary_file) if self.summary.summary_file else None
            result["versions"] = [v.model_dump(mode="json") for v in self.summary.versions]
        return result


def _run_header(ctx: RunContext) -> str:
    info = system_info()
    lines = [
        _RULE,
        "                    CROSS-PLATFORM GEMINI CLI UPDATE",
        _RULE,
        f"Started: {ctx.started_at:%Y-%m-%d %H:%M:%S}",
        f"Script Version: {__version__}",
        f"Log file: {ctx.log_file}",
        f"Verbose mode: {ctx.verbose}",
        f"Dry run mode: {ctx.dry_run}",
        _RULE,
        "=== SYSTEM INFORMATION ===",
        *(f"{key}: {value}" for key, value in info.items()),
        f"Base directory: {ctx.base_dir}",
        "",
    ]
    return "\n".join(lines)


def run_update(
    config: UpdaterConfig,
    options: RunOptions | None = None,
    *,
    shell: Shell | None = None,
    system: str | None = None,
    environ: Mapping[str, str] | None = None,
    project_dir: Path | None = None,
    configure_logging: bool = True,
) -> UpdateResult:
    """Run the complete update pipeline.

    Args:
        config: Validated updater configuration.
        options: Dry-run / verbose flags (fixed for the whole run).
        shell: Process primitives; defaults to the real subprocess runner.
        system: ``platform.system()`` override (tests).
        environ: Environment captured in the backup (default: os.environ).
        project_dir: Directory checked for a local package.json.
        configure_logging: Install console and file handlers for this run.

    Returns:
        UpdateResult; ``exit_code`` is 0 only when no error was counted.
    """
    ctx = RunContext.create(config, options)
    result = UpdateResult()
    reporter: Reporter | None = None
    original: list[ToolVersion] | None = None

    try:
        if configure_logging:
            active = setup_logging(verbose=ctx.verbose, log_file=ctx.log_file)
            ctx.log_active = active is not None
            result.log_file = active

        write_transcript(_run_header(ctx))
        logger.info("Gemini CLI updater %s (dry run: %s)", __version__, ctx.dry_run)
        _ensure_directories(ctx)

        runner = CommandRunner(ctx, shell or Shell())
        adapter = PlatformRegistry(runner.which).resolve(system)
        probe = VersionProbe(ctx, runner)
        reporter = Reporter(ctx, runner, probe)

        original = probe.probe_all()
        BackupSnapshot(ctx, runner).capture(original, os.environ if environ is None else environ)

        orchestrator = Orchestrator.plan(ctx, runner, adapter, project_dir)
        try:
            orchestrator.run()
        finally:
            result.outcomes = orchestrator.outcomes

        summary = reporter.finalize(original, result.outcomes)
        result.summary = summary
        result.exit_code = EXIT_OK if summary.ok else EXIT_FAILURE

        if summary.ok:
            log_success(logger, "🎉 All updates completed successfully!")
        else:
            logger.warning(
                "⚠️  Updates completed with %d error(s) and %d warning(s)",
                ctx.error_count, ctx.warning_count,
            )

    except StepFailedError as e:
        logger.error("Update aborted: %s", e)
        result.aborted = True
        result.error = str(e)
        result.exit_code = abort_exit_code(e.exit_code)

    except UnsupportedPlatformError as e:
        ctx.error("%s", e)
        result.error = str(e)
        result.exit_code = EXIT_FAILURE

    except KeyboardInterrupt:
        logger.warning("Update interrupted by user")
        result.interrupted = True
        result.error = "interrupted"
        result.exit_code = EXIT_INTERRUPTED
        if reporter is not None and original is not None:
            result.summary = reporter.finalize_partial(original, result.outcomes)

    finally:
        result.error_count = ctx.error_count
        result.warning_count = ctx.warning_count
        result.backup_file = ctx.backup_file
        if configure_logging:
            shutdown_logging()

    return result


def abort_exit_code(code: int | None) -> int:
    """Process exit status for a run aborted by a fatal command.

    The command's own non-zero code is passed through. A command killed
    by signal N (negative return code) maps to 128 + N, the shell
    convention; a missing or zero code maps to 1.
    """
    if not code:
        return EXIT_FAILURE
    if code < 0:
        return 128 + abs(code)
    return code


def _ensure_directories(ctx: RunContext) -> None:
    logger.debug("Creating required directories...")
    try:
        ctx.planned_backup_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning("Cannot create %s: %s", ctx.planned_backup_file.parent, e)
