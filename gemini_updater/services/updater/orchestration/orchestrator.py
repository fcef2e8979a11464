"""
L5 Orchestration — run the update steps in order.

Each step moves PENDING → RUNNING → one terminal state:

    SUCCEEDED         primary command exited 0 (or dry-run)
    FAILED_RECOVERED  primary failed, fallback succeeded
    FAILED_WARNED     every attempt failed, failure allowed; run continues
    SKIPPED           required executable missing at run time (warning)
    FAILED_FATAL      failure not allowed; StepFailedError propagates and
                      no later step runs
"""

from __future__ import annotations

import logging
from pathlib import Path

from gemini_updater.adapters.base import PlatformAdapter
from gemini_updater.core.context import RunContext
from gemini_updater.core.models.action import UpdateStep
from gemini_updater.core.models.state import StepOutcome, StepState
from gemini_updater.core.observability.logging_config import log_success
from gemini_updater.services.updater.detection.packages import list_global_packages
from gemini_updater.services.updater.execution.command_runner import (
    CommandRunner,
    StepFailedError,
)
from gemini_updater.services.updater.orchestration.steps import (
    MachineFacts,
    build_update_steps,
)

logger = logging.getLogger(__name__)

LOCAL_MANIFEST = "package.json"


def gather_facts(ctx: RunContext, runner: CommandRunner, project_dir: Path | None = None) -> MachineFacts:
    """Collect the read-only observations the step catalog needs."""
    directory = project_dir or ctx.config.project_dir or Path.cwd()
    manifest = directory / LOCAL_MANIFEST

    facts = MachineFacts(
        cloud_sdk_installed=runner.which("gcloud") is not None,
        local_manifest_dir=str(directory) if manifest.is_file() else None,
    )

    policy = ctx.config.bulk_refresh
    if policy.mode == "all" and policy.exclude:
        facts.global_packages = list_global_packages(runner)
    return facts


class Orchestrator:
    """Owns the ordered step list and the per-step outcomes of one run."""

    def __init__(
        self,
        ctx: RunContext,
        runner: CommandRunner,
        adapter: PlatformAdapter,
        steps: list[UpdateStep],
    ):
        self._ctx = ctx
        self._runner = runner
        self._adapter = adapter
        self._steps = list(steps)
        self._outcomes = [
            StepOutcome(name=s.name, phase=s.phase, dry_run=ctx.dry_run) for s in self._steps
        ]

    @classmethod
    def plan(
        cls,
        ctx: RunContext,
        runner: CommandRunner,
        adapter: PlatformAdapter,
        project_dir: Path | None = None,
    ) -> Orchestrator:
        """Build the step list for this machine and wrap it in an Orchestrator."""
        facts = gather_facts(ctx, runner, project_dir)
        steps = build_update_steps(ctx.config, adapter, facts)
        for note in facts.notes:
            ctx.warn(note)
        return cls(ctx, runner, adapter, steps)

    @property
    def steps(self) -> list[UpdateStep]:
        return list(self._steps)

    @property
    def outcomes(self) -> list[StepOutcome]:
        return list(self._outcomes)

    def run(self) -> list[StepOutcome]:
        """Execute every step in order.

        Raises:
            StepFailedError: A step without allow_failure failed; the
                outcome list records it as FAILED_FATAL.
        """
        logger.info("Starting update process (platform adapter: %s)...", self._adapter.name)
        for message in self._adapter.warnings():
            self._ctx.warn(message)

        for step, outcome in zip(self._steps, self._outcomes):
            self._run_step(step, outcome)

        log_success(logger, "Update steps completed")
        return self.outcomes

    # ── Steps ────────────────────────────────────────────────────

    def _run_step(self, step: UpdateStep, outcome: StepOutcome) -> None:
        logger.info("%s...", step.name)
        outcome.state = StepState.RUNNING

        if step.requires and not self._ctx.dry_run and self._runner.which(step.requires) is None:
            self._ctx.warn("%s not found - skipping: %s", step.requires, step.name)
            self._log_remediation(step)
            outcome.state = StepState.SKIPPED
            return

        if step.best_effort:
            self._run_best_effort(step, outcome)
            return

        outcome.attempts = 1
        try:
            ok = self._runner.execute(
                step.command, step.name, step.allow_failure,
                timeout=step.timeout, cwd=step.cwd,
            )
        except StepFailedError as e:
            outcome.state = StepState.FAILED_FATAL
            outcome.exit_code = e.exit_code
            logger.error("Aborting update: '%s' cannot fail (exit code %d)", step.name, e.exit_code)
            raise

        if ok:
            outcome.state = StepState.SUCCEEDED
            outcome.exit_code = 0
            return

        if step.fallback is not None:
            logger.info("Retrying without --force: %s", step.name)
            outcome.attempts = 2
            ok = self._runner.execute(
                step.fallback, f"{step.name} (fallback)", True,
                timeout=step.timeout, cwd=step.cwd,
            )
            if ok:
                outcome.state = StepState.FAILED_RECOVERED
                outcome.exit_code = 0
                return

        outcome.state = StepState.FAILED_WARNED
        self._log_remediation(step)

    def _run_best_effort(self, step: UpdateStep, outcome: StepOutcome) -> None:
        """Failures here are warnings only; no error is counted and nothing retries."""
        outcome.attempts = 1
        result = self._runner.run(step.command, step.name, timeout=step.timeout, cwd=step.cwd)
        outcome.exit_code = result.exit_code

        if result.ok:
            if not result.dry_run:
                log_success(logger, "%s completed successfully", step.name)
            outcome.state = StepState.SUCCEEDED
            return

        if result.timed_out:
            self._ctx.warn("%s timed out after %.0fs", step.name, result.duration_ms / 1000)
        else:
            self._ctx.warn("%s failed (exit code %d)", step.name, result.exit_code)
        self._log_remediation(step)
        outcome.state = StepState.FAILED_WARNED

    def _log_remediation(self, step: UpdateStep) -> None:
        for hint in step.remediation:
            logger.info("  %s", hint)
