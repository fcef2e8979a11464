"""
Run context — the state of one updater invocation.

Constructed once at startup and passed explicitly to every component,
so each run (and each test) gets its own counters and paths:

    - RunOptions is read-only: dry-run and verbosity never change mid-run.
    - RunContext owns the error/warning counters and artifact paths.

Warnings and errors that count towards the summary go through
``RunContext.warn`` / ``RunContext.error``; plain ``logger.warning``
calls are informational only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from gemini_updater.core.config.loader import UpdaterConfig
from gemini_updater.core.persistence.artifacts import (
    backup_path,
    log_path,
    run_timestamp,
    summary_path,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOptions:
    """Flags fixed at the entry point for the lifetime of a run."""

    dry_run: bool = False
    verbose: bool = False


@dataclass
class RunContext:
    """Mutable per-run state: counters and artifact locations."""

    config: UpdaterConfig
    options: RunOptions
    base_dir: Path
    timestamp: str
    started_at: datetime

    error_count: int = 0
    warning_count: int = 0
    backup_file: Path | None = None
    log_active: bool = False

    @classmethod
    def create(
        cls,
        config: UpdaterConfig,
        options: RunOptions | None = None,
        *,
        now: datetime | None = None,
        cwd: Path | None = None,
    ) -> RunContext:
        started = now or datetime.now()
        return cls(
            config=config,
            options=options or RunOptions(),
            base_dir=config.resolved_base_dir(cwd),
            timestamp=run_timestamp(started),
            started_at=started,
        )

    # ── Flags ────────────────────────────────────────────────────

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run

    @property
    def verbose(self) -> bool:
        return self.options.verbose

    # ── Artifact paths ───────────────────────────────────────────

    @property
    def log_file(self) -> Path:
        return log_path(self.base_dir, self.timestamp)

    @property
    def summary_file(self) -> Path:
        return summary_path(self.base_dir, self.timestamp)

    @property
    def planned_backup_file(self) -> Path:
        return backup_path(self.base_dir, self.timestamp)

    # ── Counted diagnostics ──────────────────────────────────────

    def warn(self, msg: str, *args: object) -> None:
        """Log a WARNING that counts towards the run summary."""
        self.warning_count += 1
        logger.warning(msg, *args)

    def error(self, msg: str, *args: object) -> None:
        """Log an ERROR that counts towards the run summary."""
        self.error_count += 1
        logger.error(msg, *args)
