"""
Summary rendering — the human-readable RunSummary document.
"""

from __future__ import annotations

from gemini_updater.core.models.state import RunSummary, StepState

_RULE = "=" * 77

_STATE_LABELS = {
    StepState.SUCCEEDED: "ok",
    StepState.FAILED_RECOVERED: "ok (fallback)",
    StepState.FAILED_WARNED: "failed (continued)",
    StepState.FAILED_FATAL: "FAILED",
    StepState.SKIPPED: "skipped",
    StepState.PENDING: "not run",
    StepState.RUNNING: "interrupted",
}


def render_summary(summary: RunSummary) -> str:
    lines = [
        _RULE,
        "                    GEMINI CLI UPDATE SUMMARY",
        _RULE,
        f"Timestamp: {summary.started_at:%Y-%m-%d %H:%M:%S}",
        f"Script Version: {summary.version}",
        f"Platform: {summary.platform}",
        f"Log file: {summary.log_file or 'console only'}",
    ]
    if summary.dry_run:
        lines.append("Mode: DRY RUN (no changes were made)")
    if summary.interrupted:
        lines.append("Mode: INTERRUPTED (run did not complete, versions not re-checked)")

    lines += ["", "VERSION CHANGES:"]
    for change in summary.versions:
        lines.append(f"  {change.label}: {change.original} → {change.updated}")

    if summary.steps:
        lines += ["", "STEPS:"]
        width = max(len(s.name) for s in summary.steps)
        for step in summary.steps:
            label = "would execute" if step.dry_run and step.state == StepState.SUCCEEDED \
                else _STATE_LABELS[step.state]
            lines.append(f"  {step.name.ljust(width)}  {label}")

    smoke = {True: "passed", False: "failed (see warnings)", None: "not run"}[summary.smoke_test_ok]
    lines += [
        "",
        "STATISTICS:",
        f"  Errors: {summary.error_count}",
        f"  Warnings: {summary.warning_count}",
        f"  Smoke test: {smoke}",
        f"  Started: {summary.started_at:%Y-%m-%d %H:%M:%S}",
        f"  Finished: {summary.ended_at:%Y-%m-%d %H:%M:%S}",
        f"  Duration: {summary.duration_seconds:.1f}s",
        f"  STATUS: {summary.status}",
        "",
        "FILES CREATED:",
        f"  Main log: {summary.log_file or 'not written'}",
        f"  Summary: {summary.summary_file or 'not written'}",
        f"  Backup: {summary.backup_file or 'not written'}",
        "",
        "NEXT STEPS:",
    ]

    if summary.interrupted:
        lines += [
            "  ⚠️  The update was interrupted before it finished",
            "  ⚠️  Steps marked 'interrupted' or 'not run' did not complete",
            "  ⚠️  Run gemini-update again to finish updating",
        ]
    elif summary.ok:
        lines += [
            "  ✅ All updates completed successfully",
            "  ✅ Your development environment is up-to-date",
            "  ✅ You can now use the latest versions of all tools",
        ]
    else:
        lines += [
            f"  ⚠️  Updates completed with {summary.error_count} error(s)",
            "  ⚠️  Please review the log file for details",
            "  ⚠️  Some functionality may be limited",
        ]

    lines += [
        "",
        "VERIFICATION COMMANDS:",
        "  node --version",
        "  npm --version",
        "  gemini --version",
        "  gcloud version",
        "",
        _RULE,
    ]
    return "\n".join(lines) + "\n"
