"""
Gemini CLI updater — CLI entrypoint.

Usage:
    gemini-update --help
    gemini-update --dry-run --verbose
    python -m gemini_updater
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from gemini_updater import __version__
from gemini_updater.core.config.loader import ConfigError, load_config
from gemini_updater.core.context import RunOptions

_RULE = "=" * 77


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="gemini-update")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output on the console.")
@click.option("--dry-run", "-d", is_flag=True, help="Preview changes without executing them.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to gemini-update.yml (default: auto-detect).",
)
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for logs, summaries and backups.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Kill any update command running longer than this many seconds.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the result as JSON.")
def cli(
    verbose: bool,
    dry_run: bool,
    config_path: str | None,
    base_dir: str | None,
    timeout: float | None,
    as_json: bool,
) -> None:
    """Update Node.js, npm, the Gemini CLI and the Google Cloud SDK.

    Every run writes a log, a backup snapshot of the current versions
    and a summary report to the base directory.

    Examples:

        gemini-update

        gemini-update --dry-run --verbose
    """
    from gemini_updater.core.use_cases.update import EXIT_INTERRUPTED, run_update

    try:
        config = load_config(
            Path(config_path) if config_path else None,
            base_dir=base_dir,
            command_timeout=timeout,
        )
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.secho("Update interrupted.", fg="yellow", err=True)
        sys.exit(EXIT_INTERRUPTED)

    result = run_update(config, RunOptions(dry_run=dry_run, verbose=verbose))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.summary is not None:
        from gemini_updater.services.updater.reporting.summary import render_summary

        click.echo()
        click.echo(render_summary(result.summary))

    _print_banner(result)
    sys.exit(result.exit_code)


def _print_banner(result) -> None:
    if result.interrupted:
        click.secho("Update interrupted.", fg="yellow")
    elif result.aborted:
        click.secho(f"❌ Update aborted: {result.error}", fg="red")

    click.echo(_RULE)
    click.echo("                    UPDATE PROCESS COMPLETE")
    click.echo(_RULE)
    if result.log_file:
        click.echo(f"Check the log file for detailed information: {result.log_file}")
    if result.summary is not None and result.summary.summary_file:
        click.echo(f"Review the summary for quick overview: {result.summary.summary_file}")
    if result.backup_file:
        click.echo(f"Use the backup file if rollback is needed: {result.backup_file}")
    click.echo(_RULE)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
