"""
Logging configuration — central setup for the updater.

Called once per run by the update use case. Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Two sinks:
    console   stderr, colored ``[LEVEL] message``; DEBUG only when verbose
    run log   ``update_<timestamp>.log``, every level, timestamped

Raw command output goes to the run log only, through the transcript
logger (see ``write_transcript``).
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

# ── Levels ──────────────────────────────────────────────────────

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

TRANSCRIPT_LOGGER = "gemini_updater.transcript"

# ── Format strings ──────────────────────────────────────────────

_FMT_CONSOLE = "[%(levelname)s] %(message)s"

_FMT_FILE = "[%(asctime)s] [%(levelname)s] %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# logging.raiseExceptions as it was before setup_logging
_saved_raise_exceptions: bool | None = None

_LEVEL_COLORS = {
    logging.DEBUG: "magenta",
    logging.INFO: "blue",
    SUCCESS: "green",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}


class ConsoleFormatter(logging.Formatter):
    """Render each level in its own color."""

    def __init__(self, color: bool = True):
        super().__init__(_FMT_CONSOLE)
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if not self._color:
            return text
        return click.style(text, fg=_LEVEL_COLORS.get(record.levelno, "white"))


def setup_logging(
    verbose: bool = False,
    log_file: Path | None = None,
    color: bool | None = None,
) -> Path | None:
    """Configure Python logging for the run.

    Args:
        verbose: Show DEBUG records on the console.
        log_file: Run log to append to. Created if missing.
        color: Force colors on/off (default: only when stderr is a TTY).

    Returns:
        The log file path when the file sink is active, or None if the
        file could not be opened and logging degraded to console-only.
    """
    root = logging.getLogger()
    _close_handlers(root)

    # ── Console handler (stderr) ────────────────────────────────
    if color is None:
        color = sys.stderr.isatty()
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(ConsoleFormatter(color=color))
    root.addHandler(console)
    root.setLevel(logging.DEBUG)

    # ── File handler (run log) ──────────────────────────────────
    transcript = logging.getLogger(TRANSCRIPT_LOGGER)
    _close_handlers(transcript)
    transcript.propagate = False
    transcript.setLevel(logging.DEBUG)

    active_file: Path | None = None
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            raw = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as e:
            root.warning("Cannot open log file %s (%s); logging to console only", log_file, e)
        else:
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
            root.addHandler(fh)

            raw.setFormatter(logging.Formatter("%(message)s"))
            transcript.addHandler(raw)
            active_file = log_file

    # Don't propagate exceptions from logging itself
    global _saved_raise_exceptions
    if _saved_raise_exceptions is None:
        _saved_raise_exceptions = logging.raiseExceptions
    logging.raiseExceptions = False
    return active_file


def write_transcript(text: str) -> None:
    """Append raw text (command output, report blocks) to the run log only."""
    logging.getLogger(TRANSCRIPT_LOGGER).info(text.rstrip("\n"))


def shutdown_logging() -> None:
    """Flush and close every handler installed by ``setup_logging``."""
    transcript = logging.getLogger(TRANSCRIPT_LOGGER)
    _close_handlers(transcript)
    transcript.propagate = True
    _close_handlers(logging.getLogger())

    global _saved_raise_exceptions
    if _saved_raise_exceptions is not None:
        logging.raiseExceptions = _saved_raise_exceptions
        _saved_raise_exceptions = None


def log_success(logger: logging.Logger, msg: str, *args: object) -> None:
    """Log at the SUCCESS level."""
    logger.log(SUCCESS, msg, *args)


def _close_handlers(target: logging.Logger) -> None:
    for handler in list(target.handlers):
        target.removeHandler(handler)
        try:
            handler.close()
        except Exception:
            pass
