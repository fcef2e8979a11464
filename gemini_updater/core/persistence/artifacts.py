"""
Run artifacts — naming, atomic writes, and retention cleanup.

Layout under the base directory::

    update_<timestamp>.log
    summary_<timestamp>.txt
    backups/backup_<timestamp>.txt

Timestamps use ``YYYYMMDD_HHMMSS`` so lexicographic order equals
chronological order. Retention relies on the timestamp embedded in the
file name, never on directory listing order or filesystem mtimes.
"""

from __future__ import annotations

import logging
import re
import tempfile
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
BACKUP_DIR = "backups"

LOG_PREFIX, LOG_SUFFIX = "update_", ".log"
SUMMARY_PREFIX, SUMMARY_SUFFIX = "summary_", ".txt"
BACKUP_PREFIX, BACKUP_SUFFIX = "backup_", ".txt"

_TIMESTAMP_RE = re.compile(r"(\d{8}_\d{6})")


def run_timestamp(now: datetime | None = None) -> str:
    """Sortable timestamp used in every artifact name of a run."""
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def log_path(base_dir: Path, timestamp: str) -> Path:
    return base_dir / f"{LOG_PREFIX}{timestamp}{LOG_SUFFIX}"


def summary_path(base_dir: Path, timestamp: str) -> Path:
    return base_dir / f"{SUMMARY_PREFIX}{timestamp}{SUMMARY_SUFFIX}"


def backup_path(base_dir: Path, timestamp: str) -> Path:
    return base_dir / BACKUP_DIR / f"{BACKUP_PREFIX}{timestamp}{BACKUP_SUFFIX}"


def atomic_write_text(path: Path, content: str) -> Path:
    """Write a whole artifact in one step (temp file in the same dir, then rename).

    Readers either see no file or the complete file, never a partial one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".artifact_", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with open(fd, "w", encoding="utf-8") as f:
            f.write(content)
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise

    logger.debug("Artifact written: %s", path)
    return path


def artifact_timestamp(path: Path) -> str | None:
    """Timestamp embedded in an artifact file name, if any."""
    match = _TIMESTAMP_RE.search(path.name)
    return match.group(1) if match else None


def prune_artifacts(directory: Path, prefix: str, suffix: str, keep: int) -> list[Path]:
    """Delete all but the ``keep`` most recent artifacts of one type.

    Files whose names carry no timestamp are left alone.

    Returns:
        The deleted paths, oldest first.
    """
    if keep < 1:
        raise ValueError("keep must be at least 1")
    if not directory.is_dir():
        return []

    candidates = [
        p for p in directory.glob(f"{prefix}*{suffix}")
        if p.is_file() and artifact_timestamp(p) is not None
    ]
    candidates.sort(key=lambda p: (artifact_timestamp(p), p.name), reverse=True)

    deleted: list[Path] = []
    for stale in reversed(candidates[keep:]):
        try:
            stale.unlink()
            deleted.append(stale)
            logger.debug("Removed old artifact: %s", stale)
        except OSError as e:
            logger.warning("Could not remove old artifact %s: %s", stale, e)
    return deleted
