"""
L3 Detection — Tool version probing.

Read-only probes: runs each tool's version query and returns the raw
first line of output. Versions are opaque display strings; nothing
here parses or compares them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gemini_updater.core.context import RunContext
from gemini_updater.core.models.state import NOT_INSTALLED, UNKNOWN, ToolVersion
from gemini_updater.core.observability.logging_config import log_success

if TYPE_CHECKING:
    from gemini_updater.services.updater.execution.command_runner import CommandRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    """How to find and query one tracked tool."""

    tool: str
    label: str
    executable: str
    version_args: tuple[str, ...]


TRACKED_TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec("node", "Node.js", "node", ("-v",)),
    ToolSpec("npm", "npm", "npm", ("-v",)),
    ToolSpec("gemini", "Gemini CLI", "gemini", ("--version",)),
    ToolSpec("gcloud", "Google Cloud SDK", "gcloud",
             ("version", "--format=value(\"Google Cloud SDK\")")),
)


def _first_line(output: str) -> str:
    for line in output.splitlines():
        line = line.strip()
        if line:
            return line
    return ""


class VersionProbe:
    """Query tracked tools for their current version."""

    def __init__(
        self,
        ctx: RunContext,
        runner: CommandRunner,
        tools: tuple[ToolSpec, ...] = TRACKED_TOOLS,
    ):
        self._ctx = ctx
        self._runner = runner
        self._tools = {spec.tool: spec for spec in tools}

        gemini = self._tools.get("gemini")
        if gemini and gemini.executable != ctx.config.gemini_executable:
            self._tools["gemini"] = ToolSpec(
                gemini.tool, gemini.label, ctx.config.gemini_executable, gemini.version_args,
            )

    @property
    def tools(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def spec(self, tool: str) -> ToolSpec:
        try:
            return self._tools[tool]
        except KeyError:
            raise KeyError(f"Unknown tool: {tool}") from None

    def probe(self, tool: str) -> ToolVersion:
        """Current version of ``tool``.

        Returns ``Not installed`` when the executable is not on PATH and
        ``Unknown`` when the query fails or prints nothing. Does not log
        or count anything; see ``probe_all``.
        """
        spec = self.spec(tool)
        if self._runner.which(spec.executable) is None:
            return ToolVersion(tool=spec.tool, label=spec.label, version=NOT_INSTALLED)

        result = self._runner.query([spec.executable, *spec.version_args])
        version = _first_line(result.output) if result.ok else ""
        if not version:
            logger.debug("Version query for %s failed (exit %d)", spec.tool, result.exit_code)
            version = UNKNOWN
        return ToolVersion(tool=spec.tool, label=spec.label, version=version)

    def probe_all(self, heading: str = "Checking current software versions...") -> list[ToolVersion]:
        """Probe every tracked tool, logging each result.

        Absent and unknown versions are counted as warnings, never errors.
        """
        logger.info(heading)
        versions: list[ToolVersion] = []
        for spec in self._tools.values():
            current = self.probe(spec.tool)
            if not current.installed:
                self._ctx.warn("  %s: %s", current.label, current.version)
            elif not current.known:
                self._ctx.warn("  %s: version could not be determined", current.label)
            else:
                logger.info("  %s: %s", current.label, current.version)
            versions.append(current)
        log_success(logger, "Version check completed")
        return versions
