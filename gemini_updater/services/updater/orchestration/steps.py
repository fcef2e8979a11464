"""
L5 Orchestration — the update step catalog.

Turns configuration, a platform adapter and a few read-only facts about
the machine into the ordered list of UpdateSteps. This is the one place
the sequence and its failure policy are defined; adapters only fill in
native commands.

    1  package manager      refresh native manager             fatal
    2  cloud SDK            update components / install first  fatal
    3  runtime              force-reinstall Node.js            fatal
    4  runtime pkg manager  npm@latest --force, then plain     warn
    5  application          gemini-cli --force, then plain     warn
    6  dependencies         global, and local if package.json  fatal
    7  integration          gemini /ide enable                 best effort
    8  bulk refresh         npm update -g (policy-driven)      warn
"""

from __future__ import annotations

from dataclasses import dataclass, field

from gemini_updater.adapters.base import PlatformAdapter
from gemini_updater.core.config.loader import UpdaterConfig
from gemini_updater.core.models.action import PHASE_ORDER, StepPhase, UpdateStep

GCLOUD_UPDATE = ["gcloud", "components", "update", "--quiet"]


@dataclass
class MachineFacts:
    """Read-only observations that shape the plan."""

    cloud_sdk_installed: bool = False
    local_manifest_dir: str | None = None          # directory holding package.json
    global_packages: list[str] | None = None       # only needed for exclusions
    notes: list[str] = field(default_factory=list)


def _phase_steps(adapter_commands, phase: StepPhase) -> list[UpdateStep]:
    return [
        UpdateStep(name=cmd.description, phase=phase, command=list(cmd.argv))
        for cmd in adapter_commands
    ]


def _force_then_plain(name: str, phase: StepPhase, base: list[str]) -> UpdateStep:
    return UpdateStep(
        name=name,
        phase=phase,
        command=[*base, "--force"],
        fallback=list(base),
        allow_failure=True,
    )


def cloud_sdk_steps(adapter: PlatformAdapter, facts: MachineFacts) -> list[UpdateStep]:
    if facts.cloud_sdk_installed:
        return [UpdateStep(
            name="Updating Google Cloud SDK components",
            phase=StepPhase.CLOUD_SDK,
            command=list(GCLOUD_UPDATE),
        )]

    steps = _phase_steps(adapter.cloud_sdk_install_commands(), StepPhase.CLOUD_SDK)
    steps.append(UpdateStep(
        name="Updating Google Cloud SDK components after installation",
        phase=StepPhase.CLOUD_SDK,
        command=list(GCLOUD_UPDATE),
        allow_failure=True,
        requires="gcloud",
        remediation=["Open a new shell and run 'gcloud components update --quiet'"],
    ))
    return steps


def dependency_steps(config: UpdaterConfig, facts: MachineFacts) -> list[UpdateStep]:
    packages = list(config.dependency_packages)
    if not packages:
        return []

    steps = [UpdateStep(
        name="Installing/updating dependency packages globally (force reinstall)",
        phase=StepPhase.DEPENDENCIES,
        command=["npm", "install", "-g", *packages, "--force"],
    )]
    if facts.local_manifest_dir is not None:
        steps.append(UpdateStep(
            name="Installing/updating dependency packages locally (force reinstall)",
            phase=StepPhase.DEPENDENCIES,
            command=["npm", "install", *packages, "--force"],
            cwd=facts.local_manifest_dir,
        ))
    return steps


def integration_step(config: UpdaterConfig) -> UpdateStep:
    exe = config.gemini_executable
    manual = " ".join([exe, *config.integration_args])
    return UpdateStep(
        name="Enabling Gemini CLI IDE integration",
        phase=StepPhase.INTEGRATION,
        command=[exe, *config.integration_args],
        allow_failure=True,
        best_effort=True,
        requires=exe,
        timeout=config.integration_timeout,
        remediation=[
            "IDE integration may need manual configuration",
            f"Run '{manual}' manually if needed",
        ],
    )


def bulk_refresh_steps(config: UpdaterConfig, facts: MachineFacts) -> list[UpdateStep]:
    policy = config.bulk_refresh
    if policy.mode == "none":
        return []

    if policy.mode == "tracked":
        targets = [config.gemini_package, *config.dependency_packages]
        name = "Updating tracked global npm packages"
    elif policy.exclude:
        excluded = set(policy.exclude)
        if facts.global_packages is None:
            facts.notes.append("Global package listing unavailable; skipping bulk refresh")
            return []
        targets = [p for p in facts.global_packages if p not in excluded]
        if not targets:
            facts.notes.append("Every global package is excluded; skipping bulk refresh")
            return []
        name = "Updating global npm packages (with exclusions)"
    else:
        return [UpdateStep(
            name="Updating all global npm packages (force update)",
            phase=StepPhase.BULK_REFRESH,
            command=["npm", "update", "-g", "--force"],
            allow_failure=True,
        )]

    return [UpdateStep(
        name=name,
        phase=StepPhase.BULK_REFRESH,
        command=["npm", "update", "-g", *targets, "--force"],
        allow_failure=True,
    )]


def build_update_steps(
    config: UpdaterConfig,
    adapter: PlatformAdapter,
    facts: MachineFacts,
) -> list[UpdateStep]:
    """Assemble the full ordered plan for one run."""
    steps: list[UpdateStep] = []

    steps += _phase_steps(adapter.refresh_commands(), StepPhase.PACKAGE_MANAGER)
    steps += cloud_sdk_steps(adapter, facts)
    steps += _phase_steps(adapter.runtime_upgrade_commands(), StepPhase.RUNTIME)
    steps.append(_force_then_plain(
        "Installing/updating npm to latest version",
        StepPhase.RUNTIME_PACKAGE_MANAGER,
        ["npm", "install", "-g", "npm@latest"],
    ))
    steps.append(_force_then_plain(
        "Installing/updating Gemini CLI to latest version",
        StepPhase.APPLICATION,
        ["npm", "install", "-g", f"{config.gemini_package}@latest"],
    ))
    steps += dependency_steps(config, facts)
    steps.append(integration_step(config))
    steps += bulk_refresh_steps(config, facts)

    _check_order(steps)
    return steps


def _check_order(steps: list[UpdateStep]) -> None:
    rank = {phase: i for i, phase in enumerate(PHASE_ORDER)}
    last = -1
    for step in steps:
        current = rank[step.phase]
        if current < last:
            raise ValueError(f"Step '{step.name}' is out of phase order")
        last = current
