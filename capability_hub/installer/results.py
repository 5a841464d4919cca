"""Typed partial-progress results for install and uninstall.

Install and uninstall are sequences of independently failing steps across
three boundaries (chart tooling, cluster, local store) with no rollback.
Instead of raising mid-way, the installer returns a result recording which
steps completed, which step failed and why, so retry and cleanup tooling
can decide what to reconcile. ``raise_for_error`` re-raises the failure for
callers that prefer exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..capability.models import Capability
from ..errors import CapabilityHubError


class InstallStep(str, Enum):
    """Ordered steps of an install."""

    lookup = "lookup"
    chart_provisioning = "chart_provisioning"
    resolving = "resolving"
    registering = "registering"
    committing = "committing"


class UninstallStep(str, Enum):
    """Ordered steps of an uninstall."""

    lookup = "lookup"
    deregistering = "deregistering"
    chart_removal = "chart_removal"
    local_removal = "local_removal"


@dataclass
class _StepResult:
    capability_name: str
    error: Optional[CapabilityHubError] = None
    capability: Optional[Capability] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise the recorded error, if any."""
        if self.error is not None:
            raise self.error


@dataclass
class InstallResult(_StepResult):
    """Outcome of ``CapabilityInstaller.install``.

    Attributes
    ----------
    center:
        Center the capability was installed from.
    completed:
        Steps that finished successfully, in order.
    failed_step:
        Step that failed, or ``None`` on success.
    already_registered:
        ``True`` when the cluster already held the definition.
    """

    center: str = ""
    completed: List[InstallStep] = field(default_factory=list)
    failed_step: Optional[InstallStep] = None
    already_registered: bool = False

    def fail(self, step: InstallStep, error: CapabilityHubError) -> "InstallResult":
        self.failed_step = step
        self.error = error
        return self

    @property
    def message(self) -> str:
        if self.ok:
            return f"Successfully installed capability {self.capability_name} from {self.center}"
        return str(self.error)


@dataclass
class UninstallResult(_StepResult):
    """Outcome of ``CapabilityInstaller.uninstall``.

    A failure after ``deregistering`` leaves the cluster and the local store
    out of sync; callers must reconcile manually.
    """

    completed: List[UninstallStep] = field(default_factory=list)
    failed_step: Optional[UninstallStep] = None

    def fail(self, step: UninstallStep, error: CapabilityHubError) -> "UninstallResult":
        self.failed_step = step
        self.error = error
        return self

    @property
    def message(self) -> str:
        if self.ok:
            return f"{self.capability_name} removed successfully"
        return str(self.error)


@dataclass
class ImportResult:
    """Outcome of importing definitions already registered in the cluster."""

    capabilities: List[Capability] = field(default_factory=list)
    errors: List[CapabilityHubError] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.capabilities)
