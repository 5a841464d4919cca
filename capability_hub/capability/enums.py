"""Domain enums for capability models."""

from __future__ import annotations

from enum import Enum


class CapabilityKind(str, Enum):
    """
    Kind of an installable capability definition.

    The kind decides which cluster definition object backs the capability
    and which partition of the installed set it lives in.
    """

    workload = "workload"
    trait = "trait"
    scope = "scope"

    @property
    def definition_kind(self) -> str:
        """Cluster object kind registered for this capability kind."""
        return _DEFINITION_KINDS[self]

    @property
    def installed_dir(self) -> str:
        """Name of the installed-set partition (``workloads``/``traits``/``scopes``)."""
        return f"{self.value}s"


_DEFINITION_KINDS = {
    CapabilityKind.workload: "WorkloadDefinition",
    CapabilityKind.trait: "TraitDefinition",
    CapabilityKind.scope: "ScopeDefinition",
}


class ParameterKind(str, Enum):
    """Value kinds a capability parameter may declare."""

    int = "int"
    string = "string"
    bool = "bool"
    float = "float"
    other = "other"  # Structs, lists and anything not bindable from a flag.


class InstallStatus(str, Enum):
    """Install status reported for synced capabilities."""

    installed = "installed"
    uninstalled = "uninstalled"
