"""Read-side queries over installed capabilities and center caches."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..errors import NotFoundError
from ..store.base import CapabilityStore
from .applicability import narrow_traits, resolve
from .enums import CapabilityKind, InstallStatus
from .models import Capability
from .template import parameters_to_json_schema

_LOGGER = logging.getLogger(__name__)


class CapabilityCatalog:
    """Lists and looks up capabilities for presentation layers."""

    def __init__(self, store: CapabilityStore) -> None:
        self._store = store

    def list_workloads(self) -> List[Capability]:
        return self._store.load_installed(CapabilityKind.workload)

    def list_traits(self, workload_name: Optional[str] = None) -> List[Capability]:
        """Installed traits with ``applies_to`` converted to workload names.

        With ``workload_name``, only traits applicable to that workload are
        returned.
        """
        workloads = self._store.load_installed(CapabilityKind.workload)
        traits = self._store.load_installed(CapabilityKind.trait)
        return narrow_traits(traits, workloads, workload_name)

    def get_trait(self, trait_name: str, workload_name: Optional[str] = None) -> Capability:
        """Return the single installed trait named ``trait_name``.

        Raises:
            NotFoundError: Unless exactly one trait matches.
        """
        matches = [t for t in self.list_traits(workload_name) if t.name == trait_name]
        if len(matches) != 1:
            hint = f"applicable to workload '{workload_name}'" if workload_name else None
            raise NotFoundError("trait", trait_name, hint=hint)
        return matches[0]

    def get_definition_schema(self, name: str) -> Dict[str, Any]:
        """JSON Schema of an installed workload's or trait's parameter block."""
        for kind in (CapabilityKind.workload, CapabilityKind.trait):
            for cap in self._store.load_installed(kind):
                if cap.name == name:
                    return parameters_to_json_schema(cap.parameters)
        raise NotFoundError("capability", name)

    def list_center_capabilities(self, center: Optional[str] = None) -> List[Capability]:
        """Capabilities synced from ``center`` (or from every cached center).

        Each entry reports ``status`` against the installed set and a trait's
        ``applies_to`` resolved against installed plus synced workloads.
        """
        centers = [center] if center else self._store.list_centers()
        installed = self._store.load_all_installed()
        installed_workloads = [c for c in installed if c.kind is CapabilityKind.workload]
        listed: List[Capability] = []
        for name in centers:
            synced = self._store.load_center(name)
            workloads = installed_workloads + [c for c in synced if c.kind is CapabilityKind.workload]
            for cap in synced:
                update: Dict[str, Any] = {"center": name, "status": _install_status(cap, name, installed)}
                if cap.kind is CapabilityKind.trait:
                    update["applies_to"] = resolve(cap.applies_to, workloads)
                listed.append(cap.model_copy(update=update))
        _LOGGER.debug("CapabilityCatalog: listed %d center capabilities from %s", len(listed), centers)
        return listed


def _install_status(cap: Capability, center: str, installed: List[Capability]) -> InstallStatus:
    for i in installed:
        if i.source is None or i.source.center_name != center:
            continue
        if i.name == cap.name and i.crd_name == cap.crd_name:
            return InstallStatus.installed
    return InstallStatus.uninstalled
