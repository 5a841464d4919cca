"""Cluster and chart collaborator protocols.

The hub never talks to a cluster or to a chart tool directly. It depends on
two small contracts that deployments implement with their client of choice:

- :class:`ClusterClient`: ``list``/``create``/``delete`` over definition
  objects plus ``resolve_kind`` discovery.
- :class:`ChartProvisioner`: install and uninstall supporting charts.

Error contract
--------------
- ``create`` raises :class:`~capability_hub.errors.AlreadyExistsError` when the
  object is already registered.
- ``delete`` raises :class:`~capability_hub.errors.NotFoundError` when the
  object is absent.
- ``resolve_kind`` raises any exception on failure; a message containing
  ``"no matches for "`` signals an absent API group.
- Chart operations raise :class:`~capability_hub.errors.ProvisionError`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from ..capability.models import DefinitionReference, InstallDescriptor, ResourceKindInfo


@runtime_checkable
class ClusterClient(Protocol):
    """Minimal cluster resource API used by the installer."""

    def list(self, kind: str, namespace: str, selector: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        """List objects of ``kind`` in ``namespace`` matching the label ``selector``."""
        ...

    def create(self, obj: Dict[str, Any]) -> None:
        """Create ``obj``; raise ``AlreadyExistsError`` on collision."""
        ...

    def delete(self, obj: Dict[str, Any]) -> None:
        """Delete ``obj``; raise ``NotFoundError`` when absent."""
        ...

    def resolve_kind(self, reference: DefinitionReference) -> ResourceKindInfo:
        """Resolve a definition reference to its API version and kind."""
        ...


@runtime_checkable
class KindResolver(Protocol):
    """Discovery-only view of :class:`ClusterClient`, used during sync."""

    def resolve_kind(self, reference: DefinitionReference) -> ResourceKindInfo: ...


@runtime_checkable
class ChartProvisioner(Protocol):
    """Installs and removes the charts backing capability controllers."""

    def install(self, descriptor: InstallDescriptor) -> None:
        """Install the chart described by ``descriptor``."""
        ...

    def uninstall(self, name: str, namespace: str, release_label: str) -> None:
        """Uninstall release ``name`` from ``namespace``."""
        ...
