"""Collaborator contracts for the target cluster and chart tooling.

- ``ClusterClient`` / ``KindResolver``: cluster resource API and discovery.
- ``ChartProvisioner``: chart install/uninstall; ``HelmCliProvisioner`` wraps
  the ``helm`` binary.
"""

from .base import ChartProvisioner, ClusterClient, KindResolver
from .discovery import resolve_resource_kind
from .helm import HelmCliProvisioner

__all__ = [
    "ChartProvisioner",
    "ClusterClient",
    "HelmCliProvisioner",
    "KindResolver",
    "resolve_resource_kind",
]
