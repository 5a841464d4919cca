"""Capability store interface contract.

The registry client, the installer and the document assembler depend on
this Protocol instead of a concrete persistence medium.

Contract guidelines
-------------------

- The **center cache** holds, per registered center, every synced manifest
  plus its template body, whether installed or not.
- The **installed set** is flat and partitioned by capability kind.
- ``commit_installed`` is idempotent: re-committing a name overwrites it.
- Lookups of absent entries raise :class:`~capability_hub.errors.NotFoundError`.
- No method performs locking; callers serialize writes to the same name.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from ..capability.enums import CapabilityKind
from ..capability.manifest import parse_manifest
from ..capability.models import Capability, CenterConfig
from ..capability.template import parse_parameters
from ..errors import CapabilityHubError

_LOGGER = logging.getLogger(__name__)


@runtime_checkable
class CapabilityStore(Protocol):
    """Durable cache of synced and installed capabilities."""

    # Center registry

    def load_center_configs(self) -> List[CenterConfig]:
        """Return registered centers in registration order."""
        ...

    def store_center_configs(self, configs: Sequence[CenterConfig]) -> None:
        """Replace the registered center list."""
        ...

    # Center cache

    def list_centers(self) -> List[str]:
        """Names of centers with a local cache."""
        ...

    def save_center_manifest(self, center: str, name: str, manifest: Mapping[str, Any]) -> None:
        """Persist a synced raw definition manifest."""
        ...

    def load_center_manifest(self, center: str, name: str) -> Dict[str, Any]:
        """Return a synced raw definition manifest."""
        ...

    def save_template(self, center: str, name: str, body: str) -> str:
        """Persist a template body and return its location."""
        ...

    def load_center(self, center: str) -> List[Capability]:
        """Return every capability synced from ``center``."""
        ...

    def remove_center(self, center: str) -> None:
        """Drop the local cache of ``center``."""
        ...

    # Installed set

    def load_installed(self, kind: CapabilityKind) -> List[Capability]:
        """Return installed capabilities of ``kind``."""
        ...

    def load_all_installed(self) -> List[Capability]:
        """Return installed capabilities of every kind."""
        ...

    def find_installed(self, kind: CapabilityKind, name: str) -> Capability:
        """Return one installed capability."""
        ...

    def commit_installed(self, capabilities: Sequence[Capability]) -> int:
        """Persist capabilities into the installed set and return how many were written."""
        ...

    def remove_installed(self, kind: CapabilityKind, name: str) -> None:
        """Remove one installed capability."""
        ...


def capability_from_cache(
    center: str,
    manifest: Mapping[str, Any],
    template_body: Optional[str],
    template_path: str = "",
) -> Capability:
    """Rebuild a synced capability from its cached manifest and template body.

    The cached body wins over an embedded ``template`` so that capabilities
    synced from a ``templateURI`` never require another fetch.
    """
    shell = parse_manifest(manifest)
    body = template_body or shell.template
    return shell.to_capability(
        body,
        parameters=parse_parameters(body),
        template_path=template_path,
        center=center,
    )


def rebuild_center(center: str, entries: Sequence[tuple]) -> List[Capability]:
    """Build capabilities for ``(manifest, body, path)`` entries, skipping broken ones."""
    capabilities: List[Capability] = []
    for manifest, body, path in entries:
        try:
            capabilities.append(capability_from_cache(center, manifest, body, path))
        except (CapabilityHubError, ValueError) as exc:
            _LOGGER.warning("CapabilityStore: skipping cached manifest in center=%s error=%s", center, exc)
    return capabilities
