"""Registry client: syncs one capability center into the local store.

For each manifest published by the center the client

1. parses the manifest into a capability shell,
2. obtains the template body (embedded ``template`` or fetched ``templateURI``),
3. evaluates the body's ``parameter`` block,
4. caches the body as ``<name>.<templateExt>`` and the manifest in the center cache.

Failures in steps 1 to 3 are isolated: the manifest is skipped and the error
is returned alongside the successful count. When a kind resolver is
configured, resource kind resolution then runs for every parsed capability
and any failure aborts the whole sync before anything is cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from ..capability.manifest import DefinitionManifest, parse_manifest
from ..capability.models import Capability, CenterConfig
from ..capability.template import parse_parameters
from ..cluster.base import KindResolver
from ..cluster.discovery import resolve_resource_kind
from ..errors import CapabilityHubError, RemoteFetchError, TemplateError
from ..store.base import CapabilityStore
from .transport import RegistryTransport

_LOGGER = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of syncing one center.

    Attributes
    ----------
    center:
        Name of the synced center.
    count:
        Number of capabilities written to the center cache.
    errors:
        Per-manifest failures; the corresponding manifests were skipped.
    capabilities:
        Capabilities written to the center cache.
    """

    center: str
    count: int = 0
    errors: List[CapabilityHubError] = field(default_factory=list)
    capabilities: List[Capability] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class RegistryClient:
    """Fetches capability manifests and template bodies from one center."""

    def __init__(
        self,
        center: CenterConfig,
        *,
        store: CapabilityStore,
        transport: RegistryTransport,
        resolver: Optional[KindResolver] = None,
    ) -> None:
        """
        Args:
            center: The registered center to read.
            store: Local store receiving templates and manifests.
            transport: Remote access to the center.
            resolver: Optional discovery used to validate every parsed
                capability's resource kind.
        """
        self.center = center
        self._store = store
        self._transport = transport
        self._resolver = resolver

    def _template_body(self, shell: DefinitionManifest) -> str:
        if shell.template_uri:
            body = self._transport.fetch_body(shell.template_uri)
            return body.decode("utf-8")
        return shell.template

    def _sync_one(self, raw: Any) -> Tuple[DefinitionManifest, Capability]:
        shell = parse_manifest(raw)
        try:
            body = self._template_body(shell)
        except UnicodeDecodeError as e:
            raise TemplateError(f"template of '{shell.name}' is not UTF-8 text") from e
        if not body.strip():
            raise TemplateError(f"template not exist in definition '{shell.name}'")
        try:
            capability = shell.to_capability(body, parameters=parse_parameters(body), center=self.center.name)
        except ValidationError as e:
            raise TemplateError(f"invalid capability '{shell.name}': {e}") from e
        return shell, capability

    def sync(self) -> SyncResult:
        """Sync every capability of the center into the local cache.

        Nothing is written to the store until every parsed capability has
        passed resource kind resolution.

        Returns:
            ``SyncResult`` with the committed count and per-item errors.

        Raises:
            RemoteFetchError: When the manifest index itself cannot be fetched.
            ResourceKindResolutionError: When a resolver is configured and any
                parsed capability's resource kind cannot be resolved.
        """
        name = self.center.name
        raws = self._transport.fetch_manifests(self.center.address, self.center.token)
        result = SyncResult(center=name)
        synced: List[Tuple[DefinitionManifest, Capability]] = []
        for index, raw in enumerate(raws):
            try:
                synced.append(self._sync_one(raw))
            except (RemoteFetchError, TemplateError) as e:
                _LOGGER.warning("RegistryClient: skipping manifest #%d of center=%s: %s", index, name, e)
                result.errors.append(e)

        if self._resolver is not None:
            for _, capability in synced:
                resolve_resource_kind(self._resolver, capability)

        for shell, capability in synced:
            path = self._store.save_template(name, shell.name, capability.template_body)
            self._store.save_center_manifest(name, shell.name, shell.raw)
            result.capabilities.append(capability.model_copy(update={"template_path": path}))
        result.count = len(result.capabilities)
        _LOGGER.info(
            "RegistryClient: synced center=%s capabilities=%d errors=%d", name, result.count, len(result.errors)
        )
        return result
