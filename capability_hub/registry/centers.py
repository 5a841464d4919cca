"""Capability center bookkeeping.

Keeps the list of registered centers (``{name, address, token}``, unique by
name) and drives :class:`RegistryClient` syncs against them.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..capability.models import CenterConfig
from ..cluster.base import KindResolver
from ..errors import CapabilityHubError, NotFoundError
from ..store.base import CapabilityStore
from .client import RegistryClient, SyncResult
from .transport import RegistryTransport

_LOGGER = logging.getLogger(__name__)


class CenterManager:
    """Registers, syncs and removes capability centers.

    With a ``resolver`` every sync resolves the resource kind of each parsed
    capability and fails as a whole when one cannot be resolved. Without
    one, syncs only cache manifests and templates; the resource kind is then
    first resolved when the capability is installed.
    """

    def __init__(
        self,
        store: CapabilityStore,
        transport: RegistryTransport,
        *,
        resolver: Optional[KindResolver] = None,
    ) -> None:
        self._store = store
        self._transport = transport
        self._resolver = resolver

    def client_for(self, center: CenterConfig) -> RegistryClient:
        """Build the registry client for one center."""
        return RegistryClient(center, store=self._store, transport=self._transport, resolver=self._resolver)

    def list_centers(self) -> List[CenterConfig]:
        return self._store.load_center_configs()

    def get_center(self, name: str) -> CenterConfig:
        for c in self._store.load_center_configs():
            if c.name == name:
                return c
        raise NotFoundError("capability center", name)

    def add_center(self, name: str, address: str, token: Optional[str] = None) -> SyncResult:
        """Register (or replace) a center and sync it immediately.

        Re-adding an existing name updates that entry in place instead of
        appending a duplicate.
        """
        config = CenterConfig(name=name, address=address, token=token)
        centers = self._store.load_center_configs()
        for idx, c in enumerate(centers):
            if c.name == name:
                centers[idx] = config
                break
        else:
            centers.append(config)
        self._store.store_center_configs(centers)
        _LOGGER.info("CenterManager: registered center=%s address=%s", name, address)
        return self.client_for(config).sync()

    def sync_center(self, name: Optional[str] = None) -> List[SyncResult]:
        """Sync one named center, or every registered center when ``name`` is empty.

        Raises:
            CapabilityHubError: When no center is registered.
            NotFoundError: When ``name`` is not registered.
        """
        centers = self._store.load_center_configs()
        if not centers:
            raise CapabilityHubError("no capability center configured")
        if name:
            centers = [self.get_center(name)]
        return [self.client_for(c).sync() for c in centers]

    def remove_center(self, name: str) -> str:
        """Drop a center's local cache and its registration.

        Installed capabilities and cluster definitions coming from the
        center are left untouched.
        """
        try:
            self._store.remove_center(name)
        except NotFoundError as e:
            raise NotFoundError("capability center", name, hint="it has not successfully synced") from e
        centers = [c for c in self._store.load_center_configs() if c.name != name]
        self._store.store_center_configs(centers)
        return f"{name} capability center removed successfully"
