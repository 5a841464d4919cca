"""Remote capability centers.

- ``transport``: ``RegistryTransport`` protocol and the ``httpx`` implementation.
- ``client``: ``RegistryClient.sync`` pulls one center into the local store.
- ``centers``: ``CenterManager`` registers, syncs and removes centers.
"""

from .centers import CenterManager
from .client import RegistryClient, SyncResult
from .transport import HttpRegistryTransport, RegistryTransport

__all__ = [
    "CenterManager",
    "HttpRegistryTransport",
    "RegistryClient",
    "RegistryTransport",
    "SyncResult",
]
