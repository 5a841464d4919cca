"""Resource kind discovery helper shared by sync and install."""

from __future__ import annotations

from ..capability.models import Capability, ResourceKindInfo
from ..errors import ResourceKindResolutionError
from .base import KindResolver

_NO_MATCHES = "no matches for "


def resolve_resource_kind(resolver: KindResolver, capability: Capability) -> ResourceKindInfo:
    """Resolve the resource kind backing ``capability``.

    Raises:
        ResourceKindResolutionError: On any discovery failure. When discovery
            reports an absent API group (``no matches for X``) the message
            names the missing provider instead (``expected provider: X``).
    """
    try:
        return resolver.resolve_kind(capability.reference)
    except Exception as e:
        message = str(e)
        if _NO_MATCHES in message:
            message = f"expected provider: {message.split(_NO_MATCHES, 1)[1]}"
        raise ResourceKindResolutionError(f"installing capability '{capability.name}'... {message}") from e
