"""Capability definitions: models, template schemas and applicability.

A *capability* is an installable workload, trait or scope definition.

- ``models``: pydantic models (``Capability``, ``Parameter``, ``CenterConfig``...).
- ``template``: evaluates a template's ``parameter`` block into ``Parameter`` items.
- ``manifest``: parses raw definition manifests published by centers.
- ``applicability``: resolves trait ``appliesTo`` patterns to workload names.
- ``catalog``: read-side queries over the installed set and center caches.
"""

from .applicability import narrow_traits, parse_applies_to, resolve
from .enums import CapabilityKind, InstallStatus, ParameterKind
from .models import (
    Capability,
    CenterConfig,
    DefinitionReference,
    InstallDescriptor,
    Parameter,
    ResourceKindInfo,
    Source,
)

__all__ = [
    "Capability",
    "CapabilityKind",
    "CenterConfig",
    "DefinitionReference",
    "InstallDescriptor",
    "InstallStatus",
    "Parameter",
    "ParameterKind",
    "ResourceKindInfo",
    "Source",
    "narrow_traits",
    "parse_applies_to",
    "resolve",
]
