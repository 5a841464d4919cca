"""Definition manifest parsing.

A capability center publishes raw definition objects, one per capability::

    apiVersion: core.oam.dev/v1alpha2
    kind: TraitDefinition
    metadata:
      name: route
      annotations:
        definition.oam.dev/description: "Configures external access"
    spec:
      appliesToWorkloads: ["apps/v1.Deployment"]
      definitionRef:
        name: routes.standard.oam.dev
      extension:
        install:
          helm: {name: route-controller, url: ..., version: 0.1.0}
        template: |
          parameter: { domain: string }
        # or: templateURI: https://...

This module turns such a manifest into a :class:`DefinitionManifest` shell
and, once the template body is known, into a :class:`Capability`. It also
builds the cluster objects submitted or deleted by the installer.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from ..errors import TemplateError
from .enums import CapabilityKind
from .models import DESCRIPTION_UNDEFINED, Capability, InstallDescriptor, Parameter

DEFINITION_API_VERSION = "core.oam.dev/v1alpha2"
DESCRIPTION_ANNOTATION = "definition.oam.dev/description"

_KINDS_BY_DEFINITION = {kind.definition_kind: kind for kind in CapabilityKind}


@dataclass(frozen=True)
class DefinitionManifest:
    """Capability shell parsed from a raw definition manifest."""

    name: str
    kind: CapabilityKind
    crd_name: str
    description: str = DESCRIPTION_UNDEFINED
    applies_to: List[str] = field(default_factory=list)
    install: Optional[InstallDescriptor] = None
    template: str = ""
    template_uri: str = ""
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_capability(
        self,
        template_body: str,
        *,
        parameters: List[Parameter],
        template_path: str = "",
        center: Optional[str] = None,
    ) -> Capability:
        """Build the capability once the template body has been fetched."""
        return Capability(
            name=self.name,
            kind=self.kind,
            crd_name=self.crd_name,
            description=self.description,
            applies_to=list(self.applies_to) if self.kind is CapabilityKind.trait else [],
            install=self.install,
            parameters=parameters,
            template_body=template_body,
            template_path=template_path,
            center=center,
        )


def _description(annotations: Any) -> str:
    if not isinstance(annotations, Mapping):
        return DESCRIPTION_UNDEFINED
    return str(annotations.get(DESCRIPTION_ANNOTATION, DESCRIPTION_UNDEFINED))


def _section(value: Any, path: str, name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise TemplateError(f"{path} of definition '{name}' must be a mapping, got {type(value).__name__}")
    return value


def _install_descriptor(extension: Mapping[str, Any], name: str) -> Optional[InstallDescriptor]:
    install = _section(extension.get("install"), "spec.extension.install", name)
    helm = _section(install.get("helm"), "spec.extension.install.helm", name)
    if not helm:
        return None
    try:
        return InstallDescriptor(
            name=helm.get("name", ""),
            version=helm.get("version", ""),
            url=helm.get("url", ""),
            namespace=helm.get("namespace", ""),
        )
    except ValidationError as e:
        raise TemplateError(f"invalid install descriptor in definition '{name}': {e}") from e


def parse_manifest(raw: Mapping[str, Any]) -> DefinitionManifest:
    """Parse a raw definition object.

    Raises:
        TemplateError: If the manifest is not a workload/trait/scope
            definition, has no name, has a malformed section, or carries
            neither ``template`` nor ``templateURI``.
    """
    if not isinstance(raw, Mapping):
        raise TemplateError(f"definition manifest must be a mapping, got {type(raw).__name__}")
    kind = _KINDS_BY_DEFINITION.get(str(raw.get("kind", "")))
    if kind is None:
        raise TemplateError(f"unsupported definition kind '{raw.get('kind')}'")
    metadata = raw.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        raise TemplateError(f"{kind.definition_kind} metadata must be a mapping, got {type(metadata).__name__}")
    name = metadata.get("name")
    if not name or not isinstance(name, str):
        raise TemplateError(f"{kind.definition_kind} without metadata.name")

    spec = _section(raw.get("spec"), "spec", name)
    extension = _section(spec.get("extension"), "spec.extension", name)
    template = extension.get("template") or ""
    template_uri = extension.get("templateURI") or ""
    if not isinstance(template, str) or not isinstance(template_uri, str):
        raise TemplateError(f"template of definition '{name}' must be a string")
    if not template and not template_uri:
        raise TemplateError(f"template not exist in definition '{name}'")

    applies_to = spec.get("appliesToWorkloads") or []
    if kind is CapabilityKind.trait and not isinstance(applies_to, list):
        raise TemplateError(f"spec.appliesToWorkloads of definition '{name}' must be a list")

    return DefinitionManifest(
        name=name,
        kind=kind,
        crd_name=str(_section(spec.get("definitionRef"), "spec.definitionRef", name).get("name", "")),
        description=_description(metadata.get("annotations")),
        applies_to=[str(a) for a in applies_to] if kind is CapabilityKind.trait else [],
        install=_install_descriptor(extension, name),
        template=template,
        template_uri=template_uri,
        raw=copy.deepcopy(dict(raw)),
    )


def definition_object(raw: Mapping[str, Any], namespace: str) -> Dict[str, Any]:
    """Copy of ``raw`` placed into ``namespace``, ready to submit to the cluster."""
    obj = copy.deepcopy(dict(raw))
    obj.setdefault("apiVersion", DEFINITION_API_VERSION)
    metadata = dict(obj.get("metadata") or {})
    metadata["namespace"] = namespace
    obj["metadata"] = metadata
    return obj


def definition_stub(capability: Capability, namespace: str) -> Dict[str, Any]:
    """Minimal object identifying a capability's cluster definition for deletion."""
    return {
        "apiVersion": DEFINITION_API_VERSION,
        "kind": capability.kind.definition_kind,
        "metadata": {"name": capability.name, "namespace": namespace},
    }
