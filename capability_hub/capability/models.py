"""Capability and parameter models.

Pydantic models for the in-memory and persisted representation of a
capability definition (workload, trait or scope) plus the small value
objects hanging off it.

Design guidelines
-----------------
- JSON field names are camelCase (``crdName``, ``appliesTo``,
  ``resourceKindInfo``); Python attributes are snake_case.
- ``Capability`` refuses construction without a template body.
- ``resource_kind_info`` is only set by code that performed cluster discovery.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import CapabilityKind, InstallStatus, ParameterKind

DESCRIPTION_UNDEFINED = "description not defined"


def _to_camel(s: str) -> str:
    """Convert snake_case to camelCase for JSON aliasing."""
    parts = s.split("_")
    return parts[0] + "".join(p.capitalize() or "_" for p in parts[1:])


class BaseSchema(BaseModel):
    """Shared base for all capability models.

    - Sets strict handling for extra fields
    - Enables populate_by_name for using either snake_case or camelCase
    - Uses a snake->camel alias generator for JSON interop
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        alias_generator=_to_camel,
    )


class Parameter(BaseSchema):
    """Typed parameter declared by a capability template.

    User input is looked up by ``alias`` when set, otherwise by ``name``; the
    bound value is always stored under ``name``.
    """

    name: str = Field(..., description="Canonical parameter name used in documents.")
    alias: Optional[str] = Field(default=None, description="Alternative input key.")
    kind: ParameterKind = Field(default=ParameterKind.other, description="Declared value kind.")
    required: bool = Field(default=False, description="Whether a value must be supplied.")
    default: Optional[Any] = Field(default=None, description="Default declared by the template.")
    usage: Optional[str] = Field(default=None, description="Help text from the template.")
    short: Optional[str] = Field(default=None, description="Short flag from the template.")

    @property
    def lookup_key(self) -> str:
        return self.alias or self.name


class InstallDescriptor(BaseSchema):
    """Chart installation spec passed verbatim to the chart provisioner."""

    name: str
    version: str = ""
    url: str = ""
    namespace: str = ""


class Source(BaseSchema):
    """Provenance of an installed capability."""

    center_name: Optional[str] = None
    chart_name: Optional[str] = None


class ResourceKindInfo(BaseSchema):
    """API version and kind backing a capability, from cluster discovery."""

    api_version: str
    kind: str


class DefinitionReference(BaseSchema):
    """Reference to the resource a definition points at (e.g. ``deployments.apps``)."""

    name: str
    version: Optional[str] = None


class Capability(BaseSchema):
    """In-memory representation of one workload/trait/scope definition.

    Lifecycle:

    - created by the registry client during sync (``center`` set, ``status`` unset),
    - promoted by the installer (``status=installed``, ``resource_kind_info`` set,
      ``source.center_name`` recording provenance, ``center`` cleared),
    - destroyed by uninstall.
    """

    name: str = Field(..., description="Identity within its kind.")
    kind: CapabilityKind
    crd_name: str = Field(default="", description="Backing resource identifier, e.g. ``deployments.apps``.")
    description: str = DESCRIPTION_UNDEFINED
    applies_to: List[str] = Field(default_factory=list, description="Trait only: ``group/Version.Kind`` patterns.")
    install: Optional[InstallDescriptor] = None
    source: Optional[Source] = None
    resource_kind_info: Optional[ResourceKindInfo] = None
    parameters: List[Parameter] = Field(default_factory=list)
    template_body: str = Field(..., description="Raw template text.")
    template_path: str = ""
    center: Optional[str] = None
    status: Optional[InstallStatus] = None

    @model_validator(mode="after")
    def _check_invariants(self) -> "Capability":
        if not self.template_body or not self.template_body.strip():
            raise ValueError(f"template not exist in definition '{self.name}'")
        if self.applies_to and self.kind is not CapabilityKind.trait:
            raise ValueError(f"appliesTo is only valid for traits, got kind '{self.kind.value}' for '{self.name}'")
        return self

    @property
    def reference(self) -> DefinitionReference:
        return DefinitionReference(name=self.crd_name)

    def parameter(self, name: str) -> Optional[Parameter]:
        """Return the parameter declared as ``name`` (or aliased as ``name``)."""
        for p in self.parameters:
            if p.name == name or p.alias == name:
                return p
        return None


class CenterConfig(BaseSchema):
    """Registered capability center; unique by ``name``."""

    name: str
    address: str
    token: Optional[str] = None
