"""Application document models.

An application document maps component names to a workload type, the
workload's field values and the traits attached to the component::

    name: shop
    services:
      frontend:
        type: webservice
        image: nginx
        port: 80
        route:
          domain: shop.example.com

On disk (the untyped form) a component is a single mapping: the reserved
``type`` key names the workload, scalar keys are workload fields and
mapping-valued keys are trait sub-documents. In memory each component is a
:class:`ComponentDocument` with the three parts kept apart.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Union

from pydantic import Field, StrictBool, StrictFloat, StrictInt, StrictStr

from ..capability.models import BaseSchema
from ..errors import DocumentValidationError, NotFoundError

Value = Union[StrictBool, StrictInt, StrictFloat, StrictStr]

TYPE_KEY = "type"
SERVICES_KEY = "services"


class ComponentDocument(BaseSchema):
    """One component: workload type, workload fields and trait sub-documents."""

    type: str = ""
    fields: Dict[str, Value] = Field(default_factory=dict)
    traits: Dict[str, Dict[str, Value]] = Field(default_factory=dict)

    def to_untyped(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {TYPE_KEY: self.type}
        data.update(self.fields)
        for name, values in self.traits.items():
            data[name] = dict(values)
        return data

    @classmethod
    def from_untyped(cls, component: str, data: Mapping[str, Any]) -> "ComponentDocument":
        """Split an untyped component mapping into its typed parts.

        Raises:
            DocumentValidationError: On values outside ``int | str | bool | float``.
        """
        fields: Dict[str, Any] = {}
        traits: Dict[str, Dict[str, Any]] = {}
        for key, value in data.items():
            if key == TYPE_KEY:
                continue
            if isinstance(value, Mapping):
                traits[key] = dict(value)
            elif isinstance(value, (bool, int, float, str)):
                fields[key] = value
            else:
                raise DocumentValidationError(
                    f"component '{component}' field '{key}' has unsupported value of type {type(value).__name__}"
                )
        doc_type = data.get(TYPE_KEY, "")
        if not isinstance(doc_type, str):
            raise DocumentValidationError(f"component '{component}' type must be a string")
        try:
            return cls(type=doc_type, fields=fields, traits=traits)
        except ValueError as e:
            raise DocumentValidationError(f"component '{component}' is invalid: {e}") from e


class ApplicationDocument(BaseSchema):
    """Declarative application assembled from installed capabilities."""

    name: str
    env: str = "default"
    components: Dict[str, ComponentDocument] = Field(default_factory=dict)

    def validate_document(self) -> None:
        """Check the whole document.

        Raises:
            DocumentValidationError: When the name is empty, a component has
                no workload type, or a trait collides with a workload field.
        """
        if not self.name:
            raise DocumentValidationError("application name must not be empty")
        for name, comp in self.components.items():
            if not comp.type:
                raise DocumentValidationError(f"component '{name}' must have a workload type")
            for trait in comp.traits:
                if trait == TYPE_KEY:
                    raise DocumentValidationError(f"component '{name}' cannot attach a trait named '{TYPE_KEY}'")
                if trait in comp.fields:
                    raise DocumentValidationError(
                        f"component '{name}' trait '{trait}' collides with a workload field of the same name"
                    )

    def get_component(self, name: str) -> ComponentDocument:
        try:
            return self.components[name]
        except KeyError:
            raise NotFoundError("component", name, hint=f"in application '{self.name}'") from None

    def set_workload(self, component: str, workload_type: str, values: Mapping[str, Any]) -> None:
        """Set the component's workload type and merge ``values`` into its fields."""
        comp = self.components.setdefault(component, ComponentDocument())
        comp.type = workload_type
        comp.fields.update(values)

    def set_trait(self, component: str, trait: str, values: Mapping[str, Any]) -> None:
        """Merge ``values`` into the component's ``trait`` sub-document.

        A missing component is created without a type, which fails
        validation.
        """
        comp = self.components.setdefault(component, ComponentDocument())
        comp.traits.setdefault(trait, {}).update(values)

    def remove_trait(self, component: str, trait: str) -> None:
        comp = self.components.get(component)
        if comp is not None:
            comp.traits.pop(trait, None)

    def remove_component(self, component: str) -> None:
        self.components.pop(component, None)

    def to_untyped(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            SERVICES_KEY: {name: comp.to_untyped() for name, comp in self.components.items()},
        }

    @classmethod
    def from_untyped(cls, data: Mapping[str, Any], *, env: str = "default") -> "ApplicationDocument":
        services = data.get(SERVICES_KEY) or {}
        if not isinstance(services, Mapping):
            raise DocumentValidationError(f"'{SERVICES_KEY}' must be a mapping of components")
        return cls(
            name=str(data.get("name") or ""),
            env=env,
            components={name: ComponentDocument.from_untyped(name, comp or {}) for name, comp in services.items()},
        )
