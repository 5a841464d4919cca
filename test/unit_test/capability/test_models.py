from __future__ import annotations

import pytest
from pydantic import ValidationError

from capability_hub.capability.enums import CapabilityKind, InstallStatus, ParameterKind
from capability_hub.capability.models import Capability, CenterConfig, Parameter, ResourceKindInfo, Source


def _capability(**overrides) -> Capability:
    data = {"name": "webservice", "kind": CapabilityKind.workload, "crd_name": "deployments.apps"}
    data.update(overrides)
    data.setdefault("template_body", "parameter: {}")
    return Capability(**data)


def test_capability_requires_template_body() -> None:
    with pytest.raises(ValidationError, match="template not exist"):
        _capability(template_body="   ")

    with pytest.raises(ValidationError):
        Capability(name="webservice", kind=CapabilityKind.workload)


def test_applies_to_only_valid_for_traits() -> None:
    with pytest.raises(ValidationError, match="appliesTo is only valid for traits"):
        _capability(applies_to=["apps/v1.Deployment"])

    trait = _capability(name="route", kind=CapabilityKind.trait, applies_to=["apps/v1.Deployment"])
    assert trait.applies_to == ["apps/v1.Deployment"]


def test_capability_serializes_with_camel_case_aliases() -> None:
    cap = _capability(
        resource_kind_info=ResourceKindInfo(api_version="apps/v1", kind="Deployment"),
        source=Source(center_name="core"),
        status=InstallStatus.installed,
    )
    data = cap.model_dump(mode="json", by_alias=True, exclude_none=True)

    assert data["crdName"] == "deployments.apps"
    assert data["resourceKindInfo"] == {"apiVersion": "apps/v1", "kind": "Deployment"}
    assert data["source"] == {"centerName": "core"}
    assert data["status"] == "installed"
    assert data["templateBody"] == "parameter: {}"
    assert Capability.model_validate(data) == cap


def test_capability_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        _capability(unknown="x")


def test_parameter_lookup_prefers_alias() -> None:
    cap = _capability(
        parameters=[
            Parameter(name="image", kind=ParameterKind.string, required=True),
            Parameter(name="issuer", alias="tls", kind=ParameterKind.string),
        ]
    )

    assert cap.parameter("image").lookup_key == "image"
    assert cap.parameter("tls").name == "issuer"
    assert cap.parameter("issuer").lookup_key == "tls"
    assert cap.parameter("missing") is None


def test_reference_uses_crd_name() -> None:
    assert _capability().reference.name == "deployments.apps"


def test_kind_metadata() -> None:
    assert CapabilityKind.trait.definition_kind == "TraitDefinition"
    assert CapabilityKind.scope.definition_kind == "ScopeDefinition"
    assert CapabilityKind.workload.installed_dir == "workloads"


def test_center_config_token_optional() -> None:
    center = CenterConfig(name="core", address="http://mock/repo")
    assert center.token is None
    assert center.model_dump(by_alias=True, exclude_none=True) == {"name": "core", "address": "http://mock/repo"}
