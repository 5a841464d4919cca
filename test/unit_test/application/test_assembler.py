from __future__ import annotations

import pytest

from capability_hub.application.assembler import DocumentAssembler
from capability_hub.application.document import ApplicationDocument
from capability_hub.application.storage import ApplicationStore
from capability_hub.capability.enums import CapabilityKind, ParameterKind
from capability_hub.capability.models import Capability, Parameter
from capability_hub.errors import (
    CapabilityHubError,
    DocumentValidationError,
    NotFoundError,
    RequiredParameterError,
    TypeMismatchError,
)


@pytest.fixture
def app_store(tmp_path) -> ApplicationStore:
    return ApplicationStore(tmp_path / "envs")


@pytest.fixture
def assembler(file_store, app_store, workload_manifest, trait_manifest, install_directly) -> DocumentAssembler:
    install_directly(file_store, [workload_manifest(), trait_manifest()])
    return DocumentAssembler(file_store, app_store)


@pytest.fixture
def app(assembler: DocumentAssembler) -> ApplicationDocument:
    app = ApplicationDocument(name="shop")
    return assembler.bind_workload(app, "frontend", "webservice", {"image": "nginx"})


def test_bind_workload_coerces_and_applies_defaults_only_from_input(app: ApplicationDocument) -> None:
    comp = app.get_component("frontend")

    assert comp.type == "webservice"
    assert comp.fields == {"image": "nginx"}


def test_bind_workload_skips_reserved_name_parameter(assembler: DocumentAssembler) -> None:
    app = assembler.bind_workload(
        ApplicationDocument(name="shop"), "frontend", "webservice", {"image": "nginx", "name": "ignored"}
    )

    assert "name" not in app.get_component("frontend").fields


def test_bind_workload_merges_by_key(assembler: DocumentAssembler, app: ApplicationDocument) -> None:
    assembler.bind_workload(app, "frontend", "webservice", {"image": "httpd", "port": "8080", "replicas": 3})

    assert app.get_component("frontend").fields == {"image": "httpd", "replicas": 3, "port": 8080}


def test_bind_workload_persists(assembler: DocumentAssembler, app_store: ApplicationStore, app) -> None:
    assert app_store.load("default", "shop") == app


def test_bind_workload_unknown_workload(assembler: DocumentAssembler) -> None:
    with pytest.raises(NotFoundError):
        assembler.bind_workload(ApplicationDocument(name="shop"), "frontend", "nosuch", {})


def test_required_parameter_fails_before_mutation(
    file_store, app_store, install_directly, workload_manifest
) -> None:
    template = "parameter: {\n\treplicas: int\n}\n"
    install_directly(file_store, [workload_manifest(name="scaled", template=template)])
    assembler = DocumentAssembler(file_store, app_store)
    app = ApplicationDocument(name="shop")

    with pytest.raises(RequiredParameterError, match='required flag\\(s\\) "replicas" not set'):
        assembler.bind_workload(app, "frontend", "scaled", {})

    assert app.components == {}
    with pytest.raises(NotFoundError):
        app_store.load("default", "shop")


def test_empty_string_counts_as_missing(assembler: DocumentAssembler) -> None:
    with pytest.raises(RequiredParameterError):
        assembler.bind_workload(ApplicationDocument(name="shop"), "frontend", "webservice", {"image": ""})


def test_type_mismatch_aborts_bind(assembler: DocumentAssembler, app: ApplicationDocument) -> None:
    before = app.model_copy(deep=True)

    with pytest.raises(TypeMismatchError, match='"port"'):
        assembler.bind_workload(app, "frontend", "webservice", {"image": "nginx", "port": "eighty"})

    assert app == before


def test_bind_trait_with_alias_and_string_fallback(assembler: DocumentAssembler, app: ApplicationDocument) -> None:
    assembler.bind_trait(app, "frontend", "route", {"domain": "shop.mock", "tls": "letsencrypt", "enabled": "true"})

    assert app.get_component("frontend").traits["route"] == {
        "domain": "shop.mock",
        "issuer": "letsencrypt",
        "enabled": True,
    }


def test_bind_trait_requires_required_parameters(assembler: DocumentAssembler, app: ApplicationDocument) -> None:
    with pytest.raises(RequiredParameterError, match='"domain"'):
        assembler.bind_trait(app, "frontend", "route", {"enabled": True})

    assert app.get_component("frontend").traits == {}


def test_bind_then_remove_trait_restores_component(assembler: DocumentAssembler, app: ApplicationDocument) -> None:
    before = app.get_component("frontend").model_copy(deep=True)

    assembler.bind_trait(app, "frontend", "route", {"domain": "shop.mock"})
    assembler.remove_trait(app, "frontend", "route")

    assert app.get_component("frontend") == before


def test_failed_validation_rolls_back_new_component(assembler: DocumentAssembler, app_store) -> None:
    app = ApplicationDocument(name="shop")

    with pytest.raises(DocumentValidationError, match="must have a workload type"):
        assembler.bind_trait(app, "frontend", "route", {"domain": "shop.mock"})

    assert app.components == {}
    with pytest.raises(NotFoundError):
        app_store.load("default", "shop")


def test_failed_validation_restores_existing_component(
    file_store, app_store, install_directly, workload_manifest, trait_manifest
) -> None:
    # A trait named like a workload field collides and must not leave partial state behind.
    install_directly(
        file_store,
        [workload_manifest(), trait_manifest(name="image", template="parameter: {\n\tpull: string\n}\n")],
    )
    assembler = DocumentAssembler(file_store, app_store)
    app = assembler.bind_workload(ApplicationDocument(name="shop"), "frontend", "webservice", {"image": "nginx"})
    before = app.model_copy(deep=True)

    with pytest.raises(DocumentValidationError, match="collides"):
        assembler.bind_trait(app, "frontend", "image", {"pull": "Always"})

    assert app == before
    assert app_store.load("default", "shop") == before


@pytest.mark.parametrize(
    "trait_kind,values,error",
    [
        ("route", {"enabled": True}, RequiredParameterError),
        ("route", {"domain": "shop.mock", "weight": "heavy"}, TypeMismatchError),
        ("image", {"pull": "Always"}, DocumentValidationError),
    ],
)
def test_failed_bind_leaves_saved_application_file_untouched(
    file_store, app_store, install_directly, workload_manifest, trait_manifest, trait_kind, values, error
) -> None:
    install_directly(
        file_store,
        [
            workload_manifest(),
            trait_manifest(),
            trait_manifest(name="image", template="parameter: {\n\tpull: string\n}\n"),
        ],
    )
    assembler = DocumentAssembler(file_store, app_store)
    app = assembler.bind_workload(ApplicationDocument(name="shop"), "frontend", "webservice", {"image": "nginx"})
    saved = app_store.path_for("default", "shop")
    before = saved.read_bytes()

    with pytest.raises(error):
        assembler.bind_trait(app, "frontend", trait_kind, values)

    assert saved.read_bytes() == before


def test_remove_component(assembler: DocumentAssembler, app_store, app: ApplicationDocument) -> None:
    assembler.remove_component(app, "frontend")
    assembler.remove_component(app, "frontend")

    assert app_store.load("default", "shop").components == {}


def test_other_kind_parameters_are_not_bound(file_store, app_store) -> None:
    cap = Capability(
        name="worker",
        kind=CapabilityKind.workload,
        template_body="parameter: {}",
        parameters=[
            Parameter(name="image", kind=ParameterKind.string, required=True),
            Parameter(name="cmd", kind=ParameterKind.other),
        ],
    )
    file_store.commit_installed([cap])
    app = DocumentAssembler(file_store, app_store).bind_workload(
        ApplicationDocument(name="jobs"), "worker", "worker", {"image": "busybox", "cmd": ["sleep", "10"]}
    )

    assert app.get_component("worker").fields == {"image": "busybox"}


def test_assembler_without_app_store_only_mutates_memory(file_store, install_directly, workload_manifest) -> None:
    install_directly(file_store, [workload_manifest()])
    assembler = DocumentAssembler(file_store)
    app = assembler.bind_workload(ApplicationDocument(name="shop"), "frontend", "webservice", {"image": "nginx"})

    assert app.get_component("frontend").type == "webservice"
    with pytest.raises(CapabilityHubError, match="no application store configured"):
        assembler.compose_workload("default", "frontend", {"image": "nginx"}, "webservice")


def test_compose_workload_defaults_app_name_and_reuses_type(assembler: DocumentAssembler, app_store) -> None:
    assembler.compose_workload("prod", "frontend", {"image": "nginx"}, workload_kind="webservice")
    app = assembler.compose_workload("prod", "frontend", {"image": "httpd", "port": 81})

    assert app.name == "frontend"
    assert app_store.load("prod", "frontend").get_component("frontend").fields == {"image": "httpd", "port": 81}


def test_compose_workload_requires_type_for_new_component(assembler: DocumentAssembler) -> None:
    with pytest.raises(DocumentValidationError, match="must specify workload type for application frontend"):
        assembler.compose_workload("prod", "frontend", {"image": "nginx"})


def test_attach_and_detach_trait(assembler: DocumentAssembler, app_store) -> None:
    assembler.compose_workload("prod", "frontend", {"image": "nginx"}, "webservice", app_name="shop")

    assembler.attach_trait("prod", "frontend", "route", {"domain": "shop.mock"}, app_name="shop")
    assert app_store.load("prod", "shop").get_component("frontend").traits == {"route": {"domain": "shop.mock"}}

    assembler.detach_trait("prod", "frontend", "route", app_name="shop")
    assert app_store.load("prod", "shop").get_component("frontend").traits == {}


def test_attach_trait_to_missing_application(assembler: DocumentAssembler) -> None:
    with pytest.raises(NotFoundError):
        assembler.attach_trait("prod", "frontend", "route", {"domain": "shop.mock"})
