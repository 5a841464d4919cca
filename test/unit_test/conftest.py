from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest

from capability_hub.capability.enums import InstallStatus
from capability_hub.capability.manifest import parse_manifest
from capability_hub.capability.models import (
    Capability,
    DefinitionReference,
    InstallDescriptor,
    ResourceKindInfo,
    Source,
)
from capability_hub.capability.template import parse_parameters
from capability_hub.errors import AlreadyExistsError, NotFoundError, ProvisionError, RemoteFetchError
from capability_hub.store.filesystem import FileCapabilityStore

WEBSERVICE_TEMPLATE = """output: {
\tapiVersion: "apps/v1"
\tkind:       "Deployment"
\tspec: containers: [{image: parameter.image}]
}
parameter: {
\t// +usage=Which image would you like to use for your service
\t// +short=i
\timage: string
\t// +usage=Number of replicas
\treplicas: *1 | int
\tport?: int
\tname: string
\tenv?: [...{name: string, value: string}]
}
"""

ROUTE_TEMPLATE = """outputs: route: {
\tapiVersion: "standard.oam.dev/v1alpha1"
\tkind:       "Route"
\tspec: host: parameter.domain
}
parameter: {
\tdomain: string
\t// +alias=tls
\tissuer?: string
\tenabled: *true | bool
\tweight?: float
}
"""

KNOWN_KINDS = {
    "deployments.apps": ResourceKindInfo(api_version="apps/v1", kind="Deployment"),
    "routes.standard.oam.dev": ResourceKindInfo(api_version="standard.oam.dev/v1alpha1", kind="Route"),
    "manualscalertraits.core.oam.dev": ResourceKindInfo(api_version="core.oam.dev/v1alpha2", kind="ManualScalerTrait"),
}


class FakeCluster:
    """In-memory ``ClusterClient``."""

    def __init__(self, kinds: Optional[Dict[str, ResourceKindInfo]] = None) -> None:
        self.kinds = dict(KNOWN_KINDS if kinds is None else kinds)
        self.objects: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.created: List[Dict[str, Any]] = []
        self.deleted: List[Dict[str, Any]] = []
        self.create_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None

    @staticmethod
    def _key(obj: Dict[str, Any]) -> Tuple[str, str]:
        return obj["kind"], obj["metadata"]["name"]

    def add(self, obj: Dict[str, Any]) -> None:
        self.objects[self._key(obj)] = obj

    def list(self, kind: str, namespace: str, selector: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        return [o for (k, _), o in self.objects.items() if k == kind]

    def create(self, obj: Dict[str, Any]) -> None:
        if self.create_error is not None:
            raise self.create_error
        key = self._key(obj)
        if key in self.objects:
            raise AlreadyExistsError(*key)
        self.objects[key] = obj
        self.created.append(obj)

    def delete(self, obj: Dict[str, Any]) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        key = self._key(obj)
        if key not in self.objects:
            raise NotFoundError(*key)
        del self.objects[key]
        self.deleted.append(obj)

    def resolve_kind(self, reference: DefinitionReference) -> ResourceKindInfo:
        if reference.name not in self.kinds:
            raise LookupError(f'no matches for {reference.name}, "{reference.name}" is not installed')
        return self.kinds[reference.name]


class FakeProvisioner:
    """In-memory ``ChartProvisioner``."""

    def __init__(self) -> None:
        self.installed: List[InstallDescriptor] = []
        self.uninstalled: List[Tuple[str, str, str]] = []
        self.fail = False

    def install(self, descriptor: InstallDescriptor) -> None:
        if self.fail:
            raise ProvisionError(f"unable to install helm chart dependency {descriptor.name}")
        self.installed.append(descriptor)

    def uninstall(self, name: str, namespace: str, release_label: str) -> None:
        if self.fail:
            raise ProvisionError(f"unable to uninstall helm chart {name}")
        self.uninstalled.append((name, namespace, release_label))


class FakeTransport:
    """In-memory ``RegistryTransport``."""

    def __init__(self) -> None:
        self.manifests: Dict[str, List[Any]] = {}
        self.bodies: Dict[str, bytes] = {}
        self.calls: List[Tuple[str, Optional[str]]] = []

    def fetch_manifests(self, address: str, token: Optional[str] = None) -> List[Any]:
        self.calls.append((address, token))
        if address not in self.manifests:
            raise RemoteFetchError(f"fetch {address} failed: 404", status_code=404)
        return list(self.manifests[address])

    def fetch_body(self, uri: str) -> bytes:
        if uri not in self.bodies:
            raise RemoteFetchError(f"fetch {uri} failed: 404", status_code=404)
        return self.bodies[uri]


def _definition(
    kind: str, name: str, crd_name: str, template: Optional[str], template_uri: Optional[str], install, description
) -> Dict[str, Any]:
    extension: Dict[str, Any] = {}
    if template is not None:
        extension["template"] = template
    if template_uri is not None:
        extension["templateURI"] = template_uri
    if install is not None:
        extension["install"] = {"helm": install}
    metadata: Dict[str, Any] = {"name": name}
    if description:
        metadata["annotations"] = {"definition.oam.dev/description": description}
    return {
        "apiVersion": "core.oam.dev/v1alpha2",
        "kind": kind,
        "metadata": metadata,
        "spec": {"definitionRef": {"name": crd_name}, "extension": extension},
    }


@pytest.fixture
def workload_manifest():
    def _make(
        name: str = "webservice",
        crd_name: str = "deployments.apps",
        template: Optional[str] = WEBSERVICE_TEMPLATE,
        template_uri: Optional[str] = None,
        install: Optional[Dict[str, str]] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        return _definition("WorkloadDefinition", name, crd_name, template, template_uri, install, description)

    return _make


@pytest.fixture
def trait_manifest():
    def _make(
        name: str = "route",
        crd_name: str = "routes.standard.oam.dev",
        applies_to: Optional[List[str]] = None,
        template: Optional[str] = ROUTE_TEMPLATE,
        template_uri: Optional[str] = None,
        install: Optional[Dict[str, str]] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        raw = _definition("TraitDefinition", name, crd_name, template, template_uri, install, description)
        raw["spec"]["appliesToWorkloads"] = ["apps/v1.Deployment"] if applies_to is None else applies_to
        return raw

    return _make


@pytest.fixture
def file_store(tmp_path) -> FileCapabilityStore:
    return FileCapabilityStore(tmp_path / "home")


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def provisioner() -> FakeProvisioner:
    return FakeProvisioner()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def seed_center():
    """Write manifests and their embedded templates into a store's center cache."""

    def _seed(store, center: str, manifests: List[Dict[str, Any]]) -> None:
        for raw in manifests:
            name = raw["metadata"]["name"]
            store.save_template(center, name, raw["spec"]["extension"]["template"])
            store.save_center_manifest(center, name, raw)

    return _seed


@pytest.fixture
def install_directly():
    """Commit manifests straight into a store's installed set."""

    def _install(store, manifests: List[Dict[str, Any]], center: Optional[str] = None) -> List[Capability]:
        caps = []
        for raw in manifests:
            shell = parse_manifest(raw)
            cap = shell.to_capability(shell.template, parameters=parse_parameters(shell.template))
            caps.append(
                cap.model_copy(
                    update={
                        "status": InstallStatus.installed,
                        "resource_kind_info": KNOWN_KINDS.get(shell.crd_name),
                        "source": Source(center_name=center) if center else None,
                    }
                )
            )
        store.commit_installed(caps)
        return caps

    return _install


@pytest.fixture
def webservice_template() -> str:
    return WEBSERVICE_TEMPLATE


@pytest.fixture
def route_template() -> str:
    return ROUTE_TEMPLATE
