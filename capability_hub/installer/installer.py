"""Capability installer.

Promotes a capability synced from a center into the installed set, and the
reverse. Every step crosses a boundary (chart tool, cluster, local store)
and may fail on its own; there is no rollback. Outcomes are reported as
:class:`~capability_hub.installer.results.InstallResult` /
:class:`~capability_hub.installer.results.UninstallResult`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from ..capability.enums import CapabilityKind, InstallStatus
from ..capability.manifest import definition_object, definition_stub, parse_manifest
from ..capability.models import Capability, Source
from ..capability.template import parse_parameters
from ..cluster.base import ChartProvisioner, ClusterClient
from ..cluster.discovery import resolve_resource_kind
from ..errors import (
    AlreadyExistsError,
    CapabilityHubError,
    NotFoundError,
    ProvisionError,
    RemoteFetchError,
    TemplateError,
    UnsupportedCapabilityError,
)
from ..registry.transport import RegistryTransport
from ..store.base import CapabilityStore
from .results import ImportResult, InstallResult, InstallStep, UninstallResult, UninstallStep

_LOGGER = logging.getLogger(__name__)

DEFAULT_SYSTEM_NAMESPACE = "vela-system"


def _as_hub_error(exc: Exception, action: str) -> CapabilityHubError:
    if isinstance(exc, CapabilityHubError):
        return exc
    error = CapabilityHubError(f"{action}: {exc}")
    error.__cause__ = exc
    return error


class CapabilityInstaller:
    """Installs and uninstalls capabilities against a cluster."""

    def __init__(
        self,
        store: CapabilityStore,
        cluster: ClusterClient,
        *,
        provisioner: Optional[ChartProvisioner] = None,
        namespace: str = DEFAULT_SYSTEM_NAMESPACE,
        transport: Optional[RegistryTransport] = None,
    ) -> None:
        """
        Args:
            store: Local capability store (center caches and installed set).
            cluster: Cluster resource API.
            provisioner: Chart tool; required only for capabilities that
                declare an install descriptor.
            namespace: System namespace receiving definitions.
            transport: Used by ``import_from_cluster`` to dereference
                ``templateURI`` bodies.
        """
        self._store = store
        self._cluster = cluster
        self._provisioner = provisioner
        self._namespace = namespace
        self._transport = transport

    # Install

    def _lookup(self, center: str, name: str) -> Tuple[Capability, Dict[str, Any]]:
        for cap in self._store.load_center(center):
            if cap.name == name:
                break
        else:
            raise NotFoundError("capability", name, hint=f"not synced from center '{center}'")
        if cap.kind is CapabilityKind.scope:
            raise UnsupportedCapabilityError(f"installing scope capability '{name}' is not supported")
        return cap, self._store.load_center_manifest(center, name)

    def _provision_chart(self, capability: Capability) -> None:
        if self._provisioner is None:
            raise ProvisionError(f"capability '{capability.name}' requires a chart but no provisioner is configured")
        self._provisioner.install(capability.install)

    def install(self, center: str, name: str) -> InstallResult:
        """Install capability ``name`` synced from ``center``.

        Steps: lookup, chart provisioning (only with an install descriptor),
        resource kind resolution, cluster registration (an already registered
        definition counts as success) and commit to the installed set.
        """
        result = InstallResult(capability_name=name, center=center)

        try:
            capability, manifest = self._lookup(center, name)
        except CapabilityHubError as e:
            return result.fail(InstallStep.lookup, e)
        result.completed.append(InstallStep.lookup)
        _LOGGER.info("CapabilityInstaller: installing %s capability %s", capability.kind.value, name)

        chart_name = None
        if capability.install is not None:
            chart_name = capability.install.name
            try:
                self._provision_chart(capability)
            except Exception as e:
                return result.fail(InstallStep.chart_provisioning, _as_hub_error(e, "chart install failed"))
            result.completed.append(InstallStep.chart_provisioning)

        try:
            kind_info = resolve_resource_kind(self._cluster, capability)
        except CapabilityHubError as e:
            return result.fail(InstallStep.resolving, e)
        result.completed.append(InstallStep.resolving)

        try:
            self._cluster.create(definition_object(manifest, self._namespace))
        except AlreadyExistsError:
            _LOGGER.info("CapabilityInstaller: definition %s already registered", name)
            result.already_registered = True
        except Exception as e:
            return result.fail(InstallStep.registering, _as_hub_error(e, f"registering definition '{name}' failed"))
        result.completed.append(InstallStep.registering)

        installed = capability.model_copy(
            update={
                "source": Source(center_name=center, chart_name=chart_name),
                "resource_kind_info": kind_info,
                "status": InstallStatus.installed,
                "center": None,
            }
        )
        try:
            self._store.commit_installed([installed])
        except Exception as e:
            return result.fail(InstallStep.committing, _as_hub_error(e, f"committing '{name}' failed"))
        result.completed.append(InstallStep.committing)
        result.capability = installed
        _LOGGER.info("CapabilityInstaller: installed %s from center=%s", name, center)
        return result

    def add_capability_into_cluster(self, reference: str) -> str:
        """Install ``<center>/<name>`` and return the success message.

        Raises:
            CapabilityHubError: On a malformed reference or any failed step.
        """
        parts = reference.split("/")
        if len(parts) != 2 or not all(parts):
            raise CapabilityHubError(
                f"{reference} is not a valid format for capability name, use '<center>/<capability>'"
            )
        result = self.install(parts[0], parts[1])
        result.raise_for_error()
        return result.message

    # Uninstall

    def _find_installed(self, name: str) -> Capability:
        for cap in self._store.load_all_installed():
            if cap.name == name:
                return cap
        raise NotFoundError("capability", name, hint="it is not installed")

    def uninstall(self, name: str) -> UninstallResult:
        """Remove capability ``name`` from the cluster and the installed set.

        A missing cluster definition is tolerated. Any other failure stops
        the sequence and is reported in the result.
        """
        result = UninstallResult(capability_name=name)
        try:
            capability = self._find_installed(name)
            if capability.kind is CapabilityKind.scope:
                raise UnsupportedCapabilityError(f"uninstalling scope capability '{name}' is not supported")
        except CapabilityHubError as e:
            return result.fail(UninstallStep.lookup, e)
        result.capability = capability
        result.completed.append(UninstallStep.lookup)

        try:
            self._cluster.delete(definition_stub(capability, self._namespace))
        except NotFoundError:
            _LOGGER.info("CapabilityInstaller: definition %s already absent from cluster", name)
        except Exception as e:
            return result.fail(UninstallStep.deregistering, _as_hub_error(e, f"deleting definition '{name}' failed"))
        result.completed.append(UninstallStep.deregistering)

        if capability.install is not None and capability.install.name:
            namespace = capability.install.namespace or self._namespace
            try:
                if self._provisioner is None:
                    raise ProvisionError(f"capability '{name}' has a chart but no provisioner is configured")
                self._provisioner.uninstall(capability.install.name, namespace, name)
            except Exception as e:
                return result.fail(UninstallStep.chart_removal, _as_hub_error(e, "chart uninstall failed"))
            result.completed.append(UninstallStep.chart_removal)

        try:
            self._store.remove_installed(capability.kind, name)
        except Exception as e:
            return result.fail(UninstallStep.local_removal, _as_hub_error(e, f"removing '{name}' locally failed"))
        result.completed.append(UninstallStep.local_removal)
        _LOGGER.info("CapabilityInstaller: uninstalled %s", name)
        return result

    def remove_capability_from_cluster(self, name: str) -> str:
        """Uninstall ``name`` and return the success message; raises on failure."""
        result = self.uninstall(name)
        result.raise_for_error()
        return result.message

    # Import

    def _template_body(self, template: str, template_uri: str, name: str) -> str:
        if template_uri:
            if self._transport is None:
                raise TemplateError(f"definition '{name}' references templateURI but no transport is configured")
            return self._transport.fetch_body(template_uri).decode("utf-8")
        return template

    def _import_one(self, raw: Dict[str, Any]) -> Capability:
        shell = parse_manifest(raw)
        body = self._template_body(shell.template, shell.template_uri, shell.name)
        try:
            return shell.to_capability(body, parameters=parse_parameters(body))
        except ValidationError as e:
            raise TemplateError(f"invalid capability '{shell.name}': {e}") from e

    def import_from_cluster(
        self,
        namespace: Optional[str] = None,
        selector: Optional[Dict[str, str]] = None,
    ) -> ImportResult:
        """Adopt workload and trait definitions already registered in the cluster.

        Conversion failures are collected per definition. Chart provisioning
        and kind resolution failures are fatal and nothing is committed.
        """
        namespace = namespace or self._namespace
        result = ImportResult()
        parsed: List[Capability] = []
        for kind in (CapabilityKind.workload, CapabilityKind.trait):
            for raw in self._cluster.list(kind.definition_kind, namespace, selector):
                try:
                    parsed.append(self._import_one(raw))
                except (RemoteFetchError, TemplateError, UnicodeDecodeError) as e:
                    _LOGGER.warning("CapabilityInstaller: skipping cluster definition: %s", e)
                    result.errors.append(_as_hub_error(e, "invalid template encoding"))

        for cap in parsed:
            chart_name = None
            if cap.install is not None:
                self._provision_chart(cap)
                chart_name = cap.install.name
            kind_info = resolve_resource_kind(self._cluster, cap)
            result.capabilities.append(
                cap.model_copy(
                    update={
                        "source": Source(chart_name=chart_name),
                        "resource_kind_info": kind_info,
                        "status": InstallStatus.installed,
                    }
                )
            )
        self._store.commit_installed(result.capabilities)
        _LOGGER.info(
            "CapabilityInstaller: imported %d definitions from namespace=%s errors=%d",
            result.count,
            namespace,
            len(result.errors),
        )
        return result
