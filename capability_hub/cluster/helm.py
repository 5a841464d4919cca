"""Helm CLI chart provisioner.

Implements :class:`~capability_hub.cluster.base.ChartProvisioner` by spawning
the ``helm`` binary. Releases are named after the chart and installed with
``upgrade --install`` so a repeated install of the same chart is a no-op
upgrade rather than a failure.
"""

from __future__ import annotations

import logging
import subprocess
from typing import List, Optional

from ..capability.models import InstallDescriptor
from ..core.config import Settings
from ..errors import ProvisionError

_LOGGER = logging.getLogger(__name__)


class HelmCliProvisioner:
    """Chart provisioner backed by the ``helm`` command line."""

    def __init__(self, *, binary: str = "helm", default_namespace: str = "vela-system", timeout: float = 300.0) -> None:
        """
        Args:
            binary: Path or name of the helm executable.
            default_namespace: Namespace used when a descriptor does not set one.
            timeout: Subprocess timeout in seconds.
        """
        self.binary = binary
        self.default_namespace = default_namespace
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "HelmCliProvisioner":
        cluster = settings.cluster
        return cls(binary=cluster.helm_binary, default_namespace=cluster.system_namespace, timeout=cluster.helm_timeout)

    def _run(self, args: List[str]) -> str:
        try:
            out = subprocess.run(
                [self.binary, *args],
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ProvisionError(f"helm binary '{self.binary}' not found") from e
        except subprocess.CalledProcessError as e:
            raise ProvisionError((e.stderr or e.stdout or str(e)).strip()) from e
        except subprocess.TimeoutExpired as e:
            raise ProvisionError(f"helm {args[0]} timed out after {self.timeout}s") from e
        return out.stdout

    def install(self, descriptor: InstallDescriptor) -> None:
        namespace = descriptor.namespace or self.default_namespace
        args = ["upgrade", "--install", descriptor.name, descriptor.name, "--namespace", namespace, "--create-namespace"]
        if descriptor.url:
            args += ["--repo", descriptor.url]
        if descriptor.version:
            args += ["--version", descriptor.version]
        _LOGGER.info("Installing chart %s(%s) into namespace %s", descriptor.name, descriptor.version, namespace)
        try:
            self._run(args)
        except ProvisionError as e:
            raise ProvisionError(
                f"unable to install helm chart dependency {descriptor.name}({descriptor.version} from "
                f"{descriptor.url}): {e}"
            ) from e

    def uninstall(self, name: str, namespace: Optional[str], release_label: str) -> None:
        namespace = namespace or self.default_namespace
        _LOGGER.info("Uninstalling chart %s for capability %s from namespace %s", name, release_label, namespace)
        try:
            self._run(["uninstall", name, "--namespace", namespace])
        except ProvisionError as e:
            raise ProvisionError(f"unable to uninstall helm chart {name} for '{release_label}': {e}") from e
