"""Capability install/uninstall against a cluster."""

from .installer import CapabilityInstaller
from .results import ImportResult, InstallResult, InstallStep, UninstallResult, UninstallStep

__all__ = [
    "CapabilityInstaller",
    "ImportResult",
    "InstallResult",
    "InstallStep",
    "UninstallResult",
    "UninstallStep",
]
