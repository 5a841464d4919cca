"""File-backed capability store.

Directory layout under ``root``::

    centers/config.yaml                      registered centers
    centers/<center>/<name>.yaml             synced definition manifests
    centers/<center>/.tmp/<name>.<ext>       cached template bodies
    capabilities/workloads/<name>            installed workloads (JSON)
    capabilities/traits/<name>               installed traits (JSON)

Manifests and the center registry are YAML; installed capabilities are the
pydantic JSON dump of :class:`Capability` with camelCase keys.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml
from pydantic import ValidationError

from ..capability.enums import CapabilityKind
from ..capability.models import Capability, CenterConfig
from ..core.config import Settings
from ..errors import NotFoundError
from .base import rebuild_center

_LOGGER = logging.getLogger(__name__)

_CENTER_CONFIG = "config.yaml"
_TEMPLATE_DIR = ".tmp"


class FileCapabilityStore:
    """Capability store persisted as plain files under a root directory."""

    def __init__(self, root: Path, *, template_ext: str = "cue") -> None:
        """
        Args:
            root: Base directory; created lazily on first write.
            template_ext: Extension used for cached template bodies.
        """
        self.root = Path(root).expanduser()
        self.template_ext = template_ext

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileCapabilityStore":
        storage = settings.storage
        return cls(storage.root, template_ext=storage.template_ext)

    @property
    def centers_dir(self) -> Path:
        return self.root / "centers"

    @property
    def capabilities_dir(self) -> Path:
        return self.root / "capabilities"

    def _center_dir(self, center: str) -> Path:
        return self.centers_dir / center

    def _installed_path(self, kind: CapabilityKind, name: str) -> Path:
        return self.capabilities_dir / kind.installed_dir / name

    # ------------------------------------------------------------------
    # Center registry
    # ------------------------------------------------------------------

    def load_center_configs(self) -> List[CenterConfig]:
        path = self.centers_dir / _CENTER_CONFIG
        if not path.exists():
            return []
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or []
        return [CenterConfig.model_validate(item) for item in data]

    def store_center_configs(self, configs: Sequence[CenterConfig]) -> None:
        self.centers_dir.mkdir(parents=True, exist_ok=True)
        data = [c.model_dump(by_alias=True, exclude_none=True) for c in configs]
        (self.centers_dir / _CENTER_CONFIG).write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")

    # ------------------------------------------------------------------
    # Center cache
    # ------------------------------------------------------------------

    def list_centers(self) -> List[str]:
        if not self.centers_dir.exists():
            return []
        return sorted(p.name for p in self.centers_dir.iterdir() if p.is_dir() and not p.name.startswith("."))

    def save_center_manifest(self, center: str, name: str, manifest: Mapping[str, Any]) -> None:
        center_dir = self._center_dir(center)
        center_dir.mkdir(parents=True, exist_ok=True)
        (center_dir / f"{name}.yaml").write_text(yaml.safe_dump(dict(manifest), sort_keys=False), encoding="utf-8")

    def load_center_manifest(self, center: str, name: str) -> Dict[str, Any]:
        path = self._center_dir(center) / f"{name}.yaml"
        if not path.exists():
            raise NotFoundError(
                "capability", f"{center}/{name}", hint=f"try syncing center '{center}' from remote"
            )
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}

    def save_template(self, center: str, name: str, body: str) -> str:
        template_dir = self._center_dir(center) / _TEMPLATE_DIR
        template_dir.mkdir(parents=True, exist_ok=True)
        path = template_dir / f"{name}.{self.template_ext}"
        path.write_text(body, encoding="utf-8")
        return str(path)

    def _load_template(self, center: str, name: str) -> tuple[Optional[str], str]:
        path = self._center_dir(center) / _TEMPLATE_DIR / f"{name}.{self.template_ext}"
        if not path.exists():
            return None, ""
        return path.read_text(encoding="utf-8"), str(path)

    def load_center(self, center: str) -> List[Capability]:
        center_dir = self._center_dir(center)
        if not center_dir.is_dir():
            raise NotFoundError("capability center", center, hint="it has not been synced")
        entries = []
        for path in sorted(center_dir.glob("*.yaml")):
            try:
                manifest = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            except yaml.YAMLError as exc:
                _LOGGER.warning("FileCapabilityStore: unreadable manifest %s: %s", path, exc)
                continue
            body, template_path = self._load_template(center, path.stem)
            entries.append((manifest, body, template_path))
        return rebuild_center(center, entries)

    def remove_center(self, center: str) -> None:
        center_dir = self._center_dir(center)
        if not center_dir.exists():
            raise NotFoundError("capability center", center, hint="it has not been synced")
        shutil.rmtree(center_dir)

    # ------------------------------------------------------------------
    # Installed set
    # ------------------------------------------------------------------

    def load_installed(self, kind: CapabilityKind) -> List[Capability]:
        kind_dir = self.capabilities_dir / kind.installed_dir
        if not kind_dir.is_dir():
            return []
        capabilities: List[Capability] = []
        for path in sorted(kind_dir.iterdir()):
            if not path.is_file():
                continue
            try:
                capabilities.append(Capability.model_validate_json(path.read_text(encoding="utf-8")))
            except ValidationError as exc:
                _LOGGER.warning("FileCapabilityStore: skipping invalid installed capability %s: %s", path, exc)
        return capabilities

    def load_all_installed(self) -> List[Capability]:
        return [cap for kind in CapabilityKind for cap in self.load_installed(kind)]

    def find_installed(self, kind: CapabilityKind, name: str) -> Capability:
        path = self._installed_path(kind, name)
        if not path.is_file():
            raise NotFoundError(f"installed {kind.value}", name)
        return Capability.model_validate_json(path.read_text(encoding="utf-8"))

    def commit_installed(self, capabilities: Sequence[Capability]) -> int:
        committed = 0
        for cap in capabilities:
            path = self._installed_path(cap.kind, cap.name)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(cap.model_dump_json(by_alias=True, exclude_none=True, indent=2), encoding="utf-8")
            committed += 1
        return committed

    def remove_installed(self, kind: CapabilityKind, name: str) -> None:
        path = self._installed_path(kind, name)
        if not path.is_file():
            raise NotFoundError(f"installed {kind.value}", name)
        path.unlink()
