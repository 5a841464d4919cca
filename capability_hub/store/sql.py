"""SQLAlchemy-backed capability store.

Same contract as :class:`~capability_hub.store.filesystem.FileCapabilityStore`,
persisted in relational tables so several hosts can share one registry
state (PostgreSQL) or tests can run against in-memory SQLite.

Usage
-----

- Create an engine with ``create_engine``.
- Create tables with ``create_all`` (tests/dev).
- Build the store with ``SqlCapabilityStore(create_sessionmaker(engine))``.

Each method opens a session, performs its operation and commits, so every
write is durable when the method returns.

Table names are prefixed with ``ch_`` to avoid collisions in shared databases.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import JSON, Integer, String, Text, delete, select
from sqlalchemy import create_engine as sa_create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from ..capability.enums import CapabilityKind
from ..capability.models import Capability, CenterConfig
from ..errors import NotFoundError
from .base import rebuild_center


class Base(DeclarativeBase):
    """Declarative base for capability store tables."""


class CenterConfigRow(Base):
    """Row model for ``ch_center_configs``; ``position`` keeps registration order."""

    __tablename__ = "ch_center_configs"

    name: Mapped[str] = mapped_column(String(128), primary_key=True)
    address: Mapped[str] = mapped_column(Text)
    token: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, default=0)


class CenterManifestRow(Base):
    """Row model for ``ch_center_manifests``: one synced manifest and its template body."""

    __tablename__ = "ch_center_manifests"

    center: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(253), primary_key=True)
    manifest: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    template_body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    template_path: Mapped[str] = mapped_column(Text, default="")


class InstalledCapabilityRow(Base):
    """Row model for ``ch_installed_capabilities``; ``document`` is the camelCase capability JSON."""

    __tablename__ = "ch_installed_capabilities"

    kind: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(253), primary_key=True)
    document: Mapped[Dict[str, Any]] = mapped_column(JSON)


def create_engine(db_url: str) -> Engine:
    """Create a synchronous SQLAlchemy engine with connection pre-ping."""
    return sa_create_engine(db_url, pool_pre_ping=True)


def create_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    """Create a ``sessionmaker`` with safe defaults for this project."""
    return sessionmaker(engine, expire_on_commit=False)


def create_all(engine: Engine) -> None:
    """Create all capability store tables (tests/local development)."""
    Base.metadata.create_all(engine)


@dataclass(frozen=True)
class SqlCapabilityStore:
    """SQL implementation of ``CapabilityStore``."""

    session_factory: sessionmaker[Session]
    template_ext: str = "cue"

    # Center registry

    def load_center_configs(self) -> List[CenterConfig]:
        with self.session_factory() as s:
            rows = s.scalars(select(CenterConfigRow).order_by(CenterConfigRow.position)).all()
            return [CenterConfig(name=r.name, address=r.address, token=r.token) for r in rows]

    def store_center_configs(self, configs: Sequence[CenterConfig]) -> None:
        with self.session_factory() as s:
            s.execute(delete(CenterConfigRow))
            for position, c in enumerate(configs):
                s.add(CenterConfigRow(name=c.name, address=c.address, token=c.token, position=position))
            s.commit()

    # Center cache

    def list_centers(self) -> List[str]:
        with self.session_factory() as s:
            return sorted(set(s.scalars(select(CenterManifestRow.center)).all()))

    def save_center_manifest(self, center: str, name: str, manifest: Mapping[str, Any]) -> None:
        with self.session_factory() as s:
            row = s.get(CenterManifestRow, (center, name))
            if row is None:
                s.add(CenterManifestRow(center=center, name=name, manifest=dict(manifest), template_path=""))
            else:
                row.manifest = dict(manifest)
            s.commit()

    def load_center_manifest(self, center: str, name: str) -> Dict[str, Any]:
        with self.session_factory() as s:
            row = s.get(CenterManifestRow, (center, name))
            if row is None or not row.manifest:
                raise NotFoundError(
                    "capability", f"{center}/{name}", hint=f"try syncing center '{center}' from remote"
                )
            return dict(row.manifest)

    def save_template(self, center: str, name: str, body: str) -> str:
        path = f"{center}/{name}.{self.template_ext}"
        with self.session_factory() as s:
            row = s.get(CenterManifestRow, (center, name))
            if row is None:
                s.add(CenterManifestRow(center=center, name=name, manifest={}, template_body=body, template_path=path))
            else:
                row.template_body = body
                row.template_path = path
            s.commit()
        return path

    def load_center(self, center: str) -> List[Capability]:
        with self.session_factory() as s:
            rows = s.scalars(
                select(CenterManifestRow).where(CenterManifestRow.center == center).order_by(CenterManifestRow.name)
            ).all()
        if not rows:
            raise NotFoundError("capability center", center, hint="it has not been synced")
        # Template-only rows belong to manifests that failed after their body was cached.
        entries = [(r.manifest, r.template_body, r.template_path) for r in rows if r.manifest]
        return rebuild_center(center, entries)

    def remove_center(self, center: str) -> None:
        with self.session_factory() as s:
            result = s.execute(delete(CenterManifestRow).where(CenterManifestRow.center == center))
            s.commit()
        if not result.rowcount:
            raise NotFoundError("capability center", center, hint="it has not been synced")

    # Installed set

    def load_installed(self, kind: CapabilityKind) -> List[Capability]:
        with self.session_factory() as s:
            rows = s.scalars(
                select(InstalledCapabilityRow)
                .where(InstalledCapabilityRow.kind == kind.value)
                .order_by(InstalledCapabilityRow.name)
            ).all()
            return [Capability.model_validate(r.document) for r in rows]

    def load_all_installed(self) -> List[Capability]:
        return [cap for kind in CapabilityKind for cap in self.load_installed(kind)]

    def find_installed(self, kind: CapabilityKind, name: str) -> Capability:
        with self.session_factory() as s:
            row = s.get(InstalledCapabilityRow, (kind.value, name))
            if row is None:
                raise NotFoundError(f"installed {kind.value}", name)
            return Capability.model_validate(row.document)

    def commit_installed(self, capabilities: Sequence[Capability]) -> int:
        with self.session_factory() as s:
            for cap in capabilities:
                s.merge(
                    InstalledCapabilityRow(
                        kind=cap.kind.value,
                        name=cap.name,
                        document=cap.model_dump(mode="json", by_alias=True, exclude_none=True),
                    )
                )
            s.commit()
        return len(capabilities)

    def remove_installed(self, kind: CapabilityKind, name: str) -> None:
        with self.session_factory() as s:
            row = s.get(InstalledCapabilityRow, (kind.value, name))
            if row is None:
                raise NotFoundError(f"installed {kind.value}", name)
            s.delete(row)
            s.commit()
