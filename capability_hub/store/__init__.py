"""Local capability stores.

- ``CapabilityStore``: Protocol injected into the registry client, the
  installer and the document assembler.
- ``FileCapabilityStore``: YAML/JSON files under the hub home directory.
- ``SqlCapabilityStore``: SQLAlchemy tables (SQLite/PostgreSQL).

``build_store`` picks the SQL store when a database URL is configured.
"""

from typing import Optional

from ..core.config import Settings
from .base import CapabilityStore
from .filesystem import FileCapabilityStore
from .sql import SqlCapabilityStore, create_all, create_engine, create_sessionmaker


def build_store(settings: Optional[Settings] = None) -> CapabilityStore:
    """Build the configured capability store."""
    if settings is None:
        from ..core.config import settings as default_settings

        settings = default_settings
    storage = settings.storage
    if storage.database_url:
        engine = create_engine(storage.database_url)
        create_all(engine)
        return SqlCapabilityStore(create_sessionmaker(engine), template_ext=storage.template_ext)
    return FileCapabilityStore.from_settings(settings)


__all__ = [
    "CapabilityStore",
    "FileCapabilityStore",
    "SqlCapabilityStore",
    "build_store",
    "create_all",
    "create_engine",
    "create_sessionmaker",
]
