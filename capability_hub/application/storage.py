"""File storage for application documents.

Documents live at ``<root>/<env>/applications/<app>.yaml`` and are read and
written wholesale.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml

from ..core.config import Settings
from ..errors import DocumentValidationError, NotFoundError
from .document import ApplicationDocument

_LOGGER = logging.getLogger(__name__)


class ApplicationStore:
    """Loads and saves application documents per environment."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).expanduser()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApplicationStore":
        return cls(settings.storage.envs_dir)

    def path_for(self, env: str, app_name: str) -> Path:
        return self.root / env / "applications" / f"{app_name}.yaml"

    def load(self, env: str, app_name: str) -> ApplicationDocument:
        """Load one document.

        Raises:
            NotFoundError: When no document exists for ``app_name`` in ``env``.
            DocumentValidationError: When the file cannot be parsed.
        """
        path = self.path_for(env, app_name)
        if not path.is_file():
            raise NotFoundError("application", app_name, hint=f"in environment '{env}'")
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise DocumentValidationError(f"application file {path} is not valid YAML: {e}") from e
        doc = ApplicationDocument.from_untyped(data, env=env)
        if not doc.name:
            doc.name = app_name
        return doc

    def load_if_exist(self, env: str, app_name: str) -> ApplicationDocument:
        """Load the document, or return an empty one named ``app_name``."""
        try:
            doc = self.load(env, app_name)
        except NotFoundError:
            _LOGGER.debug("ApplicationStore: creating new application %s in env=%s", app_name, env)
            return ApplicationDocument(name=app_name, env=env)
        doc.name = app_name
        return doc

    def save(self, doc: ApplicationDocument, env: Optional[str] = None) -> Path:
        env = env or doc.env
        path = self.path_for(env, doc.name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(doc.to_untyped(), sort_keys=False), encoding="utf-8")
        return path

    def delete(self, env: str, app_name: str) -> None:
        """Delete a document; absent documents are ignored."""
        self.path_for(env, app_name).unlink(missing_ok=True)
