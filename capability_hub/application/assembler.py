"""Document assembler.

Binds user input for an installed capability's parameters into an
application document.

Binding rules
-------------
- Input is looked up by each parameter's alias (or name) and stored under
  the parameter's name.
- A required parameter without a value fails the bind before the document
  is touched.
- Values are merged by key: new keys overwrite, existing keys survive.
- After merging, the whole document is validated. On failure the touched
  component is restored to its previous in-memory state and nothing is
  persisted.
- Removing a trait or component is an unconditional, idempotent deletion.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from ..capability.enums import CapabilityKind
from ..capability.models import Capability
from ..errors import CapabilityHubError, DocumentValidationError, RequiredParameterError
from ..store.base import CapabilityStore
from .coercion import Value, coerce
from .document import ApplicationDocument, ComponentDocument
from .storage import ApplicationStore

_LOGGER = logging.getLogger(__name__)

# Reserved for the component name; never bound from workload input.
_RESERVED_PARAMETER = "name"


def _is_missing(raw: Any) -> bool:
    return raw is None or raw == ""


class DocumentAssembler:
    """Merges typed capability parameters into application documents."""

    def __init__(self, store: CapabilityStore, app_store: Optional[ApplicationStore] = None) -> None:
        """
        Args:
            store: Source of installed workload and trait capabilities.
            app_store: Where documents are persisted after a successful bind.
                Without it, documents are only mutated in memory.
        """
        self._store = store
        self._app_store = app_store

    def _collect(self, capability: Capability, values: Mapping[str, Any], *, skip_reserved: bool) -> Dict[str, Value]:
        data: Dict[str, Value] = {}
        for param in capability.parameters:
            key = param.lookup_key
            if skip_reserved and key == _RESERVED_PARAMETER:
                continue
            raw = values.get(key)
            if _is_missing(raw):
                if param.required:
                    raise RequiredParameterError(key)
                continue
            value = coerce(param, raw)
            if value is not None:
                data[param.name] = value
        return data

    def _apply(self, app: ApplicationDocument, component: str, mutate) -> ApplicationDocument:
        previous: Optional[ComponentDocument] = None
        if component in app.components:
            previous = app.components[component].model_copy(deep=True)
        mutate()
        try:
            app.validate_document()
        except DocumentValidationError:
            if previous is None:
                app.components.pop(component, None)
            else:
                app.components[component] = previous
            raise
        self._persist(app)
        return app

    def _persist(self, app: ApplicationDocument) -> None:
        if self._app_store is not None:
            path = self._app_store.save(app)
            _LOGGER.debug("DocumentAssembler: saved application %s to %s", app.name, path)

    def bind_workload(
        self, app: ApplicationDocument, component: str, workload_kind: str, values: Mapping[str, Any]
    ) -> ApplicationDocument:
        """Set ``component``'s workload to ``workload_kind`` and bind its parameters.

        Raises:
            NotFoundError: When the workload is not installed.
            RequiredParameterError: When a required parameter has no value.
            TypeMismatchError: When a value cannot be coerced.
            DocumentValidationError: When the resulting document is invalid.
        """
        capability = self._store.find_installed(CapabilityKind.workload, workload_kind)
        data = self._collect(capability, values, skip_reserved=True)
        return self._apply(app, component, lambda: app.set_workload(component, workload_kind, data))

    def bind_trait(
        self, app: ApplicationDocument, component: str, trait_kind: str, values: Mapping[str, Any]
    ) -> ApplicationDocument:
        """Attach or update trait ``trait_kind`` on ``component``."""
        capability = self._store.find_installed(CapabilityKind.trait, trait_kind)
        data = self._collect(capability, values, skip_reserved=False)
        return self._apply(app, component, lambda: app.set_trait(component, trait_kind, data))

    def remove_trait(self, app: ApplicationDocument, component: str, trait_kind: str) -> ApplicationDocument:
        app.remove_trait(component, trait_kind)
        self._persist(app)
        return app

    def remove_component(self, app: ApplicationDocument, component: str) -> ApplicationDocument:
        app.remove_component(component)
        self._persist(app)
        return app

    # Environment level helpers

    def _require_app_store(self) -> ApplicationStore:
        if self._app_store is None:
            raise CapabilityHubError("no application store configured")
        return self._app_store

    def compose_workload(
        self,
        env: str,
        component: str,
        values: Mapping[str, Any],
        workload_kind: Optional[str] = None,
        app_name: Optional[str] = None,
    ) -> ApplicationDocument:
        """Load (or create) an application and bind ``component``'s workload.

        The application defaults to one named after the component. An
        existing component keeps its workload type; a new one needs
        ``workload_kind``.
        """
        app = self._require_app_store().load_if_exist(env, app_name or component)
        existing = app.components.get(component)
        kind = existing.type if existing is not None and existing.type else workload_kind
        if not kind:
            raise DocumentValidationError(f"must specify workload type for application {component}")
        return self.bind_workload(app, component, kind, values)

    def attach_trait(
        self,
        env: str,
        component: str,
        trait_kind: str,
        values: Mapping[str, Any],
        app_name: Optional[str] = None,
    ) -> ApplicationDocument:
        app = self._require_app_store().load(env, app_name or component)
        return self.bind_trait(app, component, trait_kind, values)

    def detach_trait(
        self, env: str, component: str, trait_kind: str, app_name: Optional[str] = None
    ) -> ApplicationDocument:
        app = self._require_app_store().load(env, app_name or component)
        return self.remove_trait(app, component, trait_kind)
