"""Error types for the capability hub.

Defines the exception hierarchy raised by the registry client, the local
stores, the installer and the document assembler.

Usage:
- Catch ``CapabilityHubError`` for any failure raised by this package.
- ``NotFoundError`` is recoverable and frequently means "nothing to do".
- ``AlreadyExistsError`` is raised by cluster collaborators and folded into
  success by the installer.
- Messages are meant to be surfaced verbatim by CLI/API layers.
"""

from __future__ import annotations

from typing import Any, Optional


class CapabilityHubError(Exception):
    """Base error for all capability hub exceptions."""


class NotFoundError(CapabilityHubError):
    """Raised when a capability, center, component or cluster object is absent."""

    def __init__(self, resource: str, name: str, *, hint: Optional[str] = None) -> None:
        message = f"{resource} '{name}' not found"
        if hint:
            message = f"{message}, {hint}"
        super().__init__(message)
        self.resource = resource
        self.name = name


class AlreadyExistsError(CapabilityHubError):
    """Raised by cluster collaborators when an object is already registered."""

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind} '{name}' already exists")
        self.kind = kind
        self.name = name


class DocumentValidationError(CapabilityHubError):
    """Raised when an application document is malformed after a bind."""


class RequiredParameterError(DocumentValidationError):
    """Raised when a required capability parameter has no value."""

    def __init__(self, parameter: str) -> None:
        super().__init__(f'required flag(s) "{parameter}" not set')
        self.parameter = parameter


class TypeMismatchError(CapabilityHubError):
    """Raised when a raw value cannot be coerced to the declared parameter kind."""

    def __init__(self, parameter: str, message: str) -> None:
        super().__init__(f'get flag(s) "{parameter}" err {message}')
        self.parameter = parameter


class RemoteFetchError(CapabilityHubError):
    """Raised when a registry manifest or template body cannot be fetched.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional payload returned by the remote source.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class TemplateError(CapabilityHubError):
    """Raised when a definition carries no usable template or parameter block."""


class ResourceKindResolutionError(CapabilityHubError):
    """Raised when cluster discovery cannot resolve a definition reference."""


class ProvisionError(CapabilityHubError):
    """Raised when a chart install or uninstall fails."""


class UnsupportedCapabilityError(CapabilityHubError):
    """Raised for capability kinds the installer cannot handle (scopes)."""
