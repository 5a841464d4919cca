"""Capability center HTTP transport

Overview
--------
Thin HTTP client used by :class:`~capability_hub.registry.client.RegistryClient`
to read a capability center. A center is addressed by a single URL that
serves its definition manifests; template bodies referenced by
``templateURI`` are fetched individually.

Accepted index shapes
---------------------
- a JSON list of manifests,
- a JSON object with ``items`` (or ``manifests``) holding the list,
- a YAML stream with one manifest per document.

List entries may be mappings or YAML/JSON strings. Entries are returned
as-is; parsing and validation happen per item in the registry client so a
single broken manifest never fails the whole index.

Authentication
--------------
A center token is sent as ``Authorization: Bearer <token>``.

Errors
------
HTTP and connection failures are raised as ``RemoteFetchError`` with the
status code and response body where available.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import httpx
import yaml

from ..errors import RemoteFetchError


@runtime_checkable
class RegistryTransport(Protocol):
    """Remote access used by the registry client."""

    def fetch_manifests(self, address: str, token: Optional[str] = None) -> List[Any]:
        """Return the raw manifests published at ``address``."""
        ...

    def fetch_body(self, uri: str) -> bytes:
        """Return the raw bytes stored at ``uri``."""
        ...


class HttpRegistryTransport:
    """``httpx``-based :class:`RegistryTransport`.

    Design
    ------
    - Keeps a single reusable ``httpx.Client`` (injectable for tests).
    - Normalizes the accepted index shapes into a flat list.
    - Never raises raw ``httpx`` exceptions to callers.
    """

    def __init__(self, *, timeout: float = 10.0, client: Optional[httpx.Client] = None) -> None:
        """Create a transport.

        Args:
            timeout: Default HTTP timeout for the internal client.
            client: Optional preconfigured ``httpx.Client`` to use.
        """
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def _headers(token: Optional[str]) -> Dict[str, str]:
        """Build request headers and include Authorization when a token is set."""
        headers: Dict[str, str] = {"Accept": "application/json, application/yaml, text/plain"}
        if token:
            headers["Authorization"] = token if token.lower().startswith("bearer ") else f"Bearer {token}"
        return headers

    def _get(self, url: str, token: Optional[str] = None) -> httpx.Response:
        try:
            r = self._client.get(url, headers=self._headers(token))
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteFetchError(
                f"fetch {url} failed: {e.response.status_code}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise RemoteFetchError(f"fetch {url} failed: {e}") from e
        return r

    def fetch_manifests(self, address: str, token: Optional[str] = None) -> List[Any]:
        """Fetch and normalize the manifest index of a center.

        API
        ---
        - Method/Path: ``GET <address>``
        - Auth: Optional bearer token

        Returns:
            Raw manifest entries (mappings or unparsed strings).

        Raises:
            RemoteFetchError: When the index cannot be fetched or decoded.
        """
        r = self._get(address, token)
        try:
            data = r.json()
        except ValueError:
            try:
                data = [doc for doc in yaml.safe_load_all(r.text) if doc is not None]
            except yaml.YAMLError as e:
                raise RemoteFetchError(f"center index at {address} is neither JSON nor YAML: {e}") from e
        if isinstance(data, dict):
            data = data.get("items", data.get("manifests", []))
        if not isinstance(data, list):
            raise RemoteFetchError(f"center index at {address} is not a list of manifests")
        manifests: List[Any] = []
        for entry in data:
            if isinstance(entry, str):
                try:
                    entry = yaml.safe_load(entry)
                except yaml.YAMLError as e:
                    self._logger.warning("HttpRegistryTransport: undecodable manifest entry at %s: %s", address, e)
            manifests.append(entry)
        self._logger.debug("HttpRegistryTransport: fetched %d manifests from %s", len(manifests), address)
        return manifests

    def fetch_body(self, uri: str) -> bytes:
        """Fetch a template body.

        Raises:
            RemoteFetchError: When ``uri`` is unreachable or returns non-2xx.
        """
        return self._get(uri).content

    def close(self) -> None:
        self._client.close()
