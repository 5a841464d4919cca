from __future__ import annotations

from pathlib import Path
from typing import Iterable

import httpx
import pytest
from dotenv import load_dotenv

# Load dotenv files early so settings built by tests see the same environment
TEST_ROOT = Path(__file__).resolve().parent
# Load test/.env first, then fallback to test/.env.example for defaults
load_dotenv(TEST_ROOT / ".env", override=False)
load_dotenv(TEST_ROOT / ".env.example", override=False)


@pytest.fixture(autouse=True)
def _isolated_hub_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the hub home at a per-test directory so no test touches ~/.capability-hub."""
    home = tmp_path / "hub-home"
    monkeypatch.setenv("CAPABILITY_HUB_HOME", str(home))
    monkeypatch.delenv("CAPABILITY_HUB_DATABASE_URL", raising=False)
    return home


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
    )

    orig_sync = httpx._client.Client.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
