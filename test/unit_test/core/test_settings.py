from __future__ import annotations

from pathlib import Path

import pytest

from capability_hub.core.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CAPABILITY_HUB_HOME", raising=False)
    s = Settings(_env_file=None)

    assert s.home_dir == Path("~/.capability-hub")
    assert s.system_namespace == "vela-system"
    assert s.template_ext == "cue"
    assert s.http_timeout == 10.0
    assert s.database_url is None
    assert s.log_level == "INFO"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CAPABILITY_HUB_HOME", str(tmp_path))
    monkeypatch.setenv("CAPABILITY_HUB_SYSTEM_NAMESPACE", "platform")
    monkeypatch.setenv("CAPABILITY_HUB_TEMPLATE_EXT", "tmpl")
    monkeypatch.setenv("CAPABILITY_HUB_HTTP_TIMEOUT", "2.5")
    monkeypatch.setenv("CAPABILITY_HUB_DATABASE_URL", "sqlite://")
    monkeypatch.setenv("CAPABILITY_HUB_HELM_BINARY", "/opt/helm")

    s = Settings(_env_file=None)

    assert s.storage.root == tmp_path
    assert s.storage.template_ext == "tmpl"
    assert s.storage.database_url == "sqlite://"
    assert s.cluster.system_namespace == "platform"
    assert s.cluster.helm_binary == "/opt/helm"
    assert s.registry.http_timeout == 2.5


def test_storage_directories_hang_off_home(tmp_path: Path) -> None:
    s = Settings(_env_file=None, CAPABILITY_HUB_HOME=str(tmp_path))
    storage = s.storage

    assert storage.centers_dir == tmp_path / "centers"
    assert storage.capabilities_dir == tmp_path / "capabilities"
    assert storage.envs_dir == tmp_path / "envs"


def test_home_expands_user(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    s = Settings(_env_file=None, CAPABILITY_HUB_HOME="~/hub")

    assert s.storage.root == tmp_path / "hub"
