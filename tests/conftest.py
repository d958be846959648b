"""Shared fixtures for mihoro tests."""

from pathlib import Path

import pytest

from mihoro.config.loader import save_settings
from mihoro.config.models import DaemonConfigOverrides, Settings, default_settings

REMOTE_CONFIG = """\
mixed-port: 7893
proxies:
  - name: hk-01
    type: ss
    server: hk.example.com
    port: 443
    cipher: aes-128-gcm
    password: hunter2
proxy-groups:
  - name: PROXY
    type: select
    proxies: [hk-01, DIRECT]
rules:
  - DOMAIN-SUFFIX,google.com,PROXY
  - MATCH,DIRECT
dns:
  enable: true
  nameserver: [223.5.5.5, 119.29.29.29]
tun: null
"""


@pytest.fixture
def overrides() -> DaemonConfigOverrides:
    return default_settings().daemon_config


@pytest.fixture
def make_settings(tmp_path):
    """Build Settings whose local paths all live under tmp_path."""

    def _make(**fields) -> Settings:
        data = {
            "remote_binary_url": "https://example.com/mihomo-linux-amd64.gz",
            "remote_config_url": "https://example.com/config.yaml",
            "binary_path": str(tmp_path / "bin" / "mihomo"),
            "config_root": str(tmp_path / "mihomo"),
            "service_unit_root": str(tmp_path / "systemd" / "user"),
            "daemon_config": default_settings().daemon_config,
        }
        data.update(fields)
        return Settings(**data)

    return _make


@pytest.fixture
def settings_file(tmp_path, make_settings):
    """Write Settings to tmp_path/mihoro.toml and return the path."""

    def _write(**fields) -> Path:
        path = tmp_path / "mihoro.toml"
        save_settings(make_settings(**fields), path)
        return path

    return _write


@pytest.fixture
def remote_config_text() -> str:
    """A subscription config.yaml with only keys mihoro does not manage."""
    return REMOTE_CONFIG
