"""
Shared test fixtures for conni-cli tests.
Patches the config module so no real .env, profile file or network is used.
"""

import os
from unittest.mock import MagicMock

import pytest

from conni_cli import config
from conni_cli.profiles import ProfileConfig, ProfileCredentials

FRONT_MATTER = """\
---
profiles:
  cloud:
    host: https://cloud.atlassian.net/wiki
    email: dev@example.com
    apiToken: cloud-token-123
  staging:
    host: https://staging.example.com/wiki
    email: qa@example.com
    apiToken: staging-token-456
defaultProfile: cloud
defaultFormat: json
---

# notes below the fence are ignored
"""


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Ensure every test starts with a clean config state.
    Prevents tests from reading the real .env, profile file or legacy INI."""
    monkeypatch.setattr(config, "env", {})
    monkeypatch.setattr(config, "PROJECT_ROOT", "")
    monkeypatch.setattr(config, "LEGACY_INI_PATH", str(tmp_path / "no-such.ini"))
    monkeypatch.setattr(config, "HTTP_LOG_ENABLED", False)
    monkeypatch.setattr(config, "HTTP_LOG_SAMPLE_RATE", 1.0)


@pytest.fixture
def profile_config():
    return ProfileConfig(
        profiles={
            "cloud": ProfileCredentials(
                "https://cloud.atlassian.net/wiki", "dev@example.com", "cloud-token-123"
            ),
            "staging": ProfileCredentials(
                "https://staging.example.com/wiki", "qa@example.com", "staging-token-456"
            ),
        },
        default_profile="cloud",
    )


@pytest.fixture
def fake_factory():
    """Client factory recording every handle it builds (one MagicMock per call)."""
    built = []

    def factory(options):
        client = MagicMock(name=f"client<{options['host']}>")
        client.options = options
        built.append(client)
        return client

    factory.built = built
    return factory


@pytest.fixture
def project_root(tmp_path):
    """A project directory holding a two-profile front-matter config."""
    conf_dir = tmp_path / "project" / config.PROFILE_DIRNAME
    conf_dir.mkdir(parents=True)
    (conf_dir / config.PROFILE_FILENAME).write_text(FRONT_MATTER, encoding="utf-8")
    return str(tmp_path / "project")


@pytest.fixture
def empty_root(tmp_path):
    root = tmp_path / "empty"
    root.mkdir()
    return str(root)


@pytest.fixture
def write_profile():
    """Write front-matter text into <root>/.conni/ and return the file path."""

    def _write(root, text):
        conf_dir = os.path.join(root, config.PROFILE_DIRNAME)
        os.makedirs(conf_dir, exist_ok=True)
        path = os.path.join(conf_dir, config.PROFILE_FILENAME)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    return _write


@pytest.fixture
def remote(monkeypatch):
    """Replace the default client class used by ClientPool; returns the shared handle."""
    client = MagicMock(name="ConfluenceClient()")
    cls = MagicMock(name="ConfluenceClient")
    cls.from_options.return_value = client
    monkeypatch.setattr("conni_cli.pool.ConfluenceClient", cls)
    client.cls = cls
    return client
