"""Shared fixtures for repoget tests."""

import os

import pytest

from repoget.config import get_default_config, merge_configs


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep tests away from the real home directory and REPOGET_* settings."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for key in list(os.environ):
        if key.startswith("REPOGET_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("REPOGET_CONFIG", str(home / "no-such-config.json"))
    monkeypatch.setenv("USER", "tester")
    return home


@pytest.fixture
def root(tmp_path, monkeypatch):
    """A single local root exported through REPOGET_ROOT."""
    path = tmp_path / "root"
    path.mkdir()
    monkeypatch.setenv("REPOGET_ROOT", str(path))
    return os.path.realpath(str(path))


@pytest.fixture
def make_config():
    """Build a config dict from the defaults plus overrides."""
    def _make(**sections):
        config = get_default_config()
        config["general"]["user"] = "tester"
        return merge_configs(config, sections)
    return _make


@pytest.fixture
def make_repo():
    """Create ``<root>/<rel_path>`` looking like a checkout of some VCS."""
    def _make(root, rel_path, marker=".git"):
        path = os.path.join(root, *rel_path.split("/"))
        os.makedirs(os.path.join(path, marker))
        return path
    return _make
