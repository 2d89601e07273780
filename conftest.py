"""Pytest configuration and fixtures for nodeimage tests.

Keeps the developer's own ~/.nodeimage/config.toml and NODEIMAGE_*
environment out of test runs.
"""

import os

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Remove NODEIMAGE_* overrides inherited from the shell.

    Config tests pass an explicit ``environ`` mapping; anything else must not
    see the developer's deployment settings.
    """
    for name in list(os.environ):
        if name.startswith("NODEIMAGE_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the default config file at tmp_path.

    Use this fixture's return value instead of ~/.nodeimage/config.toml.

    Example:
        def test_something(isolated_config):
            isolated_config.write_text('location = "westus2"')
            # ConfigManager.load_config() now reads it
    """
    from nodeimage.config import ConfigManager

    config_file = tmp_path / ".nodeimage" / "config.toml"
    config_file.parent.mkdir(parents=True)
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_FILE", config_file)
    return config_file
