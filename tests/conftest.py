"""Shared fixtures for the deptrace tests."""

import logging

import pytest


@pytest.fixture(autouse=True)
def isolated_user_dirs(tmp_path_factory, monkeypatch):
    """Keep config and log files out of the real user directories."""
    user_dirs = tmp_path_factory.mktemp("user-dirs")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(user_dirs / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(user_dirs / "xdg-state"))

    root_logger = logging.getLogger()
    before = list(root_logger.handlers)
    yield

    # The CLI installs its own handlers on the root logger
    for handler in root_logger.handlers[:]:
        if handler not in before:
            root_logger.removeHandler(handler)
            handler.close()
