"""Unit tests configuration file."""

import textwrap

import pytest

from derivekit.generator import load


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def define():
    """Generate and execute a module from definition text, returning its namespace."""

    def _define(text: str) -> dict:
        return load(textwrap.dedent(text))

    return _define
