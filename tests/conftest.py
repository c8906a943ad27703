"""Shared helpers for the calcexpr tests."""

import pytest

from calcexpr import config_manager
from calcexpr.Expression import Expression


def build(*keys):
    """Build an expression from key presses; every press must be accepted.

    Plain ints 0-9 stand for digit keys.
    """
    expr = Expression()
    for key in keys:
        assert expr.add(key), f"{key!r} was rejected"
    return expr


@pytest.fixture
def make_expr():
    return build


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep setting changes made by tests out of the shipped config.json."""
    path = tmp_path / "settings" / "config.json"
    path.parent.mkdir()
    monkeypatch.setattr(config_manager, "config_json", path)
    return path
