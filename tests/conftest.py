"""Shared fixtures for the faction map tests."""

from __future__ import annotations

import pytest

from factionmap.models import MapOptions
from tests.helpers import make_set, make_system


@pytest.fixture
def settings_dir(tmp_path, monkeypatch):
    """Point per-guild settings at a temporary directory."""
    import utils.settings as settings

    d = tmp_path / "settings"
    monkeypatch.setattr(settings, "SETTINGS_DIR", d)
    return d


@pytest.fixture
def options():
    return MapOptions(threshold_ly=30.0)


@pytest.fixture
def skirmish():
    """Primary controls P at the origin; rival controls R 10 ly away."""
    primary = make_set("Canonn", make_system("P", 0, 0, 0, "Canonn"))
    rival = make_set("Rivals", make_system("R", 10, 0, 0, "Rivals"))
    return primary, rival
