"""Builders shared by the faction map tests."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

from factionmap.models import FactionSystemSet, StarSystem


def make_system(name: str, x: float, y: float, z: float, controller: Optional[str] = None) -> StarSystem:
    return StarSystem(name=name, x=float(x), y=float(y), z=float(z), controlling_faction=controller)


def make_set(faction: str, *systems: StarSystem) -> FactionSystemSet:
    return FactionSystemSet(faction=faction, systems=tuple(systems))


def fake_response(payload: Any) -> MagicMock:
    resp = MagicMock()
    resp.raise_for_status.return_value = None
    resp.json.return_value = payload
    return resp


def faction_doc(name: str, systems: List[str]) -> Dict[str, Any]:
    return {"name": name, "faction_presence": [{"system_name": s} for s in systems]}


def system_doc(name: str, x: float, y: float, z: float, controller: Optional[str] = None) -> Dict[str, Any]:
    return {
        "name": name,
        "x": x,
        "y": y,
        "z": z,
        "controlling_minor_faction": controller.lower() if controller else None,
        "controlling_minor_faction_cased": controller,
    }
