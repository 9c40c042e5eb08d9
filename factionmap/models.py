# factionmap/models.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from factionmap.config import (
    CANVAS_SIZE,
    DEFAULT_THRESHOLD_LY,
    FIELD_BUDGET,
    GRID_STEP_LY,
    LABEL_CLEARANCE_PX,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StarSystem:
    """One resolved system: galactic coordinates (ly) and who controls it."""
    name: str
    x: float
    y: float
    z: float
    controlling_faction: Optional[str] = None  # None = uncontrolled / unknown

    def coords(self) -> Tuple[float, float, float]:
        return self.x, self.y, self.z

    def controlled_by(self, faction: str) -> bool:
        if not self.controlling_faction:
            return False
        return self.controlling_faction.casefold() == faction.casefold()


@dataclass(frozen=True)
class FactionSystemSet:
    """Systems where one faction is present, in fetch order."""
    faction: str
    systems: Tuple[StarSystem, ...] = ()

    def __len__(self) -> int:
        return len(self.systems)

    def __iter__(self):
        return iter(self.systems)

    def names(self) -> set[str]:
        return {s.name for s in self.systems}

    def controlled(self) -> List[StarSystem]:
        return [s for s in self.systems if s.controlled_by(self.faction)]


@dataclass(frozen=True)
class ProximityMatch:
    rival_system: StarSystem
    nearby_primary_systems: Tuple[Tuple[StarSystem, float], ...]


@dataclass(frozen=True)
class ProximityReport:
    threshold_ly: float
    overlap_systems: Tuple[StarSystem, ...] = ()
    nearby: Tuple[ProximityMatch, ...] = ()

    def nearby_map(self) -> Dict[str, ProximityMatch]:
        # dicts keep insertion order, so this mirrors `nearby`
        return {m.rival_system.name: m for m in self.nearby}


@dataclass(frozen=True)
class RenderSpace:
    """
    Projection of galactic x/z onto the canvas. Larger z is drawn higher up.
    """
    width: int
    height: int
    min_x: float
    max_x: float
    min_z: float
    max_z: float
    scale: float      # px per ly, same on both axes
    offset_x: float
    offset_z: float

    def to_px(self, x: float, z: float) -> Tuple[float, float]:
        px = self.offset_x + (x - self.min_x) * self.scale
        py = self.height - (self.offset_z + (z - self.min_z) * self.scale)
        return px, py

    def x_at(self, px: float) -> float:
        return self.min_x + (px - self.offset_x) / self.scale

    def z_at(self, py: float) -> float:
        return self.min_z + (self.height - py - self.offset_z) / self.scale

    def visible_range(self) -> Tuple[float, float, float, float]:
        """(x_lo, x_hi, z_lo, z_hi) at the canvas edges."""
        return self.x_at(0), self.x_at(self.width), self.z_at(self.height), self.z_at(0)


@dataclass(frozen=True)
class MapOptions:
    """Per-command knobs for one pipeline run."""
    threshold_ly: float = DEFAULT_THRESHOLD_LY
    ring_mode: str = "symmetric"          # "symmetric" | "asymmetric"
    always_label_near_enemy: bool = True
    render_image: bool = True
    field_budget: int = FIELD_BUDGET
    label_clearance_px: float = LABEL_CLEARANCE_PX
    grid_step_ly: float = GRID_STEP_LY
    canvas_size: Tuple[int, int] = CANVAS_SIZE


@dataclass
class FactionMapResult:
    primary: FactionSystemSet
    rival: FactionSystemSet
    report: ProximityReport
    sections: List[Tuple[str, str]] = field(default_factory=list)
    summary: str = ""
    image: Optional[Any] = None  # io.BytesIO holding a PNG, or None when not rendered


# ---------------------------------------------------------------------------
# Parsing of upstream system docs
# ---------------------------------------------------------------------------
def _finite(v: Any) -> Optional[float]:
    if isinstance(v, bool) or v is None:
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def parse_system_doc(doc: Dict[str, Any]) -> Optional[StarSystem]:
    """
    Validate one upstream system doc. Returns None (and logs) when the name or
    any coordinate is missing; a missing controller is kept as None.
    """
    if not isinstance(doc, dict):
        logger.warning(f"Ignoring non-object system doc: {doc!r}")
        return None
    name = doc.get("name")
    if not isinstance(name, str) or not name.strip():
        logger.warning(f"Ignoring system doc without a name: {doc.get('_id')}")
        return None

    x, y, z = _finite(doc.get("x")), _finite(doc.get("y")), _finite(doc.get("z"))
    if x is None or y is None or z is None:
        logger.warning(f"Ignoring system {name!r}: missing or invalid coordinates")
        return None

    ctrl = doc.get("controlling_minor_faction_cased") or doc.get("controlling_minor_faction")
    if not isinstance(ctrl, str) or not ctrl.strip():
        ctrl = None

    return StarSystem(name=name.strip(), x=x, y=y, z=z, controlling_faction=ctrl.strip() if ctrl else None)
