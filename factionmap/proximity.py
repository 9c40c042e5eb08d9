# factionmap/proximity.py
import logging
import math
from typing import List, Set, Tuple

from factionmap.config import RING_MODES
from factionmap.models import FactionSystemSet, ProximityMatch, ProximityReport, StarSystem

logger = logging.getLogger(__name__)


def distance(a: StarSystem, b: StarSystem) -> float:
    """3D euclidean distance in ly."""
    dx = a.x - b.x
    dy = a.y - b.y
    dz = a.z - b.z
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def analyze(primary: FactionSystemSet, rival: FactionSystemSet, threshold_ly: float) -> ProximityReport:
    """
    Overlap = primary systems that also appear by name in the rival set.
    Nearby = for each non-overlap rival system, the primary systems within
    `threshold_ly` (inclusive), closest first. Rival systems with nothing in
    range are left out.
    """
    rival_names = rival.names()
    overlap = tuple(s for s in primary if s.name in rival_names)
    overlap_names = {s.name for s in overlap}

    nearby: List[ProximityMatch] = []
    for r in rival:
        if r.name in overlap_names:
            continue
        hits: List[Tuple[StarSystem, float]] = []
        for p in primary:
            d = distance(r, p)
            if d <= threshold_ly:
                hits.append((p, d))
        if not hits:
            continue
        # sorted() is stable: equal distances keep fetch order
        hits = sorted(hits, key=lambda h: h[1])
        nearby.append(ProximityMatch(rival_system=r, nearby_primary_systems=tuple(hits)))

    logger.debug(
        f"analyze {primary.faction!r} vs {rival.faction!r} @ {threshold_ly} ly: "
        f"{len(overlap)} overlap, {len(nearby)} nearby"
    )
    return ProximityReport(threshold_ly=threshold_ly, overlap_systems=overlap, nearby=tuple(nearby))


def _near_controlled(systems: FactionSystemSet, opposing: FactionSystemSet, threshold_ly: float) -> Set[str]:
    targets = opposing.controlled()
    out: Set[str] = set()
    for s in systems:
        if any(distance(s, t) <= threshold_ly for t in targets):
            out.add(s.name)
    return out


def near_enemy(primary: FactionSystemSet, rival: FactionSystemSet, threshold_ly: float,
               mode: str = "symmetric") -> Tuple[Set[str], Set[str]]:
    """
    Names of systems that sit within range of a system the *other* faction
    controls, as (primary_names, rival_names). In asymmetric mode only the
    primary side is evaluated.
    """
    if mode not in RING_MODES:
        raise ValueError(f"unknown ring mode: {mode!r}")
    primary_hits = _near_controlled(primary, rival, threshold_ly)
    rival_hits = _near_controlled(rival, primary, threshold_ly) if mode == "symmetric" else set()
    return primary_hits, rival_hits
