# factionmap/report.py
from typing import Iterable, List, Tuple

from factionmap.config import EMPTY_BLOCK_TEXT, FIELD_BUDGET
from factionmap.models import FactionSystemSet, ProximityMatch, ProximityReport, StarSystem


def build_block(lines: Iterable[str], budget: int = FIELD_BUDGET, empty_text: str = EMPTY_BLOCK_TEXT) -> str:
    """
    Join lines with newlines while the text stays within `budget` characters.
    The first line that would overflow stops the block and a `... N more`
    line reports how many were left out.
    """
    lines = list(lines)
    if not lines:
        return empty_text

    text = ""
    shown = 0
    for ln in lines:
        candidate = f"{text}\n{ln}" if text else ln
        if len(candidate) > budget:
            break
        text = candidate
        shown += 1

    omitted = len(lines) - shown
    if omitted:
        more = f"... {omitted} more"
        text = f"{text}\n{more}" if text else more
    return text


def overlap_line(system: StarSystem) -> str:
    if system.controlling_faction:
        return f"**{system.name}** (controlled by {system.controlling_faction})"
    return f"**{system.name}** (uncontrolled)"


def nearby_line(match: ProximityMatch) -> str:
    near = ", ".join(f"{p.name} ({d:.1f} ly)" for p, d in match.nearby_primary_systems)
    return f"**{match.rival_system.name}** → {near}"


def summary_line(primary: FactionSystemSet, rival: FactionSystemSet, report: ProximityReport) -> str:
    return (
        f"**{primary.faction}**: {len(primary)} systems ({len(primary.controlled())} controlled) · "
        f"**{rival.faction}**: {len(rival)} systems ({len(rival.controlled())} controlled) · "
        f"threshold {report.threshold_ly:g} ly"
    )


def assemble_report(report: ProximityReport, budget: int = FIELD_BUDGET) -> List[Tuple[str, str]]:
    """Ordered (title, body) sections for the messaging layer."""
    overlap = build_block((overlap_line(s) for s in report.overlap_systems), budget)
    nearby = build_block((nearby_line(m) for m in report.nearby), budget)
    return [
        (f"⚔️ Shared systems ({len(report.overlap_systems)})", overlap),
        (f"📡 Rival systems within {report.threshold_ly:g} ly ({len(report.nearby)})", nearby),
    ]
