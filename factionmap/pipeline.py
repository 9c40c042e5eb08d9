# factionmap/pipeline.py
import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from factionmap.config import DEFAULT_THRESHOLD_LY, FIELD_BUDGET, RING_MODES
from factionmap.ebgs_client import resolve_both
from factionmap.errors import InvalidInput, NoDataToRender
from factionmap.map_renderer import render_faction_map_png
from factionmap.models import FactionMapResult, MapOptions
from factionmap.proximity import analyze
from factionmap.report import assemble_report, summary_line

logger = logging.getLogger(__name__)

_QUOTES = "\"'“”‘’"


def parse_faction_args(raw: Optional[str]) -> Tuple[str, str]:
    """
    "Primary Faction, Rival Faction" -> ("Primary Faction", "Rival Faction").
    Case is kept as typed; the upstream match is exact.
    """
    if not raw or "," not in raw:
        raise InvalidInput("Give **two faction names separated by a comma**.")
    first, second = raw.split(",", 1)
    primary = first.strip().strip(_QUOTES).strip()
    rival = second.strip().strip(_QUOTES).strip()
    if not primary or not rival:
        raise InvalidInput("Both faction names are required.")
    if primary == rival:
        raise InvalidInput("The two faction names must be different.")
    return primary, rival


def options_from_settings(settings: Dict[str, Any], render_image: bool = True) -> MapOptions:
    """Build run options from a guild's settings dict (see utils/settings.py)."""
    try:
        threshold = float(settings.get("threshold_ly") or DEFAULT_THRESHOLD_LY)
    except (TypeError, ValueError):
        threshold = DEFAULT_THRESHOLD_LY
    if threshold <= 0:
        threshold = DEFAULT_THRESHOLD_LY
    mode = settings.get("ring_mode") or "symmetric"
    if mode not in RING_MODES:
        mode = "symmetric"
    return MapOptions(
        threshold_ly=threshold,
        ring_mode=mode,
        always_label_near_enemy=bool(settings.get("always_label_near_enemy", True)),
        render_image=render_image,
        field_budget=FIELD_BUDGET,
    )


async def run_faction_map(primary: str, rival: str, options: MapOptions) -> FactionMapResult:
    """
    resolve -> fetch -> analyze -> render/assemble. Every failure surfaces as a
    FactionMapError; nothing partial is returned.
    """
    primary_set, rival_set = await resolve_both(primary, rival)
    logger.info(
        f"Resolved {primary!r}: {len(primary_set)} system(s), {rival!r}: {len(rival_set)} system(s)"
    )

    report = analyze(primary_set, rival_set, options.threshold_ly)
    sections = assemble_report(report, options.field_budget)
    summary = summary_line(primary_set, rival_set, report)

    image = None
    if options.render_image:
        image = await asyncio.to_thread(render_faction_map_png, primary_set, rival_set, report, options)
    elif not len(primary_set) and not len(rival_set):
        raise NoDataToRender()

    return FactionMapResult(
        primary=primary_set,
        rival=rival_set,
        report=report,
        sections=sections,
        summary=summary,
        image=image,
    )
