# factionmap/map_renderer.py
import io
import logging
import math
from typing import List, Sequence, Set, Tuple

from factionmap.config import (
    AXIS_COLOR,
    BACKGROUND,
    FONT_SIZE,
    GRID_COLOR,
    GRID_LABEL_COLOR,
    LABEL_COLOR,
    LEGEND_FILL,
    LEGEND_MARGIN,
    LEGEND_NAME_MAX,
    MARKER_COLORS,
    MARKER_RADIUS,
    MAX_GRID_LINES,
    MIN_SPAN_LY,
    ORIGIN_COLOR,
    ORIGIN_NAME,
    OVERLAP_LABEL_COLOR,
    PADDING_RATIO,
    RING_COLOR,
    RING_RADIUS,
)
from factionmap.errors import NoDataToRender
from factionmap.models import FactionSystemSet, MapOptions, ProximityReport, RenderSpace, StarSystem
from factionmap.proximity import near_enemy
from factionmap.surface import DrawingSurface, PillowSurface

logger = logging.getLogger(__name__)

PRIMARY = "primary"
RIVAL = "rival"


# ---- projection -------------------------------------------------------------
def _padded(lo: float, hi: float, padding: float, min_span: float) -> Tuple[float, float]:
    span = hi - lo
    if span < min_span:
        mid = (lo + hi) / 2.0
        lo, hi = mid - min_span / 2.0, mid + min_span / 2.0
        span = min_span
    pad = span * padding
    return lo - pad, hi + pad


def compute_render_space(systems: Sequence[StarSystem], width: int, height: int,
                         padding: float = PADDING_RATIO, min_span: float = MIN_SPAN_LY,
                         reserve_right: float = 0.0) -> RenderSpace:
    """
    Fit galactic x (horizontal) / z (vertical) of `systems` onto the canvas,
    one scale for both axes, content centred. The rightmost `reserve_right`
    pixels are kept free of data (the legend column).
    """
    if not systems:
        raise NoDataToRender()
    xs = [s.x for s in systems]
    zs = [s.z for s in systems]
    min_x, max_x = _padded(min(xs), max(xs), padding, min_span)
    min_z, max_z = _padded(min(zs), max(zs), padding, min_span)

    fit_w = width - reserve_right
    scale = min(fit_w / (max_x - min_x), height / (max_z - min_z))
    offset_x = (fit_w - (max_x - min_x) * scale) / 2.0
    offset_z = (height - (max_z - min_z) * scale) / 2.0
    return RenderSpace(width=width, height=height, min_x=min_x, max_x=max_x, min_z=min_z, max_z=max_z,
                       scale=scale, offset_x=offset_x, offset_z=offset_z)


# ---- grid / axes ------------------------------------------------------------
def _grid_step(span: float, base_step: float, max_lines: int = MAX_GRID_LINES) -> float:
    step = base_step
    while span / step > max_lines:
        step *= 2
    return step


def grid_values(lo: float, hi: float, step: float) -> List[float]:
    return [k * step for k in range(math.ceil(lo / step), math.floor(hi / step) + 1)]


def _fmt_ly(v: float) -> str:
    return str(int(v)) if float(v).is_integer() else f"{v:.1f}"


def _draw_grid(surface: DrawingSurface, space: RenderSpace, base_step: float) -> float:
    x_lo, x_hi, z_lo, z_hi = space.visible_range()
    step = _grid_step(max(x_hi - x_lo, z_hi - z_lo), base_step)

    for x in grid_values(x_lo, x_hi, step):
        px, _ = space.to_px(x, 0.0)
        surface.line([(px, 0), (px, space.height)], GRID_COLOR, 1)
        surface.text((px + 3, 4), _fmt_ly(x), GRID_LABEL_COLOR)
    for z in grid_values(z_lo, z_hi, step):
        _, py = space.to_px(0.0, z)
        surface.line([(0, py), (space.width, py)], GRID_COLOR, 1)
        surface.text((4, py + 2), _fmt_ly(z), GRID_LABEL_COLOR)
    return step


def _draw_axes(surface: DrawingSurface, space: RenderSpace) -> bool:
    """Crosshair through the galactic origin; returns True when it is on canvas."""
    x_lo, x_hi, z_lo, z_hi = space.visible_range()
    ox, oy = space.to_px(0.0, 0.0)
    x_visible = x_lo <= 0.0 <= x_hi
    z_visible = z_lo <= 0.0 <= z_hi
    if x_visible:
        surface.line([(ox, 0), (ox, space.height)], AXIS_COLOR, 2)
    if z_visible:
        surface.line([(0, oy), (space.width, oy)], AXIS_COLOR, 2)
    if x_visible and z_visible:
        surface.circle((ox, oy), 7, fill=ORIGIN_COLOR, outline=(0, 0, 0, 255), width=2)
        surface.text((ox + 10, oy - 18), ORIGIN_NAME, ORIGIN_COLOR, stroke=True)
        return True
    return False


# ---- systems ----------------------------------------------------------------
def marker_category(system: StarSystem, faction_set: FactionSystemSet, side: str) -> str:
    state = "controlled" if system.controlled_by(faction_set.faction) else "present"
    return f"{side}_{state}"


def _is_clear(idx: int, entries, positions, clearance: float) -> bool:
    name = entries[idx][0].name
    x, y = positions[idx]
    for j, (other, _) in enumerate(entries):
        if j == idx or other.name == name:
            continue
        ox, oy = positions[j]
        if math.hypot(x - ox, y - oy) < clearance:
            return False
    return True


def _draw_systems(surface: DrawingSurface, space: RenderSpace, primary: FactionSystemSet,
                  rival: FactionSystemSet, overlap_names: Set[str], near: dict,
                  options: MapOptions) -> Tuple[List, List]:
    entries = [(s, PRIMARY) for s in primary] + [(s, RIVAL) for s in rival]
    sets = {PRIMARY: primary, RIVAL: rival}
    positions = [space.to_px(s.x, s.z) for s, _ in entries]

    for (s, side), pos in zip(entries, positions):
        color = MARKER_COLORS[marker_category(s, sets[side], side)]
        surface.circle(pos, MARKER_RADIUS, fill=color, outline=(0, 0, 0, 255), width=1)

    labelled: Set[str] = set()
    for idx, ((s, side), (px, py)) in enumerate(zip(entries, positions)):
        if s.name in labelled:
            continue
        if s.name in overlap_names:
            surface.text((px + 9, py - 8), s.name, OVERLAP_LABEL_COLOR, stroke=True)
        elif options.always_label_near_enemy and s.name in near[side]:
            surface.text((px + 9, py - 8), s.name, LABEL_COLOR, stroke=True)
        elif _is_clear(idx, entries, positions, options.label_clearance_px):
            surface.text((px + 9, py - 8), s.name, LABEL_COLOR, stroke=True)
        else:
            continue
        labelled.add(s.name)
    return entries, positions


def _draw_rings(surface: DrawingSurface, entries, positions, near: dict) -> int:
    count = 0
    for (s, side), pos in zip(entries, positions):
        if s.name in near[side]:
            surface.circle(pos, RING_RADIUS, fill=None, outline=RING_COLOR, width=2)
            count += 1
    return count


# ---- legend -----------------------------------------------------------------
def _legend_name(name: str) -> str:
    if len(name) <= LEGEND_NAME_MAX:
        return name
    return name[:LEGEND_NAME_MAX - 3].rstrip() + "..."


def legend_rows(primary: str, rival: str, threshold_ly: float) -> List[Tuple[str, str]]:
    primary, rival = _legend_name(primary), _legend_name(rival)
    return [
        ("primary_controlled", f"{primary} (controlled)"),
        ("primary_present", f"{primary} (present)"),
        ("rival_controlled", f"{rival} (controlled)"),
        ("rival_present", f"{rival} (present)"),
        ("ring", f"within {_fmt_ly(threshold_ly)} ly of enemy control"),
    ]


def legend_box(width: int, height: int, rows: Sequence[Tuple[str, str]]) -> Tuple[float, float, float, float]:
    """(x1, y1, x2, y2) of the legend, anchored bottom-right."""
    row_h = FONT_SIZE + 8
    box_w = max(len(label) for _, label in rows) * (FONT_SIZE * 0.6) + 48
    box_h = row_h * len(rows) + 16
    x1 = width - LEGEND_MARGIN - box_w
    y1 = height - LEGEND_MARGIN - box_h
    return x1, y1, x1 + box_w, y1 + box_h


def _draw_legend(surface: DrawingSurface, rows: Sequence[Tuple[str, str]]) -> None:
    # bottom-right: grid labels live on the top and left edges
    box = legend_box(surface.width, surface.height, rows)
    x1, y1 = box[0], box[1]
    row_h = FONT_SIZE + 8
    surface.rect(box, fill=LEGEND_FILL, outline=GRID_LABEL_COLOR, width=1)

    for i, (key, label) in enumerate(rows):
        cy = y1 + 8 + i * row_h + row_h / 2
        sx = x1 + 18
        if key == "ring":
            surface.circle((sx, cy), MARKER_RADIUS + 2, fill=None, outline=RING_COLOR, width=2)
        else:
            surface.rect((sx - MARKER_RADIUS, cy - MARKER_RADIUS, sx + MARKER_RADIUS, cy + MARKER_RADIUS),
                         fill=MARKER_COLORS[key], outline=(0, 0, 0, 255), width=1)
        surface.text((sx + 16, cy - FONT_SIZE / 2 - 1), label, LABEL_COLOR)


# ---- entry points -----------------------------------------------------------
def render_faction_map(surface: DrawingSurface, primary: FactionSystemSet, rival: FactionSystemSet,
                       report: ProximityReport, options: MapOptions) -> RenderSpace:
    """
    Draw the whole map onto `surface`: background, grid, origin axes,
    system markers and labels, near-enemy rings, legend.
    The legend's column is kept out of the data area so it never covers a marker.
    """
    rows = legend_rows(primary.faction, rival.faction, report.threshold_ly)
    legend_x1 = legend_box(surface.width, surface.height, rows)[0]
    space = compute_render_space(list(primary) + list(rival), surface.width, surface.height,
                                 reserve_right=surface.width - legend_x1 + LEGEND_MARGIN)

    surface.fill(BACKGROUND)
    step = _draw_grid(surface, space, options.grid_step_ly)
    origin_shown = _draw_axes(surface, space)

    primary_near, rival_near = near_enemy(primary, rival, report.threshold_ly, options.ring_mode)
    near = {PRIMARY: primary_near, RIVAL: rival_near}
    overlap_names = {s.name for s in report.overlap_systems}

    entries, positions = _draw_systems(surface, space, primary, rival, overlap_names, near, options)
    rings = _draw_rings(surface, entries, positions, near)
    _draw_legend(surface, rows)

    logger.debug(
        f"rendered {len(entries)} marker(s), {rings} ring(s), grid {step} ly, "
        f"scale {space.scale:.3f} px/ly, origin {'on' if origin_shown else 'off'} canvas"
    )
    return space


def render_faction_map_png(primary: FactionSystemSet, rival: FactionSystemSet,
                           report: ProximityReport, options: MapOptions) -> io.BytesIO:
    if not len(primary) and not len(rival):
        raise NoDataToRender()
    width, height = options.canvas_size
    surface = PillowSurface(width, height, font_size=FONT_SIZE)
    render_faction_map(surface, primary, rival, report, options)
    return surface.to_png()
