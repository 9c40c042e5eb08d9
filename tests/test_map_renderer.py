"""
Tests for the faction map renderer.

Layout is checked against a RecordingSurface; one test goes through Pillow
to make sure a real PNG comes out.
"""

from __future__ import annotations

import pytest
from PIL import Image

from factionmap.config import (
    LEGEND_NAME_MAX,
    MARKER_COLORS,
    MARKER_RADIUS,
    ORIGIN_NAME,
    OVERLAP_LABEL_COLOR,
    RING_COLOR,
)
from factionmap.errors import NoDataToRender
from factionmap.map_renderer import (
    compute_render_space,
    grid_values,
    legend_box,
    legend_rows,
    render_faction_map,
    render_faction_map_png,
)
from factionmap.models import MapOptions
from factionmap.proximity import analyze
from factionmap.surface import RecordingSurface
from tests.helpers import make_set, make_system

W, H = 1400, 1000


def _render(primary, rival, **opts):
    options = MapOptions(**{"threshold_ly": 30.0, **opts})
    surface = RecordingSurface(W, H)
    report = analyze(primary, rival, options.threshold_ly)
    space = render_faction_map(surface, primary, rival, report, options)
    return surface, space


def _rings(surface):
    return [c for c in surface.of("circle") if c[4] == RING_COLOR and c[3] is None and c[2] > 10]


def _marker_centres(surface):
    return [c[1] for c in surface.of("circle") if c[2] == MARKER_RADIUS and c[3] in MARKER_COLORS.values()]


# =============================================================================
# Projection
# =============================================================================


class TestRenderSpace:
    def test_padding_and_uniform_scale(self):
        systems = [make_system("A", 0, 0, 0), make_system("B", 100, 0, 50)]
        space = compute_render_space(systems, W, H)

        assert space.min_x == pytest.approx(-10.0)
        assert space.max_x == pytest.approx(110.0)
        assert space.min_z == pytest.approx(-5.0)
        assert space.max_z == pytest.approx(55.0)
        assert space.scale == pytest.approx(min(W / 120.0, H / 60.0))

    def test_content_is_centred(self):
        systems = [make_system("A", 0, 0, 0), make_system("B", 100, 0, 100)]
        space = compute_render_space(systems, W, H)
        left, _ = space.to_px(space.min_x, 0)
        right, _ = space.to_px(space.max_x, 0)
        assert left == pytest.approx(W - right)
        _, top = space.to_px(0, space.max_z)
        _, bottom = space.to_px(0, space.min_z)
        assert top == pytest.approx(0.0)
        assert bottom == pytest.approx(H)

    def test_single_point_has_nonzero_span(self):
        space = compute_render_space([make_system("Solo", 42, 7, -13)], W, H)
        assert space.max_x > space.min_x
        assert space.max_z > space.min_z
        px, py = space.to_px(42, -13)
        assert px == pytest.approx(W / 2)
        assert py == pytest.approx(H / 2)

    def test_reserved_column_stays_empty(self):
        systems = [make_system("A", -100, 0, 100), make_system("B", 100, 0, -100)]
        space = compute_render_space(systems, W, H, reserve_right=400)
        right, _ = space.to_px(space.max_x, 0)
        assert right <= W - 400 + 1e-6
        assert space.scale == pytest.approx(min((W - 400) / 240.0, H / 240.0))

    def test_empty_input_fails_fast(self):
        with pytest.raises(NoDataToRender):
            compute_render_space([], W, H)


# =============================================================================
# Drawing order and content
# =============================================================================


class TestRenderFactionMap:
    def test_background_first_legend_last(self, skirmish):
        surface, _ = _render(*skirmish)
        assert surface.calls[0][0] == "fill"
        last_marker = max(i for i, c in enumerate(surface.calls)
                          if c[0] == "circle" and c[3] in MARKER_COLORS.values())
        legend_box = next(i for i, c in enumerate(surface.calls) if c[0] == "rect")
        assert legend_box > last_marker

    def test_grid_covers_visible_canvas(self):
        primary = make_set("Canonn", make_system("A", -40, 0, -40))
        rival = make_set("Rivals", make_system("B", 160, 0, 90))
        surface, space = _render(primary, rival)

        x_lo, x_hi, z_lo, z_hi = space.visible_range()
        expected_x = [str(int(v)) for v in grid_values(x_lo, x_hi, 50.0)]
        expected_z = [str(int(v)) for v in grid_values(z_lo, z_hi, 50.0)]
        texts = surface.texts()
        for label in expected_x + expected_z:
            assert label in texts
        # vertical grid lines run edge to edge
        verticals = [c for c in surface.of("line") if c[1][0][1] == 0 and c[1][1][1] == H]
        assert len(verticals) >= len(expected_x)

    def test_grid_step_grows_for_wide_maps(self):
        primary = make_set("Canonn", make_system("A", -2000, 0, -1000))
        rival = make_set("Rivals", make_system("B", 2000, 0, 1000))
        surface, space = _render(primary, rival)
        x_lo, x_hi, _, _ = space.visible_range()
        grid_lines = [c for c in surface.of("line") if c[3] == 1]
        assert len(grid_lines) < (x_hi - x_lo) / 50.0

    def test_origin_marked_when_visible(self, skirmish):
        surface, space = _render(*skirmish)
        assert ORIGIN_NAME in surface.texts()
        ox, oy = space.to_px(0, 0)
        assert any(c[1] == (ox, oy) and c[2] == 7 for c in surface.of("circle"))

    def test_origin_skipped_when_far_away(self):
        primary = make_set("Canonn", make_system("A", 1000, 0, 1000))
        rival = make_set("Rivals", make_system("B", 1100, 0, 1100))
        surface, _ = _render(primary, rival)
        assert ORIGIN_NAME not in surface.texts()

    def test_marker_colours_follow_control(self):
        primary = make_set("Canonn", make_system("PC", 0, 0, 0, "Canonn"), make_system("PP", 200, 0, 0, "Other"))
        rival = make_set("Rivals", make_system("RC", 0, 0, 200, "Rivals"), make_system("RP", 200, 0, 200))
        surface, _ = _render(primary, rival)
        fills = [c[3] for c in surface.of("circle") if c[2] == 6]
        assert fills[:4] == [
            MARKER_COLORS["primary_controlled"],
            MARKER_COLORS["primary_present"],
            MARKER_COLORS["rival_controlled"],
            MARKER_COLORS["rival_present"],
        ]

    def test_crowded_systems_are_not_labelled(self):
        primary = make_set("Canonn", make_system("P1", 0, 0, 0), make_system("P2", 0.5, 0, 0))
        rival = make_set("Rivals", make_system("R", 500, 0, 500, "Rivals"))
        surface, _ = _render(primary, rival)
        texts = surface.texts()
        assert "P1" not in texts
        assert "P2" not in texts
        assert "R" in texts

    def test_near_enemy_label_rule_is_configurable(self):
        primary = make_set("Canonn", make_system("P1", 0, 0, 0), make_system("P2", 0.5, 0, 0))
        rival = make_set("Rivals", make_system("R", 500, 0, 500), make_system("R2", 10, 0, 0, "Rivals"))

        labelled, _ = _render(primary, rival, always_label_near_enemy=True)
        assert {"P1", "P2"} <= set(labelled.texts())

        quiet, _ = _render(primary, rival, always_label_near_enemy=False)
        assert "P1" not in quiet.texts()
        assert "P2" not in quiet.texts()

    def test_symmetric_rings(self, skirmish):
        surface, _ = _render(*skirmish, ring_mode="symmetric")
        assert len(_rings(surface)) == 2

    def test_asymmetric_rings(self, skirmish):
        surface, space = _render(*skirmish, ring_mode="asymmetric")
        rings = _rings(surface)
        assert len(rings) == 1
        assert rings[0][1] == space.to_px(0, 0)

    def test_no_rings_out_of_range(self, skirmish):
        surface, _ = _render(*skirmish, threshold_ly=5.0)
        assert _rings(surface) == []

    def test_overlap_label_drawn_once_highlighted(self):
        primary = make_set("Canonn", make_system("Shared", 20, 0, 20), make_system("P", 0, 0, 0))
        rival = make_set("Rivals", make_system("Shared", 20, 0, 20, "Rivals"))
        surface, _ = _render(primary, rival)
        shared = [c for c in surface.of("text") if c[2] == "Shared"]
        assert len(shared) == 1
        assert shared[0][3] == OVERLAP_LABEL_COLOR

    def test_legend_does_not_cover_markers(self):
        # B lands in the bottom-right corner of the data
        primary = make_set("Canonn", make_system("A", -100, 0, 100, "Canonn"), make_system("B", 100, 0, -100))
        rival = make_set("Rivals", make_system("R", 0, 0, 0, "Rivals"))
        surface, _ = _render(primary, rival)

        x1, y1, x2, y2 = surface.of("rect")[0][1]
        centres = _marker_centres(surface)
        assert len(centres) == 3
        for px, py in centres:
            assert not (x1 - MARKER_RADIUS <= px <= x2 + MARKER_RADIUS and y1 - MARKER_RADIUS <= py <= y2 + MARKER_RADIUS)

    def test_legend_box_is_opaque(self, skirmish):
        surface, _ = _render(*skirmish)
        fill = surface.of("rect")[0][2]
        assert fill[3] == 255

    def test_long_faction_names_are_shortened(self):
        long_a = "The Exceedingly Long Named Coalition of Independent Pilots"
        long_b = "Movement for the Perpetual Liberation of Everything Nearby"
        primary = make_set(long_a, make_system("A", 0, 0, 0, long_a))
        rival = make_set(long_b, make_system("B", 40, 0, 40, long_b))
        surface, space = _render(primary, rival)

        x1, y1, _, _ = surface.of("rect")[0][1]
        assert x1 > W / 2 and y1 > H / 2
        assert long_a not in " ".join(surface.texts())
        rows = legend_rows(long_a, long_b, 30.0)
        assert rows[0][1].startswith(long_a[:10])
        assert all(len(label) <= LEGEND_NAME_MAX + len(" (controlled)") for _, label in rows)
        # the data still fits left of the legend
        for px, _ in _marker_centres(surface):
            assert px < x1

    def test_short_names_are_untouched(self):
        rows = legend_rows("Canonn", "Rivals", 50.0)
        assert rows[0][1] == "Canonn (controlled)"
        assert rows[3][1] == "Rivals (present)"

    def test_legend_in_bottom_right(self, skirmish):
        surface, _ = _render(*skirmish)
        for _, label in legend_rows("Canonn", "Rivals", 30.0):
            assert label in surface.texts()
        x1, y1, x2, y2 = surface.of("rect")[0][1]
        assert x1 > W / 2 and y1 > H / 2
        assert x2 <= W and y2 <= H


class TestRenderPng:
    def test_png_bytes(self, skirmish, options):
        primary, rival = skirmish
        buf = render_faction_map_png(primary, rival, analyze(primary, rival, 30.0), options)
        assert buf.tell() == 0
        assert buf.read(8) == b"\x89PNG\r\n\x1a\n"

    def test_legend_pixels_are_opaque(self, skirmish, options):
        primary, rival = skirmish
        buf = render_faction_map_png(primary, rival, analyze(primary, rival, 30.0), options)
        img = Image.open(buf)
        x1, y1, x2, y2 = legend_box(*options.canvas_size, legend_rows("Canonn", "Rivals", 30.0))
        # just inside the border, clear of swatches and text
        assert img.convert("RGBA").getpixel((int(x2) - 4, int(y1) + 4))[3] == 255

    def test_empty_sets_raise(self, options):
        empty_p, empty_r = make_set("Canonn"), make_set("Rivals")
        with pytest.raises(NoDataToRender):
            render_faction_map_png(empty_p, empty_r, analyze(empty_p, empty_r, 30.0), options)
