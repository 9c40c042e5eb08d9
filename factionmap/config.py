# factionmap/config.py
import os

# Upstream background-simulation API (EliteBGS v5)
EBGS_API_BASE = os.getenv("EBGS_API_BASE", "https://elitebgs.app/api/ebgs/v5").rstrip("/")
EBGS_TIMEOUT = float(os.getenv("EBGS_TIMEOUT", "15"))

# Paging / batching limits of the upstream service
SYSTEM_BATCH_SIZE = 50
EBGS_PAGE_SIZE = 10  # docs per page served by EliteBGS
MAX_PAGES = 40  # a single query never walks further than this

# Proximity analysis
DEFAULT_THRESHOLD_LY = 50.0
RING_MODES = ("symmetric", "asymmetric")

# Report blocks
FIELD_BUDGET = 1000
EMPTY_BLOCK_TEXT = "no systems"

# Canvas
CANVAS_SIZE = (1400, 1000)
PADDING_RATIO = 0.10
MIN_SPAN_LY = 20.0           # widened span for single-point / flat inputs
GRID_STEP_LY = 50.0
MAX_GRID_LINES = 24          # per axis; the step doubles until it fits
LABEL_CLEARANCE_PX = 28
MARKER_RADIUS = 6
RING_RADIUS = 13
FONT_SIZE = 16
LEGEND_MARGIN = 16
LEGEND_NAME_MAX = 28         # longer faction names are shortened in the legend
ORIGIN_NAME = "Sol"

# Colours (RGBA)
BACKGROUND = (14, 16, 24, 255)
GRID_COLOR = (38, 42, 56, 255)
GRID_LABEL_COLOR = (120, 126, 145, 255)
AXIS_COLOR = (90, 96, 120, 255)
ORIGIN_COLOR = (255, 215, 0, 255)
LABEL_COLOR = (230, 230, 235, 255)
OVERLAP_LABEL_COLOR = (255, 200, 60, 255)
RING_COLOR = (255, 140, 0, 255)
LEGEND_FILL = (10, 10, 14, 255)

MARKER_COLORS = {
    "primary_controlled": (66, 135, 245, 255),     # blue
    "primary_present": (34, 70, 128, 255),         # muted blue
    "rival_controlled": (255, 72, 72, 255),        # red
    "rival_present": (128, 38, 38, 255),           # muted red
}
