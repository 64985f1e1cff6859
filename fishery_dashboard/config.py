"""
Configuration for the fishery production dashboard.

Paths and data sources can be overridden through environment variables;
everything else is a plain module constant.
"""

from __future__ import annotations

import os
from pathlib import Path


# ======================
# Config / Paths
# ======================

DATA_CSV = Path(os.environ.get("FISHERY_DATA_CSV", "data/proj.csv"))
WORLD_GEOJSON = os.environ.get(
    "FISHERY_WORLD_GEOJSON",
    "https://raw.githubusercontent.com/holtzy/D3-graph-gallery/master/DATA/world.geojson",
)
LOG_LEVEL = os.environ.get("FISHERY_LOG_LEVEL", "INFO")

VALUE_COLUMN = "Capture fisheries production (metric tons)"
VALUE_LABEL = "Capture fisheries production (metric tons)"

HTTP_TIMEOUT = 30


# ======================
# Chart geometry
# ======================

MAP_WIDTH = 600
MAP_HEIGHT = 400
MAP_ZOOM_EXTENT = (1, 8)

AREA_WIDTH = 600
AREA_HEIGHT = 400
AREA_MARGIN = {"t": 30, "r": 20, "b": 40, "l": 60}
AREA_INNER_WIDTH = AREA_WIDTH - AREA_MARGIN["l"] - AREA_MARGIN["r"]
AREA_INNER_HEIGHT = AREA_HEIGHT - AREA_MARGIN["t"] - AREA_MARGIN["b"]

TOOLTIP_CHART_WIDTH = 200
TOOLTIP_CHART_HEIGHT = 120
TOOLTIP_OFFSET = 15
TOOLTIP_EDGE_PAD = 10


# ======================
# Colors / Motion
# ======================

NO_DATA_COLOR = "#f0f0f0"
SEQUENTIAL_PALETTE = "GnBu"
NO_DATA_SPAN = 0.05  # share of the map colorscale below the data domain
SELECTED_OUTLINE = "#d62728"
DEFAULT_OUTLINE = "#ffffff"
SPARKLINE_COLOR = "#1f77b4"
TRANSITION_MS = 400
FONT_FAMILY = "Inter, system-ui, sans-serif"
