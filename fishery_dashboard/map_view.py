"""
Choropleth world map.

Each GeoJSON feature is keyed by its FeatureCode, derived through an
ordered list of extractors. Features whose code is not in the dataset
are still drawn (as no data) but cannot be selected.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import plotly.graph_objects as go

from .colors import ColorScale, build_color_scale, log1p10
from .config import (
    DEFAULT_OUTLINE,
    FONT_FAMILY,
    MAP_HEIGHT,
    MAP_WIDTH,
    MAP_ZOOM_EXTENT,
    SELECTED_OUTLINE,
    VALUE_LABEL,
)
from .dataset import DatasetIndex, normalize_code
from .selection import SelectionState


logger = logging.getLogger(__name__)


def _feature_id(feature: dict) -> Any:
    return feature.get("id")


def _property(key: str) -> Callable[[dict], Any]:
    def extract(feature: dict) -> Any:
        return (feature.get("properties") or {}).get(key)
    extract.__name__ = f"property_{key}"
    return extract


FEATURE_CODE_EXTRACTORS: Tuple[Callable[[dict], Any], ...] = (
    _feature_id,
    _property("iso_a3"),
    _property("ISO_A3"),
    _property("adm0_a3"),
    _property("ADM0_A3"),
)


def feature_code(feature: dict) -> str:
    """First non-empty normalized candidate; '' if none."""
    for extract in FEATURE_CODE_EXTRACTORS:
        code = normalize_code(extract(feature))
        if code:
            return code
    return ""


def canonicalize_features(geojson: dict) -> Tuple[dict, Dict[str, str], Dict[str, str]]:
    """
    Copy a FeatureCollection with every feature's `id` set to a unique key.

    Returns:
        geojson, id_to_code, id_to_name
    """
    features = []
    id_to_code: Dict[str, str] = {}
    id_to_name: Dict[str, str] = {}
    for i, feat in enumerate(geojson.get("features") or []):
        code = feature_code(feat)
        fid = code if code and code not in id_to_code else f"__feature_{i}"
        out = copy.copy(feat)
        out["id"] = fid
        features.append(out)
        id_to_code[fid] = code
        name = (feat.get("properties") or {}).get("name")
        if name:
            id_to_name[fid] = str(name)
    return {"type": "FeatureCollection", "features": features}, id_to_code, id_to_name


def _first_point(event_data: Optional[dict]) -> Optional[dict]:
    if not event_data or not event_data.get("points"):
        return None
    return event_data["points"][0]


class MapRenderer:
    """Builds the choropleth figures; holds no selection of its own."""

    def __init__(self, index: DatasetIndex, geojson: dict,
                 width: int = MAP_WIDTH, height: int = MAP_HEIGHT):
        self.index = index
        self.width = width
        self.height = height
        self.geojson, self.id_to_code, self.id_to_name = canonicalize_features(geojson)
        self.feature_ids: List[str] = [f["id"] for f in self.geojson["features"]]

        unmatched = sum(1 for fid in self.feature_ids if not index.has_code(self.id_to_code[fid]))
        logger.info("Map has %d features (%d without data)", len(self.feature_ids), unmatched)

    # ----- lookups -----

    def code_for(self, feature_id: str) -> str:
        return self.id_to_code.get(feature_id, "")

    def name_for(self, feature_id: str) -> str:
        code = self.code_for(feature_id)
        return self.id_to_name.get(feature_id) or self.index.code_to_name.get(code) or "Unknown"

    def is_selectable(self, code: str) -> bool:
        return self.index.has_code(code)

    def feature_at(self, event_data: Optional[dict]) -> Optional[str]:
        """Feature id under a hover/click event, if any."""
        point = _first_point(event_data)
        if point is None:
            return None
        fid = point.get("location")
        return fid if fid in self.id_to_code else None

    def on_feature_click(self, click_data: Optional[dict]) -> Optional[str]:
        """
        Resolve a click to the FeatureCode the caller should toggle.

        Returns None when nothing was hit or the feature is not a known
        entity, in which case the click is a no-op.
        """
        fid = self.feature_at(click_data)
        if fid is None:
            return None
        code = self.code_for(fid)
        return code if self.is_selectable(code) else None

    # ----- figures -----

    def _outline(self, selection: SelectionState):
        selected = [self.code_for(fid) in selection for fid in self.feature_ids]
        colors = [SELECTED_OUTLINE if s else DEFAULT_OUTLINE for s in selected]
        widths = [2.0 if s else 0.5 for s in selected]
        return colors, widths

    def _trace(self, z: List[float], scale: ColorScale, selection: SelectionState) -> go.Choropleth:
        # One trace for every feature keeps each shape's path in place
        # across recolors, so the CSS fill transition can run.
        colors, widths = self._outline(selection)
        tickvals, ticktext = scale.colorbar_ticks()
        return go.Choropleth(
            geojson=self.geojson,
            featureidkey="id",
            locations=self.feature_ids,
            z=z,
            zmin=scale.no_data_z,
            zmax=scale.domain[1],
            colorscale=scale.with_no_data_stop(),
            customdata=[self.code_for(fid) for fid in self.feature_ids],
            marker_line_color=colors,
            marker_line_width=widths,
            hoverinfo="none",
            colorbar=dict(
                title=dict(text="metric tons", side="right"),
                tickvals=tickvals,
                ticktext=ticktext,
                len=0.7,
                thickness=12,
            ),
            name="countries",
            uid="countries",
        )

    def _layout(self, fig: go.Figure) -> go.Figure:
        min_zoom, max_zoom = MAP_ZOOM_EXTENT
        fig.update_layout(
            width=self.width,
            height=self.height,
            autosize=False,
            margin={"r": 0, "t": 0, "l": 0, "b": 0},
            dragmode="pan",
            uirevision="world-map",
            paper_bgcolor="rgba(0,0,0,0)",
            font=dict(family=FONT_FAMILY, size=12),
            geo=dict(
                projection=dict(type="natural earth", minscale=min_zoom, maxscale=max_zoom),
                fitbounds="locations",
                visible=False,
                showframe=False,
                bgcolor="rgba(0,0,0,0)",
            ),
        )
        return fig

    def render(self) -> go.Figure:
        """Every feature in the no-data color."""
        scale = build_color_scale(None)
        z = [scale.no_data_z] * len(self.feature_ids)
        fig = go.Figure(self._trace(z, scale, SelectionState()))
        return self._layout(fig)

    def recolor(self, year: int, selection: SelectionState = SelectionState()) -> go.Figure:
        """Repaint every feature for `year`, outlining selected codes."""
        year_records = self.index.year_values(year)
        scale = build_color_scale(year_records)
        values = dict(zip(year_records["code"], year_records["value"]))

        z = []
        for fid in self.feature_ids:
            value = values.get(self.code_for(fid), 0.0)
            z.append(log1p10(value) if value > 0 else scale.no_data_z)

        fig = go.Figure(self._trace(z, scale, selection))
        fig.update_layout(meta={"year": year, "label": VALUE_LABEL})
        return self._layout(fig)
