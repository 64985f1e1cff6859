"""
Tooltip controllers for the map and the stacked-area chart.

Both tooltips are absolutely positioned divs inside their chart
container. They sit next to the pointer and flip to the other side when
they would run past the container's right or bottom edge. The browser
measures the rendered tooltip for that check (assets/tooltips.js); the
server sends an estimate measured from the tooltip's own content.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import plotly.graph_objects as go
from dash import dcc, html

from .config import (
    AREA_MARGIN,
    SPARKLINE_COLOR,
    TOOLTIP_CHART_HEIGHT,
    TOOLTIP_CHART_WIDTH,
    TOOLTIP_EDGE_PAD,
    TOOLTIP_OFFSET,
)
from .dataset import DatasetIndex
from .scales import LinearScale, nice_domain


CHAR_WIDTH_PX = 7.0
LINE_HEIGHT_PX = 18.0
PADDING_PX = 8.0

HIDDEN = {"display": "none"}

Size = Tuple[float, float]
Point = Tuple[float, float]


# ======================
# Geometry
# ======================

def measure_tooltip(lines: Sequence[str], chart: Optional[Size] = None) -> Size:
    """Rendered (width, height) of a tooltip with these text lines and chart."""
    chart_w, chart_h = chart or (0.0, 0.0)
    text_w = max((len(line) for line in lines), default=0) * CHAR_WIDTH_PX
    width = max(text_w, chart_w) + 2 * PADDING_PX
    height = len(lines) * LINE_HEIGHT_PX + chart_h + 2 * PADDING_PX
    return width, height


def place_tooltip(pointer: Point, size: Size, container: Size,
                  offset: float = TOOLTIP_OFFSET,
                  pad: float = TOOLTIP_EDGE_PAD) -> Point:
    """Top-left corner for a tooltip near `pointer`, flipped at the edges."""
    x, y = pointer
    width, height = size
    container_w, container_h = container

    left = x + offset
    top = y + offset
    if left + width > container_w - pad:
        left = x - width - offset
    if top + height > container_h - pad:
        top = y - height - offset
    return left, top


def pointer_from_event(event_data: Optional[dict]) -> Optional[Point]:
    """Pointer position relative to the graph, from a hover point's bbox."""
    if not event_data or not event_data.get("points"):
        return None
    bbox = event_data["points"][0].get("bbox")
    if not bbox:
        return None
    try:
        x = (float(bbox["x0"]) + float(bbox["x1"])) / 2
        y = (float(bbox["y0"]) + float(bbox["y1"])) / 2
    except (KeyError, TypeError, ValueError):
        return None
    return x, y


def tooltip_anchor(pointer: Point, size: Size, container: Size) -> dict:
    """
    Placement inputs for the browser.

    assets/tooltips.js measures the rendered tooltip and repeats the
    `place_tooltip` rule with the real size; `estimate` is used until
    the element can be measured.
    """
    left, top = place_tooltip(pointer, size, container)
    return {
        "pointer": list(pointer),
        "container": list(container),
        "offset": TOOLTIP_OFFSET,
        "pad": TOOLTIP_EDGE_PAD,
        "estimate": {"size": list(size), "left": left, "top": top},
    }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_count(value: float) -> str:
    """Thousands-grouped rounded integer."""
    return f"{round_half_up(value):,}"


# ======================
# Map tooltip
# ======================

@dataclass(frozen=True)
class MapTooltip:
    code: str
    name: str
    points: Tuple[Tuple[int, float], ...]

    @property
    def title(self) -> str:
        return f"{self.name} ({self.code})"

    @property
    def has_data(self) -> bool:
        return bool(self.points)

    @property
    def lines(self) -> List[str]:
        return [self.title] if self.has_data else [self.title, "No data available"]

    @property
    def size(self) -> Size:
        chart = (TOOLTIP_CHART_WIDTH, TOOLTIP_CHART_HEIGHT) if self.has_data else None
        return measure_tooltip(self.lines, chart)


def map_tooltip_content(index: DatasetIndex, code: str, name: str) -> MapTooltip:
    series = index.series(code)
    points = tuple(zip(series["year"].astype(int).tolist(), series["value"].astype(float).tolist()))
    return MapTooltip(code=code, name=name, points=points)


def sparkline_figure(points: Sequence[Tuple[int, float]]) -> go.Figure:
    """Small line chart of one entity's values over its years."""
    years = [p[0] for p in points]
    values = [p[1] for p in points]
    max_value = max(values, default=0.0)
    y_domain = nice_domain(0.0, max_value) if max_value > 0 else (0.0, 1.0)

    fig = go.Figure(go.Scatter(
        x=years,
        y=values,
        mode="lines",
        line=dict(width=1.5, color=SPARKLINE_COLOR),
        hoverinfo="skip",
    ))
    fig.update_layout(
        width=TOOLTIP_CHART_WIDTH,
        height=TOOLTIP_CHART_HEIGHT,
        autosize=False,
        margin={"l": 35, "r": 10, "t": 10, "b": 20},
        showlegend=False,
        plot_bgcolor="rgba(0,0,0,0)",
        paper_bgcolor="rgba(0,0,0,0)",
        font=dict(size=9),
        xaxis=dict(range=[min(years, default=0), max(years, default=1)],
                   tickformat="d", nticks=4, showgrid=False),
        yaxis=dict(range=list(y_domain), tickformat="~s", nticks=3, showgrid=False),
    )
    return fig


def render_map_tooltip(content: MapTooltip) -> list:
    body = (
        dcc.Graph(
            figure=sparkline_figure(content.points),
            config={"staticPlot": True, "displayModeBar": False},
            style={"width": f"{TOOLTIP_CHART_WIDTH}px", "height": f"{TOOLTIP_CHART_HEIGHT}px"},
        )
        if content.has_data
        else html.Div("No data available", className="tooltip-empty")
    )
    return [html.Div(content.title, className="tooltip-title"), body]


# ======================
# Area tooltip
# ======================

def year_at(plot_x: float, x_scale: LinearScale, years: Sequence[int]) -> Optional[int]:
    """
    Year under a horizontal plot position.

    The inverted position is rounded and clamped to the year range; a
    year that is not in the data (a gap) gives None.
    """
    if not years:
        return None
    year = round_half_up(x_scale.invert(plot_x))
    year = max(years[0], min(years[-1], year))
    return year if year in years else None


def area_tooltip_rows(index: DatasetIndex, codes: Sequence[str], year: int) -> List[Tuple[str, float]]:
    """(name, value) for selected codes with data that year, largest first."""
    rows = [(index.name_for(code), index.value(year, code)) for code in codes]
    rows = [row for row in rows if row[1] > 0]
    rows.sort(key=lambda row: row[1], reverse=True)
    return rows


def area_tooltip_lines(year: int, rows: Sequence[Tuple[str, float]]) -> List[str]:
    title = f"Year {year}"
    if not rows:
        return [title, "No data for this year."]
    return [title] + [f"{name}  {format_count(value)}" for name, value in rows]


def render_area_tooltip(year: int, rows: Sequence[Tuple[str, float]]) -> list:
    if not rows:
        body = [html.Div("No data for this year.")]
    else:
        body = [
            html.Div(
                [html.Span(name), html.Span(format_count(value), className="tooltip-value")],
                className="area-tooltip-row",
            )
            for name, value in rows
        ]
    return [html.Div(f"Year {year}", className="tooltip-title"), html.Div(body, className="tooltip-body")]


def plot_x_from_pointer(pointer: Point, margin: Optional[dict] = None) -> float:
    """Graph-relative pointer x to plot-area x."""
    return pointer[0] - (margin or AREA_MARGIN)["l"]


# ======================
# Controllers
# ======================

def map_tooltip(hover_data: Optional[dict], renderer, container: Size) -> Tuple[list, Optional[dict]]:
    """(children, anchor) of the map tooltip for a hover event; anchor None hides it."""
    fid = renderer.feature_at(hover_data)
    if fid is None:
        return [], None
    pointer = pointer_from_event(hover_data) or (container[0] / 2, container[1] / 2)

    content = map_tooltip_content(renderer.index, renderer.code_for(fid), renderer.name_for(fid))
    return render_map_tooltip(content), tooltip_anchor(pointer, content.size, container)


def area_tooltip(hover_data: Optional[dict], codes: Sequence[str], index: DatasetIndex,
                 x_scale: LinearScale, container: Size,
                 margin: Optional[dict] = None) -> Tuple[list, Optional[dict]]:
    """(children, anchor) of the stacked-area tooltip for a hover event."""
    if not codes:
        return [], None
    pointer = pointer_from_event(hover_data)
    if pointer is None:
        return [], None

    year = year_at(plot_x_from_pointer(pointer, margin), x_scale, index.years)
    if year is None:
        return [], None

    rows = area_tooltip_rows(index, sorted(codes), year)
    size = measure_tooltip(area_tooltip_lines(year, rows))
    return render_area_tooltip(year, rows), tooltip_anchor(pointer, size, container)
