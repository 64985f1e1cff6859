"""
Capture Fisheries Dashboard
- CSV source: data/proj.csv (Entity, Code, Year, production)
- GeoJSON: world features from a path or URL
- Click countries on the map (or their legend entries) to add/remove them
  from the stacked-area chart; the year slider recolors the map.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import dash
from dash import ALL, ClientsideFunction, Input, Output, State, dcc, html
from dash.exceptions import PreventUpdate

from .config import (
    AREA_HEIGHT,
    AREA_MARGIN,
    AREA_WIDTH,
    DATA_CSV,
    MAP_HEIGHT,
    MAP_WIDTH,
    VALUE_COLUMN,
    VALUE_LABEL,
    WORLD_GEOJSON,
)
from .dataset import DatasetIndex, EmptyDatasetError, build_index
from .loaders import DataLoadError, load_inputs
from .map_view import MapRenderer
from .selection import SelectionState
from .stacked_area import StackedAreaRenderer, reconcile, x_domain_for
from .tooltips import HIDDEN, area_tooltip, map_tooltip


logger = logging.getLogger(__name__)

RESET_ID = "reset-selection"
MAP_ID = "map"
LEGEND_ITEM = "legend-item"


# ======================
# Selection transitions
# ======================

def next_selection(trigger, selection: SelectionState, map_renderer: MapRenderer,
                   click_data: Optional[dict] = None) -> Optional[SelectionState]:
    """
    New selection for a UI event, or None when the event changes nothing.

    `trigger` is the id of the component that fired: the reset button,
    the map, or a legend entry's pattern-matching id.
    """
    if trigger == RESET_ID:
        return selection.clear()

    if trigger == MAP_ID:
        code = map_renderer.on_feature_click(click_data)
        return None if code is None else selection.toggle(code)

    if isinstance(trigger, dict) and trigger.get("type") == LEGEND_ITEM:
        return selection.toggle(trigger["code"])

    return None


# ======================
# Layout
# ======================

def year_marks(index: DatasetIndex, step: int = 10) -> dict:
    marks = {y: str(y) for y in index.years if y % step == 0}
    marks[index.min_year] = str(index.min_year)
    marks[index.max_year] = str(index.max_year)
    return marks


def build_blank_layout() -> html.Div:
    """What the page shows when the inputs could not be loaded."""
    return html.Div(id="dashboard", className="dashboard dashboard-blank")


def build_layout(index: DatasetIndex, map_renderer: MapRenderer,
                 area_renderer: StackedAreaRenderer) -> html.Div:
    """Construct the static Dash layout."""
    max_year = index.max_year
    empty_view = area_renderer.update([], index)

    controls = html.Div([
        html.Label("Year", htmlFor="year-slider", style={"fontWeight": 600, "marginRight": 8}),
        html.Div(
            dcc.Slider(
                id="year-slider",
                min=index.min_year,
                max=max_year,
                step=1,
                value=max_year,
                marks=year_marks(index),
                updatemode="drag",
            ),
            style={"width": 480},
        ),
        html.Span(str(max_year), id="year-label", className="year-label"),
        html.Button("Reset selection", id=RESET_ID, n_clicks=0, className="reset-button"),
    ], className="controls")

    map_panel = html.Div([
        dcc.Graph(
            id=MAP_ID,
            figure=map_renderer.render(),
            config={"scrollZoom": True, "displayModeBar": False},
            clear_on_unhover=True,
        ),
        html.Div(id="map-tooltip", className="tooltip", style=HIDDEN),
    ], id="map-container", className="chart-container",
        style={"width": f"{MAP_WIDTH}px", "height": f"{MAP_HEIGHT}px"})

    area_panel = html.Div([
        html.Div(id="area-legend", className="legend"),
        html.Div([
            dcc.Graph(
                id="stacked-area",
                figure=area_renderer.figure(empty_view),
                config={"displayModeBar": False},
                clear_on_unhover=True,
            ),
            html.Div(id="area-tooltip", className="tooltip", style=HIDDEN),
        ], id="area-container", className="chart-container",
            style={"width": f"{AREA_WIDTH}px", "height": f"{AREA_HEIGHT}px"}),
    ])

    return html.Div([
        html.Div([
            html.H2("Global Capture Fisheries Production", className="page-title"),
            html.P(
                "Pick a year to recolor the map. Click countries to compare them in the "
                "stacked chart; click a legend entry to remove it.",
                className="lead",
            ),
        ], className="header"),
        controls,
        html.Div([map_panel, area_panel], className="charts"),
        dcc.Store(id="selection", data=[]),
        dcc.Store(id="map-tooltip-anchor"),
        dcc.Store(id="area-tooltip-anchor"),
    ], id="dashboard", className="dashboard")


# ======================
# Callbacks
# ======================

def register_callbacks(app: dash.Dash, index: DatasetIndex, map_renderer: MapRenderer,
                       area_renderer: StackedAreaRenderer):
    """Wire all Dash callbacks."""
    x_scale = area_renderer.x_scale(x_domain_for(index))

    @app.callback(
        Output(MAP_ID, "figure"),
        Output("year-label", "children"),
        Input("year-slider", "value"),
        Input("selection", "data"),
    )
    def update_map(year, selection_data):
        year = int(year) if year is not None else index.max_year
        selection = SelectionState.from_store(selection_data)
        return map_renderer.recolor(year, selection), str(year)

    @app.callback(
        Output("selection", "data"),
        Input(MAP_ID, "clickData"),
        Input({"type": LEGEND_ITEM, "code": ALL}, "n_clicks"),
        Input(RESET_ID, "n_clicks"),
        State("selection", "data"),
        prevent_initial_call=True,
    )
    def sync_selection(click_data, _legend_clicks, _reset_clicks, selection_data):
        ctx = dash.callback_context
        if not ctx.triggered:
            raise PreventUpdate

        trigger = ctx.triggered_id
        # Legend entries are rebuilt with n_clicks=0 on every redraw
        if isinstance(trigger, dict) and not ctx.triggered[0]["value"]:
            raise PreventUpdate

        selection = SelectionState.from_store(selection_data)
        new_selection = next_selection(trigger, selection, map_renderer, click_data)
        if new_selection is None:
            raise PreventUpdate

        logger.info("Selection: %s", ", ".join(new_selection) or "(empty)")
        return new_selection.to_store()

    @app.callback(
        Output("stacked-area", "figure"),
        Output("area-legend", "children"),
        Input("selection", "data"),
        State("stacked-area", "figure"),
    )
    def update_stacked_area(selection_data, current_figure):
        selection = SelectionState.from_store(selection_data)
        view = area_renderer.update(selection, index)

        previous = [trace.get("uid") for trace in (current_figure or {}).get("data", []) if trace.get("uid")]
        changes = reconcile(previous, view.codes)
        logger.debug("Layers entered=%s updated=%s exited=%s",
                     changes.entered, changes.updated, changes.exited)

        return area_renderer.figure(view), area_renderer.legend(view)

    @app.callback(
        Output("map-tooltip", "children"),
        Output("map-tooltip-anchor", "data"),
        Input(MAP_ID, "hoverData"),
    )
    def update_map_tooltip(hover_data):
        return map_tooltip(hover_data, map_renderer, (MAP_WIDTH, MAP_HEIGHT))

    @app.callback(
        Output("area-tooltip", "children"),
        Output("area-tooltip-anchor", "data"),
        Input("stacked-area", "hoverData"),
        Input("selection", "data"),
    )
    def update_area_tooltip(hover_data, selection_data):
        codes = SelectionState.from_store(selection_data).sorted_codes()
        return area_tooltip(hover_data, codes, index, x_scale,
                            (AREA_WIDTH, AREA_HEIGHT), area_renderer.margin)

    # Placement needs the rendered tooltip size, so it runs in the browser
    for tooltip_id in ("map-tooltip", "area-tooltip"):
        app.clientside_callback(
            ClientsideFunction(namespace="tooltips", function_name="place"),
            Output(tooltip_id, "style"),
            Input(f"{tooltip_id}-anchor", "data"),
            State(tooltip_id, "id"),
        )


# ======================
# App Factory
# ======================

def create_app(csv_path: Union[str, Path] = DATA_CSV,
               geojson_source: Union[str, Path] = WORLD_GEOJSON,
               value_column: str = VALUE_COLUMN) -> dash.Dash:
    """
    App factory. Loads both inputs, builds the index, layout and callbacks.
    If either input fails to load the app serves a blank page.
    """
    app = dash.Dash(__name__)
    app.title = "Capture Fisheries Dashboard"

    try:
        records, geojson = load_inputs(csv_path, geojson_source, value_column)
        index = build_index(records)
    except (DataLoadError, EmptyDatasetError):
        logger.exception("Error loading files")
        app.layout = build_blank_layout()
        return app

    if not index.years:
        logger.error("No country rows with a 3-letter code in %s", csv_path)
        app.layout = build_blank_layout()
        return app

    map_renderer = MapRenderer(index, geojson)
    area_renderer = StackedAreaRenderer(margin=AREA_MARGIN)

    app.layout = build_layout(index, map_renderer, area_renderer)
    register_callbacks(app, index, map_renderer, area_renderer)
    logger.info("Dashboard ready: %s, %d-%d", VALUE_LABEL, index.min_year, index.max_year)
    return app
