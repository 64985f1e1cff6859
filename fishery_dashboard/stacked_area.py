"""
Stacked-area chart of the selected countries across all years.

Layers are stacked in sorted-code order, so the picture depends only on
which codes are selected, never on the order they were clicked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np
import plotly.express as px
import plotly.graph_objects as go
from dash import html

from .config import (
    AREA_HEIGHT,
    AREA_MARGIN,
    AREA_WIDTH,
    FONT_FAMILY,
    TRANSITION_MS,
    VALUE_LABEL,
)
from .dataset import DatasetIndex
from .scales import LinearScale, nice_domain


PALETTE = px.colors.qualitative.T10
EMPTY_Y_DOMAIN = (0.0, 1.0)


@dataclass(frozen=True)
class StackedLayer:
    code: str
    name: str
    color: str
    points: Tuple[Tuple[int, float, float], ...]  # (year, baseline, top)


@dataclass(frozen=True)
class LegendEntry:
    code: str
    name: str
    color: str


@dataclass(frozen=True)
class StackedView:
    codes: Tuple[str, ...]
    layers: Tuple[StackedLayer, ...]
    x_domain: Tuple[float, float]
    y_domain: Tuple[float, float]
    legend: Tuple[LegendEntry, ...]

    @property
    def empty(self) -> bool:
        return not self.codes


@dataclass(frozen=True)
class LayerChanges:
    entered: Tuple[str, ...]
    updated: Tuple[str, ...]
    exited: Tuple[str, ...]


def reconcile(previous: Iterable[str], current: Iterable[str]) -> LayerChanges:
    """Which layers enter, stay and leave between two renders."""
    prev, cur = set(previous), set(current)
    return LayerChanges(
        entered=tuple(sorted(cur - prev)),
        updated=tuple(sorted(cur & prev)),
        exited=tuple(sorted(prev - cur)),
    )


def layer_color(code: str, index: DatasetIndex) -> str:
    """Color keyed by the code's position among all dataset codes."""
    codes = index.codes
    pos = codes.index(code) if code in codes else len(codes)
    return PALETTE[pos % len(PALETTE)]


def x_domain_for(index: DatasetIndex) -> Tuple[float, float]:
    if not index.years:
        return (0.0, 1.0)
    return (index.min_year, index.max_year)


def stack_layers(codes: Sequence[str], index: DatasetIndex) -> Tuple[StackedLayer, ...]:
    """Cumulative (baseline, top) per code per year; missing values are 0."""
    years = list(index.years)
    if not codes or not years:
        return ()

    values = (
        index.wide.reindex(index=years, columns=list(codes))
             .fillna(0.0)
             .to_numpy(dtype=float)
    )
    tops = np.cumsum(values, axis=1)
    baselines = np.hstack([np.zeros((len(years), 1)), tops[:, :-1]])

    layers = []
    for j, code in enumerate(codes):
        points = tuple(
            (year, float(baselines[i, j]), float(tops[i, j]))
            for i, year in enumerate(years)
        )
        layers.append(StackedLayer(
            code=code,
            name=index.name_for(code),
            color=layer_color(code, index),
            points=points,
        ))
    return tuple(layers)


class StackedAreaRenderer:
    def __init__(self, width: int = AREA_WIDTH, height: int = AREA_HEIGHT, margin=None):
        self.width = width
        self.height = height
        self.margin = dict(margin or AREA_MARGIN)

    @property
    def inner_width(self) -> float:
        return self.width - self.margin["l"] - self.margin["r"]

    def x_scale(self, x_domain: Tuple[float, float]) -> LinearScale:
        """Year → plot-area pixel mapping for the horizontal axis."""
        return LinearScale(x_domain, (0.0, float(self.inner_width)))

    def update(self, selected_codes: Iterable[str], dataset: DatasetIndex) -> StackedView:
        """
        Recompute the stacked layout for a selection.

        Same selection and dataset always yield an equal view.
        """
        codes = tuple(sorted(set(selected_codes)))
        x_domain = x_domain_for(dataset)

        if not codes:
            return StackedView(codes=(), layers=(), x_domain=x_domain,
                               y_domain=EMPTY_Y_DOMAIN, legend=())

        layers = stack_layers(codes, dataset)
        max_top = max((top for layer in layers for _, _, top in layer.points), default=0.0)
        y_domain = nice_domain(0.0, max_top) if max_top > 0 else EMPTY_Y_DOMAIN

        legend = tuple(LegendEntry(layer.code, layer.name, layer.color) for layer in layers)
        return StackedView(codes=codes, layers=layers, x_domain=x_domain,
                           y_domain=y_domain, legend=legend)

    def figure(self, view: StackedView) -> go.Figure:
        fig = go.Figure()
        for layer in view.layers:
            years = [p[0] for p in layer.points]
            bases = [p[1] for p in layer.points]
            tops = [p[2] for p in layer.points]
            # Closed polygon: tops left-to-right, then baselines back
            fig.add_trace(go.Scatter(
                x=years + years[::-1],
                y=tops + bases[::-1],
                fill="toself",
                fillcolor=layer.color,
                mode="lines",
                line=dict(width=0.5, color=layer.color),
                opacity=0.9,
                name=layer.name,
                uid=layer.code,
                hoveron="points",
                hoverinfo="none",
                showlegend=False,
            ))

        fig.update_layout(
            width=self.width,
            height=self.height,
            autosize=False,
            margin=dict(self.margin, pad=0),
            plot_bgcolor="rgba(0,0,0,0)",
            paper_bgcolor="rgba(0,0,0,0)",
            font=dict(family=FONT_FAMILY, size=12),
            showlegend=False,
            hovermode="x",
            uirevision="stacked-area",
            transition={"duration": TRANSITION_MS, "easing": "cubic-in-out"},
            xaxis=dict(
                title="Year",
                range=list(view.x_domain),
                tickformat="d",
                nticks=6,
                fixedrange=True,
                automargin=False,
                showgrid=False,
            ),
            yaxis=dict(
                title=VALUE_LABEL,
                range=list(view.y_domain),
                tickformat="~s",
                nticks=6,
                fixedrange=True,
                automargin=False,
                gridcolor="#f3f4f6",
            ),
        )

        if view.empty:
            fig.add_annotation(
                text="Click countries on the map to compare them.",
                x=0.5, y=0.5, xref="paper", yref="paper",
                showarrow=False,
            )
        return fig

    def legend(self, view: StackedView) -> List[html.Button]:
        """One clickable entry per selected code, in stacking order."""
        return [
            html.Button(
                [
                    html.Span(className="legend-swatch", style={"backgroundColor": entry.color}),
                    html.Span(entry.name, className="legend-label"),
                ],
                id={"type": "legend-item", "code": entry.code},
                className="legend-item",
                n_clicks=0,
                title=f"Remove {entry.name}",
            )
            for entry in view.legend
        ]
