"""
Per-year sequential color scale for the choropleth.

Production values are heavy-tailed, so colors are assigned on
log10(value + 1). Zero and missing values get the no-data color instead
of the pale end of the palette.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple, Union

import numpy as np
import pandas as pd
import plotly.colors
import plotly.express as px

from .config import NO_DATA_COLOR, NO_DATA_SPAN, SEQUENTIAL_PALETTE


def _palette(name: str) -> List[List]:
    colors = getattr(px.colors.sequential, name)
    return [list(pair) for pair in plotly.colors.make_colorscale(colors)]


def log1p10(value: float) -> float:
    return math.log10(value + 1)


@dataclass(frozen=True)
class ColorScale:
    domain: Tuple[float, float]
    colorscale: List[List] = field(default_factory=lambda: _palette(SEQUENTIAL_PALETTE))
    no_data_color: str = NO_DATA_COLOR

    def position(self, value: float) -> float:
        """Normalized [0, 1] position of a positive value on the palette."""
        lo, hi = self.domain
        t = (log1p10(value) - lo) / (hi - lo)
        return min(1.0, max(0.0, t))

    def __call__(self, value) -> str:
        if value is None:
            return self.no_data_color
        try:
            value = float(value)
        except (TypeError, ValueError):
            return self.no_data_color
        if not math.isfinite(value) or value <= 0:
            return self.no_data_color
        return plotly.colors.sample_colorscale(self.colorscale, [self.position(value)])[0]

    @property
    def no_data_z(self) -> float:
        """z below the domain; the map colorscale paints it in the no-data color."""
        lo, hi = self.domain
        return lo - (hi - lo) * NO_DATA_SPAN / (1 - NO_DATA_SPAN)

    def with_no_data_stop(self) -> List[List]:
        """
        Colorscale over [no_data_z, hi]: the no-data color at 0, the
        palette squeezed into [NO_DATA_SPAN, 1].

        Lets one choropleth trace hold every feature, with or without data.
        """
        return [[0.0, self.no_data_color]] + [
            [NO_DATA_SPAN + (1 - NO_DATA_SPAN) * float(pos), color]
            for pos, color in self.colorscale
        ]

    def colorbar_ticks(self) -> Tuple[List[float], List[str]]:
        """Tick positions on the log axis labelled in original units."""
        hi = self.domain[1]
        tickvals, ticktext = [], []
        power = 0
        while log1p10(10 ** power) <= hi + 1e-12:
            tickvals.append(log1p10(10 ** power))
            ticktext.append(f"{10 ** power:,}")
            power += 1
        return tickvals, ticktext


def build_color_scale(year_records: Union[pd.DataFrame, Iterable[float], None]) -> ColorScale:
    """Color scale for one year's records (or plain values)."""
    if year_records is None:
        values = pd.Series(dtype=float)
    elif isinstance(year_records, pd.DataFrame):
        values = year_records["value"] if "value" in year_records.columns else pd.Series(dtype=float)
    else:
        values = pd.Series(list(year_records), dtype=object)

    values = pd.to_numeric(values, errors="coerce").astype(float)
    values = values[np.isfinite(values.to_numpy())]
    max_value = float(values.max()) if not values.empty else 0.0
    if not max_value > 0:
        max_value = 1.0

    return ColorScale(domain=(0.0, log1p10(max_value)))
