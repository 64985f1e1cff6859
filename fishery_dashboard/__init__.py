"""Choropleth + stacked-area dashboard of capture fisheries production."""

__version__ = "0.1.0"
