"""Command-line entry point for the dashboard server."""

from __future__ import annotations

import argparse
import logging

from .app import create_app
from .config import DATA_CSV, LOG_LEVEL, VALUE_COLUMN, WORLD_GEOJSON


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Capture fisheries choropleth + stacked-area dashboard")
    parser.add_argument("--data", default=str(DATA_CSV), help="production CSV")
    parser.add_argument("--geojson", default=WORLD_GEOJSON, help="world GeoJSON path or URL")
    parser.add_argument("--value-column", default=VALUE_COLUMN)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8050)
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(args.data, args.geojson, args.value_column)
    app.run(host=args.host, port=args.port, debug=args.debug)


