"""
Input loading: the production CSV and the world GeoJSON.

Both inputs are fetched together; if either fails the dashboard does not
render at all.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from pathlib import Path
from typing import Tuple, Union

import pandas as pd
import requests

from .config import HTTP_TIMEOUT, VALUE_COLUMN


logger = logging.getLogger(__name__)


class DataLoadError(RuntimeError):
    """One of the dashboard inputs could not be loaded."""


def _is_url(source: Union[str, Path]) -> bool:
    return str(source).startswith(("http://", "https://"))


@lru_cache(maxsize=4)
def load_geojson(source: Union[str, Path]) -> dict:
    """Load a GeoJSON FeatureCollection from a local path or an HTTP(S) URL."""
    if _is_url(source):
        resp = requests.get(str(source), timeout=HTTP_TIMEOUT)
        resp.raise_for_status()
        geojson = resp.json()
    else:
        with open(source, "r", encoding="utf-8") as f:
            geojson = json.load(f)

    if not isinstance(geojson, dict) or "features" not in geojson:
        raise ValueError(f"{source} is not a GeoJSON FeatureCollection")

    logger.info("Loaded %d features from %s", len(geojson["features"]), source)
    return geojson


def load_records(csv_path: Union[str, Path], value_column: str = VALUE_COLUMN) -> pd.DataFrame:
    """
    Read the production CSV into entity/code/year/value columns.

    Expects columns: Entity, Code, Year, and `value_column`. Values that
    are absent or non-numeric become 0; codes are left for the index to
    normalize.
    """
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    df.rename(columns={c: c.strip() for c in df.columns}, inplace=True)

    required_cols = {"Entity", "Code", "Year", value_column}
    missing = required_cols.difference(set(df.columns))
    if missing:
        raise ValueError(f"CSV is missing required columns: {missing}")

    out = pd.DataFrame({
        "entity": df["Entity"],
        "code": df["Code"],
        "year": pd.to_numeric(df["Year"], errors="coerce"),
        "value": pd.to_numeric(df[value_column], errors="coerce").fillna(0.0),
    })

    logger.info("Read %d rows from %s", len(out), csv_path)
    return out


def load_inputs(csv_path: Union[str, Path], geojson_source: Union[str, Path],
                value_column: str = VALUE_COLUMN) -> Tuple[pd.DataFrame, dict]:
    """Load the records and the features together; any failure is fatal."""
    with ThreadPoolExecutor(max_workers=2) as pool:
        records_future = pool.submit(load_records, csv_path, value_column)
        geojson_future = pool.submit(load_geojson, geojson_source)
        try:
            records = records_future.result()
            geojson = geojson_future.result()
        except (OSError, ValueError, requests.RequestException) as e:
            raise DataLoadError(f"Error loading files: {e}") from e
    return records, geojson
