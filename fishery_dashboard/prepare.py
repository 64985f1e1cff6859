#!/usr/bin/env python3
"""
Script to filter a raw capture-fisheries export for the dashboard.
Keeps Entity, Code, Year and the production column, and drops aggregate
rows (regions, income groups, OWID_* codes) that have no 3-letter code.
"""

import argparse
import logging
import os

import pandas as pd

from .config import VALUE_COLUMN
from .dataset import CODE_LENGTH, normalize_code


logger = logging.getLogger(__name__)

KEEP_COLUMNS = ["Entity", "Code", "Year"]


def filter_fisheries_data(input_file, output_file, value_column=VALUE_COLUMN):
    """
    Filter the raw export down to country rows and the dashboard's columns.
    Returns the filtered DataFrame, or None when the input file is missing.
    """
    if not os.path.exists(input_file):
        logger.error("Input file %s not found!", input_file)
        return None

    logger.info("Reading data from %s...", input_file)
    df = pd.read_csv(input_file, dtype={"Code": str})
    logger.info("Original dataset shape: %s", df.shape)

    columns = KEEP_COLUMNS + [value_column]
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"Input is missing required columns: {missing}")

    codes = df["Code"].map(normalize_code)
    filtered_df = df.loc[codes.str.len() == CODE_LENGTH, columns].copy()
    filtered_df["Code"] = codes[codes.str.len() == CODE_LENGTH]
    logger.info("Dataset shape after dropping aggregates: %s", filtered_df.shape)

    filtered_df.to_csv(output_file, index=False)
    logger.info("Filtered dataset saved to %s", output_file)
    logger.info("Countries: %d, years: %s-%s",
                filtered_df["Code"].nunique(),
                filtered_df["Year"].min(), filtered_df["Year"].max())
    return filtered_df


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("input_file")
    parser.add_argument("output_file")
    parser.add_argument("--value-column", default=VALUE_COLUMN)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    result = filter_fisheries_data(args.input_file, args.output_file, args.value_column)
    return 0 if result is not None else 1


if __name__ == "__main__":
    raise SystemExit(main())
