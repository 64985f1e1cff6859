"""
Dataset index: lookup structures over the per-country yearly records.

The index is built once from the loaded records and never mutated. Rows
whose code is not a 3-letter code after normalization (continents,
income groups, OWID aggregates) are dropped here.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Tuple, Union

import pandas as pd


logger = logging.getLogger(__name__)

CODE_LENGTH = 3
FIELDS = ["entity", "code", "year", "value"]


class EmptyDatasetError(ValueError):
    """Raised when there is no record collection to index at all."""


@dataclass(frozen=True)
class Record:
    entity: str
    code: str
    year: int
    value: float


def normalize_code(raw: Any) -> str:
    """Trim and uppercase a code; missing values become ''."""
    if raw is None or (not isinstance(raw, str) and pd.isna(raw)):
        return ""
    return str(raw).strip().upper()


def _records_frame(records: Union[pd.DataFrame, Iterable[Any]]) -> pd.DataFrame:
    if isinstance(records, pd.DataFrame):
        return records.reindex(columns=FIELDS).copy()

    rows = []
    skipped = 0
    for rec in records:
        if dataclasses.is_dataclass(rec):
            rows.append(dataclasses.asdict(rec))
        elif isinstance(rec, Mapping):
            rows.append(dict(rec))
        elif isinstance(rec, (tuple, list)) and len(rec) == len(FIELDS):
            # (entity, code, year, value)
            rows.append(dict(zip(FIELDS, rec)))
        else:
            skipped += 1
    if skipped:
        logger.debug("Skipped %d items that are not records", skipped)
    return pd.DataFrame.from_records(rows).reindex(columns=FIELDS)


def _empty_frame() -> pd.DataFrame:
    return pd.DataFrame({
        "entity": pd.Series(dtype=str),
        "code": pd.Series(dtype=str),
        "year": pd.Series(dtype=int),
        "value": pd.Series(dtype=float),
    })


@dataclass(frozen=True, eq=False)
class DatasetIndex:
    records: pd.DataFrame
    by_code: Mapping[str, pd.DataFrame]
    by_year: Mapping[int, pd.DataFrame]
    code_to_name: Mapping[str, str]
    years: Tuple[int, ...]
    wide: pd.DataFrame

    @property
    def min_year(self):
        return self.years[0] if self.years else None

    @property
    def max_year(self):
        return self.years[-1] if self.years else None

    @property
    def codes(self) -> Tuple[str, ...]:
        return tuple(sorted(self.code_to_name))

    def has_code(self, code: str) -> bool:
        return code in self.code_to_name

    def name_for(self, code: str) -> str:
        return self.code_to_name.get(code) or code

    def value(self, year: int, code: str) -> float:
        """Wide-table value for (year, code); 0 when absent."""
        try:
            v = self.wide.at[year, code]
        except KeyError:
            return 0.0
        return 0.0 if pd.isna(v) else float(v)

    def series(self, code: str) -> pd.DataFrame:
        """Records of one entity in chronological order."""
        grp = self.by_code.get(code)
        if grp is None:
            return _empty_frame()
        return grp.sort_values("year", kind="stable").reset_index(drop=True)

    def year_values(self, year: int) -> pd.DataFrame:
        grp = self.by_year.get(year)
        return _empty_frame() if grp is None else grp


def build_index(records: Union[pd.DataFrame, Iterable[Any], None]) -> DatasetIndex:
    """
    Build the lookup structures for a record collection.

    Individual malformed rows are dropped silently; only a missing or
    empty collection is an error.
    """
    if records is None:
        raise EmptyDatasetError("No record collection supplied.")

    df = _records_frame(records)
    if df.empty:
        raise EmptyDatasetError("Record collection is empty.")

    n_in = len(df)
    df["code"] = df["code"].map(normalize_code)
    df = df[df["code"].str.len() == CODE_LENGTH].copy()

    df["year"] = pd.to_numeric(df["year"], errors="coerce")
    df = df[df["year"].notna()].copy()
    df["year"] = df["year"].astype(int)
    df["value"] = pd.to_numeric(df["value"], errors="coerce").fillna(0.0).astype(float)
    df["entity"] = df["entity"].where(df["entity"].notna(), "").astype(str)
    df = df.reset_index(drop=True)

    dropped = n_in - len(df)
    if dropped:
        logger.debug("Dropped %d of %d records without a usable code/year", dropped, n_in)

    if df.empty:
        df = _empty_frame()
        wide = pd.DataFrame(index=pd.Index([], name="year", dtype=int))
        return DatasetIndex(
            records=df,
            by_code=MappingProxyType({}),
            by_year=MappingProxyType({}),
            code_to_name=MappingProxyType({}),
            years=(),
            wide=wide,
        )

    by_code = {str(code): grp.reset_index(drop=True) for code, grp in df.groupby("code", sort=False)}
    by_year = {int(year): grp.reset_index(drop=True) for year, grp in df.groupby("year", sort=False)}

    firsts = df.drop_duplicates(subset="code", keep="first")
    code_to_name = dict(zip(firsts["code"], firsts["entity"]))

    years = tuple(sorted(int(y) for y in df["year"].unique()))

    # Duplicate (year, code) pairs: the later row wins
    wide = (
        df.drop_duplicates(subset=["year", "code"], keep="last")
          .pivot(index="year", columns="code", values="value")
          .reindex(list(years))
          .sort_index(axis=1)
    )
    wide.columns.name = None

    logger.info("Indexed %d records: %d entities, years %d-%d",
                len(df), len(code_to_name), years[0], years[-1])

    return DatasetIndex(
        records=df,
        by_code=MappingProxyType(by_code),
        by_year=MappingProxyType(by_year),
        code_to_name=MappingProxyType(code_to_name),
        years=years,
        wide=wide,
    )
