import pandas as pd
import pytest

from fishery_dashboard.dataset import (
    EmptyDatasetError,
    Record,
    build_index,
    normalize_code,
)


def test_index_groups_by_code_and_year(index):
    assert index.years == (2000, 2001)
    assert set(index.by_code) == {"AAA", "BBB"}
    assert set(index.by_year) == {2000, 2001}
    assert len(index.by_year[2000]) == 2
    assert dict(index.code_to_name) == {"AAA": "Alpha", "BBB": "Beta"}
    assert index.min_year == 2000
    assert index.max_year == 2001


def test_wide_table_has_one_row_per_year(index):
    assert list(index.wide.index) == [2000, 2001]
    assert index.value(2001, "AAA") == 20.0
    assert index.value(2000, "BBB") == 5.0


def test_value_defaults_to_zero_when_absent(index):
    assert index.value(2001, "ZZZ") == 0.0
    assert index.value(1990, "AAA") == 0.0


def test_code_is_trimmed_and_uppercased():
    idx = build_index([{"entity": "United States", "code": "USA ", "year": 2000, "value": 1}])
    assert idx.codes == ("USA",)
    assert idx.name_for("USA") == "United States"
    assert normalize_code(" usa") == "USA"
    assert normalize_code(None) == ""
    assert normalize_code(float("nan")) == ""


def test_rows_without_three_letter_code_are_dropped():
    idx = build_index([
        {"entity": "World", "code": "OWID_WRL", "year": 2000, "value": 100},
        {"entity": "Africa", "code": "", "year": 2000, "value": 50},
        {"entity": "Europe", "code": None, "year": 2000, "value": 50},
        {"entity": "Odd", "code": "AB", "year": 2000, "value": 1},
        {"entity": "Chile", "code": "CHL", "year": 2000, "value": 7},
    ])
    assert idx.codes == ("CHL",)
    assert len(idx.records) == 1


def test_rows_with_bad_year_are_dropped_and_bad_values_become_zero():
    idx = build_index([
        {"entity": "Chile", "code": "CHL", "year": "n/a", "value": 7},
        {"entity": "Chile", "code": "CHL", "year": "2001", "value": "lots"},
    ])
    assert idx.years == (2001,)
    assert idx.value(2001, "CHL") == 0.0


def test_first_seen_name_wins():
    idx = build_index([
        Record("Peru", "PER", 2000, 1.0),
        Record("Republic of Peru", "PER", 2001, 2.0),
    ])
    assert idx.name_for("PER") == "Peru"


def test_duplicate_code_year_last_write_wins():
    idx = build_index([
        Record("Peru", "PER", 2000, 1.0),
        Record("Peru", "PER", 2000, 9.0),
    ])
    assert idx.value(2000, "PER") == 9.0


def test_years_are_sorted_and_may_have_gaps():
    idx = build_index([
        Record("Peru", "PER", 2010, 1.0),
        Record("Peru", "PER", 1990, 1.0),
        Record("Peru", "PER", 2000, 1.0),
    ])
    assert idx.years == (1990, 2000, 2010)


def test_series_is_chronological():
    idx = build_index([
        Record("Peru", "PER", 2002, 3.0),
        Record("Peru", "PER", 2000, 1.0),
        Record("Peru", "PER", 2001, 2.0),
    ])
    series = idx.series("PER")
    assert series["year"].tolist() == [2000, 2001, 2002]
    assert series["value"].tolist() == [1.0, 2.0, 3.0]
    assert idx.series("XXX").empty


def test_accepts_dataframe():
    df = pd.DataFrame({
        "entity": ["Peru", "Chile"],
        "code": ["PER", "CHL"],
        "year": [2000, 2000],
        "value": [1.0, 2.0],
    })
    idx = build_index(df)
    assert idx.codes == ("CHL", "PER")


def test_name_for_unknown_code_falls_back_to_code(index):
    assert index.name_for("QQQ") == "QQQ"
    assert not index.has_code("QQQ")


@pytest.mark.parametrize("source", [None, [], pd.DataFrame()])
def test_missing_or_empty_source_is_an_error(source):
    with pytest.raises(EmptyDatasetError):
        build_index(source)


def test_all_malformed_rows_give_an_empty_index():
    idx = build_index([{"entity": "World", "code": "OWID_WRL", "year": 2000, "value": 1}])
    assert idx.years == ()
    assert idx.min_year is None
    assert idx.codes == ()
    assert idx.year_values(2000).empty


def test_plain_tuples_are_records():
    idx = build_index([("Peru", "per", 2000, 7.5), ["Chile", "CHL", "2001", "3"]])
    assert idx.codes == ("CHL", "PER")
    assert idx.value(2000, "PER") == 7.5
    assert idx.value(2001, "CHL") == 3.0


def test_items_that_are_not_records_are_counted(caplog):
    caplog.set_level("DEBUG", logger="fishery_dashboard.dataset")
    idx = build_index([("Peru", "PER", 2000, 1.0), object(), ("too", "short")])
    assert idx.codes == ("PER",)
    assert "Skipped 2 items that are not records" in caplog.text
