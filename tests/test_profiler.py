# tests/test_profiler.py
import pandas as pd

from pipeline.profiler import compute_column_summary, numeric_overview, profile
from pipeline.stats import safe_max, safe_mean, safe_median, safe_min, safe_std, safe_sum
from pipeline.table import ColumnType, Table


def test_numeric_summary():
    t = Table.from_columns({"v": [10, 20, 30, 40, 50]})
    s = compute_column_summary(t, "v")
    assert s["type"] == "numeric"
    assert s["count"] == 5
    assert s["mean"] == 30
    assert s["median"] == 30
    assert s["std"] == 14.14
    assert s["min"] <= s["median"] <= s["max"]


def test_numeric_summary_mixed_values():
    t = Table.from_columns({"v": ["$1,000", "250", "x", None, "3,000", "12"]})
    s = compute_column_summary(t, "v")
    assert s["count"] == 4
    assert s["missing"] == 1
    assert s["min"] == 12 and s["max"] == 3000
    assert s["min"] <= s["median"] <= s["max"]
    assert s["std"] >= 0


def test_numeric_summary_with_nothing_parsable():
    t = Table.from_columns({"v": ["a", "b"]}, types={"v": ColumnType.NUMERIC})
    s = compute_column_summary(t, "v")
    assert s["count"] == 0
    assert "note" in s


def test_categorical_top_values():
    t = Table.from_columns({"c": ["A", "A", "B", "A", "C"]})
    s = compute_column_summary(t, "c")
    assert s["top_values"] == [
        {"value": "A", "count": 3},
        {"value": "B", "count": 1},
        {"value": "C", "count": 1},
    ]
    assert s["unique_count"] == 3


def test_categorical_top_values_capped():
    t = Table.from_columns({"c": list("abcdefg") + ["g"]})
    s = compute_column_summary(t, "c")
    assert len(s["top_values"]) == 5
    assert s["top_values"][0] == {"value": "g", "count": 2}
    assert s["unique_count"] == 7


def test_date_summary():
    t = Table.from_columns({"d": [pd.Timestamp("2022-01-11"), pd.Timestamp("2022-01-01"), None]})
    s = compute_column_summary(t, "d")
    assert s["type"] == "date"
    assert s["count"] == 2
    assert s["min_date"] == "2022-01-01T00:00:00"
    assert s["max_date"] == "2022-01-11T00:00:00"
    assert s["range_days"] == 10.0


def test_boolean_summary():
    t = Table.from_columns({"b": ["yes", "no", "Y", True, "false"]})
    s = compute_column_summary(t, "b")
    assert s["type"] == "boolean"
    assert s["true_count"] == 3
    assert s["false_count"] == 2


def test_constant_summary():
    t = Table.from_columns({"k": ["x", "x", None]})
    s = compute_column_summary(t, "k")
    assert s["type"] == "constant"
    assert s["value"] == "x"
    assert "note" in s


def test_profile_and_overview_cover_columns():
    t = Table.from_columns({"v": [1, 2, 3], "c": ["a", "b", "a"]})
    prof = profile(t)
    assert set(prof) == {"v", "c"}
    overview = numeric_overview(t)
    assert list(overview) == ["v"]
    assert overview["v"]["mean"] == 2.0
    assert set(overview["v"]) == {"min", "max", "mean", "median", "stddev"}


def test_safe_aggregates_never_raise():
    assert safe_sum([]) == 0
    assert safe_mean([None, "a"]) == 0
    assert safe_median(["1", "3", "x"]) == 2
    assert safe_min([]) == 0
    assert safe_max(["5", 2, None]) == 5
    assert safe_std([]) == 0
    assert safe_sum(["$1,000", 5]) == 1005
