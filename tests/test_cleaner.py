# tests/test_cleaner.py
import pandas as pd

from pipeline.cleaner import EXCEL_EPOCH, clean_records, normalize_column_name, parse_date
from pipeline.table import ColumnType


def test_normalize_column_name():
    assert normalize_column_name("  Order   Qty ") == "order_qty"
    assert normalize_column_name("Unit\tPrice") == "unit_price"
    for raw in ["  Order   Qty ", "Region", "a  b\nc", "ALREADY_done"]:
        once = normalize_column_name(raw)
        assert normalize_column_name(once) == once


def test_empty_columns_dropped():
    t = clean_records([{"A": 1, "Empty": "", "Nulls": None}, {"A": 2, "Empty": "  ", "Nulls": float("nan")}])
    assert t.columns == ["a"]
    assert t.values("a") == [1, 2]


def test_collision_keeps_first_column():
    t = clean_records([{"Sales": 1, "sales ": 2}, {"Sales": 3, "sales ": 4}])
    assert t.columns == ["sales"]
    assert t.values("sales") == [1, 3]


def test_heterogeneous_records_fill_missing_with_none():
    t = clean_records([{"a": 1}, {"b": 2}, {"a": 3, "b": 4}])
    assert t.columns == ["a", "b"]
    assert t.values("a") == [1, None, 3]
    assert t.values("b") == [None, 2, 4]
    assert t.row_count == 3


def test_date_column_is_parsed_and_bad_cells_become_null():
    rows = [{"when": v} for v in ["2022-01-05", "01/31/2022", "20220203", "bad", None]]
    t = clean_records(rows)
    vals = t.values("when")
    assert vals[0] == pd.Timestamp("2022-01-05")
    assert vals[1] == pd.Timestamp("2022-01-31")
    assert vals[2] == pd.Timestamp("2022-02-03")
    assert vals[3] is None and vals[4] is None
    assert t.column_type("when") == ColumnType.DATE


def test_non_date_column_passes_through():
    t = clean_records([{"name": "x"}, {"name": "y"}, {"name": "2022-01-01"}])
    assert t.values("name") == ["x", "y", "2022-01-01"]


def test_parse_date_formats():
    assert parse_date("2022-03-04") == pd.Timestamp("2022-03-04")
    assert parse_date("2022-03-04T10:30:00") == pd.Timestamp("2022-03-04 10:30:00")
    assert parse_date("13/01/2022") == pd.Timestamp("2022-01-13")
    assert parse_date("19991231") == pd.Timestamp("1999-12-31")
    assert parse_date(44562) == pd.Timestamp("2022-01-01")
    assert parse_date(pd.Timestamp("2021-06-01")) == pd.Timestamp("2021-06-01")


def test_parse_date_rejects_non_dates():
    assert parse_date(True) is None
    assert parse_date("hello") is None
    assert parse_date(123) is None
    assert parse_date("2022") is None
    assert parse_date("") is None
    assert parse_date(None) is None


def test_excel_serial_range_is_inclusive():
    assert parse_date(29999) is None
    assert parse_date(30000) == EXCEL_EPOCH + pd.Timedelta(days=30000)
    assert parse_date(60000) == EXCEL_EPOCH + pd.Timedelta(days=60000)
    assert parse_date(60001) is None
