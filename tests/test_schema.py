# tests/test_schema.py
import pandas as pd

from insights.retail import RETAIL_PROFILE
from pipeline.schema import detect_type, infer_schema, match_roles, normalize_key
from pipeline.stats import to_number
from pipeline.table import ColumnType, Table


def test_currency_strings_are_numeric():
    assert to_number("$1,200.50") == 1200.5
    assert to_number("€ 3") == 3.0
    assert to_number(True) is None
    assert to_number("n/a") is None
    assert detect_type(["$1,200.50", "300", "4,000"]) == ColumnType.NUMERIC


def test_detect_type_classes():
    assert detect_type(["yes", "no", "Y", "n", "true"]) == ColumnType.BOOLEAN
    assert detect_type([True, False, True]) == ColumnType.BOOLEAN
    assert detect_type(["2022-01-01", "2022-02-01", "x"]) == ColumnType.DATE
    assert detect_type([pd.Timestamp("2022-01-01"), pd.Timestamp("2022-01-02")]) == ColumnType.DATE
    assert detect_type(["a", "b", "c", "1"]) == ColumnType.CATEGORICAL
    assert detect_type(["a", "a", None]) == ColumnType.CONSTANT
    assert detect_type([None, "", float("nan")]) == ColumnType.UNKNOWN


def test_numeric_threshold_is_strict():
    # 3 of 5 is exactly 60%, not above it
    assert detect_type(["1", "2", "3", "a", "b"]) == ColumnType.CATEGORICAL
    assert detect_type(["1", "2", "3", "4", "b"]) == ColumnType.NUMERIC


def test_numeric_beats_boolean_and_date():
    # 1/0 strings are numbers first
    assert detect_type(["1", "0", "1", "0"]) == ColumnType.NUMERIC


def test_detect_type_is_idempotent():
    samples = [["1", "x", "2"], ["yes", "no"], ["2022-01-01", "bad"], [1.5, 2.5, None]]
    for vals in samples:
        assert detect_type(vals) == detect_type(vals)


def test_infer_schema_uses_type_tags():
    t = Table.from_columns({"n": [1, 2, 3], "c": ["a", "b", "c"]})
    assert infer_schema(t) == {"n": "numeric", "c": "categorical"}


def _retail_roles(t):
    return match_roles(t, RETAIL_PROFILE.aliases, RETAIL_PROFILE.kinds, RETAIL_PROFILE.fallback)


def test_role_matcher_scenario():
    t = Table.from_columns({
        "Order Qty": [1, 2, 3],
        "Unit Price": [10.0, 20.0, 5.0],
        "Region": ["N", "S", "E"],
    })
    roles = _retail_roles(t)
    assert roles["quantity"] == "Order Qty"
    assert roles["unit_price"] == "Unit Price"
    assert roles["region"] == "Region"
    assert "sales" not in roles


def test_role_matcher_positional_fallback():
    t = Table.from_columns({
        "Order Qty": [1, 2, 3],
        "Unit Price": [10.0, 20.0, 5.0],
        "Region": ["N", "S", "E"],
        "Misc": [5, 6, 7],
    })
    assert _retail_roles(t)["sales"] == "Misc"


def test_numeric_role_skips_text_column():
    t = Table.from_columns({"Amount Note": ["a", "b", "c"], "Amount": [1, 2, 3]})
    assert _retail_roles(t)["sales"] == "Amount"


def test_first_alias_wins_over_column_order():
    t = Table.from_columns({"Revenue": [1, 2, 3], "Total": [4, 5, 6]})
    # "total" is declared before "revenue"
    assert _retail_roles(t)["sales"] == "Total"


def test_mapped_roles_always_exist():
    t = Table.from_columns({"Qty Sold": [1, 2], "Brand": ["x", "y"], "Profit $": [1, -1], "zone": ["a", "b"]})
    roles = _retail_roles(t)
    assert roles
    assert all(col in t.columns for col in roles.values())
    assert len(set(roles.values())) == len(roles)


def test_normalize_key():
    assert normalize_key("Order Qty") == "orderqty"
    assert normalize_key("unit_price ($)") == "unitprice"


def test_with_column_keeps_table_threshold():
    loose = Table.from_columns({"a": [1, 2]}, threshold=0.4)
    assert loose.with_column("b", ["1", "x"]).column_type("b") == ColumnType.NUMERIC
    strict = Table.from_columns({"a": [1, 2]})
    assert strict.with_column("b", ["1", "x"]).column_type("b") == ColumnType.CATEGORICAL
