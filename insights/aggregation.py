from typing import Any, Dict, List, Optional, Sequence
import logging
import math

import numpy as np
import pandas as pd

from pipeline.cleaner import parse_date
from pipeline.schema import is_year_like
from pipeline.stats import numeric_values, to_number
from pipeline.table import Table

log = logging.getLogger("insights.aggregation")

AGGREGATIONS = ("sum", "mean", "count", "median", "min", "max")


def _aggregate(nums: List[float], agg: str) -> float:
    if agg == "mean":
        return float(np.mean(nums))
    if agg == "median":
        return float(np.median(nums))
    if agg == "min":
        return float(np.min(nums))
    if agg == "max":
        return float(np.max(nums))
    if agg == "count":
        return float(len(nums))
    return float(np.sum(nums))


def group_by_aggregate(table: Table, group_col: str, value_col: str, agg: str = "sum") -> Optional[List[Dict[str, Any]]]:
    """Bucket rows by the raw ``group_col`` value and aggregate numeric ``value_col`` entries.

    Buckets come back in first-seen order. Returns None when either column is
    missing or no row carries a numeric value.
    """
    if agg not in AGGREGATIONS:
        raise ValueError(f"Unsupported aggregation: {agg}")
    if not table.has(group_col) or not table.has(value_col):
        log.debug("Group-by skipped, missing column: %s, %s", group_col, value_col)
        return None

    buckets: Dict[Any, List[float]] = {}
    for key, raw in zip(table.values(group_col), table.values(value_col)):
        n = to_number(raw)
        if n is None:
            continue
        buckets.setdefault(key, []).append(n)

    if not buckets:
        log.debug("Group-by skipped, no numeric values: %s, %s", group_col, value_col)
        return None

    out = []
    for key, nums in buckets.items():
        val = round(_aggregate(nums, agg), 2)
        out.append({group_col: key, value_col: int(val) if agg == "count" else val})
    return out


def count_by(table: Table, col: str) -> Optional[List[Dict[str, Any]]]:
    """Row counts per distinct non-null value, most frequent first."""
    if not table.has(col):
        return None
    counts: Dict[Any, int] = {}
    for v in table.values(col):
        if v is None:
            continue
        counts[v] = counts.get(v, 0) + 1
    if not counts:
        return None
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])
    return [{col: k, "count": c} for k, c in ranked]


def detect_outliers(values: Sequence[Any]) -> List[float]:
    """IQR rule: values strictly outside [Q1 - 1.5*IQR, Q3 + 1.5*IQR], input order kept."""
    nums = numeric_values(values)
    if not nums:
        return []
    q1, q3 = np.percentile(nums, [25, 75])
    iqr = q3 - q1
    lower = q1 - 1.5 * iqr
    upper = q3 + 1.5 * iqr
    return [v for v in nums if v < lower or v > upper]


def correlation(table: Table, col1: str, col2: str) -> float:
    if not table.has(col1) or not table.has(col2):
        log.debug("Correlation skipped, missing column: %s or %s", col1, col2)
        return 0
    a = numeric_values(table.values(col1))
    b = numeric_values(table.values(col2))
    if not a or not b or len(a) != len(b) or len(a) < 2:
        log.debug("Correlation skipped, unequal or empty values: %s, %s", col1, col2)
        return 0
    if np.std(a) == 0 or np.std(b) == 0:
        return 0
    r = float(np.corrcoef(a, b)[0, 1])
    if not math.isfinite(r):
        return 0
    return round(max(-1.0, min(1.0, r)), 4)


def _trend_date(raw: Any, year_axis: bool) -> Optional[pd.Timestamp]:
    if year_axis:
        n = to_number(raw)
        return pd.Timestamp(year=int(n), month=1, day=1) if n is not None else None
    return parse_date(raw)


def trend_analysis(table: Table, date_col: str, value_col: str) -> List[Dict[str, Any]]:
    """Per-day totals with running cumulative and change vs the previous day."""
    if not table.has(date_col) or not table.has(value_col):
        log.debug("Trend skipped, missing column: %s, %s", date_col, value_col)
        return []

    date_vals = table.values(date_col)
    year_axis = is_year_like(date_vals)
    grouped: Dict[str, List[float]] = {}
    skipped = 0
    for raw_date, raw_value in zip(date_vals, table.values(value_col)):
        ts = _trend_date(raw_date, year_axis)
        value = to_number(raw_value)
        if ts is None or value is None:
            skipped += 1
            continue
        grouped.setdefault(ts.strftime("%Y-%m-%d"), []).append(value)

    if skipped:
        log.debug("Trend %s/%s skipped %d rows with invalid date or value", date_col, value_col, skipped)

    out = []
    last_total = 0.0
    cumulative = 0.0
    for day in sorted(grouped):
        vals = grouped[day]
        total = float(sum(vals))
        cumulative += total
        change = 0.0 if last_total == 0 else (total - last_total) / last_total * 100
        last_total = total
        out.append({
            "date": day,
            "total": round(total, 2),
            "avg": round(total / len(vals), 2),
            "count": len(vals),
            "cumulative": round(cumulative, 2),
            "change_percent": round(change, 2),
        })
    return out


def _period_label(ts: pd.Timestamp, period: str) -> str:
    if period == "year":
        return str(ts.year)
    if period == "quarter":
        return f"{ts.year}-Q{ts.quarter}"
    return ts.strftime("%Y-%m")


def rollup_trend(trend: List[Dict[str, Any]], period: str = "month") -> List[Dict[str, Any]]:
    """Re-bucket daily trend records by month, quarter or year."""
    if period not in ("month", "quarter", "year"):
        raise ValueError(f"Unsupported period: {period}")
    buckets: Dict[str, Dict[str, float]] = {}
    for rec in trend:
        label = _period_label(pd.Timestamp(rec["date"]), period)
        b = buckets.setdefault(label, {"total": 0.0, "count": 0})
        b["total"] += rec["total"]
        b["count"] += rec["count"]
    return [
        {
            "period": label,
            "total": round(b["total"], 2),
            "avg": round(b["total"] / b["count"], 2) if b["count"] else 0,
            "count": int(b["count"]),
        }
        for label, b in sorted(buckets.items())
    ]


def average_growth_rate(trend: List[Dict[str, Any]]) -> Optional[float]:
    """Mean of the per-period change_percent values across periods with a non-zero predecessor."""
    changes = []
    for prev, cur in zip(trend, trend[1:]):
        if prev["total"]:
            changes.append((cur["total"] - prev["total"]) / prev["total"] * 100)
    if not changes:
        return None
    return round(float(np.mean(changes)), 2)
