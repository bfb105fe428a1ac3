from collections import Counter
from typing import Any, Dict

import numpy as np
import pandas as pd

from .cleaner import parse_date
from .constants import DEFAULT_CONFIG
from .stats import numeric_values
from .table import ColumnType, Table

_TRUTHY = {"true", "yes", "y"}


def _is_truthy(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in _TRUTHY
    return isinstance(v, (bool, np.bool_)) and bool(v)


def _numeric_summary(values) -> Dict[str, Any]:
    nums = numeric_values(values)
    if not nums:
        return {"count": 0, "note": "No numeric values could be parsed"}
    s = pd.Series(nums, dtype=float)
    return {
        "count": int(s.size),
        "min": float(s.min()),
        "max": float(s.max()),
        "mean": round(float(s.mean()), 2),
        "median": float(s.median()),
        "std": round(float(s.std(ddof=0)), 2),
    }


def _date_summary(values) -> Dict[str, Any]:
    dates = [d for d in (parse_date(v) for v in values) if d is not None]
    if not dates:
        return {"count": 0, "note": "No date values could be parsed"}
    lo, hi = min(dates), max(dates)
    return {
        "count": len(dates),
        "min_date": lo.isoformat(),
        "max_date": hi.isoformat(),
        "range_days": round((hi - lo).total_seconds() / 86400.0, 1),
    }


def _boolean_summary(values) -> Dict[str, Any]:
    present = [v for v in values if v is not None]
    true_count = sum(1 for v in present if _is_truthy(v))
    return {"true_count": true_count, "false_count": len(present) - true_count}


def _categorical_summary(values, top_n: int) -> Dict[str, Any]:
    counts = Counter(v for v in values if v is not None)
    # Counter keeps first-seen order and sorted() is stable
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])[:top_n]
    return {
        "top_values": [{"value": k, "count": c} for k, c in ranked],
        "unique_count": len(counts),
    }


def compute_column_summary(table: Table, column: str, cfg: Dict[str, Any] = None) -> Dict[str, Any]:
    cfg = cfg or DEFAULT_CONFIG
    ctype = table.column_type(column)
    values = table.values(column)
    out: Dict[str, Any] = {"type": ctype.value, "missing": sum(1 for v in values if v is None)}

    if ctype == ColumnType.NUMERIC:
        out.update(_numeric_summary(values))
    elif ctype == ColumnType.DATE:
        out.update(_date_summary(values))
    elif ctype == ColumnType.BOOLEAN:
        out.update(_boolean_summary(values))
    elif ctype == ColumnType.CATEGORICAL:
        out.update(_categorical_summary(values, cfg.get("top_values", 5)))
    elif ctype == ColumnType.CONSTANT:
        out["value"] = next((v for v in values if v is not None), None)
        out["note"] = "Column holds a single distinct value"
    else:
        out["count"] = 0
        out["note"] = "Column has no usable values"
    return out


def profile(table: Table, cfg: Dict[str, Any] = None) -> Dict[str, Any]:
    return {c: compute_column_summary(table, c, cfg) for c in table.columns}


def numeric_overview(table: Table) -> Dict[str, Any]:
    """Plain min/max/mean/median/stddev per numeric column."""
    summary: Dict[str, Any] = {}
    for c in table.columns_of(ColumnType.NUMERIC):
        nums = numeric_values(table.values(c))
        if not nums:
            continue
        s = pd.Series(nums, dtype=float)
        summary[c] = {
            "min": float(s.min()),
            "max": float(s.max()),
            "mean": float(s.mean()),
            "median": float(s.median()),
            "stddev": float(s.std(ddof=0)),
        }
    return summary
