"""Safe aggregates.

Every helper drops entries that are not numbers (after currency/thousands
stripping) and returns 0 when nothing is left. None of them raise.
"""
from typing import Any, Iterable, List, Optional
import math
import re

import numpy as np

_NUM_STRIP_RE = re.compile(r"[\s,$€£₹¥]")


def to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        v = float(value)
        return v if math.isfinite(v) else None
    if isinstance(value, str):
        s = _NUM_STRIP_RE.sub("", value)
        if not s:
            return None
        try:
            v = float(s)
        except ValueError:
            return None
        return v if math.isfinite(v) else None
    return None


def numeric_values(values: Iterable[Any]) -> List[float]:
    out = []
    for v in values or []:
        n = to_number(v)
        if n is not None:
            out.append(n)
    return out


def safe_sum(values: Iterable[Any]) -> float:
    nums = numeric_values(values)
    return float(np.sum(nums)) if nums else 0


def safe_mean(values: Iterable[Any]) -> float:
    nums = numeric_values(values)
    return float(np.mean(nums)) if nums else 0


def safe_median(values: Iterable[Any]) -> float:
    nums = numeric_values(values)
    return float(np.median(nums)) if nums else 0


def safe_min(values: Iterable[Any]) -> float:
    nums = numeric_values(values)
    return float(np.min(nums)) if nums else 0


def safe_max(values: Iterable[Any]) -> float:
    nums = numeric_values(values)
    return float(np.max(nums)) if nums else 0


def safe_std(values: Iterable[Any]) -> float:
    # population standard deviation
    nums = numeric_values(values)
    return float(np.std(nums)) if nums else 0
