from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple
import logging
import math
import re

import numpy as np
import pandas as pd

from .constants import DEFAULT_CONFIG
from .table import Table, is_missing

log = logging.getLogger("pipeline.cleaner")

EXCEL_EPOCH = pd.Timestamp("1899-12-30")

_WS_RE = re.compile(r"\s+")

# month-first wins over day-first when both parse
_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%m/%d/%Y",
    "%d/%m/%Y",
)


def normalize_column_name(name: Any) -> str:
    return _WS_RE.sub("_", str(name).strip().lower())


def parse_date(value: Any, serial_range: Tuple[float, float] = (DEFAULT_CONFIG["excel_serial_min"], DEFAULT_CONFIG["excel_serial_max"])) -> Optional[pd.Timestamp]:
    if value is None or value is pd.NaT or isinstance(value, bool):
        return None
    if isinstance(value, (datetime, date, np.datetime64)):
        ts = pd.Timestamp(value)
        return None if pd.isna(ts) else ts
    if isinstance(value, (int, float, np.integer, np.floating)):
        v = float(value)
        lo, hi = serial_range
        if math.isfinite(v) and lo <= v <= hi:
            return EXCEL_EPOCH + pd.Timedelta(days=v)
        return None
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None
    if s.isdigit():
        if len(s) != 8:
            return None
        try:
            return pd.Timestamp(datetime.strptime(s, "%Y%m%d"))
        except ValueError:
            return None
    for fmt in _DATE_FORMATS:
        try:
            return pd.Timestamp(datetime.strptime(s, fmt))
        except ValueError:
            continue
    return None


def _looks_like_dates(values: List[Any], cfg: Dict[str, Any]) -> bool:
    sample = [v for v in values if not is_missing(v)][: cfg.get("date_sample_size", 5)]
    if not sample:
        return False
    serial = (cfg.get("excel_serial_min", 30000), cfg.get("excel_serial_max", 60000))
    hits = sum(1 for v in sample if parse_date(v, serial) is not None)
    return hits >= min(cfg.get("date_sample_hits", 3), len(sample))


def collect_columns(records: List[Dict[str, Any]]) -> Dict[str, List[Any]]:
    """Gather raw columns in first-seen key order; absent keys become None."""
    cols: Dict[Any, List[Any]] = {}
    for i, rec in enumerate(records):
        for k in rec:
            if k not in cols:
                cols[k] = [None] * i
        for k, vals in cols.items():
            vals.append(rec.get(k))
    return cols


def clean_records(records: List[Dict[str, Any]], cfg: Optional[Dict[str, Any]] = None) -> Table:
    cfg = cfg or DEFAULT_CONFIG
    raw = collect_columns(records)

    cleaned: Dict[str, List[Any]] = {}
    dropped = []
    for key, vals in raw.items():
        if all(is_missing(v) for v in vals):
            dropped.append(key)
            continue
        name = normalize_column_name(key)
        if name in cleaned:
            log.debug("Column %r collides with %r after normalization, keeping first", key, name)
            continue
        vals = [None if is_missing(v) else v for v in vals]
        if _looks_like_dates(vals, cfg):
            serial = (cfg.get("excel_serial_min", 30000), cfg.get("excel_serial_max", 60000))
            parsed = [parse_date(v, serial) for v in vals]
            failed = sum(1 for v, p in zip(vals, parsed) if v is not None and p is None)
            if failed:
                log.debug("Column %r: %d unparsable date cells set to null", name, failed)
            vals = parsed
        cleaned[name] = vals

    if dropped:
        log.info("Dropped %d empty columns: %s", len(dropped), dropped[:10])
    return Table.from_columns(cleaned, threshold=cfg.get("type_threshold", 0.6))
