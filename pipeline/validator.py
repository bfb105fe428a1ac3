from collections.abc import Mapping
from typing import Any, Dict, List, Tuple

import pandas as pd

from .cleaner import normalize_column_name


def validate_records(records: Any, cfg: Dict[str, Any] = None) -> Tuple[List[Dict[str, Any]], List[str], List[str]]:
    """Check that ``records`` is a non-empty sequence of mappings.

    A DataFrame is accepted and converted to records. Returns
    ``(records, warnings, errors)``; any error means the input is not tabular.
    """
    warnings = []
    errors = []

    if isinstance(records, pd.DataFrame):
        records = records.to_dict("records")

    if records is None or isinstance(records, (str, bytes, Mapping)):
        errors.append("Input must be a list of records")
        return [], warnings, errors
    try:
        records = list(records)
    except TypeError:
        errors.append("Input must be a list of records")
        return [], warnings, errors

    if not records:
        errors.append("Empty record set")
        return records, warnings, errors

    bad = sum(1 for r in records if not isinstance(r, Mapping))
    if bad:
        errors.append(f"{bad} of {len(records)} rows are not key/value records")
        return records, warnings, errors

    if len(records) < 10:
        warnings.append("Very small number of rows (<10)")

    keys = []
    for r in records:
        for k in r:
            if k not in keys:
                keys.append(k)
    if not keys:
        errors.append("Records contain no columns")
        return records, warnings, errors

    widths = {len(r) for r in records}
    if len(widths) > 1:
        warnings.append("Rows have differing sets of columns; missing cells treated as empty")

    names = [normalize_column_name(k) for k in keys]
    dup = sorted({n for n in names if names.count(n) > 1})
    if dup:
        warnings.append(f"Columns collide after normalization (first kept): {dup[:10]}")

    return [dict(r) for r in records], warnings, errors
