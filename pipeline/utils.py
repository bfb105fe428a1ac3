from datetime import date, datetime
from enum import Enum
from typing import Any
import math

import numpy as np
import pandas as pd


def _bad_number(x: Any) -> bool:
    return isinstance(x, (float, np.floating)) and not math.isfinite(x)


def _key(k: Any) -> Any:
    if isinstance(k, (pd.Timestamp, datetime, date)):
        return k.isoformat()
    if isinstance(k, (np.integer, np.floating)):
        return k.item()
    return k


def to_jsonable(x: Any) -> Any:
    """Convert numpy/pandas scalars and containers to plain JSON types.

    Mapping entries holding NaN or infinity are dropped; inside lists such
    values become None.
    """
    if isinstance(x, dict):
        return {_key(k): to_jsonable(v) for k, v in x.items() if not _bad_number(v)}
    if isinstance(x, (list, tuple)):
        return [None if _bad_number(v) else to_jsonable(v) for v in x]
    if isinstance(x, np.ndarray):
        return to_jsonable(x.tolist())
    if isinstance(x, (bool, np.bool_)):
        return bool(x)
    if isinstance(x, np.integer):
        return int(x)
    if isinstance(x, np.floating):
        return float(x)
    if x is pd.NaT:
        return None
    if isinstance(x, (pd.Timestamp, datetime, date)):
        return x.isoformat()
    if isinstance(x, Enum):
        return x.value
    return x
