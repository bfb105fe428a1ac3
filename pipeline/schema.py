from typing import Any, Dict, List, Optional, Sequence
import logging
import re

import numpy as np

from .cleaner import parse_date
from .constants import DEFAULT_CONFIG
from .stats import numeric_values, to_number
from .table import ColumnType, Table, is_missing

log = logging.getLogger("pipeline.schema")

_BOOL_WORDS = {"true", "false", "yes", "no", "y", "n"}
_ALNUM_RE = re.compile(r"[^a-z0-9]")

# role kinds accepted by match_roles
KIND_ANY = "any"
KIND_NUMERIC = "numeric"
KIND_DATE = "date"
KIND_LABEL = "label"


def _is_boolean(v: Any) -> bool:
    if isinstance(v, (bool, np.bool_)):
        return True
    return isinstance(v, str) and v.strip().lower() in _BOOL_WORDS


def _unique_key(v: Any) -> Any:
    return repr(v) if isinstance(v, (list, dict, set)) else v


def detect_type(values: Sequence[Any], threshold: float = DEFAULT_CONFIG["type_threshold"]) -> ColumnType:
    vals = [v for v in values if not is_missing(v)]
    if not vals:
        return ColumnType.UNKNOWN
    if len({_unique_key(v) for v in vals}) == 1:
        return ColumnType.CONSTANT

    n = float(len(vals))
    if sum(1 for v in vals if to_number(v) is not None) / n > threshold:
        return ColumnType.NUMERIC
    if sum(1 for v in vals if _is_boolean(v)) / n > threshold:
        return ColumnType.BOOLEAN
    if sum(1 for v in vals if parse_date(v) is not None) / n > threshold:
        return ColumnType.DATE
    return ColumnType.CATEGORICAL


def infer_schema(table: Table) -> Dict[str, str]:
    return {c: table.column_type(c).value for c in table.columns}


def is_year_like(values: Sequence[Any]) -> bool:
    nums = numeric_values(values)
    if not nums:
        return False
    return all(float(x).is_integer() and 1900 <= x <= 2100 for x in nums)


def normalize_key(name: Any) -> str:
    return _ALNUM_RE.sub("", str(name).lower())


def _fits(table: Table, col: str, kind: str) -> bool:
    ctype = table.column_type(col)
    if kind == KIND_NUMERIC:
        return any(to_number(v) is not None for v in table.values(col))
    if kind == KIND_DATE:
        return ctype == ColumnType.DATE or is_year_like(table.values(col))
    if kind == KIND_LABEL:
        return ctype not in (ColumnType.NUMERIC, ColumnType.DATE)
    return True


def _matches(col_key: str, alias_key: str) -> bool:
    return col_key == alias_key or alias_key in col_key or col_key in alias_key


def match_roles(
    table: Table,
    aliases: Dict[str, List[str]],
    kinds: Optional[Dict[str, str]] = None,
    fallback: Optional[Sequence[str]] = None,
) -> Dict[str, str]:
    """Map business roles to column names by fuzzy alias matching.

    Roles are resolved in declared order and a column is claimed by at most
    one role. For each role the first alias wins, then the first column in
    table order. Roles listed in ``fallback`` that are still unmatched take
    the remaining numeric columns positionally.
    """
    kinds = kinds or {}
    keyed = [(c, normalize_key(c)) for c in table.columns]
    keyed = [(c, k) for c, k in keyed if k]
    roles: Dict[str, str] = {}
    used = set()

    for role, alias_list in aliases.items():
        kind = kinds.get(role, KIND_ANY)
        found = None
        for alias in alias_list:
            akey = normalize_key(alias)
            if not akey:
                continue
            for col, ckey in keyed:
                if col in used or not _matches(ckey, akey):
                    continue
                if _fits(table, col, kind):
                    found = col
                    break
            if found:
                break
        if found:
            roles[role] = found
            used.add(found)

    spare = [c for c in table.columns_of(ColumnType.NUMERIC) if c not in used]
    for role in fallback or []:
        if role in roles or not spare:
            continue
        roles[role] = spare.pop(0)
        used.add(roles[role])
        log.debug("Role %r fell back to numeric column %r", role, roles[role])

    return roles
