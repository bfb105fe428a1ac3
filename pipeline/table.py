from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence
import math

import numpy as np
import pandas as pd


class ColumnType(str, Enum):
    NUMERIC = "numeric"
    DATE = "date"
    BOOLEAN = "boolean"
    CATEGORICAL = "categorical"
    CONSTANT = "constant"
    UNKNOWN = "unknown"


def is_missing(value: Any) -> bool:
    """True for None, NaN/NaT and empty or whitespace-only strings."""
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (float, np.floating)):
        return math.isnan(value)
    return False


@dataclass(frozen=True, eq=False)
class Table:
    """Cleaned columnar data plus one ColumnType per column.

    Values live in an object-dtype DataFrame so raw cells (strings, numbers,
    timestamps, None) are kept exactly as the cleaner produced them.
    """
    frame: pd.DataFrame
    types: Dict[str, ColumnType] = field(default_factory=dict)
    threshold: float = 0.6

    @classmethod
    def from_columns(cls, data: Dict[str, Sequence[Any]], types: Optional[Dict[str, ColumnType]] = None, threshold: float = 0.6) -> "Table":
        from .schema import detect_type

        frame = pd.DataFrame({name: pd.Series(list(vals), dtype=object) for name, vals in data.items()})
        if types is None:
            types = {name: detect_type(list(vals), threshold) for name, vals in data.items()}
        return cls(frame=frame, types=dict(types), threshold=threshold)

    @property
    def columns(self) -> List[str]:
        return list(self.frame.columns)

    @property
    def row_count(self) -> int:
        return int(self.frame.shape[0])

    def __len__(self) -> int:
        return self.row_count

    def has(self, name: Optional[str]) -> bool:
        return name is not None and name in self.types

    def values(self, name: str) -> List[Any]:
        return [None if is_missing(v) else v for v in self.frame[name].tolist()]

    def column_type(self, name: str) -> ColumnType:
        return self.types.get(name, ColumnType.UNKNOWN)

    def columns_of(self, *kinds: ColumnType) -> List[str]:
        return [c for c in self.columns if self.types.get(c) in kinds]

    def with_column(self, name: str, values: Sequence[Any]) -> "Table":
        from .schema import detect_type

        vals = list(values)
        if len(vals) != self.row_count:
            raise ValueError(f"Column {name!r} has {len(vals)} values, table has {self.row_count} rows")
        frame = self.frame.copy()
        frame[name] = pd.Series(vals, dtype=object, index=frame.index)
        types = dict(self.types)
        types[name] = detect_type(vals, self.threshold)
        return Table(frame=frame, types=types, threshold=self.threshold)

    def records(self) -> List[Dict[str, Any]]:
        cols = self.columns
        return [dict(zip(cols, row)) for row in self.frame.itertuples(index=False, name=None)]
