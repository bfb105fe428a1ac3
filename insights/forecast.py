from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Sequence, Tuple
import logging
import math

import numpy as np
from sklearn.linear_model import LinearRegression

from pipeline.stats import to_number

log = logging.getLogger("insights.forecast")


@dataclass
class Forecast:
    next_x: float
    value: float
    slope: float
    intercept: float
    points: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def forecast_next(pairs: Sequence[Tuple[Any, Any]], min_points: int = 3) -> Optional[Forecast]:
    """Fit y = a*x + b over valid pairs and predict at max(x) + 1.

    Returns None when fewer than ``min_points`` pairs are usable or x has no
    spread.
    """
    xs, ys = [], []
    for x, y in pairs:
        nx, ny = to_number(x), to_number(y)
        if nx is None or ny is None:
            continue
        xs.append(nx)
        ys.append(ny)

    if len(xs) < min_points:
        return None
    X = np.asarray(xs, dtype=float).reshape(-1, 1)
    if np.ptp(X) == 0:
        return None

    model = LinearRegression()
    model.fit(X, np.asarray(ys, dtype=float))
    next_x = float(np.max(X)) + 1
    value = float(model.predict(np.array([[next_x]]))[0])
    slope = float(model.coef_[0])
    intercept = float(model.intercept_)
    if not all(math.isfinite(v) for v in (value, slope, intercept)):
        log.debug("Forecast produced non-finite values, dropped")
        return None
    return Forecast(
        next_x=next_x,
        value=round(value, 2),
        slope=round(slope, 4),
        intercept=round(intercept, 4),
        points=len(xs),
    )
