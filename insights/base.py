from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from pipeline.constants import DEFAULT_CONFIG
from pipeline.schema import is_year_like, match_roles
from pipeline.stats import safe_max, safe_mean, safe_median, safe_min, safe_sum, to_number
from pipeline.table import ColumnType, Table

from .aggregation import (
    average_growth_rate,
    correlation,
    detect_outliers,
    group_by_aggregate,
    rollup_trend,
    trend_analysis,
)
from .forecast import Forecast, forecast_next

log = logging.getLogger("insights")

KPI_FUNCS: Dict[str, Callable] = {
    "total": safe_sum,
    "avg": safe_mean,
    "median": safe_median,
    "min": safe_min,
    "max": safe_max,
}


@dataclass
class InsightReport:
    category: str
    kpis: Dict[str, Any] = field(default_factory=dict)
    high_performers: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    low_performers: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    totals: Dict[str, Any] = field(default_factory=dict)
    trends: List[Dict[str, Any]] = field(default_factory=list)
    outliers: Dict[str, List[float]] = field(default_factory=dict)
    correlations: Dict[str, float] = field(default_factory=dict)
    hypothesis: List[str] = field(default_factory=list)
    roles: Dict[str, str] = field(default_factory=dict)
    forecast: Optional[Forecast] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kpis": self.kpis,
            "highPerformers": self.high_performers,
            "lowPerformers": self.low_performers,
            "totals": self.totals,
            "trends": self.trends,
            "outliers": self.outliers,
            "correlations": self.correlations,
            "hypothesis": self.hypothesis,
        }


@dataclass(frozen=True)
class Breakdown:
    dimension: str
    value: str
    agg: str = "sum"


@dataclass
class CategoryProfile:
    """Declarative role table for one business category."""
    name: str
    aliases: Dict[str, List[str]]
    kinds: Dict[str, str] = field(default_factory=dict)
    fallback: Tuple[str, ...] = ()
    metrics: Tuple[str, ...] = ()
    metric_agg: str = "sum"
    kpis: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    breakdowns: Tuple[Breakdown, ...] = ()
    date_role: Optional[str] = "date"
    outlier_roles: Tuple[str, ...] = ()
    correlation_pairs: Tuple[Tuple[str, str], ...] = ()
    needed: str = ""


def free_column_name(table: Table, base: str) -> str:
    name = base
    while table.has(name):
        name = "_" + name
    return name


def combine_columns(table: Table, a: str, b: str, op: Callable[[float, float], Optional[float]]) -> List[Optional[float]]:
    """Row-wise op over two columns; rows where either side is not numeric give None."""
    out = []
    for x, y in zip(table.values(a), table.values(b)):
        nx, ny = to_number(x), to_number(y)
        out.append(op(nx, ny) if nx is not None and ny is not None else None)
    return out


def ratio(num: float, den: float, scale: float = 1.0) -> Optional[float]:
    if not den:
        return None
    return round(num / den * scale, 2)


class InsightEngineBase:
    """Shared insight recipe.

    Subclasses set ``profile`` and may override ``derive`` (computed columns)
    and ``extra_insights`` (category-only KPIs and breakdowns).
    """
    category: str = "base"
    profile: CategoryProfile = None

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.cfg = dict(DEFAULT_CONFIG)
        self.cfg.update(config or {})

    def derive(self, table: Table, roles: Dict[str, str]) -> Tuple[Table, Dict[str, str]]:
        return table, roles

    def extra_insights(self, table: Table, roles: Dict[str, str], report: InsightReport) -> None:
        pass

    def primary_metric(self, roles: Dict[str, str]) -> Optional[str]:
        for m in self.profile.metrics:
            if m in roles:
                return m
        return None

    def compute(self, table: Table) -> InsightReport:
        p = self.profile
        report = InsightReport(category=self.category)

        roles = match_roles(table, p.aliases, p.kinds, p.fallback)
        table, roles = self.derive(table, roles)
        report.roles = dict(roles)
        log.info("%s roles resolved: %s", self.category, roles)

        if not roles:
            report.hypothesis.append(
                f"No significant {p.name} patterns detected. Include columns such as {p.needed}."
            )
            return report

        metric = self.primary_metric(roles)
        self._kpis(table, roles, report)
        self._breakdowns(table, roles, report)
        trend = self._trend(table, roles, metric, report)
        self._forecast(table, roles, metric, trend, report)
        self._outliers(table, roles, report)
        self._correlations(table, roles, report)
        self._dynamic_breakdowns(table, roles, metric, report)
        self.extra_insights(table, roles, report)

        if not report.hypothesis:
            report.hypothesis.append(f"No notable {p.name} signals found in the matched columns.")
        return report

    def _kpis(self, table, roles, report):
        for role, aggs in self.profile.kpis.items():
            if role not in roles:
                continue
            vals = table.values(roles[role])
            for agg in aggs:
                report.kpis[f"{agg}_{role}"] = round(KPI_FUNCS[agg](vals), 2)

    def _rank(self, rows: List[Dict[str, Any]], value_col: str):
        n = self.cfg.get("top_n", 3)
        # sorted() is stable so ties keep table row order
        high = sorted(rows, key=lambda r: -r[value_col])[:n]
        low = sorted(rows, key=lambda r: r[value_col])[:n]
        return high, low

    def _breakdowns(self, table, roles, report):
        for b in self.profile.breakdowns:
            if b.dimension not in roles or b.value not in roles:
                continue
            dim_col, val_col = roles[b.dimension], roles[b.value]
            rows = group_by_aggregate(table, dim_col, val_col, b.agg)
            if not rows:
                continue
            key = f"{b.value}_by_{b.dimension}"
            high, low = self._rank(rows, val_col)
            report.totals[key] = rows
            report.high_performers[key] = high
            report.low_performers[key] = low
            label = "average" if b.agg == "mean" else "total"
            report.hypothesis.append(
                f"Highest {label} {b.value} by {b.dimension}: {high[0][dim_col]} ({high[0][val_col]}); "
                f"lowest: {low[0][dim_col]} ({low[0][val_col]})."
            )

    def _trend(self, table, roles, metric, report):
        date_role = self.profile.date_role
        if not metric or not date_role or date_role not in roles:
            return []
        date_col, val_col = roles[date_role], roles[metric]
        trend = trend_analysis(table, date_col, val_col)
        if not trend:
            return []
        report.trends = trend
        growth = average_growth_rate(trend)
        if growth is not None:
            report.kpis["avg_growth_rate"] = growth
            direction = "growing" if growth > 0 else "declining" if growth < 0 else "flat"
            report.hypothesis.append(f"{metric.capitalize()} is {direction} at {growth}% per period on average.")
        if not is_year_like(table.values(date_col)):
            report.totals[f"{metric}_by_month"] = rollup_trend(trend, "month")
        return trend

    def _forecast(self, table, roles, metric, trend, report):
        if not metric:
            return
        field_name = "avg" if self.profile.metric_agg == "mean" else "total"
        if trend:
            date_col = roles[self.profile.date_role]
            if is_year_like(table.values(date_col)):
                pairs = [(int(t["date"][:4]), t[field_name]) for t in trend]
            else:
                pairs = [(i, t[field_name]) for i, t in enumerate(trend)]
        else:
            pairs = list(enumerate(table.values(roles[metric])))
        fc = forecast_next(pairs, self.cfg.get("min_forecast_points", 3))
        if fc is None:
            return
        report.forecast = fc
        report.kpis[f"{metric}_forecast_next_period"] = fc.value
        report.hypothesis.append(f"Forecast for next period's {metric} (linear regression): {fc.value}.")

    def _outliers(self, table, roles, report):
        cap = self.cfg.get("max_outliers", 50)
        for role in self.profile.outlier_roles:
            if role not in roles:
                continue
            found = detect_outliers(table.values(roles[role]))
            if found:
                report.outliers[role] = found[:cap]
                report.hypothesis.append(f"{len(found)} outlier values detected in {role}.")

    def _correlations(self, table, roles, report):
        for a, b in self.profile.correlation_pairs:
            if a not in roles or b not in roles:
                continue
            r = correlation(table, roles[a], roles[b])
            report.correlations[f"{a}_vs_{b}"] = r
            if abs(r) >= 0.7:
                sign = "positive" if r > 0 else "negative"
                report.hypothesis.append(f"Strong {sign} correlation between {a} and {b} ({r}).")

    def _dynamic_breakdowns(self, table, roles, metric, report):
        if not metric:
            return
        lo = self.cfg.get("dynamic_breakdown_min_unique", 2)
        hi = self.cfg.get("dynamic_breakdown_max_unique", 49)
        used = set(roles.values())
        val_col = roles[metric]
        for col in table.columns_of(ColumnType.CATEGORICAL):
            if col in used:
                continue
            unique = {v for v in table.values(col) if v is not None}
            if not lo <= len(unique) <= hi:
                continue
            rows = group_by_aggregate(table, col, val_col, self.profile.metric_agg)
            if not rows:
                continue
            key = f"{metric}_by_{col}"
            high, low = self._rank(rows, val_col)
            report.totals[key] = rows
            report.high_performers[key] = high
            report.low_performers[key] = low
            best = high[0]
            report.hypothesis.append(f"{col} breakdown: {best[col]} leads on {metric} ({best[val_col]}).")
