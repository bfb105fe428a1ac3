from typing import Dict

from pipeline.cleaner import parse_date
from pipeline.schema import KIND_DATE, KIND_LABEL, KIND_NUMERIC
from pipeline.table import ColumnType, Table

from .base import Breakdown, CategoryProfile, InsightEngineBase, InsightReport, combine_columns, ratio
from .forecast import forecast_next

FINANCE_PROFILE = CategoryProfile(
    name="finance",
    aliases={
        "revenue": ["revenue", "sales", "amount", "income", "checking", "transaction"],
        "expense": ["expense", "cost", "spend", "debit", "withdrawal"],
        "date": ["date", "timestamp", "period", "time"],
        "metric": ["metric", "type", "category", "label"],
        "customer": ["customer", "client", "user"],
    },
    kinds={
        "revenue": KIND_NUMERIC,
        "expense": KIND_NUMERIC,
        "date": KIND_DATE,
        "metric": KIND_LABEL,
        "customer": KIND_LABEL,
    },
    fallback=("revenue", "expense"),
    metrics=("revenue", "expense"),
    kpis={
        "revenue": ("total", "avg", "median", "max"),
        "expense": ("total", "avg"),
    },
    breakdowns=(
        Breakdown("metric", "revenue", "mean"),
        Breakdown("customer", "revenue"),
        Breakdown("metric", "expense"),
    ),
    outlier_roles=("revenue", "expense"),
    correlation_pairs=(("revenue", "expense"),),
    needed="revenue/amount, expense/cost and date",
)


class FinanceInsightEngine(InsightEngineBase):
    category = "finance"
    profile = FINANCE_PROFILE

    def extra_insights(self, table: Table, roles: Dict[str, str], report: InsightReport) -> None:
        if "revenue" not in roles:
            report.hypothesis.append("Revenue column not found.")
            return
        if "expense" not in roles:
            report.hypothesis.append("Only revenue data available; no expense analysis.")
        else:
            revenue = report.kpis.get("total_revenue", 0)
            net = round(revenue - report.kpis.get("total_expense", 0), 2)
            report.kpis["net_profit"] = net
            margin = ratio(net, revenue, 100)
            if margin is not None:
                report.kpis["net_margin"] = margin
            report.hypothesis.append(f"Net profit {net} on revenue {revenue}.")
            self._cash_flow(table, roles, report)

        if "customer" in roles:
            features = [c for c in table.columns_of(ColumnType.NUMERIC) if c != roles["customer"]]
            if len(features) >= 2:
                report.totals["segmentation_features"] = features
                report.hypothesis.append("Customer segmentation features detected.")
            else:
                report.hypothesis.append("Not enough numeric fields for customer segmentation.")

    def _cash_flow(self, table: Table, roles: Dict[str, str], report: InsightReport) -> None:
        net = combine_columns(table, roles["revenue"], roles["expense"], lambda r, e: r - e)
        if "date" in roles:
            dated = [(parse_date(d), n) for d, n in zip(table.values(roles["date"]), net)]
            dated = [(d, n) for d, n in dated if d is not None and n is not None]
            # sorted() is stable so same-day rows keep table order
            net = [n for _, n in sorted(dated, key=lambda p: p[0])]
        fc = forecast_next(list(enumerate(net)), self.cfg.get("min_forecast_points", 3))
        if fc is None:
            report.hypothesis.append("Not enough data for cash flow forecast.")
            return
        report.kpis["cash_flow_forecast_next_period"] = fc.value
        report.hypothesis.append(f"Cash flow forecast for next period: {fc.value}.")
