from typing import Dict, Tuple

from pipeline.schema import KIND_DATE, KIND_LABEL, KIND_NUMERIC
from pipeline.table import Table

from .aggregation import rollup_trend
from .base import Breakdown, CategoryProfile, InsightEngineBase, InsightReport, combine_columns, free_column_name, ratio

RETAIL_PROFILE = CategoryProfile(
    name="retail",
    aliases={
        "quantity": ["qty", "quantity", "unitsold", "soldquantity", "orderquantity"],
        "unit_price": ["unitprice", "unitcost", "price", "priceperunit", "rate", "costperitem"],
        "sales": ["total", "amount", "sale", "revenue", "grosssale", "netsale", "invoicevalue", "totalsale"],
        "profit": ["profit", "grossprofit", "netprofit"],
        "loss": ["loss", "netloss"],
        "cost": ["cost", "totalcost", "purchaseprice"],
        "category": ["category", "item", "product", "brand", "segment"],
        "region": ["region", "area", "zone", "territory", "location"],
        "date": ["date", "orderdate", "timestamp", "orderdatetime"],
    },
    kinds={
        "quantity": KIND_NUMERIC,
        "unit_price": KIND_NUMERIC,
        "sales": KIND_NUMERIC,
        "profit": KIND_NUMERIC,
        "loss": KIND_NUMERIC,
        "cost": KIND_NUMERIC,
        "category": KIND_LABEL,
        "region": KIND_LABEL,
        "date": KIND_DATE,
    },
    fallback=("sales",),
    metrics=("sales", "profit", "quantity"),
    kpis={
        "sales": ("total", "avg", "median", "max"),
        "profit": ("total", "avg"),
        "loss": ("total",),
        "cost": ("total",),
        "quantity": ("total", "avg"),
    },
    breakdowns=(
        Breakdown("category", "sales"),
        Breakdown("region", "sales"),
        Breakdown("category", "profit"),
        Breakdown("category", "quantity"),
    ),
    outlier_roles=("sales", "profit", "quantity"),
    correlation_pairs=(("quantity", "sales"), ("unit_price", "quantity"), ("sales", "profit"), ("profit", "loss")),
    needed="sales/amount, quantity, unit price, category and date",
)


class RetailInsightEngine(InsightEngineBase):
    category = "retail"
    profile = RETAIL_PROFILE

    def derive(self, table: Table, roles: Dict[str, str]) -> Tuple[Table, Dict[str, str]]:
        roles = dict(roles)
        if "sales" not in roles and "quantity" in roles and "unit_price" in roles:
            name = free_column_name(table, "computed_sales")
            table = table.with_column(name, combine_columns(table, roles["quantity"], roles["unit_price"], lambda q, p: q * p))
            roles["sales"] = name
        if "profit" not in roles and "sales" in roles and "cost" in roles:
            name = free_column_name(table, "computed_profit")
            table = table.with_column(name, combine_columns(table, roles["sales"], roles["cost"], lambda s, c: s - c))
            roles["profit"] = name
        return table, roles

    def extra_insights(self, table: Table, roles: Dict[str, str], report: InsightReport) -> None:
        total_sales = report.kpis.get("total_sales")
        total_profit = report.kpis.get("total_profit")
        margin = ratio(total_profit, total_sales, 100) if total_profit is not None and total_sales else None
        if margin is not None:
            report.kpis["profit_margin"] = margin
            report.hypothesis.append(f"Average profit margin (estimated): {margin}%.")
        elif "profit" not in roles:
            report.hypothesis.append("Profit not found directly and could not be derived from sales and cost.")

        metric = self.primary_metric(roles)
        if report.trends:
            report.totals[f"{metric}_by_quarter"] = rollup_trend(report.trends, "quarter")
            months = report.totals.get(f"{metric}_by_month") or []
            if len(months) >= 2:
                peak = sorted(months, key=lambda m: -m["total"])[0]
                report.kpis["peak_month"] = peak["period"]
                report.hypothesis.append(f"Peak {metric} month: {peak['period']} ({peak['total']}).")
