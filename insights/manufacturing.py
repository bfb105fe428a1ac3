from typing import Dict

from pipeline.schema import KIND_DATE, KIND_LABEL, KIND_NUMERIC
from pipeline.table import Table

from .aggregation import trend_analysis
from .base import Breakdown, CategoryProfile, InsightEngineBase, InsightReport, ratio

MANUFACTURING_PROFILE = CategoryProfile(
    name="manufacturing",
    aliases={
        "production": ["produce", "production", "output", "volume", "unit"],
        "cost": ["cost", "expense", "spend"],
        "defects": ["defect", "quality", "reject", "scrap"],
        "downtime": ["downtime", "uptime", "maintenance"],
        "machine": ["machine", "line", "equipment", "plant"],
        "lead_time": ["leadtime", "delivery", "supply"],
        "material": ["material", "raw", "input"],
        "energy": ["energy", "power", "electricity"],
        "labor": ["labor", "workforce", "staff", "manpower"],
        "date": ["date", "period", "time", "timestamp"],
    },
    kinds={
        "production": KIND_NUMERIC,
        "cost": KIND_NUMERIC,
        "defects": KIND_NUMERIC,
        "downtime": KIND_NUMERIC,
        "machine": KIND_LABEL,
        "lead_time": KIND_NUMERIC,
        "material": KIND_NUMERIC,
        "energy": KIND_NUMERIC,
        "labor": KIND_NUMERIC,
        "date": KIND_DATE,
    },
    fallback=("production",),
    metrics=("production",),
    kpis={
        "production": ("total", "avg", "max", "median"),
        "cost": ("total",),
        "defects": ("total",),
        "downtime": ("total", "avg"),
        "lead_time": ("avg",),
        "material": ("total",),
        "energy": ("total",),
        "labor": ("total",),
    },
    breakdowns=(
        Breakdown("machine", "production"),
        Breakdown("machine", "downtime"),
        Breakdown("machine", "defects"),
    ),
    outlier_roles=("production", "cost", "defects"),
    correlation_pairs=(("production", "cost"), ("production", "energy"), ("downtime", "production"), ("labor", "production")),
    needed="production/output, cost, defects and date",
)


class ManufacturingInsightEngine(InsightEngineBase):
    category = "manufacturing"
    profile = MANUFACTURING_PROFILE

    def extra_insights(self, table: Table, roles: Dict[str, str], report: InsightReport) -> None:
        if "production" not in roles:
            report.hypothesis.append("No production column found.")
            return
        k = report.kpis
        produced = k.get("total_production", 0)

        ratios = (
            ("cost_per_unit", "total_cost", False, "Cost per unit"),
            ("energy_per_unit", "total_energy", False, "Energy per unit"),
            ("defect_rate", "total_defects", True, "Defect rate (%)"),
        )
        for name, source, pct, label in ratios:
            if source in k:
                val = ratio(k[source], produced, 100 if pct else 1)
                if val is not None:
                    k[name] = val
                    report.hypothesis.append(f"{label}: {val}.")

        if "total_material" in k:
            eff = ratio(produced, k["total_material"])
            if eff is not None:
                k["material_efficiency"] = eff
        if "total_labor" in k:
            prod = ratio(produced, k["total_labor"])
            if prod is not None:
                k["workforce_productivity"] = prod
                report.hypothesis.append(f"Workforce productivity: {prod} units per labor unit.")
        if "avg_lead_time" in k:
            report.hypothesis.append(f"Average supply lead time: {k['avg_lead_time']}.")

        if "downtime" in roles and "date" in roles:
            trend = trend_analysis(table, roles["date"], roles["downtime"])
            if trend:
                report.totals["downtime_trend"] = trend
                report.hypothesis.append("Machine downtime trend extracted.")
