from typing import Dict

from pipeline.schema import KIND_DATE, KIND_LABEL, KIND_NUMERIC
from pipeline.table import Table

from .aggregation import count_by
from .base import Breakdown, CategoryProfile, InsightEngineBase, InsightReport, ratio

SUCCESS_OUTCOMES = {"success", "recovered", "discharged"}

HEALTHCARE_PROFILE = CategoryProfile(
    name="healthcare",
    aliases={
        "admissions": ["admission", "visit", "encounter"],
        "beds": ["bed", "occupancy", "room"],
        "department": ["department", "unit", "ward"],
        "disease": ["disease", "diagnosis", "condition", "icd"],
        "treatment": ["treatment", "therapy", "procedure"],
        "outcome": ["outcome", "result", "status"],
        "staff": ["staff", "nurse", "doctor", "personnel"],
        "equipment": ["equipment", "machine", "device"],
        "insurance": ["insurance", "payer", "claim"],
        "medication": ["medication", "drug", "prescription", "rx"],
        "date": ["date", "admission date", "timestamp", "period"],
    },
    kinds={
        "admissions": KIND_NUMERIC,
        "beds": KIND_NUMERIC,
        "department": KIND_LABEL,
        "disease": KIND_LABEL,
        "treatment": KIND_LABEL,
        "outcome": KIND_LABEL,
        "staff": KIND_LABEL,
        "equipment": KIND_LABEL,
        "insurance": KIND_LABEL,
        "medication": KIND_LABEL,
        "date": KIND_DATE,
    },
    fallback=("admissions",),
    metrics=("admissions", "beds"),
    kpis={
        "admissions": ("total", "avg", "max"),
        "beds": ("avg", "max"),
    },
    breakdowns=(
        Breakdown("department", "admissions"),
        Breakdown("disease", "admissions"),
        Breakdown("equipment", "admissions"),
        Breakdown("insurance", "admissions"),
        Breakdown("department", "beds", "mean"),
    ),
    outlier_roles=("admissions", "beds"),
    correlation_pairs=(("beds", "admissions"),),
    needed="admissions/visits, department, diagnosis, outcome and date",
)


class HealthcareInsightEngine(InsightEngineBase):
    category = "healthcare"
    profile = HEALTHCARE_PROFILE

    def extra_insights(self, table: Table, roles: Dict[str, str], report: InsightReport) -> None:
        if "outcome" in roles:
            outcomes = [str(v).strip().lower() for v in table.values(roles["outcome"]) if v is not None]
            rate = ratio(sum(1 for o in outcomes if o in SUCCESS_OUTCOMES), len(outcomes), 100)
            if rate is not None:
                report.kpis["treatment_success_rate"] = rate
                report.hypothesis.append(f"Treatment success rate: {rate}%.")

        if "staff" in roles:
            workload = count_by(table, roles["staff"])
            if workload:
                report.totals["staff_workload"] = workload
                busiest = workload[0]
                report.hypothesis.append(f"Highest staff workload: {busiest[roles['staff']]} ({busiest['count']} records).")

        if "medication" in roles:
            freq: Dict[str, int] = {}
            for v in table.values(roles["medication"]):
                if v is None:
                    continue
                for drug in str(v).split(","):
                    drug = drug.strip()
                    if drug:
                        freq[drug] = freq.get(drug, 0) + 1
            if freq:
                ranked = sorted(freq.items(), key=lambda kv: -kv[1])
                report.totals["medication_frequency"] = [{"medication": d, "count": c} for d, c in ranked]
                report.hypothesis.append(f"Most prescribed medication: {ranked[0][0]} ({ranked[0][1]}).")

        if "disease" in roles and "admissions" not in roles:
            cases = count_by(table, roles["disease"])
            if cases:
                report.totals["cases_by_disease"] = cases
