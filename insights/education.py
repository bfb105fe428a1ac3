from typing import Dict

from pipeline.schema import KIND_DATE, KIND_LABEL, KIND_NUMERIC, is_year_like
from pipeline.table import Table

from .base import Breakdown, CategoryProfile, InsightEngineBase, InsightReport

EDUCATION_PROFILE = CategoryProfile(
    name="education",
    aliases={
        "score": ["score", "marks", "grade", "result", "performance"],
        "student": ["student", "name", "learner"],
        "subject": ["subject", "course", "class"],
        "date": ["year", "date", "month", "timestamp"],
        "attendance": ["attendance", "present", "absent", "attendancerate"],
        "completion": ["completion", "status", "coursecompleted", "completionrate"],
        "resource": ["resource", "usage", "time", "hour", "videos"],
    },
    kinds={
        "score": KIND_NUMERIC,
        "student": KIND_LABEL,
        "subject": KIND_LABEL,
        "date": KIND_DATE,
        "attendance": KIND_NUMERIC,
        "completion": KIND_NUMERIC,
        "resource": KIND_NUMERIC,
    },
    fallback=("score",),
    metrics=("score",),
    metric_agg="mean",
    kpis={
        "score": ("total", "avg", "median", "max", "min"),
        "attendance": ("avg",),
        "completion": ("avg",),
        "resource": ("avg", "max"),
    },
    breakdowns=(
        Breakdown("subject", "score", "mean"),
        Breakdown("student", "score", "mean"),
        Breakdown("subject", "attendance", "mean"),
        Breakdown("subject", "completion", "mean"),
        Breakdown("student", "resource", "sum"),
    ),
    outlier_roles=("score", "attendance"),
    correlation_pairs=(("attendance", "score"), ("resource", "score"), ("completion", "score")),
    needed="score, date/year, subject or attendance",
)


class EducationInsightEngine(InsightEngineBase):
    category = "education"
    profile = EDUCATION_PROFILE

    def extra_insights(self, table: Table, roles: Dict[str, str], report: InsightReport) -> None:
        if "score" not in roles:
            report.hypothesis.append("No numeric score column detected.")
            return
        report.hypothesis.append(f"Score column used: {roles['score']}.")

        avg_att = report.kpis.get("avg_attendance")
        if avg_att is not None and avg_att < 75:
            report.hypothesis.append(f"Average attendance is low ({avg_att}); check its link to scores.")

        fc = report.forecast
        if fc is not None and "date" in roles and is_year_like(table.values(roles["date"])):
            report.kpis["predicted_next_year_score"] = fc.value
            report.kpis["predicted_year"] = int(fc.next_x)
