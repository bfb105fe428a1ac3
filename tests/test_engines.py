# tests/test_engines.py
import pytest

from insights.registry import get_engine, registered
from pipeline.cleaner import clean_records


def _report(category, rows):
    return get_engine(category).compute(clean_records(rows))


def test_registry_covers_categories():
    names = set(registered())
    assert {"general", "retail", "finance", "healthcare", "education", "manufacturing", "technology"} <= names
    assert get_engine("Retail").category == "retail"
    assert get_engine(None).category == "general"


@pytest.mark.parametrize("category", ["general", "astrology"])
def test_general_and_unknown_categories(category, scenario_a_rows):
    report = _report(category, scenario_a_rows)
    assert report.hypothesis == ["Unknown category. No specific insights generated."]
    assert report.kpis == {}


def test_no_roles_gives_fallback_hypothesis():
    report = _report("retail", [{"colour": "red"}, {"colour": "blue"}])
    assert report.roles == {}
    assert len(report.hypothesis) == 1
    assert report.hypothesis[0].startswith("No significant retail patterns detected.")


def test_retail_derives_sales(retail_rows):
    report = _report("retail", retail_rows)
    assert report.roles["sales"] == "computed_sales"
    assert report.kpis["total_sales"] == 112
    assert report.kpis["total_quantity"] == 22

    high = report.high_performers["sales_by_category"]
    low = report.low_performers["sales_by_category"]
    assert [(r["product"], r["computed_sales"]) for r in high] == [("Bag", 40), ("Pen", 30), ("Book", 30)]
    assert [(r["product"], r["computed_sales"]) for r in low] == [("Ink", 12), ("Pen", 30), ("Book", 30)]

    regions = report.totals["sales_by_region"]
    assert [(r["region"], r["computed_sales"]) for r in regions] == [("North", 60), ("South", 40), ("East", 12)]


def test_retail_time_and_dynamic_breakdowns(retail_rows):
    report = _report("retail", retail_rows)
    assert len(report.trends) == 5
    assert report.kpis["peak_month"] == "2022-01"
    assert [m["period"] for m in report.totals["sales_by_month"]] == ["2022-01", "2022-02"]
    assert report.totals["sales_by_quarter"][0]["period"] == "2022-Q1"
    channel = {r["channel"]: r["computed_sales"] for r in report.totals["sales_by_channel"]}
    assert channel == {"Web": 42, "Store": 70}
    assert report.high_performers["sales_by_channel"][0] == {"channel": "Store", "computed_sales": 70.0}
    assert report.low_performers["sales_by_channel"][0] == {"channel": "Web", "computed_sales": 42.0}
    assert "sales_forecast_next_period" in report.kpis
    assert report.forecast is not None
    assert "quantity_vs_sales" in report.correlations
    assert any(h.startswith("Profit not found directly") for h in report.hypothesis)


def test_retail_profit_from_cost():
    rows = [
        {"date": "2022-01-01", "sales": 100, "landed_cost": 60},
        {"date": "2022-01-02", "sales": 200, "landed_cost": 150},
        {"date": "2022-01-03", "sales": 100, "landed_cost": 90},
    ]
    report = _report("retail", rows)
    assert report.roles["profit"] == "computed_profit"
    assert report.kpis["total_profit"] == 100
    assert report.kpis["profit_margin"] == 25.0


def test_finance_net_profit_and_cash_flow():
    rows = [
        {"date": "2022-01-01", "revenue": 100, "expense": 50},
        {"date": "2022-01-02", "revenue": 200, "expense": 80},
        {"date": "2022-01-03", "revenue": 300, "expense": 120},
        {"date": "2022-01-04", "revenue": 400, "expense": 150},
    ]
    report = _report("finance", rows)
    assert report.kpis["total_revenue"] == 1000
    assert report.kpis["total_expense"] == 400
    assert report.kpis["net_profit"] == 600
    assert report.kpis["net_margin"] == 60.0
    assert report.kpis["cash_flow_forecast_next_period"] == pytest.approx(315.0)
    assert report.correlations["revenue_vs_expense"] > 0.9


def test_finance_revenue_only():
    rows = [{"amount": v} for v in (10, 20, 30)]
    report = _report("finance", rows)
    assert report.roles == {"revenue": "amount"}
    assert "Only revenue data available; no expense analysis." in report.hypothesis


def test_healthcare_insights():
    rows = [
        {"Department": "Cardio", "Admissions": 5, "Outcome": "Recovered", "Staff": "Dr A", "Medication": "Aspirin, Statin"},
        {"Department": "Neuro", "Admissions": 3, "Outcome": "Deceased", "Staff": "Dr B", "Medication": "Aspirin"},
        {"Department": "Cardio", "Admissions": 7, "Outcome": "Discharged", "Staff": "Dr A", "Medication": "Statin"},
        {"Department": "Ortho", "Admissions": 2, "Outcome": "Success", "Staff": "Dr A", "Medication": "Aspirin"},
    ]
    report = _report("healthcare", rows)
    assert report.kpis["treatment_success_rate"] == 75.0
    assert report.totals["staff_workload"][0] == {"staff": "Dr A", "count": 3}
    assert report.totals["medication_frequency"] == [
        {"medication": "Aspirin", "count": 3},
        {"medication": "Statin", "count": 2},
    ]
    assert report.totals["admissions_by_department"][0] == {"department": "Cardio", "admissions": 12.0}


def test_education_year_forecast():
    rows = [
        {"year": 2019, "subject": "Math", "score": 60},
        {"year": 2019, "subject": "Art", "score": 70},
        {"year": 2020, "subject": "Math", "score": 70},
        {"year": 2020, "subject": "Art", "score": 80},
        {"year": 2021, "subject": "Math", "score": 80},
        {"year": 2021, "subject": "Art", "score": 90},
    ]
    report = _report("education", rows)
    assert report.roles["date"] == "year"
    assert report.kpis["avg_score"] == 75.0
    assert report.kpis["predicted_next_year_score"] == pytest.approx(95.0)
    assert report.kpis["predicted_year"] == 2022
    assert report.high_performers["score_by_subject"][0] == {"subject": "Art", "score": 80.0}
    assert "score_by_month" not in report.totals


def test_technology_uses_manufacturing_engine():
    rows = [
        {"date": "2022-01-01", "machine": "M1", "production": 100, "cost": 1000, "defects": 2, "downtime": 1},
        {"date": "2022-01-02", "machine": "M2", "production": 200, "cost": 2000, "defects": 4, "downtime": 2},
        {"date": "2022-01-03", "machine": "M1", "production": 200, "cost": 2000, "defects": 4, "downtime": 3},
    ]
    report = _report("technology", rows)
    assert report.category == "manufacturing"
    assert report.kpis["cost_per_unit"] == 10.0
    assert report.kpis["defect_rate"] == 2.0
    assert [r["total"] for r in report.totals["downtime_trend"]] == [1, 2, 3]
    assert report.totals["production_by_machine"] == [
        {"machine": "M1", "production": 300.0},
        {"machine": "M2", "production": 200.0},
    ]


def test_dynamic_breakdown_unique_value_bounds():
    rows = [
        {"sales": 10 + i, "batch": "B1", "store": f"s{i % 49}", "ticket": f"t{i}"}
        for i in range(50)
    ]
    report = _report("retail", rows)
    assert "sales_by_store" in report.totals
    assert len(report.totals["sales_by_store"]) == 49
    assert "sales_by_store" in report.high_performers
    assert "sales_by_ticket" not in report.totals
    assert "sales_by_batch" not in report.totals
