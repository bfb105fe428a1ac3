from pipeline.table import Table

from .base import CategoryProfile, InsightEngineBase, InsightReport

GENERAL_PROFILE = CategoryProfile(name="general", aliases={})


class GeneralInsightEngine(InsightEngineBase):
    """Fallback for general or unrecognised categories: no role matching at all."""
    category = "general"
    profile = GENERAL_PROFILE

    def compute(self, table: Table) -> InsightReport:
        report = InsightReport(category=self.category)
        report.hypothesis.append("Unknown category. No specific insights generated.")
        return report
