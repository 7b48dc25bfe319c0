import logging
import time
import uuid
from collections.abc import Sequence

from billintel.modules.analysis.aggregator import compute_billing_stats
from billintel.modules.analysis.anomalies import AnomalyReport, detect_anomalies_and_score
from billintel.modules.analysis.config import AnalysisConfig
from billintel.modules.analysis.narrative import NarrativeProvider, TemplateNarrator
from billintel.modules.analysis.normalizer import normalize_input
from billintel.modules.analysis.schemas import (
    AggregateStats,
    AnalysisResponse,
    AnalysisResult,
    AnalyzeRequest,
    BillingRecord,
    Period,
    Summary,
)
from billintel.modules.analysis.store import AnalysisStore, StoredAnalysis

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """Normalize -> aggregate -> detect anomalies -> narrate -> (optionally) store.

    Stateless between calls. ``narrator`` and ``store`` are external
    collaborators; failures in either are logged and never fail an analysis.
    """

    def __init__(
        self,
        config: AnalysisConfig,
        narrator: NarrativeProvider | None = None,
        store: AnalysisStore | None = None,
    ):
        self.config = config
        self.narrator = narrator
        self.store = store
        self._fallback = TemplateNarrator()

    def compute(self, records: Sequence[BillingRecord]) -> tuple[AggregateStats, AnomalyReport]:
        stats = compute_billing_stats(records, top_customers_limit=self.config.top_customers_limit)
        report = detect_anomalies_and_score(records, stats, self.config)
        return stats, report

    @staticmethod
    def build_summary(stats: AggregateStats, report: AnomalyReport, period: Period) -> Summary:
        return Summary(
            total_revenue=stats.total_revenue,
            avg_bill_per_customer=stats.avg_bill_per_customer,
            monthly_revenue=stats.monthly_revenue,
            top_customers=stats.top_customers,
            plan_totals=stats.plan_totals,
            anomalies=report.anomalies,
            health_score=report.health_score,
            period=period,
        )

    def narrate(self, summary: Summary) -> str:
        if self.narrator is None:
            return self._fallback.summarize(summary)
        try:
            text = self.narrator.summarize(summary)
        except Exception as exc:
            logger.warning("Narrative collaborator failed, using templated insights: %s", exc)
            return self._fallback.summarize(summary)
        if not text or not text.strip():
            logger.warning("Narrative collaborator returned empty text, using templated insights")
            return self._fallback.summarize(summary)
        return text.strip()

    def run(self, records: Sequence[BillingRecord], period: Period = "adhoc") -> AnalysisResult:
        stats, report = self.compute(records)
        insights = self.narrate(self.build_summary(stats, report, period))
        return AnalysisResult(
            stats=stats,
            anomalies=report.anomalies,
            health_score=report.health_score,
            insights=insights,
        )

    def _save(self, session_id: str, period: Period, result: AnalysisResult) -> None:
        if self.store is None:
            return
        try:
            self.store.save(
                StoredAnalysis(
                    session_id=session_id,
                    period=period,
                    result=result,
                    created_at=time.time(),
                )
            )
        except Exception as exc:
            logger.warning("Failed to save analysis %s: %s", session_id, exc)

    def analyze(self, request: AnalyzeRequest) -> AnalysisResponse:
        """Run a full analysis for an HTTP-style request.

        Raises InputError when no usable data was supplied.
        """
        records = normalize_input(csv_data=request.csv_data, json_data=request.json_data)
        session_id = request.session_id or uuid.uuid4().hex
        logger.info(
            "Analyzing %d billing records (period=%s, session=%s)",
            len(records),
            request.period,
            session_id,
        )

        result = self.run(records, period=request.period)
        self._save(session_id, request.period, result)

        logger.info(
            "Analysis %s finished: %d anomalies, health score %d",
            session_id,
            len(result.anomalies),
            result.health_score,
        )
        return to_response(session_id, result)


def to_response(session_id: str, result: AnalysisResult) -> AnalysisResponse:
    return AnalysisResponse(
        session_id=session_id,
        stats=result.stats,
        anomalies=result.anomalies,
        health_score=result.health_score,
        insights=result.insights,
    )
