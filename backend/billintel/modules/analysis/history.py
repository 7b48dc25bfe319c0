"""Cross-analysis views: history items, trend comparison and the dashboard."""
from collections.abc import Sequence

from billintel.core.exceptions import InputError
from billintel.modules.analysis.schemas import (
    ComparisonResult,
    ComparisonTrends,
    DashboardSummary,
    HistoryItem,
)
from billintel.modules.analysis.store import StoredAnalysis
from billintel.utils.currency import format_currency

DASHBOARD_RECENT_LIMIT = 5


def to_history_item(entry: StoredAnalysis) -> HistoryItem:
    return HistoryItem(
        session_id=entry.session_id,
        period=entry.period,
        total_revenue=entry.result.stats.total_revenue,
        health_score=entry.result.health_score,
        anomalies_count=len(entry.result.anomalies),
        created_at=entry.created_at,
    )


def _trend(first: float, last: float, rising: str, falling: str) -> str:
    if last > first:
        return rising
    if last < first:
        return falling
    return "stable"


def compare_analyses(entries: Sequence[StoredAnalysis]) -> ComparisonResult:
    """Compare stored analyses from oldest to newest."""
    if len(entries) < 2:
        raise InputError("At least two analyses are required for a comparison.")

    items = sorted((to_history_item(entry) for entry in entries), key=lambda item: item.created_at)
    oldest, newest = items[0], items[-1]

    trends = ComparisonTrends(
        revenue_trend=_trend(oldest.total_revenue, newest.total_revenue, "increasing", "declining"),
        health_trend=_trend(oldest.health_score, newest.health_score, "improving", "declining"),
        anomaly_trend=_trend(oldest.anomalies_count, newest.anomalies_count, "increasing", "decreasing"),
    )

    total_revenue = sum(item.total_revenue for item in items)
    avg_health = sum(item.health_score for item in items) / len(items)
    total_anomalies = sum(item.anomalies_count for item in items)

    insights = (
        f"Based on your {len(items)} analyses, your total revenue is {format_currency(total_revenue)} "
        f"with an average health score of {round(avg_health)}/100. "
        f"Revenue is {trends.revenue_trend}, bill health is {trends.health_trend} "
        f"and anomaly counts are {trends.anomaly_trend}. "
        f"Total anomalies detected: {total_anomalies}."
    )
    return ComparisonResult(comparisons=items, trends=trends, insights=insights)


def build_dashboard(
    entries: Sequence[StoredAnalysis],
    recent_limit: int = DASHBOARD_RECENT_LIMIT,
) -> DashboardSummary:
    """``entries`` is expected newest first, as returned by ``list_recent``."""
    return DashboardSummary(
        total_analyses=len(entries),
        total_revenue_analyzed=sum(entry.result.stats.total_revenue for entry in entries),
        recent_analyses=[to_history_item(entry) for entry in entries[:recent_limit]],
    )
