"""Heuristic anomaly rules and the 0-100 bill health score.

Rules, in detection order:

* usage recorded but nothing billed (per record)
* billed with zero usage (per record)
* a month-over-month revenue swing above the configured threshold between
  the two most recent months, checked only once enough months exist

The score starts from a base, gains a consistency bonus when enough months are
present, and loses a capped penalty per anomaly.
"""
from collections.abc import Sequence
from dataclasses import dataclass, field

from billintel.modules.analysis.config import AnalysisConfig
from billintel.modules.analysis.schemas import AggregateStats, BillingRecord

MIN_SCORE = 0
MAX_SCORE = 100


@dataclass(frozen=True)
class AnomalyReport:
    anomalies: list[str] = field(default_factory=list)
    health_score: int = 0


def format_amount(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def check_record(record: BillingRecord) -> list[str]:
    found: list[str] = []
    if record.data_used > 0 and record.amount_billed == 0:
        found.append(
            f"Customer {record.customer_id} shows usage but was billed $0 on {record.billing_date}."
        )
    if record.data_used == 0 and record.amount_billed > 0:
        found.append(
            f"Customer {record.customer_id} billed {format_amount(record.amount_billed)} "
            f"with zero usage on {record.billing_date}."
        )
    return found


def check_monthly_swing(monthly_revenue: dict[str, float], config: AnalysisConfig) -> str | None:
    if len(monthly_revenue) < config.min_months_for_trend:
        return None
    # YYYY-MM keys sort chronologically regardless of upload order.
    months = sorted(monthly_revenue)
    last = monthly_revenue[months[-1]]
    prev = monthly_revenue[months[-2]]
    if prev > 0 and abs(last - prev) / prev > config.month_swing_threshold:
        return (
            "Significant month-over-month revenue change detected "
            f"(>{config.month_swing_threshold:.0%})."
        )
    return None


def score_health(anomaly_count: int, month_count: int, config: AnalysisConfig) -> int:
    penalty = min(anomaly_count * config.anomaly_penalty, config.max_anomaly_penalty)
    bonus = config.consistency_bonus if month_count >= config.min_months_for_trend else 0
    base = config.base_health_score + bonus - penalty
    return max(MIN_SCORE, min(MAX_SCORE, int(round(base))))


def detect_anomalies_and_score(
    records: Sequence[BillingRecord],
    stats: AggregateStats,
    config: AnalysisConfig | None = None,
) -> AnomalyReport:
    config = config or AnalysisConfig()
    anomalies: list[str] = []

    for record in records:
        anomalies.extend(check_record(record))

    swing = check_monthly_swing(stats.monthly_revenue, config)
    if swing:
        anomalies.append(swing)

    health_score = score_health(len(anomalies), len(stats.monthly_revenue), config)
    return AnomalyReport(anomalies=anomalies, health_score=health_score)
