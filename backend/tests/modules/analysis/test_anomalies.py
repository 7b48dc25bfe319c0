from billintel.modules.analysis.aggregator import compute_billing_stats
from billintel.modules.analysis.anomalies import (
    check_monthly_swing,
    detect_anomalies_and_score,
    format_amount,
    score_health,
)
from billintel.modules.analysis.config import AnalysisConfig
from billintel.modules.analysis.schemas import BillingRecord


def make_record(customer_id, usage, amount, date="2025-01-01"):
    return BillingRecord(
        customer_id=customer_id,
        plan="Basic",
        data_used=usage,
        amount_billed=amount,
        billing_date=date,
    )


def analyze(records, config=None):
    stats = compute_billing_stats(records)
    return detect_anomalies_and_score(records, stats, config)


def test_empty_input_scores_base():
    report = analyze([])

    assert report.anomalies == []
    assert report.health_score == 85


def test_usage_without_billing_is_flagged():
    report = analyze([make_record("C1", 5, 0, "2025-02-01")])

    assert report.anomalies == ["Customer C1 shows usage but was billed $0 on 2025-02-01."]
    assert report.health_score == 80


def test_billing_without_usage_is_flagged():
    report = analyze([
        make_record("C1", 10, 20, "2025-01-05"),
        make_record("C2", 0, 15, "2025-01-10"),
    ])

    assert report.anomalies == ["Customer C2 billed 15 with zero usage on 2025-01-10."]


def test_fractional_amounts_keep_decimals():
    assert format_amount(15.0) == "15"
    assert format_amount(15.75) == "15.75"


def test_zero_usage_and_zero_billing_is_not_flagged():
    assert analyze([make_record("C1", 0, 0)]).anomalies == []


def test_negative_values_are_not_flagged():
    assert analyze([make_record("C1", -3, 0), make_record("C2", 0, -5)]).anomalies == []


def test_month_over_month_jump_flagged_with_consistency_bonus():
    records = [
        make_record("C1", 1, 100, "2025-01-01"),
        make_record("C1", 1, 100, "2025-02-01"),
        make_record("C1", 1, 1000, "2025-03-01"),
    ]

    report = analyze(records)

    assert report.anomalies == ["Significant month-over-month revenue change detected (>35%)."]
    assert report.health_score == 85 + 10 - 5


def test_month_swing_uses_chronological_order():
    # uploaded out of order; the latest two months are Feb -> Mar (100 -> 110)
    records = [
        make_record("C1", 1, 110, "2025-03-01"),
        make_record("C1", 1, 1000, "2025-01-01"),
        make_record("C1", 1, 100, "2025-02-01"),
    ]

    report = analyze(records)

    assert report.anomalies == []
    assert report.health_score == 95


def test_month_swing_needs_three_months():
    monthly = {"2025-01": 100.0, "2025-02": 1000.0}

    assert check_monthly_swing(monthly, AnalysisConfig()) is None


def test_month_swing_skipped_when_previous_month_is_zero():
    monthly = {"2025-01": 100.0, "2025-02": 0.0, "2025-03": 500.0}

    assert check_monthly_swing(monthly, AnalysisConfig()) is None


def test_month_swing_threshold_is_exclusive():
    monthly = {"2025-01": 100.0, "2025-02": 100.0, "2025-03": 135.0}

    assert check_monthly_swing(monthly, AnalysisConfig()) is None


def test_penalty_is_capped():
    records = [make_record(f"C{i}", 0, 10) for i in range(20)]

    report = analyze(records)

    assert len(report.anomalies) == 20
    assert report.health_score == 85 - 40


def test_score_is_clamped_to_range():
    harsh = AnalysisConfig(base_health_score=10, max_anomaly_penalty=100)
    generous = AnalysisConfig(base_health_score=99)

    assert score_health(anomaly_count=20, month_count=0, config=harsh) == 0
    assert score_health(anomaly_count=0, month_count=6, config=generous) == 100


def test_score_always_in_range_for_any_anomaly_count():
    config = AnalysisConfig()
    for count in range(0, 30):
        for months in range(0, 5):
            score = score_health(count, months, config)
            assert isinstance(score, int)
            assert 0 <= score <= 100
