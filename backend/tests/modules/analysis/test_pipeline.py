import logging
from unittest.mock import patch

import pytest

from billintel.core.exceptions import CollaboratorError, InputError
from billintel.core.llm.base import BaseLLM
from billintel.core.llm.schemas import LLMResponse
from billintel.modules.analysis import create_analysis_pipeline
from billintel.modules.analysis.config import AnalysisConfig
from billintel.modules.analysis.narrative import LLMNarrator, NarrativeProvider
from billintel.modules.analysis.schemas import AnalyzeRequest
from billintel.modules.analysis.service import AnalysisPipeline
from billintel.modules.analysis.store import AnalysisStore

SCENARIO_A = [
    {"customer_id": "C1", "plan": "Basic", "data_used": 10, "amount_billed": 20, "billing_date": "2025-01-05"},
    {"customer_id": "C2", "plan": "Basic", "data_used": 0, "amount_billed": 15, "billing_date": "2025-01-10"},
]
HEADER = "customer_id,plan,data_used,amount_billed,billing_date"


class FailingNarrator(NarrativeProvider):
    def summarize(self, summary):
        raise CollaboratorError("LLM timed out")


class BlankNarrator(NarrativeProvider):
    def summarize(self, summary):
        return "   "


class BrokenStore(AnalysisStore):
    def save(self, entry):
        raise CollaboratorError("storage offline")

    def get(self, session_id):
        return None

    def list_recent(self, limit=20):
        return []

    def delete(self, session_id):
        return False


def test_scenario_a_json_records(pipeline):
    response = pipeline.analyze(AnalyzeRequest(json_data=SCENARIO_A))

    assert response.stats.total_revenue == 35
    assert response.stats.avg_bill_per_customer == 17.5
    assert response.anomalies == ["Customer C2 billed 15 with zero usage on 2025-01-10."]
    assert [(c.customer_id, c.total) for c in response.stats.top_customers] == [("C1", 20), ("C2", 15)]
    assert response.health_score == 80


def test_scenario_b_header_only_csv(pipeline):
    response = pipeline.analyze(AnalyzeRequest(csv_data=HEADER))

    assert response.stats.total_revenue == 0
    assert response.stats.avg_bill_per_customer == 0
    assert response.stats.monthly_revenue == {}
    assert response.stats.top_customers == []
    assert response.anomalies == []
    assert response.health_score == 85


def test_scenario_c_csv_usage_without_billing(pipeline):
    response = pipeline.analyze(AnalyzeRequest(csv_data=f"{HEADER}\nC1,Pro,5,0,2025-02-01"))

    assert response.anomalies == ["Customer C1 shows usage but was billed $0 on 2025-02-01."]


def test_scenario_d_three_month_jump(pipeline):
    csv_data = "\n".join([
        HEADER,
        "C1,Pro,1,100,2025-01-15",
        "C1,Pro,1,100,2025-02-15",
        "C1,Pro,1,1000,2025-03-15",
    ])

    response = pipeline.analyze(AnalyzeRequest(csv_data=csv_data))

    assert "Significant month-over-month revenue change detected (>35%)." in response.anomalies
    assert response.health_score == 90


def test_missing_data_raises_input_error(pipeline):
    with pytest.raises(InputError):
        pipeline.analyze(AnalyzeRequest())


def test_repeated_runs_are_identical(pipeline):
    request = AnalyzeRequest(json_data=SCENARIO_A, period="weekly")

    first = pipeline.analyze(request)
    second = pipeline.analyze(request)

    assert first.stats == second.stats
    assert first.anomalies == second.anomalies
    assert first.health_score == second.health_score


def test_narrator_receives_summary(pipeline, narrator):
    response = pipeline.analyze(AnalyzeRequest(json_data=SCENARIO_A, period="monthly"))

    assert response.insights == narrator.text
    summary = narrator.summaries[-1]
    assert summary.period == "monthly"
    assert summary.health_score == 80
    assert summary.total_revenue == 35


def test_narrator_failure_falls_back_to_template(store, caplog):
    pipeline = AnalysisPipeline(config=AnalysisConfig(), narrator=FailingNarrator(), store=store)

    with caplog.at_level(logging.WARNING):
        response = pipeline.analyze(AnalyzeRequest(json_data=SCENARIO_A))

    assert response.insights.startswith("Period: adhoc.")
    assert "LLM timed out" in caplog.text


def test_blank_narrative_falls_back_to_template():
    pipeline = AnalysisPipeline(config=AnalysisConfig(), narrator=BlankNarrator())

    response = pipeline.analyze(AnalyzeRequest(json_data=SCENARIO_A))

    assert "Bill health score: 80/100." in response.insights


def test_store_failure_does_not_abort_analysis(caplog):
    pipeline = AnalysisPipeline(config=AnalysisConfig(), store=BrokenStore())

    with caplog.at_level(logging.WARNING):
        response = pipeline.analyze(AnalyzeRequest(json_data=SCENARIO_A, session_id="s-1"))

    assert response.session_id == "s-1"
    assert response.stats.total_revenue == 35
    assert "storage offline" in caplog.text


def test_result_is_saved_under_session_id(pipeline, store):
    response = pipeline.analyze(AnalyzeRequest(json_data=SCENARIO_A, session_id="abc", period="weekly"))

    entry = store.get("abc")
    assert entry is not None
    assert entry.period == "weekly"
    assert entry.result.health_score == response.health_score


def test_session_id_is_generated_when_missing(pipeline, store):
    response = pipeline.analyze(AnalyzeRequest(json_data=SCENARIO_A))

    assert response.session_id
    assert store.get(response.session_id) is not None


def test_configured_top_customer_limit_applies():
    pipeline = AnalysisPipeline(config=AnalysisConfig(top_customers_limit=1))

    response = pipeline.analyze(AnalyzeRequest(json_data=SCENARIO_A))

    assert [c.customer_id for c in response.stats.top_customers] == ["C1"]


class EchoLLM(BaseLLM):
    def generate(self, messages, config=None):
        return LLMResponse(text="LLM says hello", usage={})


def test_factory_wraps_given_llm():
    pipeline = create_analysis_pipeline(llm=EchoLLM(api_key="k", model="m"), config=AnalysisConfig())

    assert isinstance(pipeline.narrator, LLMNarrator)
    assert pipeline.analyze(AnalyzeRequest(json_data=SCENARIO_A)).insights == "LLM says hello"


def test_factory_without_api_key_uses_template_insights():
    with patch(
        "billintel.modules.analysis.create_llm",
        side_effect=ValueError("Missing API key for provider 'google'."),
    ):
        pipeline = create_analysis_pipeline(config=AnalysisConfig())

    assert pipeline.narrator is None
    response = pipeline.analyze(AnalyzeRequest(json_data=SCENARIO_A))
    assert response.insights.startswith("Period: adhoc.")


def test_config_from_settings_reads_thresholds():
    with patch("billintel.modules.analysis.config.settings") as fake_settings:
        fake_settings.TOP_CUSTOMERS_LIMIT = 5
        fake_settings.MONTH_SWING_THRESHOLD = 0.5
        fake_settings.MIN_MONTHS_FOR_TREND = 3
        fake_settings.BASE_HEALTH_SCORE = 85
        fake_settings.CONSISTENCY_BONUS = 10
        fake_settings.ANOMALY_PENALTY = 5
        fake_settings.MAX_ANOMALY_PENALTY = 40
        fake_settings.NARRATIVE_TEMPERATURE = 0.2
        fake_settings.NARRATIVE_TIMEOUT_SECONDS = 0

        config = AnalysisConfig.from_settings()

    assert config.top_customers_limit == 5
    assert config.month_swing_threshold == 0.5
    assert config.narrative_temperature == 0.2
    assert config.narrative_timeout_seconds is None
