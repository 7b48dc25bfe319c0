from pydantic import BaseModel, ConfigDict, Field

from billintel.core.config import Settings, settings


class AnalysisConfig(BaseModel):
    """Tunables for one analysis pipeline, fixed at construction time."""

    model_config = ConfigDict(frozen=True)

    top_customers_limit: int = Field(default=10, ge=0)
    month_swing_threshold: float = Field(default=0.35, ge=0)
    min_months_for_trend: int = Field(default=3, ge=2)
    base_health_score: int = 85
    consistency_bonus: int = 10
    anomaly_penalty: int = 5
    max_anomaly_penalty: int = 40
    narrative_temperature: float = 0.4
    narrative_timeout_seconds: float | None = 30.0

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "AnalysisConfig":
        source = source or settings
        return cls(
            top_customers_limit=source.TOP_CUSTOMERS_LIMIT,
            month_swing_threshold=source.MONTH_SWING_THRESHOLD,
            min_months_for_trend=source.MIN_MONTHS_FOR_TREND,
            base_health_score=source.BASE_HEALTH_SCORE,
            consistency_bonus=source.CONSISTENCY_BONUS,
            anomaly_penalty=source.ANOMALY_PENALTY,
            max_anomaly_penalty=source.MAX_ANOMALY_PENALTY,
            narrative_temperature=source.NARRATIVE_TEMPERATURE,
            narrative_timeout_seconds=source.NARRATIVE_TIMEOUT_SECONDS or None,
        )
