from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Period = Literal["adhoc", "weekly", "monthly"]


class BillingRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer_id: str = ""
    plan: str = ""
    data_used: float = 0.0
    amount_billed: float = 0.0
    billing_date: str = ""


class TopCustomer(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer_id: str
    total: float


class PlanTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    revenue: float = 0.0
    usage: float = 0.0


class CamelModel(BaseModel):
    """Serialized with camelCase keys, e.g. ``totalRevenue``."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class AggregateStats(CamelModel):
    total_revenue: float = 0.0
    avg_bill_per_customer: float = 0.0
    monthly_revenue: dict[str, float] = Field(default_factory=dict)
    top_customers: list[TopCustomer] = Field(default_factory=list)
    plan_totals: dict[str, PlanTotals] = Field(default_factory=dict)
    # internal only, never serialized
    customer_totals: dict[str, float] = Field(default_factory=dict, exclude=True)


class Summary(CamelModel):
    """Payload handed to the narrative collaborator."""

    total_revenue: float
    avg_bill_per_customer: float
    monthly_revenue: dict[str, float]
    top_customers: list[TopCustomer]
    plan_totals: dict[str, PlanTotals]
    anomalies: list[str]
    health_score: int
    period: Period = "adhoc"

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class AnalysisResult(CamelModel):
    stats: AggregateStats
    anomalies: list[str] = Field(default_factory=list)
    health_score: int
    insights: str = ""


# ── HTTP payloads ──

class AnalyzeRequest(BaseModel):
    csv_data: str | None = Field(
        default=None,
        validation_alias=AliasChoices("csv_data", "data_csv"),
    )
    json_data: list[Any] | str | None = Field(
        default=None,
        validation_alias=AliasChoices("json_data", "data_json"),
    )
    period: Period = "adhoc"
    session_id: str | None = None


class AnalysisResponse(AnalysisResult):
    session_id: str = Field(alias="session_id")


class HistoryItem(BaseModel):
    session_id: str
    period: Period
    total_revenue: float
    health_score: int
    anomalies_count: int
    created_at: float


class CompareRequest(BaseModel):
    session_ids: list[str] = Field(min_length=2)


class ComparisonTrends(BaseModel):
    revenue_trend: Literal["increasing", "declining", "stable"]
    health_trend: Literal["improving", "declining", "stable"]
    anomaly_trend: Literal["increasing", "decreasing", "stable"]


class ComparisonResult(BaseModel):
    comparisons: list[HistoryItem]
    trends: ComparisonTrends
    insights: str


class DashboardSummary(BaseModel):
    total_analyses: int
    total_revenue_analyzed: float
    recent_analyses: list[HistoryItem]
