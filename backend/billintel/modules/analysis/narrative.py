import logging
import re
from abc import ABC, abstractmethod

from billintel.core.exceptions import CollaboratorError
from billintel.core.llm.base import BaseLLM
from billintel.core.llm.schemas import GenerateConfig
from billintel.modules.analysis.prompts import NARRATIVE_SYSTEM, NARRATIVE_USER
from billintel.modules.analysis.schemas import Summary
from billintel.utils.currency import format_currency

logger = logging.getLogger(__name__)

MAX_NARRATED_CUSTOMERS = 5
MAX_NARRATED_ANOMALIES = 3


class NarrativeProvider(ABC):
    @abstractmethod
    def summarize(self, summary: Summary) -> str:
        """Return free-text insights for an analysis summary."""
        ...


class LLMNarrator(NarrativeProvider):
    def __init__(self, llm: BaseLLM, temperature: float = 0.4, max_tokens: int | None = None):
        self.llm = llm
        self.temperature = temperature
        self.max_tokens = max_tokens

    @staticmethod
    def _strip_think_tags(raw_text: str) -> str:
        cleaned = re.sub(r"<think>.*?</think>", "", raw_text, flags=re.DOTALL)
        return cleaned.strip()

    def _build_messages(self, summary: Summary) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": NARRATIVE_SYSTEM},
            {
                "role": "user",
                "content": NARRATIVE_USER.format(period=summary.period, data=summary.to_json()),
            },
        ]

    def summarize(self, summary: Summary) -> str:
        config = GenerateConfig(temperature=self.temperature, max_tokens=self.max_tokens)
        try:
            response = self.llm.generate(self._build_messages(summary), config)
        except Exception as exc:
            raise CollaboratorError(f"Narrative generation failed: {exc}") from exc
        return self._strip_think_tags(response.text or "")


class TemplateNarrator(NarrativeProvider):
    """Deterministic insights used whenever the LLM is missing or fails."""

    def summarize(self, summary: Summary) -> str:
        return build_fallback_insights(summary)


def _describe_trend(monthly_revenue: dict[str, float]) -> str | None:
    if not monthly_revenue:
        return None
    months = sorted(monthly_revenue)
    if len(months) == 1:
        return f"All revenue falls in {months[0] or 'an undated period'}."
    first, last = months[0], months[-1]
    return (
        f"Monthly revenue moved from {format_currency(monthly_revenue[first])} in {first} "
        f"to {format_currency(monthly_revenue[last])} in {last} across {len(months)} months."
    )


def _describe_low_margin_plan(summary: Summary) -> str | None:
    with_usage = [
        (name, totals.revenue / totals.usage)
        for name, totals in summary.plan_totals.items()
        if totals.usage > 0
    ]
    if not with_usage:
        return None
    name, per_unit = min(with_usage, key=lambda item: item[1])
    return (
        f"Lowest revenue per unit of usage: plan {name or '(unnamed)'} "
        f"at {format_currency(per_unit)} per unit."
    )


def build_fallback_insights(summary: Summary) -> str:
    if not summary.monthly_revenue and not summary.top_customers:
        return (
            f"No billing records were found for this {summary.period} analysis. "
            f"Bill health score: {summary.health_score}/100."
        )

    lines = [
        f"Period: {summary.period}. Total revenue was {format_currency(summary.total_revenue)} "
        f"with an average bill of {format_currency(summary.avg_bill_per_customer)} per customer.",
    ]

    trend = _describe_trend(summary.monthly_revenue)
    if trend:
        lines.append(trend)

    if summary.top_customers:
        top = ", ".join(
            f"{item.customer_id} ({format_currency(item.total)})"
            for item in summary.top_customers[:MAX_NARRATED_CUSTOMERS]
        )
        lines.append(f"Top paying customers: {top}.")

    low_margin = _describe_low_margin_plan(summary)
    if low_margin:
        lines.append(low_margin)

    if summary.anomalies:
        lines.append(f"Anomalies flagged ({len(summary.anomalies)}):")
        lines.extend(f"- {item}" for item in summary.anomalies[:MAX_NARRATED_ANOMALIES])
    else:
        lines.append("No billing anomalies were flagged.")

    lines.append(f"Bill health score: {summary.health_score}/100.")
    return "\n".join(lines)
