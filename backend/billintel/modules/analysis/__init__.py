import logging

from billintel.core.llm import create_llm
from billintel.core.llm.base import BaseLLM
from billintel.modules.analysis.config import AnalysisConfig
from billintel.modules.analysis.narrative import LLMNarrator, NarrativeProvider
from billintel.modules.analysis.service import AnalysisPipeline
from billintel.modules.analysis.store import AnalysisStore

logger = logging.getLogger(__name__)


def _default_narrator(config: AnalysisConfig) -> NarrativeProvider | None:
    try:
        llm = create_llm(timeout=config.narrative_timeout_seconds)
    except ValueError as exc:
        logger.warning("Narrative LLM unavailable, insights will be templated: %s", exc)
        return None
    return LLMNarrator(llm=llm, temperature=config.narrative_temperature)


def create_analysis_pipeline(
    llm: BaseLLM | None = None,
    store: AnalysisStore | None = None,
    config: AnalysisConfig | None = None,
) -> AnalysisPipeline:
    analysis_config = config or AnalysisConfig.from_settings()
    if llm is not None:
        narrator = LLMNarrator(llm=llm, temperature=analysis_config.narrative_temperature)
    else:
        narrator = _default_narrator(analysis_config)
    return AnalysisPipeline(config=analysis_config, narrator=narrator, store=store)


__all__ = ["AnalysisPipeline", "create_analysis_pipeline"]
