from functools import lru_cache

from fastapi import Depends

from billintel.core.config import settings
from billintel.modules.analysis import AnalysisPipeline, create_analysis_pipeline
from billintel.modules.analysis.store import AnalysisStore, MemoryAnalysisStore


@lru_cache(maxsize=1)
def get_analysis_store() -> AnalysisStore:
    return MemoryAnalysisStore(max_entries=settings.HISTORY_MAX_ENTRIES)


def get_analysis_pipeline(store: AnalysisStore = Depends(get_analysis_store)) -> AnalysisPipeline:
    # create_llm caches provider clients, so building a pipeline per request is cheap.
    return create_analysis_pipeline(store=store)
