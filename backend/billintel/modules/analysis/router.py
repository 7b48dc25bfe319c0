from fastapi import APIRouter, Depends, HTTPException

from billintel.core.config import settings
from billintel.core.exceptions import InputError
from billintel.core.llm import list_llm_options
from billintel.modules.analysis import AnalysisPipeline
from billintel.modules.analysis.dependencies import get_analysis_pipeline, get_analysis_store
from billintel.modules.analysis.history import build_dashboard, compare_analyses, to_history_item
from billintel.modules.analysis.schemas import (
    AnalysisResponse,
    AnalyzeRequest,
    CompareRequest,
    ComparisonResult,
    DashboardSummary,
    HistoryItem,
)
from billintel.modules.analysis.service import to_response
from billintel.modules.analysis.store import AnalysisStore

router = APIRouter(tags=["Analysis"], prefix="/v1/analysis")


@router.post("/analyze", response_model=AnalysisResponse)
def analyze_endpoint(
    request: AnalyzeRequest,
    pipeline: AnalysisPipeline = Depends(get_analysis_pipeline),
):
    try:
        return pipeline.analyze(request)
    except InputError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/history", response_model=list[HistoryItem])
async def list_history_endpoint(
    limit: int = settings.HISTORY_DEFAULT_LIMIT,
    store: AnalysisStore = Depends(get_analysis_store),
):
    safe_limit = max(1, min(limit, settings.HISTORY_MAX_ENTRIES))
    return [to_history_item(entry) for entry in store.list_recent(limit=safe_limit)]


@router.get("/dashboard", response_model=DashboardSummary)
async def dashboard_endpoint(store: AnalysisStore = Depends(get_analysis_store)):
    return build_dashboard(store.list_recent(limit=settings.HISTORY_MAX_ENTRIES))


@router.get("/llm-options")
async def llm_options_endpoint():
    return list_llm_options()


@router.post("/compare", response_model=ComparisonResult)
async def compare_endpoint(
    request: CompareRequest,
    store: AnalysisStore = Depends(get_analysis_store),
):
    entries = []
    for session_id in dict.fromkeys(request.session_ids):
        entry = store.get(session_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Analysis not found: {session_id}")
        entries.append(entry)
    try:
        return compare_analyses(entries)
    except InputError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/{session_id}", response_model=AnalysisResponse)
async def get_analysis_endpoint(
    session_id: str,
    store: AnalysisStore = Depends(get_analysis_store),
):
    entry = store.get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return to_response(entry.session_id, entry.result)


@router.delete("/{session_id}")
async def delete_analysis_endpoint(
    session_id: str,
    store: AnalysisStore = Depends(get_analysis_store),
):
    if not store.delete(session_id):
        raise HTTPException(status_code=404, detail="Analysis not found")
    return {"status": "deleted"}
