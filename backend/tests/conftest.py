import pytest
from fastapi.testclient import TestClient

from billintel.main import app
from billintel.modules.analysis import AnalysisPipeline
from billintel.modules.analysis.config import AnalysisConfig
from billintel.modules.analysis.dependencies import get_analysis_pipeline, get_analysis_store
from billintel.modules.analysis.narrative import NarrativeProvider
from billintel.modules.analysis.store import MemoryAnalysisStore


class StubNarrator(NarrativeProvider):
    def __init__(self, text: str = "Revenue looks steady this period."):
        self.text = text
        self.summaries = []

    def summarize(self, summary):
        self.summaries.append(summary)
        return self.text


@pytest.fixture()
def narrator():
    return StubNarrator()


@pytest.fixture()
def store():
    return MemoryAnalysisStore()


@pytest.fixture()
def pipeline(narrator, store):
    return AnalysisPipeline(config=AnalysisConfig(), narrator=narrator, store=store)


@pytest.fixture()
def client(pipeline, store):
    app.dependency_overrides[get_analysis_pipeline] = lambda: pipeline
    app.dependency_overrides[get_analysis_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
