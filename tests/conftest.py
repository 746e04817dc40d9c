import pytest
from sqlalchemy.pool import StaticPool

from symptra.analysis import encode_analysis
from symptra.db import close_postgres, init_postgres
from symptra.schemas import AnalysisCondition, StructuredAnalysis
from symptra.sessions import SessionManager
from symptra.store import MemoryStore


@pytest.fixture
def sample_analysis():
    return StructuredAnalysis(
        urgency=3,
        summary="Likely viral respiratory infection",
        seek_care=True,
        red_flags=["shortness of breath"],
        conditions=[
            AnalysisCondition(name="Influenza (Flu)", score=0.55, severity="moderate", reason="Fever, cough and fatigue together"),
            AnalysisCondition(name="Common Cold", score=0.25, severity="mild", reason="Milder overlapping respiratory symptoms"),
            AnalysisCondition(name="COVID-19", score=0.2, severity="moderate", reason="Fever with dry cough"),
        ],
    )


@pytest.fixture
def reply_with_analysis(sample_analysis):
    return encode_analysis(sample_analysis, "## Clinical Assessment\nProbably the flu.")


@pytest.fixture(params=["memory", "sql"])
async def store(request):
    if request.param == "memory":
        yield MemoryStore()
        return
    sql_store = await init_postgres("sqlite+aiosqlite://", poolclass=StaticPool)
    yield sql_store
    await close_postgres()


@pytest.fixture
def manager(store):
    return SessionManager(store)
