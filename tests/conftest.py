from __future__ import annotations

import io
import json
import os
import tempfile
from pathlib import Path

_TEST_DIR = Path(tempfile.mkdtemp(prefix="hireflow-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'hireflow.db'}"
os.environ["DATA_DIR"] = str(_TEST_DIR)
os.environ["OPENAI_API_KEY"] = ""
os.environ["APP_ENV"] = "test"

import docx  # noqa: E402
import fitz  # noqa: E402  # PyMuPDF
import pytest  # noqa: E402

from hireflow.config import Settings  # noqa: E402
from hireflow.core.orchestrator import PipelineOrchestrator  # noqa: E402
from hireflow.db.base import Base  # noqa: E402
from hireflow.db.repositories import Repository  # noqa: E402
from hireflow.db.seed import seed_default_statuses  # noqa: E402
from hireflow.db.session import SessionLocal, engine  # noqa: E402
from hireflow.llm.extractor import InfoExtractor  # noqa: E402
from hireflow.llm.prompts import PERSONAL_INFO_PROMPT  # noqa: E402
from hireflow.llm.scorer import FitScorer  # noqa: E402
from hireflow.types import ModelResponse, ScoringRubric  # noqa: E402

_EXTRACTION_MARKER = PERSONAL_INFO_PROMPT[:40]

DEFAULT_EXTRACTION_REPLY = json.dumps(
    {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 7946 0000",
        "location": "London",
        "skills": ["Python", "Mathematics"],
        "languages": [{"language": "English", "level": "native"}],
    }
)

DEFAULT_SCORING_REPLY = json.dumps(
    {
        "matchPercentage": 83,
        "analysis": "Strong analytical background with relevant Python experience.",
        "strengths": ["Python", "Analytical engine design"],
        "weaknesses": ["No cloud experience"],
        "recommendations": ["Ask about distributed systems"],
    }
)


class ScriptedProvider:
    """Answers extraction and scoring prompts from canned replies.

    A reply is either a string or an exception to raise. ``scoring`` may be a
    list consumed one call at a time; its last entry repeats.
    """

    def __init__(self, *, extraction=DEFAULT_EXTRACTION_REPLY, scoring=DEFAULT_SCORING_REPLY):
        self.extraction = extraction
        self.scoring = list(scoring) if isinstance(scoring, list) else [scoring]
        self.calls: list[str] = []

    @property
    def scoring_calls(self) -> int:
        return self.calls.count("score")

    def complete_text(self, *, model: str, prompt: str) -> ModelResponse:
        if prompt.startswith(_EXTRACTION_MARKER):
            self.calls.append("extract")
            reply = self.extraction
        else:
            self.calls.append("score")
            reply = self.scoring.pop(0) if len(self.scoring) > 1 else self.scoring[0]

        if isinstance(reply, Exception):
            raise reply
        return ModelResponse(content=reply, raw={"model": model})


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        seed_default_statuses(session)
    yield


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repo(db_session) -> Repository:
    return Repository(db_session)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        openai_api_key="",
        llm_max_retries=1,
        llm_retry_backoff_sec=0.5,
        batch_reanalysis_delay_sec=1.0,
    )


@pytest.fixture
def job(repo):
    return repo.create_job(
        title="Backend Engineer",
        description="Build Python services for the hiring platform.",
        description_detail="FastAPI, SQLAlchemy, PostgreSQL",
        rubric=ScoringRubric.model_validate(
            {"technical_skills": {"required_skills": ["Python"], "preferred_skills": ["FastAPI"]}}
        ),
    )


@pytest.fixture
def scripted_provider():
    return ScriptedProvider


@pytest.fixture
def make_orchestrator(repo, test_settings):
    def _make(provider=None, *, store=None, settings=None):
        sleeps: list[float] = []
        extractor = InfoExtractor(provider, model="extract-model")
        scorer = FitScorer(provider, extractor, model="score-model")
        orchestrator = PipelineOrchestrator(
            store or repo,
            scorer=scorer,
            extractor=extractor,
            settings=settings or test_settings,
            sleep=sleeps.append,
        )
        orchestrator.sleeps = sleeps
        return orchestrator

    return _make


@pytest.fixture
def make_pdf():
    def _make(*pages: str) -> bytes:
        pdf = fitz.open()
        for text in pages:
            page = pdf.new_page()
            if text:
                page.insert_text((72, 72), text)
        data = pdf.tobytes()
        pdf.close()
        return data

    return _make


@pytest.fixture
def make_docx():
    def _make(
        *paragraphs: str,
        table: list[list[str]] | None = None,
        after_table: tuple[str, ...] = (),
    ) -> bytes:
        document = docx.Document()
        for text in paragraphs:
            document.add_paragraph(text)
        if table:
            grid = document.add_table(rows=len(table), cols=len(table[0]))
            for row_index, row in enumerate(table):
                for col_index, value in enumerate(row):
                    grid.cell(row_index, col_index).text = value
        for text in after_table:
            document.add_paragraph(text)
        buffer = io.BytesIO()
        document.save(buffer)
        return buffer.getvalue()

    return _make
