from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Protocol

from sqlalchemy.orm import Session

from hireflow.config import Settings, get_settings
from hireflow.core.document_extractor import extract_document
from hireflow.db.models import ApplicationStatus, Candidate
from hireflow.db.repositories import Repository
from hireflow.errors import ReanalysisRejected
from hireflow.llm.extractor import InfoExtractor
from hireflow.llm.providers import build_provider
from hireflow.llm.scorer import FitScorer, sentinel_result
from hireflow.types import (
    BatchReanalysisResult,
    ExtractedInfo,
    JobRequirements,
    ProcessResumeResult,
    ScoreRequest,
    ScoreResult,
    UploadedDocument,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "Name pending extraction"
STALE_PROCESSING_MESSAGE = "Processing was interrupted before completion; trigger re-analysis to retry"


class RecordStore(Protocol):
    def create_candidate(self, **values: Any) -> Candidate: ...

    def update_candidate(self, candidate_id: int, **patch: Any) -> Candidate: ...

    def get_candidate(self, candidate_id: int) -> Candidate | None: ...

    def list_candidates_by_job(self, job_id: int) -> list[Candidate]: ...

    def get_job_requirements(self, job_id: int) -> JobRequirements: ...

    def get_status_by_name(self, name: str) -> ApplicationStatus | None: ...


class PipelineOrchestrator:
    """Drives a résumé through parse, extract, create, score and finalize.

    The candidate's ``processing_status`` moves ``processing`` -> ``completed``,
    or ``processing`` -> ``failed`` when the scoring call itself fails. Upload
    problems are reported before any record is created. Store errors are not
    caught here.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        scorer: FitScorer,
        extractor: InfoExtractor | None = None,
        settings: Settings | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.scorer = scorer
        self.extractor = extractor or scorer.extractor
        self.settings = settings or get_settings()
        self.sleep = sleep

    @classmethod
    def from_session(cls, session: Session, *, settings: Settings | None = None) -> PipelineOrchestrator:
        settings = settings or get_settings()
        provider = build_provider(settings)
        extractor = InfoExtractor(provider, model=settings.openai_model_extractor)
        scorer = FitScorer(provider, extractor, model=settings.openai_model_scorer)
        return cls(Repository(session), scorer=scorer, extractor=extractor, settings=settings)

    def ai_available(self, job: JobRequirements) -> bool:
        return job.ai_analysis_enabled and self.scorer.configured

    def process_resume(
        self,
        *,
        job_id: int,
        document: UploadedDocument,
        notes: str | None = None,
    ) -> ProcessResumeResult:
        job = self.store.get_job_requirements(job_id)

        parsed = extract_document(document, max_bytes=self.settings.max_upload_bytes)
        if not parsed.ok:
            return ProcessResumeResult(success=False, error=parsed.error, error_kind=parsed.kind)

        notes = notes.strip() if notes and notes.strip() else None
        ai_enabled = self.ai_available(job)

        identity: dict[str, Any] = {"name": PLACEHOLDER_NAME}
        if ai_enabled:
            extraction = self.extractor.extract_personal_info(parsed.text)
            if not extraction.degraded:
                identity = _identity_fields(extraction.info)
                identity["name"] = identity.get("name") or PLACEHOLDER_NAME
                identity["extracted_info_json"] = extraction.info.model_dump()

        candidate = self.store.create_candidate(
            job_id=job.job_id,
            resume_content=parsed.text,
            resume_file_name=parsed.file_name,
            resume_file_size=parsed.file_size,
            processing_status="processing",
            status_id=self._default_status_id(),
            notes=notes,
            ai_summary=compose_summary(notes, None),
            **identity,
        )
        logger.info(
            "Created candidate id=%s job_id=%s file=%s ai_enabled=%s",
            candidate.id,
            job.job_id,
            parsed.file_name,
            ai_enabled,
        )

        if not ai_enabled:
            self.store.update_candidate(
                candidate.id,
                processing_status="completed",
                analysis_completed=False,
            )
            return ProcessResumeResult(success=True, candidate_id=candidate.id, processing_status="completed")

        result = self._score_and_persist(candidate.id, job, parsed.text, notes=notes)
        return ProcessResumeResult(
            success=True,
            candidate_id=candidate.id,
            processing_status="failed" if result.call_failed else "completed",
            analysis=result,
        )

    def reanalyze_candidate(self, candidate_id: int, job_id: int | None = None) -> bool:
        """Re-score one candidate from its stored résumé text.

        Returns False when the scoring call failed (the record is then marked
        ``failed``). Raises ``ReanalysisRejected`` before any model call when
        the candidate has no stored text or AI analysis is unavailable.
        """
        candidate = self.store.get_candidate(candidate_id)
        if candidate is None:
            raise ReanalysisRejected(f"candidate {candidate_id} not found")
        if job_id is not None and candidate.job_id != job_id:
            raise ReanalysisRejected(f"candidate {candidate_id} does not belong to job {job_id}")
        if not candidate.resume_content:
            raise ReanalysisRejected(f"candidate {candidate_id} has no stored resume text")

        job = self.store.get_job_requirements(candidate.job_id)
        if not self.ai_available(job):
            raise ReanalysisRejected("AI analysis is disabled for this job or not configured")

        self.store.update_candidate(candidate_id, processing_status="processing")
        result = self._score_and_persist(candidate_id, job, candidate.resume_content, notes=candidate.notes)
        return not result.call_failed

    def reanalyze_job(self, job_id: int) -> BatchReanalysisResult:
        job = self.store.get_job_requirements(job_id)
        if not self.ai_available(job):
            raise ReanalysisRejected("AI analysis is disabled for this job or not configured")

        candidates = [row for row in self.store.list_candidates_by_job(job_id) if row.resume_content]
        totals = BatchReanalysisResult()
        for index, candidate in enumerate(candidates):
            if index:
                self.sleep(self.settings.batch_reanalysis_delay_sec)
            try:
                succeeded = self.reanalyze_candidate(candidate.id, job_id)
            except ReanalysisRejected as exc:
                logger.warning("Skipping candidate id=%s in batch: %s", candidate.id, exc)
                succeeded = False

            if succeeded:
                totals.success += 1
            else:
                totals.failed += 1

        logger.info("Batch re-analysis job_id=%s success=%d failed=%d", job_id, totals.success, totals.failed)
        return totals

    def _score_and_persist(
        self,
        candidate_id: int,
        job: JobRequirements,
        resume_text: str,
        *,
        notes: str | None,
    ) -> ScoreResult:
        request = ScoreRequest(
            resume_text=resume_text,
            job_description=job.description,
            job_description_detail=job.description_detail,
            rubric=job.rubric,
        )
        try:
            result = self._score_with_retry(request)
        except Exception as exc:
            logger.exception("Scoring raised for candidate_id=%s", candidate_id)
            result = sentinel_result("failed", ExtractedInfo(), str(exc) or type(exc).__name__)

        if result.call_failed:
            self.store.update_candidate(
                candidate_id,
                processing_status="failed",
                ai_summary=compose_summary(notes, f"AI analysis failed: {result.error}"),
            )
            logger.warning("Candidate id=%s marked failed: %s", candidate_id, result.error)
            return result

        patch: dict[str, Any] = {
            "extracted_info_json": result.extracted_info.model_dump(),
            "match_percentage": result.match_percentage,
            "ai_summary": compose_summary(notes, result.analysis),
            "ai_analysis_summary": format_analysis_summary(result),
            "strengths_json": result.strengths,
            "weaknesses_json": result.weaknesses,
            "recommendations_json": result.recommendations,
            "analysis_completed": True,
            "analysis_completed_at": datetime.now(UTC),
            "processing_status": "completed",
        }
        candidate = self.store.get_candidate(candidate_id)
        if candidate is not None:
            for key, value in _identity_fields(result.extracted_info).items():
                current = getattr(candidate, key)
                if not current or current == PLACEHOLDER_NAME:
                    patch[key] = value

        self.store.update_candidate(candidate_id, **patch)
        logger.info(
            "Candidate id=%s analysis completed outcome=%s match=%d",
            candidate_id,
            result.outcome,
            result.match_percentage,
        )
        return result

    def _score_with_retry(self, request: ScoreRequest) -> ScoreResult:
        attempts = self.settings.llm_max_retries + 1
        for attempt in range(1, attempts + 1):
            result = self.scorer.analyze(request)
            if not result.call_failed or attempt == attempts or not self.scorer.configured:
                return result

            delay = self.settings.llm_retry_backoff_sec * (2 ** (attempt - 1))
            logger.warning(
                "Scoring attempt %d/%d failed (%s); retrying in %.1fs",
                attempt,
                attempts,
                result.error,
                delay,
            )
            self.sleep(delay)
        return result

    def _default_status_id(self) -> int | None:
        status = self.store.get_status_by_name(self.settings.default_review_status)
        if status is None:
            logger.warning(
                "Default review status %r not found; creating candidate without one",
                self.settings.default_review_status,
            )
            return None
        return status.id


def format_analysis_summary(result: ScoreResult) -> str:
    sections = [f"Match: {result.match_percentage}%"]

    if result.strengths:
        sections.append("\nStrengths:")
        sections.extend(f"• {item}" for item in result.strengths)

    if result.weaknesses:
        sections.append("\nWeaknesses:")
        sections.extend(f"• {item}" for item in result.weaknesses)

    if result.recommendations:
        sections.append("\nRecommendations:")
        sections.extend(f"• {item}" for item in result.recommendations)

    return "\n".join(sections)


def compose_summary(notes: str | None, body: str | None) -> str | None:
    parts = []
    if notes:
        parts.append(f"Notes: {notes}")
    if body:
        parts.append(body)
    return "\n\n".join(parts) or None


def _identity_fields(info: ExtractedInfo) -> dict[str, Any]:
    fields = {
        "name": info.name,
        "email": info.email,
        "phone": info.phone,
        "location": info.location,
    }
    return {key: value for key, value in fields.items() if value}
