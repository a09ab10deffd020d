from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from sqlalchemy.orm import Session

from hireflow.api.deps import get_db, get_orchestrator
from hireflow.api.schemas import (
    BatchReanalysisResponse,
    CandidateResponse,
    CapabilitiesResponse,
    JobCreateRequest,
    JobResponse,
    JobUpdateRequest,
    ReconcileRequest,
    ReconcileResponse,
    ReviewStatusRequest,
    StatusCreateRequest,
    StatusReorderRequest,
    StatusResponse,
    StatusUpdateRequest,
    UploadResponse,
)
from hireflow.config import get_settings
from hireflow.core.document_extractor import SUPPORTED_EXTENSIONS
from hireflow.core.orchestrator import PipelineOrchestrator
from hireflow.core.reconciliation import reconcile_stale_candidates
from hireflow.core.status_taxonomy import StatusTaxonomyService
from hireflow.db.models import ApplicationStatus, Candidate, JobPosting
from hireflow.db.repositories import Repository
from hireflow.types import UploadedDocument

router = APIRouter(prefix="/api", tags=["api"])

_EXTRACTION_STATUS_CODES = {
    "too_large": 413,
    "unsupported_format": 415,
    "legacy_format": 415,
}


def _job_response(job: JobPosting) -> JobResponse:
    return JobResponse(
        id=job.id,
        title=job.title,
        department=job.department,
        location=job.location,
        job_type=job.job_type,
        description=job.description,
        description_detail=job.description_detail,
        ai_analysis_enabled=job.ai_analysis_enabled,
        is_public=job.is_public,
        rubric=job.scoring_rubric_json or {},
        created_at=job.created_at.isoformat() if job.created_at else None,
    )


def _candidate_response(row: Candidate) -> CandidateResponse:
    return CandidateResponse(
        id=row.id,
        job_id=row.job_id,
        name=row.name,
        email=row.email,
        phone=row.phone,
        location=row.location,
        resume_file_name=row.resume_file_name,
        resume_file_size=row.resume_file_size,
        processing_status=row.processing_status,
        status_id=row.status_id,
        match_percentage=row.match_percentage,
        notes=row.notes,
        ai_summary=row.ai_summary,
        ai_analysis_summary=row.ai_analysis_summary,
        strengths=row.strengths_json or [],
        weaknesses=row.weaknesses_json or [],
        recommendations=row.recommendations_json or [],
        extracted_info=row.extracted_info_json,
        analysis_completed=row.analysis_completed,
        analysis_completed_at=row.analysis_completed_at.isoformat() if row.analysis_completed_at else None,
        created_at=row.created_at.isoformat() if row.created_at else None,
    )


def _status_response(row: ApplicationStatus) -> StatusResponse:
    return StatusResponse(
        id=row.id,
        name=row.name,
        display_name=row.display_name,
        description=row.description,
        color=row.color,
        is_default=row.is_default,
        is_active=row.is_active,
        sort_order=row.sort_order,
    )


@router.post("/jobs", response_model=JobResponse, status_code=201)
def create_job(payload: JobCreateRequest, db: Session = Depends(get_db)) -> JobResponse:
    repo = Repository(db)
    job = repo.create_job(
        title=payload.title,
        description=payload.description,
        description_detail=payload.description_detail,
        ai_analysis_enabled=payload.ai_analysis_enabled,
        rubric=payload.rubric,
        department=payload.department,
        location=payload.location,
        job_type=payload.job_type,
    )
    return _job_response(job)


@router.get("/jobs", response_model=list[JobResponse])
def list_jobs(limit: int = 50, db: Session = Depends(get_db)) -> list[JobResponse]:
    return [_job_response(row) for row in Repository(db).list_jobs(limit=limit)]


@router.get("/jobs/{job_id}", response_model=JobResponse)
def get_job(job_id: int, db: Session = Depends(get_db)) -> JobResponse:
    job = Repository(db).get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return _job_response(job)


@router.patch("/jobs/{job_id}", response_model=JobResponse)
def update_job(job_id: int, payload: JobUpdateRequest, db: Session = Depends(get_db)) -> JobResponse:
    values = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True, exclude={"rubric"}).items()
        if value is not None or key == "description_detail"
    }
    if payload.rubric is not None:
        values["scoring_rubric_json"] = payload.rubric.model_dump()
    job = Repository(db).update_job(job_id, **values)
    return _job_response(job)


@router.delete("/jobs/{job_id}", status_code=204)
def delete_job(job_id: int, db: Session = Depends(get_db)) -> Response:
    if not Repository(db).delete_job(job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return Response(status_code=204)


@router.post("/jobs/{job_id}/candidates", response_model=UploadResponse, status_code=201)
def upload_candidate(
    job_id: int,
    file: UploadFile = File(...),
    notes: str | None = Form(None),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> UploadResponse:
    # read at most one byte past the limit
    limit = orchestrator.settings.max_upload_bytes
    document = UploadedDocument(
        data=file.file.read(limit + 1),
        file_name=file.filename or "upload",
        declared_mime_type=file.content_type,
    )
    result = orchestrator.process_resume(job_id=job_id, document=document, notes=notes)
    if not result.success:
        status_code = _EXTRACTION_STATUS_CODES.get(result.error_kind or "", 400)
        raise HTTPException(status_code=status_code, detail={"kind": result.error_kind, "error": result.error})

    analysis = result.analysis
    return UploadResponse(
        candidate_id=result.candidate_id,
        processing_status=result.processing_status,
        match_percentage=analysis.match_percentage if analysis and not analysis.call_failed else None,
        analysis_outcome=analysis.outcome if analysis else None,
    )


@router.get("/jobs/{job_id}/candidates", response_model=list[CandidateResponse])
def list_candidates(job_id: int, db: Session = Depends(get_db)) -> list[CandidateResponse]:
    repo = Repository(db)
    if not repo.get_job(job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return [_candidate_response(row) for row in repo.list_candidates_by_job(job_id)]


@router.post("/jobs/{job_id}/reanalyze", response_model=BatchReanalysisResponse)
def reanalyze_job(
    job_id: int,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> BatchReanalysisResponse:
    totals = orchestrator.reanalyze_job(job_id)
    return BatchReanalysisResponse(job_id=job_id, success=totals.success, failed=totals.failed)


@router.get("/candidates/{candidate_id}", response_model=CandidateResponse)
def get_candidate(candidate_id: int, db: Session = Depends(get_db)) -> CandidateResponse:
    row = Repository(db).get_candidate(candidate_id)
    if not row:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return _candidate_response(row)


@router.patch("/candidates/{candidate_id}/review-status", response_model=CandidateResponse)
def set_review_status(
    candidate_id: int,
    payload: ReviewStatusRequest,
    db: Session = Depends(get_db),
) -> CandidateResponse:
    row = StatusTaxonomyService(Repository(db)).set_review_status(candidate_id, payload.status_id)
    return _candidate_response(row)


@router.post("/candidates/{candidate_id}/reanalyze", response_model=CandidateResponse)
def reanalyze_candidate(
    candidate_id: int,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> CandidateResponse:
    if orchestrator.store.get_candidate(candidate_id) is None:
        raise HTTPException(status_code=404, detail="Candidate not found")
    orchestrator.reanalyze_candidate(candidate_id)
    return _candidate_response(orchestrator.store.get_candidate(candidate_id))


@router.get("/statuses", response_model=list[StatusResponse])
def list_statuses(active_only: bool = False, db: Session = Depends(get_db)) -> list[StatusResponse]:
    rows = StatusTaxonomyService(Repository(db)).list_statuses(active_only=active_only)
    return [_status_response(row) for row in rows]


@router.post("/statuses", response_model=StatusResponse, status_code=201)
def create_status(payload: StatusCreateRequest, db: Session = Depends(get_db)) -> StatusResponse:
    row = StatusTaxonomyService(Repository(db)).create_status(**payload.model_dump())
    return _status_response(row)


@router.get("/statuses/usage")
def status_usage(db: Session = Depends(get_db)) -> dict[str, int]:
    stats = StatusTaxonomyService(Repository(db)).usage_stats()
    return {str(status_id): count for status_id, count in stats.items()}


@router.post("/statuses/reorder", response_model=list[StatusResponse])
def reorder_statuses(payload: StatusReorderRequest, db: Session = Depends(get_db)) -> list[StatusResponse]:
    orders = {item.id: item.sort_order for item in payload.orders}
    rows = StatusTaxonomyService(Repository(db)).reorder_statuses(orders)
    return [_status_response(row) for row in rows]


@router.patch("/statuses/{status_id}", response_model=StatusResponse)
def update_status(status_id: int, payload: StatusUpdateRequest, db: Session = Depends(get_db)) -> StatusResponse:
    row = StatusTaxonomyService(Repository(db)).update_status(status_id, **payload.model_dump())
    return _status_response(row)


@router.delete("/statuses/{status_id}", status_code=204)
def delete_status(status_id: int, db: Session = Depends(get_db)) -> Response:
    StatusTaxonomyService(Repository(db)).delete_status(status_id)
    return Response(status_code=204)


@router.post("/maintenance/reconcile", response_model=ReconcileResponse)
def reconcile(payload: ReconcileRequest | None = None, db: Session = Depends(get_db)) -> ReconcileResponse:
    minutes = get_settings().stale_processing_minutes
    if payload is not None and payload.older_than_minutes is not None:
        minutes = payload.older_than_minutes
    reconciled = reconcile_stale_candidates(Repository(db), older_than=timedelta(minutes=minutes))
    return ReconcileResponse(reconciled=reconciled)


@router.get("/pipeline/capabilities", response_model=CapabilitiesResponse)
def capabilities(orchestrator: PipelineOrchestrator = Depends(get_orchestrator)) -> CapabilitiesResponse:
    settings = orchestrator.settings
    return CapabilitiesResponse(
        ai_configured=orchestrator.scorer.configured,
        supported_extensions=list(SUPPORTED_EXTENSIONS),
        max_upload_bytes=settings.max_upload_bytes,
        extractor_model=settings.openai_model_extractor,
        scorer_model=settings.openai_model_scorer,
    )
