from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from hireflow.types import ScoringRubric


class JobCreateRequest(BaseModel):
    title: str
    description: str
    description_detail: str | None = None
    department: str = ""
    location: str = ""
    job_type: str = ""
    ai_analysis_enabled: bool = True
    rubric: ScoringRubric = Field(default_factory=ScoringRubric)


class JobUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    description_detail: str | None = None
    department: str | None = None
    location: str | None = None
    job_type: str | None = None
    ai_analysis_enabled: bool | None = None
    is_public: bool | None = None
    rubric: ScoringRubric | None = None


class JobResponse(BaseModel):
    id: int
    title: str
    department: str
    location: str
    job_type: str
    description: str
    description_detail: str | None
    ai_analysis_enabled: bool
    is_public: bool
    rubric: dict[str, Any]
    created_at: str | None = None


class CandidateResponse(BaseModel):
    id: int
    job_id: int
    name: str | None
    email: str | None
    phone: str | None
    location: str | None
    resume_file_name: str
    resume_file_size: int
    processing_status: str
    status_id: int | None
    match_percentage: int | None
    notes: str | None
    ai_summary: str | None
    ai_analysis_summary: str | None
    strengths: list[str]
    weaknesses: list[str]
    recommendations: list[str]
    extracted_info: dict[str, Any] | None
    analysis_completed: bool
    analysis_completed_at: str | None = None
    created_at: str | None = None


class UploadResponse(BaseModel):
    candidate_id: int
    processing_status: str
    match_percentage: int | None = None
    analysis_outcome: str | None = None


class ReviewStatusRequest(BaseModel):
    status_id: int | None


class BatchReanalysisResponse(BaseModel):
    job_id: int
    success: int
    failed: int


class StatusCreateRequest(BaseModel):
    name: str
    display_name: str
    description: str = ""
    color: str = "#9e9e9e"
    sort_order: int | None = None


class StatusUpdateRequest(BaseModel):
    display_name: str | None = None
    description: str | None = None
    color: str | None = None
    is_active: bool | None = None
    sort_order: int | None = None


class StatusResponse(BaseModel):
    id: int
    name: str
    display_name: str
    description: str
    color: str
    is_default: bool
    is_active: bool
    sort_order: int


class StatusOrderItem(BaseModel):
    id: int
    sort_order: int


class StatusReorderRequest(BaseModel):
    orders: list[StatusOrderItem]


class ReconcileRequest(BaseModel):
    older_than_minutes: int | None = Field(default=None, ge=0)


class ReconcileResponse(BaseModel):
    reconciled: list[int]


class CapabilitiesResponse(BaseModel):
    ai_configured: bool
    supported_extensions: list[str]
    max_upload_bytes: int
    extractor_model: str
    scorer_model: str
