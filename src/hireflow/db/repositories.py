from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from hireflow.db.models import ApplicationStatus, Candidate, JobPosting
from hireflow.errors import RecordNotFound
from hireflow.types import JobRequirements, ScoringRubric

_JOB_FIELDS = {
    "title",
    "department",
    "location",
    "job_type",
    "description",
    "description_detail",
    "ai_analysis_enabled",
    "scoring_rubric_json",
    "is_public",
}
_STATUS_FIELDS = {"display_name", "description", "color", "is_active", "sort_order"}


def _check_fields(model: type, values: dict[str, Any], allowed: set[str] | None = None) -> None:
    for key in values:
        if allowed is not None and key not in allowed:
            raise ValueError(f"{model.__name__}.{key} cannot be updated")
        if not hasattr(model, key):
            raise ValueError(f"{model.__name__} has no field {key}")


class Repository:
    def __init__(self, session: Session):
        self.session = session

    def create_job(
        self,
        *,
        title: str,
        description: str,
        description_detail: str | None = None,
        ai_analysis_enabled: bool = True,
        rubric: ScoringRubric | None = None,
        department: str = "",
        location: str = "",
        job_type: str = "",
    ) -> JobPosting:
        job = JobPosting(
            title=title,
            description=description,
            description_detail=description_detail,
            ai_analysis_enabled=ai_analysis_enabled,
            scoring_rubric_json=(rubric or ScoringRubric()).model_dump(),
            department=department,
            location=location,
            job_type=job_type,
        )
        self.session.add(job)
        self.session.commit()
        self.session.refresh(job)
        return job

    def get_job(self, job_id: int) -> JobPosting | None:
        return self.session.get(JobPosting, job_id)

    def list_jobs(self, limit: int = 50) -> list[JobPosting]:
        statement = select(JobPosting).order_by(JobPosting.created_at.desc(), JobPosting.id.desc()).limit(limit)
        return list(self.session.scalars(statement).all())

    def update_job(self, job_id: int, **values: Any) -> JobPosting:
        _check_fields(JobPosting, values, _JOB_FIELDS)
        job = self.session.get(JobPosting, job_id)
        if not job:
            raise RecordNotFound("job", job_id)

        for key, value in values.items():
            setattr(job, key, value)
        self.session.commit()
        self.session.refresh(job)
        return job

    def delete_job(self, job_id: int) -> bool:
        job = self.session.get(JobPosting, job_id)
        if not job:
            return False

        self.session.execute(delete(Candidate).where(Candidate.job_id == job_id))
        self.session.delete(job)
        self.session.commit()
        return True

    def get_job_requirements(self, job_id: int) -> JobRequirements:
        job = self.session.get(JobPosting, job_id)
        if not job:
            raise RecordNotFound("job", job_id)

        return JobRequirements(
            job_id=job.id,
            title=job.title,
            description=job.description,
            description_detail=job.description_detail,
            ai_analysis_enabled=job.ai_analysis_enabled,
            rubric=ScoringRubric.model_validate(job.scoring_rubric_json or {}),
        )

    def create_candidate(self, **values: Any) -> Candidate:
        _check_fields(Candidate, values)
        job_id = values.get("job_id")
        if job_id is None or not self.session.get(JobPosting, job_id):
            raise RecordNotFound("job", job_id)

        candidate = Candidate(**values)
        self.session.add(candidate)
        self.session.commit()
        self.session.refresh(candidate)
        return candidate

    def update_candidate(self, candidate_id: int, **patch: Any) -> Candidate:
        _check_fields(Candidate, patch)
        candidate = self.session.get(Candidate, candidate_id)
        if not candidate:
            raise RecordNotFound("candidate", candidate_id)

        for key, value in patch.items():
            setattr(candidate, key, value)
        self.session.commit()
        self.session.refresh(candidate)
        return candidate

    def get_candidate(self, candidate_id: int) -> Candidate | None:
        return self.session.get(Candidate, candidate_id)

    def list_candidates_by_job(self, job_id: int) -> list[Candidate]:
        statement = (
            select(Candidate)
            .where(Candidate.job_id == job_id)
            .order_by(Candidate.created_at.desc(), Candidate.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def list_candidates_in_state(self, processing_status: str, *, updated_before: datetime) -> list[Candidate]:
        statement = (
            select(Candidate)
            .where(
                Candidate.processing_status == processing_status,
                Candidate.updated_at < updated_before,
            )
            .order_by(Candidate.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def delete_candidate(self, candidate_id: int) -> bool:
        candidate = self.session.get(Candidate, candidate_id)
        if not candidate:
            return False
        self.session.delete(candidate)
        self.session.commit()
        return True

    def list_statuses(self, *, active_only: bool = False) -> list[ApplicationStatus]:
        statement = select(ApplicationStatus)
        if active_only:
            statement = statement.where(ApplicationStatus.is_active.is_(True))
        statement = statement.order_by(ApplicationStatus.sort_order.asc(), ApplicationStatus.id.asc())
        return list(self.session.scalars(statement).all())

    def get_status(self, status_id: int) -> ApplicationStatus | None:
        return self.session.get(ApplicationStatus, status_id)

    def get_status_by_name(self, name: str) -> ApplicationStatus | None:
        return self.session.scalar(select(ApplicationStatus).where(ApplicationStatus.name == name))

    def next_status_sort_order(self) -> int:
        current = self.session.scalar(select(func.max(ApplicationStatus.sort_order)))
        return (current or 0) + 1

    def create_status(
        self,
        *,
        name: str,
        display_name: str,
        description: str = "",
        color: str = "#9e9e9e",
        sort_order: int,
        is_default: bool = False,
        is_active: bool = True,
    ) -> ApplicationStatus:
        status = ApplicationStatus(
            name=name,
            display_name=display_name,
            description=description,
            color=color,
            sort_order=sort_order,
            is_default=is_default,
            is_active=is_active,
        )
        self.session.add(status)
        self.session.commit()
        self.session.refresh(status)
        return status

    def update_status(self, status_id: int, **values: Any) -> ApplicationStatus:
        _check_fields(ApplicationStatus, values, _STATUS_FIELDS)
        status = self.session.get(ApplicationStatus, status_id)
        if not status:
            raise RecordNotFound("status", status_id)

        for key, value in values.items():
            setattr(status, key, value)
        self.session.commit()
        self.session.refresh(status)
        return status

    def delete_status(self, status_id: int) -> bool:
        status = self.session.get(ApplicationStatus, status_id)
        if not status:
            return False
        self.session.delete(status)
        self.session.commit()
        return True

    def count_candidates_with_status(self, status_id: int) -> int:
        statement = select(func.count(Candidate.id)).where(Candidate.status_id == status_id)
        return int(self.session.scalar(statement) or 0)

    def status_usage_stats(self) -> dict[int, int]:
        statement = (
            select(Candidate.status_id, func.count(Candidate.id))
            .where(Candidate.status_id.is_not(None))
            .group_by(Candidate.status_id)
        )
        return {int(status_id): int(count) for status_id, count in self.session.execute(statement).all()}
