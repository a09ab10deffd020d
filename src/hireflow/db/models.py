from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hireflow.db.base import Base, TimestampMixin


class JobPosting(TimestampMixin, Base):
    __tablename__ = "job_postings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    location: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    job_type: Mapped[str] = mapped_column(String(80), default="", nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    description_detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_analysis_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    scoring_rubric_json: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class ApplicationStatus(TimestampMixin, Base):
    __tablename__ = "application_statuses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(80), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    color: Mapped[str] = mapped_column(String(20), default="#9e9e9e", nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class Candidate(TimestampMixin, Base):
    __tablename__ = "candidates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    job_id: Mapped[int] = mapped_column(ForeignKey("job_postings.id", ondelete="CASCADE"), index=True)

    resume_file_name: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    resume_file_size: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    resume_content: Mapped[str | None] = mapped_column(Text, nullable=True)

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(60), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    extracted_info_json: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    match_percentage: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ai_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_analysis_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    strengths_json: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    weaknesses_json: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    recommendations_json: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    processing_status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)
    status_id: Mapped[int | None] = mapped_column(ForeignKey("application_statuses.id"), nullable=True, index=True)
    analysis_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    analysis_completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
