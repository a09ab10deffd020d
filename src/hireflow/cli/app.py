from __future__ import annotations

import json
import mimetypes
from datetime import timedelta
from pathlib import Path
from typing import NoReturn

import typer
import uvicorn

from hireflow.api.app import create_app
from hireflow.config import get_settings
from hireflow.core.orchestrator import PipelineOrchestrator
from hireflow.core.reconciliation import reconcile_stale_candidates
from hireflow.core.status_taxonomy import StatusTaxonomyService
from hireflow.db.init import init_database
from hireflow.db.repositories import Repository
from hireflow.db.session import SessionLocal
from hireflow.errors import HireflowError
from hireflow.logging_config import configure_logging
from hireflow.types import ScoringRubric, UploadedDocument

app = typer.Typer(help="Hireflow CLI")
jobs_app = typer.Typer(help="Job posting commands")
candidates_app = typer.Typer(help="Candidate upload and analysis")
statuses_app = typer.Typer(help="Review status taxonomy")

app.add_typer(jobs_app, name="jobs")
app.add_typer(candidates_app, name="candidates")
app.add_typer(statuses_app, name="statuses")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _fail(exc: HireflowError) -> NoReturn:
    typer.echo(json.dumps({"ok": False, "error": str(exc)}, indent=2), err=True)
    raise typer.Exit(code=1)


@app.command("init")
def init_cmd() -> None:
    """Initialize database, data directory and the default review statuses."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@jobs_app.command("create")
def jobs_create(
    title: str = typer.Option(..., "--title"),
    description: str = typer.Option(..., "--description"),
    detail: str | None = typer.Option(None, "--detail"),
    rubric_file: Path | None = typer.Option(None, "--rubric", exists=True, readable=True),
    ai: bool = typer.Option(True, "--ai/--no-ai"),
    department: str = typer.Option("", "--department"),
    location: str = typer.Option("", "--location"),
) -> None:
    configure_logging()
    ensure_initialized()
    rubric = ScoringRubric()
    if rubric_file is not None:
        rubric = ScoringRubric.model_validate(json.loads(rubric_file.read_text(encoding="utf-8")))

    with SessionLocal() as db:
        job = Repository(db).create_job(
            title=title,
            description=description,
            description_detail=detail,
            ai_analysis_enabled=ai,
            rubric=rubric,
            department=department,
            location=location,
        )
        typer.echo(json.dumps({"id": job.id, "title": job.title}, indent=2))


@jobs_app.command("list")
def jobs_list(limit: int = typer.Option(20, "--limit")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        jobs = Repository(db).list_jobs(limit=limit)
        typer.echo(
            json.dumps(
                [
                    {
                        "id": job.id,
                        "title": job.title,
                        "department": job.department,
                        "ai_analysis_enabled": job.ai_analysis_enabled,
                        "created_at": job.created_at.isoformat() if job.created_at else None,
                    }
                    for job in jobs
                ],
                indent=2,
            )
        )


@jobs_app.command("reanalyze")
def jobs_reanalyze(job_id: int = typer.Option(..., "--job-id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            totals = PipelineOrchestrator.from_session(db).reanalyze_job(job_id)
        except HireflowError as exc:
            _fail(exc)
        typer.echo(json.dumps({"job_id": job_id, **totals.model_dump()}, indent=2))


@candidates_app.command("upload")
def candidates_upload(
    job_id: int = typer.Option(..., "--job-id"),
    file: Path = typer.Option(..., "--file", exists=True, readable=True),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    configure_logging()
    ensure_initialized()
    document = UploadedDocument(
        data=file.read_bytes(),
        file_name=file.name,
        declared_mime_type=mimetypes.guess_type(file.name)[0],
    )
    with SessionLocal() as db:
        try:
            result = PipelineOrchestrator.from_session(db).process_resume(
                job_id=job_id,
                document=document,
                notes=notes,
            )
        except HireflowError as exc:
            _fail(exc)
        typer.echo(json.dumps(result.model_dump(exclude={"analysis"}), indent=2))
        if not result.success:
            raise typer.Exit(code=1)


@candidates_app.command("reanalyze")
def candidates_reanalyze(candidate_id: int = typer.Option(..., "--candidate-id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            succeeded = PipelineOrchestrator.from_session(db).reanalyze_candidate(candidate_id)
        except HireflowError as exc:
            _fail(exc)
        typer.echo(json.dumps({"candidate_id": candidate_id, "success": succeeded}, indent=2))


@candidates_app.command("list")
def candidates_list(job_id: int = typer.Option(..., "--job-id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        rows = Repository(db).list_candidates_by_job(job_id)
        typer.echo(
            json.dumps(
                [
                    {
                        "id": row.id,
                        "name": row.name,
                        "email": row.email,
                        "processing_status": row.processing_status,
                        "match_percentage": row.match_percentage,
                        "status_id": row.status_id,
                    }
                    for row in rows
                ],
                indent=2,
            )
        )


@statuses_app.command("list")
def statuses_list(active_only: bool = typer.Option(False, "--active-only")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        service = StatusTaxonomyService(Repository(db))
        usage = service.usage_stats()
        typer.echo(
            json.dumps(
                [
                    {
                        "id": row.id,
                        "name": row.name,
                        "display_name": row.display_name,
                        "is_default": row.is_default,
                        "is_active": row.is_active,
                        "sort_order": row.sort_order,
                        "candidates": usage.get(row.id, 0),
                    }
                    for row in service.list_statuses(active_only=active_only)
                ],
                indent=2,
            )
        )


@statuses_app.command("create")
def statuses_create(
    name: str = typer.Option(..., "--name"),
    display_name: str = typer.Option(..., "--display-name"),
    description: str = typer.Option("", "--description"),
    color: str = typer.Option("#9e9e9e", "--color"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            row = StatusTaxonomyService(Repository(db)).create_status(
                name=name,
                display_name=display_name,
                description=description,
                color=color,
            )
        except HireflowError as exc:
            _fail(exc)
        typer.echo(json.dumps({"id": row.id, "name": row.name, "sort_order": row.sort_order}, indent=2))


@statuses_app.command("delete")
def statuses_delete(status_id: int = typer.Option(..., "--status-id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            StatusTaxonomyService(Repository(db)).delete_status(status_id)
        except HireflowError as exc:
            _fail(exc)
        typer.echo(json.dumps({"deleted": status_id}, indent=2))


@app.command("reconcile")
def reconcile_cmd(
    older_than_minutes: int | None = typer.Option(None, "--older-than-minutes"),
) -> None:
    """Mark candidates stuck in processing as failed."""
    configure_logging()
    ensure_initialized()
    minutes = older_than_minutes if older_than_minutes is not None else get_settings().stale_processing_minutes
    with SessionLocal() as db:
        reconciled = reconcile_stale_candidates(Repository(db), older_than=timedelta(minutes=minutes))
        typer.echo(json.dumps({"reconciled": reconciled}, indent=2))


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
