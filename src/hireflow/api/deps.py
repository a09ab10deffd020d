from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from hireflow.core.orchestrator import PipelineOrchestrator
from hireflow.db.session import get_db_session


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_orchestrator(db: Session = Depends(get_db)) -> PipelineOrchestrator:
    return PipelineOrchestrator.from_session(db)
