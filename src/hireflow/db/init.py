from __future__ import annotations

from hireflow.config import get_settings
from hireflow.db.base import Base
from hireflow.db.session import SessionLocal, engine
from hireflow.db import models  # noqa: F401
from hireflow.db.seed import seed_default_statuses


def ensure_data_directories() -> None:
    settings = get_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def init_database() -> dict[str, int]:
    ensure_data_directories()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as session:
        inserted = seed_default_statuses(session)
    return {"seeded_statuses": inserted}
