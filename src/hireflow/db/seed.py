from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from hireflow.db.models import ApplicationStatus

DEFAULT_STATUSES: list[dict[str, object]] = [
    {
        "name": "pending",
        "display_name": "Pending review",
        "description": "Newly uploaded, not yet reviewed",
        "color": "#ff9800",
    },
    {
        "name": "reviewed",
        "display_name": "Reviewed",
        "description": "Reviewed by HR",
        "color": "#2196f3",
    },
    {
        "name": "selected",
        "display_name": "Selected",
        "description": "Selected for interview",
        "color": "#4caf50",
    },
    {
        "name": "rejected",
        "display_name": "Rejected",
        "description": "Not moving forward",
        "color": "#f44336",
    },
]


def seed_default_statuses(session: Session) -> int:
    inserted = 0
    for sort_order, status in enumerate(DEFAULT_STATUSES, start=1):
        name = str(status["name"])
        existing = session.scalar(select(ApplicationStatus).where(ApplicationStatus.name == name))
        if existing:
            continue
        session.add(
            ApplicationStatus(
                name=name,
                display_name=str(status["display_name"]),
                description=str(status["description"]),
                color=str(status["color"]),
                is_default=True,
                is_active=True,
                sort_order=sort_order,
            )
        )
        inserted += 1

    session.commit()
    return inserted
