from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from hireflow.core.orchestrator import STALE_PROCESSING_MESSAGE, compose_summary
from hireflow.db.repositories import Repository

logger = logging.getLogger(__name__)


def reconcile_stale_candidates(
    repo: Repository,
    *,
    older_than: timedelta,
    now: datetime | None = None,
) -> list[int]:
    """Mark candidates stuck in ``processing`` as ``failed``.

    A record is stale when it has not been touched for ``older_than``. This
    covers crashes between record creation and finalization; the operator
    can re-analyze afterwards since the résumé text is already stored.
    """
    cutoff = (now or datetime.now(UTC)) - older_than
    stale = repo.list_candidates_in_state("processing", updated_before=cutoff)

    reconciled: list[int] = []
    for candidate in stale:
        repo.update_candidate(
            candidate.id,
            processing_status="failed",
            ai_summary=compose_summary(candidate.notes, STALE_PROCESSING_MESSAGE),
        )
        logger.warning("Reconciled stale candidate id=%s job_id=%s", candidate.id, candidate.job_id)
        reconciled.append(candidate.id)
    return reconciled
