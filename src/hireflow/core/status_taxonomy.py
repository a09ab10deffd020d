from __future__ import annotations

import logging
import re
from typing import Any

from hireflow.db.models import ApplicationStatus, Candidate
from hireflow.db.repositories import Repository
from hireflow.errors import RecordNotFound, StatusTaxonomyError

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")


def validate_status_name(name: str) -> str:
    value = name.strip()
    if not _NAME_PATTERN.fullmatch(value):
        raise StatusTaxonomyError(
            "status name must be lowercase letters, digits and underscores, starting with a letter"
        )
    return value


class StatusTaxonomyService:
    """HR-editable review statuses, independent of the AI processing status."""

    def __init__(self, repo: Repository):
        self.repo = repo

    def list_statuses(self, *, active_only: bool = False) -> list[ApplicationStatus]:
        return self.repo.list_statuses(active_only=active_only)

    def create_status(
        self,
        *,
        name: str,
        display_name: str,
        description: str = "",
        color: str = "#9e9e9e",
        sort_order: int | None = None,
    ) -> ApplicationStatus:
        name = validate_status_name(name)
        if self.repo.get_status_by_name(name):
            raise StatusTaxonomyError(f"status name {name!r} already exists")
        if not display_name.strip():
            raise StatusTaxonomyError("display name is required")

        if sort_order is None:
            sort_order = self.repo.next_status_sort_order()
        status = self.repo.create_status(
            name=name,
            display_name=display_name.strip(),
            description=description,
            color=color,
            sort_order=sort_order,
        )
        logger.info("Created review status id=%s name=%s", status.id, status.name)
        return status

    def update_status(self, status_id: int, **values: Any) -> ApplicationStatus:
        changes = {key: value for key, value in values.items() if value is not None}
        if "display_name" in changes and not str(changes["display_name"]).strip():
            raise StatusTaxonomyError("display name is required")
        return self.repo.update_status(status_id, **changes)

    def delete_status(self, status_id: int) -> None:
        """Delete a custom status.

        Refused when any candidate still references the status, and always
        refused for default statuses (those can only be deactivated).
        """
        status = self.repo.get_status(status_id)
        if status is None:
            raise RecordNotFound("status", status_id)

        in_use = self.repo.count_candidates_with_status(status_id)
        if in_use:
            raise StatusTaxonomyError(
                f"status {status.name!r} is used by {in_use} candidate(s); move them to another status first"
            )
        if status.is_default:
            raise StatusTaxonomyError(f"default status {status.name!r} cannot be deleted")

        self.repo.delete_status(status_id)
        logger.info("Deleted review status id=%s name=%s", status_id, status.name)

    def reorder_statuses(self, orders: dict[int, int]) -> list[ApplicationStatus]:
        for status_id in orders:
            if self.repo.get_status(status_id) is None:
                raise RecordNotFound("status", status_id)
        for status_id, sort_order in orders.items():
            self.repo.update_status(status_id, sort_order=sort_order)
        return self.repo.list_statuses()

    def usage_stats(self) -> dict[int, int]:
        return self.repo.status_usage_stats()

    def set_review_status(self, candidate_id: int, status_id: int | None) -> Candidate:
        if status_id is not None:
            status = self.repo.get_status(status_id)
            if status is None:
                raise RecordNotFound("status", status_id)
            if not status.is_active:
                raise StatusTaxonomyError(f"status {status.name!r} is inactive")
        return self.repo.update_candidate(candidate_id, status_id=status_id)
