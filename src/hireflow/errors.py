from __future__ import annotations


class HireflowError(Exception):
    """Base class for errors raised by the pipeline and the record store."""


class RecordNotFound(HireflowError):
    def __init__(self, kind: str, record_id: int | str):
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id


class ReanalysisRejected(HireflowError):
    """Re-analysis was refused before any external call was made."""


class StatusTaxonomyError(HireflowError):
    """A review-status create, update or delete violated a taxonomy rule."""
