"""Models for append outcomes.

This module provides the AppendResult dataclass returned by
HistoryStore.append for every submitted run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AppendStatus(str, Enum):
    """Outcome of an append."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


class RejectionReason(str, Enum):
    """Why an append was rejected."""

    DUPLICATE_REVISION = "duplicate_revision"
    INVALID_RUN = "invalid_run"


@dataclass(frozen=True)
class AppendResult:
    """Outcome of submitting one run to a group.

    Attributes:
        status: Whether the run was accepted or rejected.
        group: Target group label.
        revision_id: Revision identifier of the submitted run.
        reason: Rejection reason, None when accepted.
        detail: Human-readable explanation of a rejection.

    Example:
        >>> result = store.append("Track benchmarks", run)
        >>> if not result.accepted:
        ...     print(result.reason.value, result.detail)
    """

    status: AppendStatus
    group: str
    revision_id: str
    reason: RejectionReason | None = None
    detail: str = ""

    @property
    def accepted(self) -> bool:
        """True if the run was appended."""
        return self.status is AppendStatus.ACCEPTED

    @property
    def is_duplicate(self) -> bool:
        """True if the run was rejected because its revision was already stored."""
        return self.reason is RejectionReason.DUPLICATE_REVISION

    @classmethod
    def accept(cls, group: str, revision_id: str) -> AppendResult:
        """Build an accepted result."""
        return cls(status=AppendStatus.ACCEPTED, group=group, revision_id=revision_id)

    @classmethod
    def reject(
        cls,
        group: str,
        revision_id: str,
        reason: RejectionReason,
        detail: str = "",
    ) -> AppendResult:
        """Build a rejected result."""
        return cls(
            status=AppendStatus.REJECTED,
            group=group,
            revision_id=revision_id,
            reason=reason,
            detail=detail,
        )
