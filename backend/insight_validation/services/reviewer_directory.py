from __future__ import annotations

import logging
from typing import Iterable, List, Protocol

from sqlalchemy import update
from sqlalchemy.orm import Session

from insight_validation import models
from insight_validation.errors import ReviewerNotFoundError
from insight_validation.statuses import CULTURAL_REVIEWER_ROLES


logger = logging.getLogger(__name__)


class ReviewerDirectory(Protocol):
    """Lookup and maintenance of the reviewers the engine may assign."""

    def add(self, reviewer: models.Reviewer) -> models.Reviewer: ...

    def get(self, reviewer_id: int) -> models.Reviewer: ...

    def find_available(self, community_id: str, expertise_tags: Iterable[str]) -> List[models.Reviewer]: ...

    def find_cultural_reviewers(self, community_id: str) -> List[models.Reviewer]: ...

    def set_availability(self, reviewer_id: int, is_available: bool) -> models.Reviewer: ...

    def record_review_completed(self, reviewer_id: int, turnaround_days: float) -> None: ...


class SqlReviewerDirectory:
    def __init__(self, db: Session) -> None:
        self.db = db

    def add(self, reviewer: models.Reviewer) -> models.Reviewer:
        reviewer.total_reviews = 0
        reviewer.average_turnaround_days = 0.0
        self.db.add(reviewer)
        self.db.commit()
        self.db.refresh(reviewer)
        logger.info(
            "reviewer_registered",
            extra={"reviewer_id": reviewer.id, "community_id": reviewer.community_id},
        )
        return reviewer

    def get(self, reviewer_id: int) -> models.Reviewer:
        reviewer = self.db.query(models.Reviewer).filter(models.Reviewer.id == reviewer_id).first()
        if not reviewer:
            raise ReviewerNotFoundError(f"Reviewer {reviewer_id} not found")
        return reviewer

    def _available_in_community(self, community_id: str) -> List[models.Reviewer]:
        return (
            self.db.query(models.Reviewer)
            .filter(
                models.Reviewer.community_id == community_id,
                models.Reviewer.is_available.is_(True),
            )
            .order_by(models.Reviewer.id.asc())
            .all()
        )

    def find_available(self, community_id: str, expertise_tags: Iterable[str]) -> List[models.Reviewer]:
        wanted = {tag.lower() for tag in expertise_tags}
        # JSON containment is dialect specific, so the tag intersection is done here
        return [
            reviewer
            for reviewer in self._available_in_community(community_id)
            if wanted.intersection(area.lower() for area in reviewer.expertise_areas or [])
        ]

    def find_cultural_reviewers(self, community_id: str) -> List[models.Reviewer]:
        roles = {role.value for role in CULTURAL_REVIEWER_ROLES}
        return [
            reviewer
            for reviewer in self._available_in_community(community_id)
            if reviewer.cultural_role in roles
        ]

    def set_availability(self, reviewer_id: int, is_available: bool) -> models.Reviewer:
        reviewer = self.get(reviewer_id)
        reviewer.is_available = is_available
        self.db.add(reviewer)
        self.db.commit()
        self.db.refresh(reviewer)
        logger.info(
            "reviewer_availability_changed",
            extra={"reviewer_id": reviewer_id, "is_available": is_available},
        )
        return reviewer

    def record_review_completed(self, reviewer_id: int, turnaround_days: float) -> None:
        """Fold one completed review into the reviewer's rolling stats.

        The new average is computed inside a single UPDATE so concurrent
        submissions from the same reviewer cannot lose an increment.
        """

        table = models.Reviewer
        result = self.db.execute(
            update(table)
            .where(table.id == reviewer_id)
            .values(
                total_reviews=table.total_reviews + 1,
                average_turnaround_days=(
                    (table.average_turnaround_days * table.total_reviews + max(0.0, turnaround_days))
                    / (table.total_reviews + 1)
                ),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ReviewerNotFoundError(f"Reviewer {reviewer_id} not found")
