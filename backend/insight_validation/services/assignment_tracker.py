from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from insight_validation import models
from insight_validation.errors import (
    AssignmentNotFoundError,
    AssignmentStateError,
    ReviewValidationError,
)
from insight_validation.schemas import ReviewResponseCreate
from insight_validation.services.reviewer_directory import ReviewerDirectory
from insight_validation.statuses import OPEN_ASSIGNMENT_STATUSES, AssignmentStatus, ReviewCriterion


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
ResponsePayload = Union[ReviewResponseCreate, Mapping[str, Any]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def validate_response_payload(payload: ResponsePayload) -> ReviewResponseCreate:
    """Check scores are integers 1-5, confidence is 0-1, and the recommendation is known."""

    if isinstance(payload, ReviewResponseCreate):
        # Re-run validation: model_construct() or attribute assignment can bypass it
        payload = payload.model_dump()
    try:
        return ReviewResponseCreate.model_validate(payload)
    except ValidationError as exc:
        fields = sorted({".".join(str(part) for part in error["loc"]) for error in exc.errors()})
        raise ReviewValidationError(
            f"Invalid review response: {', '.join(fields) or 'payload'}",
            errors=exc.errors(include_url=False),
        ) from exc


class ReviewAssignmentTracker:
    """Creates review assignments, records responses, and detects panel completion."""

    def __init__(
        self,
        db: Session,
        *,
        directory: ReviewerDirectory,
        clock: Optional[Clock] = None,
    ) -> None:
        self.db = db
        self._directory = directory
        self._clock = clock or utcnow

    def now(self) -> datetime:
        return self._clock()

    def create_assignments(
        self,
        insight: models.Insight,
        reviewers: Sequence[models.Reviewer],
        *,
        criterion: ReviewCriterion,
        window: timedelta,
        cultural_track: bool = False,
    ) -> List[models.ReviewAssignment]:
        if not reviewers:
            return []

        already_assigned = {
            reviewer_id
            for (reviewer_id,) in self.db.query(models.ReviewAssignment.reviewer_id)
            .filter(models.ReviewAssignment.insight_id == insight.id)
            .all()
        }
        assigned_at = self.now()
        created: List[models.ReviewAssignment] = []
        for reviewer in reviewers:
            if reviewer.id in already_assigned:
                continue
            already_assigned.add(reviewer.id)
            assignment = models.ReviewAssignment(
                insight_id=insight.id,
                reviewer_id=reviewer.id,
                reviewer_role=reviewer.cultural_role,
                criterion=criterion.value,
                is_cultural_track=cultural_track,
                status=AssignmentStatus.ASSIGNED.value,
                assigned_at=assigned_at,
                deadline=assigned_at + window,
            )
            self.db.add(assignment)
            created.append(assignment)

        self.db.commit()
        for assignment in created:
            self.db.refresh(assignment)

        logger.info(
            "review_assignments_created",
            extra={
                "insight_id": insight.id,
                "count": len(created),
                "criterion": criterion.value,
                "cultural_track": cultural_track,
            },
        )
        return created

    def get(self, assignment_id: str) -> models.ReviewAssignment:
        assignment = (
            self.db.query(models.ReviewAssignment)
            .filter(models.ReviewAssignment.id == assignment_id)
            .first()
        )
        if not assignment:
            raise AssignmentNotFoundError(f"Review assignment {assignment_id} not found")
        return assignment

    def start_review(self, assignment_id: str) -> models.ReviewAssignment:
        assignment = self.get(assignment_id)
        if assignment.status == AssignmentStatus.IN_PROGRESS.value:
            return assignment
        if assignment.status != AssignmentStatus.ASSIGNED.value:
            raise AssignmentStateError(f"Review assignment {assignment_id} is already {assignment.status}")

        assignment.status = AssignmentStatus.IN_PROGRESS.value
        assignment.started_at = self.now()
        self.db.add(assignment)
        self.db.commit()
        self.db.refresh(assignment)
        return assignment

    def submit_response(
        self,
        assignment_id: str,
        payload: ResponsePayload,
    ) -> Tuple[models.ReviewResponse, models.ReviewAssignment]:
        """Persist a reviewer's response and close the assignment.

        Malformed payloads raise ReviewValidationError before anything is
        written. A second submission for the same assignment raises
        AssignmentStateError.
        """

        data = validate_response_payload(payload)
        assignment = self.get(assignment_id)
        if assignment.status not in {status.value for status in OPEN_ASSIGNMENT_STATUSES}:
            raise AssignmentStateError(f"Review assignment {assignment_id} is already {assignment.status}")

        completed_at = self.now()
        closed = self.db.execute(
            update(models.ReviewAssignment)
            .where(
                models.ReviewAssignment.id == assignment_id,
                models.ReviewAssignment.status.in_([status.value for status in OPEN_ASSIGNMENT_STATUSES]),
            )
            .values(status=AssignmentStatus.COMPLETED.value, completed_at=completed_at)
            .execution_options(synchronize_session=False)
        )
        if closed.rowcount == 0:
            self.db.rollback()
            raise AssignmentStateError(f"Review assignment {assignment_id} was completed concurrently")

        response = models.ReviewResponse(
            assignment_id=assignment.id,
            reviewer_id=assignment.reviewer_id,
            submitted_at=completed_at,
            **data.model_dump(mode="json"),
        )
        self.db.add(response)

        turnaround = completed_at - as_utc(assignment.assigned_at)
        self._directory.record_review_completed(
            assignment.reviewer_id,
            turnaround.total_seconds() / 86400.0,
        )

        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise AssignmentStateError(f"Review assignment {assignment_id} already has a response") from exc

        self.db.refresh(assignment)
        self.db.refresh(response)
        logger.info(
            "review_response_submitted",
            extra={
                "assignment_id": assignment.id,
                "insight_id": assignment.insight_id,
                "reviewer_id": assignment.reviewer_id,
                "recommendation": response.recommendation,
            },
        )
        return response, assignment

    def list_for_insight(self, insight_id: str) -> List[models.ReviewAssignment]:
        return (
            self.db.query(models.ReviewAssignment)
            .filter(models.ReviewAssignment.insight_id == insight_id)
            .order_by(models.ReviewAssignment.assigned_at.asc())
            .all()
        )

    def list_for_reviewer(
        self,
        reviewer_id: int,
        status: Optional[AssignmentStatus] = None,
    ) -> List[models.ReviewAssignment]:
        query = self.db.query(models.ReviewAssignment).filter(
            models.ReviewAssignment.reviewer_id == reviewer_id
        )
        if status is not None:
            query = query.filter(models.ReviewAssignment.status == status.value)
        return query.order_by(models.ReviewAssignment.assigned_at.desc()).all()

    def is_panel_complete(self, insight_id: str) -> bool:
        statuses = [
            status
            for (status,) in self.db.query(models.ReviewAssignment.status)
            .filter(models.ReviewAssignment.insight_id == insight_id)
            .all()
        ]
        return bool(statuses) and all(status == AssignmentStatus.COMPLETED.value for status in statuses)

    def responses_for_insight(self, insight_id: str) -> List[models.ReviewResponse]:
        return (
            self.db.query(models.ReviewResponse)
            .join(models.ReviewAssignment, models.ReviewResponse.assignment_id == models.ReviewAssignment.id)
            .filter(models.ReviewAssignment.insight_id == insight_id)
            .order_by(models.ReviewResponse.submitted_at.asc(), models.ReviewResponse.id.asc())
            .all()
        )

    def overdue_assignments(self, now: Optional[datetime] = None) -> List[models.ReviewAssignment]:
        """Open assignments past their deadline. Reminders are sent by an external process."""

        cutoff = now or self.now()
        open_assignments = (
            self.db.query(models.ReviewAssignment)
            .filter(
                models.ReviewAssignment.status.in_([status.value for status in OPEN_ASSIGNMENT_STATUSES])
            )
            .order_by(models.ReviewAssignment.deadline.asc())
            .all()
        )
        return [assignment for assignment in open_assignments if as_utc(assignment.deadline) < as_utc(cutoff)]
