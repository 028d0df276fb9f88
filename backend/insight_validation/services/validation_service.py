from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from insight_validation import models
from insight_validation.config_validation import ValidationPolicy, get_validation_policy
from insight_validation.errors import (
    AssignmentStateError,
    InsightNotFoundError,
    IntegrationConfigurationError,
    ReviewValidationError,
)
from insight_validation.schemas import (
    InsightCreate,
    ReviewerCreate,
    ValidationDecision,
    ValidationMetrics,
    ValidationMetricsResponse,
)
from insight_validation.services.assignment_tracker import (
    Clock,
    ResponsePayload,
    ReviewAssignmentTracker,
)
from insight_validation.services.consensus import compute_validation_metrics
from insight_validation.services.cultural_escalation import CulturalEscalationGate, CulturalReviewPredicate
from insight_validation.services.decision_engine import decide, derive_cultural_verdict, may_promote
from insight_validation.services.integration_dispatcher import (
    DispatchResult,
    IntegrationDispatcher,
    IntegrationStore,
    SqlIntegrationStore,
)
from insight_validation.services.notifications import NotificationSink, get_notification_sink, notify_safely
from insight_validation.services.reviewer_directory import ReviewerDirectory, SqlReviewerDirectory
from insight_validation.services.reviewer_selector import select_panel
from insight_validation.statuses import (
    TERMINAL_VALIDATION_STATUSES,
    AssignmentStatus,
    CulturalVerdict,
    InsightCategory,
    IntegrationStatus,
    ValidationStatus,
    default_criterion_for,
)

logger = logging.getLogger(__name__)


def _reviewer_recipient(reviewer: models.Reviewer) -> str:
    return reviewer.user_id or f"reviewer:{reviewer.id}"


def _stakeholder_recipients(insight: models.Insight) -> List[str]:
    return [f"community:{insight.community_id}"]


class IntelligenceValidationService:
    """Routes candidate insights through reviewer panels to a final decision.

    One instance wraps one database session; nothing is cached between
    requests, so every call reads assignment and response state fresh.
    """

    def __init__(
        self,
        db: Session,
        *,
        policy: Optional[ValidationPolicy] = None,
        directory: Optional[ReviewerDirectory] = None,
        notifier: Optional[NotificationSink] = None,
        integration_store: Optional[IntegrationStore] = None,
        cultural_predicate: Optional[CulturalReviewPredicate] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.db = db
        self.policy = policy or get_validation_policy()
        self.directory = directory or SqlReviewerDirectory(db)
        self.tracker = ReviewAssignmentTracker(db, directory=self.directory, clock=clock)
        self.cultural_gate = CulturalEscalationGate(
            directory=self.directory,
            tracker=self.tracker,
            policy=self.policy,
            predicate=cultural_predicate,
        )
        self.dispatcher = IntegrationDispatcher(integration_store or SqlIntegrationStore(db), clock=clock)
        self.notifier = notifier or get_notification_sink()

    # ------------------------------------------------------------------
    # Insight intake and reviewer assignment
    # ------------------------------------------------------------------

    def submit_insight_for_validation(
        self,
        payload: Union[InsightCreate, Mapping[str, Any]],
    ) -> models.Insight:
        data = payload if isinstance(payload, InsightCreate) else InsightCreate.model_validate(payload)
        if data.supersedes_id:
            self.get_insight(data.supersedes_id)

        insight = models.Insight(
            category=data.category.value,
            title=data.title,
            description=data.description,
            content=data.content.model_dump(mode="json"),
            community_id=data.community_id,
            source_documents=list(data.source_documents),
            ai_confidence=data.ai_confidence,
            validation_status=ValidationStatus.PENDING.value,
            cultural_appropriateness=CulturalVerdict.PENDING.value,
            cultural_review_required=self.cultural_gate.requires_review(data.content),
            integration_status=IntegrationStatus.NOT_APPLICABLE.value,
            supersedes_id=data.supersedes_id,
        )
        self.db.add(insight)
        self.db.commit()
        self.db.refresh(insight)
        logger.info(
            "insight_submitted",
            extra={
                "insight_id": insight.id,
                "category": insight.category,
                "community_id": insight.community_id,
                "cultural_review_required": insight.cultural_review_required,
            },
        )

        self._assign_reviewers(insight)
        self.db.refresh(insight)
        return insight

    def _assign_reviewers(self, insight: models.Insight) -> List[models.ReviewAssignment]:
        category = InsightCategory(insight.category)
        existing = self.tracker.list_for_insight(insight.id)
        created: List[models.ReviewAssignment] = []

        if not any(not assignment.is_cultural_track for assignment in existing):
            candidates = self.directory.find_available(
                insight.community_id,
                self.policy.expertise_tags_for(category),
            )
            panel = select_panel(candidates, self.policy)
            if not panel:
                # Cultural escalation waits for a standard panel as well
                logger.warning(
                    "insight_awaiting_reviewers",
                    extra={"insight_id": insight.id, "community_id": insight.community_id},
                )
                return []
            created.extend(
                self.tracker.create_assignments(
                    insight,
                    panel,
                    criterion=default_criterion_for(category),
                    window=timedelta(days=self.policy.standard_review_days),
                )
            )

        has_cultural_track = any(assignment.is_cultural_track for assignment in existing)
        if insight.cultural_review_required and not has_cultural_track:
            panel_ids = {assignment.reviewer_id for assignment in existing + created}
            cultural = self.cultural_gate.escalate(insight, exclude_reviewer_ids=panel_ids)
            if cultural is not None:
                created.append(cultural)

        if created:
            # A decided insight only gains a cultural track; its status stays put
            if ValidationStatus(insight.validation_status) not in TERMINAL_VALIDATION_STATUSES:
                self._reopen_review(insight)
            self._notify_reviewers(insight, created)
        return created

    def _reopen_review(self, insight: models.Insight) -> None:
        insight.validation_status = ValidationStatus.IN_REVIEW.value
        if insight.cultural_review_required:
            insight.cultural_appropriateness = CulturalVerdict.PENDING.value
        self.db.add(insight)
        self.db.commit()

    def _notify_reviewers(self, insight: models.Insight, assignments: List[models.ReviewAssignment]) -> None:
        for assignment in assignments:
            reviewer = self.directory.get(assignment.reviewer_id)
            notify_safely(
                self.notifier,
                [_reviewer_recipient(reviewer)],
                f"New insight review assigned: {insight.title}",
                context={
                    "insight_id": insight.id,
                    "assignment_id": assignment.id,
                    "criterion": assignment.criterion,
                    "deadline": assignment.deadline.isoformat(),
                },
            )

    def reassign_stalled_insight(self, insight_id: str) -> List[models.ReviewAssignment]:
        """Retry reviewer selection for an insight that could not be staffed.

        Applies to insights still pending for lack of reviewers, and to
        insights whose cultural escalation found no cultural reviewer. A
        validated insight keeps its status while the cultural track runs.
        """

        insight = self.get_insight(insight_id)
        assignments = self.tracker.list_for_insight(insight.id)
        awaiting_panel = insight.validation_status == ValidationStatus.PENDING.value
        awaiting_cultural = (
            insight.cultural_review_required
            and insight.validation_status in (ValidationStatus.IN_REVIEW.value, ValidationStatus.VALIDATED.value)
            and not any(assignment.is_cultural_track for assignment in assignments)
        )
        if not (awaiting_panel or awaiting_cultural):
            raise AssignmentStateError(f"Insight {insight_id} is not awaiting reviewers")

        created = self._assign_reviewers(insight)
        logger.info(
            "stalled_insight_reassigned",
            extra={"insight_id": insight.id, "created": len(created)},
        )
        return created

    # ------------------------------------------------------------------
    # Review responses and panel completion
    # ------------------------------------------------------------------

    def start_review(self, assignment_id: str) -> models.ReviewAssignment:
        return self.tracker.start_review(assignment_id)

    def submit_review_response(self, assignment_id: str, payload: ResponsePayload) -> models.ReviewResponse:
        response, assignment = self.tracker.submit_response(assignment_id, payload)
        if self.tracker.is_panel_complete(assignment.insight_id):
            self.finalize_insight(assignment.insight_id)
        return response

    def finalize_insight(self, insight_id: str) -> ValidationDecision:
        """Compute metrics for a complete panel and record the decision.

        Safe to run more than once: metrics are upserted by insight id and
        the status transition only applies while the insight is in review,
        so a concurrent second run neither changes the outcome nor repeats
        the downstream write. An insight decided before its cultural track
        was staffed keeps its validation status; only the cultural verdict
        is recorded once that review lands.
        """

        insight = self.get_insight(insight_id)
        if not self.tracker.is_panel_complete(insight_id):
            raise AssignmentStateError(f"Insight {insight_id} still has open review assignments")

        if insight.validation_status != ValidationStatus.IN_REVIEW.value:
            if insight.integration_status == IntegrationStatus.AWAITING_CULTURAL_REVIEW.value:
                return self._finalize_cultural_review(insight)
            logger.info("insight_decision_already_recorded", extra={"insight_id": insight_id})
            return ValidationDecision(
                validation_status=insight.validation_status,
                cultural_appropriateness=insight.cultural_appropriateness,
            )

        assignments = self.tracker.list_for_insight(insight_id)
        responses = self.tracker.responses_for_insight(insight_id)
        metrics = compute_validation_metrics(
            insight_id,
            responses,
            total_reviewers=len(assignments),
            policy=self.policy,
        )
        self._store_metrics(metrics)

        decision = decide(metrics, self.policy.thresholds)
        cultural_outstanding = insight.cultural_review_required and not any(
            assignment.is_cultural_track for assignment in assignments
        )
        cultural_verdict = (
            CulturalVerdict.PENDING.value if cultural_outstanding else decision.cultural_appropriateness
        )

        if decision.validation_status != ValidationStatus.VALIDATED.value:
            integration_status = IntegrationStatus.NOT_APPLICABLE
        elif cultural_outstanding:
            integration_status = IntegrationStatus.AWAITING_CULTURAL_REVIEW
        elif may_promote(decision.validation_status, cultural_verdict):
            integration_status = IntegrationStatus.NOT_APPLICABLE
        else:
            integration_status = IntegrationStatus.WITHHELD

        transitioned = self.db.execute(
            update(models.Insight)
            .where(
                models.Insight.id == insight_id,
                models.Insight.validation_status == ValidationStatus.IN_REVIEW.value,
            )
            .values(
                validation_status=decision.validation_status,
                validation_score=metrics.overall_validation_score,
                cultural_appropriateness=cultural_verdict,
                integration_status=integration_status.value,
                updated_at=self.tracker.now(),
            )
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self.db.refresh(insight)

        if transitioned.rowcount == 0:
            logger.info("insight_decision_already_recorded", extra={"insight_id": insight_id})
            return decision

        logger.info(
            "insight_decided",
            extra={
                "insight_id": insight_id,
                "validation_status": decision.validation_status,
                "cultural_appropriateness": cultural_verdict,
                "overall_validation_score": metrics.overall_validation_score,
                "consensus_level": metrics.consensus_level,
            },
        )

        if may_promote(insight.validation_status, insight.cultural_appropriateness):
            self._integrate(insight)
        elif integration_status == IntegrationStatus.WITHHELD:
            logger.warning(
                "validated_insight_withheld",
                extra={"insight_id": insight_id, "cultural_appropriateness": cultural_verdict},
            )
        return decision

    def _finalize_cultural_review(self, insight: models.Insight) -> ValidationDecision:
        recorded = ValidationDecision(
            validation_status=insight.validation_status,
            cultural_appropriateness=insight.cultural_appropriateness,
        )
        assignments = self.tracker.list_for_insight(insight.id)
        if not any(assignment.is_cultural_track for assignment in assignments):
            return recorded

        metrics = compute_validation_metrics(
            insight.id,
            self.tracker.responses_for_insight(insight.id),
            total_reviewers=len(assignments),
            policy=self.policy,
        )
        self._store_metrics(metrics)
        verdict = derive_cultural_verdict(metrics, self.policy.thresholds).value
        promotable = may_promote(insight.validation_status, verdict)
        integration_status = IntegrationStatus.NOT_APPLICABLE if promotable else IntegrationStatus.WITHHELD

        recorded_verdict = self.db.execute(
            update(models.Insight)
            .where(
                models.Insight.id == insight.id,
                models.Insight.validation_status == insight.validation_status,
                models.Insight.integration_status == IntegrationStatus.AWAITING_CULTURAL_REVIEW.value,
            )
            .values(
                cultural_appropriateness=verdict,
                integration_status=integration_status.value,
                updated_at=self.tracker.now(),
            )
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        self.db.refresh(insight)

        if recorded_verdict.rowcount == 0:
            logger.info("cultural_verdict_already_recorded", extra={"insight_id": insight.id})
            return recorded

        logger.info(
            "cultural_verdict_recorded",
            extra={
                "insight_id": insight.id,
                "validation_status": insight.validation_status,
                "cultural_appropriateness": verdict,
            },
        )
        if promotable:
            self._integrate(insight)
        else:
            logger.warning(
                "validated_insight_withheld",
                extra={"insight_id": insight.id, "cultural_appropriateness": verdict},
            )
        return ValidationDecision(validation_status=insight.validation_status, cultural_appropriateness=verdict)

    def _store_metrics(self, metrics: ValidationMetrics) -> models.ValidationMetricsRecord:
        payload = metrics.model_dump(mode="json")
        calculated_at = self.tracker.now()
        record = self.db.get(models.ValidationMetricsRecord, metrics.insight_id)
        if record is None:
            record = models.ValidationMetricsRecord(
                insight_id=metrics.insight_id,
                metrics=payload,
                calculated_at=calculated_at,
            )
        else:
            record.metrics = payload
            record.calculated_at = calculated_at
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # Another submission inserted the row first; overwrite with the same result
            self.db.rollback()
            record = self.db.get(models.ValidationMetricsRecord, metrics.insight_id)
            record.metrics = payload
            record.calculated_at = calculated_at
            self.db.add(record)
            self.db.commit()
        return record

    # ------------------------------------------------------------------
    # Downstream integration
    # ------------------------------------------------------------------

    def _integrate(self, insight: models.Insight) -> Optional[DispatchResult]:
        try:
            result = self.dispatcher.dispatch(insight)
        except IntegrationConfigurationError as exc:
            logger.exception(
                "integration_configuration_error",
                extra={"insight_id": insight.id, "category": insight.category},
            )
            self._flag_integration(insight, IntegrationStatus.FAILED, str(exc))
            return None

        if result.written:
            self._flag_integration(insight, IntegrationStatus.INTEGRATED, None)
            notify_safely(
                self.notifier,
                _stakeholder_recipients(insight),
                f"Validated insight available: {insight.title}",
                context={"insight_id": insight.id, "target": result.target.value},
            )
        else:
            self._flag_integration(insight, IntegrationStatus.FAILED, result.error)
        return result

    def _flag_integration(
        self,
        insight: models.Insight,
        status: IntegrationStatus,
        error: Optional[str],
    ) -> None:
        insight.integration_status = status.value
        insight.integration_error = error
        self.db.add(insight)
        self.db.commit()
        self.db.refresh(insight)

    def retry_integration(self, insight_id: str) -> DispatchResult:
        """Re-run the downstream write for a promotable insight whose dispatch failed.

        Unlike the automatic path, configuration errors propagate to the caller.
        """

        insight = self.get_insight(insight_id)
        if not may_promote(insight.validation_status, insight.cultural_appropriateness):
            raise AssignmentStateError(
                f"Insight {insight_id} is {insight.validation_status}/{insight.cultural_appropriateness} "
                "and cannot be promoted"
            )
        if insight.integration_status == IntegrationStatus.INTEGRATED.value:
            raise AssignmentStateError(f"Insight {insight_id} is already integrated")

        try:
            result = self.dispatcher.dispatch(insight)
        except IntegrationConfigurationError as exc:
            self._flag_integration(insight, IntegrationStatus.FAILED, str(exc))
            raise

        if result.written:
            self._flag_integration(insight, IntegrationStatus.INTEGRATED, None)
        else:
            self._flag_integration(insight, IntegrationStatus.FAILED, result.error)
        return result

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def get_insight(self, insight_id: str) -> models.Insight:
        insight = self.db.query(models.Insight).filter(models.Insight.id == insight_id).first()
        if not insight:
            raise InsightNotFoundError(f"Insight {insight_id} not found")
        return insight

    def get_validation_metrics(self, insight_id: str) -> Optional[ValidationMetricsResponse]:
        self.get_insight(insight_id)
        record = self.db.get(models.ValidationMetricsRecord, insight_id)
        if record is None:
            return None
        return ValidationMetricsResponse(**record.metrics, calculated_at=record.calculated_at)

    def get_validated_insights(
        self,
        community_id: Optional[str] = None,
        category: Optional[Union[InsightCategory, str]] = None,
    ) -> List[models.Insight]:
        query = self.db.query(models.Insight).filter(
            models.Insight.validation_status == ValidationStatus.VALIDATED.value
        )
        if community_id:
            query = query.filter(models.Insight.community_id == community_id)
        if category:
            value = category.value if isinstance(category, InsightCategory) else category
            query = query.filter(models.Insight.category == value)
        return query.order_by(models.Insight.created_at.desc()).all()

    def list_insight_assignments(self, insight_id: str) -> List[models.ReviewAssignment]:
        self.get_insight(insight_id)
        return self.tracker.list_for_insight(insight_id)

    def get_review_assignments(
        self,
        reviewer_id: int,
        status: Optional[AssignmentStatus] = None,
    ) -> List[models.ReviewAssignment]:
        self.directory.get(reviewer_id)
        return self.tracker.list_for_reviewer(reviewer_id, status)

    def overdue_assignments(self) -> List[models.ReviewAssignment]:
        return self.tracker.overdue_assignments()

    # ------------------------------------------------------------------
    # Reviewer directory maintenance
    # ------------------------------------------------------------------

    def register_reviewer(self, payload: Union[ReviewerCreate, Mapping[str, Any]]) -> models.Reviewer:
        try:
            data = payload if isinstance(payload, ReviewerCreate) else ReviewerCreate.model_validate(payload)
        except ValidationError as exc:
            raise ReviewValidationError("Invalid reviewer registration", errors=exc.errors(include_url=False)) from exc
        reviewer = models.Reviewer(
            community_id=data.community_id,
            user_id=data.user_id,
            display_name=data.display_name,
            expertise_areas=list(data.expertise_areas),
            cultural_role=data.cultural_role.value,
            is_available=data.is_available,
            preferred_languages=list(data.preferred_languages),
            accuracy_rating=data.accuracy_rating,
        )
        return self.directory.add(reviewer)

    def get_reviewer(self, reviewer_id: int) -> models.Reviewer:
        return self.directory.get(reviewer_id)

    def set_reviewer_availability(self, reviewer_id: int, is_available: bool) -> models.Reviewer:
        return self.directory.set_availability(reviewer_id, is_available)
