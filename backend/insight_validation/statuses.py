"""Central definitions for insight categories, review roles, and lifecycle states."""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet


class InsightCategory(str, Enum):
    """Kinds of community insight the generator can propose."""

    COMMUNITY_NEED = "community_need"
    SERVICE_GAP = "service_gap"
    SUCCESS_PATTERN = "success_pattern"
    HEALTH_INDICATOR = "health_indicator"
    TREND_ANALYSIS = "trend_analysis"


class ValidationStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    VALIDATED = "validated"
    NEEDS_REVISION = "needs_revision"
    REJECTED = "rejected"


class CulturalVerdict(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    CONCERNS = "concerns"
    REJECTED = "rejected"


class CulturalRole(str, Enum):
    COMMUNITY_MEMBER = "community_member"
    ELDER = "elder"
    CULTURAL_AUTHORITY = "cultural_authority"
    SUBJECT_EXPERT = "subject_expert"


class ReviewCriterion(str, Enum):
    ACCURACY = "accuracy"
    CULTURAL_APPROPRIATENESS = "cultural_appropriateness"
    RELEVANCE = "relevance"
    COMPLETENESS = "completeness"


class AssignmentStatus(str, Enum):
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Recommendation(str, Enum):
    APPROVE = "approve"
    APPROVE_WITH_CHANGES = "approve_with_changes"
    REJECT = "reject"
    NEEDS_MORE_REVIEW = "needs_more_review"


class IntegrationStatus(str, Enum):
    """Whether a decided insight has reached its downstream store."""

    NOT_APPLICABLE = "not_applicable"
    AWAITING_CULTURAL_REVIEW = "awaiting_cultural_review"
    WITHHELD = "withheld"
    INTEGRATED = "integrated"
    FAILED = "failed"


TERMINAL_VALIDATION_STATUSES: FrozenSet[ValidationStatus] = frozenset(
    {
        ValidationStatus.VALIDATED,
        ValidationStatus.NEEDS_REVISION,
        ValidationStatus.REJECTED,
    }
)

CULTURAL_REVIEWER_ROLES: FrozenSet[CulturalRole] = frozenset(
    {CulturalRole.ELDER, CulturalRole.CULTURAL_AUTHORITY}
)

OPEN_ASSIGNMENT_STATUSES: FrozenSet[AssignmentStatus] = frozenset(
    {AssignmentStatus.ASSIGNED, AssignmentStatus.IN_PROGRESS}
)


def default_criterion_for(category: InsightCategory) -> ReviewCriterion:
    """Criterion a standard panel judges for a given insight category."""

    if category == InsightCategory.SUCCESS_PATTERN:
        return ReviewCriterion.RELEVANCE
    if category == InsightCategory.HEALTH_INDICATOR:
        return ReviewCriterion.COMPLETENESS
    return ReviewCriterion.ACCURACY
