from __future__ import annotations

from insight_validation.config_validation import DecisionThresholds
from insight_validation.schemas import ValidationDecision, ValidationMetrics
from insight_validation.statuses import CulturalVerdict, ValidationStatus


def derive_validation_status(metrics: ValidationMetrics, thresholds: DecisionThresholds) -> ValidationStatus:
    score = metrics.overall_validation_score
    tally = metrics.recommendation_summary

    if score >= thresholds.validated_min_score and metrics.consensus_level >= thresholds.validated_min_consensus:
        if tally.approve >= tally.reject:
            return ValidationStatus.VALIDATED
        if tally.approve_with_changes > 0:
            return ValidationStatus.NEEDS_REVISION
        return ValidationStatus.REJECTED
    if score >= thresholds.revision_min_score:
        return ValidationStatus.NEEDS_REVISION
    return ValidationStatus.REJECTED


def derive_cultural_verdict(metrics: ValidationMetrics, thresholds: DecisionThresholds) -> CulturalVerdict:
    average = metrics.average_cultural_appropriateness
    if metrics.cultural_compliance and average >= thresholds.cultural_approved_min_score:
        return CulturalVerdict.APPROVED
    if average >= thresholds.cultural_concerns_min_score:
        return CulturalVerdict.CONCERNS
    return CulturalVerdict.REJECTED


def decide(metrics: ValidationMetrics, thresholds: DecisionThresholds | None = None) -> ValidationDecision:
    """Map panel metrics to a validation status and an independent cultural verdict."""

    thresholds = thresholds or DecisionThresholds()
    return ValidationDecision(
        validation_status=derive_validation_status(metrics, thresholds).value,
        cultural_appropriateness=derive_cultural_verdict(metrics, thresholds).value,
    )


def may_promote(validation_status: str, cultural_appropriateness: str) -> bool:
    """Only validated insights with an approved cultural verdict reach downstream stores."""

    return (
        validation_status == ValidationStatus.VALIDATED.value
        and cultural_appropriateness == CulturalVerdict.APPROVED.value
    )
