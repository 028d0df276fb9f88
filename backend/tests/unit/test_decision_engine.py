from __future__ import annotations

import pytest

from insight_validation.config_validation import DecisionThresholds
from insight_validation.schemas import RecommendationSummary, ValidationMetrics
from insight_validation.services.decision_engine import decide, may_promote


def _metrics(
    *,
    score: float = 4.5,
    consensus: float = 0.9,
    cultural: float = 4.5,
    compliant: bool = True,
    **tally: int,
) -> ValidationMetrics:
    return ValidationMetrics(
        insight_id="insight-1",
        total_validators=3,
        completed_validations=3,
        average_accuracy=score,
        average_relevance=score,
        average_completeness=score,
        average_cultural_appropriateness=cultural,
        overall_validation_score=score,
        consensus_level=consensus,
        cultural_compliance=compliant,
        recommendation_summary=RecommendationSummary(**tally),
    )


@pytest.mark.parametrize(
    "metrics, expected",
    [
        (_metrics(approve=2, reject=1), "validated"),
        (_metrics(approve=1, reject=1), "validated"),
        (_metrics(approve=0, reject=2, approve_with_changes=1), "needs_revision"),
        (_metrics(approve=0, reject=3), "rejected"),
        (_metrics(consensus=0.5, approve=3), "needs_revision"),
        (_metrics(score=3.0, approve=3), "needs_revision"),
        (_metrics(score=2.99, approve=3), "rejected"),
        (_metrics(score=4.0, consensus=0.7, approve=3), "validated"),
    ],
)
def test_validation_status_thresholds(metrics: ValidationMetrics, expected: str) -> None:
    assert decide(metrics).validation_status == expected


@pytest.mark.parametrize(
    "cultural, compliant, expected",
    [
        (4.0, True, "approved"),
        (5.0, False, "concerns"),
        (3.9, True, "concerns"),
        (3.0, True, "concerns"),
        (2.5, True, "rejected"),
    ],
)
def test_cultural_verdict_is_independent_of_status(cultural: float, compliant: bool, expected: str) -> None:
    decision = decide(_metrics(cultural=cultural, compliant=compliant, approve=3))

    assert decision.validation_status == "validated"
    assert decision.cultural_appropriateness == expected


def test_decide_is_deterministic() -> None:
    metrics = _metrics(score=3.7, consensus=0.4, approve=1, reject=1, approve_with_changes=1)

    assert {decide(metrics) for _ in range(5)} == {decide(metrics)}


def test_custom_thresholds_are_honoured() -> None:
    strict = DecisionThresholds(validated_min_score=4.8)

    assert decide(_metrics(approve=3), strict).validation_status == "needs_revision"


@pytest.mark.parametrize(
    "status, verdict, expected",
    [
        ("validated", "approved", True),
        ("validated", "concerns", False),
        ("validated", "rejected", False),
        ("validated", "pending", False),
        ("needs_revision", "approved", False),
        ("rejected", "approved", False),
    ],
)
def test_only_validated_and_culturally_approved_insights_promote(status: str, verdict: str, expected: bool) -> None:
    assert may_promote(status, verdict) is expected
