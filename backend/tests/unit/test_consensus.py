from __future__ import annotations

import pytest

from insight_validation.config_validation import ValidationPolicy
from insight_validation.errors import EmptyPanelError
from insight_validation.schemas import ReviewResponseCreate
from insight_validation.services.consensus import common_items, compute_validation_metrics, consensus_level
from insight_validation.services.decision_engine import decide
from support import review_payload


def _responses(*payloads):
    return [ReviewResponseCreate.model_validate(payload) for payload in payloads]


@pytest.mark.parametrize("k", [1, 2, 3, 4, 5])
def test_uniform_scores_give_full_consensus(k: int) -> None:
    responses = _responses(
        *[
            review_payload(accuracy=k, relevance=k, completeness=k, cultural=k, overall=k)
            for _ in range(3)
        ]
    )

    metrics = compute_validation_metrics("insight-1", responses)

    assert metrics.consensus_level == pytest.approx(1.0)
    assert metrics.average_accuracy == pytest.approx(k)
    assert metrics.average_relevance == pytest.approx(k)
    assert metrics.average_completeness == pytest.approx(k)
    assert metrics.average_cultural_appropriateness == pytest.approx(k)
    assert metrics.overall_validation_score == pytest.approx(k)


def test_three_approvals_with_one_lower_rating_validate() -> None:
    responses = _responses(
        review_payload(overall=5),
        review_payload(overall=5),
        review_payload(overall=4),
    )

    metrics = compute_validation_metrics("insight-1", responses, total_reviewers=3)

    assert metrics.overall_validation_score == pytest.approx(4.25)
    assert metrics.consensus_level == pytest.approx(1 - (2 / 9) / 4)
    assert metrics.cultural_compliance is True
    assert metrics.recommendation_summary.approve == 3
    assert metrics.total_validators == 3
    assert metrics.completed_validations == 3

    decision = decide(metrics)
    assert decision.validation_status == "validated"
    assert decision.cultural_appropriateness == "approved"


def test_low_scores_reject_regardless_of_consensus() -> None:
    low = dict(accuracy=2, relevance=2, completeness=2, cultural=2, recommendation="reject")
    responses = _responses(
        review_payload(overall=2, **low),
        review_payload(overall=2, **low),
        review_payload(overall=1, **low),
    )

    metrics = compute_validation_metrics("insight-1", responses)

    assert metrics.overall_validation_score == pytest.approx(2.0)
    assert metrics.recommendation_summary.reject == 3
    assert decide(metrics).validation_status == "rejected"


def test_metrics_are_repeatable() -> None:
    responses = _responses(
        review_payload(overall=3, concerns=["consent"]),
        review_payload(overall=5, concerns=["consent"]),
    )

    first = compute_validation_metrics("insight-1", responses)
    second = compute_validation_metrics("insight-1", responses)

    assert first == second


def test_consensus_is_clamped_for_maximum_spread() -> None:
    assert consensus_level([1, 5]) == pytest.approx(0.0)
    assert consensus_level([4]) == pytest.approx(1.0)


def test_empty_panel_is_rejected() -> None:
    with pytest.raises(EmptyPanelError):
        compute_validation_metrics("insight-1", [])
    with pytest.raises(EmptyPanelError):
        consensus_level([])


def test_any_cultural_concern_breaks_compliance() -> None:
    responses = _responses(
        review_payload(cultural=5),
        review_payload(cultural=5, concerns=["Names a private ceremony"]),
    )

    metrics = compute_validation_metrics("insight-1", responses)

    assert metrics.average_cultural_appropriateness == pytest.approx(5.0)
    assert metrics.cultural_compliance is False
    assert decide(metrics).cultural_appropriateness == "concerns"


def test_common_items_need_two_mentions_and_rank_by_frequency() -> None:
    items = common_items(
        [
            ["timeline", "funding", "funding"],
            ["funding", "staffing", "timeline"],
            ["staffing", "funding", "  "],
            ["one-off"],
        ]
    )

    # each reviewer counts once; timeline and staffing tie and keep first-seen order
    assert items == ["funding", "timeline", "staffing"]


def test_common_items_are_capped() -> None:
    shared = [f"item-{index}" for index in range(7)]

    assert common_items([shared, shared]) == shared[:5]
    assert common_items([shared, shared], limit=2) == shared[:2]


def test_policy_controls_common_item_threshold() -> None:
    policy = ValidationPolicy(common_items_min_mentions=1, common_items_limit=1)
    responses = _responses(
        review_payload(suggestions=["cite the survey"]),
        review_payload(suggestions=["add dates", "cite the survey"]),
    )

    metrics = compute_validation_metrics("insight-1", responses, policy=policy)

    assert metrics.improvement_suggestions == ["cite the survey"]
    assert metrics.common_concerns == []
