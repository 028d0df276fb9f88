from __future__ import annotations

import pytest

from insight_validation.config_validation import (
    DEFAULT_CULTURAL_KEYWORDS,
    ValidationPolicy,
    get_validation_policy,
    invalidate_cached_policy,
)
from insight_validation.statuses import InsightCategory, ReviewCriterion, default_criterion_for


@pytest.fixture(autouse=True)
def fresh_policy():
    invalidate_cached_policy()
    yield
    invalidate_cached_policy()


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "INSIGHT_VALIDATION_PANEL_SIZE",
        "INSIGHT_VALIDATION_REVIEW_DAYS",
        "INSIGHT_VALIDATION_CULTURAL_REVIEW_DAYS",
        "INSIGHT_VALIDATION_CULTURAL_KEYWORDS",
    ):
        monkeypatch.delenv(name, raising=False)

    policy = get_validation_policy()

    assert policy.panel_size == 3
    assert policy.standard_review_days == 7
    assert policy.cultural_review_days == 5
    assert policy.cultural_keywords == DEFAULT_CULTURAL_KEYWORDS
    assert policy.weights.accuracy == pytest.approx(0.5)
    assert policy.thresholds.validated_min_consensus == pytest.approx(0.7)
    assert get_validation_policy() is policy


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INSIGHT_VALIDATION_PANEL_SIZE", "5")
    monkeypatch.setenv("INSIGHT_VALIDATION_CULTURAL_KEYWORDS", " Totem, ,Language ")

    policy = get_validation_policy()

    assert policy.panel_size == 5
    assert policy.cultural_keywords == ("totem", "language")


def test_non_positive_panel_size_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INSIGHT_VALIDATION_PANEL_SIZE", "0")

    with pytest.raises(ValueError):
        get_validation_policy()


def test_weights_and_thresholds_follow_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INSIGHT_VALIDATION_WEIGHT_ELDER_BONUS", "0.35")
    monkeypatch.setenv("INSIGHT_VALIDATION_THRESHOLD_VALIDATED_MIN_CONSENSUS", "0.8")
    monkeypatch.setenv("INSIGHT_VALIDATION_THRESHOLD_CULTURAL_CONCERNS_MIN_SCORE", " ")

    policy = get_validation_policy()

    assert policy.weights.elder_bonus == pytest.approx(0.35)
    assert policy.weights.accuracy == pytest.approx(0.5)
    assert policy.thresholds.validated_min_consensus == pytest.approx(0.8)
    assert policy.thresholds.cultural_concerns_min_score == pytest.approx(3.0)


def test_negative_threshold_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INSIGHT_VALIDATION_THRESHOLD_REVISION_MIN_SCORE", "-1")

    with pytest.raises(ValueError):
        get_validation_policy()


def test_expertise_tags_default_to_category_value() -> None:
    policy = ValidationPolicy(expertise_tags={InsightCategory.SERVICE_GAP: ("service_gap", "transport")})

    assert policy.expertise_tags_for(InsightCategory.SERVICE_GAP) == ("service_gap", "transport")
    assert policy.expertise_tags_for(InsightCategory.TREND_ANALYSIS) == ("trend_analysis",)
    assert ValidationPolicy().expertise_tags_for(InsightCategory.COMMUNITY_NEED) == ("community_need",)


@pytest.mark.parametrize(
    "category, criterion",
    [
        (InsightCategory.SUCCESS_PATTERN, ReviewCriterion.RELEVANCE),
        (InsightCategory.HEALTH_INDICATOR, ReviewCriterion.COMPLETENESS),
        (InsightCategory.SERVICE_GAP, ReviewCriterion.ACCURACY),
        (InsightCategory.COMMUNITY_NEED, ReviewCriterion.ACCURACY),
    ],
)
def test_standard_review_criterion_follows_category(category: InsightCategory, criterion: ReviewCriterion) -> None:
    assert default_criterion_for(category) is criterion
