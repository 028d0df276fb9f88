"""Aggregate a completed review panel into validation metrics."""

from __future__ import annotations

from collections import Counter
from statistics import fmean, pvariance
from typing import Iterable, List, Optional, Protocol, Sequence

from insight_validation.config_validation import DecisionThresholds, ValidationPolicy
from insight_validation.errors import EmptyPanelError
from insight_validation.schemas import ValidationMetrics
from insight_validation.schemas.review import recommendation_summary_from_counts

# Largest population variance a 1-5 scale can produce.
MAX_RATING_VARIANCE = 4.0


class ScoredResponse(Protocol):
    accuracy_score: int
    relevance_score: int
    completeness_score: int
    cultural_appropriateness_score: int
    overall_rating: int
    recommendation: str
    cultural_concerns: Sequence[str]
    suggested_improvements: Sequence[str]


def consensus_level(overall_ratings: Sequence[float]) -> float:
    """1.0 for unanimous ratings, falling towards 0 as ratings spread."""

    if not overall_ratings:
        raise EmptyPanelError("Cannot measure consensus without ratings")
    return max(0.0, 1.0 - pvariance(overall_ratings) / MAX_RATING_VARIANCE)


def common_items(
    per_response_items: Iterable[Iterable[str]],
    *,
    min_mentions: int = 2,
    limit: int = 5,
) -> List[str]:
    """Items raised by at least ``min_mentions`` reviewers, most frequent first.

    Each reviewer counts once per item; ties keep first-seen order.
    """

    counts: Counter[str] = Counter()
    first_seen: List[str] = []
    for items in per_response_items:
        for item in dict.fromkeys(entry.strip() for entry in items or [] if entry and entry.strip()):
            if item not in counts:
                first_seen.append(item)
            counts[item] += 1

    frequent = [item for item in first_seen if counts[item] >= min_mentions]
    frequent.sort(key=lambda item: counts[item], reverse=True)
    return frequent[:limit]


def compute_validation_metrics(
    insight_id: str,
    responses: Sequence[ScoredResponse],
    *,
    total_reviewers: Optional[int] = None,
    policy: Optional[ValidationPolicy] = None,
) -> ValidationMetrics:
    if not responses:
        raise EmptyPanelError(f"No review responses recorded for insight {insight_id}")

    thresholds = policy.thresholds if policy else DecisionThresholds()
    min_mentions = policy.common_items_min_mentions if policy else 2
    limit = policy.common_items_limit if policy else 5

    average_accuracy = fmean(r.accuracy_score for r in responses)
    average_relevance = fmean(r.relevance_score for r in responses)
    average_completeness = fmean(r.completeness_score for r in responses)
    average_cultural = fmean(r.cultural_appropriateness_score for r in responses)
    overall_score = fmean([average_accuracy, average_relevance, average_completeness, average_cultural])

    recommendation_counts = Counter(str(getattr(r.recommendation, "value", r.recommendation)) for r in responses)

    cultural_compliance = average_cultural >= thresholds.cultural_compliance_min_score and all(
        not (r.cultural_concerns or []) for r in responses
    )

    return ValidationMetrics(
        insight_id=insight_id,
        total_validators=max(total_reviewers or 0, len(responses)),
        completed_validations=len(responses),
        average_accuracy=average_accuracy,
        average_relevance=average_relevance,
        average_completeness=average_completeness,
        average_cultural_appropriateness=average_cultural,
        overall_validation_score=overall_score,
        consensus_level=consensus_level([r.overall_rating for r in responses]),
        cultural_compliance=cultural_compliance,
        recommendation_summary=recommendation_summary_from_counts(dict(recommendation_counts)),
        common_concerns=common_items(
            (r.cultural_concerns for r in responses), min_mentions=min_mentions, limit=limit
        ),
        improvement_suggestions=common_items(
            (r.suggested_improvements for r in responses), min_mentions=min_mentions, limit=limit
        ),
    )
