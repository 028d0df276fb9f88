"""Rank reviewers and pick a bounded review panel."""

from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, Sequence

from insight_validation.config_validation import SelectionWeights, ValidationPolicy
from insight_validation.statuses import CulturalRole


class ReviewerProfile(Protocol):
    id: int
    cultural_role: str
    accuracy_rating: float
    average_turnaround_days: float


def score_reviewer(reviewer: ReviewerProfile, weights: SelectionWeights) -> float:
    """Weighted preference for accurate, responsive reviewers, with an elder bonus."""

    responsiveness = 1.0 / (1.0 + max(0.0, float(reviewer.average_turnaround_days or 0.0)))
    is_elder = reviewer.cultural_role == CulturalRole.ELDER.value
    return (
        weights.accuracy * float(reviewer.accuracy_rating or 0.0)
        + weights.responsiveness * responsiveness
        + weights.elder_bonus * (1.0 if is_elder else 0.0)
    )


def rank_reviewers(
    candidates: Iterable[ReviewerProfile],
    weights: SelectionWeights,
) -> List[ReviewerProfile]:
    seen: set[int] = set()
    unique: List[ReviewerProfile] = []
    for candidate in candidates:
        if candidate.id in seen:
            continue
        seen.add(candidate.id)
        unique.append(candidate)
    # sorted() is stable, so equal scores keep insertion order
    return sorted(unique, key=lambda reviewer: score_reviewer(reviewer, weights), reverse=True)


def select_panel(
    candidates: Sequence[ReviewerProfile],
    policy: ValidationPolicy,
    *,
    size: Optional[int] = None,
) -> List[ReviewerProfile]:
    """Return up to ``size`` reviewers, best first. An empty pool yields an empty panel."""

    limit = policy.panel_size if size is None else size
    if limit <= 0:
        return []
    return rank_reviewers(candidates, policy.weights)[:limit]
