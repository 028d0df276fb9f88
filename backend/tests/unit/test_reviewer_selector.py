from __future__ import annotations

import pytest

from insight_validation.config_validation import SelectionWeights, ValidationPolicy
from insight_validation.services.reviewer_selector import rank_reviewers, score_reviewer, select_panel
from support import make_reviewer


def test_score_weights_accuracy_responsiveness_and_elder_bonus() -> None:
    weights = SelectionWeights()
    member = make_reviewer(1, accuracy=0.8, turnaround=1.0)
    elder = make_reviewer(2, role="elder", accuracy=0.8, turnaround=1.0)

    assert score_reviewer(member, weights) == pytest.approx(0.5 * 0.8 + 0.3 * 0.5)
    assert score_reviewer(elder, weights) == pytest.approx(0.5 * 0.8 + 0.3 * 0.5 + 0.2)


def test_missing_stats_score_as_new_reviewer() -> None:
    reviewer = make_reviewer(1, accuracy=0.0, turnaround=0.0)
    reviewer.average_turnaround_days = None

    assert score_reviewer(reviewer, SelectionWeights()) == pytest.approx(0.3)


def test_rank_prefers_accurate_fast_reviewers() -> None:
    slow = make_reviewer(1, accuracy=0.9, turnaround=9.0)
    fast = make_reviewer(2, accuracy=0.9, turnaround=0.0)
    sloppy = make_reviewer(3, accuracy=0.1, turnaround=0.0)

    ranked = rank_reviewers([slow, sloppy, fast], SelectionWeights())

    assert [reviewer.id for reviewer in ranked] == [2, 1, 3]


def test_ties_keep_directory_order() -> None:
    reviewers = [make_reviewer(reviewer_id) for reviewer_id in (4, 2, 9, 1)]

    ranked = rank_reviewers(reviewers, SelectionWeights())

    assert [reviewer.id for reviewer in ranked] == [4, 2, 9, 1]


def test_duplicate_candidates_are_ranked_once() -> None:
    reviewer = make_reviewer(7)

    assert rank_reviewers([reviewer, reviewer], SelectionWeights()) == [reviewer]


def test_panel_is_capped_at_policy_size() -> None:
    reviewers = [make_reviewer(reviewer_id, accuracy=reviewer_id / 10) for reviewer_id in range(1, 6)]

    panel = select_panel(reviewers, ValidationPolicy())

    assert [reviewer.id for reviewer in panel] == [5, 4, 3]


def test_small_pool_returns_everyone() -> None:
    reviewers = [make_reviewer(1), make_reviewer(2)]

    assert len(select_panel(reviewers, ValidationPolicy(), size=5)) == 2


def test_empty_pool_yields_empty_panel() -> None:
    assert select_panel([], ValidationPolicy()) == []
    assert select_panel([make_reviewer(1)], ValidationPolicy(), size=0) == []
