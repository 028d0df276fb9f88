"""Screen insights for culturally sensitive content and route them to cultural authorities."""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any, Callable, Collection, Optional, Sequence

from insight_validation import models
from insight_validation.config_validation import DEFAULT_CULTURAL_KEYWORDS, ValidationPolicy
from insight_validation.services.assignment_tracker import ReviewAssignmentTracker
from insight_validation.services.reviewer_directory import ReviewerDirectory
from insight_validation.services.reviewer_selector import rank_reviewers
from insight_validation.statuses import ReviewCriterion


logger = logging.getLogger(__name__)

CulturalReviewPredicate = Callable[[Any], bool]


def serialize_content(content: Any) -> str:
    if hasattr(content, "model_dump"):
        content = content.model_dump(mode="json")
    return json.dumps(content, ensure_ascii=False, sort_keys=True, default=str)


def requires_cultural_review(content: Any, keywords: Sequence[str] = DEFAULT_CULTURAL_KEYWORDS) -> bool:
    """Keyword screen over the serialized content. Substring match, not semantic."""

    text = serialize_content(content).lower()
    return any(keyword in text for keyword in keywords)


def keyword_predicate(policy: ValidationPolicy) -> CulturalReviewPredicate:
    keywords = tuple(keyword.lower() for keyword in policy.cultural_keywords)

    def _predicate(content: Any) -> bool:
        return requires_cultural_review(content, keywords)

    return _predicate


class CulturalEscalationGate:
    def __init__(
        self,
        *,
        directory: ReviewerDirectory,
        tracker: ReviewAssignmentTracker,
        policy: ValidationPolicy,
        predicate: Optional[CulturalReviewPredicate] = None,
    ) -> None:
        self._directory = directory
        self._tracker = tracker
        self._policy = policy
        self._predicate = predicate or keyword_predicate(policy)

    def requires_review(self, content: Any) -> bool:
        return bool(self._predicate(content))

    def escalate(
        self,
        insight: models.Insight,
        *,
        exclude_reviewer_ids: Collection[int] = (),
    ) -> Optional[models.ReviewAssignment]:
        """Create the single cultural-track assignment, if a cultural reviewer is free.

        Returns None when nobody eligible is available; the insight's cultural
        state then stays pending until a manual reassignment.
        """

        excluded = set(exclude_reviewer_ids)
        candidates = [
            reviewer
            for reviewer in self._directory.find_cultural_reviewers(insight.community_id)
            if reviewer.id not in excluded
        ]
        if not candidates:
            logger.warning(
                "cultural_review_unassigned",
                extra={"insight_id": insight.id, "community_id": insight.community_id},
            )
            return None

        chosen = rank_reviewers(candidates, self._policy.weights)[0]
        assignments = self._tracker.create_assignments(
            insight,
            [chosen],
            criterion=ReviewCriterion.CULTURAL_APPROPRIATENESS,
            window=timedelta(days=self._policy.cultural_review_days),
            cultural_track=True,
        )
        logger.info(
            "cultural_review_assigned",
            extra={"insight_id": insight.id, "reviewer_id": chosen.id},
        )
        return assignments[0] if assignments else None
