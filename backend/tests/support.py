"""Fakes and payload builders shared by the validation engine tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from insight_validation import models
from insight_validation.errors import ReviewerNotFoundError
from insight_validation.services.integration_dispatcher import IntegrationRecord
from insight_validation.statuses import CULTURAL_REVIEWER_ROLES


class FakeClock:
    def __init__(self, start: Optional[datetime] = None) -> None:
        self.current = start or datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: List[Dict[str, Any]] = []

    def send(self, recipients: Sequence[str], message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        self.sent.append({"recipients": list(recipients), "message": message, "context": context or {}})


class RecordingIntegrationStore:
    def __init__(self, *, fail_with: Optional[Exception] = None) -> None:
        self.records: List[IntegrationRecord] = []
        self.fail_with = fail_with

    def write(self, record: IntegrationRecord) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.records.append(record)


class InMemoryReviewerDirectory:
    """Directory fake keeping reviewers in registration order."""

    def __init__(self, reviewers: Iterable[models.Reviewer] = ()) -> None:
        self._reviewers: Dict[int, models.Reviewer] = {}
        self.completed: List[tuple] = []
        for reviewer in reviewers:
            self.add(reviewer)

    def add(self, reviewer: models.Reviewer) -> models.Reviewer:
        if reviewer.id is None:
            reviewer.id = len(self._reviewers) + 1
        reviewer.total_reviews = reviewer.total_reviews or 0
        reviewer.average_turnaround_days = reviewer.average_turnaround_days or 0.0
        self._reviewers[reviewer.id] = reviewer
        return reviewer

    def get(self, reviewer_id: int) -> models.Reviewer:
        if reviewer_id not in self._reviewers:
            raise ReviewerNotFoundError(f"Reviewer {reviewer_id} not found")
        return self._reviewers[reviewer_id]

    def find_available(self, community_id: str, expertise_tags: Iterable[str]) -> List[models.Reviewer]:
        wanted = set(expertise_tags)
        return [
            reviewer
            for reviewer in self._reviewers.values()
            if reviewer.community_id == community_id
            and reviewer.is_available
            and wanted.intersection(reviewer.expertise_areas or [])
        ]

    def find_cultural_reviewers(self, community_id: str) -> List[models.Reviewer]:
        roles = {role.value for role in CULTURAL_REVIEWER_ROLES}
        return [
            reviewer
            for reviewer in self._reviewers.values()
            if reviewer.community_id == community_id and reviewer.is_available and reviewer.cultural_role in roles
        ]

    def set_availability(self, reviewer_id: int, is_available: bool) -> models.Reviewer:
        reviewer = self.get(reviewer_id)
        reviewer.is_available = is_available
        return reviewer

    def record_review_completed(self, reviewer_id: int, turnaround_days: float) -> None:
        self.completed.append((reviewer_id, turnaround_days))


def make_reviewer(
    reviewer_id: Optional[int] = None,
    *,
    community_id: str = "community-1",
    role: str = "community_member",
    accuracy: float = 0.8,
    turnaround: float = 2.0,
    expertise: Sequence[str] = ("service_gap",),
    available: bool = True,
) -> models.Reviewer:
    return models.Reviewer(
        id=reviewer_id,
        community_id=community_id,
        cultural_role=role,
        accuracy_rating=accuracy,
        average_turnaround_days=turnaround,
        expertise_areas=list(expertise),
        is_available=available,
        total_reviews=0,
    )


def review_payload(
    *,
    accuracy: int = 4,
    relevance: int = 4,
    completeness: int = 4,
    cultural: int = 5,
    overall: int = 4,
    recommendation: str = "approve",
    concerns: Sequence[str] = (),
    suggestions: Sequence[str] = (),
    confidence: float = 0.8,
) -> Dict[str, Any]:
    return {
        "accuracy_score": accuracy,
        "relevance_score": relevance,
        "completeness_score": completeness,
        "cultural_appropriateness_score": cultural,
        "overall_rating": overall,
        "feedback_comments": "Reviewed against community records.",
        "suggested_improvements": list(suggestions),
        "cultural_concerns": list(concerns),
        "factual_corrections": [],
        "recommendation": recommendation,
        "confidence_level": confidence,
    }


def service_gap_insight(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "category": "service_gap",
        "title": "No after-hours youth support",
        "description": "Young people report nowhere to go after 6pm.",
        "content": {
            "service_area": "youth_services",
            "severity": "high",
            "affected_groups": ["youth 12-17", "families"],
        },
        "community_id": "community-1",
        "source_documents": ["doc-1", "doc-2"],
        "ai_confidence": 0.82,
    }
    payload.update(overrides)
    return payload

