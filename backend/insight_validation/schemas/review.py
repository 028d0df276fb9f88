"""Pydantic schemas for review assignments, responses, and aggregate metrics."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from insight_validation.statuses import Recommendation


# Booleans and numeric strings are not scores
Score = Annotated[int, Field(ge=1, le=5, strict=True)]


class SourceVerification(BaseModel):
    sources_accurate: bool = True
    missing_sources: List[str] = Field(default_factory=list)
    additional_sources: List[str] = Field(default_factory=list)


class ReviewResponseCreate(BaseModel):
    """A reviewer's judgment of one insight. All scores use a 1-5 scale."""

    model_config = ConfigDict(extra="forbid")

    accuracy_score: Score
    relevance_score: Score
    completeness_score: Score
    cultural_appropriateness_score: Score
    overall_rating: Score
    feedback_comments: str = ""
    suggested_improvements: List[str] = Field(default_factory=list)
    cultural_concerns: List[str] = Field(default_factory=list)
    factual_corrections: List[str] = Field(default_factory=list)
    source_verification: SourceVerification = Field(default_factory=SourceVerification)
    recommendation: Recommendation
    confidence_level: float = Field(ge=0.0, le=1.0)


class ReviewResponseRead(ReviewResponseCreate):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    assignment_id: str
    reviewer_id: int
    submitted_at: datetime


class ReviewAssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    insight_id: str
    reviewer_id: int
    reviewer_role: str
    criterion: str
    is_cultural_track: bool
    status: str
    assigned_at: datetime
    deadline: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class RecommendationSummary(BaseModel):
    approve: int = 0
    approve_with_changes: int = 0
    reject: int = 0
    needs_more_review: int = 0


class ValidationMetrics(BaseModel):
    """Aggregate judgment of a completed review panel."""

    insight_id: str
    total_validators: int
    completed_validations: int
    average_accuracy: float
    average_relevance: float
    average_completeness: float
    average_cultural_appropriateness: float
    overall_validation_score: float
    consensus_level: float
    cultural_compliance: bool
    recommendation_summary: RecommendationSummary
    common_concerns: List[str] = Field(default_factory=list)
    improvement_suggestions: List[str] = Field(default_factory=list)


class ValidationDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    validation_status: str
    cultural_appropriateness: str


class ValidationMetricsResponse(ValidationMetrics):
    calculated_at: Optional[datetime] = None


def recommendation_summary_from_counts(counts: Dict[str, int]) -> RecommendationSummary:
    return RecommendationSummary(**{rec.value: counts.get(rec.value, 0) for rec in Recommendation})
