# backend/insight_validation/models/review.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from insight_validation.db.session import Base
from insight_validation.statuses import AssignmentStatus


class ReviewAssignment(Base):
    __tablename__ = "review_assignments"
    __table_args__ = (UniqueConstraint("insight_id", "reviewer_id", name="uq_assignment_insight_reviewer"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    insight_id: Mapped[str] = mapped_column(ForeignKey("insights.id", ondelete="CASCADE"), index=True)
    reviewer_id: Mapped[int] = mapped_column(ForeignKey("reviewers.id"), index=True)
    reviewer_role: Mapped[str] = mapped_column(String)
    criterion: Mapped[str] = mapped_column(String)
    is_cultural_track: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[str] = mapped_column(String, default=AssignmentStatus.ASSIGNED.value, index=True)

    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    insight = relationship("Insight", back_populates="assignments")
    reviewer = relationship("Reviewer")
    response = relationship(
        "ReviewResponse",
        back_populates="assignment",
        uselist=False,
        cascade="all, delete-orphan",
    )


class ReviewResponse(Base):
    __tablename__ = "review_responses"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    assignment_id: Mapped[str] = mapped_column(
        ForeignKey("review_assignments.id", ondelete="CASCADE"), unique=True, index=True
    )
    reviewer_id: Mapped[int] = mapped_column(Integer, index=True)

    accuracy_score: Mapped[int] = mapped_column(Integer)
    relevance_score: Mapped[int] = mapped_column(Integer)
    completeness_score: Mapped[int] = mapped_column(Integer)
    cultural_appropriateness_score: Mapped[int] = mapped_column(Integer)
    overall_rating: Mapped[int] = mapped_column(Integer)

    feedback_comments: Mapped[str] = mapped_column(Text, default="")
    suggested_improvements: Mapped[List[str]] = mapped_column(JSON, default=list)
    cultural_concerns: Mapped[List[str]] = mapped_column(JSON, default=list)
    factual_corrections: Mapped[List[str]] = mapped_column(JSON, default=list)
    source_verification: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)

    recommendation: Mapped[str] = mapped_column(String)
    confidence_level: Mapped[float] = mapped_column(Float)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    assignment = relationship("ReviewAssignment", back_populates="response")


class ValidationMetricsRecord(Base):
    __tablename__ = "validation_metrics"

    insight_id: Mapped[str] = mapped_column(ForeignKey("insights.id", ondelete="CASCADE"), primary_key=True)
    metrics: Mapped[Dict[str, Any]] = mapped_column(JSON)
    calculated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    insight = relationship("Insight", back_populates="metrics")
