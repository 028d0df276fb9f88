# backend/insight_validation/models/insight.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from insight_validation.db.session import Base
from insight_validation.statuses import CulturalVerdict, IntegrationStatus, ValidationStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Insight(Base):
    __tablename__ = "insights"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid4()))
    category: Mapped[str] = mapped_column(String, index=True)
    title: Mapped[str] = mapped_column(String)
    description: Mapped[str] = mapped_column(Text, default="")
    content: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    community_id: Mapped[str] = mapped_column(String, index=True)
    source_documents: Mapped[List[str]] = mapped_column(JSON, default=list)
    ai_confidence: Mapped[float] = mapped_column(Float, default=0.0)

    validation_status: Mapped[str] = mapped_column(
        String, default=ValidationStatus.PENDING.value, index=True
    )
    validation_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    cultural_appropriateness: Mapped[str] = mapped_column(String, default=CulturalVerdict.PENDING.value)
    cultural_review_required: Mapped[bool] = mapped_column(Boolean, default=False)

    integration_status: Mapped[str] = mapped_column(
        String, default=IntegrationStatus.NOT_APPLICABLE.value
    )
    integration_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    supersedes_id: Mapped[Optional[str]] = mapped_column(ForeignKey("insights.id"), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    assignments = relationship(
        "ReviewAssignment",
        back_populates="insight",
        cascade="all, delete-orphan",
        order_by="ReviewAssignment.assigned_at.asc()",
    )
    metrics = relationship(
        "ValidationMetricsRecord",
        back_populates="insight",
        cascade="all, delete-orphan",
        uselist=False,
    )
