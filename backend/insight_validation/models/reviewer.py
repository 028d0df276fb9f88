# backend/insight_validation/models/reviewer.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from insight_validation.db.session import Base
from insight_validation.statuses import CulturalRole


class Reviewer(Base):
    __tablename__ = "reviewers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)
    community_id: Mapped[str] = mapped_column(String, index=True)
    display_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    expertise_areas: Mapped[List[str]] = mapped_column(JSON, default=list)
    cultural_role: Mapped[str] = mapped_column(String, default=CulturalRole.COMMUNITY_MEMBER.value)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    preferred_languages: Mapped[List[str]] = mapped_column(JSON, default=list)

    total_reviews: Mapped[int] = mapped_column(Integer, default=0)
    accuracy_rating: Mapped[float] = mapped_column(Float, default=0.0)
    average_turnaround_days: Mapped[float] = mapped_column(Float, default=0.0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
