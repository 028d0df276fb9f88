"""Pydantic schemas for reviewer directory maintenance."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from insight_validation.statuses import CulturalRole


class ReviewerCreate(BaseModel):
    community_id: str = Field(min_length=1)
    user_id: Optional[str] = None
    display_name: Optional[str] = None
    expertise_areas: List[str] = Field(default_factory=list)
    cultural_role: CulturalRole = CulturalRole.COMMUNITY_MEMBER
    is_available: bool = True
    preferred_languages: List[str] = Field(default_factory=list)
    accuracy_rating: float = Field(default=0.0, ge=0.0, le=1.0)


class ReviewerAvailabilityUpdate(BaseModel):
    is_available: bool


class ReviewerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    community_id: str
    user_id: Optional[str] = None
    display_name: Optional[str] = None
    expertise_areas: List[str] = Field(default_factory=list)
    cultural_role: str
    is_available: bool
    preferred_languages: List[str] = Field(default_factory=list)
    total_reviews: int
    accuracy_rating: float
    average_turnaround_days: float
    created_at: datetime
