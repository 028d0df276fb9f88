"""Pydantic schemas for candidate insights and their category-specific content."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from insight_validation.statuses import InsightCategory


class _ContentBase(BaseModel):
    # Generators routinely attach extra context; keep it for cultural screening.
    model_config = ConfigDict(extra="allow")


class CommunityNeedContent(_ContentBase):
    # The generator labels the need in ``category``; ``need_type`` wins when both are sent
    category: Optional[str] = None
    need_type: Optional[str] = None
    urgency: Optional[str] = None

    @property
    def resolved_need_type(self) -> Optional[str]:
        return self.need_type or self.category


class ServiceGapContent(_ContentBase):
    service_area: Optional[str] = None
    severity: Optional[str] = None
    affected_groups: List[str] = Field(default_factory=list)


class SuccessPatternContent(_ContentBase):
    category: Optional[str] = None
    pattern_category: Optional[str] = None
    metrics: Dict[str, Any] = Field(default_factory=dict)
    factors: List[str] = Field(default_factory=list)
    replication_potential: Optional[str] = None

    @property
    def resolved_pattern_category(self) -> Optional[str]:
        return self.pattern_category or self.category


class HealthIndicatorContent(_ContentBase):
    indicator_type: str
    value: Optional[float] = None
    trend: Optional[str] = None


class TrendAnalysisContent(_ContentBase):
    trend_type: Optional[str] = None
    direction: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    time_period: Optional[str] = None


# The variant is picked by the insight's own category, not by a tag inside the payload
InsightContent = Union[
    CommunityNeedContent,
    ServiceGapContent,
    SuccessPatternContent,
    HealthIndicatorContent,
    TrendAnalysisContent,
]


class InsightCreate(BaseModel):
    """Candidate insight as produced by the insight generation feed."""

    category: InsightCategory
    title: str = Field(min_length=1)
    description: str = ""
    content: InsightContent
    community_id: str = Field(min_length=1)
    source_documents: List[str] = Field(default_factory=list)
    ai_confidence: float = Field(ge=0.0, le=1.0)
    supersedes_id: Optional[str] = None

    @field_validator("content", mode="before")
    @classmethod
    def _content_for_category(cls, value: Any, info: ValidationInfo) -> Any:
        category = info.data.get("category")
        if category is None or not isinstance(value, dict):
            return value
        return parse_content(category, value)

    @model_validator(mode="after")
    def _content_matches_category(self) -> "InsightCreate":
        expected = _CONTENT_TYPES[self.category]
        if not isinstance(self.content, expected):
            raise ValueError(
                f"content payload is {type(self.content).__name__} but insight category "
                f"{self.category.value!r} expects {expected.__name__}"
            )
        return self


class InsightResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    category: str
    title: str
    description: str
    content: Dict[str, Any]
    community_id: str
    source_documents: List[str] = Field(default_factory=list)
    ai_confidence: float
    validation_status: str
    validation_score: Optional[float] = None
    cultural_appropriateness: str
    cultural_review_required: bool = False
    integration_status: str
    integration_error: Optional[str] = None
    supersedes_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("source_documents", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return value or []


def parse_content(category: InsightCategory, payload: Dict[str, Any]) -> BaseModel:
    """Build the typed content variant the insight category calls for."""

    return _CONTENT_TYPES[InsightCategory(category)].model_validate(payload or {})


_CONTENT_TYPES = {
    InsightCategory.COMMUNITY_NEED: CommunityNeedContent,
    InsightCategory.SERVICE_GAP: ServiceGapContent,
    InsightCategory.SUCCESS_PATTERN: SuccessPatternContent,
    InsightCategory.HEALTH_INDICATOR: HealthIndicatorContent,
    InsightCategory.TREND_ANALYSIS: TrendAnalysisContent,
}
