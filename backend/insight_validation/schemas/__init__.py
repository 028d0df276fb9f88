from __future__ import annotations

from insight_validation.schemas.insight import (
    CommunityNeedContent,
    HealthIndicatorContent,
    InsightContent,
    InsightCreate,
    InsightResponse,
    ServiceGapContent,
    SuccessPatternContent,
    TrendAnalysisContent,
    parse_content,
)
from insight_validation.schemas.review import (
    RecommendationSummary,
    ReviewAssignmentResponse,
    ReviewResponseCreate,
    ReviewResponseRead,
    SourceVerification,
    ValidationDecision,
    ValidationMetrics,
    ValidationMetricsResponse,
)
from insight_validation.schemas.reviewer import (
    ReviewerAvailabilityUpdate,
    ReviewerCreate,
    ReviewerResponse,
)

__all__ = [
    "CommunityNeedContent",
    "HealthIndicatorContent",
    "InsightContent",
    "InsightCreate",
    "InsightResponse",
    "RecommendationSummary",
    "ReviewAssignmentResponse",
    "ReviewResponseCreate",
    "ReviewResponseRead",
    "ReviewerAvailabilityUpdate",
    "ReviewerCreate",
    "ReviewerResponse",
    "ServiceGapContent",
    "SourceVerification",
    "SuccessPatternContent",
    "TrendAnalysisContent",
    "ValidationDecision",
    "ValidationMetrics",
    "ValidationMetricsResponse",
    "parse_content",
]
