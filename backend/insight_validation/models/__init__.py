# Ensure every model is imported so SQLAlchemy can resolve relationships
from insight_validation.models.insight import Insight  # noqa: F401
from insight_validation.models.reviewer import Reviewer  # noqa: F401
from insight_validation.models.review import (  # noqa: F401
    ReviewAssignment,
    ReviewResponse,
    ValidationMetricsRecord,
)
from insight_validation.models.integration import (  # noqa: F401
    CommunityHealthIndicator,
    CommunityNeed,
    CommunityTrend,
    ServiceGap,
    SuccessPattern,
)

__all__ = [
    "CommunityHealthIndicator",
    "CommunityNeed",
    "CommunityTrend",
    "Insight",
    "ReviewAssignment",
    "ReviewResponse",
    "Reviewer",
    "ServiceGap",
    "SuccessPattern",
    "ValidationMetricsRecord",
]
