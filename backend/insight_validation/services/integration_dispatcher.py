"""Promote validated insights into their category-specific downstream stores."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, Type

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from insight_validation import models
from insight_validation.errors import IntegrationConfigurationError
from insight_validation.schemas import (
    CommunityNeedContent,
    HealthIndicatorContent,
    ServiceGapContent,
    SuccessPatternContent,
    TrendAnalysisContent,
    parse_content,
)
from insight_validation.services.assignment_tracker import Clock, utcnow
from insight_validation.statuses import InsightCategory

logger = logging.getLogger(__name__)


class IntegrationTarget(str, Enum):
    COMMUNITY_NEEDS = "community_needs"
    SERVICE_GAPS = "service_gaps"
    SUCCESS_PATTERNS = "success_patterns"
    HEALTH_INDICATORS = "community_health_indicators"
    TRENDS = "community_trends"


@dataclass(frozen=True)
class IntegrationRecord:
    target: IntegrationTarget
    fields: Dict[str, Any]
    # Non-empty keys turn the write into an upsert on those columns
    upsert_keys: Tuple[str, ...] = ()


@dataclass
class DispatchResult:
    insight_id: str
    target: IntegrationTarget
    written: bool
    error: Optional[str] = None
    record: Dict[str, Any] = field(default_factory=dict)


class IntegrationStoreError(Exception):
    """Raised when a downstream store rejects a write."""


class IntegrationStore(Protocol):
    def write(self, record: IntegrationRecord) -> None: ...


_TARGET_MODELS: Dict[IntegrationTarget, Type[Any]] = {
    IntegrationTarget.COMMUNITY_NEEDS: models.CommunityNeed,
    IntegrationTarget.SERVICE_GAPS: models.ServiceGap,
    IntegrationTarget.SUCCESS_PATTERNS: models.SuccessPattern,
    IntegrationTarget.HEALTH_INDICATORS: models.CommunityHealthIndicator,
    IntegrationTarget.TRENDS: models.CommunityTrend,
}


class SqlIntegrationStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def write(self, record: IntegrationRecord) -> None:
        model = _TARGET_MODELS[record.target]
        try:
            existing = None
            if record.upsert_keys:
                criteria = [getattr(model, key) == record.fields[key] for key in record.upsert_keys]
                existing = self.db.query(model).filter(*criteria).first()
            if existing is not None:
                for name, value in record.fields.items():
                    setattr(existing, name, value)
                self.db.add(existing)
            else:
                self.db.add(model(**record.fields))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise IntegrationStoreError(f"Write to {record.target.value} failed") from exc


def _common_fields(insight: models.Insight) -> Dict[str, Any]:
    return {
        "insight_id": insight.id,
        "community_id": insight.community_id,
        "validation_score": insight.validation_score,
    }


def _as_need(insight: models.Insight, content: CommunityNeedContent, now: datetime) -> IntegrationRecord:
    return IntegrationRecord(
        target=IntegrationTarget.COMMUNITY_NEEDS,
        fields={
            **_common_fields(insight),
            "need_type": content.resolved_need_type,
            "description": insight.description,
            "urgency": content.urgency,
            "evidence_sources": list(insight.source_documents or []),
            "identified_at": insight.created_at,
        },
    )


def _as_service_gap(insight: models.Insight, content: ServiceGapContent, now: datetime) -> IntegrationRecord:
    return IntegrationRecord(
        target=IntegrationTarget.SERVICE_GAPS,
        fields={
            **_common_fields(insight),
            "gap_type": content.service_area,
            "description": insight.description,
            "severity": content.severity,
            "affected_population": list(content.affected_groups),
            "evidence_sources": list(insight.source_documents or []),
            "identified_at": insight.created_at,
        },
    )


def _as_success_pattern(
    insight: models.Insight, content: SuccessPatternContent, now: datetime
) -> IntegrationRecord:
    return IntegrationRecord(
        target=IntegrationTarget.SUCCESS_PATTERNS,
        fields={
            **_common_fields(insight),
            "title": insight.title,
            "description": insight.description,
            "category": content.resolved_pattern_category,
            "success_metrics": dict(content.metrics),
            "implementation_factors": list(content.factors),
            "replication_potential": content.replication_potential,
            "evidence_sources": list(insight.source_documents or []),
            "identified_at": insight.created_at,
        },
    )


def _as_health_indicator(
    insight: models.Insight, content: HealthIndicatorContent, now: datetime
) -> IntegrationRecord:
    # One indicator of each type per community: later insights replace it
    return IntegrationRecord(
        target=IntegrationTarget.HEALTH_INDICATORS,
        fields={
            **_common_fields(insight),
            "indicator_type": content.indicator_type,
            "value": content.value,
            "trend": content.trend,
            "data_sources": list(insight.source_documents or []),
            "last_updated": now,
        },
        upsert_keys=("community_id", "indicator_type"),
    )


def _as_trend(insight: models.Insight, content: TrendAnalysisContent, now: datetime) -> IntegrationRecord:
    return IntegrationRecord(
        target=IntegrationTarget.TRENDS,
        fields={
            **_common_fields(insight),
            "trend_type": content.trend_type,
            "description": insight.description,
            "direction": content.direction,
            "confidence": content.confidence,
            "time_period": content.time_period,
            "evidence_sources": list(insight.source_documents or []),
            "identified_at": insight.created_at,
        },
    )


Transform = Callable[[models.Insight, Any, datetime], IntegrationRecord]

_TRANSFORMS: Dict[InsightCategory, Transform] = {
    InsightCategory.COMMUNITY_NEED: _as_need,
    InsightCategory.SERVICE_GAP: _as_service_gap,
    InsightCategory.SUCCESS_PATTERN: _as_success_pattern,
    InsightCategory.HEALTH_INDICATOR: _as_health_indicator,
    InsightCategory.TREND_ANALYSIS: _as_trend,
}

_unmapped = set(InsightCategory) - set(_TRANSFORMS)
if _unmapped:
    raise RuntimeError(f"Insight categories without an integration target: {sorted(c.value for c in _unmapped)}")


def resolve_category(raw: Any) -> InsightCategory:
    try:
        return InsightCategory(raw)
    except ValueError as exc:
        raise IntegrationConfigurationError(f"No integration target configured for insight category {raw!r}") from exc


class IntegrationDispatcher:
    def __init__(self, store: IntegrationStore, *, clock: Optional[Clock] = None) -> None:
        self._store = store
        self._clock = clock or utcnow

    def build_record(self, insight: models.Insight) -> IntegrationRecord:
        category = resolve_category(insight.category)
        try:
            content: BaseModel = parse_content(category, insight.content or {})
        except ValidationError as exc:
            raise IntegrationConfigurationError(
                f"Insight {insight.id} content does not match the {category.value} payload shape"
            ) from exc
        return _TRANSFORMS[category](insight, content, self._clock())

    def dispatch(self, insight: models.Insight) -> DispatchResult:
        """Write the insight to its downstream store.

        Raises IntegrationConfigurationError for unmapped categories. Store
        failures are logged and reported in the result, never raised.
        """

        record = self.build_record(insight)
        try:
            self._store.write(record)
        except Exception as exc:  # noqa: BLE001 - collaborator stores may raise anything
            logger.exception(
                "integration_write_failed",
                extra={"insight_id": insight.id, "target": record.target.value},
            )
            return DispatchResult(
                insight_id=insight.id,
                target=record.target,
                written=False,
                error=str(exc) or exc.__class__.__name__,
                record=record.fields,
            )

        logger.info(
            "insight_integrated",
            extra={"insight_id": insight.id, "target": record.target.value},
        )
        return DispatchResult(insight_id=insight.id, target=record.target, written=True, record=record.fields)
