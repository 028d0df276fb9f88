"""Insight submission and validation outcome endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from insight_validation import schemas
from insight_validation.api.deps import get_validation_service, to_http_error
from insight_validation.errors import ValidationEngineError
from insight_validation.services.validation_service import IntelligenceValidationService
from insight_validation.statuses import InsightCategory


router = APIRouter(prefix="/insights", tags=["insights"])
logger = logging.getLogger(__name__)


@router.post("", response_model=schemas.InsightResponse, status_code=status.HTTP_201_CREATED)
def submit_insight(
    insight_in: schemas.InsightCreate,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> schemas.InsightResponse:
    try:
        insight = service.submit_insight_for_validation(insight_in)
    except ValidationEngineError as exc:
        raise to_http_error(exc) from exc
    return schemas.InsightResponse.model_validate(insight)


@router.get("/validated", response_model=List[schemas.InsightResponse])
def list_validated_insights(
    community_id: Optional[str] = None,
    category: Optional[InsightCategory] = None,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> List[schemas.InsightResponse]:
    insights = service.get_validated_insights(community_id=community_id, category=category)
    return [schemas.InsightResponse.model_validate(insight) for insight in insights]


@router.get("/{insight_id}", response_model=schemas.InsightResponse)
def get_insight(
    insight_id: str,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> schemas.InsightResponse:
    try:
        insight = service.get_insight(insight_id)
    except ValidationEngineError as exc:
        raise to_http_error(exc) from exc
    return schemas.InsightResponse.model_validate(insight)


@router.get("/{insight_id}/metrics", response_model=schemas.ValidationMetricsResponse)
def get_insight_metrics(
    insight_id: str,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> schemas.ValidationMetricsResponse:
    try:
        metrics = service.get_validation_metrics(insight_id)
    except ValidationEngineError as exc:
        raise to_http_error(exc) from exc
    if metrics is None:
        raise to_http_error(ValidationEngineError("Validation metrics not yet computed", status_code=404))
    return metrics


@router.get("/{insight_id}/assignments", response_model=List[schemas.ReviewAssignmentResponse])
def list_insight_assignments(
    insight_id: str,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> List[schemas.ReviewAssignmentResponse]:
    try:
        assignments = service.list_insight_assignments(insight_id)
    except ValidationEngineError as exc:
        raise to_http_error(exc) from exc
    return [schemas.ReviewAssignmentResponse.model_validate(item) for item in assignments]


@router.post("/{insight_id}/reassign", response_model=List[schemas.ReviewAssignmentResponse])
def reassign_insight(
    insight_id: str,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> List[schemas.ReviewAssignmentResponse]:
    """Manual retry for insights left waiting on an empty reviewer pool."""

    try:
        created = service.reassign_stalled_insight(insight_id)
    except ValidationEngineError as exc:
        raise to_http_error(exc) from exc
    return [schemas.ReviewAssignmentResponse.model_validate(item) for item in created]


@router.post("/{insight_id}/integration/retry", response_model=schemas.InsightResponse)
def retry_insight_integration(
    insight_id: str,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> schemas.InsightResponse:
    try:
        service.retry_integration(insight_id)
        insight = service.get_insight(insight_id)
    except ValidationEngineError as exc:
        logger.warning("Integration retry failed for insight %s: %s", insight_id, exc)
        raise to_http_error(exc) from exc
    return schemas.InsightResponse.model_validate(insight)
