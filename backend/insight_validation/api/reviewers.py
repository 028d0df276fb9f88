from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status

from insight_validation import schemas
from insight_validation.api.deps import get_validation_service, to_http_error
from insight_validation.errors import ValidationEngineError
from insight_validation.services.validation_service import IntelligenceValidationService
from insight_validation.statuses import AssignmentStatus


router = APIRouter(prefix="/reviewers", tags=["reviewers"])


@router.post("", response_model=schemas.ReviewerResponse, status_code=status.HTTP_201_CREATED)
def register_reviewer(
    reviewer_in: schemas.ReviewerCreate,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> schemas.ReviewerResponse:
    reviewer = service.register_reviewer(reviewer_in)
    return schemas.ReviewerResponse.model_validate(reviewer)


@router.get("/{reviewer_id}", response_model=schemas.ReviewerResponse)
def get_reviewer(
    reviewer_id: int,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> schemas.ReviewerResponse:
    try:
        reviewer = service.get_reviewer(reviewer_id)
    except ValidationEngineError as exc:
        raise to_http_error(exc) from exc
    return schemas.ReviewerResponse.model_validate(reviewer)


@router.put("/{reviewer_id}/availability", response_model=schemas.ReviewerResponse)
def set_reviewer_availability(
    reviewer_id: int,
    payload: schemas.ReviewerAvailabilityUpdate,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> schemas.ReviewerResponse:
    try:
        reviewer = service.set_reviewer_availability(reviewer_id, payload.is_available)
    except ValidationEngineError as exc:
        raise to_http_error(exc) from exc
    return schemas.ReviewerResponse.model_validate(reviewer)


@router.get("/{reviewer_id}/assignments", response_model=List[schemas.ReviewAssignmentResponse])
def list_reviewer_assignments(
    reviewer_id: int,
    status: Optional[AssignmentStatus] = None,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> List[schemas.ReviewAssignmentResponse]:
    try:
        assignments = service.get_review_assignments(reviewer_id, status)
    except ValidationEngineError as exc:
        raise to_http_error(exc) from exc
    return [schemas.ReviewAssignmentResponse.model_validate(item) for item in assignments]
