"""Reviewer-facing endpoints for working through review assignments."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from insight_validation import schemas
from insight_validation.api.deps import get_validation_service, to_http_error
from insight_validation.errors import ValidationEngineError
from insight_validation.services.validation_service import IntelligenceValidationService


router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.get("/overdue", response_model=List[schemas.ReviewAssignmentResponse])
def list_overdue_assignments(
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> List[schemas.ReviewAssignmentResponse]:
    return [schemas.ReviewAssignmentResponse.model_validate(item) for item in service.overdue_assignments()]


@router.post("/{assignment_id}/start", response_model=schemas.ReviewAssignmentResponse)
def start_assignment(
    assignment_id: str,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> schemas.ReviewAssignmentResponse:
    try:
        assignment = service.start_review(assignment_id)
    except ValidationEngineError as exc:
        raise to_http_error(exc) from exc
    return schemas.ReviewAssignmentResponse.model_validate(assignment)


@router.post(
    "/{assignment_id}/response",
    response_model=schemas.ReviewResponseRead,
    status_code=status.HTTP_201_CREATED,
)
def submit_assignment_response(
    assignment_id: str,
    response_in: schemas.ReviewResponseCreate,
    service: IntelligenceValidationService = Depends(get_validation_service),
) -> schemas.ReviewResponseRead:
    try:
        response = service.submit_review_response(assignment_id, response_in)
    except ValidationEngineError as exc:
        raise to_http_error(exc) from exc
    return schemas.ReviewResponseRead.model_validate(response)
