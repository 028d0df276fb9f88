from __future__ import annotations

from typing import Any, List, Optional


class ValidationEngineError(Exception):
    """Base class for errors surfaced by the validation engine."""

    status_code = 400

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ReviewValidationError(ValidationEngineError):
    """Raised when a review response carries malformed scores or fields."""

    status_code = 422

    def __init__(self, message: str, *, errors: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(ValidationEngineError):
    status_code = 404


class InsightNotFoundError(NotFoundError):
    pass


class AssignmentNotFoundError(NotFoundError):
    pass


class ReviewerNotFoundError(NotFoundError):
    pass


class AssignmentStateError(ValidationEngineError):
    """Raised when an assignment cannot move to the requested state."""

    status_code = 409


class IntegrationConfigurationError(ValidationEngineError):
    """Raised when an insight category has no downstream store mapping."""

    status_code = 500


class EmptyPanelError(ValidationEngineError):
    """Raised when consensus is requested for a panel with no responses."""

    status_code = 409
