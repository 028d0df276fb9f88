"""Service exports for the insight validation engine."""

from .validation_service import IntelligenceValidationService

__all__ = [
    "IntelligenceValidationService",
]
