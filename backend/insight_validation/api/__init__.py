"""API package exports."""

from . import assignments, health, insights, reviewers

__all__ = [
    "assignments",
    "health",
    "insights",
    "reviewers",
]
