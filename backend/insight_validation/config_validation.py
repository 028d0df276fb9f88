from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Dict, Tuple

from insight_validation.statuses import InsightCategory


DEFAULT_CULTURAL_KEYWORDS: Tuple[str, ...] = (
    "traditional",
    "ceremony",
    "sacred",
    "elder",
    "spiritual",
    "cultural",
    "indigenous",
    "ancestral",
    "ritual",
    "medicine",
)


def _default_expertise_tags() -> Dict[InsightCategory, Tuple[str, ...]]:
    return {category: (category.value,) for category in InsightCategory}


@dataclass(frozen=True)
class SelectionWeights:
    accuracy: float = 0.5
    responsiveness: float = 0.3
    elder_bonus: float = 0.2


@dataclass(frozen=True)
class DecisionThresholds:
    validated_min_score: float = 4.0
    validated_min_consensus: float = 0.7
    revision_min_score: float = 3.0
    cultural_approved_min_score: float = 4.0
    cultural_concerns_min_score: float = 3.0
    cultural_compliance_min_score: float = 3.5


@dataclass(frozen=True)
class ValidationPolicy:
    """Tunable constants for reviewer selection, deadlines, and decisions."""

    panel_size: int = 3
    standard_review_days: int = 7
    cultural_review_days: int = 5
    weights: SelectionWeights = field(default_factory=SelectionWeights)
    thresholds: DecisionThresholds = field(default_factory=DecisionThresholds)
    cultural_keywords: Tuple[str, ...] = DEFAULT_CULTURAL_KEYWORDS
    expertise_tags: Dict[InsightCategory, Tuple[str, ...]] = field(default_factory=_default_expertise_tags)
    common_items_min_mentions: int = 2
    common_items_limit: int = 5

    def expertise_tags_for(self, category: InsightCategory) -> Tuple[str, ...]:
        return self.expertise_tags.get(category, (category.value,))


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = int(raw)
    if value < 1:
        raise ValueError(f"{name} must be a positive integer")
    return value


def _keywords_from_env(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    entries = [keyword.strip().lower() for keyword in raw.split(",")]
    return tuple(keyword for keyword in entries if keyword) or default


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    value = float(raw)
    if value < 0:
        raise ValueError(f"{name} must not be negative")
    return value


def _floats_from_env(cls, prefix: str):
    """Build ``cls`` with each field overridable as ``{prefix}_{FIELD}``."""

    defaults = cls()
    return cls(
        **{
            entry.name: _float_from_env(f"{prefix}_{entry.name.upper()}", getattr(defaults, entry.name))
            for entry in fields(cls)
        }
    )


_cached_policy: ValidationPolicy | None = None


def get_validation_policy() -> ValidationPolicy:
    global _cached_policy
    if _cached_policy is None:
        _cached_policy = ValidationPolicy(
            panel_size=_int_from_env("INSIGHT_VALIDATION_PANEL_SIZE", 3),
            standard_review_days=_int_from_env("INSIGHT_VALIDATION_REVIEW_DAYS", 7),
            cultural_review_days=_int_from_env("INSIGHT_VALIDATION_CULTURAL_REVIEW_DAYS", 5),
            cultural_keywords=_keywords_from_env(
                "INSIGHT_VALIDATION_CULTURAL_KEYWORDS", DEFAULT_CULTURAL_KEYWORDS
            ),
            weights=_floats_from_env(SelectionWeights, "INSIGHT_VALIDATION_WEIGHT"),
            thresholds=_floats_from_env(DecisionThresholds, "INSIGHT_VALIDATION_THRESHOLD"),
        )
    return _cached_policy


def invalidate_cached_policy() -> None:
    global _cached_policy
    _cached_policy = None
