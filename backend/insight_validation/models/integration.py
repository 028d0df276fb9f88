# backend/insight_validation/models/integration.py
"""Downstream tables that receive promoted insights."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from insight_validation.db.session import Base


class CommunityNeed(Base):
    __tablename__ = "community_needs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    insight_id: Mapped[str] = mapped_column(String, index=True)
    community_id: Mapped[str] = mapped_column(String, index=True)
    need_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    description: Mapped[str] = mapped_column(Text, default="")
    urgency: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    evidence_sources: Mapped[List[str]] = mapped_column(JSON, default=list)
    validation_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    identified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class ServiceGap(Base):
    __tablename__ = "service_gaps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    insight_id: Mapped[str] = mapped_column(String, index=True)
    community_id: Mapped[str] = mapped_column(String, index=True)
    gap_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    description: Mapped[str] = mapped_column(Text, default="")
    severity: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    affected_population: Mapped[List[str]] = mapped_column(JSON, default=list)
    evidence_sources: Mapped[List[str]] = mapped_column(JSON, default=list)
    validation_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    identified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class SuccessPattern(Base):
    __tablename__ = "success_patterns"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    insight_id: Mapped[str] = mapped_column(String, index=True)
    community_id: Mapped[str] = mapped_column(String, index=True)
    title: Mapped[str] = mapped_column(String)
    description: Mapped[str] = mapped_column(Text, default="")
    category: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    success_metrics: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    implementation_factors: Mapped[List[str]] = mapped_column(JSON, default=list)
    replication_potential: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    evidence_sources: Mapped[List[str]] = mapped_column(JSON, default=list)
    validation_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    identified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class CommunityHealthIndicator(Base):
    __tablename__ = "community_health_indicators"
    __table_args__ = (UniqueConstraint("community_id", "indicator_type", name="uq_health_indicator"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    insight_id: Mapped[str] = mapped_column(String, index=True)
    community_id: Mapped[str] = mapped_column(String, index=True)
    indicator_type: Mapped[str] = mapped_column(String)
    value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    trend: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    data_sources: Mapped[List[str]] = mapped_column(JSON, default=list)
    validation_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    last_updated: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class CommunityTrend(Base):
    __tablename__ = "community_trends"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    insight_id: Mapped[str] = mapped_column(String, index=True)
    community_id: Mapped[str] = mapped_column(String, index=True)
    trend_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    description: Mapped[str] = mapped_column(Text, default="")
    direction: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    confidence: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    time_period: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    evidence_sources: Mapped[List[str]] = mapped_column(JSON, default=list)
    validation_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    identified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
