"""Shared fixtures for validation engine tests."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from insight_validation import models
from insight_validation.config_validation import ValidationPolicy
from insight_validation.db.session import Base
from insight_validation.services.validation_service import IntelligenceValidationService
from support import FakeClock, RecordingIntegrationStore, RecordingNotifier


@pytest.fixture()
def db_session() -> Iterator[Session]:
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSession = sessionmaker(bind=engine, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def integration_store() -> RecordingIntegrationStore:
    return RecordingIntegrationStore()


@pytest.fixture()
def policy() -> ValidationPolicy:
    return ValidationPolicy()


@pytest.fixture()
def service(
    db_session: Session,
    policy: ValidationPolicy,
    notifier: RecordingNotifier,
    integration_store: RecordingIntegrationStore,
    clock: FakeClock,
) -> IntelligenceValidationService:
    return IntelligenceValidationService(
        db_session,
        policy=policy,
        notifier=notifier,
        integration_store=integration_store,
        clock=clock,
    )


@pytest.fixture()
def register_reviewers(service: IntelligenceValidationService) -> Callable[..., List[models.Reviewer]]:
    def _register(*entries: Dict[str, Any]) -> List[models.Reviewer]:
        reviewers = []
        for overrides in entries:
            payload = {
                "community_id": "community-1",
                "expertise_areas": ["service_gap"],
                "accuracy_rating": 0.8,
                **overrides,
            }
            reviewers.append(service.register_reviewer(payload))
        return reviewers

    return _register
