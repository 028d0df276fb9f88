from __future__ import annotations

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from insight_validation.db.session import get_db
from insight_validation.errors import ValidationEngineError
from insight_validation.services.notifications import NotificationSink, get_notification_sink
from insight_validation.services.validation_service import IntelligenceValidationService


def get_notifier() -> NotificationSink:
    return get_notification_sink()


def get_validation_service(
    db: Session = Depends(get_db),
    notifier: NotificationSink = Depends(get_notifier),
) -> IntelligenceValidationService:
    return IntelligenceValidationService(db=db, notifier=notifier)


def to_http_error(exc: ValidationEngineError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc))
