from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol, Sequence

import httpx

from insight_validation.config_notifications import get_notification_config

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def send(self, recipients: Sequence[str], message: str, *, context: Optional[Dict[str, Any]] = None) -> None: ...


class LoggingNotificationSink:
    """Default sink: records notifications in the application log."""

    def send(self, recipients: Sequence[str], message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        logger.info(
            "notification_dispatched",
            extra={"recipients": list(recipients), "notification": message, "context": context or {}},
        )


class WebhookNotificationSink:
    """Posts notifications to an HTTP endpoint owned by the delivery service."""

    def __init__(self, url: str, *, timeout: float = 5.0) -> None:
        self._url = url
        self._timeout = timeout

    def send(self, recipients: Sequence[str], message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        payload: Dict[str, Any] = {
            "recipients": list(recipients),
            "message": message,
            "context": context or {},
        }
        response = httpx.post(self._url, json=payload, timeout=self._timeout)
        response.raise_for_status()


def get_notification_sink() -> NotificationSink:
    cfg = get_notification_config()
    if cfg.webhook_url:
        return WebhookNotificationSink(cfg.webhook_url, timeout=cfg.timeout)
    return LoggingNotificationSink()


def notify_safely(
    sink: NotificationSink,
    recipients: Sequence[str],
    message: str,
    *,
    context: Optional[Dict[str, Any]] = None,
) -> bool:
    """Fire-and-forget delivery. Failures are logged and never reach the caller."""

    if not recipients:
        return False
    try:
        sink.send(recipients, message, context=context)
    except httpx.HTTPError:
        logger.exception("Notification webhook delivery failed", extra={"recipients": list(recipients)})
        return False
    except Exception:  # noqa: BLE001 - delivery is best effort for any sink
        logger.exception("Notification delivery failed", extra={"recipients": list(recipients)})
        return False
    return True
