from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class NotificationConfig:
    webhook_url: str | None
    timeout: float


_cached_config: NotificationConfig | None = None


def get_notification_config() -> NotificationConfig:
    global _cached_config
    if _cached_config is None:
        webhook_url = os.getenv("INSIGHT_VALIDATION_NOTIFY_WEBHOOK_URL", "").strip().rstrip("/") or None
        timeout = float(os.getenv("INSIGHT_VALIDATION_NOTIFY_TIMEOUT", "5.0"))
        _cached_config = NotificationConfig(webhook_url=webhook_url, timeout=timeout)
    return _cached_config
