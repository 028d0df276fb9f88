from __future__ import annotations

from typing import Any, Dict, List

import httpx
import pytest

from insight_validation import config_notifications
from insight_validation.services import notifications
from insight_validation.services.notifications import (
    LoggingNotificationSink,
    WebhookNotificationSink,
    get_notification_sink,
    notify_safely,
)
from support import RecordingNotifier


@pytest.fixture(autouse=True)
def reset_notification_config():
    config_notifications._cached_config = None
    yield
    config_notifications._cached_config = None


def test_logging_sink_is_the_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("INSIGHT_VALIDATION_NOTIFY_WEBHOOK_URL", raising=False)

    assert isinstance(get_notification_sink(), LoggingNotificationSink)


def test_webhook_sink_is_used_when_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INSIGHT_VALIDATION_NOTIFY_WEBHOOK_URL", "http://notify.local/hooks/")
    monkeypatch.setenv("INSIGHT_VALIDATION_NOTIFY_TIMEOUT", "2.5")

    sink = get_notification_sink()

    assert isinstance(sink, WebhookNotificationSink)
    assert config_notifications.get_notification_config().webhook_url == "http://notify.local/hooks"
    assert config_notifications.get_notification_config().timeout == pytest.approx(2.5)


def test_webhook_sink_posts_payload(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[Dict[str, Any]] = []

    def fake_post(url: str, *, json: Dict[str, Any], timeout: float) -> httpx.Response:
        calls.append({"url": url, "json": json, "timeout": timeout})
        return httpx.Response(202, request=httpx.Request("POST", url))

    monkeypatch.setattr(notifications.httpx, "post", fake_post)

    WebhookNotificationSink("http://notify.local", timeout=1.0).send(
        ["reviewer:1"], "New insight review assigned", context={"insight_id": "insight-1"}
    )

    assert calls == [
        {
            "url": "http://notify.local",
            "json": {
                "recipients": ["reviewer:1"],
                "message": "New insight review assigned",
                "context": {"insight_id": "insight-1"},
            },
            "timeout": 1.0,
        }
    ]


def test_webhook_errors_are_swallowed(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_post(url: str, **kwargs: Any) -> httpx.Response:
        return httpx.Response(503, request=httpx.Request("POST", url))

    monkeypatch.setattr(notifications.httpx, "post", failing_post)
    sink = WebhookNotificationSink("http://notify.local")

    assert notify_safely(sink, ["community:community-1"], "Validated insight available") is False


def test_any_sink_failure_is_swallowed() -> None:
    class ExplodingSink:
        def send(self, recipients, message, *, context=None):
            raise RuntimeError("boom")

    assert notify_safely(ExplodingSink(), ["reviewer:1"], "hello") is False


def test_notify_safely_delivers_and_skips_empty_recipients() -> None:
    sink = RecordingNotifier()

    assert notify_safely(sink, [], "nobody") is False
    assert notify_safely(sink, ["reviewer:1"], "hello", context={"k": "v"}) is True
    assert sink.sent == [{"recipients": ["reviewer:1"], "message": "hello", "context": {"k": "v"}}]
