"""Fire-and-forget notification dispatch."""
from __future__ import annotations

from typing import Iterable, Optional, Protocol

import httpx

from tripgen.log import get_logger
from tripgen.schemas import Notification

logger = get_logger(__name__)


class Notifier(Protocol):
    async def send(self, notifications: Iterable[Notification]) -> int:
        ...


class LoggingNotifier:
    """Used when no webhook is configured; records what would have been sent."""

    async def send(self, notifications: Iterable[Notification]) -> int:
        count = 0
        for notification in notifications:
            logger.info(
                "Notification for user %s (%s): %s",
                notification.user_id,
                notification.type,
                notification.title,
            )
            count += 1
        return count


class WebhookNotifier:
    """POST each notification as JSON to a webhook; failures are logged, never raised."""

    def __init__(self, url: str, *, timeout: float = 5.0):
        self.url = url
        self.timeout = timeout

    async def send(self, notifications: Iterable[Notification]) -> int:
        delivered = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for notification in notifications:
                try:
                    response = await client.post(self.url, json=notification.model_dump(mode="json"))
                    response.raise_for_status()
                    delivered += 1
                except Exception:
                    logger.warning(
                        "Failed to deliver %s notification to user %s",
                        notification.type,
                        notification.user_id,
                        exc_info=True,
                    )
        return delivered


def build_notifier(webhook_url: Optional[str], timeout: float = 5.0) -> Notifier:
    if webhook_url:
        return WebhookNotifier(webhook_url, timeout=timeout)
    logger.info("TRIPGEN_NOTIFY_WEBHOOK_URL not set; notifications will only be logged")
    return LoggingNotifier()
