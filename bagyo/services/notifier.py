"""Notifier adapters and the vibration pulse patterns they honor."""

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass
from enum import Enum
import logging
from typing import Any, Protocol

import httpx

from bagyo.config import settings

logger = logging.getLogger("bagyo.notifier")

SUSTAINED_CANCEL_AFTER_S = 3.0


class PulseCategory(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    SUSTAINED = "sustained"


@dataclass(frozen=True)
class PulsePattern:
    """Vibration pattern for an alert, durations alternate on/off in ms."""

    category: PulseCategory
    durations_ms: tuple[int, ...]
    repeat: bool = False
    cancel_after_s: float | None = None


SHORT_PULSE = PulsePattern(PulseCategory.SHORT, (300,))
MEDIUM_PULSE = PulsePattern(PulseCategory.MEDIUM, (400, 200, 400))
SUSTAINED_PULSE = PulsePattern(
    PulseCategory.SUSTAINED,
    (500, 200, 500),
    repeat=True,
    cancel_after_s=SUSTAINED_CANCEL_AFTER_S,
)


def pulse_pattern_for(urgency: int) -> PulsePattern:
    """Pick the pulse pattern for an urgency (signal level 1-5)."""

    if urgency >= 3:
        return SUSTAINED_PULSE
    if urgency >= 2:
        return MEDIUM_PULSE
    return SHORT_PULSE


class Notifier(Protocol):
    """User-facing alert delivery. Fire-and-forget."""

    def deliver(self, message: str, urgency: int, play_sound: bool) -> None:
        """Deliver an alert message with the given urgency."""


class LoggingNotifier:
    """Write alerts to the service log; the default when no webhook is set."""

    def deliver(self, message: str, urgency: int, play_sound: bool) -> None:
        pattern = pulse_pattern_for(urgency)
        logger.warning(
            "ALERT urgency=%s pulse=%s sound=%s: %s",
            urgency,
            pattern.category.value,
            play_sound,
            message,
        )


class WebhookNotifier:
    """POST alerts as JSON to a client-facing webhook (push gateway, chat relay)."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout or settings.notify_timeout
        self.transport = transport
        self._pending: set[asyncio.Task] = set()

    def deliver(self, message: str, urgency: int, play_sound: bool) -> None:
        payload = _build_payload(message, urgency, play_sound)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._post(payload))
            return

        task = loop.create_task(self._post(payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def wait_pending(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def _post(self, payload: dict[str, Any]) -> None:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Alert webhook delivery failed: %s", exc)
            return
        logger.info("Alert delivered to webhook (urgency=%s)", payload["urgency"])


def _build_payload(message: str, urgency: int, play_sound: bool) -> dict[str, Any]:
    pattern = asdict(pulse_pattern_for(urgency))
    pattern["category"] = pattern["category"].value
    pattern["durations_ms"] = list(pattern["durations_ms"])
    return {
        "title": "Bagyo Alert!",
        "message": message,
        "urgency": urgency,
        "play_sound": play_sound,
        "pulse": pattern,
    }


def build_notifier() -> Notifier:
    """Return the configured notifier."""

    if settings.notify_webhook_url:
        return WebhookNotifier(settings.notify_webhook_url)
    return LoggingNotifier()


__all__ = [
    "LoggingNotifier",
    "Notifier",
    "PulseCategory",
    "PulsePattern",
    "WebhookNotifier",
    "build_notifier",
    "pulse_pattern_for",
]
