"""
notify/webhook.py

POSTs each alert as JSON to an HTTP endpoint:

    {"app_id": "...", "title": "...", "message": "..."}

Any transport error or non-2xx status raises NotificationFailure.
"""

from __future__ import annotations

import logging

import httpx

from ..errors import NotificationFailure
from .base import AlertSink

logger = logging.getLogger(__name__)

_WEBHOOK_TIMEOUT_SECONDS = 5.0


class WebhookSink(AlertSink):
    name = "webhook"

    def __init__(
        self,
        url: str,
        app_id: str = "Windows Security Audit",
        timeout: float = _WEBHOOK_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.app_id = app_id
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def notify(self, title: str, message: str) -> None:
        payload = {"app_id": self.app_id, "title": title, "message": message}
        try:
            resp = await self._http.post(self.url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NotificationFailure(
                f"webhook {self.url} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise NotificationFailure(f"webhook {self.url} unreachable: {exc!r}") from exc
        logger.debug("Alert %r delivered to %s", title, self.url)

    async def aclose(self) -> None:
        await self._http.aclose()
