"""
backend/escalation.py

EscalationCoordinator: turns each Anomaly into exactly one EnrichedAlert.

Per anomaly:
  1. Build the prompt from the anomaly description
  2. Call the enrichment capability (bounded max_tokens, optional retries)
  3. Success → summary is the trimmed completion text
     Failure → summary is the raw description + static per-rule advice

escalate() never raises EnrichmentFailure: every failure is logged and
degrades only its own alert. escalate_all() runs escalate() on a bounded
asyncio worker pool, collects results into an indexed slot list and
returns them in detection order. If the run deadline passes, in-flight
calls are cancelled and their anomalies get fallback alerts.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence

from .errors import EnrichmentFailure
from .llm.fallbacks import get_fallback
from .llm.prompt_builder import build_prompt
from .metrics import METRICS
from .models import Anomaly, EnrichedAlert

logger = logging.getLogger(__name__)


class EnrichmentCapability(Protocol):
    async def complete(self, prompt: str, max_tokens: int) -> str: ...


class EscalationCoordinator:
    """
    Args:
        client:        Enrichment capability, or None to skip enrichment.
        max_tokens:    Output bound passed on every call.
        max_workers:   Max concurrent escalations in escalate_all().
        max_retries:   Extra attempts after the first failed call.
        retry_backoff: Base delay in seconds, doubled on each retry.
    """

    def __init__(
        self,
        client: EnrichmentCapability | None,
        max_tokens: int = 50,
        max_workers: int = 4,
        max_retries: int = 0,
        retry_backoff: float = 0.5,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.client = client
        self.max_tokens = max_tokens
        self.max_workers = max_workers
        self.max_retries = max(0, max_retries)
        self.retry_backoff = retry_backoff
        self.stats: dict[str, int] = {
            "escalated": 0,
            "enriched": 0,
            "fallbacks_used": 0,
            "abandoned": 0,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def escalate(self, anomaly: Anomaly) -> EnrichedAlert:
        """Return an EnrichedAlert for one anomaly. Never raises on enrichment errors."""
        self.stats["escalated"] += 1

        if self.client is None:
            logger.debug("Enrichment disabled: fallback for anomaly %s", anomaly.log_id)
            return self._fallback(anomaly)

        prompt = build_prompt(anomaly)
        try:
            summary = await self._complete_with_retry(prompt, anomaly)
        except EnrichmentFailure as exc:
            METRICS.enrichment_failures.inc()
            logger.warning(
                "Failed to get enrichment for anomaly %s: %s", anomaly.log_id, exc
            )
            return self._fallback(anomaly)
        except Exception as exc:
            METRICS.enrichment_failures.inc()
            logger.exception(
                "Unexpected error enriching anomaly %s: %s", anomaly.log_id, exc
            )
            return self._fallback(anomaly)

        self.stats["enriched"] += 1
        return EnrichedAlert(anomaly=anomaly, summary=summary, enrichment_failed=False)

    async def escalate_all(
        self,
        anomalies: Sequence[Anomaly],
        deadline: float | None = None,
    ) -> list[EnrichedAlert]:
        """
        Escalate every anomaly concurrently (at most max_workers at once).

        Args:
            anomalies: In detection order.
            deadline:  Absolute event-loop time (loop.time()) after which
                       pending escalations are abandoned. None = no deadline.

        Returns:
            One EnrichedAlert per anomaly, in the same order.
        """
        slots: list[EnrichedAlert | None] = [None] * len(anomalies)
        if not anomalies:
            return []

        semaphore = asyncio.Semaphore(self.max_workers)

        async def _worker(index: int, anomaly: Anomaly) -> None:
            async with semaphore:
                slots[index] = await self.escalate(anomaly)

        tasks = [
            asyncio.create_task(_worker(i, a), name=f"escalate-{i}-{a.log_id}")
            for i, a in enumerate(anomalies)
        ]

        try:
            async with asyncio.timeout_at(deadline):
                await asyncio.gather(*tasks)
        except asyncio.TimeoutError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            pending = sum(1 for s in slots if s is None)
            logger.warning(
                "Run deadline reached: abandoned enrichment for %d of %d anomalies",
                pending, len(anomalies),
            )

        alerts: list[EnrichedAlert] = []
        for anomaly, slot in zip(anomalies, slots):
            if slot is None:
                self.stats["abandoned"] += 1
                METRICS.enrichment_failures.inc()
                slot = self._fallback(anomaly)
            alerts.append(slot)
        return alerts

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _complete_with_retry(self, prompt: str, anomaly: Anomaly) -> str:
        attempt = 0
        while True:
            METRICS.enrichment_calls.inc()
            try:
                return await self.client.complete(prompt, self.max_tokens)
            except EnrichmentFailure as exc:
                if attempt >= self.max_retries:
                    raise
                delay = self.retry_backoff * (2 ** attempt)
                attempt += 1
                METRICS.enrichment_retries.inc()
                logger.warning(
                    "Enrichment attempt %d/%d for anomaly %s failed (%s): retrying in %.1fs",
                    attempt, self.max_retries + 1, anomaly.log_id, exc, delay,
                )
                await asyncio.sleep(delay)

    def _fallback(self, anomaly: Anomaly) -> EnrichedAlert:
        self.stats["fallbacks_used"] += 1
        return EnrichedAlert(
            anomaly=anomaly,
            summary=anomaly.description,
            enrichment_failed=True,
            recommended_action=get_fallback(anomaly.rule_name),
        )
