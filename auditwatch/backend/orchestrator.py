"""
backend/orchestrator.py

PipelineOrchestrator: one audit run:

    LogSource → parse_event_log → AnomalyClassifier → EscalationCoordinator → AlertSink

Fatal vs. recoverable:
  - SourceUnavailable (including the deadline passing during the fetch)
    propagates out of run(); nothing can be classified without logs.
  - Enrichment failures degrade single alerts (handled by the coordinator).
  - NotificationFailure is logged per alert; the remaining alerts are
    still delivered.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from .engine import AnomalyClassifier
from .errors import NotificationFailure, SourceUnavailable
from .escalation import EscalationCoordinator
from .metrics import METRICS
from .models import LogEntry, RunOutcome
from .notify import AlertSink
from .source import LogSource, parse_event_log

logger = logging.getLogger(__name__)

CLEAN_TITLE = "Security Audit"
CLEAN_MESSAGE = "No anomalies detected. Your system is safe."
ANOMALY_TITLE = "Security Audit - Anomaly Detected"


class PipelineOrchestrator:
    """
    Args:
        source:      Provides the raw audit text.
        classifier:  Turns entries into anomalies.
        coordinator: Turns anomalies into alerts.
        sink:        Receives every alert.
        run_timeout: Seconds before the run deadline; None or 0 = no deadline.
        parser:      Raw text → entries (defaults to parse_event_log).
    """

    def __init__(
        self,
        source: LogSource,
        classifier: AnomalyClassifier,
        coordinator: EscalationCoordinator,
        sink: AlertSink,
        run_timeout: float | None = None,
        parser: Callable[[str], list[LogEntry]] = parse_event_log,
    ) -> None:
        self.source = source
        self.classifier = classifier
        self.coordinator = coordinator
        self.sink = sink
        self.run_timeout = run_timeout or None
        self.parser = parser

    async def run(self) -> RunOutcome:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.run_timeout if self.run_timeout else None

        raw = await self._fetch(deadline)
        entries = self.parser(raw)
        logger.info("Fetched %d logs.", len(entries))

        anomalies = self.classifier.classify(entries)
        if not anomalies:
            logger.info(CLEAN_MESSAGE)
            await self._deliver(CLEAN_TITLE, CLEAN_MESSAGE)
            return RunOutcome.clean()

        logger.info("%d anomal%s detected", len(anomalies), "y" if len(anomalies) == 1 else "ies")
        for anomaly in anomalies:
            logger.warning("Anomaly detected: %s", anomaly.description)

        alerts = await self.coordinator.escalate_all(anomalies, deadline=deadline)
        for alert in alerts:
            await self._deliver(ANOMALY_TITLE, alert.message)

        return RunOutcome.anomalies_handled(len(alerts))

    async def _fetch(self, deadline: float | None) -> str:
        try:
            async with asyncio.timeout_at(deadline):
                return await self.source.fetch()
        except asyncio.TimeoutError as exc:
            raise SourceUnavailable(
                f"log source {self.source!r} did not respond before the run deadline"
            ) from exc

    async def _deliver(self, title: str, message: str) -> bool:
        try:
            await self.sink.notify(title, message)
        except NotificationFailure as exc:
            METRICS.notifications_failed.inc()
            logger.warning("Failed to send notification %r: %s", title, exc)
            return False
        except Exception as exc:
            METRICS.notifications_failed.inc()
            logger.exception("Sink %r raised unexpectedly: %s", self.sink, exc)
            return False
        METRICS.alerts_sent.inc()
        return True
