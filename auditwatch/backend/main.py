"""
backend/main.py

CLI entry point: runs one audit pass and exits.

Exit status:
    0: run completed (clean, or anomalies handled, even if some
        enrichments or notifications failed)
    1: the log source was unavailable
    2: invalid command-line arguments (argparse)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import NoReturn

from .config import settings
from .engine import AnomalyClassifier
from .errors import SourceUnavailable
from .escalation import EscalationCoordinator
from .llm import CompletionClient
from .metrics import METRICS
from .models import RunOutcome
from .notify import AlertSink, ConsoleSink, WebhookSink
from .orchestrator import PipelineOrchestrator
from .source import CommandLogSource, FileLogSource, LogSource

logger = logging.getLogger("auditwatch.main")


def _build_source(args: argparse.Namespace) -> LogSource:
    if args.input:
        return FileLogSource(args.input, encoding=settings.LOG_SOURCE_ENCODING)
    return CommandLogSource(settings.log_source_argv, encoding=settings.LOG_SOURCE_ENCODING)


def _build_sink(args: argparse.Namespace) -> AlertSink:
    if args.webhook_url:
        return WebhookSink(args.webhook_url, app_id=settings.ALERT_APP_ID)
    return ConsoleSink(app_id=settings.ALERT_APP_ID)


async def run(args: argparse.Namespace) -> RunOutcome:
    source = _build_source(args)
    sink = _build_sink(args)
    client = None
    if settings.LLM_ENABLED and not args.no_llm:
        client = CompletionClient(
            base_url=settings.LLM_BASE_URL,
            model=settings.LLM_MODEL,
            api_key=settings.LLM_API_KEY,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    classifier = AnomalyClassifier(extra_phrases=settings.EXTRA_RISK_PHRASES)
    coordinator = EscalationCoordinator(
        client,
        max_tokens=settings.LLM_MAX_TOKENS,
        max_workers=args.workers,
        max_retries=settings.LLM_MAX_RETRIES,
        retry_backoff=settings.LLM_RETRY_BACKOFF_SECONDS,
    )
    orchestrator = PipelineOrchestrator(
        source=source,
        classifier=classifier,
        coordinator=coordinator,
        sink=sink,
        run_timeout=args.timeout,
    )

    logger.info(
        "AuditWatch run: source=%r sink=%r LLM=%s workers=%d timeout=%s",
        source, sink,
        f"{settings.LLM_MODEL}@{settings.LLM_BASE_URL}" if client else "disabled",
        args.workers, args.timeout or "none",
    )

    try:
        return await orchestrator.run()
    finally:
        if client is not None:
            await client.aclose()
        await sink.aclose()
        logger.info(
            "Final stats: classifier=%s escalation=%s metrics=%s",
            classifier.stats, coordinator.stats, METRICS.as_dict(),
        )


def _positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return n


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="AuditWatch: triage the Security audit log for risky events",
    )
    parser.add_argument(
        "--input", metavar="FILE", default=None,
        help="read a saved text dump instead of running LOG_SOURCE_COMMAND",
    )
    parser.add_argument("--workers", type=_positive_int, default=settings.ESCALATION_WORKERS)
    parser.add_argument(
        "--timeout", type=float, default=settings.RUN_TIMEOUT_SECONDS,
        help="run deadline in seconds (0 disables)",
    )
    parser.add_argument("--no-llm", action="store_true", help="skip enrichment calls")
    parser.add_argument("--webhook-url", default=settings.ALERT_WEBHOOK_URL or None)
    parser.add_argument(
        "--log-level", default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> NoReturn:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        outcome = asyncio.run(run(args))
    except SourceUnavailable as exc:
        logger.error("Error fetching logs: %s", exc)
        print(f"ERROR: cannot fetch audit logs: {exc}", file=sys.stderr)
        sys.exit(1)

    logger.info("Run finished: %r", outcome)
    sys.exit(0)


if __name__ == "__main__":
    main()
