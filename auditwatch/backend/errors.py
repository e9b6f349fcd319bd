"""
backend/errors.py

Exception taxonomy for a pipeline run.

SourceUnavailable: fatal; the orchestrator lets it unwind to the caller.
EnrichmentFailure: recoverable; caught per anomaly by the escalation step.
NotificationFailure: recoverable; caught per alert by the delivery step.
"""

from __future__ import annotations


class AuditWatchError(Exception):
    """Base class for every error raised by AuditWatch."""


class SourceUnavailable(AuditWatchError):
    """The audit log could not be fetched or decoded."""


class EnrichmentFailure(AuditWatchError):
    """The enrichment call failed or returned nothing usable."""


class NotificationFailure(AuditWatchError):
    """An alert could not be delivered to its sink."""
