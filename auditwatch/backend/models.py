"""
backend/models.py

Shared dataclasses for every stage of the pipeline.

    LogEntry: parser output, one per finalized audit record
    Anomaly: classifier output, at most one per LogEntry
    EnrichedAlert: escalation output, exactly one per Anomaly
    RunOutcome: result of one PipelineOrchestrator.run()
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ---------------------------------------------------------------------------
# Stage 1: Parser output
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class LogEntry:
    """One audit record extracted from a labelled block of raw text."""

    id: str
    """Value of the 'Event ID:' line. Never empty for emitted entries."""

    timestamp: str = ""
    """Value of the 'Time Created:' line, kept verbatim."""

    event_type: str = ""
    """Value of the 'Task:' line."""

    details: str = ""
    """Value of the 'Message:' line."""


# ---------------------------------------------------------------------------
# Stage 2: Classifier output
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Anomaly:
    """A LogEntry judged risky by at least one rule."""

    log_id: str
    description: str
    rule_name: str = ""
    """Name of the first rule that matched."""


# ---------------------------------------------------------------------------
# Stage 3: Escalation output
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class EnrichedAlert:
    """An Anomaly paired with the text the operator will see."""

    anomaly: Anomaly
    summary: str
    """Trimmed enrichment response, or the raw description on failure."""

    enrichment_failed: bool = False
    recommended_action: str = ""
    """Static per-rule advice, only set on fallback alerts."""

    @property
    def message(self) -> str:
        if self.recommended_action:
            return f"{self.summary}\n{self.recommended_action}"
        return self.summary


# ---------------------------------------------------------------------------
# Run result
# ---------------------------------------------------------------------------

class OutcomeKind(str, Enum):
    CLEAN             = "CLEAN"
    ANOMALIES_HANDLED = "ANOMALIES_HANDLED"


@dataclass(frozen=True, slots=True)
class RunOutcome:
    kind: OutcomeKind
    count: int = 0

    @classmethod
    def clean(cls) -> RunOutcome:
        return cls(OutcomeKind.CLEAN, 0)

    @classmethod
    def anomalies_handled(cls, count: int) -> RunOutcome:
        return cls(OutcomeKind.ANOMALIES_HANDLED, count)

    @property
    def is_clean(self) -> bool:
        return self.kind is OutcomeKind.CLEAN

    def __repr__(self) -> str:
        if self.is_clean:
            return "RunOutcome(CLEAN)"
        return f"RunOutcome(ANOMALIES_HANDLED count={self.count})"
