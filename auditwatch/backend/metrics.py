"""
backend/metrics.py

Lightweight thread-safe counters for a pipeline run.
No external dependencies: uses Python's threading.Lock.

Usage:
    from auditwatch.backend.metrics import METRICS
    METRICS.records_parsed.inc()
    print(METRICS.as_dict())
"""

import threading


class Counter:
    """A thread-safe integer counter."""

    __slots__ = ("_value", "_lock")

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def inc(self, amount: int = 1) -> None:
        with self._lock:
            self._value += amount

    def reset(self) -> None:
        with self._lock:
            self._value = 0

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def __repr__(self) -> str:  # pragma: no cover
        return f"Counter({self._value})"


class Metrics:
    """Singleton holding all pipeline counters."""

    def __init__(self) -> None:
        # --- Parser ---
        self.records_parsed: Counter = Counter()
        """Records finalized by a details line and emitted."""

        self.records_incomplete: Counter = Counter()
        """Records started by an identifier line but never finalized."""

        self.records_degenerate: Counter = Counter()
        """Details lines finalizing a record with an empty id (suppressed)."""

        # --- Classifier ---
        self.anomalies_detected: Counter = Counter()

        # --- Escalation ---
        self.enrichment_calls: Counter = Counter()
        self.enrichment_retries: Counter = Counter()
        self.enrichment_failures: Counter = Counter()

        # --- Delivery ---
        self.alerts_sent: Counter = Counter()
        self.notifications_failed: Counter = Counter()

    def as_dict(self) -> dict:
        """Return all counters as a plain dict (safe for JSON serialisation)."""
        return {
            name: counter.value
            for name, counter in vars(self).items()
            if isinstance(counter, Counter)
        }

    def reset_all(self) -> None:
        """Reset every counter to zero (useful in tests)."""
        for attr in vars(self).values():
            if isinstance(attr, Counter):
                attr.reset()


# Module-level singleton: import from here everywhere
METRICS = Metrics()
