"""
engine/engine.py

AnomalyClassifier: evaluates each LogEntry against an ordered set of
predicates and emits at most one Anomaly per entry.

Matching is OR across predicates, evaluated in order; the first match
names the Anomaly. A predicate that raises is logged and counts as no
match, so one broken rule never hides the others.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from typing import Callable, Iterable, Sequence

from ..metrics import METRICS
from ..models import Anomaly, LogEntry
from .rules.base import BaseRule, PhraseRule

logger = logging.getLogger(__name__)

Predicate = Callable[[LogEntry], bool]

DESCRIPTION_TEMPLATE = "Potential anomaly detected in log with ID {id}: {details}"


def _rule_name(predicate: Predicate) -> str:
    return (
        getattr(predicate, "name", "")
        or getattr(predicate, "__name__", "")
        or type(predicate).__name__
    )


class AnomalyClassifier:
    """
    Args:
        rules: Ordered predicates. None → discover the built-in rules
               and append one PhraseRule per extra phrase.
        extra_phrases: Only used when rules is None.
    """

    def __init__(
        self,
        rules: Sequence[Predicate] | None = None,
        extra_phrases: Iterable[str] = (),
    ) -> None:
        if rules is None:
            rules = [*self._load_rules(), *(PhraseRule(p) for p in extra_phrases)]
        self.rules: list[Predicate] = list(rules)
        self.stats: dict[str, int] = {
            "entries_classified": 0,
            "anomalies_found": 0,
            "rule_errors": 0,
        }
        logger.info(
            "AnomalyClassifier loaded %d rule(s): %s",
            len(self.rules),
            [_rule_name(r) for r in self.rules],
        )

    def classify(self, entries: Iterable[LogEntry]) -> list[Anomaly]:
        anomalies: list[Anomaly] = []
        for entry in entries:
            self.stats["entries_classified"] += 1
            matched = self._first_match(entry)
            if matched is None:
                continue
            anomaly = Anomaly(
                log_id=entry.id,
                description=DESCRIPTION_TEMPLATE.format(id=entry.id, details=entry.details),
                rule_name=matched,
            )
            anomalies.append(anomaly)
            self.stats["anomalies_found"] += 1
            METRICS.anomalies_detected.inc()
        return anomalies

    def _first_match(self, entry: LogEntry) -> str | None:
        for rule in self.rules:
            if self._safe_match(rule, entry):
                return _rule_name(rule)
        return None

    def _safe_match(self, rule: Predicate, entry: LogEntry) -> bool:
        try:
            return bool(rule(entry))
        except Exception as exc:
            self.stats["rule_errors"] += 1
            logger.exception(
                "Rule %r raised on entry %r: %s", _rule_name(rule), entry.id, exc
            )
            return False

    @staticmethod
    def _load_rules() -> list[BaseRule]:
        import auditwatch.backend.engine.rules as rules_pkg
        rules: list[BaseRule] = []
        for _, module_name, _ in pkgutil.iter_modules(rules_pkg.__path__):
            if module_name == "base":
                continue
            try:
                module = importlib.import_module(
                    f"auditwatch.backend.engine.rules.{module_name}"
                )
            except Exception as exc:
                logger.error("Failed to import rule module %r: %s", module_name, exc)
                continue
            for _, obj in inspect.getmembers(module, inspect.isclass):
                if (
                    issubclass(obj, BaseRule)
                    and not inspect.isabstract(obj)
                    and obj.__module__ == module.__name__
                ):
                    try:
                        instance: BaseRule = obj()
                        if instance.enabled:
                            rules.append(instance)
                    except Exception as exc:
                        logger.error("Failed to instantiate rule %r: %s", obj, exc)
        rules.sort(key=lambda r: (r.order, r.name))
        return rules
