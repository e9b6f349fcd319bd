"""
engine/rules/base.py

Base classes that detection rules build on.

Any callable `LogEntry -> bool` is accepted by AnomalyClassifier; these
classes add a name (recorded on the Anomaly) and the plugin metadata used
by rule discovery.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ...models import LogEntry


class BaseRule(ABC):
    """
    Contract that every discoverable rule must satisfy.

    Class-level attributes:
        name: unique snake_case identifier used in Anomaly.rule_name
        order: evaluation position among discovered rules (lower first)
        enabled: False for rules that should not be loaded
    """

    name: str = ""
    order: int = 100
    enabled: bool = True

    @abstractmethod
    def matches(self, entry: LogEntry) -> bool:
        """Return True if the entry is risky."""
        ...

    def __call__(self, entry: LogEntry) -> bool:
        return self.matches(entry)

    def __repr__(self) -> str:
        return f"<Rule:{self.name} enabled={self.enabled}>"


class PhraseRule(BaseRule):
    """Case-insensitive substring match of a phrase against entry.details."""

    phrase: str = ""

    def __init__(self, phrase: str | None = None, name: str | None = None) -> None:
        if phrase is not None:
            self.phrase = phrase
        if not self.phrase:
            raise ValueError("PhraseRule needs a non-empty phrase")
        if name is not None:
            self.name = name
        elif not self.name:
            self.name = "phrase:" + self.phrase.lower()
        self._needle = self.phrase.lower()

    def matches(self, entry: LogEntry) -> bool:
        return self._needle in entry.details.lower()
