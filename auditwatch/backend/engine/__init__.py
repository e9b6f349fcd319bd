"""engine/__init__.py"""
from .engine import AnomalyClassifier, Predicate
from .rules.base import BaseRule, PhraseRule

__all__ = ["AnomalyClassifier", "BaseRule", "PhraseRule", "Predicate"]
