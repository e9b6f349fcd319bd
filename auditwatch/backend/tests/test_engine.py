"""
tests/test_engine.py

Tests for the AnomalyClassifier.
Verifies rule discovery, phrase matching, ordering, pluggable predicates
and error isolation.
"""

from __future__ import annotations

import pytest

from auditwatch.backend.engine.engine import DESCRIPTION_TEMPLATE, AnomalyClassifier
from auditwatch.backend.engine.rules.auth import AccountLockedRule, FailedLoginRule
from auditwatch.backend.engine.rules.base import BaseRule, PhraseRule
from auditwatch.backend.models import Anomaly, LogEntry


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def entry(details: str, id: str = "4625") -> LogEntry:
    return LogEntry(id=id, timestamp="2024-05-01T10:22:13", event_type="Logon", details=details)


class RaisingRule(BaseRule):
    name = "raising_rule"

    def matches(self, entry: LogEntry) -> bool:
        raise RuntimeError("intentional error in rule")


# ---------------------------------------------------------------------------
# Rule discovery
# ---------------------------------------------------------------------------

class TestClassifierRuleLoading:

    def test_builtin_rules_loaded_in_order(self):
        classifier = AnomalyClassifier()
        assert [r.name for r in classifier.rules] == ["failed_login", "account_locked"]

    def test_extra_phrases_appended(self):
        classifier = AnomalyClassifier(extra_phrases=["Privilege Escalation"])
        names = [r.name for r in classifier.rules]
        assert names == ["failed_login", "account_locked", "phrase:privilege escalation"]

    def test_explicit_rules_replace_builtins(self):
        classifier = AnomalyClassifier(rules=[PhraseRule("audit log cleared")])
        assert len(classifier.rules) == 1

    def test_stats_initialized(self):
        classifier = AnomalyClassifier()
        assert classifier.stats == {"entries_classified": 0, "anomalies_found": 0, "rule_errors": 0}


# ---------------------------------------------------------------------------
# classify(): default phrase set
# ---------------------------------------------------------------------------

class TestClassifyDefaultRules:

    def test_failed_login_flagged(self):
        anomalies = AnomalyClassifier().classify([entry("User reported a failed login attempt")])
        assert anomalies == [
            Anomaly(
                log_id="4625",
                description=(
                    "Potential anomaly detected in log with ID 4625: "
                    "User reported a failed login attempt"
                ),
                rule_name="failed_login",
            )
        ]

    def test_account_locked_flagged(self):
        anomalies = AnomalyClassifier().classify([entry("Account locked after 5 attempts", id="4740")])
        assert len(anomalies) == 1
        assert anomalies[0].log_id == "4740"
        assert anomalies[0].rule_name == "account_locked"

    @pytest.mark.parametrize("details", ["Failed Login", "FAILED LOGIN", "failed login", "fAiLeD lOgIn"])
    def test_case_insensitive(self, details):
        anomalies = AnomalyClassifier().classify([entry(details)])
        assert len(anomalies) == 1
        assert anomalies[0].rule_name == "failed_login"

    @pytest.mark.parametrize("details", [
        "An account was successfully logged on.",
        "failed  login",
        "login failed",
        "account unlocked",
        "",
    ])
    def test_no_false_positives(self, details):
        assert AnomalyClassifier().classify([entry(details)]) == []

    def test_phrase_in_other_fields_ignored(self):
        e = LogEntry(id="1", timestamp="failed login", event_type="account locked", details="ok")
        assert AnomalyClassifier().classify([e]) == []

    def test_at_most_one_anomaly_per_entry(self):
        anomalies = AnomalyClassifier().classify([entry("failed login, account locked")])
        assert len(anomalies) == 1
        assert anomalies[0].rule_name == "failed_login"

    def test_order_preserved(self):
        entries = [
            entry("account locked", id="a"),
            entry("benign", id="b"),
            entry("failed login", id="c"),
        ]
        anomalies = AnomalyClassifier().classify(entries)
        assert [a.log_id for a in anomalies] == ["a", "c"]

    def test_deterministic(self):
        entries = [entry("failed login", id=str(i)) for i in range(5)]
        classifier = AnomalyClassifier()
        assert classifier.classify(entries) == classifier.classify(entries)

    def test_empty_input(self):
        assert AnomalyClassifier().classify([]) == []

    def test_description_template(self):
        e = entry("failed login", id="99")
        [anomaly] = AnomalyClassifier().classify([e])
        assert anomaly.description == DESCRIPTION_TEMPLATE.format(id="99", details="failed login")

    def test_stats_updated(self):
        classifier = AnomalyClassifier()
        classifier.classify([entry("failed login"), entry("benign")])
        assert classifier.stats["entries_classified"] == 2
        assert classifier.stats["anomalies_found"] == 1


# ---------------------------------------------------------------------------
# Pluggable predicates
# ---------------------------------------------------------------------------

class TestPluggablePredicates:

    def test_plain_function_predicate(self):
        def suspicious_hour(e: LogEntry) -> bool:
            return e.timestamp.startswith("03:")

        classifier = AnomalyClassifier(rules=[suspicious_hour])
        e = LogEntry(id="1", timestamp="03:12", event_type="", details="")
        [anomaly] = classifier.classify([e])
        assert anomaly.rule_name == "suspicious_hour"

    def test_lambda_predicate(self):
        classifier = AnomalyClassifier(rules=[lambda e: e.event_type == "Logon"])
        assert len(classifier.classify([entry("x")])) == 1

    def test_first_matching_rule_names_anomaly(self):
        classifier = AnomalyClassifier(rules=[AccountLockedRule(), FailedLoginRule()])
        [anomaly] = classifier.classify([entry("failed login then account locked")])
        assert anomaly.rule_name == "account_locked"

    def test_phrase_rule_requires_phrase(self):
        with pytest.raises(ValueError):
            PhraseRule("")


# ---------------------------------------------------------------------------
# Error isolation
# ---------------------------------------------------------------------------

class TestClassifierErrorIsolation:

    def test_raising_rule_does_not_crash(self):
        classifier = AnomalyClassifier(rules=[RaisingRule()])
        assert classifier.classify([entry("failed login")]) == []
        assert classifier.stats["rule_errors"] == 1

    def test_good_rule_runs_despite_bad_rule(self):
        classifier = AnomalyClassifier(rules=[RaisingRule(), FailedLoginRule()])
        [anomaly] = classifier.classify([entry("failed login")])
        assert anomaly.rule_name == "failed_login"
