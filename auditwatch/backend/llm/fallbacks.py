"""
llm/fallbacks.py

Static recommended actions attached to alerts whose enrichment failed
or was skipped: one per built-in rule.

The alert's summary on that path is the raw anomaly description; this
advice is appended so the operator still gets a next step.
"""

from __future__ import annotations

_DEFAULT = (
    "Automated explanation unavailable. Review the event in Event Viewer "
    "and confirm whether the activity was expected."
)

RULE_FALLBACKS: dict[str, str] = {
    "failed_login": (
        "Automated explanation unavailable. Check the target account and "
        "source workstation for repeated failed logons and consider "
        "resetting the password if the attempts were not made by its owner."
    ),
    "account_locked": (
        "Automated explanation unavailable. Confirm with the account owner "
        "before unlocking, and look for a burst of failed logons preceding "
        "the lockout."
    ),
}


def get_fallback(rule_name: str) -> str:
    """Return the static advice for rule_name, or the generic default."""
    return RULE_FALLBACKS.get(rule_name, _DEFAULT)
