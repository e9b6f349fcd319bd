"""
engine/rules/auth.py

Authentication risk phrases found in the 'Message:' line of Security
log records.
"""

from __future__ import annotations

from .base import PhraseRule


class FailedLoginRule(PhraseRule):
    name = "failed_login"
    order = 10
    phrase = "failed login"


class AccountLockedRule(PhraseRule):
    name = "account_locked"
    order = 20
    phrase = "account locked"
