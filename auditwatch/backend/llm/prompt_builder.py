"""
llm/prompt_builder.py

Builds the enrichment prompt from an Anomaly.

The 'Message:' text of an audit record is attacker-influenced (user names,
workstation names, command lines), so the description is sanitized before
it is embedded:
  - Control characters and null bytes are stripped.
  - Each known injection phrase is replaced by a token; the rest of the
    description is kept so the log id and details still reach the model.
  - Length is capped.
"""

from __future__ import annotations

import hashlib
import re

from ..models import Anomaly

_MAX_DESCRIPTION_LEN = 1_000

# Injection patterns: replace match with a sanitized token
_INJECTION_RE = re.compile(
    r"ignore\s+(previous|all|prior)\s+instructions?"
    r"|you\s+are\s+(now|a)\s+"
    r"|forget\s+(everything|all|your)"
    r"|system\s*:"
    r"|assistant\s*:"
    r"|<\s*/?\s*(system|user|assistant)"
    r"|\[INST\]"
    r"|###\s*(instruction|system)",
    re.IGNORECASE,
)

PROMPT_TEMPLATE = "Provide a concise explanation for the following anomaly:\n{description}"


def _token(match: re.Match) -> str:
    span = match.group(0)
    token = f"[SANITIZED:{hashlib.md5(span.encode()).hexdigest()[:8]}]"
    return token + " " if span[-1].isspace() else token


def _sanitize_str(value: str, max_len: int = _MAX_DESCRIPTION_LEN) -> str:
    """Truncate, replace injection phrases with a token, strip control characters."""
    value = str(value)[:max_len]
    value = re.sub(r"[\x00-\x1f\x7f]", " ", value)
    value = _INJECTION_RE.sub(_token, value)
    return re.sub(r" {2,}", " ", value).strip()


def build_prompt(anomaly: Anomaly) -> str:
    """Return the single-turn completion prompt for one anomaly."""
    return PROMPT_TEMPLATE.format(description=_sanitize_str(anomaly.description))
