"""
llm/validator.py

Extracts the completion text from a decoded completions-API response.

Expected shape:
    {"choices": [{"text": "...", "index": 0, ...}], ...}

Anything else raises EnrichmentFailure: a non-dict body, missing or empty
choices, a choice without text, or whitespace-only text.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import EnrichmentFailure

logger = logging.getLogger(__name__)

_MAX_SUMMARY_LEN = 1_000


def extract_completion_text(data: Any) -> str:
    """Return the trimmed text of the first choice."""
    if not isinstance(data, dict):
        raise EnrichmentFailure(f"response is not a JSON object: {type(data).__name__}")

    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        raise EnrichmentFailure("response has no choices")

    first = choices[0]
    if not isinstance(first, dict):
        raise EnrichmentFailure("first choice is not a JSON object")

    text = first.get("text")
    if not isinstance(text, str):
        raise EnrichmentFailure("first choice has no text")

    text = text.strip()
    if not text:
        raise EnrichmentFailure("completion text is empty")

    if first.get("finish_reason") == "length":
        logger.debug("Completion truncated at max_tokens")

    return text[:_MAX_SUMMARY_LEN]
