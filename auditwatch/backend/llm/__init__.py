from .client import CompletionClient
from .fallbacks import get_fallback
from .prompt_builder import build_prompt

__all__ = ["CompletionClient", "build_prompt", "get_fallback"]
