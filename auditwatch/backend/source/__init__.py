"""
source/__init__.py

Public API for the source sub-package.
"""

from .parser import parse_event_log
from .reader import CommandLogSource, FileLogSource, LogSource

__all__ = ["CommandLogSource", "FileLogSource", "LogSource", "parse_event_log"]
