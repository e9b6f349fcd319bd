"""notify/__init__.py"""
from .base import AlertSink
from .console import ConsoleSink
from .webhook import WebhookSink

__all__ = ["AlertSink", "ConsoleSink", "WebhookSink"]
