"""
notify/base.py

AlertSink: fire-and-forget delivery of a (title, message) pair.

Sinks raise NotificationFailure when delivery fails; the orchestrator
logs it and moves on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AlertSink(ABC):

    name: str = ""

    @abstractmethod
    async def notify(self, title: str, message: str) -> None:
        """Deliver one alert or raise NotificationFailure."""
        ...

    async def aclose(self) -> None:
        """Release any resources held by the sink."""

    def __repr__(self) -> str:
        return f"<AlertSink:{self.name}>"
