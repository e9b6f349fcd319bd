"""
notify/console.py

Prints alerts to a text stream (stdout by default), coloured by title.
"""

from __future__ import annotations

import sys
from typing import TextIO

from ..errors import NotificationFailure
from .base import AlertSink

_ANSI = {
    "ANOMALY": "\033[93m",
    "CLEAN":   "\033[92m",
    "RESET":   "\033[0m",
}


class ConsoleSink(AlertSink):
    name = "console"

    def __init__(
        self,
        app_id: str = "Windows Security Audit",
        stream: TextIO | None = None,
        colour: bool | None = None,
    ) -> None:
        self.app_id = app_id
        self.stream = stream or sys.stdout
        if colour is None:
            colour = hasattr(self.stream, "isatty") and self.stream.isatty()
        self.colour = colour

    def _colour(self, key: str, text: str) -> str:
        if not self.colour:
            return text
        return f"{_ANSI[key]}{text}{_ANSI['RESET']}"

    async def notify(self, title: str, message: str) -> None:
        key = "ANOMALY" if "anomaly" in title.lower() else "CLEAN"
        header = self._colour(key, f"[{self.app_id}] {title}")
        body = message.replace("\n", "\n  ")
        try:
            print(
                f"\n{header}\n  {body}\n",
                file=self.stream,
                flush=True,
            )
        except (OSError, ValueError) as exc:
            raise NotificationFailure(f"console write failed: {exc}") from exc
