"""
source/reader.py

LogSource implementations: each returns the raw audit text or raises
SourceUnavailable. No parsing happens here.

    CommandLogSource: runs the log-source command (default: wevtutil)
    FileLogSource: replays a saved text dump from disk
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol, Sequence

from ..errors import SourceUnavailable

logger = logging.getLogger(__name__)

_STDERR_PREVIEW_LEN = 200


class LogSource(Protocol):
    async def fetch(self) -> str: ...


class CommandLogSource:
    """
    Run a command as a subprocess and return its decoded stdout.

    Args:
        argv:     Command and arguments, executed without a shell.
        encoding: Codec used to decode stdout.

    If the awaiting task is cancelled (run deadline), the child
    process is killed before the cancellation propagates.
    """

    def __init__(self, argv: Sequence[str], encoding: str = "utf-8") -> None:
        if not argv:
            raise ValueError("argv must not be empty")
        self.argv = list(argv)
        self.encoding = encoding

    async def fetch(self) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise SourceUnavailable(f"cannot start {self.argv[0]!r}: {exc}") from exc

        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            proc.kill()
            await proc.wait()
            raise

        if proc.returncode != 0:
            preview = stderr.decode(self.encoding, errors="replace").strip()[:_STDERR_PREVIEW_LEN]
            raise SourceUnavailable(
                f"{self.argv[0]!r} exited with status {proc.returncode}: {preview}"
            )

        try:
            text = stdout.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise SourceUnavailable(
                f"output of {self.argv[0]!r} is not valid {self.encoding}: {exc}"
            ) from exc

        logger.debug("Read %d bytes from %r", len(stdout), self.argv[0])
        return text

    def __repr__(self) -> str:
        return f"<CommandLogSource {self.argv!r}>"


class FileLogSource:
    """Read a previously captured text dump, e.g. `wevtutil ... > dump.txt`."""

    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        self.path = Path(path)
        self.encoding = encoding

    async def fetch(self) -> str:
        try:
            return await asyncio.to_thread(self.path.read_text, encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceUnavailable(f"cannot read {str(self.path)!r}: {exc}") from exc

    def __repr__(self) -> str:
        return f"<FileLogSource {str(self.path)!r}>"
