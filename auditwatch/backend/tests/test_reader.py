"""
tests/test_reader.py

Tests for source/reader.py: CommandLogSource and FileLogSource.
The command tests spawn the running Python interpreter as the child.
"""

from __future__ import annotations

import asyncio
import sys

import pytest

from auditwatch.backend.errors import SourceUnavailable
from auditwatch.backend.source.reader import CommandLogSource, FileLogSource


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


# ---------------------------------------------------------------------------
# CommandLogSource
# ---------------------------------------------------------------------------

class TestCommandLogSource:

    @pytest.mark.asyncio
    async def test_returns_stdout(self):
        source = CommandLogSource(_python("print('Event ID: 1'); print('Message: hi')"))
        text = await source.fetch()
        assert text.splitlines() == ["Event ID: 1", "Message: hi"]

    @pytest.mark.asyncio
    async def test_missing_executable_raises(self):
        source = CommandLogSource(["definitely-not-a-real-command-4625"])
        with pytest.raises(SourceUnavailable, match="cannot start"):
            await source.fetch()

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises_with_stderr(self):
        code = "import sys; sys.stderr.write('Access is denied.'); sys.exit(5)"
        source = CommandLogSource(_python(code))
        with pytest.raises(SourceUnavailable) as exc_info:
            await source.fetch()
        assert "status 5" in str(exc_info.value)
        assert "Access is denied." in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_undecodable_output_raises(self):
        code = "import sys; sys.stdout.buffer.write(b'\\xff\\xfe\\xfa')"
        source = CommandLogSource(_python(code), encoding="utf-8")
        with pytest.raises(SourceUnavailable, match="not valid utf-8"):
            await source.fetch()

    @pytest.mark.asyncio
    async def test_cancellation_kills_child(self):
        source = CommandLogSource(_python("import time; time.sleep(5)"))
        with pytest.raises(asyncio.TimeoutError):
            async with asyncio.timeout(0.5):
                await source.fetch()

    def test_empty_argv_rejected(self):
        with pytest.raises(ValueError):
            CommandLogSource([])


# ---------------------------------------------------------------------------
# FileLogSource
# ---------------------------------------------------------------------------

class TestFileLogSource:

    @pytest.mark.asyncio
    async def test_reads_file(self, tmp_path):
        dump = tmp_path / "security.txt"
        dump.write_text("Event ID: 4625\nMessage: failed login\n", encoding="utf-8")
        text = await FileLogSource(dump).fetch()
        assert "failed login" in text

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path):
        with pytest.raises(SourceUnavailable, match="cannot read"):
            await FileLogSource(tmp_path / "absent.txt").fetch()

    @pytest.mark.asyncio
    async def test_wrong_encoding_raises(self, tmp_path):
        dump = tmp_path / "security.txt"
        dump.write_bytes(b"\xff\xfe\xfa")
        with pytest.raises(SourceUnavailable):
            await FileLogSource(dump, encoding="utf-8").fetch()
