"""LineFramer — newline-delimited framing over an arbitrarily chunked stream."""

from __future__ import annotations

import codecs
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import asyncio
    from collections.abc import AsyncIterator


class LineFramer:
    """Turns chunks of text or bytes into complete, non-blank lines.

    The trailing fragment of every chunk is carried over until a later chunk
    completes it.  There is no maximum line length: input that never contains
    a newline keeps growing the buffer.

    Usage::

        framer = LineFramer()
        framer.feed(b'{"id": 1, "meth')     # []
        framer.feed(b'od": "tools/list"}\\n')  # ['{"id": 1, "method": "tools/list"}']
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def buffer(self) -> str:
        """The incomplete fragment waiting for its newline."""
        return self._buffer

    def feed(self, chunk: str | bytes) -> list[str]:
        """Append *chunk* and return every line it completes."""
        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        if not text:
            return []
        parts = (self._buffer + text).split("\n")
        self._buffer = parts.pop()
        return [line for line in parts if line.strip()]

    def flush(self) -> list[str]:
        """Return the final unterminated line (if any) at end of input."""
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return [tail] if tail.strip() else []

    async def iter_lines(
        self,
        reader: asyncio.StreamReader,
        chunk_size: int = 65_536,
    ) -> AsyncIterator[str]:
        """Yield complete lines read from *reader* until EOF."""
        while True:
            chunk = await reader.read(chunk_size)
            if not chunk:
                break
            for line in self.feed(chunk):
                yield line
        for line in self.flush():
            yield line
