"""StdioServer — serves newline-delimited JSON-RPC over stdin/stdout.

Every framed line is handed to the dispatcher in its own task, so a slow
upstream call never holds back later lines.  Responses are written as their
tasks complete; callers correlate them by ``id``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import stat
import sys
from typing import TYPE_CHECKING, BinaryIO, TextIO

from perplexity_insight.server.framer import LineFramer

if TYPE_CHECKING:
    from perplexity_insight.server.dispatcher import MessageDispatcher
    from perplexity_insight.server.models import JsonRpcResponse

logger = logging.getLogger(__name__)


class StdioServer:
    """Reads requests from *reader* and writes responses to *output*.

    When *reader* is omitted, the process's stdin is attached as an asyncio
    stream on :meth:`serve`: pipes and terminals through the event loop, a
    redirected regular file by reading it in a worker thread.  *output*
    defaults to ``sys.stdout``.
    """

    def __init__(
        self,
        dispatcher: MessageDispatcher,
        *,
        reader: asyncio.StreamReader | None = None,
        output: TextIO | None = None,
        framer: LineFramer | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._reader = reader
        self._output = output or sys.stdout
        self._framer = framer or LineFramer()
        self._tasks: set[asyncio.Task[None]] = set()
        self._feeder: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        """Number of lines still being handled."""
        return len(self._tasks)

    async def serve(self) -> None:
        """Run until the input stream closes and in-flight lines finish."""
        reader = self._reader or await self._attach_stdin()
        logger.info("Perplexity MCP Server running on stdio")

        async for line in self._framer.iter_lines(reader):
            task = asyncio.create_task(self._process(line))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        logger.info("Input closed; waiting for %d in-flight request(s)", len(self._tasks))
        if self._tasks:
            await asyncio.gather(*self._tasks)
        if self._feeder is not None:
            await self._feeder

    async def _process(self, line: str) -> None:
        try:
            response = await self._dispatcher.handle(line)
            if response is not None:
                self._write(response)
        except Exception:
            logger.exception("Error processing message")

    def _write(self, response: JsonRpcResponse) -> None:
        self._output.write(json.dumps(response.to_wire()) + "\n")
        self._output.flush()

    async def _attach_stdin(self) -> asyncio.StreamReader:
        reader = asyncio.StreamReader()
        if _is_regular_file(sys.stdin):
            # connect_read_pipe refuses regular files (`serve < requests.jsonl`).
            self._feeder = asyncio.create_task(_feed_from_file(reader, sys.stdin.buffer))
            return reader

        loop = asyncio.get_running_loop()
        protocol = asyncio.StreamReaderProtocol(reader)
        await loop.connect_read_pipe(lambda: protocol, sys.stdin)
        return reader


def _is_regular_file(stream: TextIO) -> bool:
    try:
        return stat.S_ISREG(os.fstat(stream.fileno()).st_mode)
    except (OSError, ValueError):
        return False


async def _feed_from_file(
    reader: asyncio.StreamReader,
    source: BinaryIO,
    chunk_size: int = 65_536,
) -> None:
    """Copy *source* into *reader* without blocking the event loop, then signal EOF."""
    loop = asyncio.get_running_loop()
    try:
        while True:
            chunk = await loop.run_in_executor(None, source.read, chunk_size)
            if not chunk:
                break
            reader.feed_data(chunk)
    finally:
        reader.feed_eof()


