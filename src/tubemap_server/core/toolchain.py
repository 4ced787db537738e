"""Asyncio wrapper around the ``vg`` command-line toolchain.

Implements the ``GraphToolchain`` protocol. Every spawned process is killed
and reaped if the awaiting coroutine is cancelled or fails, so a request
timeout never leaves orphaned ``vg`` processes behind.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shutil
from asyncio.subprocess import DEVNULL, PIPE, Process
from collections.abc import Sequence

from tubemap_server.errors import ConversionError, ExtractionError, ToolInvocationError

logger = logging.getLogger(__name__)

_READ_SIZE = 64 * 1024


async def _terminate(process: Process) -> None:
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()


async def _read_all(stream: asyncio.StreamReader) -> bytes:
    chunks: list[bytes] = []
    while chunk := await stream.read(_READ_SIZE):
        chunks.append(chunk)
    return b"".join(chunks)


async def _drain_stderr(stream: asyncio.StreamReader, request_id: str, label: str) -> str:
    chunks: list[str] = []
    while chunk := await stream.read(_READ_SIZE):
        text = chunk.decode(errors="replace")
        logger.debug("[%s] %s stderr: %s", request_id, label, text.rstrip())
        chunks.append(text)
    return "".join(chunks)


async def _pump(producer: Process, sink: asyncio.StreamWriter, request_id: str) -> None:
    """Forward producer stdout into ``sink`` in arrival order, then close it."""
    assert producer.stdout is not None
    source = producer.stdout
    try:
        while chunk := await source.read(_READ_SIZE):
            sink.write(chunk)
            await sink.drain()
    except (BrokenPipeError, ConnectionResetError):
        # Consumer went away; keep draining so the producer can exit.
        logger.debug("[%s] Consumer closed its input early", request_id)
        while await source.read(_READ_SIZE):
            pass
    await producer.wait()
    sink.close()
    with contextlib.suppress(BrokenPipeError, ConnectionResetError):
        await sink.wait_closed()


def _label(args: Sequence[str]) -> str:
    return f"vg {args[0]}" if args else "vg"


class VgToolchain:
    def __init__(self, executable: str) -> None:
        self.executable = executable

    def available(self) -> bool:
        return shutil.which(self.executable) is not None

    async def _spawn(
        self,
        args: Sequence[str],
        stdin: int,
        request_id: str,
        error: type[ToolInvocationError],
    ) -> Process:
        logger.debug("[%s] Spawning %s %s", request_id, self.executable, " ".join(args))
        try:
            return await asyncio.create_subprocess_exec(self.executable, *args, stdin=stdin, stdout=PIPE, stderr=PIPE)
        except OSError as exc:
            raise error(f"Cannot start {self.executable}: {exc}") from exc

    @staticmethod
    def _check(
        process: Process,
        args: Sequence[str],
        stderr: str,
        request_id: str,
        error: type[ToolInvocationError],
    ) -> None:
        label = _label(args)
        logger.info("[%s] %s exited with code %s", request_id, label, process.returncode)
        if process.returncode != 0:
            logger.warning("[%s] %s failed: %s", request_id, label, stderr.strip())
            raise error(
                f"{label} exited with code {process.returncode}",
                returncode=process.returncode,
                stderr=stderr,
            )

    async def run(
        self,
        args: Sequence[str],
        *,
        request_id: str = "-",
        error: type[ToolInvocationError] = ToolInvocationError,
    ) -> bytes:
        """Run one invocation to completion and return its stdout."""
        process = await self._spawn(args, DEVNULL, request_id, error)
        assert process.stdout is not None
        assert process.stderr is not None
        try:
            stdout, stderr = await asyncio.gather(
                _read_all(process.stdout),
                _drain_stderr(process.stderr, request_id, _label(args)),
            )
            await process.wait()
        except BaseException:
            await _terminate(process)
            raise
        self._check(process, args, stderr, request_id, error)
        return stdout

    async def pipe(
        self,
        producer_args: Sequence[str],
        consumer_args: Sequence[str],
        *,
        request_id: str = "-",
    ) -> bytes:
        """Run ``producer | consumer`` and return the consumer's stdout.

        The producer failing raises ``ExtractionError``; the consumer failing
        raises ``ConversionError``.
        """
        producer = await self._spawn(producer_args, DEVNULL, request_id, ExtractionError)
        try:
            consumer = await self._spawn(consumer_args, PIPE, request_id, ConversionError)
        except BaseException:
            await _terminate(producer)
            raise

        assert producer.stderr is not None
        assert consumer.stdin is not None
        assert consumer.stdout is not None
        assert consumer.stderr is not None
        try:
            _, output, producer_err, consumer_err = await asyncio.gather(
                _pump(producer, consumer.stdin, request_id),
                _read_all(consumer.stdout),
                _drain_stderr(producer.stderr, request_id, _label(producer_args)),
                _drain_stderr(consumer.stderr, request_id, _label(consumer_args)),
            )
            await consumer.wait()
        except BaseException:
            await _terminate(producer)
            await _terminate(consumer)
            raise

        self._check(producer, producer_args, producer_err, request_id, ExtractionError)
        self._check(consumer, consumer_args, consumer_err, request_id, ConversionError)
        return output
