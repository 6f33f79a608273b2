"""Supervise the ``log stream`` child that reports camera power events."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from typing import Optional

from ..errors import LogStreamError
from ..runtime.cancellation import ShutdownToken

logger = logging.getLogger(__name__)

LOG_PREDICATE = (
    'subsystem == "com.apple.UVCExtension" and composedMessage contains "Post PowerLog"'
)
DEFAULT_LOG_COMMAND: tuple[str, ...] = ("log", "stream", "--predicate", LOG_PREDICATE)

STREAM_LINE_LIMIT = 1024 * 1024
TERMINATE_TIMEOUT_SEC = 2.0


class LogStream:
    """One spawned log-streaming child and its stdout.

    ``lines`` always terminates and reaps the child on the way out, whether the
    stream hit EOF, failed to read, or was cancelled.
    """

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        *,
        terminate_timeout: float = TERMINATE_TIMEOUT_SEC,
    ) -> None:
        self._process = process
        self._terminate_timeout = terminate_timeout

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> Optional[int]:
        return self._process.returncode

    @property
    def running(self) -> bool:
        return self._process.returncode is None

    async def lines(self, token: ShutdownToken) -> AsyncIterator[str]:
        stdout = self._process.stdout
        if stdout is None:
            raise LogStreamError("log stream was spawned without a stdout pipe")

        try:
            while not token.is_set():
                raw = await self._read_line(stdout, token)
                if raw is None or token.is_set():
                    logger.debug("Cancellation requested; stopping log stream (pid %s)", self.pid)
                    break
                if not raw:
                    logger.debug("Log stream reached EOF (pid %s)", self.pid)
                    break
                yield raw.decode("utf-8", errors="replace").rstrip("\r\n")
        finally:
            await self.terminate()

    async def _read_line(self, stdout: asyncio.StreamReader, token: ShutdownToken) -> Optional[bytes]:
        """Next raw line, ``b""`` at EOF, or ``None`` if cancelled first."""

        read_task = asyncio.ensure_future(stdout.readline())
        stop_task = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({read_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (read_task, stop_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(read_task, stop_task, return_exceptions=True)

        if read_task.cancelled():
            return None
        try:
            return read_task.result()
        except (ValueError, OSError, asyncio.IncompleteReadError) as exc:
            raise LogStreamError(f"Error reading log stream: {exc}") from exc

    async def terminate(self) -> Optional[int]:
        """Ask the child to exit, escalate to SIGKILL, and reap it. Idempotent."""

        process = self._process
        if process.returncode is None:
            try:
                process.terminate()
            except ProcessLookupError:
                pass
            try:
                await asyncio.wait_for(process.wait(), timeout=self._terminate_timeout)
            except asyncio.TimeoutError:
                logger.warning("Log stream (pid %s) ignored SIGTERM; killing", process.pid)
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()
        return process.returncode


class LogStreamSupervisor:
    """Spawns log-stream children, never more than one alive at a time."""

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_LOG_COMMAND,
        *,
        terminate_timeout: float = TERMINATE_TIMEOUT_SEC,
        line_limit: int = STREAM_LINE_LIMIT,
    ) -> None:
        if not command:
            raise ValueError("log stream command must not be empty")
        self.command = tuple(command)
        self._terminate_timeout = terminate_timeout
        self._line_limit = line_limit
        self._active: LogStream | None = None
        self.spawn_count = 0

    @property
    def active(self) -> LogStream | None:
        return self._active

    async def spawn(self) -> LogStream:
        await self.shutdown()

        try:
            process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                limit=self._line_limit,
            )
        except OSError as exc:
            raise LogStreamError(f"Failed to spawn '{' '.join(self.command[:2])}': {exc}") from exc

        self.spawn_count += 1
        self._active = LogStream(process, terminate_timeout=self._terminate_timeout)
        logger.debug("Started log stream (pid %s)", process.pid)
        return self._active

    async def shutdown(self) -> None:
        stream, self._active = self._active, None
        if stream is not None:
            await stream.terminate()


__all__ = [
    "DEFAULT_LOG_COMMAND",
    "LOG_PREDICATE",
    "LogStream",
    "LogStreamSupervisor",
]
