"""Cooperative shutdown shared by the monitor loop and its subprocesses."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Iterable

from ..errors import SignalHandlerError

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class ShutdownToken:
    """Write-once "stop requested" latch.

    ``is_set`` never blocks, so it can be checked between every line read.
    ``wait`` doubles as the interruptible sleep used between stream attempts.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    def is_set(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def set(self, reason: str | None = None) -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    async def wait(self, timeout: float | None = None) -> bool:
        """Wait for cancellation; ``True`` if requested, ``False`` on timeout."""

        # wait_for(timeout=0) times out before the event is ever checked.
        if self._event.is_set():
            return True
        if timeout is None:
            await self._event.wait()
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True


def install_signal_handlers(
    token: ShutdownToken,
    *,
    loop: asyncio.AbstractEventLoop | None = None,
    signals: Iterable[signal.Signals] = SHUTDOWN_SIGNALS,
) -> list[signal.Signals]:
    """Set ``token`` when any of ``signals`` is delivered.

    Must be called from the main thread with a running loop.
    """

    loop = loop or asyncio.get_running_loop()
    installed: list[signal.Signals] = []

    def _handle(sig: signal.Signals) -> None:
        logger.info("Received %s; stopping", sig.name)
        token.set(sig.name)

    for sig in signals:
        try:
            loop.add_signal_handler(sig, _handle, sig)
        except (NotImplementedError, RuntimeError, ValueError) as exc:
            remove_signal_handlers(installed, loop=loop)
            raise SignalHandlerError(f"Failed to set signal handler for {sig.name}: {exc}") from exc
        installed.append(sig)
    return installed


def remove_signal_handlers(
    signals: Iterable[signal.Signals],
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> None:
    loop = loop or asyncio.get_running_loop()
    for sig in signals:
        loop.remove_signal_handler(sig)


__all__ = [
    "SHUTDOWN_SIGNALS",
    "ShutdownToken",
    "install_signal_handlers",
    "remove_signal_handlers",
]
