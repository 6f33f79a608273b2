"""Camera monitor: log lines in, light commands out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import aclosing
from enum import Enum
from pathlib import Path

from .adapters.light_cli import LightCommandDispatcher, locate_light_binary
from .adapters.log_stream import LogStreamSupervisor
from .config import MonitorSettings
from .domain.events import CameraEvent, LightState, classify
from .domain.ports import LineSource
from .errors import LogStreamError
from .runtime.cancellation import ShutdownToken, install_signal_handlers, remove_signal_handlers

RESTART_DELAY_SEC = 2.0

_TRANSITION_MESSAGES = {
    LightState.ON: "Camera ON - turning light on",
    LightState.OFF: "Camera OFF - turning light off",
}


class MonitorState(str, Enum):
    RUNNING = "running"
    BETWEEN_ATTEMPTS = "between_attempts"
    SHUTTING_DOWN = "shutting_down"


class MonitorLoop:
    """Feed every log line through the classifier and dispatch light changes.

    Each attempt spawns one stream from ``source``. When a stream ends or fails
    without cancellation the loop sleeps ``restart_delay`` (interruptibly) and
    spawns again. Only cancellation ends ``run``.
    """

    def __init__(
        self,
        settings: MonitorSettings,
        source: LineSource,
        dispatcher: LightCommandDispatcher,
        token: ShutdownToken,
        *,
        restart_delay: float = RESTART_DELAY_SEC,
        classifier: Callable[[str], CameraEvent] = classify,
    ) -> None:
        self.settings = settings
        self.source = source
        self.dispatcher = dispatcher
        self.token = token
        self.restart_delay = restart_delay
        self.classifier = classifier
        self.log = logging.getLogger("elgato-autolight")
        self.state = MonitorState.RUNNING
        self.attempts = 0

    async def run(self) -> None:
        self.log.info("Monitoring camera events...")
        try:
            while not self.token.is_set():
                self.state = MonitorState.RUNNING
                await self._stream_once()
                if self.token.is_set():
                    break

                self.state = MonitorState.BETWEEN_ATTEMPTS
                self.log.warning("Log stream ended, restarting in %.0fs...", self.restart_delay)
                if await self.token.wait(self.restart_delay):
                    break
        finally:
            self.state = MonitorState.SHUTTING_DOWN
        self.log.info("Shutting down.")

    async def _stream_once(self) -> None:
        self.attempts += 1
        try:
            stream = await self.source.spawn()
        except LogStreamError as exc:
            self.log.error("Failed to start log stream: %s", exc)
            return

        try:
            async with aclosing(stream.lines(self.token)) as lines:
                async for line in lines:
                    if self.token.is_set():
                        break
                    await self.handle_line(line)
        except LogStreamError as exc:
            self.log.error("%s", exc)
        finally:
            await stream.terminate()

    async def handle_line(self, line: str) -> CameraEvent:
        if self.settings.verbose:
            self.log.info("[log] %s", line)

        event = self.classifier(line)
        state = event.light_state
        if state is not None:
            self.log.info(_TRANSITION_MESSAGES[state])
            await self.dispatcher.apply(state, self.settings)
        return event


async def run_monitor(
    settings: MonitorSettings,
    *,
    token: ShutdownToken | None = None,
    source: LineSource | None = None,
    locate: Callable[[], Path] = locate_light_binary,
) -> None:
    """Start-up checks, then run the loop until SIGINT/SIGTERM.

    Raises ``StartupError`` if the light binary is missing or signal handlers
    cannot be installed; nothing after that point propagates.
    """

    log = logging.getLogger("elgato-autolight")
    binary = locate()
    log.info("Using elgato-light at: %s", binary)
    log.info("Settings: brightness=%s%%, temperature=%sK", settings.brightness, settings.temperature)

    if token is None:
        token = ShutdownToken()
    installed = install_signal_handlers(token)
    owned = LogStreamSupervisor() if source is None else None
    loop = MonitorLoop(settings, source or owned, LightCommandDispatcher(binary), token)
    try:
        await loop.run()
    finally:
        if owned is not None:
            await owned.shutdown()
        remove_signal_handlers(installed, loop=asyncio.get_running_loop())


__all__ = ["MonitorLoop", "MonitorState", "RESTART_DELAY_SEC", "run_monitor"]
