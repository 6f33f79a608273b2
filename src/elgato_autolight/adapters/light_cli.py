"""Drive the external ``elgato-light`` program."""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..config import MonitorSettings
from ..domain.events import LightState
from ..errors import LightBinaryNotFoundError

logger = logging.getLogger(__name__)

LIGHT_BINARY_NAME = "elgato-light"
FALLBACK_LOCATIONS: tuple[Path, ...] = (
    Path("/opt/homebrew/bin") / LIGHT_BINARY_NAME,
    Path("/usr/local/bin") / LIGHT_BINARY_NAME,
)
INSTALL_HINT = "Install it with: brew install wassimk/tap/elgato-light"


def locate_light_binary(
    *,
    search_path: str | None = None,
    fallbacks: Iterable[Path] = FALLBACK_LOCATIONS,
) -> Path:
    """Find ``elgato-light`` on PATH, then in the Homebrew prefixes."""

    found = shutil.which(LIGHT_BINARY_NAME, path=search_path)
    if found:
        return Path(found)

    fallbacks = tuple(fallbacks)
    for candidate in fallbacks:
        if candidate.exists():
            return candidate

    locations = " or ".join(str(p.parent) for p in fallbacks)
    raise LightBinaryNotFoundError(
        f"{LIGHT_BINARY_NAME} not found on PATH or in {locations}.\n{INSTALL_HINT}"
    )


def build_light_command(binary: Path, state: LightState, settings: MonitorSettings) -> list[str]:
    argv = [str(binary), state.value]
    if state is LightState.ON:
        argv += ["--brightness", str(settings.brightness)]
        argv += ["--temperature", str(settings.temperature)]
    if settings.light:
        argv += ["--light", settings.light]
    if settings.ip_address:
        argv += ["--ip-address", settings.ip_address]
    return argv


@dataclass(slots=True)
class DispatchResult:
    """Outcome of one light-control invocation."""

    state: LightState
    argv: Sequence[str] = field(default_factory=list)
    return_code: Optional[int] = None
    stderr: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.return_code == 0


class LightCommandDispatcher:
    """Run one ``elgato-light`` invocation per call and report, never raise.

    Calls are awaited to completion, so invocations never overlap. Failures are
    not retried; the next camera transition issues a fresh command.
    """

    def __init__(self, binary: Path, *, timeout_sec: float = 10.0) -> None:
        self.binary = binary
        self.timeout_sec = timeout_sec

    async def apply(self, state: LightState, settings: MonitorSettings) -> DispatchResult:
        argv = build_light_command(self.binary, state, settings)
        result = DispatchResult(state=state, argv=argv)
        logger.debug("Running: %s", " ".join(argv))

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as exc:
            result.error = str(exc)
            logger.error("Failed to run %s: %s", LIGHT_BINARY_NAME, exc)
            return result

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout_sec)
        except asyncio.TimeoutError:
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
            result.return_code = process.returncode
            result.error = f"timed out after {self.timeout_sec:.1f}s"
            logger.error("%s %s %s", LIGHT_BINARY_NAME, state.value, result.error)
            return result

        result.return_code = process.returncode
        result.stderr = (stderr or b"").decode("utf-8", errors="replace").strip()
        if process.returncode != 0:
            logger.error(
                "%s %s failed (exit %s): %s",
                LIGHT_BINARY_NAME,
                state.value,
                process.returncode,
                result.stderr,
            )
        return result


__all__ = [
    "DispatchResult",
    "FALLBACK_LOCATIONS",
    "LIGHT_BINARY_NAME",
    "LightCommandDispatcher",
    "build_light_command",
    "locate_light_binary",
]
