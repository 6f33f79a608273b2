"""Background service registration through a per-user LaunchAgent."""

from __future__ import annotations

import logging
import os
import plistlib
import shutil
import subprocess
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from ..errors import LaunchAgentError

logger = logging.getLogger(__name__)

LABEL = "com.wassimk.elgato-autolight"
CONSOLE_SCRIPT = "elgato-autolight"
AGENT_PATH = "/opt/homebrew/bin:/usr/local/bin:/usr/bin:/bin"
_NOT_LOADED_MARKERS = ("No such process", "Could not find service")

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def default_program_arguments() -> list[str]:
    script = shutil.which(CONSOLE_SCRIPT)
    if script:
        return [script, "start"]
    return [sys.executable, "-m", "elgato_autolight", "start"]


class LaunchAgent:
    """Install, remove and control the monitor's LaunchAgent via ``launchctl``."""

    def __init__(
        self,
        *,
        home: Path | None = None,
        uid: int | None = None,
        label: str = LABEL,
        runner: Runner = subprocess.run,
    ) -> None:
        self.home = home or Path.home()
        self.uid = os.getuid() if uid is None else uid
        self.label = label
        self._run = runner

    @property
    def plist_path(self) -> Path:
        return self.home / "Library" / "LaunchAgents" / f"{self.label}.plist"

    @property
    def log_dir(self) -> Path:
        return self.home / "Library" / "Logs" / "elgato-autolight"

    @property
    def domain(self) -> str:
        return f"gui/{self.uid}"

    @property
    def service_target(self) -> str:
        return f"{self.domain}/{self.label}"

    def is_installed(self) -> bool:
        return self.plist_path.exists()

    def is_loaded(self) -> bool:
        return self._launchctl("list", self.label).returncode == 0

    def render_plist(self, program_arguments: Sequence[str]) -> bytes:
        return plistlib.dumps(
            {
                "Label": self.label,
                "ProgramArguments": list(program_arguments),
                "KeepAlive": True,
                "StandardOutPath": str(self.log_dir / "stdout.log"),
                "StandardErrorPath": str(self.log_dir / "stderr.log"),
                "EnvironmentVariables": {"PATH": AGENT_PATH},
            }
        )

    def install(self, *, force: bool = False, program_arguments: Sequence[str] | None = None) -> Path:
        plist = self.plist_path
        if plist.exists():
            if not force:
                raise LaunchAgentError(
                    f"LaunchAgent already installed at {plist}\nUse --force to overwrite."
                )
            self._launchctl("bootout", self.service_target)

        args = list(program_arguments) if program_arguments else default_program_arguments()
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            plist.parent.mkdir(parents=True, exist_ok=True)
            plist.write_bytes(self.render_plist(args))
        except OSError as exc:
            raise LaunchAgentError(f"Failed to write plist to {plist}: {exc}") from exc

        result = self._launchctl("bootstrap", self.domain, str(plist))
        if result.returncode != 0:
            raise LaunchAgentError(f"launchctl bootstrap failed: {result.stderr.strip()}")
        logger.debug("Bootstrapped %s from %s", self.label, plist)
        return plist

    def uninstall(self) -> bool:
        """Unload and delete the agent; ``False`` if it was not installed."""

        self._launchctl("bootout", self.service_target)
        plist = self.plist_path
        if not plist.exists():
            return False
        try:
            plist.unlink()
        except OSError as exc:
            raise LaunchAgentError(f"Failed to remove {plist}: {exc}") from exc
        return True

    def stop(self) -> bool:
        """Unload the running agent; ``False`` if it was not running."""

        result = self._launchctl("bootout", self.service_target)
        if result.returncode == 0:
            return True
        stderr = result.stderr or ""
        if any(marker in stderr for marker in _NOT_LOADED_MARKERS):
            return False
        raise LaunchAgentError(f"Failed to stop service: {stderr.strip()}")

    def restart(self) -> None:
        result = self._launchctl("kickstart", "-k", self.service_target)
        if result.returncode != 0:
            raise LaunchAgentError(f"Failed to restart service: {result.stderr.strip()}")

    def _launchctl(self, *args: str) -> "subprocess.CompletedProcess[str]":
        cmd = ["launchctl", *args]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            return self._run(cmd, capture_output=True, text=True, timeout=15)
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise LaunchAgentError(f"Failed to run launchctl {args[0]}: {exc}") from exc


__all__ = ["LABEL", "LaunchAgent", "default_program_arguments"]
