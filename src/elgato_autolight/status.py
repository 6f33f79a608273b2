from __future__ import annotations

from pathlib import Path

from .adapters.launchd import LaunchAgent
from .config import MonitorSettings


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def render_status(agent: LaunchAgent, settings: MonitorSettings, config_file: Path | None) -> str:
    """Human-readable summary printed by ``elgato-autolight status``."""

    lines = [
        f"Service:     {agent.label}",
        f"Installed:   {_yes_no(agent.is_installed())}",
        f"Running:     {_yes_no(agent.is_loaded())}",
        "",
        "Config:",
        f"  Brightness:   {settings.brightness}%",
        f"  Temperature:  {settings.temperature}K",
    ]
    if settings.light:
        lines.append(f"  Light:        {settings.light}")
    if settings.ip_address:
        lines.append(f"  IP Address:   {settings.ip_address}")
    lines += [
        "",
        "Paths:",
        f"  Config: {config_file if config_file is not None else 'N/A'}",
        f"  Plist:  {agent.plist_path}",
        f"  Logs:   {agent.log_dir}",
    ]
    return "\n".join(lines)
