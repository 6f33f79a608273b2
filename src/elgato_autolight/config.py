"""User settings for the camera monitor.

Settings live in ``~/.config/elgato-autolight/config.toml``::

    brightness = 25
    temperature = 4500
    light = "Desk"
    ip_address = "192.168.1.40"

Every key is optional. ``ELGATO_AUTOLIGHT_CONFIG`` points at a different file.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .runtime.env import EnvMapping, get_str

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ELGATO_AUTOLIGHT_CONFIG"
CONFIG_RELATIVE_PATH = Path(".config") / "elgato-autolight" / "config.toml"

DEFAULT_BRIGHTNESS = 10
DEFAULT_TEMPERATURE = 5000
# Range accepted by elgato-light --temperature.
MIN_TEMPERATURE = 2900
MAX_TEMPERATURE = 7000


class MonitorSettings(BaseModel):
    """Immutable settings for one monitor run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    brightness: int = Field(default=DEFAULT_BRIGHTNESS, ge=0, le=100, description="Percent")
    temperature: int = Field(
        default=DEFAULT_TEMPERATURE,
        ge=MIN_TEMPERATURE,
        le=MAX_TEMPERATURE,
        description="Colour temperature in Kelvin",
    )
    light: Optional[str] = Field(default=None, description="Light name passed as --light")
    ip_address: Optional[str] = Field(default=None, description="Address passed as --ip-address")
    verbose: bool = Field(default=False, description="Echo every raw log line")

    def with_verbose(self, verbose: bool) -> MonitorSettings:
        if verbose == self.verbose:
            return self
        return self.model_copy(update={"verbose": verbose})


def config_path(env: EnvMapping | None = None) -> Path | None:
    """Resolve the settings file location, or ``None`` without a home directory."""

    override = get_str(CONFIG_ENV_VAR, env=env)
    if override:
        return Path(override).expanduser()
    home = get_str("HOME", env=env)
    if not home:
        return None
    return Path(home) / CONFIG_RELATIVE_PATH


def settings_from_mapping(data: Mapping[str, object]) -> MonitorSettings:
    return MonitorSettings.model_validate(dict(data))


def load_settings(path: Path | None = None, *, env: EnvMapping | None = None) -> MonitorSettings:
    """Load settings, falling back to defaults on any problem.

    A missing file is normal and silent; an unreadable or invalid file is
    logged as a warning. This never raises.
    """

    if path is None:
        path = config_path(env)
    if path is None:
        return MonitorSettings()

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return MonitorSettings()
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return MonitorSettings()

    try:
        return settings_from_mapping(data)
    except ValidationError as exc:
        logger.warning("Invalid settings in %s, using defaults: %s", path, exc)
        return MonitorSettings()


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_BRIGHTNESS",
    "DEFAULT_TEMPERATURE",
    "MAX_TEMPERATURE",
    "MIN_TEMPERATURE",
    "MonitorSettings",
    "config_path",
    "load_settings",
    "settings_from_mapping",
]
