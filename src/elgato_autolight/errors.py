from __future__ import annotations


class AutolightError(RuntimeError):
    """Base class for errors surfaced to the command line."""


class StartupError(AutolightError):
    """The monitor could not start; reported before the loop is entered."""


class LightBinaryNotFoundError(StartupError):
    pass


class SignalHandlerError(StartupError):
    pass


class LogStreamError(AutolightError):
    """Spawning or reading the log stream failed. Recoverable."""


class LaunchAgentError(AutolightError):
    pass


__all__ = [
    "AutolightError",
    "LaunchAgentError",
    "LightBinaryNotFoundError",
    "LogStreamError",
    "SignalHandlerError",
    "StartupError",
]
