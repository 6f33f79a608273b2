"""Command line entry point.

    elgato-autolight start [--verbose]   run the monitor in the foreground
    elgato-autolight install [--force]   register the background LaunchAgent
    elgato-autolight uninstall|stop|restart|status
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

from . import __version__
from .adapters.launchd import LaunchAgent
from .config import config_path, load_settings
from .errors import AutolightError
from .runtime.env import get_bool, get_str
from .runtime.logging import configure_logging
from .service import run_monitor
from .status import render_status


def _start(args: argparse.Namespace) -> int:
    settings = load_settings().with_verbose(args.verbose)
    asyncio.run(run_monitor(settings))
    return 0


def _install(args: argparse.Namespace) -> int:
    agent = LaunchAgent()
    plist = agent.install(force=args.force)
    print("LaunchAgent installed and loaded.")
    print(f"  Plist: {plist}")
    print(f"  Logs:  {agent.log_dir}")
    return 0


def _uninstall(args: argparse.Namespace) -> int:
    if LaunchAgent().uninstall():
        print("LaunchAgent uninstalled.")
    else:
        print("LaunchAgent was not installed.")
    return 0


def _stop(args: argparse.Namespace) -> int:
    if LaunchAgent().stop():
        print("Service stopped.")
    else:
        print("Service is not running.")
    return 0


def _restart(args: argparse.Namespace) -> int:
    LaunchAgent().restart()
    print("Service restarted.")
    return 0


def _status(args: argparse.Namespace) -> int:
    print(render_status(LaunchAgent(), load_settings(), config_path()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="elgato-autolight",
        description="Automatically toggle Elgato lights when your Mac camera activates",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    start = commands.add_parser("start", help="Run the camera monitor in the foreground")
    start.add_argument("-v", "--verbose", action="store_true", help="Print every log stream line received")
    start.set_defaults(handler=_start)

    install = commands.add_parser("install", help="Install the LaunchAgent for automatic startup")
    install.add_argument("-f", "--force", action="store_true", help="Overwrite existing LaunchAgent")
    install.set_defaults(handler=_install)

    commands.add_parser("uninstall", help="Uninstall the LaunchAgent").set_defaults(handler=_uninstall)
    commands.add_parser("stop", help="Stop the background service").set_defaults(handler=_stop)
    commands.add_parser("restart", help="Restart the background service").set_defaults(handler=_restart)
    commands.add_parser("status", help="Show running state, config, and log paths").set_defaults(
        handler=_status
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    verbose = getattr(args, "verbose", False)
    level = "DEBUG" if verbose else get_str("LOG_LEVEL", "INFO")
    configure_logging(level, json_format=get_bool("LOG_JSON", False))

    try:
        return args.handler(args)
    except AutolightError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
