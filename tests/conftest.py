"""Shared pytest fixtures for elgato-autolight tests."""

from __future__ import annotations

import logging
import sys
from typing import Iterator

import pytest

from elgato_autolight.config import MonitorSettings


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """configure_logging() replaces root handlers; put pytest's back afterwards."""

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def desk_settings() -> MonitorSettings:
    return MonitorSettings(brightness=50, temperature=4500, light="Desk")


@pytest.fixture
def python_command():
    """Build a child-process command running an inline Python snippet."""

    def _build(source: str) -> list[str]:
        return [sys.executable, "-u", "-c", source]

    return _build
