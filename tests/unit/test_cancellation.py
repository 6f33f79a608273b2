from __future__ import annotations

import asyncio
import os
import signal
from unittest.mock import MagicMock

import pytest

from elgato_autolight.errors import SignalHandlerError
from elgato_autolight.runtime.cancellation import (
    ShutdownToken,
    install_signal_handlers,
    remove_signal_handlers,
)


@pytest.mark.asyncio
async def test_wait_times_out_when_not_cancelled() -> None:
    token = ShutdownToken()
    assert await token.wait(0.01) is False
    assert token.is_set() is False


@pytest.mark.asyncio
async def test_wait_returns_as_soon_as_token_is_set() -> None:
    token = ShutdownToken()
    asyncio.get_running_loop().call_later(0.01, token.set, "test")

    cancelled = await asyncio.wait_for(token.wait(30.0), timeout=5.0)

    assert cancelled is True
    assert token.reason == "test"


@pytest.mark.asyncio
async def test_token_is_a_write_once_latch() -> None:
    token = ShutdownToken()
    token.set("SIGTERM")
    token.set("SIGINT")

    assert token.is_set() is True
    assert token.reason == "SIGTERM"
    assert await token.wait(0) is True
    assert await token.wait() is True


@pytest.mark.asyncio
async def test_zero_timeout_wait_reports_current_state() -> None:
    token = ShutdownToken()
    assert await token.wait(0) is False

    token.set("SIGTERM")

    assert await token.wait(0) is True
    assert await token.wait(0.0) is True


@pytest.mark.asyncio
async def test_signal_sets_token() -> None:
    token = ShutdownToken()
    installed = install_signal_handlers(token, signals=(signal.SIGUSR1,))
    try:
        os.kill(os.getpid(), signal.SIGUSR1)
        assert await token.wait(5.0) is True
        assert token.reason == "SIGUSR1"
    finally:
        remove_signal_handlers(installed)


def test_install_failure_raises_startup_error() -> None:
    loop = MagicMock()
    loop.add_signal_handler.side_effect = [None, NotImplementedError()]

    with pytest.raises(SignalHandlerError, match="SIGTERM"):
        install_signal_handlers(ShutdownToken(), loop=loop)

    loop.remove_signal_handler.assert_called_once_with(signal.SIGINT)
